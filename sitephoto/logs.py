# sitephoto/logs.py
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_DATEFMT = "(%Y-%m-%d %H:%M:%S)"
_SECRET_ENV_KEYS = ("OPENAI_API_KEY",)


class RedactSecretsFilter(logging.Filter):
    """Replace API keys found in log messages with [REDACTED]."""

    def filter(self, record: logging.LogRecord) -> bool:
        secrets = [v for v in (os.getenv(k) for k in _SECRET_ENV_KEYS) if v]
        if secrets:
            msg = record.getMessage()
            for s in secrets:
                msg = msg.replace(s, "[REDACTED]")
            record.msg, record.args = msg, None
        return True


def configure_logging(level: str | int = "INFO", log_file: str | Path | None = None) -> logging.Logger:
    """
    Configure the "sitephoto" logger: stderr handler plus an optional rotating file.
    Safe to call more than once; handlers are replaced, not duplicated.
    """
    logger = logging.getLogger("sitephoto")
    logger.setLevel(level if isinstance(level, int) else level.upper())
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)
    redact = RedactSecretsFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    console.addFilter(redact)
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        handler.setFormatter(formatter)
        handler.addFilter(redact)
        logger.addHandler(handler)

    logger.propagate = False
    return logger
