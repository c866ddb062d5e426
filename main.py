# main.py
"""
Entry point for sitephoto

Convenience wrapper so the tool runs from a checkout without installing:

    python main.py group path/to/photos --dry-run
    python main.py activity --csv rows.csv --out activities.csv

Installed, the same CLI is available as `sitephoto`.
"""

from __future__ import annotations

from sitephoto.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
