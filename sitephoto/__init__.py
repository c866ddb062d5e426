"""sitephoto: grouping, naming and scene tagging for annotated construction-site photos."""

__version__ = "0.3.0"
