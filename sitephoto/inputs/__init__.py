# sitephoto/inputs/__init__.py
from .settings import (
    ActivitySettings,
    AppSettings,
    GroupingSettings,
    RunSettings,
    SceneSettings,
    SettingsLoader,
    load_measure_lexicon,
    load_settings,
    parse_measure_lexicon,
    with_overrides,
)

__all__ = [
    "ActivitySettings",
    "AppSettings",
    "GroupingSettings",
    "RunSettings",
    "SceneSettings",
    "SettingsLoader",
    "load_measure_lexicon",
    "load_settings",
    "parse_measure_lexicon",
    "with_overrides",
]
