"""
Configuration loaders.

App config:     reads config.yaml, resolves storage-path env vars.
Engine config:  reads engine.default.json (or override), validates against JSON Schema.
"""

from config.engine_config import (
    BreakevenConfig,
    CalendarConfig,
    EngineConfig,
    EngineConfigError,
    RiskConfig,
    load_engine_config,
)
from config.loader import (
    AlertingConfig,
    AppConfig,
    JournalConfig,
    PlaybackConfig,
    SessionConfig,
    SizingConfig,
    config_from_dict,
    load_config,
)

__all__ = [
    # App config (YAML)
    "AlertingConfig",
    "AppConfig",
    "JournalConfig",
    "PlaybackConfig",
    "SessionConfig",
    "SizingConfig",
    "config_from_dict",
    "load_config",
    # Engine config (JSON + schema)
    "BreakevenConfig",
    "CalendarConfig",
    "EngineConfig",
    "EngineConfigError",
    "RiskConfig",
    "load_engine_config",
]
