"""
Engine constants: docs/config/engine.default.json, validated against
engine_config.schema.json.

A backtest mode may override part of it with ``engine.{mode}.json`` in the
same directory (e.g. ``engine.tradingview.json`` with only
``{"risk": {"min_distance": 0.0002}}``); the override is deep-merged before
validation, so a bad override fails the same way a bad default does.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema

logger = logging.getLogger("btl.config")

# ---------------------------------------------------------------------------
# Project root detection (walk up from this file to find pyproject.toml)
# ---------------------------------------------------------------------------


def _find_project_root() -> Path:
    """Walk up from this file looking for pyproject.toml.

    When installed as a package there is no pyproject.toml above the
    module; fall back to CWD.
    """
    candidate = Path(__file__).resolve().parent
    for _ in range(10):
        if (candidate / "pyproject.toml").exists():
            return candidate
        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent
    return Path.cwd()


_PROJECT_ROOT = _find_project_root()

DEFAULT_CONFIG_PATH = _PROJECT_ROOT / "docs" / "config" / "engine.default.json"
DEFAULT_SCHEMA_PATH = _PROJECT_ROOT / "docs" / "config" / "engine_config.schema.json"


# ---------------------------------------------------------------------------
# Frozen dataclass tree, mirrors engine.default.json structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RiskConfig:
    lookback: int = 14
    range_multiplier: float = 0.6
    min_distance: float = 0.0004     # floor; asset tick size is not known
    target_multiple: float = 2.0


@dataclass(frozen=True)
class BreakevenConfig:
    trigger_r: float = 1.0


@dataclass(frozen=True)
class CalendarConfig:
    """Bar counts for navigation jumps (5-minute bars)."""
    day_length: int = 288            # 24h
    session_length: int = 72         # 6h blocks
    ny_offset: int = 156             # 13:00, approx. New York open


@dataclass(frozen=True)
class EngineConfig:
    """Top-level engine configuration. All magic numbers of the position engine."""
    version: str = "1.0"
    risk: RiskConfig = RiskConfig()
    breakeven: BreakevenConfig = BreakevenConfig()
    calendar: CalendarConfig = CalendarConfig()


# ---------------------------------------------------------------------------
# Deep merge for per-mode overrides
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Copy of *base* with *overrides* merged in; nested dicts merge key by key."""
    merged = dict(base)
    for key, val in overrides.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = _deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class EngineConfigError(Exception):
    """Raised when engine config loading or validation fails."""


def _validate_schema(data: dict[str, Any], schema_path: Path) -> None:
    """Validate *data* against the JSON Schema at *schema_path*."""
    if not schema_path.exists():
        raise EngineConfigError(f"Schema file not found: {schema_path}")
    with open(schema_path) as f:
        schema = json.load(f)
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise EngineConfigError(f"Engine config validation failed: {exc.message}") from exc


def _build_config(data: dict[str, Any]) -> EngineConfig:
    """Convert a raw dict (already validated) into the frozen dataclass tree."""
    risk_raw = data["risk"]
    be_raw = data.get("breakeven", {})
    cal_raw = data.get("calendar", {})

    return EngineConfig(
        version=data["version"],
        risk=RiskConfig(
            lookback=risk_raw["lookback"],
            range_multiplier=risk_raw["range_multiplier"],
            min_distance=risk_raw["min_distance"],
            target_multiple=risk_raw.get("target_multiple", 2.0),
        ),
        breakeven=BreakevenConfig(
            trigger_r=be_raw.get("trigger_r", 1.0),
        ),
        calendar=CalendarConfig(
            day_length=cal_raw.get("day_length", 288),
            session_length=cal_raw.get("session_length", 72),
            ny_offset=cal_raw.get("ny_offset", 156),
        ),
    )


def load_engine_config(
    config_path: str | Path | None = None,
    schema_path: str | Path | None = None,
    mode: str | None = None,
) -> EngineConfig:
    """Load, merge the *mode* override if present, and validate.

    Raises EngineConfigError for a missing file, bad JSON or a schema violation.
    """
    cfg_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    sch_path = Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH

    if not cfg_path.exists():
        raise EngineConfigError(f"Engine config file not found: {cfg_path}")

    try:
        with open(cfg_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise EngineConfigError(f"Engine config is not valid JSON: {exc}") from exc

    if mode:
        override_path = cfg_path.parent / f"engine.{mode.lower()}.json"
        if override_path.exists():
            try:
                with open(override_path) as f:
                    overrides = json.load(f)
            except json.JSONDecodeError as exc:
                raise EngineConfigError(
                    f"Mode config {override_path.name} is not valid JSON: {exc}"
                ) from exc
            data = _deep_merge(data, overrides)
            logger.info("Loaded mode config: %s", override_path.name)
        else:
            logger.debug("No mode config found at %s, using defaults", override_path)

    _validate_schema(data, sch_path)

    return _build_config(data)
