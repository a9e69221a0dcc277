"""
Config loader: YAML file -> frozen dataclass tree.

Storage paths may be overridden from environment variables
(BTL_JOURNAL_PATH, BTL_ACCOUNT_SIZES_PATH), e.g. via a .env file.
Engine thresholds live in the JSON engine config, not here.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

SIZING_MODES = ("account", "fixed_r")


@dataclass(frozen=True)
class SessionConfig:
    seed: str = "EURUSD-1"
    bar_count: int = 420
    warmup_index: int = 40
    seed_prefix: str = "BTL-"


@dataclass(frozen=True)
class PlaybackConfig:
    speed: float = 1.0
    base_interval_ms: float = 350.0
    min_interval_ms: float = 35.0


@dataclass(frozen=True)
class JournalConfig:
    path: str = "data/journal.json"
    account_sizes_path: str = "data/account_sizes.json"
    export_path: str = "backtestlab_journal.csv"


@dataclass(frozen=True)
class SizingConfig:
    mode: str = "account"            # "account" | "fixed_r"
    backtest_mode: str = "playback"
    fixed_r_amount: float = 100.0
    default_risk_pct: float = 25.0


@dataclass(frozen=True)
class AlertingConfig:
    structured_logs: bool = False


@dataclass(frozen=True)
class AppConfig:
    session: SessionConfig = SessionConfig()
    playback: PlaybackConfig = PlaybackConfig()
    journal: JournalConfig = JournalConfig()
    sizing: SizingConfig = SizingConfig()
    alerting: AlertingConfig = AlertingConfig()


def load_config(path: str | Path = "config.yaml") -> AppConfig:
    """
    Load configuration from a YAML file.

    Storage paths can be overridden from the environment:
      - BTL_JOURNAL_PATH
      - BTL_ACCOUNT_SIZES_PATH
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    return config_from_dict(raw)


def config_from_dict(raw: dict) -> AppConfig:
    """Build an AppConfig from an already-parsed mapping (``{}`` gives defaults)."""
    s_raw = raw.get("session", {})
    s_cfg = SessionConfig(
        seed=str(s_raw.get("seed", "EURUSD-1")),
        bar_count=int(s_raw.get("bar_count", 420)),
        warmup_index=int(s_raw.get("warmup_index", 40)),
        seed_prefix=str(s_raw.get("seed_prefix", "BTL-")),
    )
    if s_cfg.bar_count < 1:
        raise ValueError(f"session.bar_count must be >= 1, got {s_cfg.bar_count}")

    p_raw = raw.get("playback", {})
    p_cfg = PlaybackConfig(
        speed=float(p_raw.get("speed", 1.0)),
        base_interval_ms=float(p_raw.get("base_interval_ms", 350)),
        min_interval_ms=float(p_raw.get("min_interval_ms", 35)),
    )

    j_raw = raw.get("journal", {})
    j_cfg = JournalConfig(
        path=os.environ.get("BTL_JOURNAL_PATH") or j_raw.get("path", "data/journal.json"),
        account_sizes_path=(
            os.environ.get("BTL_ACCOUNT_SIZES_PATH")
            or j_raw.get("account_sizes_path", "data/account_sizes.json")
        ),
        export_path=j_raw.get("export_path", "backtestlab_journal.csv"),
    )

    z_raw = raw.get("sizing", {})
    z_cfg = SizingConfig(
        mode=str(z_raw.get("mode", "account")),
        backtest_mode=str(z_raw.get("backtest_mode", "playback")),
        fixed_r_amount=float(z_raw.get("fixed_r_amount", 100.0)),
        default_risk_pct=float(z_raw.get("default_risk_pct", 25.0)),
    )
    if z_cfg.mode not in SIZING_MODES:
        raise ValueError(f"sizing.mode must be one of {SIZING_MODES}, got {z_cfg.mode!r}")

    a_raw = raw.get("alerting", {})
    a_cfg = AlertingConfig(
        structured_logs=bool(a_raw.get("structured_logs", False)),
    )

    return AppConfig(
        session=s_cfg,
        playback=p_cfg,
        journal=j_cfg,
        sizing=z_cfg,
        alerting=a_cfg,
    )
