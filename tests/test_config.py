"""Tests for config loader: YAML parsing, env var resolution, error cases."""

from pathlib import Path

import pytest

from config import AppConfig, config_from_dict, load_config


def _write_yaml(path: Path, content: str) -> Path:
    path.write_text(content)
    return path


def test_load_config_basic(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BTL_JOURNAL_PATH", raising=False)
    monkeypatch.delenv("BTL_ACCOUNT_SIZES_PATH", raising=False)
    path = _write_yaml(
        tmp_path / "config.yaml",
        """
session:
  seed: GBPUSD-3
  bar_count: 600
  warmup_index: 60
playback:
  speed: 2.5
journal:
  path: j.json
  account_sizes_path: a.json
  export_path: out.csv
sizing:
  mode: fixed_r
  fixed_r_amount: 50
alerting:
  structured_logs: true
""",
    )
    cfg = load_config(path)
    assert cfg.session.seed == "GBPUSD-3"
    assert cfg.session.bar_count == 600
    assert cfg.session.warmup_index == 60
    assert cfg.session.seed_prefix == "BTL-"
    assert cfg.playback.speed == 2.5
    assert cfg.playback.base_interval_ms == 350.0
    assert cfg.journal.path == "j.json"
    assert cfg.journal.account_sizes_path == "a.json"
    assert cfg.journal.export_path == "out.csv"
    assert cfg.sizing.mode == "fixed_r"
    assert cfg.sizing.fixed_r_amount == 50.0
    assert cfg.alerting.structured_logs is True


def test_load_config_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BTL_JOURNAL_PATH", raising=False)
    monkeypatch.delenv("BTL_ACCOUNT_SIZES_PATH", raising=False)
    cfg = load_config(_write_yaml(tmp_path / "config.yaml", "session:\n  seed: X\n"))
    assert cfg.session.bar_count == 420
    assert cfg.session.warmup_index == 40
    assert cfg.playback.min_interval_ms == 35.0
    assert cfg.journal.path == "data/journal.json"
    assert cfg.sizing.mode == "account"
    assert cfg.sizing.default_risk_pct == 25.0
    assert cfg.alerting.structured_logs is False


def test_empty_file_gives_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BTL_JOURNAL_PATH", raising=False)
    monkeypatch.delenv("BTL_ACCOUNT_SIZES_PATH", raising=False)
    assert load_config(_write_yaml(tmp_path / "config.yaml", "")) == AppConfig()


def test_load_config_env_vars(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BTL_JOURNAL_PATH", "/tmp/env_journal.json")
    monkeypatch.setenv("BTL_ACCOUNT_SIZES_PATH", "/tmp/env_accounts.json")
    cfg = load_config(_write_yaml(tmp_path / "config.yaml", "journal:\n  path: file.json\n"))
    assert cfg.journal.path == "/tmp/env_journal.json"
    assert cfg.journal.account_sizes_path == "/tmp/env_accounts.json"


def test_config_from_dict_applies_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BTL_JOURNAL_PATH", "/tmp/env_journal.json")
    assert config_from_dict({}).journal.path == "/tmp/env_journal.json"


def test_missing_file() -> None:
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/config.yaml")


def test_not_a_mapping(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="YAML mapping"):
        load_config(_write_yaml(tmp_path / "config.yaml", "- just\n- a list\n"))


def test_bar_count_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="bar_count"):
        load_config(_write_yaml(tmp_path / "config.yaml", "session:\n  bar_count: 0\n"))


def test_unknown_sizing_mode(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="sizing.mode"):
        load_config(_write_yaml(tmp_path / "config.yaml", "sizing:\n  mode: martingale\n"))
