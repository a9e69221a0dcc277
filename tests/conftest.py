"""Pytest fixtures: hand-built bar sequences, temp stores and a fake scheduler."""

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
from pathlib import Path

import pytest

from config.engine_config import EngineConfig
from config.loader import AppConfig, JournalConfig
from journal.store import JournalStore
from playback.controller import ReplayController
from replay_core.contracts import Bar

FIXED_NOW = datetime(2026, 3, 2, 14, 30, 0, tzinfo=timezone.utc)


def flat_bar(price: float = 1.1000, half_range: float = 0.0005) -> Bar:
    """Doji centred on *price* with a range of 2 * half_range."""
    return Bar(price, price + half_range, price - half_range, price)


class FakeScheduler:
    """Records call_later requests; tests fire them by hand."""

    class Handle:
        def __init__(self, delay: float, callback) -> None:
            self.delay = delay
            self.callback = callback
            self.cancelled = False

        def cancel(self) -> None:
            self.cancelled = True

    def __init__(self) -> None:
        self.calls: list[FakeScheduler.Handle] = []

    def call_later(self, delay: float, callback) -> "FakeScheduler.Handle":
        handle = FakeScheduler.Handle(delay, callback)
        self.calls.append(handle)
        return handle

    @property
    def pending(self) -> list["FakeScheduler.Handle"]:
        return [h for h in self.calls if not h.cancelled]

    def fire(self) -> bool:
        """Run the oldest pending callback. False when nothing is pending."""
        for handle in self.calls:
            if not handle.cancelled:
                handle.cancelled = True
                handle.callback()
                return True
        return False


@pytest.fixture
def flat_bars() -> list[Bar]:
    """Twenty identical bars: range 0.0010 around 1.1000."""
    return [flat_bar() for _ in range(20)]


@pytest.fixture
def engine_cfg() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Default app config with stores under tmp_path."""
    return replace(
        AppConfig(),
        journal=JournalConfig(
            path=str(tmp_path / "journal.json"),
            account_sizes_path=str(tmp_path / "account_sizes.json"),
            export_path=str(tmp_path / "journal.csv"),
        ),
    )


@pytest.fixture
def journal_store(app_config: AppConfig) -> JournalStore:
    return JournalStore(app_config.journal.path)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def events() -> list[tuple[str, dict]]:
    return []


@pytest.fixture
def controller(
    app_config: AppConfig,
    engine_cfg: EngineConfig,
    journal_store: JournalStore,
    scheduler: FakeScheduler,
    events: list[tuple[str, dict]],
) -> ReplayController:
    ids = count(1)
    return ReplayController(
        app_config,
        engine_cfg,
        journal_store,
        scheduler=scheduler,
        clock=lambda: FIXED_NOW,
        id_factory=lambda: f"trade-{next(ids)}",
        event_callback=lambda event, payload: events.append((event, payload)),
    )
