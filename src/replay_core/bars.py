"""
Bar synthesizer: bounded random walk of OHLC bars driven by the seeded generator.

Pure function; no I/O. Draw order per bar is fixed (drift, vol, high jitter,
low jitter, close fraction) and must not change, or saved seeds stop
replaying the same chart.
"""

from __future__ import annotations

from replay_core.contracts import Bar
from replay_core.rng import SeededRandom

BASE_PRICE = 1.0850
START_SPREAD = 0.01
DRIFT_SCALE = 0.0009
VOL_FLOOR = 0.0006
VOL_SCALE = 0.0009


def generate_bars(seed_text: str, count: int) -> tuple[Bar, ...]:
    """Generate *count* bars for *seed_text*.

    The first draw places the starting price around ``BASE_PRICE``; each bar
    then opens at the previous close.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")

    rand = SeededRandom(seed_text)
    price = BASE_PRICE + (rand.random() - 0.5) * START_SPREAD

    bars: list[Bar] = []
    for _ in range(count):
        drift = (rand.random() - 0.5) * DRIFT_SCALE
        vol = VOL_FLOOR + rand.random() * VOL_SCALE

        open_ = price
        mid = open_ + drift
        high = max(open_, mid) + rand.random() * vol
        low = min(open_, mid) - rand.random() * vol
        close = low + rand.random() * (high - low)

        bars.append(Bar(open=open_, high=high, low=low, close=close))
        price = close
    return tuple(bars)
