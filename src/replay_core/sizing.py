"""
Sizing policies: how much cash one R is worth.

Scoring is always in R; a sizing policy only converts R into account
currency for display (open P/L, journal totals). Two policies:

    AccountRiskSizing : cash_per_r = max(min_account, account) * risk_fraction / 100
    FixedRSizing      : cash_per_r = amount_per_r

Selected by ``sizing.mode`` in config.yaml.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from config.loader import SizingConfig

MIN_ACCOUNT_SIZE = 100.0
MIN_RISK_FRACTION = 1.0
MAX_RISK_FRACTION = 100.0


def clamp_risk_fraction(value: float) -> float:
    """Clamp a risk percentage to [1, 100]."""
    return max(MIN_RISK_FRACTION, min(MAX_RISK_FRACTION, float(value)))


class SizingPolicy(Protocol):
    def cash_per_r(self, risk_fraction: float) -> float: ...


@dataclass(frozen=True)
class AccountRiskSizing:
    """Risk a percentage of the account per trade."""

    account_size: float
    min_account: float = MIN_ACCOUNT_SIZE

    def cash_per_r(self, risk_fraction: float) -> float:
        account = max(self.min_account, self.account_size)
        return account * clamp_risk_fraction(risk_fraction) / 100.0


@dataclass(frozen=True)
class FixedRSizing:
    """Every trade risks the same cash amount, regardless of account size."""

    amount_per_r: float

    def cash_per_r(self, risk_fraction: float) -> float:
        return self.amount_per_r


def sizing_from_config(cfg: SizingConfig, account_size: float) -> SizingPolicy:
    """Build the policy named by ``cfg.mode`` ("account" | "fixed_r")."""
    if cfg.mode == "account":
        return AccountRiskSizing(account_size)
    if cfg.mode == "fixed_r":
        return FixedRSizing(cfg.fixed_r_amount)
    raise ValueError(f"Unknown sizing mode: {cfg.mode!r} (use 'account' or 'fixed_r')")
