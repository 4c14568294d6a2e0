"""Daily, weekly and monthly loss limits for day-aware simulation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from edge_sim.simulator.models import LimitMode, RiskManagementProfileForSim, RiskSizing


@dataclass(frozen=True)
class PeriodLimits:
    """Loss limits resolved to cents; ``None`` means no limit."""

    daily: Optional[int] = None
    weekly: Optional[int] = None
    monthly: Optional[int] = None


def risk_unit_cents(profile: RiskManagementProfileForSim, initial_balance: int) -> int:
    """Size of 1R at the start of a run."""
    if profile.risk_sizing == RiskSizing.PERCENT_OF_BALANCE and profile.risk_percent is not None:
        return max(1, round(initial_balance * profile.risk_percent / 100.0))
    return profile.base_risk_cents


def resolve_limit(
    value: Optional[float],
    mode: LimitMode,
    initial_balance: int,
    r_unit: int,
) -> Optional[int]:
    if value is None:
        return None
    if mode == LimitMode.R_MULTIPLES:
        return round(value * r_unit)
    if mode == LimitMode.PERCENT_OF_INITIAL:
        return round(initial_balance * value / 100.0)
    return round(value)


def resolve_limits(profile: RiskManagementProfileForSim, initial_balance: int) -> PeriodLimits:
    r_unit = risk_unit_cents(profile, initial_balance)
    return PeriodLimits(
        daily=resolve_limit(profile.daily_loss_limit, profile.limit_mode, initial_balance, r_unit),
        weekly=resolve_limit(profile.weekly_loss_limit, profile.limit_mode, initial_balance, r_unit),
        monthly=resolve_limit(profile.monthly_loss_limit, profile.limit_mode, initial_balance, r_unit),
    )


class LossLimiter:
    def __init__(self, limits: PeriodLimits) -> None:
        self.limits = limits

    @staticmethod
    def remaining_loss(period_pnl: int, limit: Optional[int]) -> float:
        """Loss still allowed in the period; gains made earlier widen it."""
        if limit is None:
            return math.inf
        return limit + period_pnl

    def daily_remaining(self, day_pnl: int) -> float:
        return self.remaining_loss(day_pnl, self.limits.daily)

    def daily_reached(self, day_pnl: int) -> bool:
        return self.daily_remaining(day_pnl) <= 0

    def weekly_reached(self, week_pnl: int) -> bool:
        return self.remaining_loss(week_pnl, self.limits.weekly) <= 0

    def monthly_reached(self, month_pnl: int) -> bool:
        return self.remaining_loss(month_pnl, self.limits.monthly) <= 0

    def cap_to_daily(self, risk: int, day_pnl: int) -> int:
        remaining = self.daily_remaining(day_pnl)
        if math.isinf(remaining):
            return risk
        return min(risk, max(0, int(remaining)))

    def breaches_daily(self, day_pnl: int, risk: int) -> bool:
        return self.daily_remaining(day_pnl - risk) < 0
