"""Parameter range checks run before any simulation work."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from edge_sim.simulator.budget import (
    SIMULATION_BUDGET_CAP,
    V2_SIMULATION_BUDGET_CAP,
    check_budget_v1,
    check_budget_v2,
)
from edge_sim.simulator.models import RiskSizing, RiskType, SimulationParams, SimulationParamsV2

MAX_MONTHS_TO_TRADE = 48


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    field: str
    message: str


class SimulationValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        super().__init__("; ".join(f"{issue.field}: {issue.message}" for issue in issues))
        self.issues = issues


def _range(issues: list[ValidationIssue], field: str, value: float, low: float, high: float) -> None:
    if not low <= value <= high:
        issues.append(ValidationIssue("out_of_range", field, f"must be between {low:g} and {high:g}, got {value:g}"))


def _positive(issues: list[ValidationIssue], field: str, value: float) -> None:
    if not value > 0:
        issues.append(ValidationIssue("not_positive", field, f"must be greater than 0, got {value:g}"))


def _at_least(issues: list[ValidationIssue], field: str, value: int, minimum: int) -> None:
    if value < minimum:
        issues.append(ValidationIssue("too_small", field, f"must be at least {minimum}, got {value}"))


def validate_params(params: SimulationParams, budget_cap: int = SIMULATION_BUDGET_CAP) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    _positive(issues, "initial_balance", params.initial_balance)
    _range(issues, "win_rate", params.win_rate, 0, 100)
    _positive(issues, "reward_risk_ratio", params.reward_risk_ratio)
    _at_least(issues, "number_of_trades", params.number_of_trades, 1)
    _at_least(issues, "simulation_count", params.simulation_count, 1)
    if params.commission_impact_r < 0:
        issues.append(ValidationIssue("negative", "commission_impact_r", "must not be negative"))
    _range(issues, "ruin_threshold_percent", params.ruin_threshold_percent, 0, 100)
    _positive(issues, "risk_per_trade", params.risk_per_trade)
    if params.risk_type == RiskType.PERCENT_OF_BALANCE and params.risk_per_trade > 100:
        issues.append(ValidationIssue("out_of_range", "risk_per_trade", "percentage risk cannot exceed 100"))

    if not issues:
        budget = check_budget_v1(params, budget_cap)
        if not budget.allow:
            issues.append(ValidationIssue("budget_exceeded", "simulation_count", budget.reason or ""))
    return issues


def validate_params_v2(
    params: SimulationParamsV2,
    budget_cap: int = V2_SIMULATION_BUDGET_CAP,
) -> list[ValidationIssue]:
    profile = params.profile
    issues: list[ValidationIssue] = []
    _positive(issues, "initial_balance", params.initial_balance)
    _at_least(issues, "simulation_count", params.simulation_count, 1)
    _range(issues, "months_to_trade", params.months_to_trade, 1, MAX_MONTHS_TO_TRADE)
    _range(issues, "ruin_threshold_percent", params.ruin_threshold_percent, 0, 100)

    _range(issues, "profile.win_rate", profile.win_rate, 0, 100)
    _range(issues, "profile.breakeven_rate", profile.breakeven_rate, 0, 100)
    if profile.win_rate + profile.breakeven_rate > 100:
        issues.append(
            ValidationIssue("out_of_range", "profile.breakeven_rate", "win rate plus breakeven rate cannot exceed 100")
        )
    _positive(issues, "profile.reward_risk_ratio", profile.reward_risk_ratio)
    if profile.risk_sizing == RiskSizing.PERCENT_OF_BALANCE:
        if profile.risk_percent is None:
            issues.append(ValidationIssue("missing", "profile.risk_percent", "required for percentage risk sizing"))
        else:
            _range(issues, "profile.risk_percent", profile.risk_percent, 0, 100)
    else:
        _positive(issues, "profile.base_risk_cents", profile.base_risk_cents)
    if profile.commission_per_trade_cents < 0:
        issues.append(ValidationIssue("negative", "profile.commission_per_trade_cents", "must not be negative"))
    for index, step in enumerate(profile.loss_recovery_steps):
        _positive(issues, f"profile.loss_recovery_steps[{index}].risk_cents", step.risk_cents)
    _range(issues, "profile.compounding_risk_percent", profile.compounding_risk_percent, 0, 100)
    _at_least(issues, "profile.max_trades_per_day", profile.max_trades_per_day, 1)
    _range(issues, "profile.trading_days_per_week", profile.trading_days_per_week, 1, 7)
    _range(issues, "profile.trading_days_per_month", profile.trading_days_per_month, 1, 31)
    for name in ("daily_loss_limit", "weekly_loss_limit", "monthly_loss_limit"):
        value: Optional[float] = getattr(profile, name)
        if value is not None:
            _positive(issues, f"profile.{name}", value)

    if not issues:
        budget = check_budget_v2(params, budget_cap)
        if not budget.allow:
            issues.append(ValidationIssue("budget_exceeded", "simulation_count", budget.reason or ""))
    return issues
