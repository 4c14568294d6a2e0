"""Work budget guard for simulation requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from edge_sim.simulator.models import SimulationParams, SimulationParamsV2

SIMULATION_BUDGET_CAP = 3_000_000
V2_SIMULATION_BUDGET_CAP = 10_000_000


@dataclass(frozen=True)
class BudgetCheck:
    allow: bool
    total_iterations: int
    cap: int
    max_trades: int
    max_simulations: int
    reason: Optional[str] = None


def _check(units_per_simulation: int, simulation_count: int, cap: int, unit_label: str) -> BudgetCheck:
    total = units_per_simulation * simulation_count
    max_units = cap // simulation_count if simulation_count > 0 else cap
    max_simulations = cap // units_per_simulation if units_per_simulation > 0 else cap
    if total <= cap:
        return BudgetCheck(True, total, cap, max_units, max_simulations)
    reason = (
        f"Simulation too large: {total:,} iterations exceeds the limit of {cap:,}. "
        f"Reduce to at most {max_units:,} {unit_label} or {max_simulations:,} simulations."
    )
    return BudgetCheck(False, total, cap, max_units, max_simulations, reason)


def check_budget_v1(params: SimulationParams, cap: int = SIMULATION_BUDGET_CAP) -> BudgetCheck:
    return _check(params.number_of_trades, params.simulation_count, cap, "trades")


def trades_per_simulation_v2(params: SimulationParamsV2) -> int:
    """Worst-case trades in one run; every day may use its full trade cap."""
    profile = params.profile
    return profile.max_trades_per_day * profile.trading_days_per_month * params.months_to_trade


def check_budget_v2(params: SimulationParamsV2, cap: int = V2_SIMULATION_BUDGET_CAP) -> BudgetCheck:
    return _check(trades_per_simulation_v2(params), params.simulation_count, cap, "trades per simulation")
