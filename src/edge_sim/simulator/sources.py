"""Edge statistics from caller-supplied trade history, used to prefill parameters."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from edge_sim.simulator.models import RiskType, SimulationParams
from edge_sim.simulator.statistics import profit_factor


@dataclass(frozen=True)
class TradeRecord:
    outcome: str
    realized_r: Optional[float] = None
    commission: int = 0
    fees: int = 0
    planned_risk: int = 0


@dataclass(frozen=True)
class SourceStats:
    source_name: str
    total_trades: int
    win_rate: float
    avg_reward_risk_ratio: float
    avg_commission_impact: float
    profit_factor: float
    avg_r: float


def _round2(value: float) -> float:
    return round(value, 2)


def summarize_trades(source_name: str, trades: Iterable[TradeRecord]) -> SourceStats:
    trades = list(trades)
    if not trades:
        raise ValueError(f"No trades found for {source_name}")

    wins = sum(1 for trade in trades if trade.outcome == "win")
    r_values = [trade.realized_r for trade in trades if trade.realized_r is not None]
    winning = [r for r in r_values if r > 0]
    losing = [-r for r in r_values if r < 0]
    avg_win_r = sum(winning) / len(winning) if winning else 1.0
    avg_loss_r = sum(losing) / len(losing) if losing else 1.0
    reward_risk = avg_win_r / avg_loss_r if avg_loss_r else 1.0

    total_cost = sum(trade.commission + trade.fees for trade in trades)
    total_risk = sum(trade.planned_risk for trade in trades)
    commission_impact = total_cost / total_risk * 100.0 if total_risk > 0 else 0.0

    factor = profit_factor(sum(winning), sum(losing))
    return SourceStats(
        source_name=source_name,
        total_trades=len(trades),
        win_rate=_round2(wins / len(trades) * 100.0),
        avg_reward_risk_ratio=_round2(reward_risk) or 1.0,
        avg_commission_impact=_round2(commission_impact),
        profit_factor=factor if math.isinf(factor) else _round2(factor),
        avg_r=_round2(sum(r_values) / len(r_values)) if r_values else 0.0,
    )


def params_from_source_stats(
    stats: SourceStats,
    initial_balance: int,
    number_of_trades: int,
    simulation_count: int,
    risk_type: RiskType = RiskType.PERCENT_OF_BALANCE,
    risk_per_trade: float = 1.0,
    ruin_threshold_percent: float = 50.0,
) -> SimulationParams:
    return SimulationParams(
        initial_balance=initial_balance,
        risk_type=risk_type,
        risk_per_trade=risk_per_trade,
        win_rate=stats.win_rate,
        reward_risk_ratio=stats.avg_reward_risk_ratio,
        number_of_trades=number_of_trades,
        commission_impact_r=stats.avg_commission_impact,
        simulation_count=simulation_count,
        ruin_threshold_percent=ruin_threshold_percent,
    )


def apply_source_stats(base: SimulationParams, stats: SourceStats) -> SimulationParams:
    """Replace the edge inputs of ``base`` with those measured on a trade source."""
    return replace(base, win_rate=stats.win_rate, reward_risk_ratio=stats.avg_reward_risk_ratio)
