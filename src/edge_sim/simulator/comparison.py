"""Rank strategies by simulated robustness and suggest capital allocation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from edge_sim.simulator.engine import MonteCarloEngine
from edge_sim.simulator.ensemble import resolve_seed
from edge_sim.simulator.models import MonteCarloResult, SimulationParams
from edge_sim.simulator.sources import SourceStats, apply_source_stats

TOP_PERFORMER_PCT = 70.0
NEEDS_IMPROVEMENT_PCT = 50.0
ALLOCATION_FLOOR_PCT = 30.0


@dataclass(frozen=True)
class StrategyComparisonResult:
    strategy_name: str
    trades_count: int
    win_rate: float
    reward_risk_ratio: float
    median_final_r: float
    profitable_pct: float
    median_max_r_drawdown: float
    sharpe_ratio: float
    rank: int
    result: MonteCarloResult


@dataclass(frozen=True)
class SuggestedAllocation:
    strategy_name: str
    allocation_pct: int
    reason: str


@dataclass(frozen=True)
class ComparisonRecommendation:
    top_performers: list[str] = field(default_factory=list)
    needs_improvement: list[str] = field(default_factory=list)
    suggested_allocations: list[SuggestedAllocation] = field(default_factory=list)


@dataclass(frozen=True)
class StrategyComparison:
    results: list[StrategyComparisonResult]
    recommendations: ComparisonRecommendation
    seed: int


def _allocation_reason(profitable_pct: float) -> str:
    if profitable_pct >= 80:
        return "Excellent statistical robustness"
    if profitable_pct >= TOP_PERFORMER_PCT:
        return "Good statistical performance"
    return "Moderate reliability"


def _half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def recommend(results: Sequence[StrategyComparisonResult]) -> ComparisonRecommendation:
    top = [r.strategy_name for r in results if r.profitable_pct >= TOP_PERFORMER_PCT]
    weak = [r.strategy_name for r in results if r.profitable_pct < NEEDS_IMPROVEMENT_PCT]
    total_score = sum(max(0.0, r.profitable_pct - ALLOCATION_FLOOR_PCT) for r in results)

    allocations = []
    for r in results:
        if r.profitable_pct < NEEDS_IMPROVEMENT_PCT:
            continue
        score = max(0.0, r.profitable_pct - ALLOCATION_FLOOR_PCT)
        pct = _half_up(score / total_score * 100.0) if total_score > 0 else 0
        allocations.append(SuggestedAllocation(r.strategy_name, pct, _allocation_reason(r.profitable_pct)))
    for name in weak:
        allocations.append(SuggestedAllocation(name, 0, "Pause until improved"))

    return ComparisonRecommendation(top_performers=top, needs_improvement=weak, suggested_allocations=allocations)


def compare_strategies(
    base_params: SimulationParams,
    sources: Sequence[SourceStats],
    seed: Optional[int] = None,
    engine: Optional[MonteCarloEngine] = None,
) -> StrategyComparison:
    """Simulate every source with the same seed, then rank by profitable share of runs."""
    engine = engine or MonteCarloEngine()
    seed = resolve_seed(seed)

    unranked = []
    for stats in sources:
        if stats.total_trades == 0:
            continue
        result = engine.run(apply_source_stats(base_params, stats), seed=seed)
        unranked.append((stats, result))

    unranked.sort(key=lambda item: item[1].statistics.profitable_pct, reverse=True)
    results = [
        StrategyComparisonResult(
            strategy_name=stats.source_name,
            trades_count=stats.total_trades,
            win_rate=stats.win_rate,
            reward_risk_ratio=stats.avg_reward_risk_ratio,
            median_final_r=result.statistics.median_final_r,
            profitable_pct=result.statistics.profitable_pct,
            median_max_r_drawdown=result.statistics.median_max_r_drawdown,
            sharpe_ratio=result.statistics.sharpe_ratio,
            rank=index + 1,
            result=result,
        )
        for index, (stats, result) in enumerate(unranked)
    ]
    return StrategyComparison(results=results, recommendations=recommend(results), seed=seed)
