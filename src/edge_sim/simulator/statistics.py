"""Reduce an ensemble of run summaries into aggregate statistics.

Percentiles are nearest-rank without interpolation: after an ascending
sort, the p-th percentile is the element at index ``(p * n) // 100``
(so best case is ``floor(0.95 n)`` and worst case ``floor(0.05 n)``).
Ratios never produce NaN: a zero denominator yields 0, except profit
factor and Calmar, which yield ``inf`` when there is gain and no loss.
"""

from __future__ import annotations

import math
from functools import reduce
from typing import Iterable, Sequence

import numpy as np

from edge_sim.simulator.insights import kelly_criterion
from edge_sim.simulator.models import (
    ReturnMoments,
    SimulationParams,
    SimulationParamsV2,
    SimulationRun,
    SimulationRunV2,
    SimulationStatistics,
    SimulationStatisticsV2,
    StreakTally,
)

MONTHS_PER_YEAR = 12


def percentile_index(n: int, pct: int) -> int:
    if n <= 0:
        raise ValueError("percentile of empty sequence")
    return min(n - 1, max(0, (pct * n) // 100))


def nearest_rank(sorted_values: Sequence[float], pct: int) -> float:
    return float(sorted_values[percentile_index(len(sorted_values), pct)])


def median(sorted_values: Sequence[float]) -> float:
    n = len(sorted_values)
    if n == 0:
        return 0.0
    mid = n // 2
    if n % 2:
        return float(sorted_values[mid])
    return (float(sorted_values[mid - 1]) + float(sorted_values[mid])) / 2.0


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def sorted_array(values: Iterable[float]) -> np.ndarray:
    return np.sort(np.fromiter(values, dtype=float))


def pool_moments(moments: Iterable[ReturnMoments]) -> ReturnMoments:
    return reduce(lambda left, right: left.merge(right), moments, ReturnMoments())


def std_dev(moments: ReturnMoments) -> float:
    if moments.count == 0:
        return 0.0
    return math.sqrt(max(0.0, moments.m2 / moments.count))


def downside_deviation(moments: ReturnMoments) -> float:
    """sqrt(sum(min(0, r)^2) / N) over all returns, not only negative ones."""
    if moments.count == 0:
        return 0.0
    return math.sqrt(moments.downside_sq / moments.count)


def sharpe_ratio(moments: ReturnMoments, periods_per_year: float = 1.0) -> float:
    deviation = std_dev(moments)
    if deviation <= 0:
        return 0.0
    return moments.mean / deviation * math.sqrt(periods_per_year)


def sortino_ratio(moments: ReturnMoments, periods_per_year: float = 1.0) -> float:
    deviation = downside_deviation(moments)
    if deviation <= 0:
        return 0.0
    return moments.mean / deviation * math.sqrt(periods_per_year)


def profit_factor(gross_profit: float, gross_loss: float) -> float:
    if gross_loss > 0:
        return gross_profit / gross_loss
    return math.inf if gross_profit > 0 else 0.0


def calmar_ratio(annual_return_pct: float, max_drawdown_pct: float) -> float:
    if max_drawdown_pct > 0:
        return annual_return_pct / max_drawdown_pct
    return math.inf if annual_return_pct > 0 else 0.0


def annualized_return_percent(final_balance: float, initial_balance: float, months: int) -> float:
    if initial_balance <= 0 or months <= 0:
        return 0.0
    ratio = final_balance / initial_balance
    if ratio <= 0:
        return -100.0
    try:
        return (ratio ** (MONTHS_PER_YEAR / months) - 1.0) * 100.0
    except OverflowError:
        return math.inf


def streak_expectations(tallies: Sequence[StreakTally]) -> tuple[float, float, float, float]:
    """Mean longest win/loss streak per run, and mean length of every streak."""
    if not tallies:
        return 0.0, 0.0, 0.0, 0.0
    expected_max_win = mean([t.max_win for t in tallies])
    expected_max_loss = mean([t.max_loss for t in tallies])
    win_streaks = sum(t.win_streaks for t in tallies)
    loss_streaks = sum(t.loss_streaks for t in tallies)
    avg_win = sum(t.win_streak_trades for t in tallies) / win_streaks if win_streaks else 0.0
    avg_loss = sum(t.loss_streak_trades for t in tallies) / loss_streaks if loss_streaks else 0.0
    return expected_max_win, expected_max_loss, avg_win, avg_loss


def _fraction(count: int, total: int) -> float:
    return count / total if total else 0.0


def reduce_statistics(params: SimulationParams, runs: Sequence[SimulationRun]) -> SimulationStatistics:
    total = len(runs)
    if total == 0:
        raise ValueError("cannot reduce an empty ensemble")
    final_r = sorted_array(run.final_cumulative_r for run in runs)
    final_balance = sorted_array(run.final_balance for run in runs)
    r_drawdowns = sorted_array(run.max_r_drawdown for run in runs)
    drawdown_pcts = sorted_array(run.max_drawdown_percent for run in runs)

    pooled = pool_moments(run.returns for run in runs)
    gross_win = sum(run.gross_win_r for run in runs)
    gross_loss = sum(run.gross_loss_r for run in runs)
    max_win, max_loss, avg_win, avg_loss = streak_expectations([run.streaks for run in runs])
    kelly = kelly_criterion(params.win_rate, params.reward_risk_ratio)
    ruined_runs = sum(1 for run in runs if run.reached_ruin_threshold)
    profitable = sum(1 for run in runs if run.final_cumulative_r > 0)

    return SimulationStatistics(
        median_final_r=median(final_r),
        mean_final_r=mean(final_r),
        best_case_final_r=nearest_rank(final_r, 95),
        worst_case_final_r=nearest_rank(final_r, 5),
        median_final_balance=median(final_balance),
        mean_final_balance=mean(final_balance),
        best_case_final_balance=nearest_rank(final_balance, 95),
        worst_case_final_balance=nearest_rank(final_balance, 5),
        median_max_r_drawdown=median(r_drawdowns),
        mean_max_r_drawdown=mean(r_drawdowns),
        worst_max_r_drawdown=nearest_rank(r_drawdowns, 95),
        median_max_drawdown_percent=median(drawdown_pcts),
        worst_max_drawdown_percent=nearest_rank(drawdown_pcts, 95),
        profitable_pct=_fraction(profitable, total) * 100.0,
        sharpe_ratio=sharpe_ratio(pooled),
        sortino_ratio=sortino_ratio(pooled),
        expected_r_per_trade=pooled.mean,
        profit_factor=profit_factor(gross_win, gross_loss),
        expected_max_win_streak=max_win,
        expected_max_loss_streak=max_loss,
        avg_win_streak=avg_win,
        avg_loss_streak=avg_loss,
        kelly_full=kelly.full,
        kelly_half=kelly.half,
        kelly_quarter=kelly.quarter,
        kelly_recommendation=kelly.recommendation,
        kelly_level=kelly.level,
        ruin_probability=_fraction(ruined_runs, total),
        ruined_runs=ruined_runs,
    )


def reduce_statistics_v2(params: SimulationParamsV2, runs: Sequence[SimulationRunV2]) -> SimulationStatisticsV2:
    total = len(runs)
    if total == 0:
        raise ValueError("cannot reduce an empty ensemble")
    initial = params.initial_balance
    profile = params.profile

    pnls = sorted_array(run.total_pnl for run in runs)
    balances = sorted_array(run.final_balance for run in runs)
    returns = sorted_array(run.total_return_percent for run in runs)
    drawdown_pcts = sorted_array(run.max_drawdown_percent for run in runs)
    drawdown_rs = sorted_array(run.max_drawdown_r for run in runs)
    min_balance_pcts = sorted_array(run.min_balance / initial * 100.0 for run in runs)

    days_per_year = profile.trading_days_per_month * MONTHS_PER_YEAR
    pooled = pool_moments(run.daily_returns for run in runs)
    annual_returns = [
        annualized_return_percent(run.final_balance, initial, params.months_to_trade) for run in runs
    ]
    median_drawdown = median(drawdown_pcts)
    max_win, max_loss, avg_win, avg_loss = streak_expectations([run.streaks for run in runs])

    trading_days = sum(run.total_trading_days for run in runs)
    total_pnl = sum(run.total_pnl for run in runs)
    ruined_runs = sum(1 for run in runs if run.reached_ruin)
    ruin_probability = _fraction(ruined_runs, total)

    return SimulationStatisticsV2(
        median_pnl=median(pnls),
        mean_pnl=mean(pnls),
        best_case_pnl=nearest_rank(pnls, 95),
        worst_case_pnl=nearest_rank(pnls, 5),
        median_final_balance=median(balances),
        best_case_final_balance=nearest_rank(balances, 95),
        worst_case_final_balance=nearest_rank(balances, 5),
        median_return_percent=median(returns),
        profitable_pct=_fraction(sum(1 for run in runs if run.total_pnl > 0), total) * 100.0,
        monthly_limit_hit_pct=_fraction(sum(1 for run in runs if run.monthly_limit_hit), total) * 100.0,
        avg_trading_days=mean([run.total_trading_days for run in runs]),
        avg_trades=mean([run.total_trades for run in runs]),
        avg_days_in_loss_recovery=mean([run.days_in_loss_recovery for run in runs]),
        avg_days_in_gain_compounding=mean([run.days_in_gain_compounding for run in runs]),
        avg_days_skipped_weekly_limit=mean([run.days_skipped_weekly_limit for run in runs]),
        avg_days_skipped_monthly_limit=mean([run.days_skipped_monthly_limit for run in runs]),
        avg_days_target_hit=mean([run.days_target_hit for run in runs]),
        median_max_drawdown_percent=median_drawdown,
        worst_max_drawdown_percent=nearest_rank(drawdown_pcts, 95),
        median_max_drawdown_r=median(drawdown_rs),
        sharpe_ratio=sharpe_ratio(pooled, days_per_year),
        sortino_ratio=sortino_ratio(pooled, days_per_year),
        calmar_ratio=calmar_ratio(mean(annual_returns), median_drawdown),
        profit_factor=profit_factor(
            sum(run.gross_profit for run in runs),
            sum(run.gross_loss for run in runs),
        ),
        expected_daily_pnl=total_pnl / trading_days if trading_days else 0.0,
        expected_max_win_streak=max_win,
        expected_max_loss_streak=max_loss,
        avg_win_streak=avg_win,
        avg_loss_streak=avg_loss,
        ruin_probability=ruin_probability,
        risk_of_ruin_percent=ruin_probability * 100.0,
        median_min_balance_percent=median(min_balance_pcts),
    )
