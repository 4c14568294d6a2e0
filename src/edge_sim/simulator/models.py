"""Simulation data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional


class RiskType(str, Enum):
    PERCENT_OF_BALANCE = "percent_of_balance"
    FIXED_AMOUNT = "fixed_amount"


class RiskSizing(str, Enum):
    FIXED = "fixed"
    PERCENT_OF_BALANCE = "percent_of_balance"


class LimitMode(str, Enum):
    CURRENCY = "currency"
    R_MULTIPLES = "r_multiples"
    PERCENT_OF_INITIAL = "percent_of_initial"


class TradeOutcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"


class TradeMode(str, Enum):
    BASE = "base"
    LOSS_RECOVERY = "loss_recovery"
    GAIN_COMPOUNDING = "gain_compounding"


class DayMode(str, Enum):
    LOSS_RECOVERY = "loss_recovery"
    GAIN_COMPOUNDING = "gain_compounding"
    SKIPPED_WEEKLY_LIMIT = "skipped_weekly_limit"
    SKIPPED_MONTHLY_LIMIT = "skipped_monthly_limit"

    @property
    def is_skipped(self) -> bool:
        return self in {DayMode.SKIPPED_WEEKLY_LIMIT, DayMode.SKIPPED_MONTHLY_LIMIT}


@dataclass(frozen=True)
class ReturnMoments:
    """Count, mean and sum of squared deviations of a return series.

    Two moment sets merge exactly (Chan et al.), so an ensemble can pool
    per-trade or per-day returns without keeping the series itself.
    """

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0
    downside_sq: float = 0.0

    def add(self, value: float) -> "ReturnMoments":
        count = self.count + 1
        delta = value - self.mean
        mean = self.mean + delta / count
        m2 = self.m2 + delta * (value - mean)
        downside = self.downside_sq + (value * value if value < 0 else 0.0)
        return ReturnMoments(count, mean, m2, downside)

    def merge(self, other: "ReturnMoments") -> "ReturnMoments":
        if other.count == 0:
            return self
        if self.count == 0:
            return other
        count = self.count + other.count
        delta = other.mean - self.mean
        mean = self.mean + delta * other.count / count
        m2 = self.m2 + other.m2 + delta * delta * self.count * other.count / count
        return ReturnMoments(count, mean, m2, self.downside_sq + other.downside_sq)


@dataclass(frozen=True)
class StreakTally:
    max_win: int = 0
    max_loss: int = 0
    win_streaks: int = 0
    loss_streaks: int = 0
    win_streak_trades: int = 0
    loss_streak_trades: int = 0


# ---------------------------------------------------------------------------
# V1: edge expectancy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SimulationParams:
    initial_balance: int
    risk_type: RiskType
    risk_per_trade: float
    win_rate: float
    reward_risk_ratio: float
    number_of_trades: int
    commission_impact_r: float
    simulation_count: int
    ruin_threshold_percent: float = 50.0

    @property
    def commission_r(self) -> float:
        return self.commission_impact_r / 100.0


@dataclass(frozen=True)
class SimulatedTrade:
    trade_number: int
    is_win: bool
    r_result: float
    commission: float
    pnl: int
    balance_after: int
    cumulative_r: float
    r_drawdown: float
    drawdown_percent: float


@dataclass(frozen=True)
class SimulationRun:
    run_id: int
    trades: list[SimulatedTrade]
    trades_taken: int
    final_cumulative_r: float
    final_balance: int
    peak_balance: int
    min_balance: int
    peak_r: float
    max_r_drawdown: float
    max_drawdown: int
    max_drawdown_percent: float
    total_commission_r: float
    win_count: int
    loss_count: int
    streaks: StreakTally
    returns: ReturnMoments
    gross_win_r: float
    gross_loss_r: float
    ruined: bool
    reached_ruin_threshold: bool

    @property
    def max_win_streak(self) -> int:
        return self.streaks.max_win

    @property
    def max_loss_streak(self) -> int:
        return self.streaks.max_loss


@dataclass(frozen=True)
class SimulationStatistics:
    median_final_r: float
    mean_final_r: float
    best_case_final_r: float
    worst_case_final_r: float
    median_final_balance: float
    mean_final_balance: float
    best_case_final_balance: float
    worst_case_final_balance: float
    median_max_r_drawdown: float
    mean_max_r_drawdown: float
    worst_max_r_drawdown: float
    median_max_drawdown_percent: float
    worst_max_drawdown_percent: float
    profitable_pct: float
    sharpe_ratio: float
    sortino_ratio: float
    expected_r_per_trade: float
    profit_factor: float
    expected_max_win_streak: float
    expected_max_loss_streak: float
    avg_win_streak: float
    avg_loss_streak: float
    kelly_full: float
    kelly_half: float
    kelly_quarter: float
    kelly_recommendation: str
    kelly_level: str
    ruin_probability: float
    ruined_runs: int


@dataclass(frozen=True)
class DistributionBucket:
    range_start: float
    range_end: float
    count: int
    percentage: float


@dataclass(frozen=True)
class MonteCarloResult:
    params: SimulationParams
    statistics: SimulationStatistics
    distribution_buckets: list[DistributionBucket]
    sample_run: SimulationRun
    seed: Optional[int] = None
    version: Literal["v1"] = "v1"


# ---------------------------------------------------------------------------
# V2: day-aware risk plan
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LossRecoveryStep:
    risk_cents: int


@dataclass(frozen=True)
class RiskManagementProfileForSim:
    name: str
    base_risk_cents: int
    reward_risk_ratio: float
    win_rate: float
    breakeven_rate: float = 0.0
    commission_per_trade_cents: int = 0
    risk_sizing: RiskSizing = RiskSizing.FIXED
    risk_percent: Optional[float] = None
    daily_target_cents: Optional[int] = None
    loss_recovery_steps: tuple[LossRecoveryStep, ...] = ()
    execute_all_regardless: bool = False
    compounding_risk_percent: float = 0.0
    stop_on_first_loss: bool = True
    max_trades_per_day: int = 50
    limit_mode: LimitMode = LimitMode.CURRENCY
    daily_loss_limit: Optional[float] = None
    weekly_loss_limit: Optional[float] = None
    monthly_loss_limit: Optional[float] = None
    trading_days_per_week: int = 5
    trading_days_per_month: int = 22

    @property
    def loss_rate(self) -> float:
        return max(0.0, 100.0 - self.win_rate - self.breakeven_rate)


@dataclass(frozen=True)
class SimulationParamsV2:
    profile: RiskManagementProfileForSim
    simulation_count: int
    initial_balance: int
    months_to_trade: int = 1
    ruin_threshold_percent: float = 50.0


@dataclass(frozen=True)
class SimulatedTradeV2:
    day_number: int
    trade_number_in_day: int
    mode: TradeMode
    risk_amount: int
    outcome: TradeOutcome
    pnl: int
    commission: int
    accumulated_day_pnl: int
    balance_after: int

    @property
    def is_win(self) -> bool:
        return self.outcome == TradeOutcome.WIN

    @property
    def is_breakeven(self) -> bool:
        return self.outcome == TradeOutcome.BREAKEVEN


@dataclass(frozen=True)
class SimulatedDay:
    day_number: int
    month_number: int
    week_number: int
    mode: DayMode
    trades: list[SimulatedTradeV2] = field(default_factory=list)
    day_pnl: int = 0
    target_hit: bool = False
    daily_limit_hit: bool = False

    @property
    def skipped(self) -> bool:
        return self.mode.is_skipped


@dataclass(frozen=True)
class SimulationRunV2:
    run_id: int
    days: list[SimulatedDay]
    total_pnl: int
    total_trades: int
    total_trading_days: int
    total_simulated_days: int
    days_in_loss_recovery: int
    days_in_gain_compounding: int
    days_skipped_weekly_limit: int
    days_skipped_monthly_limit: int
    days_target_hit: int
    times_weekly_limit_hit: int
    months_limit_hit: int
    max_drawdown: int
    max_drawdown_percent: float
    max_drawdown_r: float
    final_balance: int
    total_return_percent: float
    min_balance: int
    total_commission: int
    gross_profit: int
    gross_loss: int
    daily_returns: ReturnMoments
    streaks: StreakTally
    reached_ruin: bool
    ruined: bool

    @property
    def monthly_limit_hit(self) -> bool:
        return self.months_limit_hit > 0


@dataclass(frozen=True)
class SimulationStatisticsV2:
    median_pnl: float
    mean_pnl: float
    best_case_pnl: float
    worst_case_pnl: float
    median_final_balance: float
    best_case_final_balance: float
    worst_case_final_balance: float
    median_return_percent: float
    profitable_pct: float
    monthly_limit_hit_pct: float
    avg_trading_days: float
    avg_trades: float
    avg_days_in_loss_recovery: float
    avg_days_in_gain_compounding: float
    avg_days_skipped_weekly_limit: float
    avg_days_skipped_monthly_limit: float
    avg_days_target_hit: float
    median_max_drawdown_percent: float
    worst_max_drawdown_percent: float
    median_max_drawdown_r: float
    sharpe_ratio: float
    sortino_ratio: float
    calmar_ratio: float
    profit_factor: float
    expected_daily_pnl: float
    expected_max_win_streak: float
    expected_max_loss_streak: float
    avg_win_streak: float
    avg_loss_streak: float
    ruin_probability: float
    risk_of_ruin_percent: float
    median_min_balance_percent: float


@dataclass(frozen=True)
class MonteCarloResultV2:
    params: SimulationParamsV2
    statistics: SimulationStatisticsV2
    distribution_buckets: list[DistributionBucket]
    sample_run: SimulationRunV2
    seed: Optional[int] = None
    version: Literal["v2"] = "v2"
