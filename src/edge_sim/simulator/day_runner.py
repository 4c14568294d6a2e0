"""Day-aware simulator following a risk management decision tree.

Each trading day starts with a base trade. A losing base trade puts the
day into loss recovery (a fixed sequence of recovery trades, capped by the
daily loss limit). A winning or breakeven base trade puts the day into
gain compounding (reinvesting a share of the day's gain until the target,
a loss, or the daily limit). Weekly and monthly loss limits skip whole days
until the period rolls over.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from edge_sim.simulator.generator import classify_outcome
from edge_sim.simulator.limits import LossLimiter, resolve_limits, risk_unit_cents
from edge_sim.simulator.models import (
    DayMode,
    ReturnMoments,
    RiskManagementProfileForSim,
    RiskSizing,
    SimulatedDay,
    SimulatedTradeV2,
    SimulationParamsV2,
    SimulationRunV2,
    TradeMode,
    TradeOutcome,
)
from edge_sim.simulator.random_source import RandomSource
from edge_sim.simulator.runner import StreakCounter, ruin_floor


@dataclass
class AccountState:
    initial_balance: int
    balance: int
    peak_balance: int
    min_balance: int
    max_drawdown: int = 0
    max_drawdown_percent: float = 0.0
    total_commission: int = 0
    gross_profit: int = 0
    gross_loss: int = 0
    total_trades: int = 0
    ruined: bool = False
    streaks: StreakCounter = field(default_factory=StreakCounter)
    daily_returns: ReturnMoments = field(default_factory=ReturnMoments)

    @classmethod
    def start(cls, initial_balance: int) -> "AccountState":
        return cls(
            initial_balance=initial_balance,
            balance=initial_balance,
            peak_balance=initial_balance,
            min_balance=initial_balance,
        )

    def book(self, trade: SimulatedTradeV2) -> None:
        self.total_trades += 1
        self.total_commission += trade.commission
        if trade.pnl > 0:
            self.gross_profit += trade.pnl
        elif trade.pnl < 0:
            self.gross_loss += -trade.pnl
        self.streaks.record(trade.is_win, trade.outcome == TradeOutcome.LOSS)

        self.balance += trade.pnl
        if self.balance <= 0:
            self.balance = 0
            self.ruined = True
        self.peak_balance = max(self.peak_balance, self.balance)
        self.min_balance = min(self.min_balance, self.balance)
        drawdown = self.peak_balance - self.balance
        self.max_drawdown = max(self.max_drawdown, drawdown)
        if self.peak_balance > 0:
            self.max_drawdown_percent = max(self.max_drawdown_percent, drawdown / self.peak_balance * 100.0)


@dataclass
class ModeCounts:
    loss_recovery: int = 0
    gain_compounding: int = 0
    skipped_weekly: int = 0
    skipped_monthly: int = 0
    target_hit: int = 0

    def record(self, day: SimulatedDay) -> None:
        if day.mode == DayMode.LOSS_RECOVERY:
            self.loss_recovery += 1
        elif day.mode == DayMode.GAIN_COMPOUNDING:
            self.gain_compounding += 1
        elif day.mode == DayMode.SKIPPED_WEEKLY_LIMIT:
            self.skipped_weekly += 1
        else:
            self.skipped_monthly += 1
        if day.target_hit:
            self.target_hit += 1

    @property
    def total(self) -> int:
        return self.loss_recovery + self.gain_compounding + self.skipped_weekly + self.skipped_monthly


def base_risk_for(profile: RiskManagementProfileForSim, balance: int) -> int:
    if profile.risk_sizing == RiskSizing.PERCENT_OF_BALANCE and profile.risk_percent is not None:
        return max(1, round(balance * profile.risk_percent / 100.0))
    return profile.base_risk_cents


def trade_pnl(outcome: TradeOutcome, risk: int, reward_risk_ratio: float, commission: int) -> int:
    if outcome == TradeOutcome.WIN:
        return round(risk * reward_risk_ratio) - commission
    if outcome == TradeOutcome.LOSS:
        return -risk - commission
    return -commission


class DaySimulator:
    def __init__(
        self,
        profile: RiskManagementProfileForSim,
        limiter: LossLimiter,
        source: RandomSource,
        account: AccountState,
    ) -> None:
        self.profile = profile
        self.limiter = limiter
        self.source = source
        self.account = account

    def _take(
        self,
        trades: list[SimulatedTradeV2],
        day_number: int,
        risk: int,
        mode: TradeMode,
        day_pnl: int,
    ) -> SimulatedTradeV2:
        profile = self.profile
        outcome = classify_outcome(self.source.random(), profile.win_rate, profile.breakeven_rate)
        commission = profile.commission_per_trade_cents
        pnl = trade_pnl(outcome, risk, profile.reward_risk_ratio, commission)
        trade = SimulatedTradeV2(
            day_number=day_number,
            trade_number_in_day=len(trades) + 1,
            mode=mode,
            risk_amount=risk,
            outcome=outcome,
            pnl=pnl,
            commission=commission,
            accumulated_day_pnl=day_pnl + pnl,
            balance_after=max(0, self.account.balance + pnl),
        )
        trades.append(trade)
        self.account.book(trade)
        return trade

    def _can_trade(self, trades: list[SimulatedTradeV2]) -> bool:
        return not self.account.ruined and len(trades) < self.profile.max_trades_per_day

    def run_day(self, day_number: int, month_number: int, week_number: int) -> SimulatedDay:
        profile = self.profile
        trades: list[SimulatedTradeV2] = []
        day_pnl = 0

        base = self._take(trades, day_number, base_risk_for(profile, self.account.balance), TradeMode.BASE, 0)
        day_pnl += base.pnl

        if base.outcome == TradeOutcome.LOSS:
            mode = DayMode.LOSS_RECOVERY
            day_pnl = self._recover(trades, day_number, day_pnl)
        else:
            mode = DayMode.GAIN_COMPOUNDING
            if base.outcome == TradeOutcome.WIN and profile.compounding_risk_percent > 0:
                day_pnl = self._compound(trades, day_number, day_pnl)

        target = profile.daily_target_cents
        return SimulatedDay(
            day_number=day_number,
            month_number=month_number,
            week_number=week_number,
            mode=mode,
            trades=trades,
            day_pnl=day_pnl,
            # Only a compounding day can hit the target; recovery days never do.
            target_hit=mode == DayMode.GAIN_COMPOUNDING and target is not None and day_pnl >= target,
            daily_limit_hit=self.limiter.daily_reached(day_pnl),
        )

    def _recover(self, trades: list[SimulatedTradeV2], day_number: int, day_pnl: int) -> int:
        for step in self.profile.loss_recovery_steps:
            if not self._can_trade(trades) or self.limiter.daily_reached(day_pnl):
                break
            risk = self.limiter.cap_to_daily(step.risk_cents, day_pnl)
            if risk <= 0:
                break
            trade = self._take(trades, day_number, risk, TradeMode.LOSS_RECOVERY, day_pnl)
            day_pnl += trade.pnl
            if trade.is_win and not self.profile.execute_all_regardless:
                break
        return day_pnl

    def _compound(self, trades: list[SimulatedTradeV2], day_number: int, day_pnl: int) -> int:
        profile = self.profile
        target = profile.daily_target_cents
        accumulated_gain = day_pnl
        while self._can_trade(trades):
            if target is not None and day_pnl >= target:
                break
            risk = round(accumulated_gain * profile.compounding_risk_percent / 100.0)
            if risk <= 0 or self.limiter.breaches_daily(day_pnl, risk):
                break
            trade = self._take(trades, day_number, risk, TradeMode.GAIN_COMPOUNDING, day_pnl)
            day_pnl += trade.pnl
            if trade.is_breakeven:
                continue
            if trade.is_win:
                accumulated_gain = day_pnl
            elif profile.stop_on_first_loss:
                break
            else:
                accumulated_gain = max(0, day_pnl)
                if accumulated_gain <= 0:
                    break
        return day_pnl


def _skipped_day(day_number: int, month_number: int, week_number: int, mode: DayMode) -> SimulatedDay:
    return SimulatedDay(day_number=day_number, month_number=month_number, week_number=week_number, mode=mode)


def simulate_run_v2(
    params: SimulationParamsV2,
    source: RandomSource,
    run_id: int = 0,
    keep_days: bool = True,
) -> SimulationRunV2:
    profile = params.profile
    limiter = LossLimiter(resolve_limits(profile, params.initial_balance))
    account = AccountState.start(params.initial_balance)
    simulator = DaySimulator(profile, limiter, source, account)

    days: list[SimulatedDay] = []
    counts = ModeCounts()
    trading_days = 0
    weekly_hits = 0
    months_limit_hit = 0
    day_number = 0

    for month_number in range(1, params.months_to_trade + 1):
        month_pnl = 0
        week_pnl = 0
        month_skipped = False
        for day_in_month in range(1, profile.trading_days_per_month + 1):
            day_number += 1
            week_number = (day_in_month - 1) // profile.trading_days_per_week + 1
            if (day_in_month - 1) % profile.trading_days_per_week == 0:
                week_pnl = 0

            day_return = 0.0
            if limiter.monthly_reached(month_pnl):
                month_skipped = True
                day = _skipped_day(day_number, month_number, week_number, DayMode.SKIPPED_MONTHLY_LIMIT)
            elif limiter.weekly_reached(week_pnl):
                day = _skipped_day(day_number, month_number, week_number, DayMode.SKIPPED_WEEKLY_LIMIT)
            else:
                start_balance = account.balance
                day = simulator.run_day(day_number, month_number, week_number)
                trading_days += 1
                month_pnl += day.day_pnl
                week_pnl += day.day_pnl
                if limiter.weekly_reached(week_pnl):
                    weekly_hits += 1
                if start_balance > 0:
                    day_return = (account.balance - start_balance) / start_balance

            account.daily_returns = account.daily_returns.add(day_return)
            counts.record(day)
            if keep_days:
                days.append(day)
            if account.ruined:
                break

        if month_skipped:
            months_limit_hit += 1
        if account.ruined:
            break

    return _finalize_run(params, account, days, counts, trading_days, weekly_hits, months_limit_hit, run_id)


def _finalize_run(
    params: SimulationParamsV2,
    account: AccountState,
    days: list[SimulatedDay],
    counts: ModeCounts,
    trading_days: int,
    weekly_hits: int,
    months_limit_hit: int,
    run_id: int,
) -> SimulationRunV2:
    initial = params.initial_balance
    r_unit = risk_unit_cents(params.profile, initial)
    return SimulationRunV2(
        run_id=run_id,
        days=days,
        total_pnl=account.balance - initial,
        total_trades=account.total_trades,
        total_trading_days=trading_days,
        total_simulated_days=counts.total,
        days_in_loss_recovery=counts.loss_recovery,
        days_in_gain_compounding=counts.gain_compounding,
        days_skipped_weekly_limit=counts.skipped_weekly,
        days_skipped_monthly_limit=counts.skipped_monthly,
        days_target_hit=counts.target_hit,
        times_weekly_limit_hit=weekly_hits,
        months_limit_hit=months_limit_hit,
        max_drawdown=account.max_drawdown,
        max_drawdown_percent=account.max_drawdown_percent,
        max_drawdown_r=account.max_drawdown / r_unit if r_unit > 0 else 0.0,
        final_balance=account.balance,
        total_return_percent=(account.balance - initial) / initial * 100.0,
        min_balance=account.min_balance,
        total_commission=account.total_commission,
        gross_profit=account.gross_profit,
        gross_loss=account.gross_loss,
        daily_returns=account.daily_returns,
        streaks=account.streaks.tally(),
        reached_ruin=account.min_balance <= ruin_floor(initial, params.ruin_threshold_percent),
        ruined=account.ruined,
    )
