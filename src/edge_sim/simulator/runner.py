"""Single-run simulator for independent trade sequences."""

from __future__ import annotations

from dataclasses import dataclass, field

from edge_sim.simulator.generator import TradeDraw, draw_trade
from edge_sim.simulator.models import (
    ReturnMoments,
    RiskType,
    SimulatedTrade,
    SimulationParams,
    SimulationRun,
    StreakTally,
)
from edge_sim.simulator.random_source import RandomSource


@dataclass
class StreakCounter:
    current_win: int = 0
    current_loss: int = 0
    max_win: int = 0
    max_loss: int = 0
    win_streaks: int = 0
    loss_streaks: int = 0
    win_streak_trades: int = 0
    loss_streak_trades: int = 0

    def record(self, is_win: bool, is_loss: bool) -> None:
        if is_win:
            if self.current_win == 0:
                self.win_streaks += 1
            self.current_win += 1
            self.current_loss = 0
            self.win_streak_trades += 1
            self.max_win = max(self.max_win, self.current_win)
        elif is_loss:
            if self.current_loss == 0:
                self.loss_streaks += 1
            self.current_loss += 1
            self.current_win = 0
            self.loss_streak_trades += 1
            self.max_loss = max(self.max_loss, self.current_loss)
        else:
            self.current_win = 0
            self.current_loss = 0

    def tally(self) -> StreakTally:
        return StreakTally(
            max_win=self.max_win,
            max_loss=self.max_loss,
            win_streaks=self.win_streaks,
            loss_streaks=self.loss_streaks,
            win_streak_trades=self.win_streak_trades,
            loss_streak_trades=self.loss_streak_trades,
        )


@dataclass
class RunAccumulator:
    """Running state folded over a trade sequence.

    Invariants after every step: ``peak_balance`` and ``peak_r`` never
    decrease, drawdowns are non-negative, ``balance`` is never negative.
    """

    initial_balance: int
    balance: int
    peak_balance: int
    min_balance: int
    cumulative_r: float = 0.0
    peak_r: float = 0.0
    max_r_drawdown: float = 0.0
    max_drawdown: int = 0
    max_drawdown_percent: float = 0.0
    total_commission_r: float = 0.0
    win_count: int = 0
    loss_count: int = 0
    gross_win_r: float = 0.0
    gross_loss_r: float = 0.0
    trades_taken: int = 0
    ruined: bool = False
    streaks: StreakCounter = field(default_factory=StreakCounter)
    returns: ReturnMoments = field(default_factory=ReturnMoments)

    @classmethod
    def start(cls, initial_balance: int) -> "RunAccumulator":
        return cls(
            initial_balance=initial_balance,
            balance=initial_balance,
            peak_balance=initial_balance,
            min_balance=initial_balance,
        )

    def drawdown_percent(self) -> float:
        if self.peak_balance <= 0:
            return 0.0
        return (self.peak_balance - self.balance) / self.peak_balance * 100.0

    def apply(self, draw: TradeDraw, pnl: int, commission_r: float) -> None:
        self.trades_taken += 1
        self.cumulative_r += draw.r_result
        self.total_commission_r += commission_r
        self.returns = self.returns.add(draw.r_result)
        if draw.r_result > 0:
            self.gross_win_r += draw.r_result
        elif draw.r_result < 0:
            self.gross_loss_r += -draw.r_result

        if draw.is_win:
            self.win_count += 1
        else:
            self.loss_count += 1
        self.streaks.record(draw.is_win, not draw.is_win)

        self.balance += pnl
        if self.balance <= 0:
            self.balance = 0
            self.ruined = True
        self.peak_balance = max(self.peak_balance, self.balance)
        self.min_balance = min(self.min_balance, self.balance)
        self.max_drawdown = max(self.max_drawdown, self.peak_balance - self.balance)
        self.max_drawdown_percent = max(self.max_drawdown_percent, self.drawdown_percent())

        self.peak_r = max(self.peak_r, self.cumulative_r)
        self.max_r_drawdown = max(self.max_r_drawdown, self.peak_r - self.cumulative_r)


def risk_amount_for(params: SimulationParams, balance: int) -> float:
    if params.risk_type == RiskType.PERCENT_OF_BALANCE:
        return balance * params.risk_per_trade / 100.0
    return float(params.risk_per_trade)


def ruin_floor(initial_balance: int, ruin_threshold_percent: float) -> float:
    return initial_balance * (1.0 - ruin_threshold_percent / 100.0)


def simulate_run(
    params: SimulationParams,
    source: RandomSource,
    run_id: int = 0,
    keep_trades: bool = True,
) -> SimulationRun:
    commission_r = params.commission_r
    acc = RunAccumulator.start(params.initial_balance)
    trades: list[SimulatedTrade] = []

    for number in range(1, params.number_of_trades + 1):
        risk_amount = risk_amount_for(params, acc.balance)
        draw = draw_trade(source, params.win_rate, params.reward_risk_ratio, commission_r)
        pnl = round(draw.r_result * risk_amount)
        acc.apply(draw, pnl, commission_r)

        if keep_trades:
            trades.append(
                SimulatedTrade(
                    trade_number=number,
                    is_win=draw.is_win,
                    r_result=draw.r_result,
                    commission=commission_r,
                    pnl=pnl,
                    balance_after=acc.balance,
                    cumulative_r=acc.cumulative_r,
                    r_drawdown=acc.peak_r - acc.cumulative_r,
                    drawdown_percent=acc.drawdown_percent(),
                )
            )
        if acc.ruined:
            break

    return _finalize_run(params, acc, trades, run_id)


def _finalize_run(
    params: SimulationParams,
    acc: RunAccumulator,
    trades: list[SimulatedTrade],
    run_id: int,
) -> SimulationRun:
    return SimulationRun(
        run_id=run_id,
        trades=trades,
        trades_taken=acc.trades_taken,
        final_cumulative_r=acc.cumulative_r,
        final_balance=acc.balance,
        peak_balance=acc.peak_balance,
        min_balance=acc.min_balance,
        peak_r=acc.peak_r,
        max_r_drawdown=acc.max_r_drawdown,
        max_drawdown=acc.max_drawdown,
        max_drawdown_percent=acc.max_drawdown_percent,
        total_commission_r=acc.total_commission_r,
        win_count=acc.win_count,
        loss_count=acc.loss_count,
        streaks=acc.streaks.tally(),
        returns=acc.returns,
        gross_win_r=acc.gross_win_r,
        gross_loss_r=acc.gross_loss_r,
        ruined=acc.ruined,
        reached_ruin_threshold=acc.min_balance <= ruin_floor(
            params.initial_balance, params.ruin_threshold_percent
        ),
    )
