"""Single trade outcome draws."""

from __future__ import annotations

from dataclasses import dataclass

from edge_sim.simulator.models import TradeOutcome
from edge_sim.simulator.random_source import RandomSource


@dataclass(frozen=True)
class TradeDraw:
    outcome: TradeOutcome
    r_result: float

    @property
    def is_win(self) -> bool:
        return self.outcome == TradeOutcome.WIN


def classify_outcome(draw: float, win_rate: float, breakeven_rate: float = 0.0) -> TradeOutcome:
    """Map a uniform draw onto consecutive win / breakeven / loss intervals.

    Rates are percentages of all trades: [0, w) wins, [w, w + b) breakevens,
    the remainder losses.
    """
    win_edge = win_rate / 100.0
    if draw < win_edge:
        return TradeOutcome.WIN
    if draw < win_edge + breakeven_rate / 100.0:
        return TradeOutcome.BREAKEVEN
    return TradeOutcome.LOSS


def r_multiple_for(outcome: TradeOutcome, reward_risk_ratio: float) -> float:
    if outcome == TradeOutcome.WIN:
        return reward_risk_ratio
    if outcome == TradeOutcome.LOSS:
        return -1.0
    return 0.0


def draw_trade(
    source: RandomSource,
    win_rate: float,
    reward_risk_ratio: float,
    commission_r: float = 0.0,
    breakeven_rate: float = 0.0,
) -> TradeDraw:
    outcome = classify_outcome(source.random(), win_rate, breakeven_rate)
    return TradeDraw(outcome, r_multiple_for(outcome, reward_risk_ratio) - commission_r)
