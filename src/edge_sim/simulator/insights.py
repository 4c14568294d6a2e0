"""Position sizing guidance and plain-language assessment of a simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from edge_sim.simulator.models import MonteCarloResult


@dataclass(frozen=True)
class KellyResult:
    full: float
    half: float
    quarter: float
    recommendation: str
    level: str


@dataclass(frozen=True)
class AnalysisInsights:
    profitability_quality: str
    risk_assessment: str
    psychology_warning: Optional[str]
    commission_assessment: str
    improvement_suggestions: list[str] = field(default_factory=list)


def kelly_criterion(win_rate: float, reward_risk_ratio: float) -> KellyResult:
    """Kelly % = W - (1 - W) / R, floored at zero and expressed in percent."""
    win_prob = win_rate / 100.0
    if reward_risk_ratio <= 0:
        raw = 0.0
    else:
        raw = win_prob - (1.0 - win_prob) / reward_risk_ratio
    kelly = max(0.0, raw) * 100.0

    if kelly <= 0:
        recommendation = "Negative edge - do not trade this strategy"
        level = "conservative"
    elif kelly > 25:
        recommendation = "High potential but risky - Use Quarter Kelly"
        level = "aggressive"
    elif kelly > 15:
        recommendation = "Reasonable Kelly - Consider Half Kelly for growth"
        level = "balanced"
    else:
        recommendation = "Conservative Kelly - Quarter Kelly recommended for stability"
        level = "conservative"

    return KellyResult(kelly, kelly / 2.0, kelly / 4.0, recommendation, level)


def _profitability_quality(profitable_pct: float) -> str:
    if profitable_pct >= 70:
        return "robust"
    if profitable_pct >= 50:
        return "moderate"
    return "risky"


def _risk_assessment(sharpe: float, median_r_drawdown: float) -> str:
    if sharpe >= 0.5 and median_r_drawdown <= 3:
        return "excellent"
    if sharpe >= 0.3 and median_r_drawdown <= 5:
        return "good"
    if sharpe >= 0.1 and median_r_drawdown <= 8:
        return "moderate"
    return "concerning"


def _psychology_warning(expected_max_loss_streak: float) -> Optional[str]:
    streak = round(expected_max_loss_streak)
    if expected_max_loss_streak >= 7:
        return f"Can you maintain discipline during a {streak}-trade losing streak? This is crucial for success."
    if expected_max_loss_streak >= 5:
        return f"Prepare for potential {streak}-trade losing streaks. Have a plan to stay disciplined."
    return None


def _commission_assessment(commission_impact_r: float) -> str:
    if commission_impact_r <= 1:
        return "negligible"
    if commission_impact_r <= 5:
        return "moderate"
    return "high"


def generate_insights(result: MonteCarloResult) -> AnalysisInsights:
    stats = result.statistics
    params = result.params

    suggestions: list[str] = []
    if params.reward_risk_ratio < 1.5:
        suggestions.append("Improve Reward/Risk: Focus on letting winners run longer")
    if params.win_rate < 50:
        suggestions.append("Improve Win Rate: Review entry criteria and market selection")
    if stats.median_max_r_drawdown > 5:
        suggestions.append("High R-Drawdown: The strategy may test psychological limits during losing streaks")

    return AnalysisInsights(
        profitability_quality=_profitability_quality(stats.profitable_pct),
        risk_assessment=_risk_assessment(stats.sharpe_ratio, stats.median_max_r_drawdown),
        psychology_warning=_psychology_warning(stats.expected_max_loss_streak),
        commission_assessment=_commission_assessment(params.commission_impact_r),
        improvement_suggestions=suggestions,
    )
