"""Monte Carlo trade-sequence simulation."""

from edge_sim.simulator.budget import (
    SIMULATION_BUDGET_CAP,
    V2_SIMULATION_BUDGET_CAP,
    BudgetCheck,
    check_budget_v1,
    check_budget_v2,
)
from edge_sim.simulator.comparison import StrategyComparison, compare_strategies
from edge_sim.simulator.distribution import bucketize
from edge_sim.simulator.engine import MonteCarloEngine, run_monte_carlo, run_monte_carlo_v2
from edge_sim.simulator.ensemble import CancellationToken, SimulationCancelled, run_ensemble
from edge_sim.simulator.insights import AnalysisInsights, KellyResult, generate_insights, kelly_criterion
from edge_sim.simulator.models import (
    DayMode,
    DistributionBucket,
    LimitMode,
    LossRecoveryStep,
    MonteCarloResult,
    MonteCarloResultV2,
    RiskManagementProfileForSim,
    RiskSizing,
    RiskType,
    SimulationParams,
    SimulationParamsV2,
    SimulationRun,
    SimulationRunV2,
    SimulationStatistics,
    SimulationStatisticsV2,
    TradeMode,
    TradeOutcome,
)
from edge_sim.simulator.random_source import NumpyRandomSource, RandomSource, SequenceRandomSource
from edge_sim.simulator.sources import SourceStats, TradeRecord, params_from_source_stats, summarize_trades
from edge_sim.simulator.validation import SimulationValidationError, ValidationIssue

__all__ = [
    "AnalysisInsights",
    "BudgetCheck",
    "CancellationToken",
    "DayMode",
    "DistributionBucket",
    "KellyResult",
    "LimitMode",
    "LossRecoveryStep",
    "MonteCarloEngine",
    "MonteCarloResult",
    "MonteCarloResultV2",
    "NumpyRandomSource",
    "RandomSource",
    "RiskManagementProfileForSim",
    "RiskSizing",
    "RiskType",
    "SIMULATION_BUDGET_CAP",
    "SequenceRandomSource",
    "SimulationCancelled",
    "SimulationParams",
    "SimulationParamsV2",
    "SimulationRun",
    "SimulationRunV2",
    "SimulationStatistics",
    "SimulationStatisticsV2",
    "SimulationValidationError",
    "SourceStats",
    "StrategyComparison",
    "TradeMode",
    "TradeOutcome",
    "TradeRecord",
    "V2_SIMULATION_BUDGET_CAP",
    "ValidationIssue",
    "bucketize",
    "check_budget_v1",
    "check_budget_v2",
    "compare_strategies",
    "generate_insights",
    "kelly_criterion",
    "params_from_source_stats",
    "run_ensemble",
    "run_monte_carlo",
    "run_monte_carlo_v2",
    "summarize_trades",
]
