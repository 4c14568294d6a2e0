"""Runtime context exports."""

from edge_sim.runtime.context import RunContext, create_run_context
from edge_sim.runtime.service import ErrorDetail, SimulationResponse, SimulationService

__all__ = [
    "ErrorDetail",
    "RunContext",
    "SimulationResponse",
    "SimulationService",
    "create_run_context",
]
