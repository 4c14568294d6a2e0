"""Service boundary: structured responses around the simulation engine."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Optional, Sequence, Union

from edge_sim.simulator.comparison import StrategyComparison, compare_strategies
from edge_sim.simulator.engine import MonteCarloEngine
from edge_sim.simulator.ensemble import CancellationToken, SimulationCancelled
from edge_sim.simulator.models import (
    MonteCarloResult,
    MonteCarloResultV2,
    SimulationParams,
    SimulationParamsV2,
)
from edge_sim.simulator.sources import SourceStats
from edge_sim.simulator.validation import SimulationValidationError

VALIDATION_ERROR = "VALIDATION_ERROR"
SIMULATION_ERROR = "SIMULATION_ERROR"
COMPARISON_ERROR = "COMPARISON_ERROR"
CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class ErrorDetail:
    code: str
    detail: str


@dataclass(frozen=True)
class SimulationResponse:
    status: str
    message: str
    data: Optional[Any] = None
    errors: list[ErrorDetail] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "success"


class SimulationService:
    def __init__(
        self,
        engine: Optional[MonteCarloEngine] = None,
        audit_log: Optional[object] = None,
    ) -> None:
        self.engine = engine or MonteCarloEngine(audit_log=audit_log)
        self._audit_log = audit_log

    def _log(self, event: str, payload: dict) -> None:
        if self._audit_log is None:
            return
        self._audit_log.log(event, payload)

    def run(
        self,
        params: Union[SimulationParams, SimulationParamsV2],
        seed: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SimulationResponse:
        try:
            if isinstance(params, SimulationParamsV2):
                result: Union[MonteCarloResult, MonteCarloResultV2] = self.engine.run_v2(
                    params, seed=seed, cancel_token=cancel_token
                )
            else:
                result = self.engine.run(params, seed=seed, cancel_token=cancel_token)
        except SimulationValidationError as exc:
            return SimulationResponse(
                status="error",
                message="Invalid simulation parameters",
                errors=[ErrorDetail(VALIDATION_ERROR, f"{i.field}: {i.message}") for i in exc.issues],
            )
        except SimulationCancelled as exc:
            return SimulationResponse(
                status="cancelled",
                message=str(exc),
                errors=[ErrorDetail(CANCELLED, f"{exc.completed}/{exc.total} runs completed")],
            )
        except Exception as exc:  # pragma: no cover - unexpected engine failure
            self._log("simulation_failed", {"error": repr(exc)})
            return SimulationResponse(
                status="error",
                message="Failed to run simulation",
                errors=[ErrorDetail(SIMULATION_ERROR, str(exc))],
            )
        return SimulationResponse(status="success", message="Simulation completed", data=result)

    async def run_async(
        self,
        params: Union[SimulationParams, SimulationParamsV2],
        seed: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SimulationResponse:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self.run, params, seed, cancel_token))

    def compare(
        self,
        base_params: SimulationParams,
        sources: Sequence[SourceStats],
        seed: Optional[int] = None,
    ) -> SimulationResponse:
        try:
            comparison: StrategyComparison = compare_strategies(base_params, sources, seed=seed, engine=self.engine)
        except SimulationValidationError as exc:
            return SimulationResponse(
                status="error",
                message="Invalid simulation parameters",
                errors=[ErrorDetail(VALIDATION_ERROR, f"{i.field}: {i.message}") for i in exc.issues],
            )
        except Exception as exc:  # pragma: no cover - unexpected engine failure
            self._log("simulation_failed", {"error": repr(exc), "operation": "compare"})
            return SimulationResponse(
                status="error",
                message="Failed to run comparison",
                errors=[ErrorDetail(COMPARISON_ERROR, str(exc))],
            )
        return SimulationResponse(status="success", message="Comparison completed", data=comparison)
