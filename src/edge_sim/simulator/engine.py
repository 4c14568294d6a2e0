"""Monte Carlo entry points: validate, run the ensemble, reduce."""

from __future__ import annotations

import time
from typing import Optional

from edge_sim.simulator.budget import SIMULATION_BUDGET_CAP, V2_SIMULATION_BUDGET_CAP
from edge_sim.simulator.day_runner import simulate_run_v2
from edge_sim.simulator.distribution import DEFAULT_BUCKET_COUNT, bucketize
from edge_sim.simulator.ensemble import CancellationToken, SimulationCancelled, resolve_seed, run_ensemble
from edge_sim.simulator.models import (
    MonteCarloResult,
    MonteCarloResultV2,
    SimulationParams,
    SimulationParamsV2,
)
from edge_sim.simulator.runner import simulate_run
from edge_sim.simulator.statistics import reduce_statistics, reduce_statistics_v2
from edge_sim.simulator.validation import SimulationValidationError, validate_params, validate_params_v2


class MonteCarloEngine:
    def __init__(
        self,
        max_workers: int = 1,
        budget_cap: int = SIMULATION_BUDGET_CAP,
        v2_budget_cap: int = V2_SIMULATION_BUDGET_CAP,
        bucket_count: int = DEFAULT_BUCKET_COUNT,
        audit_log: Optional[object] = None,
    ) -> None:
        self.max_workers = max_workers
        self.budget_cap = budget_cap
        self.v2_budget_cap = v2_budget_cap
        self.bucket_count = bucket_count
        self._audit_log = audit_log

    def _log(self, event: str, payload: dict) -> None:
        if self._audit_log is None:
            return
        self._audit_log.log(event, payload)

    def _reject(self, version: str, issues) -> None:
        self._log(
            "simulation_rejected",
            {"version": version, "issues": [{"code": i.code, "field": i.field, "message": i.message} for i in issues]},
        )
        raise SimulationValidationError(issues)

    def run(
        self,
        params: SimulationParams,
        seed: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> MonteCarloResult:
        issues = validate_params(params, self.budget_cap)
        if issues:
            self._reject("v1", issues)

        seed = resolve_seed(seed)
        self._log(
            "simulation_started",
            {
                "version": "v1",
                "seed": seed,
                "simulation_count": params.simulation_count,
                "number_of_trades": params.number_of_trades,
            },
        )
        started = time.perf_counter()
        try:
            ensemble = run_ensemble(
                simulate_run,
                params,
                params.simulation_count,
                seed,
                max_workers=self.max_workers,
                cancel_token=cancel_token,
            )
        except SimulationCancelled as exc:
            self._log("simulation_cancelled", {"version": "v1", "completed": exc.completed, "total": exc.total})
            raise

        statistics = reduce_statistics(params, ensemble.runs)
        buckets = bucketize([run.final_balance for run in ensemble.runs], self.bucket_count)
        self._log(
            "simulation_completed",
            {
                "version": "v1",
                "seed": seed,
                "elapsed_seconds": round(time.perf_counter() - started, 3),
                "profitable_pct": statistics.profitable_pct,
                "median_final_r": statistics.median_final_r,
                "ruin_probability": statistics.ruin_probability,
            },
        )
        return MonteCarloResult(
            params=params,
            statistics=statistics,
            distribution_buckets=buckets,
            sample_run=ensemble.sample_run,
            seed=seed,
        )

    def run_v2(
        self,
        params: SimulationParamsV2,
        seed: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> MonteCarloResultV2:
        issues = validate_params_v2(params, self.v2_budget_cap)
        if issues:
            self._reject("v2", issues)

        seed = resolve_seed(seed)
        self._log(
            "simulation_started",
            {
                "version": "v2",
                "seed": seed,
                "profile": params.profile.name,
                "simulation_count": params.simulation_count,
                "months_to_trade": params.months_to_trade,
            },
        )
        started = time.perf_counter()
        try:
            ensemble = run_ensemble(
                simulate_run_v2,
                params,
                params.simulation_count,
                seed,
                max_workers=self.max_workers,
                cancel_token=cancel_token,
            )
        except SimulationCancelled as exc:
            self._log("simulation_cancelled", {"version": "v2", "completed": exc.completed, "total": exc.total})
            raise

        statistics = reduce_statistics_v2(params, ensemble.runs)
        buckets = bucketize([run.final_balance for run in ensemble.runs], self.bucket_count)
        self._log(
            "simulation_completed",
            {
                "version": "v2",
                "seed": seed,
                "elapsed_seconds": round(time.perf_counter() - started, 3),
                "profitable_pct": statistics.profitable_pct,
                "median_pnl": statistics.median_pnl,
                "risk_of_ruin_percent": statistics.risk_of_ruin_percent,
            },
        )
        return MonteCarloResultV2(
            params=params,
            statistics=statistics,
            distribution_buckets=buckets,
            sample_run=ensemble.sample_run,
            seed=seed,
        )


def run_monte_carlo(
    params: SimulationParams,
    seed: Optional[int] = None,
    max_workers: int = 1,
    cancel_token: Optional[CancellationToken] = None,
    audit_log: Optional[object] = None,
    budget_cap: int = SIMULATION_BUDGET_CAP,
) -> MonteCarloResult:
    engine = MonteCarloEngine(max_workers=max_workers, budget_cap=budget_cap, audit_log=audit_log)
    return engine.run(params, seed=seed, cancel_token=cancel_token)


def run_monte_carlo_v2(
    params: SimulationParamsV2,
    seed: Optional[int] = None,
    max_workers: int = 1,
    cancel_token: Optional[CancellationToken] = None,
    audit_log: Optional[object] = None,
    budget_cap: int = V2_SIMULATION_BUDGET_CAP,
) -> MonteCarloResultV2:
    engine = MonteCarloEngine(max_workers=max_workers, v2_budget_cap=budget_cap, audit_log=audit_log)
    return engine.run_v2(params, seed=seed, cancel_token=cancel_token)
