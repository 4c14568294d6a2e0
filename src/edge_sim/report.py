"""JSON reports for simulation results."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from edge_sim.runtime.context import RunContext
from edge_sim.simulator.insights import generate_insights
from edge_sim.simulator.models import MonteCarloResult, MonteCarloResultV2, ReturnMoments, StreakTally


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def _sample_run(run) -> dict[str, Any]:
    payload = asdict(run)
    # Pooled moments and streak counters are reducer inputs, not chart data.
    for key, item in vars(run).items():
        if isinstance(item, (ReturnMoments, StreakTally)):
            payload.pop(key, None)
    payload["max_win_streak"] = run.streaks.max_win
    payload["max_loss_streak"] = run.streaks.max_loss
    return _plain(payload)


def build_report(
    result: Union[MonteCarloResult, MonteCarloResultV2],
    context: Optional[RunContext] = None,
) -> dict[str, Any]:
    report: dict[str, Any] = {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "version": result.version,
        "seed": result.seed,
        "params": _plain(asdict(result.params)),
        "statistics": _plain(asdict(result.statistics)),
        "distribution_buckets": [asdict(bucket) for bucket in result.distribution_buckets],
        "sample_run": _sample_run(result.sample_run),
    }
    if isinstance(result, MonteCarloResult):
        report["insights"] = asdict(generate_insights(result))
    if context is not None:
        report["run"] = {
            "run_id": context.run_id,
            "config_path": str(context.config_path) if context.config_path else None,
            "config_hash": context.config_hash,
            "started_at_utc": context.started_at.isoformat(),
        }
    return report


def write_report(path: str | Path, report: dict[str, Any]) -> Path:
    """Write ``report`` as JSON; infinite ratios are emitted as ``Infinity``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2, default=str), encoding="utf-8")
    return path


def summary_line(result: Union[MonteCarloResult, MonteCarloResultV2]) -> str:
    stats = result.statistics
    if isinstance(result, MonteCarloResult):
        return (
            f"v1 runs={result.params.simulation_count} profitable={stats.profitable_pct:.1f}% "
            f"median_r={stats.median_final_r:.2f} ruin={stats.ruin_probability:.2%}"
        )
    return (
        f"v2 runs={result.params.simulation_count} profitable={stats.profitable_pct:.1f}% "
        f"median_pnl={stats.median_pnl:.0f} ruin={stats.risk_of_ruin_percent:.1f}%"
    )

