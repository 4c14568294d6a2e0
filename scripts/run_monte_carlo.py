from __future__ import annotations

import argparse
from pathlib import Path

from edge_sim.config import EngineVersion, load_config
from edge_sim.monitoring import AuditLog
from edge_sim.report import build_report, summary_line, write_report
from edge_sim.runtime import SimulationService, create_run_context
from edge_sim.simulator import MonteCarloEngine


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", required=True)
    parser.add_argument("--output", required=True)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--workers", type=int, default=None)
    args = parser.parse_args()

    config_path = Path(args.config)
    config = load_config(config_path)
    seed = args.seed if args.seed is not None else config.seed
    workers = args.workers if args.workers is not None else config.workers

    context = create_run_context(config_path, config.run_id_prefix, seed=seed)
    audit_log = AuditLog(config.monitoring.audit_log_path, run_id=context.run_id, config_hash=context.config_hash)
    engine = MonteCarloEngine(
        max_workers=workers,
        budget_cap=config.budget.v1_cap,
        v2_budget_cap=config.budget.v2_cap,
        bucket_count=config.bucket_count,
        audit_log=audit_log,
    )
    service = SimulationService(engine=engine, audit_log=audit_log)

    response = service.run(config.simulation, seed=seed)
    if not response.ok:
        details = "; ".join(f"{error.code}: {error.detail}" for error in response.errors)
        raise SystemExit(f"{response.message} ({details})")

    report = build_report(response.data, context)
    output_path = write_report(args.output, report)
    label = "day-aware" if config.engine == EngineVersion.V2 else "edge"
    print(f"[{label}] {summary_line(response.data)}")
    print(f"Wrote {output_path}")


if __name__ == "__main__":
    main()
