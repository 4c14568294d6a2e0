"""Run context creation and metadata."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from edge_sim.config.loader import compute_config_hash


@dataclass(frozen=True)
class RunContext:
    run_id: str
    config_path: Optional[Path]
    config_hash: Optional[str]
    started_at: datetime
    seed: Optional[int] = None


def create_run_context(
    config_path: Optional[str | Path],
    run_id_prefix: str,
    run_id: Optional[str] = None,
    seed: Optional[int] = None,
) -> RunContext:
    path = Path(config_path) if config_path is not None else None
    config_hash = compute_config_hash(path) if path is not None else None
    started_at = datetime.now(timezone.utc)
    if run_id is None:
        stamp = started_at.strftime("%Y%m%dT%H%M%SZ")
        suffix = config_hash[:8] if config_hash else "adhoc"
        run_id = f"{run_id_prefix}-{stamp}-{suffix}"
    return RunContext(
        run_id=run_id,
        config_path=path,
        config_hash=config_hash,
        started_at=started_at,
        seed=seed,
    )
