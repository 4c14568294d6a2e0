"""Configuration models for reproducible simulation runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from edge_sim.simulator.budget import SIMULATION_BUDGET_CAP, V2_SIMULATION_BUDGET_CAP
from edge_sim.simulator.models import SimulationParams, SimulationParamsV2


class EngineVersion(str, Enum):
    V1 = "v1"
    V2 = "v2"


@dataclass(frozen=True)
class BudgetConfig:
    v1_cap: int = SIMULATION_BUDGET_CAP
    v2_cap: int = V2_SIMULATION_BUDGET_CAP


@dataclass(frozen=True)
class MonitoringConfig:
    audit_log_path: str = "runtime/audit.log"


@dataclass(frozen=True)
class SimConfig:
    name: str
    version: str
    run_id_prefix: str
    engine: EngineVersion
    simulation: Union[SimulationParams, SimulationParamsV2]
    seed: Optional[int] = None
    workers: int = 1
    bucket_count: int = 20
    budget: BudgetConfig = field(default_factory=BudgetConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
