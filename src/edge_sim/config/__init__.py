"""Config loading and freezing."""

from edge_sim.config.loader import (
    compute_config_hash,
    freeze_config,
    load_config,
    serialize_config,
    verify_config_lock,
)
from edge_sim.config.models import BudgetConfig, EngineVersion, MonitoringConfig, SimConfig

__all__ = [
    "BudgetConfig",
    "EngineVersion",
    "MonitoringConfig",
    "SimConfig",
    "compute_config_hash",
    "freeze_config",
    "load_config",
    "serialize_config",
    "verify_config_lock",
]
