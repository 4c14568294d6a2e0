"""Load and freeze configuration files."""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import yaml

from edge_sim.config.models import BudgetConfig, EngineVersion, MonitoringConfig, SimConfig
from edge_sim.simulator.models import (
    LimitMode,
    LossRecoveryStep,
    RiskManagementProfileForSim,
    RiskSizing,
    RiskType,
    SimulationParams,
    SimulationParamsV2,
)


def load_config(path: str | Path) -> SimConfig:
    path = Path(path)
    data = _load_yaml(path)

    name = _require(data, "name")
    version = str(_require(data, "version"))
    run_id_prefix = data.get("run_id_prefix", name)
    engine = _parse_enum(EngineVersion, data.get("engine", "v1"), "engine")
    simulation_data = _require(data, "simulation")
    if engine == EngineVersion.V2:
        simulation = _parse_simulation_v2(simulation_data)
    else:
        simulation = _parse_simulation_v1(simulation_data)

    seed = data.get("seed")
    return SimConfig(
        name=name,
        version=version,
        run_id_prefix=run_id_prefix,
        engine=engine,
        simulation=simulation,
        seed=None if seed is None else int(seed),
        workers=int(data.get("workers", 1)),
        bucket_count=int(data.get("bucket_count", 20)),
        budget=_parse_budget(data.get("budget", {})),
        monitoring=_parse_monitoring(data.get("monitoring", {})),
    )


def compute_config_hash(path: str | Path) -> str:
    path = Path(path)
    content = path.read_bytes()
    return hashlib.sha256(content).hexdigest()


def _lock_path_for(path: Path, lock_path: Optional[str | Path]) -> Path:
    if lock_path is None:
        return path.with_suffix(path.suffix + ".lock.json")
    return Path(lock_path)


def freeze_config(path: str | Path, lock_path: Optional[str | Path] = None) -> Path:
    path = Path(path)
    lock_path = _lock_path_for(path, lock_path)
    payload = {
        "config_path": str(path),
        "config_hash": compute_config_hash(path),
        "frozen_at_utc": datetime.now(timezone.utc).isoformat(),
    }
    lock_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return lock_path


def verify_config_lock(path: str | Path, lock_path: Optional[str | Path] = None) -> bool:
    path = Path(path)
    lock_path = _lock_path_for(path, lock_path)
    if not lock_path.exists():
        return False
    payload = json.loads(lock_path.read_text(encoding="utf-8"))
    return payload.get("config_hash") == compute_config_hash(path)


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config must be a mapping")
    return data


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"Missing required config key: {key}")
    return data[key]


def _parse_enum(enum_cls, value: Any, key: str):
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValueError(f"Invalid {key}: {value}") from exc


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(value)


def _parse_simulation_v1(data: dict[str, Any]) -> SimulationParams:
    return SimulationParams(
        initial_balance=int(_require(data, "initial_balance")),
        risk_type=_parse_enum(RiskType, data.get("risk_type", "percent_of_balance"), "risk_type"),
        risk_per_trade=float(_require(data, "risk_per_trade")),
        win_rate=float(_require(data, "win_rate")),
        reward_risk_ratio=float(_require(data, "reward_risk_ratio")),
        number_of_trades=int(_require(data, "number_of_trades")),
        commission_impact_r=float(data.get("commission_impact_r", 0.0)),
        simulation_count=int(_require(data, "simulation_count")),
        ruin_threshold_percent=float(data.get("ruin_threshold_percent", 50.0)),
    )


def _parse_recovery_steps(values: Any) -> tuple[LossRecoveryStep, ...]:
    steps = []
    for value in values or []:
        if isinstance(value, dict):
            value = _require(value, "risk_cents")
        steps.append(LossRecoveryStep(risk_cents=int(value)))
    return tuple(steps)


def _parse_profile(data: dict[str, Any]) -> RiskManagementProfileForSim:
    return RiskManagementProfileForSim(
        name=str(_require(data, "name")),
        base_risk_cents=int(data.get("base_risk_cents", 0)),
        reward_risk_ratio=float(_require(data, "reward_risk_ratio")),
        win_rate=float(_require(data, "win_rate")),
        breakeven_rate=float(data.get("breakeven_rate", 0.0)),
        commission_per_trade_cents=int(data.get("commission_per_trade_cents", 0)),
        risk_sizing=_parse_enum(RiskSizing, data.get("risk_sizing", "fixed"), "risk_sizing"),
        risk_percent=_optional_float(data.get("risk_percent")),
        daily_target_cents=_optional_int(data.get("daily_target_cents")),
        loss_recovery_steps=_parse_recovery_steps(data.get("loss_recovery_steps")),
        execute_all_regardless=bool(data.get("execute_all_regardless", False)),
        compounding_risk_percent=float(data.get("compounding_risk_percent", 0.0)),
        stop_on_first_loss=bool(data.get("stop_on_first_loss", True)),
        max_trades_per_day=int(data.get("max_trades_per_day", 50)),
        limit_mode=_parse_enum(LimitMode, data.get("limit_mode", "currency"), "limit_mode"),
        daily_loss_limit=_optional_float(data.get("daily_loss_limit")),
        weekly_loss_limit=_optional_float(data.get("weekly_loss_limit")),
        monthly_loss_limit=_optional_float(data.get("monthly_loss_limit")),
        trading_days_per_week=int(data.get("trading_days_per_week", 5)),
        trading_days_per_month=int(data.get("trading_days_per_month", 22)),
    )


def _parse_simulation_v2(data: dict[str, Any]) -> SimulationParamsV2:
    return SimulationParamsV2(
        profile=_parse_profile(_require(data, "profile")),
        simulation_count=int(_require(data, "simulation_count")),
        initial_balance=int(_require(data, "initial_balance")),
        months_to_trade=int(data.get("months_to_trade", 1)),
        ruin_threshold_percent=float(data.get("ruin_threshold_percent", 50.0)),
    )


def _parse_budget(data: dict[str, Any]) -> BudgetConfig:
    defaults = BudgetConfig()
    return BudgetConfig(
        v1_cap=int(data.get("v1_cap", defaults.v1_cap)),
        v2_cap=int(data.get("v2_cap", defaults.v2_cap)),
    )


def _parse_monitoring(data: dict[str, Any]) -> MonitoringConfig:
    return MonitoringConfig(
        audit_log_path=str(data.get("audit_log_path", "runtime/audit.log")),
    )


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def serialize_config(config: SimConfig) -> dict[str, Any]:
    return _plain(asdict(config))
