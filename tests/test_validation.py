from edge_sim.simulator.models import (
    LossRecoveryStep,
    RiskManagementProfileForSim,
    RiskSizing,
    RiskType,
    SimulationParams,
    SimulationParamsV2,
)
from edge_sim.simulator.validation import validate_params, validate_params_v2


def _params(**overrides):
    values = dict(
        initial_balance=1_000_000,
        risk_type=RiskType.PERCENT_OF_BALANCE,
        risk_per_trade=1.0,
        win_rate=50,
        reward_risk_ratio=1.5,
        number_of_trades=100,
        commission_impact_r=0.0,
        simulation_count=100,
    )
    values.update(overrides)
    return SimulationParams(**values)


def _fields(issues):
    return {issue.field for issue in issues}


def test_valid_params_have_no_issues():
    assert validate_params(_params()) == []


def test_range_checks():
    issues = validate_params(_params(win_rate=120, reward_risk_ratio=0, simulation_count=0))
    assert _fields(issues) == {"win_rate", "reward_risk_ratio", "simulation_count"}


def test_percentage_risk_capped():
    issues = validate_params(_params(risk_per_trade=150))
    assert _fields(issues) == {"risk_per_trade"}
    assert validate_params(_params(risk_type=RiskType.FIXED_AMOUNT, risk_per_trade=150)) == []


def test_budget_reported_as_issue():
    issues = validate_params(_params(number_of_trades=10_000, simulation_count=10_000))
    assert [issue.code for issue in issues] == ["budget_exceeded"]


def test_v2_profile_checks():
    profile = RiskManagementProfileForSim(
        name="bad",
        base_risk_cents=0,
        reward_risk_ratio=2.0,
        win_rate=80,
        breakeven_rate=30,
        risk_sizing=RiskSizing.PERCENT_OF_BALANCE,
        loss_recovery_steps=(LossRecoveryStep(0),),
        trading_days_per_week=8,
    )
    params = SimulationParamsV2(profile=profile, simulation_count=10, initial_balance=100_000, months_to_trade=60)
    fields = _fields(validate_params_v2(params))

    assert "profile.breakeven_rate" in fields
    assert "profile.risk_percent" in fields
    assert "profile.loss_recovery_steps[0].risk_cents" in fields
    assert "profile.trading_days_per_week" in fields
    assert "months_to_trade" in fields


def test_v2_valid_profile():
    profile = RiskManagementProfileForSim(name="ok", base_risk_cents=1_000, reward_risk_ratio=2.0, win_rate=45, breakeven_rate=10)
    params = SimulationParamsV2(profile=profile, simulation_count=100, initial_balance=100_000)
    assert validate_params_v2(params) == []
