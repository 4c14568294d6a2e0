import asyncio

from edge_sim.runtime import SimulationService
from edge_sim.simulator.ensemble import CancellationToken
from edge_sim.simulator.models import RiskManagementProfileForSim, RiskType, SimulationParams, SimulationParamsV2
from edge_sim.simulator.sources import SourceStats


def _params(**overrides):
    values = dict(
        initial_balance=1_000_000,
        risk_type=RiskType.PERCENT_OF_BALANCE,
        risk_per_trade=1.0,
        win_rate=55,
        reward_risk_ratio=1.5,
        number_of_trades=50,
        commission_impact_r=1.0,
        simulation_count=40,
    )
    values.update(overrides)
    return SimulationParams(**values)


def test_success_response():
    response = SimulationService().run(_params(), seed=1)
    assert response.ok
    assert response.status == "success"
    assert response.data.version == "v1"
    assert response.errors == []


def test_v2_dispatch():
    profile = RiskManagementProfileForSim(name="p", base_risk_cents=1_000, reward_risk_ratio=2.0, win_rate=50)
    params = SimulationParamsV2(profile=profile, simulation_count=10, initial_balance=100_000)
    response = SimulationService().run(params, seed=1)
    assert response.ok
    assert response.data.version == "v2"


def test_validation_error_envelope():
    response = SimulationService().run(_params(win_rate=150, number_of_trades=0))
    assert response.status == "error"
    assert response.data is None
    assert {error.code for error in response.errors} == {"VALIDATION_ERROR"}
    assert any("win_rate" in error.detail for error in response.errors)


def test_budget_error_envelope():
    response = SimulationService().run(_params(number_of_trades=10_000, simulation_count=10_000))
    assert response.status == "error"
    assert "exceeds the limit" in response.errors[0].detail


def test_cancelled_response():
    token = CancellationToken()
    token.cancel()
    response = SimulationService().run(_params(), seed=1, cancel_token=token)
    assert response.status == "cancelled"
    assert response.errors[0].code == "CANCELLED"


def test_run_async_matches_sync():
    service = SimulationService()
    response = asyncio.run(service.run_async(_params(), seed=4))
    assert response.ok
    assert response.data.statistics == service.run(_params(), seed=4).data.statistics


def test_compare_response():
    sources = [
        SourceStats("a", 40, 60.0, 1.5, 0.0, 1.4, 0.2),
        SourceStats("b", 40, 45.0, 1.0, 0.0, 0.8, -0.1),
    ]
    response = SimulationService().compare(_params(), sources, seed=2)
    assert response.ok
    assert [result.rank for result in response.data.results] == [1, 2]
