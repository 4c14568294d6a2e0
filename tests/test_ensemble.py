import pytest

from edge_sim.simulator.day_runner import simulate_run_v2
from edge_sim.simulator.ensemble import CancellationToken, SimulationCancelled, resolve_seed, run_ensemble
from edge_sim.simulator.models import RiskManagementProfileForSim, RiskType, SimulationParams, SimulationParamsV2
from edge_sim.simulator.runner import simulate_run


def _params(**overrides):
    values = dict(
        initial_balance=1_000_000,
        risk_type=RiskType.PERCENT_OF_BALANCE,
        risk_per_trade=1.0,
        win_rate=50,
        reward_risk_ratio=1.5,
        number_of_trades=40,
        commission_impact_r=1.0,
        simulation_count=20,
    )
    values.update(overrides)
    return SimulationParams(**values)


def test_ensemble_keeps_only_first_run_detail():
    params = _params()
    ensemble = run_ensemble(simulate_run, params, params.simulation_count, seed=1)

    assert len(ensemble.runs) == params.simulation_count
    assert [run.run_id for run in ensemble.runs] == list(range(params.simulation_count))
    assert ensemble.sample_run is ensemble.runs[0]
    assert len(ensemble.sample_run.trades) == params.number_of_trades
    assert all(run.trades == [] for run in ensemble.runs[1:])


def test_same_seed_same_runs():
    params = _params()
    first = run_ensemble(simulate_run, params, 20, seed=99)
    second = run_ensemble(simulate_run, params, 20, seed=99)
    other = run_ensemble(simulate_run, params, 20, seed=100)

    balances = [run.final_balance for run in first.runs]
    assert balances == [run.final_balance for run in second.runs]
    assert balances != [run.final_balance for run in other.runs]


def test_runs_are_not_identical():
    ensemble = run_ensemble(simulate_run, _params(), 20, seed=4)
    assert len({run.final_balance for run in ensemble.runs}) > 1


def test_process_pool_matches_sequential():
    params = _params()
    sequential = run_ensemble(simulate_run, params, 20, seed=7)
    parallel = run_ensemble(simulate_run, params, 20, seed=7, max_workers=2, chunk_size=3)

    assert [run.final_balance for run in parallel.runs] == [run.final_balance for run in sequential.runs]
    assert [run.run_id for run in parallel.runs] == list(range(20))
    assert parallel.sample_run.trades == sequential.sample_run.trades


def test_day_aware_runs_use_same_loop():
    profile = RiskManagementProfileForSim(name="p", base_risk_cents=1_000, reward_risk_ratio=2.0, win_rate=40)
    params = SimulationParamsV2(profile=profile, simulation_count=5, initial_balance=100_000)
    ensemble = run_ensemble(simulate_run_v2, params, 5, seed=3)

    assert len(ensemble.runs) == 5
    assert len(ensemble.sample_run.days) == profile.trading_days_per_month
    assert all(run.days == [] for run in ensemble.runs[1:])


def test_cancelled_before_start():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(SimulationCancelled) as excinfo:
        run_ensemble(simulate_run, _params(), 10, seed=1, cancel_token=token)
    assert excinfo.value.completed == 0
    assert excinfo.value.total == 10


def test_cancellation_checked_between_runs():
    token = CancellationToken()
    calls = []

    def simulate(params, source, run_id, keep_detail):
        calls.append(run_id)
        if run_id == 2:
            token.cancel()
        return simulate_run(params, source, run_id, keep_detail)

    with pytest.raises(SimulationCancelled) as excinfo:
        run_ensemble(simulate, _params(), 10, seed=3, cancel_token=token)
    assert calls == [0, 1, 2]
    assert excinfo.value.completed == 3


def test_resolve_seed():
    assert resolve_seed(5) == 5
    assert isinstance(resolve_seed(None), int)


def test_count_must_be_positive():
    with pytest.raises(ValueError):
        run_ensemble(simulate_run, _params(), 0, seed=1)
