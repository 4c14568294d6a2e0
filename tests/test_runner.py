import pytest

from edge_sim.simulator.models import RiskType, SimulationParams
from edge_sim.simulator.random_source import NumpyRandomSource, SequenceRandomSource
from edge_sim.simulator.runner import simulate_run


def _params(**overrides):
    values = dict(
        initial_balance=100_000,
        risk_type=RiskType.FIXED_AMOUNT,
        risk_per_trade=1_000,
        win_rate=50,
        reward_risk_ratio=2.0,
        number_of_trades=4,
        commission_impact_r=0.0,
        simulation_count=1,
    )
    values.update(overrides)
    return SimulationParams(**values)


def test_fixed_risk_sequence():
    run = simulate_run(_params(), SequenceRandomSource([0.1, 0.9, 0.9, 0.1]))

    assert [trade.is_win for trade in run.trades] == [True, False, False, True]
    assert [trade.pnl for trade in run.trades] == [2_000, -1_000, -1_000, 2_000]
    assert [trade.balance_after for trade in run.trades] == [102_000, 101_000, 100_000, 102_000]
    assert [trade.cumulative_r for trade in run.trades] == [2.0, 1.0, 0.0, 2.0]
    assert run.final_balance == 102_000
    assert run.final_cumulative_r == 2.0
    assert run.peak_r == 2.0
    assert run.max_r_drawdown == 2.0
    assert run.max_drawdown == 2_000
    assert run.max_drawdown_percent == pytest.approx(2_000 / 102_000 * 100)
    assert run.max_win_streak == 1
    assert run.max_loss_streak == 2
    assert run.streaks.win_streaks == 2
    assert run.streaks.loss_streaks == 1
    assert run.gross_win_r == 4.0
    assert run.gross_loss_r == 2.0
    assert run.win_count == 2 and run.loss_count == 2


def test_percent_risk_compounds_on_balance():
    params = _params(risk_type=RiskType.PERCENT_OF_BALANCE, risk_per_trade=10.0, reward_risk_ratio=1.0, number_of_trades=2)
    run = simulate_run(params, SequenceRandomSource([0.1, 0.9]))

    assert [trade.pnl for trade in run.trades] == [10_000, -11_000]
    assert run.final_balance == 99_000
    assert run.peak_balance == 110_000


def test_commission_is_tracked_in_r():
    params = _params(commission_impact_r=5.0, number_of_trades=2)
    run = simulate_run(params, SequenceRandomSource([0.1, 0.9]))

    assert run.total_commission_r == pytest.approx(0.1)
    assert run.final_cumulative_r == pytest.approx(2.0 - 1.0 - 0.1)


def test_ruin_floors_balance_and_stops():
    params = _params(risk_per_trade=60_000, number_of_trades=10)
    run = simulate_run(params, SequenceRandomSource([0.9]))

    assert run.ruined
    assert run.final_balance == 0
    assert run.trades_taken == 2
    assert len(run.trades) == 2
    assert run.reached_ruin_threshold


def test_summary_only_run_matches_detailed_run():
    params = _params(number_of_trades=50)
    draws = [0.1, 0.7, 0.3, 0.8, 0.95]
    detailed = simulate_run(params, SequenceRandomSource(draws), keep_trades=True)
    summary = simulate_run(params, SequenceRandomSource(draws), run_id=5, keep_trades=False)

    assert summary.trades == []
    assert summary.run_id == 5
    assert summary.final_balance == detailed.final_balance
    assert summary.max_drawdown == detailed.max_drawdown
    assert summary.streaks == detailed.streaks


def test_run_length_and_invariants():
    params = _params(risk_type=RiskType.PERCENT_OF_BALANCE, risk_per_trade=1.0, number_of_trades=300, commission_impact_r=3.0)
    run = simulate_run(params, NumpyRandomSource.from_seed(42))

    assert len(run.trades) == params.number_of_trades
    peak = params.initial_balance
    for trade in run.trades:
        peak = max(peak, trade.balance_after)
        assert trade.balance_after >= 0
        assert trade.r_drawdown >= 0
        assert 0 <= trade.drawdown_percent <= 100
    assert run.peak_balance == peak
    assert run.min_balance <= run.final_balance <= run.peak_balance
