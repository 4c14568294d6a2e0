from edge_sim.simulator.day_runner import simulate_run_v2
from edge_sim.simulator.limits import LossLimiter, PeriodLimits, resolve_limits
from edge_sim.simulator.models import (
    DayMode,
    LimitMode,
    LossRecoveryStep,
    RiskManagementProfileForSim,
    RiskSizing,
    SimulationParamsV2,
    TradeMode,
    TradeOutcome,
)
from edge_sim.simulator.random_source import NumpyRandomSource, SequenceRandomSource

LOSS = 0.9
WIN = 0.1


def _profile(**overrides):
    values = dict(
        name="test",
        base_risk_cents=1_000,
        reward_risk_ratio=2.0,
        win_rate=50,
        max_trades_per_day=5,
        trading_days_per_week=5,
        trading_days_per_month=2,
    )
    values.update(overrides)
    return RiskManagementProfileForSim(**values)


def _params(profile, **overrides):
    values = dict(profile=profile, simulation_count=1, initial_balance=100_000, months_to_trade=1)
    values.update(overrides)
    return SimulationParamsV2(**values)


def _assert_mode_days_sum(run):
    total = (
        run.days_in_loss_recovery
        + run.days_in_gain_compounding
        + run.days_skipped_weekly_limit
        + run.days_skipped_monthly_limit
    )
    assert total == run.total_simulated_days


def test_loss_recovery_stops_on_first_win():
    profile = _profile(loss_recovery_steps=(LossRecoveryStep(1_000), LossRecoveryStep(1_000)))
    run = simulate_run_v2(_params(profile), SequenceRandomSource([LOSS, WIN, WIN]))

    first, second = run.days
    assert first.mode == DayMode.LOSS_RECOVERY
    assert [trade.mode for trade in first.trades] == [TradeMode.BASE, TradeMode.LOSS_RECOVERY]
    assert first.day_pnl == 1_000
    assert second.mode == DayMode.GAIN_COMPOUNDING
    assert [trade.mode for trade in second.trades] == [TradeMode.BASE]
    assert run.total_pnl == 3_000
    assert run.total_trades == 3
    assert run.final_balance == 103_000
    assert run.days_in_loss_recovery == 1
    assert run.days_in_gain_compounding == 1
    _assert_mode_days_sum(run)


def test_execute_all_recovery_steps_regardless():
    profile = _profile(
        loss_recovery_steps=(LossRecoveryStep(1_000), LossRecoveryStep(1_000)),
        execute_all_regardless=True,
    )
    run = simulate_run_v2(_params(profile), SequenceRandomSource([LOSS, WIN, LOSS, WIN]))

    assert len(run.days[0].trades) == 3
    assert run.days[0].day_pnl == 0
    assert run.total_trades == 4


def test_recovery_risk_capped_by_daily_limit():
    profile = _profile(
        loss_recovery_steps=(LossRecoveryStep(1_000), LossRecoveryStep(1_000)),
        daily_loss_limit=1_500,
        trading_days_per_month=1,
    )
    run = simulate_run_v2(_params(profile), SequenceRandomSource([LOSS]))

    day = run.days[0]
    assert [trade.risk_amount for trade in day.trades] == [1_000, 500]
    assert day.day_pnl == -1_500
    assert day.daily_limit_hit


def test_max_trades_per_day_caps_recovery():
    steps = tuple(LossRecoveryStep(1_000) for _ in range(5))
    profile = _profile(loss_recovery_steps=steps, execute_all_regardless=True, max_trades_per_day=3, trading_days_per_month=1)
    run = simulate_run_v2(_params(profile), SequenceRandomSource([LOSS]))

    assert len(run.days[0].trades) == 3


def test_weekly_limit_skips_rest_of_week():
    profile = _profile(weekly_loss_limit=1_000, trading_days_per_month=5)
    run = simulate_run_v2(_params(profile), SequenceRandomSource([LOSS]))

    assert [day.mode for day in run.days] == [DayMode.LOSS_RECOVERY] + [DayMode.SKIPPED_WEEKLY_LIMIT] * 4
    assert run.times_weekly_limit_hit == 1
    assert run.total_trading_days == 1
    _assert_mode_days_sum(run)


def test_weekly_limit_resets_next_week():
    profile = _profile(weekly_loss_limit=1_000, trading_days_per_week=2, trading_days_per_month=4)
    run = simulate_run_v2(_params(profile), SequenceRandomSource([LOSS]))

    assert [day.week_number for day in run.days] == [1, 1, 2, 2]
    assert [day.skipped for day in run.days] == [False, True, False, True]
    assert run.times_weekly_limit_hit == 2


def test_monthly_limit_skips_until_next_month():
    profile = _profile(monthly_loss_limit=2_000, trading_days_per_week=2, trading_days_per_month=4)
    run = simulate_run_v2(_params(profile, months_to_trade=2), SequenceRandomSource([LOSS]))

    modes = [day.mode for day in run.days]
    assert modes.count(DayMode.SKIPPED_MONTHLY_LIMIT) == 4
    assert run.days[2].mode == DayMode.SKIPPED_MONTHLY_LIMIT
    assert run.days[4].mode == DayMode.LOSS_RECOVERY
    assert run.months_limit_hit == 2
    assert run.monthly_limit_hit
    assert run.total_trading_days == 4
    assert run.total_simulated_days == 8
    _assert_mode_days_sum(run)


def test_compounding_until_daily_target():
    profile = _profile(compounding_risk_percent=50, daily_target_cents=3_500, max_trades_per_day=10, trading_days_per_month=1)
    run = simulate_run_v2(_params(profile), SequenceRandomSource([WIN]))

    day = run.days[0]
    assert [trade.mode for trade in day.trades] == [TradeMode.BASE, TradeMode.GAIN_COMPOUNDING]
    assert day.trades[1].risk_amount == 1_000
    assert day.day_pnl == 4_000
    assert day.target_hit
    assert run.days_target_hit == 1


def test_compounding_stops_on_first_loss():
    profile = _profile(compounding_risk_percent=50, max_trades_per_day=10, trading_days_per_month=1)
    run = simulate_run_v2(_params(profile), SequenceRandomSource([WIN, LOSS]))

    day = run.days[0]
    assert len(day.trades) == 2
    assert day.day_pnl == 1_000


def test_breakeven_base_trade_costs_commission():
    profile = _profile(breakeven_rate=20, commission_per_trade_cents=100, trading_days_per_month=1)
    run = simulate_run_v2(_params(profile), SequenceRandomSource([0.6]))

    trade = run.days[0].trades[0]
    assert trade.outcome == TradeOutcome.BREAKEVEN
    assert trade.pnl == -100
    assert run.days[0].mode == DayMode.GAIN_COMPOUNDING
    assert run.total_commission == 100


def test_ruin_stops_run():
    profile = _profile(base_risk_cents=60_000, trading_days_per_month=3)
    run = simulate_run_v2(_params(profile), SequenceRandomSource([LOSS]))

    assert run.ruined
    assert run.reached_ruin
    assert run.final_balance == 0
    assert run.total_simulated_days == 2
    _assert_mode_days_sum(run)


def test_percent_sizing_and_r_limits():
    profile = _profile(
        risk_sizing=RiskSizing.PERCENT_OF_BALANCE,
        risk_percent=1.0,
        limit_mode=LimitMode.R_MULTIPLES,
        daily_loss_limit=1.5,
        weekly_loss_limit=3,
    )
    limits = resolve_limits(profile, 100_000)
    assert limits == PeriodLimits(daily=1_500, weekly=3_000, monthly=None)

    percent = _profile(limit_mode=LimitMode.PERCENT_OF_INITIAL, monthly_loss_limit=5)
    assert resolve_limits(percent, 100_000).monthly == 5_000


def test_limiter_remaining_and_caps():
    limiter = LossLimiter(PeriodLimits(daily=1_000))
    assert limiter.daily_remaining(500) == 1_500
    assert limiter.daily_remaining(-400) == 600
    assert limiter.cap_to_daily(1_000, -400) == 600
    assert limiter.daily_reached(-1_000)
    assert not limiter.weekly_reached(-1_000_000)
    assert limiter.breaches_daily(-400, 700)
    assert not limiter.breaches_daily(-400, 600)


def test_random_run_invariants():
    profile = _profile(
        breakeven_rate=10,
        commission_per_trade_cents=50,
        loss_recovery_steps=(LossRecoveryStep(1_000), LossRecoveryStep(500)),
        compounding_risk_percent=50,
        daily_target_cents=3_000,
        daily_loss_limit=2_500,
        weekly_loss_limit=5_000,
        monthly_loss_limit=8_000,
        trading_days_per_month=22,
    )
    run = simulate_run_v2(_params(profile, months_to_trade=3), NumpyRandomSource.from_seed(5))

    _assert_mode_days_sum(run)
    assert run.total_simulated_days == 66
    assert run.daily_returns.count == 66
    assert run.total_trades == sum(len(day.trades) for day in run.days)
    assert all(len(day.trades) <= profile.max_trades_per_day for day in run.days)
    assert all(not day.trades for day in run.days if day.skipped)
    assert run.final_balance == 100_000 + run.total_pnl
    assert run.max_drawdown >= 0


def test_recovery_day_never_counts_as_target_hit():
    profile = _profile(
        reward_risk_ratio=3.0,
        loss_recovery_steps=(LossRecoveryStep(1_000),),
        daily_target_cents=1_500,
        trading_days_per_month=1,
    )
    run = simulate_run_v2(_params(profile), SequenceRandomSource([LOSS, WIN]))

    day = run.days[0]
    assert day.mode == DayMode.LOSS_RECOVERY
    assert day.day_pnl == 2_000
    assert not day.target_hit
    assert run.days_target_hit == 0


def test_recovery_gains_widen_daily_budget():
    profile = _profile(
        loss_recovery_steps=(LossRecoveryStep(1_000), LossRecoveryStep(3_000)),
        execute_all_regardless=True,
        daily_loss_limit=2_500,
        trading_days_per_month=1,
    )
    run = simulate_run_v2(_params(profile), SequenceRandomSource([LOSS, WIN, LOSS]))

    day = run.days[0]
    assert [trade.risk_amount for trade in day.trades] == [1_000, 1_000, 3_000]
    assert day.day_pnl == -2_000


def test_monthly_limit_counts_only_when_days_are_skipped():
    profile = _profile(monthly_loss_limit=2_000, trading_days_per_month=2)
    run = simulate_run_v2(_params(profile), SequenceRandomSource([LOSS]))

    assert run.total_pnl == -2_000
    assert run.days_skipped_monthly_limit == 0
    assert run.months_limit_hit == 0
    assert not run.monthly_limit_hit
