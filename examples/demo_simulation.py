from edge_sim.simulator import (
    LimitMode,
    LossRecoveryStep,
    RiskManagementProfileForSim,
    RiskType,
    SimulationParams,
    SimulationParamsV2,
    generate_insights,
    run_monte_carlo,
    run_monte_carlo_v2,
)


params = SimulationParams(
    initial_balance=1_000_000,
    risk_type=RiskType.PERCENT_OF_BALANCE,
    risk_per_trade=1.0,
    win_rate=52,
    reward_risk_ratio=1.8,
    number_of_trades=150,
    commission_impact_r=3.0,
    simulation_count=500,
)
result = run_monte_carlo(params, seed=7)
stats = result.statistics
print("Profitable runs:", f"{stats.profitable_pct:.1f}%")
print("Median final R:", round(stats.median_final_r, 2))
print("Kelly:", round(stats.kelly_full, 2), stats.kelly_recommendation)
insights = generate_insights(result)
print("Quality:", insights.profitability_quality, "| Risk:", insights.risk_assessment)
for suggestion in insights.improvement_suggestions:
    print(" -", suggestion)

profile = RiskManagementProfileForSim(
    name="demo",
    base_risk_cents=10_000,
    reward_risk_ratio=2.0,
    win_rate=45,
    breakeven_rate=5,
    commission_per_trade_cents=500,
    daily_target_cents=30_000,
    loss_recovery_steps=(LossRecoveryStep(10_000), LossRecoveryStep(5_000)),
    compounding_risk_percent=50,
    max_trades_per_day=4,
    limit_mode=LimitMode.R_MULTIPLES,
    daily_loss_limit=3,
    weekly_loss_limit=6,
)
result_v2 = run_monte_carlo_v2(
    SimulationParamsV2(profile=profile, simulation_count=300, initial_balance=1_000_000, months_to_trade=2),
    seed=7,
)
stats_v2 = result_v2.statistics
print("V2 median P&L (cents):", round(stats_v2.median_pnl))
print("V2 avg days in recovery:", round(stats_v2.avg_days_in_loss_recovery, 1))
print("V2 risk of ruin:", f"{stats_v2.risk_of_ruin_percent:.1f}%")
