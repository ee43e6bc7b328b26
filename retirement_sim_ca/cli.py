"""CLI entry point for a single retirement projection."""

import logging
import sys
from pathlib import Path

from retirement_sim_ca.config import build_scenario, parse_args
from retirement_sim_ca.optimizer import OptimizationResult, optimize_spending_to_exhaust
from retirement_sim_ca.params import Scenario
from retirement_sim_ca.reference import load_reference_data
from retirement_sim_ca.scenarios import run_variants
from retirement_sim_ca.simulation import CalculationResults, project


def _add_args(parser):
    parser.add_argument("--reference", type=Path, default=None, help="Tax reference data TOML (default: bundled)")
    parser.add_argument("--optimize", action="store_true", help="Solve for the spending that exhausts the portfolio at longevity age")
    parser.add_argument("--variants", action="store_true", help="Compare what-if variants (front-load, delay CPP/OAS, retire early)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")


def _print_header(scenario: Scenario):
    basic = scenario.basic
    assets = scenario.assets
    income = scenario.income
    expenses = scenario.expenses
    years = basic.longevity_age - basic.current_age + 1
    print("=" * 80)
    print(f"Retirement projection: {scenario.name} ({basic.current_age}-{basic.longevity_age}, {years} years, {basic.province})")
    print(
        f"  Retire at {basic.retirement_age} / RRSP ${assets.rrsp.balance:,.0f}"
        f" / TFSA ${assets.tfsa.balance:,.0f} / Non-registered ${assets.non_registered.balance:,.0f}"
    )
    contributions = (
        assets.rrsp.annual_contribution + assets.tfsa.annual_contribution
        + assets.non_registered.annual_contribution
    )
    if contributions > 0:
        print(f"  Contributions: ${contributions:,.0f}/year until retirement")
    if income.employment:
        print(f"  Employment: ${income.employment.annual_amount:,.0f}/year until {income.employment.until_age}")
    if income.cpp:
        print(f"  CPP: ${income.cpp.monthly_amount_at_65:,.0f}/month at 65, starting at {income.cpp.start_age}")
    if income.oas:
        print(f"  OAS: ${income.oas.monthly_amount:,.0f}/month at 65, starting at {income.oas.start_age}")
    for other in income.other_income:
        start = other.start_age if other.start_age is not None else basic.retirement_age
        until = f" until {other.end_age}" if other.end_age is not None else ""
        print(f"  {other.description}: ${other.annual_amount:,.0f}/year from {start}{until}")
    indexed = "indexed" if expenses.indexed_to_inflation else "not indexed"
    print(f"  Spending: ${expenses.fixed_monthly:,.0f}/month + ${expenses.variable_annual:,.0f}/year ({indexed})")
    for change in expenses.age_based_changes:
        print(f"    from {change.age}: ${change.monthly_amount:,.0f}/month")
    a = scenario.assumptions
    print(
        f"  Returns {a.pre_retirement_return:.1%} / {a.post_retirement_return:.1%}"
        f", inflation {a.inflation_rate:.1%}"
    )
    print("=" * 80)
    print()


def _print_summary(results: CalculationResults):
    print("【Summary】")
    print(f"  Portfolio at retirement:  ${results.portfolio_at_retirement:>14,.0f}")
    print(f"  Final portfolio:          ${results.final_portfolio_value:>14,.0f}")
    print(f"  First-year income:        ${results.first_year_retirement_income:>14,.0f}")
    print(f"  Retirement tax (total):   ${results.total_taxes_paid_in_retirement:>14,.0f}")
    print(f"  Retirement tax (avg/yr):  ${results.average_annual_tax_in_retirement:>14,.0f}")
    print(f"  Average tax rate:         {results.average_tax_rate_in_retirement:>15.1%}")
    print(f"  CPP received:             ${results.total_cpp_received:>14,.0f}")
    print(f"  OAS received:             ${results.total_oas_received:>14,.0f}")
    if results.portfolio_depleted_age is not None:
        print(f"  ⚠ Portfolio depleted at age {results.portfolio_depleted_age}")
    else:
        print("  Portfolio lasts to longevity age")


def _print_yearly_log(results: CalculationResults):
    print("\n【Yearly log (every 5 years)】")
    print("-" * 100)
    print(
        f"{'Age':<5} {'Income':>12} {'Withdrawals':>12} {'Expenses':>12} {'Tax':>10}"
        f" {'RRSP/RRIF':>12} {'TFSA':>12} {'Non-reg':>12} {'Total':>12}"
    )
    print("-" * 100)
    years = results.year_by_year
    for i, y in enumerate(years):
        if i % 5 == 0 or i == len(years) - 1:
            print(
                f"{y.age:<5} "
                f"{y.income.total:>12,.0f} "
                f"{y.withdrawals.total:>12,.0f} "
                f"{y.expenses:>12,.0f} "
                f"{y.tax.total:>10,.0f} "
                f"{y.balances.rrsp_rrif:>12,.0f} "
                f"{y.balances.tfsa:>12,.0f} "
                f"{y.balances.non_registered:>12,.0f} "
                f"{y.balances.total:>12,.0f}"
            )
    print("-" * 100)


def _print_optimization(result: OptimizationResult):
    print("\n【Spend-it-all】")
    print(f"  Monthly spending:  ${result.spending:,.0f} ({result.iterations} iterations)")
    print(f"  Final balance:     ${result.final_balance:,.0f}")
    if result.message:
        print(f"  {result.message}")
    if not result.success:
        print("  ⚠ Could not find spending that lasts to longevity age")


def _print_comparison(all_results: list[CalculationResults]):
    print("\n【What-if comparison】")
    print("-" * 100)
    print(f"{'Scenario':<28} {'Final':>14} {'Depleted':>9} {'Retirement tax':>15} {'CPP+OAS':>14}")
    print("-" * 100)
    for r in all_results:
        depleted = str(r.portfolio_depleted_age) if r.portfolio_depleted_age is not None else "-"
        print(
            f"{r.scenario_name:<28} "
            f"{r.final_portfolio_value:>14,.0f} "
            f"{depleted:>9} "
            f"{r.total_taxes_paid_in_retirement:>15,.0f} "
            f"{r.total_cpp_received + r.total_oas_received:>14,.0f}"
        )
    print("-" * 100)


def main():
    """Run one projection and print summary and yearly log"""
    r, args = parse_args("Canadian retirement projection", _add_args)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        provider = load_reference_data(args.reference)
        scenario = build_scenario(r)
        _print_header(scenario)
        results = project(scenario, provider)
        _print_summary(results)
        _print_yearly_log(results)
        if args.optimize:
            _print_optimization(optimize_spending_to_exhaust(scenario, provider=provider))
        if args.variants:
            _print_comparison(run_variants(scenario, provider))
    except ValueError as e:
        print(f"\n{e}\n", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
