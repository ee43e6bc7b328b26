"""Year-by-year retirement projection: accumulation then drawdown."""

import logging
from dataclasses import dataclass

from retirement_sim_ca.accounts import (
    AccountBalances,
    WithdrawalAmounts,
    minimum_withdrawal,
    project_year,
)
from retirement_sim_ca.benefits import calculate_cpp, calculate_oas
from retirement_sim_ca.params import Scenario, inflation_factor, validate_scenario
from retirement_sim_ca.reference import TaxDataProvider, default_reference_data
from retirement_sim_ca.tax import IncomeAmounts, TaxBreakdown, calc_total_tax

logger = logging.getLogger(__name__)

ACCUMULATION = "accumulation"
DRAWDOWN = "drawdown"


class ScenarioError(ValueError):
    """A scenario could not be projected. Carries the scenario name."""

    def __init__(self, scenario_name: str, message: str):
        super().__init__(f"{scenario_name}: {message}")
        self.scenario_name = scenario_name


@dataclass(frozen=True)
class YearIncome:
    employment: float = 0.0
    cpp: float = 0.0
    oas: float = 0.0
    other: float = 0.0
    # Portfolio withdrawals, all accounts
    investment: float = 0.0

    @property
    def total(self) -> float:
        return self.employment + self.cpp + self.oas + self.other + self.investment


@dataclass(frozen=True)
class YearTax:
    federal_gross: float = 0.0
    federal_credits: float = 0.0
    federal: float = 0.0
    provincial_gross: float = 0.0
    provincial_credits: float = 0.0
    provincial: float = 0.0
    oas_clawback: float = 0.0
    total: float = 0.0
    marginal_rate: float = 0.0
    effective_rate: float = 0.0
    taxable_income: float = 0.0

    @classmethod
    def zero(cls) -> "YearTax":
        return cls()


@dataclass(frozen=True)
class YearResult:
    year: int
    age: int
    phase: str
    starting_balance: AccountBalances
    contributions: AccountBalances
    investment_returns: AccountBalances
    withdrawals: WithdrawalAmounts
    balances: AccountBalances
    income: YearIncome
    tax: YearTax
    expenses: float
    net_cash_flow: float
    cost_basis: float = 0.0


@dataclass(frozen=True)
class CalculationResults:
    scenario_name: str
    success: bool
    final_portfolio_value: float
    portfolio_depleted_age: int | None
    first_year_retirement_income: float
    average_tax_rate_in_retirement: float
    total_taxes_paid_in_retirement: float
    average_annual_tax_in_retirement: float
    total_cpp_received: float
    total_oas_received: float
    portfolio_at_retirement: float
    year_by_year: tuple[YearResult, ...] = ()


def _indexed(amount: float, rate: float, age: int, start_age: int, indexed: bool = True) -> float:
    """amount at age, indexed from start_age. 0 before start_age."""
    if age < start_age:
        return 0.0
    if not indexed:
        return amount
    return amount * inflation_factor(rate, age - start_age)


def _other_income(scenario: Scenario, age: int) -> float:
    total = 0.0
    rate = scenario.assumptions.inflation_rate
    for source in scenario.income.other_income:
        start = source.start_age if source.start_age is not None else scenario.basic.retirement_age
        if source.end_age is not None and age >= source.end_age:
            continue
        total += _indexed(source.annual_amount, rate, age, start, source.indexed_to_inflation)
    return total


def _employment_income(scenario: Scenario, age: int) -> float:
    employment = scenario.income.employment
    if employment is None or age >= employment.until_age:
        return 0.0
    return employment.annual_amount


def _benefit_bases(scenario: Scenario) -> tuple[float, float]:
    """Annual CPP and OAS at their chosen start ages (before indexing)."""
    cpp = scenario.income.cpp
    oas = scenario.income.oas
    cpp_annual = calculate_cpp(cpp.monthly_amount_at_65, cpp.start_age).annual_amount if cpp else 0.0
    oas_annual = calculate_oas(oas.monthly_amount, oas.start_age).annual_amount if oas else 0.0
    return cpp_annual, oas_annual


def _annual_expenses(scenario: Scenario, age: int, previous: float | None) -> float:
    """Spending for a drawdown year. previous is None for the first drawdown year."""
    expenses = scenario.expenses
    if previous is None:
        annual = expenses.annual
    elif expenses.indexed_to_inflation:
        annual = previous * (1 + scenario.assumptions.inflation_rate)
    else:
        annual = previous
    change = expenses.change_at(age)
    if change is not None:
        annual = change.monthly_amount * 12
    return annual


def _year_tax(breakdown: TaxBreakdown) -> YearTax:
    taxable = breakdown.taxable_income.total
    return YearTax(
        federal_gross=breakdown.federal.gross_tax,
        federal_credits=breakdown.federal.credits,
        federal=breakdown.federal.total,
        provincial_gross=breakdown.provincial.gross_tax,
        provincial_credits=breakdown.provincial.credits,
        provincial=breakdown.provincial.total,
        oas_clawback=breakdown.oas_clawback,
        total=breakdown.total_tax,
        marginal_rate=breakdown.combined_marginal_rate,
        effective_rate=breakdown.total_tax / taxable if taxable > 0 else 0.0,
        taxable_income=taxable,
    )


def summarize(scenario_name: str, years: list[YearResult]) -> CalculationResults:
    """Derive summary figures from the yearly results."""
    retirement = [y for y in years if y.phase == DRAWDOWN]
    depleted_age = None
    for y in retirement:
        if y.balances.total <= 0:
            depleted_age = y.age
            break

    total_tax = sum(y.tax.total for y in retirement)
    retirement_income = sum(y.income.total for y in retirement)
    return CalculationResults(
        scenario_name=scenario_name,
        success=depleted_age is None,
        final_portfolio_value=years[-1].balances.total if years else 0.0,
        portfolio_depleted_age=depleted_age,
        first_year_retirement_income=retirement[0].income.total if retirement else 0.0,
        average_tax_rate_in_retirement=total_tax / retirement_income if retirement_income > 0 else 0.0,
        total_taxes_paid_in_retirement=total_tax,
        average_annual_tax_in_retirement=total_tax / len(retirement) if retirement else 0.0,
        total_cpp_received=sum(y.income.cpp for y in years),
        total_oas_received=sum(y.income.oas for y in years),
        portfolio_at_retirement=(
            retirement[0].starting_balance.total if retirement
            else (years[-1].balances.total if years else 0.0)
        ),
        year_by_year=tuple(years),
    )


def project(scenario: Scenario, provider: TaxDataProvider | None = None) -> CalculationResults:
    """Run one scenario from current age to longevity age.

    Raises ScenarioError on invalid input or missing reference data.
    """
    if provider is None:
        provider = default_reference_data()

    errors = validate_scenario(scenario)
    if errors:
        raise ScenarioError(scenario.name, "; ".join(errors))

    try:
        years = _run(scenario, provider)
    except ScenarioError:
        raise
    except ValueError as e:
        raise ScenarioError(scenario.name, str(e)) from e

    results = summarize(scenario.name, years)
    logger.debug(
        f"[{scenario.name}] {len(years)} years, final ${results.final_portfolio_value:,.0f}, "
        f"depleted at {results.portfolio_depleted_age}"
    )
    return results


def _run(scenario: Scenario, provider: TaxDataProvider) -> list[YearResult]:
    basic = scenario.basic
    assets = scenario.assets
    assumptions = scenario.assumptions
    inflation = assumptions.inflation_rate
    tax_year = basic.start_year

    cpp_base, oas_base = _benefit_bases(scenario)
    cpp_start = scenario.income.cpp.start_age if scenario.income.cpp else None
    oas_start = scenario.income.oas.start_age if scenario.income.oas else None

    balances = AccountBalances(
        rrsp_rrif=assets.rrsp.balance,
        tfsa=assets.tfsa.balance,
        non_registered=assets.non_registered.balance,
    )
    contributions = AccountBalances(
        rrsp_rrif=assets.rrsp.annual_contribution,
        tfsa=assets.tfsa.annual_contribution,
        non_registered=assets.non_registered.annual_contribution,
    )
    cost_basis = assets.non_registered.cost_base
    if cost_basis is None:
        cost_basis = assets.non_registered.balance

    years: list[YearResult] = []
    annual_expenses: float | None = None

    for age in range(basic.current_age, basic.longevity_age + 1):
        year = basic.start_year + (age - basic.current_age)
        drawing_down = age >= basic.retirement_age

        cpp = _indexed(cpp_base, inflation, age, cpp_start) if cpp_start is not None else 0.0
        oas = _indexed(oas_base, inflation, age, oas_start) if oas_start is not None else 0.0
        other = _other_income(scenario, age)
        employment = _employment_income(scenario, age)

        if not drawing_down:
            projection = project_year(
                provider, balances, age, False, assumptions.pre_retirement_return,
                contributions=contributions, cost_basis=cost_basis,
            )
            expenses = 0.0
            tax = YearTax.zero()
            income = YearIncome(employment=employment, cpp=cpp, oas=oas, other=other)
            net_cash_flow = 0.0
        else:
            annual_expenses = _annual_expenses(scenario, age, annual_expenses)
            expenses = annual_expenses
            target = max(0.0, expenses - (cpp + oas + other + employment))
            projection = project_year(
                provider, balances, age, True, assumptions.post_retirement_return,
                target_withdrawal=target, cost_basis=cost_basis,
            )
            withdrawals = projection.withdrawals
            breakdown = calc_total_tax(
                provider,
                IncomeAmounts(
                    rrsp_rrif=withdrawals.rrsp_rrif,
                    tfsa=withdrawals.tfsa,
                    capital_gains=withdrawals.capital_gains,
                    cpp=cpp,
                    oas=oas,
                    employment=employment,
                    other=other,
                ),
                basic.province, age, tax_year,
            )
            tax = _year_tax(breakdown)
            income = YearIncome(
                employment=employment, cpp=cpp, oas=oas, other=other,
                investment=withdrawals.total,
            )
            net_cash_flow = income.total - expenses - tax.total

        years.append(YearResult(
            year=year,
            age=age,
            phase=DRAWDOWN if drawing_down else ACCUMULATION,
            starting_balance=projection.starting_balance,
            contributions=projection.contributions,
            investment_returns=projection.investment_returns,
            withdrawals=projection.withdrawals,
            balances=projection.ending_balance,
            income=income,
            tax=tax,
            expenses=expenses,
            net_cash_flow=net_cash_flow,
            cost_basis=projection.cost_basis,
        ))
        balances = projection.ending_balance
        cost_basis = projection.cost_basis

        if drawing_down and balances.total <= 0:
            logger.debug(f"[{scenario.name}] portfolio depleted at age {age}")
            break

    return years


def required_minimum(provider: TaxDataProvider, result: YearResult) -> float:
    """Mandatory RRIF withdrawal for a year's starting balance."""
    return minimum_withdrawal(provider, result.starting_balance.rrsp_rrif, result.age)


def compare(scenarios: list[Scenario], provider: TaxDataProvider | None = None) -> list[CalculationResults]:
    """Project each scenario independently, preserving input order."""
    if provider is None:
        provider = default_reference_data()
    return [project(s, provider) for s in scenarios]
