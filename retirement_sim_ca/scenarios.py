"""What-if scenario variants and multi-scenario execution."""

import dataclasses

from retirement_sim_ca.params import ExpenseChange, Scenario
from retirement_sim_ca.reference import TaxDataProvider
from retirement_sim_ca.simulation import CalculationResults, compare

# Go-go / slow-go / no-go spending as multiples of baseline monthly spending
FRONT_LOAD_PHASES = (
    (0, 1.30),
    (10, 0.85),
    (20, 0.75),
)
DELAYED_BENEFIT_START_AGE = 70
RETIRE_EARLY_YEARS = 3


def front_load_variant(base: Scenario) -> Scenario:
    """Spend more early in retirement, less later."""
    baseline = base.expenses.fixed_monthly
    retirement_age = base.basic.retirement_age
    changes = tuple(
        ExpenseChange(age=retirement_age + offset, monthly_amount=baseline * multiplier)
        for offset, multiplier in FRONT_LOAD_PHASES
    )
    return dataclasses.replace(
        base,
        name="Front-Load the Fun",
        expenses=dataclasses.replace(base.expenses, age_based_changes=changes),
    )


def delay_benefits_variant(base: Scenario) -> Scenario:
    """Start CPP and OAS at 70. Sources the base does not have stay absent."""
    income = base.income
    cpp = dataclasses.replace(income.cpp, start_age=DELAYED_BENEFIT_START_AGE) if income.cpp else None
    oas = dataclasses.replace(income.oas, start_age=DELAYED_BENEFIT_START_AGE) if income.oas else None
    return dataclasses.replace(
        base,
        name="Delay CPP/OAS to 70",
        income=dataclasses.replace(income, cpp=cpp, oas=oas),
    )


def retire_early_variant(base: Scenario, years: int = RETIRE_EARLY_YEARS) -> Scenario:
    return dataclasses.replace(
        base,
        name=f"Retire {years} Years Earlier",
        basic=dataclasses.replace(base.basic, retirement_age=base.basic.retirement_age - years),
    )


def build_variants(base: Scenario) -> list[Scenario]:
    """Base scenario followed by each what-if variant."""
    return [
        base,
        front_load_variant(base),
        delay_benefits_variant(base),
        retire_early_variant(base),
    ]


def run_variants(base: Scenario, provider: TaxDataProvider | None = None) -> list[CalculationResults]:
    return compare(build_variants(base), provider)
