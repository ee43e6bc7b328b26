"""Scenario parameters and inflation helpers."""

from dataclasses import dataclass, field

PROVINCES: tuple[str, ...] = (
    "AB", "BC", "MB", "NB", "NL", "NT", "NS", "NU", "ON", "PE", "QC", "SK", "YT",
)

# Government benefit start-age windows
CPP_MIN_START_AGE = 60
CPP_MAX_START_AGE = 70
OAS_MIN_START_AGE = 65
OAS_MAX_START_AGE = 70


def inflation_factor(rate: float, years: float) -> float:
    """Cumulative indexing factor (1 + rate) ** years."""
    return (1 + rate) ** years


@dataclass(frozen=True)
class BasicInputs:
    current_age: int
    retirement_age: int
    longevity_age: int
    province: str = "ON"
    # Calendar year at current_age; also the reference-data year for the run
    start_year: int = 2025


@dataclass(frozen=True)
class AccountDetails:
    balance: float = 0.0
    annual_contribution: float = 0.0
    # Not read by the projection; phase returns come from Assumptions
    rate_of_return: float = 0.05
    # Taxable account only. None = starting balance is the basis; 0 = unknown (50% gain)
    cost_base: float | None = None


@dataclass(frozen=True)
class Assets:
    rrsp: AccountDetails = field(default_factory=AccountDetails)
    tfsa: AccountDetails = field(default_factory=AccountDetails)
    non_registered: AccountDetails = field(default_factory=AccountDetails)

    @property
    def total(self) -> float:
        return self.rrsp.balance + self.tfsa.balance + self.non_registered.balance


@dataclass(frozen=True)
class CPPDetails:
    start_age: int = 65
    monthly_amount_at_65: float = 0.0


@dataclass(frozen=True)
class OASDetails:
    start_age: int = 65
    monthly_amount: float = 0.0


@dataclass(frozen=True)
class EmploymentIncome:
    annual_amount: float
    until_age: int


@dataclass(frozen=True)
class OtherIncome:
    """Pension, rental or other recurring income.

    start_age None = starts at retirement. end_age is exclusive; None = for life.
    """

    description: str
    annual_amount: float
    start_age: int | None = None
    end_age: int | None = None
    indexed_to_inflation: bool = True


@dataclass(frozen=True)
class IncomeSources:
    employment: EmploymentIncome | None = None
    cpp: CPPDetails | None = None
    oas: OASDetails | None = None
    other_income: tuple[OtherIncome, ...] = ()


@dataclass(frozen=True)
class ExpenseChange:
    """Replace annual spending with monthly_amount × 12 from this age on."""

    age: int
    monthly_amount: float


@dataclass(frozen=True)
class Expenses:
    fixed_monthly: float
    variable_annual: float = 0.0
    indexed_to_inflation: bool = True
    age_based_changes: tuple[ExpenseChange, ...] = ()

    @property
    def annual(self) -> float:
        return self.fixed_monthly * 12 + self.variable_annual

    def change_at(self, age: int) -> ExpenseChange | None:
        for change in self.age_based_changes:
            if change.age == age:
                return change
        return None


@dataclass(frozen=True)
class Assumptions:
    pre_retirement_return: float = 0.06
    post_retirement_return: float = 0.05
    inflation_rate: float = 0.025


@dataclass(frozen=True)
class Scenario:
    name: str
    basic: BasicInputs
    assets: Assets = field(default_factory=Assets)
    income: IncomeSources = field(default_factory=IncomeSources)
    expenses: Expenses = field(default_factory=lambda: Expenses(fixed_monthly=0.0))
    assumptions: Assumptions = field(default_factory=Assumptions)


def validate_scenario(scenario: Scenario) -> list[str]:
    """Validate scenario inputs. Returns list of error messages."""
    errors = []
    basic = scenario.basic

    if basic.province not in PROVINCES:
        errors.append(f"Unknown province '{basic.province}' (expected one of {', '.join(PROVINCES)})")
    if basic.current_age < 0:
        errors.append(f"Current age {basic.current_age} must not be negative")
    if basic.retirement_age > basic.longevity_age:
        errors.append(
            f"Retirement age {basic.retirement_age} is after longevity age {basic.longevity_age}"
        )

    for label, account in [
        ("RRSP/RRIF", scenario.assets.rrsp),
        ("TFSA", scenario.assets.tfsa),
        ("Non-registered", scenario.assets.non_registered),
    ]:
        if account.balance < 0:
            errors.append(f"{label} balance {account.balance:,.0f} must not be negative")
        if account.annual_contribution < 0:
            errors.append(f"{label} contribution {account.annual_contribution:,.0f} must not be negative")
    cost_base = scenario.assets.non_registered.cost_base
    if cost_base is not None and cost_base < 0:
        errors.append(f"Non-registered cost base {cost_base:,.0f} must not be negative")

    cpp = scenario.income.cpp
    if cpp is not None and not CPP_MIN_START_AGE <= cpp.start_age <= CPP_MAX_START_AGE:
        errors.append(
            f"CPP start age {cpp.start_age} is outside {CPP_MIN_START_AGE}-{CPP_MAX_START_AGE}"
        )
    oas = scenario.income.oas
    if oas is not None and not OAS_MIN_START_AGE <= oas.start_age <= OAS_MAX_START_AGE:
        errors.append(
            f"OAS start age {oas.start_age} is outside {OAS_MIN_START_AGE}-{OAS_MAX_START_AGE}"
        )

    if scenario.expenses.fixed_monthly < 0 or scenario.expenses.variable_annual < 0:
        errors.append("Expenses must not be negative")

    return errors
