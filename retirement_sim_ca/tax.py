"""Federal and provincial income tax, credits and OAS recovery tax."""

from dataclasses import dataclass, field

from retirement_sim_ca.reference import FEDERAL, OAS, TaxBracket, TaxDataProvider

AGE_CREDIT_AGE = 65  # Age amount eligibility
CAPITAL_GAINS_INCLUSION_RATE = 0.5
DIVIDEND_GROSS_UP = 1.38  # Eligible Canadian dividends


@dataclass(frozen=True)
class BracketDetail:
    bracket_index: int
    income_in_bracket: float
    rate: float
    tax_in_bracket: float


@dataclass(frozen=True)
class ProgressiveTax:
    total: float
    marginal_rate: float
    details: tuple[BracketDetail, ...] = ()


@dataclass(frozen=True)
class TaxCalculation:
    """Tax for one jurisdiction. total is net of non-refundable credits."""

    total: float
    gross_tax: float
    credits: float
    marginal_rate: float
    average_rate: float
    bracket_details: tuple[BracketDetail, ...] = ()


@dataclass(frozen=True)
class IncomeAmounts:
    """Amounts received in a year, before applying tax treatment."""

    rrsp_rrif: float = 0.0
    tfsa: float = 0.0
    capital_gains: float = 0.0
    canadian_dividends: float = 0.0
    cpp: float = 0.0
    oas: float = 0.0
    employment: float = 0.0
    pension: float = 0.0
    other: float = 0.0


@dataclass(frozen=True)
class TaxableIncome:
    rrsp_rrif: float = 0.0
    capital_gains: float = 0.0
    canadian_dividends: float = 0.0
    cpp: float = 0.0
    oas: float = 0.0
    employment: float = 0.0
    pension: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.rrsp_rrif
            + self.capital_gains
            + self.canadian_dividends
            + self.cpp
            + self.oas
            + self.employment
            + self.pension
            + self.other
        )


@dataclass(frozen=True)
class TaxBreakdown:
    total_tax: float
    federal: TaxCalculation
    provincial: TaxCalculation
    oas_clawback: float
    combined_marginal_rate: float
    taxable_income: TaxableIncome = field(default_factory=TaxableIncome)


def calc_progressive_tax(income: float, brackets: list[TaxBracket]) -> ProgressiveTax:
    """Tax each slice of income at its own bracket's rate.

    brackets must be sorted by ascending limit; the last may have limit None.
    Income <= 0 returns zero tax and zero marginal rate.
    """
    if income <= 0:
        return ProgressiveTax(total=0.0, marginal_rate=0.0)

    remaining = income
    total = 0.0
    marginal_rate = 0.0
    details = []
    previous_limit = 0.0

    for i, bracket in enumerate(brackets):
        if bracket.limit is None:
            income_in_bracket = remaining
        else:
            income_in_bracket = min(remaining, bracket.limit - previous_limit)
            previous_limit = bracket.limit
        if income_in_bracket <= 0:
            break

        tax_in_bracket = income_in_bracket * bracket.rate
        total += tax_in_bracket
        marginal_rate = bracket.rate
        details.append(BracketDetail(i, income_in_bracket, bracket.rate, tax_in_bracket))

        remaining -= income_in_bracket
        if remaining <= 0:
            break

    return ProgressiveTax(total=total, marginal_rate=marginal_rate, details=tuple(details))


def calc_age_credit_amount(taxable_income: float, max_credit: float,
                           income_threshold: float, reduction_rate: float) -> float:
    """Age amount after the income test (before applying the credit rate)."""
    if taxable_income <= income_threshold:
        return max_credit
    reduction = (taxable_income - income_threshold) * reduction_rate
    return max(0.0, max_credit - reduction)


def calc_jurisdiction_tax(
    provider: TaxDataProvider,
    taxable_income: float,
    jurisdiction: str,
    age: int,
    year: int,
) -> TaxCalculation:
    """Net tax for one jurisdiction: brackets minus basic and age credits.

    Credits are valued at the jurisdiction's lowest bracket rate.
    Net tax never goes below zero.
    """
    brackets = provider.get_bracket_table(jurisdiction, year)
    gross = calc_progressive_tax(taxable_income, brackets)
    credit_rate = brackets[0].rate

    credits = provider.get_basic_credit(year, jurisdiction) * credit_rate
    if age >= AGE_CREDIT_AGE:
        age_credit = provider.get_age_credit(year, jurisdiction)
        if age_credit is not None:
            amount = calc_age_credit_amount(
                taxable_income,
                age_credit.max_credit,
                age_credit.income_threshold,
                age_credit.reduction_rate,
            )
            credits += amount * credit_rate

    net = max(0.0, gross.total - credits)
    return TaxCalculation(
        total=net,
        gross_tax=gross.total,
        credits=credits,
        marginal_rate=gross.marginal_rate,
        average_rate=net / taxable_income if taxable_income > 0 else 0.0,
        bracket_details=gross.details,
    )


def calc_federal_tax(provider: TaxDataProvider, taxable_income: float, age: int, year: int) -> TaxCalculation:
    return calc_jurisdiction_tax(provider, taxable_income, FEDERAL, age, year)


def calc_provincial_tax(
    provider: TaxDataProvider, taxable_income: float, province: str, age: int, year: int,
) -> TaxCalculation:
    return calc_jurisdiction_tax(provider, taxable_income, province, age, year)


def calc_taxable_income(incomes: IncomeAmounts) -> TaxableIncome:
    """Apply tax treatment per source.

    RRSP/RRIF, CPP, OAS, employment, pension, other: 100%.
    TFSA: 0%. Capital gains: 50% inclusion. Dividends: 38% gross-up.
    """
    return TaxableIncome(
        rrsp_rrif=incomes.rrsp_rrif,
        capital_gains=incomes.capital_gains * CAPITAL_GAINS_INCLUSION_RATE,
        canadian_dividends=incomes.canadian_dividends * DIVIDEND_GROSS_UP,
        cpp=incomes.cpp,
        oas=incomes.oas,
        employment=incomes.employment,
        pension=incomes.pension,
        other=incomes.other,
    )


def calc_oas_clawback(gross_income: float, oas_amount: float,
                      threshold: float, recovery_rate: float) -> float:
    """OAS recovery tax, capped at the OAS actually received."""
    if gross_income <= threshold or oas_amount <= 0:
        return 0.0
    clawback = (gross_income - threshold) * recovery_rate
    return min(clawback, oas_amount)


def calc_total_tax(
    provider: TaxDataProvider,
    incomes: IncomeAmounts,
    province: str,
    age: int,
    year: int,
) -> TaxBreakdown:
    """Federal + provincial net tax + OAS recovery tax.

    combined_marginal_rate is the plain sum of both jurisdictions' marginal rates.
    """
    taxable = calc_taxable_income(incomes)
    federal = calc_federal_tax(provider, taxable.total, age, year)
    provincial = calc_provincial_tax(provider, taxable.total, province, age, year)

    oas_clawback = 0.0
    if incomes.oas > 0:
        oas_data = provider.get_benefit_reference_amounts(OAS, year)
        oas_clawback = calc_oas_clawback(
            taxable.total, incomes.oas,
            oas_data["clawback_threshold"], oas_data["clawback_rate"],
        )

    return TaxBreakdown(
        total_tax=federal.total + provincial.total + oas_clawback,
        federal=federal,
        provincial=provincial,
        oas_clawback=oas_clawback,
        combined_marginal_rate=federal.marginal_rate + provincial.marginal_rate,
        taxable_income=taxable,
    )
