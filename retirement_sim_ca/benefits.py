"""CPP and OAS amounts with start-age adjustment.

Both benefits are quoted at the reference age of 65 and adjusted linearly
per month of early or delayed start:

- CPP (60-70): -0.6%/month before 65, +0.7%/month after 65 (0.64 at 60, 1.42 at 70)
- OAS (65-70): +0.6%/month of deferral, no early option (1.36 at 70)
"""

from dataclasses import dataclass

from retirement_sim_ca.params import (
    CPP_MAX_START_AGE,
    CPP_MIN_START_AGE,
    OAS_MAX_START_AGE,
    OAS_MIN_START_AGE,
)
from retirement_sim_ca.reference import CPP, TaxDataProvider

REFERENCE_AGE = 65
CPP_EARLY_REDUCTION_PER_MONTH = 0.006
CPP_DELAY_ENHANCEMENT_PER_MONTH = 0.007
OAS_DELAY_ENHANCEMENT_PER_MONTH = 0.006


@dataclass(frozen=True)
class AdjustmentFactor:
    age: int
    factor: float
    months_from_65: int


@dataclass(frozen=True)
class BenefitCalculation:
    annual_amount: float
    monthly_amount: float
    start_age: int
    adjustment_factor: float
    base_amount_at_65: float


@dataclass(frozen=True)
class StartAgeComparison:
    optimal_age: int
    total_benefit: float
    # [(start_age, lifetime_total), ...] in start-age order
    comparison: tuple[tuple[int, float], ...]


def cpp_adjustment_factor(age: int) -> AdjustmentFactor:
    """CPP factor for a start age. Raises ValueError outside 60-70."""
    if age < CPP_MIN_START_AGE or age > CPP_MAX_START_AGE:
        raise ValueError(
            f"CPP start age {age} is outside {CPP_MIN_START_AGE}-{CPP_MAX_START_AGE}"
        )
    months = (age - REFERENCE_AGE) * 12
    if age < REFERENCE_AGE:
        factor = 1 + months * CPP_EARLY_REDUCTION_PER_MONTH
    elif age == REFERENCE_AGE:
        factor = 1.0
    else:
        factor = 1 + months * CPP_DELAY_ENHANCEMENT_PER_MONTH
    return AdjustmentFactor(age=age, factor=factor, months_from_65=months)


def oas_adjustment_factor(age: int) -> AdjustmentFactor:
    """OAS factor for a start age. Raises ValueError outside 65-70."""
    if age < OAS_MIN_START_AGE or age > OAS_MAX_START_AGE:
        raise ValueError(
            f"OAS start age {age} is outside {OAS_MIN_START_AGE}-{OAS_MAX_START_AGE}"
        )
    months = (age - REFERENCE_AGE) * 12
    return AdjustmentFactor(age=age, factor=1 + months * OAS_DELAY_ENHANCEMENT_PER_MONTH, months_from_65=months)


def _apply(base_monthly: float, adjustment: AdjustmentFactor) -> BenefitCalculation:
    monthly = base_monthly * adjustment.factor
    return BenefitCalculation(
        annual_amount=monthly * 12,
        monthly_amount=monthly,
        start_age=adjustment.age,
        adjustment_factor=adjustment.factor,
        base_amount_at_65=base_monthly,
    )


def calculate_cpp(base_monthly_at_65: float, start_age: int) -> BenefitCalculation:
    return _apply(base_monthly_at_65, cpp_adjustment_factor(start_age))


def calculate_oas(base_monthly_at_65: float, start_age: int) -> BenefitCalculation:
    return _apply(base_monthly_at_65, oas_adjustment_factor(start_age))


def estimate_cpp_from_earnings(
    provider: TaxDataProvider, average_annual_earnings: float, year: int,
) -> float:
    """Rough monthly CPP at 65 from average career earnings.

    Proportional to earnings below the YMPE, capped at the maximum above it.
    Ignores contributory years and drop-out provisions; an approximation only.
    """
    cpp = provider.get_benefit_reference_amounts(CPP, year)
    if average_annual_earnings >= cpp["ympe"]:
        return cpp["max_monthly"]
    ratio = max(0.0, average_annual_earnings) / cpp["ympe"]
    return cpp["max_monthly"] * ratio


def _find_optimal_start_age(base_monthly_at_65: float, expected_longevity: int,
                            ages: range, factor_fn) -> StartAgeComparison:
    # Undiscounted, pre-tax lifetime totals
    comparison = []
    for start_age in ages:
        monthly = base_monthly_at_65 * factor_fn(start_age).factor
        comparison.append((start_age, monthly * 12 * (expected_longevity - start_age)))
    optimal_age, total = comparison[0]
    for age, benefit in comparison[1:]:
        if benefit > total:
            optimal_age, total = age, benefit
    return StartAgeComparison(optimal_age=optimal_age, total_benefit=total, comparison=tuple(comparison))


def find_optimal_cpp_start_age(base_monthly_at_65: float, expected_longevity: int) -> StartAgeComparison:
    """Start age (60-70) that maximises total CPP received up to expected_longevity."""
    return _find_optimal_start_age(
        base_monthly_at_65, expected_longevity,
        range(CPP_MIN_START_AGE, CPP_MAX_START_AGE + 1), cpp_adjustment_factor,
    )


def find_optimal_oas_start_age(base_monthly_at_65: float, expected_longevity: int) -> StartAgeComparison:
    """Start age (65-70) that maximises total OAS received up to expected_longevity."""
    return _find_optimal_start_age(
        base_monthly_at_65, expected_longevity,
        range(OAS_MIN_START_AGE, OAS_MAX_START_AGE + 1), oas_adjustment_factor,
    )
