"""Binary search for the monthly spending that runs the portfolio down at longevity age."""

import logging
from dataclasses import dataclass, replace

from retirement_sim_ca.params import Scenario
from retirement_sim_ca.reference import TaxDataProvider, default_reference_data
from retirement_sim_ca.simulation import CalculationResults, project

logger = logging.getLogger(__name__)

SPENDING_TOLERANCE = 10.0  # $/month search interval width
# Search bands as multiples of baseline monthly spending
LOWER_BAND = (0.5, 1.0)  # baseline already depletes early
UPPER_BAND = (0.8, 3.0)  # baseline lasts


@dataclass(frozen=True)
class OptimizationResult:
    spending: float
    iterations: int
    final_balance: float
    success: bool
    message: str = ""
    depleted_age: int | None = None


def with_spending(scenario: Scenario, monthly: float) -> Scenario:
    """Copy of scenario with fixed monthly spending replaced."""
    return replace(scenario, expenses=replace(scenario.expenses, fixed_monthly=monthly))


def _reaches(results: CalculationResults, longevity_age: int) -> bool:
    depleted = results.portfolio_depleted_age
    return depleted is None or depleted >= longevity_age


def optimize_spending_to_exhaust(
    scenario: Scenario,
    tolerance: float = 10_000,
    max_iterations: int = 15,
    provider: TaxDataProvider | None = None,
) -> OptimizationResult:
    """Find the highest fixed monthly spending that still reaches longevity age.

    If baseline spending depletes early, search 50%-100% of baseline for the
    highest sustainable level. Otherwise search 80%-300% of baseline for the
    level that depletes within a year of longevity age or leaves no more than
    tolerance. Running out of iterations is not an error: the best estimate is
    returned with its iteration count and success says whether it lasts.
    """
    if provider is None:
        provider = default_reference_data()

    baseline = scenario.expenses.fixed_monthly
    longevity_age = scenario.basic.longevity_age
    iterations = 0

    baseline_results = project(scenario, provider)
    depleted = baseline_results.portfolio_depleted_age

    if depleted is not None and depleted < longevity_age:
        low, high = baseline * LOWER_BAND[0], baseline * LOWER_BAND[1]
        logger.debug(f"Baseline ${baseline:,.0f}/mo depletes at {depleted}; searching [{low:,.0f}, {high:,.0f}]")

        while high - low > SPENDING_TOLERANCE and iterations < max_iterations:
            mid = (low + high) / 2
            results = project(with_spending(scenario, mid), provider)
            iterations += 1
            logger.debug(f"  iteration {iterations}: ${mid:,.0f}/mo -> depleted at {results.portfolio_depleted_age}")
            if _reaches(results, longevity_age):
                low = mid
            else:
                high = mid

        # low is the highest spending seen to last (or the band floor)
        spending = low
        final = project(with_spending(scenario, spending), provider)
        return OptimizationResult(
            spending=spending,
            iterations=iterations,
            final_balance=final.final_portfolio_value,
            success=_reaches(final, longevity_age),
            message=(
                f"Current spending exhausts the portfolio at age {depleted}. "
                f"To reach age {longevity_age}, reduce spending to ${spending:,.0f}/month."
            ),
            depleted_age=final.portfolio_depleted_age,
        )

    low, high = baseline * UPPER_BAND[0], baseline * UPPER_BAND[1]
    logger.debug(f"Baseline ${baseline:,.0f}/mo lasts; searching [{low:,.0f}, {high:,.0f}]")

    while high - low > SPENDING_TOLERANCE and iterations < max_iterations:
        mid = (low + high) / 2
        results = project(with_spending(scenario, mid), provider)
        iterations += 1
        depleted = results.portfolio_depleted_age
        final_balance = results.final_portfolio_value
        logger.debug(
            f"  iteration {iterations}: ${mid:,.0f}/mo -> depleted at {depleted}, balance ${final_balance:,.0f}"
        )

        if depleted is not None:
            if depleted < longevity_age:
                high = mid
                continue
            if abs(depleted - longevity_age) <= 1:
                return OptimizationResult(
                    spending=mid,
                    iterations=iterations,
                    final_balance=final_balance,
                    success=True,
                    message=f"Spending ${mid:,.0f}/month depletes the portfolio at age {depleted}.",
                    depleted_age=depleted,
                )
            low = mid
        else:
            if final_balance <= tolerance:
                return OptimizationResult(
                    spending=mid,
                    iterations=iterations,
                    final_balance=final_balance,
                    success=True,
                    message=f"Spending ${mid:,.0f}/month leaves ${final_balance:,.0f} at age {longevity_age}.",
                )
            low = mid

    spending = (low + high) / 2
    final = project(with_spending(scenario, spending), provider)
    logger.debug(f"Search ended at ${spending:,.0f}/mo after {iterations} iterations")
    return OptimizationResult(
        spending=spending,
        iterations=iterations,
        final_balance=final.final_portfolio_value,
        success=_reaches(final, longevity_age),
        message=f"Best estimate after {iterations} iterations: ${spending:,.0f}/month.",
        depleted_age=final.portfolio_depleted_age,
    )
