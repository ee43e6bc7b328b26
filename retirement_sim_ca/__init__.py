"""Canadian Retirement Projection Package."""

from retirement_sim_ca.params import (
    AccountDetails,
    Assets,
    Assumptions,
    BasicInputs,
    CPPDetails,
    EmploymentIncome,
    ExpenseChange,
    Expenses,
    IncomeSources,
    OASDetails,
    OtherIncome,
    Scenario,
    PROVINCES,
    inflation_factor,
    validate_scenario,
)
from retirement_sim_ca.reference import (
    AgeCredit,
    ReferenceData,
    ReferenceDataError,
    TaxBracket,
    TaxDataProvider,
    default_reference_data,
    load_reference_data,
)
from retirement_sim_ca.tax import (
    IncomeAmounts,
    TaxBreakdown,
    TaxCalculation,
    calc_federal_tax,
    calc_oas_clawback,
    calc_progressive_tax,
    calc_provincial_tax,
    calc_taxable_income,
    calc_total_tax,
)
from retirement_sim_ca.benefits import (
    BenefitCalculation,
    StartAgeComparison,
    calculate_cpp,
    calculate_oas,
    cpp_adjustment_factor,
    estimate_cpp_from_earnings,
    find_optimal_cpp_start_age,
    find_optimal_oas_start_age,
    oas_adjustment_factor,
)
from retirement_sim_ca.accounts import (
    AccountBalances,
    AccountProjection,
    WithdrawalAmounts,
    calc_withdrawal_sequence,
    minimum_withdrawal,
    project_account_growth,
    project_year,
)
from retirement_sim_ca.simulation import (
    CalculationResults,
    ScenarioError,
    YearIncome,
    YearResult,
    YearTax,
    compare,
    project,
)
from retirement_sim_ca.optimizer import OptimizationResult, optimize_spending_to_exhaust
from retirement_sim_ca.scenarios import (
    build_variants,
    delay_benefits_variant,
    front_load_variant,
    retire_early_variant,
    run_variants,
)

__all__ = [
    "AccountDetails",
    "Assets",
    "Assumptions",
    "BasicInputs",
    "CPPDetails",
    "EmploymentIncome",
    "ExpenseChange",
    "Expenses",
    "IncomeSources",
    "OASDetails",
    "OtherIncome",
    "Scenario",
    "PROVINCES",
    "inflation_factor",
    "validate_scenario",
    "AgeCredit",
    "ReferenceData",
    "ReferenceDataError",
    "TaxBracket",
    "TaxDataProvider",
    "default_reference_data",
    "load_reference_data",
    "IncomeAmounts",
    "TaxBreakdown",
    "TaxCalculation",
    "calc_federal_tax",
    "calc_oas_clawback",
    "calc_progressive_tax",
    "calc_provincial_tax",
    "calc_taxable_income",
    "calc_total_tax",
    "BenefitCalculation",
    "StartAgeComparison",
    "calculate_cpp",
    "calculate_oas",
    "cpp_adjustment_factor",
    "estimate_cpp_from_earnings",
    "find_optimal_cpp_start_age",
    "find_optimal_oas_start_age",
    "oas_adjustment_factor",
    "AccountBalances",
    "AccountProjection",
    "WithdrawalAmounts",
    "calc_withdrawal_sequence",
    "minimum_withdrawal",
    "project_account_growth",
    "project_year",
    "CalculationResults",
    "ScenarioError",
    "YearIncome",
    "YearResult",
    "YearTax",
    "compare",
    "project",
    "OptimizationResult",
    "optimize_spending_to_exhaust",
    "build_variants",
    "delay_benefits_variant",
    "front_load_variant",
    "retire_early_variant",
    "run_variants",
]
