"""Tests for tax calculation functions."""

import pytest

from retirement_sim_ca.reference import TaxBracket, default_reference_data
from retirement_sim_ca.tax import (
    IncomeAmounts,
    calc_age_credit_amount,
    calc_federal_tax,
    calc_oas_clawback,
    calc_progressive_tax,
    calc_provincial_tax,
    calc_taxable_income,
    calc_total_tax,
)

BRACKETS = [
    TaxBracket(limit=10000, rate=0.10),
    TaxBracket(limit=30000, rate=0.20),
    TaxBracket(limit=None, rate=0.30),
]


class TestProgressiveTax:
    def test_zero_income(self):
        result = calc_progressive_tax(0, BRACKETS)
        assert result.total == 0
        assert result.marginal_rate == 0
        assert result.details == ()

    def test_negative_income(self):
        result = calc_progressive_tax(-5000, BRACKETS)
        assert result.total == 0
        assert result.marginal_rate == 0

    def test_first_bracket_only(self):
        """5,000 × 10% = 500"""
        result = calc_progressive_tax(5000, BRACKETS)
        assert result.total == pytest.approx(500)
        assert result.marginal_rate == pytest.approx(0.10)
        assert len(result.details) == 1

    def test_spans_brackets(self):
        """10,000 × 10% + 20,000 × 20% + 10,000 × 30% = 8,000"""
        result = calc_progressive_tax(40000, BRACKETS)
        assert result.total == pytest.approx(8000)
        assert result.marginal_rate == pytest.approx(0.30)
        assert [d.income_in_bracket for d in result.details] == pytest.approx([10000, 20000, 10000])

    def test_exact_boundary(self):
        result = calc_progressive_tax(10000, BRACKETS)
        assert result.total == pytest.approx(1000)
        assert result.marginal_rate == pytest.approx(0.10)
        assert len(result.details) == 1

    def test_not_bucketed_at_top_rate(self):
        result = calc_progressive_tax(40000, BRACKETS)
        assert result.total < 40000 * 0.30

    def test_details_sum_to_total(self):
        for income in [1, 9999, 10001, 25000, 30000, 123456]:
            result = calc_progressive_tax(income, BRACKETS)
            assert sum(d.tax_in_bracket for d in result.details) == pytest.approx(result.total)
            assert result.total >= 0


class TestAgeCreditAmount:
    def test_below_threshold(self):
        assert calc_age_credit_amount(20000, 2000, 30000, 0.15) == pytest.approx(2000)

    def test_phase_out(self):
        """2,000 − (40,000 − 30,000) × 15% = 500"""
        assert calc_age_credit_amount(40000, 2000, 30000, 0.15) == pytest.approx(500)

    def test_fully_phased_out(self):
        assert calc_age_credit_amount(100000, 2000, 30000, 0.15) == 0


class TestJurisdictionTax:
    def test_basic_credit(self, simple_provider):
        """gross 1,000 + 2,000 = 3,000; basic credit 1,000 × 10% = 100"""
        result = calc_federal_tax(simple_provider, 20000, age=50, year=2025)
        assert result.gross_tax == pytest.approx(3000)
        assert result.credits == pytest.approx(100)
        assert result.total == pytest.approx(2900)
        assert result.average_rate == pytest.approx(2900 / 20000)

    def test_age_credit_at_65(self, simple_provider):
        """Full age amount 2,000 × 10% = 200 on top of basic credit"""
        result = calc_federal_tax(simple_provider, 20000, age=65, year=2025)
        assert result.credits == pytest.approx(300)
        assert result.total == pytest.approx(2700)

    def test_no_age_credit_at_64(self, simple_provider):
        result = calc_federal_tax(simple_provider, 20000, age=64, year=2025)
        assert result.credits == pytest.approx(100)

    def test_age_credit_phase_out(self, simple_provider):
        """gross 1,000 + 30,000 × 20% = 7,000; credits 100 + 500 × 10% = 150"""
        result = calc_federal_tax(simple_provider, 40000, age=70, year=2025)
        assert result.total == pytest.approx(6850)

    def test_net_never_negative(self, simple_provider):
        result = calc_federal_tax(simple_provider, 500, age=70, year=2025)
        assert result.gross_tax == pytest.approx(50)
        assert result.total == 0

    def test_zero_income(self, simple_provider):
        result = calc_federal_tax(simple_provider, 0, age=70, year=2025)
        assert result.total == 0
        assert result.marginal_rate == 0
        assert result.average_rate == 0

    def test_province_without_age_credit(self, simple_provider):
        result = calc_provincial_tax(simple_provider, 20000, "ON", age=70, year=2025)
        assert result.credits == pytest.approx(50)
        assert result.total == pytest.approx(500 + 1000 - 50)

    def test_bundled_federal(self):
        """(50,000 − 15,705) × 15%"""
        result = calc_federal_tax(default_reference_data(), 50000, age=40, year=2025)
        assert result.total == pytest.approx((50000 - 15705) * 0.15)


class TestTaxableIncome:
    def test_treatment_by_source(self):
        taxable = calc_taxable_income(IncomeAmounts(
            rrsp_rrif=10000,
            tfsa=5000,
            capital_gains=4000,
            canadian_dividends=1000,
            cpp=8000,
            oas=7000,
            employment=3000,
            pension=2000,
            other=1000,
        ))
        assert taxable.capital_gains == pytest.approx(2000)
        assert taxable.canadian_dividends == pytest.approx(1380)
        assert taxable.total == pytest.approx(10000 + 2000 + 1380 + 8000 + 7000 + 3000 + 2000 + 1000)

    def test_tfsa_not_taxable(self):
        assert calc_taxable_income(IncomeAmounts(tfsa=50000)).total == 0


class TestOASClawback:
    def test_below_threshold(self):
        assert calc_oas_clawback(40000, 8000, 50000, 0.15) == 0

    def test_partial(self):
        """(60,000 − 50,000) × 15% = 1,500"""
        assert calc_oas_clawback(60000, 8000, 50000, 0.15) == pytest.approx(1500)

    def test_capped_at_benefit(self):
        assert calc_oas_clawback(500000, 8000, 50000, 0.15) == pytest.approx(8000)

    def test_no_oas(self):
        assert calc_oas_clawback(500000, 0, 50000, 0.15) == 0


class TestTotalTax:
    def test_composition(self, simple_provider):
        incomes = IncomeAmounts(rrsp_rrif=52000, oas=8000)
        result = calc_total_tax(simple_provider, incomes, "ON", age=70, year=2025)
        assert result.oas_clawback == pytest.approx((60000 - 50000) * 0.15)
        assert result.total_tax == pytest.approx(
            result.federal.total + result.provincial.total + result.oas_clawback
        )

    def test_combined_marginal_rate_is_sum(self, simple_provider):
        result = calc_total_tax(simple_provider, IncomeAmounts(other=20000), "ON", age=50, year=2025)
        assert result.combined_marginal_rate == pytest.approx(0.20 + 0.10)

    def test_zero_income(self, simple_provider):
        result = calc_total_tax(simple_provider, IncomeAmounts(), "ON", age=70, year=2025)
        assert result.total_tax == 0
        assert result.combined_marginal_rate == 0

    def test_capital_gains_half_included(self, simple_provider):
        with_gains = calc_total_tax(simple_provider, IncomeAmounts(capital_gains=20000), "ON", 50, 2025)
        as_other = calc_total_tax(simple_provider, IncomeAmounts(other=10000), "ON", 50, 2025)
        assert with_gains.total_tax == pytest.approx(as_other.total_tax)

    def test_unknown_province_raises(self, simple_provider):
        with pytest.raises(ValueError):
            calc_total_tax(simple_provider, IncomeAmounts(other=20000), "BC", 50, 2025)
