"""Tests for scenario parameters and validation."""

import dataclasses

import pytest

from retirement_sim_ca.params import (
    AccountDetails,
    Assets,
    BasicInputs,
    CPPDetails,
    ExpenseChange,
    Expenses,
    IncomeSources,
    OASDetails,
    Scenario,
    inflation_factor,
    validate_scenario,
)


def _valid() -> Scenario:
    return Scenario(
        name="Valid",
        basic=BasicInputs(current_age=55, retirement_age=65, longevity_age=90, province="BC"),
        assets=Assets(rrsp=AccountDetails(balance=100000, annual_contribution=5000)),
        income=IncomeSources(cpp=CPPDetails(65, 900), oas=OASDetails(65, 700)),
        expenses=Expenses(fixed_monthly=3000),
    )


class TestInflationFactor:
    def test_zero_years(self):
        assert inflation_factor(0.025, 0) == 1.0

    def test_compounds(self):
        assert inflation_factor(0.02, 3) == pytest.approx(1.02 ** 3)


class TestExpenses:
    def test_annual(self):
        assert Expenses(fixed_monthly=3000, variable_annual=5000).annual == pytest.approx(41000)

    def test_change_at(self):
        expenses = Expenses(fixed_monthly=3000, age_based_changes=(ExpenseChange(75, 2500),))
        assert expenses.change_at(75).monthly_amount == 2500
        assert expenses.change_at(76) is None


class TestAssets:
    def test_total(self):
        assets = Assets(
            rrsp=AccountDetails(balance=100),
            tfsa=AccountDetails(balance=20),
            non_registered=AccountDetails(balance=3),
        )
        assert assets.total == 123

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            AccountDetails().balance = 5


class TestValidateScenario:
    def test_valid(self):
        assert validate_scenario(_valid()) == []

    def test_unknown_province(self):
        s = dataclasses.replace(_valid(), basic=dataclasses.replace(_valid().basic, province="ZZ"))
        errors = validate_scenario(s)
        assert len(errors) == 1
        assert "ZZ" in errors[0]

    def test_retirement_after_longevity(self):
        s = dataclasses.replace(_valid(), basic=BasicInputs(55, 95, 90))
        assert any("longevity" in e for e in validate_scenario(s))

    def test_negative_balance(self):
        s = dataclasses.replace(_valid(), assets=Assets(tfsa=AccountDetails(balance=-1)))
        assert any("TFSA" in e for e in validate_scenario(s))

    def test_negative_cost_base(self):
        s = dataclasses.replace(_valid(), assets=Assets(non_registered=AccountDetails(balance=10, cost_base=-5)))
        assert any("cost base" in e for e in validate_scenario(s))

    @pytest.mark.parametrize("age", [59, 71])
    def test_cpp_window(self, age):
        s = dataclasses.replace(_valid(), income=IncomeSources(cpp=CPPDetails(age, 900)))
        assert any("CPP" in e for e in validate_scenario(s))

    @pytest.mark.parametrize("age", [64, 71])
    def test_oas_window(self, age):
        s = dataclasses.replace(_valid(), income=IncomeSources(oas=OASDetails(age, 700)))
        assert any("OAS" in e for e in validate_scenario(s))

    def test_negative_expenses(self):
        s = dataclasses.replace(_valid(), expenses=Expenses(fixed_monthly=-100))
        assert validate_scenario(s) == ["Expenses must not be negative"]

    def test_collects_all_errors(self):
        s = Scenario(
            name="Bad",
            basic=BasicInputs(-1, 95, 90, province="ZZ"),
            expenses=Expenses(fixed_monthly=-1),
        )
        assert len(validate_scenario(s)) == 4
