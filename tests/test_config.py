"""Tests for config loading, CLI resolution and scenario building."""

import argparse

import pytest

from retirement_sim_ca.config import (
    DEFAULTS,
    build_scenario,
    create_parser,
    load_config,
    parse_expense_changes,
    parse_other_income,
    resolve,
)


class TestParseExpenseChanges:
    def test_empty(self):
        assert parse_expense_changes("") == ()

    def test_sorted_by_age(self):
        changes = parse_expense_changes("85:3000, 75:3500")
        assert [c.age for c in changes] == [75, 85]
        assert changes[0].monthly_amount == 3500


class TestParseOtherIncome:
    def test_minimal(self):
        (income,) = parse_other_income("Pension:24000")
        assert income.description == "Pension"
        assert income.annual_amount == 24000
        assert income.start_age is None
        assert income.end_age is None
        assert income.indexed_to_inflation is True

    def test_full(self):
        (income,) = parse_other_income("Rental:12000:60:80:fixed")
        assert income.start_age == 60
        assert income.end_age == 80
        assert income.indexed_to_inflation is False

    def test_blank_start(self):
        (income,) = parse_other_income("Annuity:6000::85")
        assert income.start_age is None
        assert income.end_age == 85

    def test_multiple(self):
        assert len(parse_other_income("A:1000,B:2000:70")) == 2

    def test_missing_amount(self):
        with pytest.raises(ValueError):
            parse_other_income("Pension")

    def test_bad_indexing_flag(self):
        with pytest.raises(ValueError, match="indexed"):
            parse_other_income("Pension:1000:65:90:sometimes")


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "nope.toml") == {}

    def test_normalizes_lists(self, tmp_path):
        path = tmp_path / "scenario.toml"
        path.write_text(
            'current_age = 58\n'
            'expense_changes = [[75, 3500], [85, 3000]]\n'
            'other_income = [\n'
            '  { description = "Pension", annual_amount = 24000, start_age = 65 },\n'
            '  ["Rental", 12000, 60, 80, "fixed"],\n'
            ']\n'
        )
        raw = load_config(path)
        assert raw["current_age"] == 58
        assert raw["expense_changes"] == "75:3500,85:3000"
        incomes = parse_other_income(raw["other_income"])
        assert incomes[0].start_age == 65
        assert incomes[0].end_age is None
        assert incomes[1].indexed_to_inflation is False

    def test_invalid_toml_exits(self, tmp_path, capsys):
        path = tmp_path / "bad.toml"
        path.write_text("current_age = \n")
        with pytest.raises(SystemExit):
            load_config(path)
        assert "bad.toml" in capsys.readouterr().err


class TestResolve:
    def test_priority(self):
        args = argparse.Namespace(current_age=50, retirement_age=None)
        config = {"current_age": 40, "retirement_age": 62}
        r = resolve(args, config)
        assert r["current_age"] == 50
        assert r["retirement_age"] == 62
        assert r["longevity_age"] == DEFAULTS["longevity_age"]

    def test_parser_flags_resolve(self):
        parser = create_parser("test")
        args = parser.parse_args(["--province", "BC", "--no-expenses-indexed", "--cpp-monthly", "900"])
        r = resolve(args, {})
        assert r["province"] == "BC"
        assert r["expenses_indexed"] is False
        assert r["cpp_monthly"] == 900


class TestBuildScenario:
    def test_defaults(self):
        scenario = build_scenario(dict(DEFAULTS))
        assert scenario.name == DEFAULTS["name"]
        assert scenario.income.cpp is None
        assert scenario.income.oas is None
        assert scenario.income.employment is None
        assert scenario.assets.non_registered.cost_base is None

    def test_full(self):
        r = dict(DEFAULTS) | {
            "province": "qc",
            "cpp_monthly": 900.0,
            "cpp_start_age": 70,
            "oas_monthly": 700.0,
            "employment_income": 60000.0,
            "employment_until_age": 63,
            "other_income": "Pension:20000:65",
            "expense_changes": "80:3000",
            "non_registered_cost_base": 40000.0,
        }
        scenario = build_scenario(r)
        assert scenario.basic.province == "QC"
        assert scenario.income.cpp.start_age == 70
        assert scenario.income.oas.monthly_amount == 700
        assert scenario.income.employment.until_age == 63
        assert scenario.income.other_income[0].annual_amount == 20000
        assert scenario.expenses.age_based_changes[0].age == 80
        assert scenario.assets.non_registered.cost_base == 40000
