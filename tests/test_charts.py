"""Smoke tests for chart generation."""

import pytest

from retirement_sim_ca.charts import plot_account_balances, plot_income_stack, plot_trajectory
from retirement_sim_ca.params import AccountDetails, Assets, BasicInputs, Expenses, Scenario
from retirement_sim_ca.simulation import project, summarize


def _results():
    return project(Scenario(
        name="Chart",
        basic=BasicInputs(current_age=60, retirement_age=65, longevity_age=85),
        assets=Assets(rrsp=AccountDetails(balance=300000), tfsa=AccountDetails(balance=50000)),
        expenses=Expenses(fixed_monthly=2500),
    ))


class TestCharts:
    def setup_method(self):
        self.results = _results()

    def test_trajectory(self, tmp_path):
        path = plot_trajectory([self.results], tmp_path, name="x")
        assert path == tmp_path / "trajectory-x.png"
        assert path.exists()

    def test_balances(self, tmp_path):
        assert plot_account_balances(self.results, tmp_path).exists()

    def test_income(self, tmp_path):
        assert plot_income_stack(self.results, tmp_path).exists()

    def test_empty_results(self, tmp_path):
        with pytest.raises(ValueError):
            plot_trajectory([], tmp_path)
        with pytest.raises(ValueError):
            plot_account_balances(summarize("Empty", []), tmp_path)
