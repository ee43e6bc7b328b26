"""Chart generation for retirement projection results."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from retirement_sim_ca.simulation import CalculationResults

ACCOUNT_COLORS = {
    "rrsp_rrif": "#1f77b4",       # blue
    "tfsa": "#2ca02c",            # green
    "non_registered": "#ff7f0e",  # orange
}

INCOME_COLORS = {
    "employment": "#8da0cb",
    "cpp": "#66c2a5",
    "oas": "#a6d854",
    "other": "#ffd92f",
    "investment": "#fc8d62",
}

SCENARIO_COLORS = ["#1f77b4", "#2ca02c", "#ff7f0e", "#d62728", "#9467bd", "#8c564b"]


def _format_dollar_axis(ax: plt.Axes):
    """$ tick labels on Y axis, with a $M secondary axis on the right."""
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"${x:,.0f}")
    )
    ax_right = ax.secondary_yaxis("right")
    ax_right.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"${x / 1_000_000:.1f}M" if x != 0 else "0")
    )
    ax_right.set_ylabel("")


def _mark_depletion(ax: plt.Axes, results: CalculationResults, color: str = "#d62728"):
    age = results.portfolio_depleted_age
    if age is None:
        return
    ax.axvline(age, color=color, linewidth=2, linestyle=":")
    ax.annotate(
        f"Depleted at {age}",
        xy=(age, ax.get_ylim()[1] * 0.85),
        fontsize=11, fontweight="bold", color=color,
        ha="right",
        bbox=dict(boxstyle="round,pad=0.3", fc="white", ec=color, alpha=0.9),
    )


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_trajectory(results: list[CalculationResults], output_path: Path, name: str = "") -> Path:
    """Line chart of total portfolio by age, one line per scenario.

    Args:
        results: project() results to overlay.
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "base" → "trajectory-base.png").

    Returns:
        Path to the generated PNG file.
    """
    if not results:
        raise ValueError("No results for trajectory chart")

    fig, ax = plt.subplots(figsize=(14, 8))
    for i, r in enumerate(results):
        ages = [y.age for y in r.year_by_year]
        totals = [y.balances.total for y in r.year_by_year]
        ax.plot(ages, totals, label=r.scenario_name, color=SCENARIO_COLORS[i % len(SCENARIO_COLORS)], linewidth=2)

    ax.set_xlabel("Age")
    ax.set_ylabel("Portfolio balance")
    ax.set_title("Portfolio trajectory")
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3)
    _format_dollar_axis(ax)
    return _save(fig, output_path, "trajectory", name)


def plot_account_balances(results: CalculationResults, output_path: Path, name: str = "") -> Path:
    """Stacked area chart of RRSP/RRIF, TFSA and non-registered balances."""
    years = results.year_by_year
    if not years:
        raise ValueError("No yearly results for balance chart")

    fig, ax = plt.subplots(figsize=(14, 8))
    ages = [y.age for y in years]
    ax.stackplot(
        ages,
        [y.balances.rrsp_rrif for y in years],
        [y.balances.tfsa for y in years],
        [y.balances.non_registered for y in years],
        labels=["RRSP/RRIF", "TFSA", "Non-registered"],
        colors=[ACCOUNT_COLORS["rrsp_rrif"], ACCOUNT_COLORS["tfsa"], ACCOUNT_COLORS["non_registered"]],
        alpha=0.75,
    )
    ax.set_xlabel("Age")
    ax.set_ylabel("Balance")
    ax.set_title(f"Account balances: {results.scenario_name}")
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3)
    _format_dollar_axis(ax)
    _mark_depletion(ax, results)
    return _save(fig, output_path, "balances", name)


def plot_income_stack(results: CalculationResults, output_path: Path, name: str = "") -> Path:
    """Stacked income sources against spending and tax, drawdown years only."""
    years = [y for y in results.year_by_year if y.expenses > 0 or y.income.investment > 0]
    if not years:
        raise ValueError("No drawdown years for income chart")

    fig, ax = plt.subplots(figsize=(14, 8))
    ages = [y.age for y in years]
    ax.stackplot(
        ages,
        [y.income.employment for y in years],
        [y.income.cpp for y in years],
        [y.income.oas for y in years],
        [y.income.other for y in years],
        [y.income.investment for y in years],
        labels=["Employment", "CPP", "OAS", "Other", "Withdrawals"],
        colors=[INCOME_COLORS[k] for k in ("employment", "cpp", "oas", "other", "investment")],
        alpha=0.75,
    )
    ax.plot(ages, [y.expenses for y in years], color="#1f77b4", linewidth=2, label="Spending")
    ax.plot(
        ages,
        [y.expenses + y.tax.total for y in years],
        color="#d62728",
        linewidth=1.8,
        linestyle="--",
        label="Spending + tax",
    )
    ax.set_xlabel("Age")
    ax.set_ylabel("Annual amount")
    ax.set_title(f"Retirement income: {results.scenario_name}")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_dollar_axis(ax)
    _mark_depletion(ax, results)
    return _save(fig, output_path, "income", name)
