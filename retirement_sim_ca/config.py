"""TOML config loader with CLI > config > default resolution."""

import argparse
import sys
import tomllib
from collections.abc import Callable
from pathlib import Path

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
)

DEFAULT_CONFIG_PATH = Path("scenario.toml")

DEFAULTS = {
    "name": "Base plan",
    "current_age": 55,
    "retirement_age": 65,
    "longevity_age": 90,
    "province": "ON",
    "start_year": 2025,
    "rrsp_balance": 0.0,
    "rrsp_contribution": 0.0,
    "tfsa_balance": 0.0,
    "tfsa_contribution": 0.0,
    "non_registered_balance": 0.0,
    "non_registered_contribution": 0.0,
    "non_registered_cost_base": None,
    "employment_income": 0.0,
    "employment_until_age": 65,
    "cpp_monthly": 0.0,
    "cpp_start_age": 65,
    "oas_monthly": 0.0,
    "oas_start_age": 65,
    "other_income": "",
    "monthly_expenses": 4000.0,
    "variable_expenses": 0.0,
    "expenses_indexed": True,
    "expense_changes": "",
    "pre_retirement_return": 0.06,
    "post_retirement_return": 0.05,
    "inflation_rate": 0.025,
}


def _join_other_income(item) -> str:
    if isinstance(item, dict):
        indexed = item.get("indexed_to_inflation", True)
        fields = [
            str(item.get("description", "")),
            str(item["annual_amount"]),
            "" if item.get("start_age") is None else str(item["start_age"]),
            "" if item.get("end_age") is None else str(item["end_age"]),
            "indexed" if indexed else "fixed",
        ]
        return ":".join(fields)
    if isinstance(item, list):
        return ":".join(str(x) for x in item)
    return str(item)


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Failed to read config file: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    # Normalize other_income: TOML list of tables/arrays → "desc:amount:start:end:indexed,..." string
    if "other_income" in raw:
        v = raw["other_income"]
        if isinstance(v, list):
            raw["other_income"] = ",".join(_join_other_income(item) for item in v)
    # Normalize expense_changes: TOML [[age, monthly], ...] → "age:monthly,..." string
    if "expense_changes" in raw:
        v = raw["expense_changes"]
        if isinstance(v, list):
            raw["expense_changes"] = ",".join(f"{int(pair[0])}:{pair[1]}" for pair in v)
    return raw


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared scenario flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="Config file path (default: scenario.toml)")
    parser.add_argument("--name", type=str, default=None, help=f"Scenario name (default: {d['name']})")
    parser.add_argument("--current-age", type=int, default=None, help=f"Current age (default: {d['current_age']})")
    parser.add_argument("--retirement-age", type=int, default=None, help=f"Retirement age (default: {d['retirement_age']})")
    parser.add_argument("--longevity-age", type=int, default=None, help=f"Plan to age (default: {d['longevity_age']})")
    parser.add_argument("--province", type=str, default=None, help=f"Province/territory code (default: {d['province']})")
    parser.add_argument("--start-year", type=int, default=None, help=f"Calendar year at current age (default: {d['start_year']})")
    parser.add_argument("--rrsp-balance", type=float, default=None, help="RRSP/RRIF balance")
    parser.add_argument("--rrsp-contribution", type=float, default=None, help="Annual RRSP contribution until retirement")
    parser.add_argument("--tfsa-balance", type=float, default=None, help="TFSA balance")
    parser.add_argument("--tfsa-contribution", type=float, default=None, help="Annual TFSA contribution until retirement")
    parser.add_argument("--non-registered-balance", type=float, default=None, help="Non-registered balance")
    parser.add_argument("--non-registered-contribution", type=float, default=None, help="Annual non-registered contribution")
    parser.add_argument("--non-registered-cost-base", type=float, default=None, help="Non-registered adjusted cost base (default: balance)")
    parser.add_argument("--employment-income", type=float, default=None, help="Annual employment income")
    parser.add_argument("--employment-until-age", type=int, default=None, help=f"Employment ends at this age (default: {d['employment_until_age']})")
    parser.add_argument("--cpp-monthly", type=float, default=None, help="CPP monthly amount at 65 (0 = none)")
    parser.add_argument("--cpp-start-age", type=int, default=None, help=f"CPP start age, 60-70 (default: {d['cpp_start_age']})")
    parser.add_argument("--oas-monthly", type=float, default=None, help="OAS monthly amount at 65 (0 = none)")
    parser.add_argument("--oas-start-age", type=int, default=None, help=f"OAS start age, 65-70 (default: {d['oas_start_age']})")
    parser.add_argument("--other-income", type=str, default=None, help="Other income, comma-separated desc:amount[:start[:end[:indexed|fixed]]] (e.g. Pension:24000:65)")
    parser.add_argument("--monthly-expenses", type=float, default=None, help=f"Fixed monthly spending in retirement (default: {d['monthly_expenses']:.0f})")
    parser.add_argument("--variable-expenses", type=float, default=None, help="Additional annual spending")
    parser.add_argument("--expenses-indexed", action=argparse.BooleanOptionalAction, default=None, help="Index spending to inflation (default: yes)")
    parser.add_argument("--expense-changes", type=str, default=None, help="Age-based spending changes, comma-separated age:monthly (e.g. 75:3500,85:3000)")
    parser.add_argument("--pre-retirement-return", type=float, default=None, help=f"Annual return before retirement (default: {d['pre_retirement_return']})")
    parser.add_argument("--post-retirement-return", type=float, default=None, help=f"Annual return in retirement (default: {d['post_retirement_return']})")
    parser.add_argument("--inflation-rate", type=float, default=None, help=f"Annual inflation (default: {d['inflation_rate']})")
    return parser


def parse_expense_changes(s: str) -> tuple[ExpenseChange, ...]:
    """Parse "age:monthly,..." → ExpenseChange tuple sorted by age."""
    if not s or not s.strip():
        return ()
    result = []
    for pair in s.split(","):
        pair = pair.strip()
        if not pair:
            continue
        age, monthly = pair.split(":", 1)
        result.append(ExpenseChange(age=int(age.strip()), monthly_amount=float(monthly.strip())))
    return tuple(sorted(result, key=lambda c: c.age))


def parse_other_income(s: str) -> tuple[OtherIncome, ...]:
    """Parse "desc:amount[:start[:end[:indexed|fixed]]],..." → OtherIncome tuple.

    Empty start/end fields mean "at retirement" / "for life".
    """
    if not s or not s.strip():
        return ()
    result = []
    for item in s.split(","):
        item = item.strip()
        if not item:
            continue
        parts = [p.strip() for p in item.split(":")]
        if len(parts) < 2:
            raise ValueError(f"Other income '{item}' needs at least description:amount")
        start = parts[2] if len(parts) >= 3 else ""
        end = parts[3] if len(parts) >= 4 else ""
        indexing = parts[4].lower() if len(parts) >= 5 else "indexed"
        if indexing not in ("indexed", "fixed"):
            raise ValueError(f"Other income '{item}': expected 'indexed' or 'fixed', got '{parts[4]}'")
        result.append(OtherIncome(
            description=parts[0],
            annual_amount=float(parts[1]),
            start_age=int(start) if start else None,
            end_age=int(end) if end else None,
            indexed_to_inflation=indexing == "indexed",
        ))
    return tuple(result)


def build_scenario(r: dict) -> Scenario:
    """Build Scenario from resolved config dict."""
    employment = None
    if r["employment_income"] > 0:
        employment = EmploymentIncome(annual_amount=r["employment_income"], until_age=r["employment_until_age"])
    cpp = None
    if r["cpp_monthly"] > 0:
        cpp = CPPDetails(start_age=r["cpp_start_age"], monthly_amount_at_65=r["cpp_monthly"])
    oas = None
    if r["oas_monthly"] > 0:
        oas = OASDetails(start_age=r["oas_start_age"], monthly_amount=r["oas_monthly"])

    return Scenario(
        name=r["name"],
        basic=BasicInputs(
            current_age=r["current_age"],
            retirement_age=r["retirement_age"],
            longevity_age=r["longevity_age"],
            province=str(r["province"]).upper(),
            start_year=r["start_year"],
        ),
        assets=Assets(
            rrsp=AccountDetails(balance=r["rrsp_balance"], annual_contribution=r["rrsp_contribution"]),
            tfsa=AccountDetails(balance=r["tfsa_balance"], annual_contribution=r["tfsa_contribution"]),
            non_registered=AccountDetails(
                balance=r["non_registered_balance"],
                annual_contribution=r["non_registered_contribution"],
                cost_base=r["non_registered_cost_base"],
            ),
        ),
        income=IncomeSources(
            employment=employment,
            cpp=cpp,
            oas=oas,
            other_income=parse_other_income(r["other_income"]),
        ),
        expenses=Expenses(
            fixed_monthly=r["monthly_expenses"],
            variable_annual=r["variable_expenses"],
            indexed_to_inflation=r["expenses_indexed"],
            age_based_changes=parse_expense_changes(r["expense_changes"]),
        ),
        assumptions=Assumptions(
            pre_retirement_return=r["pre_retirement_return"],
            post_retirement_return=r["post_retirement_return"],
            inflation_rate=r["inflation_rate"],
        ),
    )


def parse_args(
    description: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
) -> tuple[dict, argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (resolved_dict, namespace). namespace carries extra CLI args added via add_args_fn.
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args()
    config = load_config(args.config)
    return resolve(args, config), args


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > scenario.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved
