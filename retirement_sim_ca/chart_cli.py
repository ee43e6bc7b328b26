"""CLI entry point for chart generation."""

import sys
from pathlib import Path

from retirement_sim_ca.charts import plot_account_balances, plot_income_stack, plot_trajectory
from retirement_sim_ca.config import build_scenario, create_parser, load_config, resolve
from retirement_sim_ca.reference import load_reference_data
from retirement_sim_ca.scenarios import run_variants
from retirement_sim_ca.simulation import project


def _build_parser():
    parser = create_parser("Retirement projection charts")
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="Output directory (default: reports/charts)",
    )
    parser.add_argument(
        "--reference", type=Path, default=None,
        help="Tax reference data TOML (default: bundled)",
    )
    parser.add_argument(
        "--variants", action="store_true",
        help="Overlay what-if variants on the trajectory chart",
    )
    parser.add_argument(
        "--suffix", type=str, default="",
        help="Output filename suffix (e.g. base → trajectory-base.png)",
    )
    return parser


def main():
    parser = _build_parser()
    args = parser.parse_args()
    config_file = load_config(args.config)
    r = resolve(args, config_file)
    output_dir = args.output

    try:
        provider = load_reference_data(args.reference)
        scenario = build_scenario(r)
        print(f"Projecting {scenario.name} ({scenario.basic.current_age}→{scenario.basic.longevity_age})...", file=sys.stderr)
        results = project(scenario, provider)
        trajectory = run_variants(scenario, provider) if args.variants else [results]
    except ValueError as e:
        print(f"  {e}", file=sys.stderr)
        raise SystemExit(1)

    path = plot_trajectory(trajectory, output_dir, name=args.suffix)
    print(f"  → {path}", file=sys.stderr)

    path = plot_account_balances(results, output_dir, name=args.suffix)
    print(f"  → {path}", file=sys.stderr)

    try:
        path = plot_income_stack(results, output_dir, name=args.suffix)
        print(f"  → {path}", file=sys.stderr)
    except ValueError as e:
        print(f"  income chart skipped: {e}", file=sys.stderr)

    print("Done", file=sys.stderr)


if __name__ == "__main__":
    main()
