"""Command-line interface for n2nxs using argparse."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional

from n2nxs.core.errors import N2NError
from n2nxs.data.np_scattering import NPCrossSectionInterpolator
from n2nxs.io.csv_readers import read_run_pairs, read_run_summary, write_run_summary
from n2nxs.workflows.cross_section_pipeline import (
    PipelineConfig,
    budgets_to_dataframe,
    process_pairs,
    save_results_csv,
)
from n2nxs.workflows.summary_update import SummaryUpdateConfig, update_summary


def _load_json(path: Path):
    return json.loads(path.read_text())


def cmd_update_summary(args: argparse.Namespace) -> None:
    summary = read_run_summary(args.summary)
    config = SummaryUpdateConfig(counting_efficiency=args.efficiency)
    updated = update_summary(summary, args.data_dir, config)
    output = args.output or args.summary
    write_run_summary(updated, output)
    print(f"Wrote {len(updated)} runs to {output}")


def cmd_calculate(args: argparse.Namespace) -> None:
    config = PipelineConfig.from_dict(_load_json(args.config) if args.config else None)
    if args.skip_failed:
        config.skip_failed = True

    summary = read_run_summary(args.summary)
    requests = read_run_pairs(args.pairs)
    result = process_pairs(summary, requests, config)

    save_results_csv(result, args.output)
    print(f"Saved {len(result.rows)} rows to {args.output}")
    for failure in result.failures:
        print(f"Skipped runs {failure.request.fg_run}/{failure.request.bg_run}: {failure.message}")

    if args.budget:
        args.budget.parent.mkdir(parents=True, exist_ok=True)
        budgets_to_dataframe(result).to_csv(args.budget, index=False, float_format="%.6g")
        print(f"Saved uncertainty budgets to {args.budget}")

    if args.plot:
        import matplotlib
        matplotlib.use("Agg")
        from n2nxs.plots.activation import plot_cross_sections

        plot_cross_sections(result, save_path=args.plot)
        print(f"Saved cross-section plot to {args.plot}")


def cmd_np_xs(args: argparse.Namespace) -> None:
    interpolator = NPCrossSectionInterpolator()
    low, high = interpolator.energy_range
    for energy in args.energies:
        note = "" if interpolator.in_range(energy) else f"  (extrapolated beyond {low:g}-{high:g} MeV)"
        print(f"{energy:8.3f} MeV  {interpolator.evaluate(energy):10.4f} mb/sr{note}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="12C(n,2n)11C activation cross-section analysis")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    update = subparsers.add_parser("update-summary", help="Refresh run summary from decay and telescope files")
    update.add_argument("--summary", type=Path, required=True)
    update.add_argument("--data-dir", type=Path, required=True)
    update.add_argument("--efficiency", type=float, default=0.12, help="Decay counting efficiency")
    update.add_argument("--output", type=Path, help="Output summary (default: overwrite --summary)")
    update.set_defaults(func=cmd_update_summary)

    calculate = subparsers.add_parser("calculate", help="Calculate fluxes and cross sections for run pairs")
    calculate.add_argument("--summary", type=Path, required=True)
    calculate.add_argument("--pairs", type=Path, required=True)
    calculate.add_argument("--config", type=Path, help="JSON pipeline configuration")
    calculate.add_argument("--output", type=Path, default=Path("cross_sections.csv"))
    calculate.add_argument("--skip-failed", action="store_true", help="Report failing pairs instead of aborting")
    calculate.add_argument("--budget", type=Path, help="Write per-source uncertainty budgets to CSV")
    calculate.add_argument("--plot", type=Path, help="Save cross section vs energy figure")
    calculate.set_defaults(func=cmd_calculate)

    np_xs = subparsers.add_parser("np-xs", help="Print the interpolated n-p cross section")
    np_xs.add_argument("energies", type=float, nargs="+", help="Neutron energies (MeV)")
    np_xs.set_defaults(func=cmd_np_xs)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except (N2NError, OSError) as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main()
