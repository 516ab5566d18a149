"""
Refresh run records from the raw instrument exports.

For every run in a summary, two collaborators are consulted when their
files exist under the data directory:

- ``Decay Curves/RunNNN_plastic.csv`` and ``RunNNN_puck.csv``: fitted decay
  curves give the activated C-11 nuclei in the CH2 and graphite targets
- ``Proton Telescope/RunNNN_1x2.csv`` with ``RunNNN.mpa``: the ROI from the
  header is integrated over the dE-E map to give the gross proton count

Files that are absent leave the corresponding fields untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from n2nxs.core.records import RunRecord, RunSummary
from n2nxs.io.mpa import TELESCOPE_CHANNELS, read_decay_curve, read_roi, read_telescope_histogram
from n2nxs.physics.cross_section import C11_HALF_LIFE_MIN
from n2nxs.physics.decay import activated_nuclei, fit_decay_curve
from n2nxs.physics.targets import TargetKind
from n2nxs.physics.telescope import count_in_region
from n2nxs.uncertainty.uncertain import UncertainValue

logger = logging.getLogger(__name__)


@dataclass
class SummaryUpdateConfig:
    """File layout and decay-fit settings for :func:`update_summary`."""

    # Annihilation-gamma counting efficiency of the decay station
    counting_efficiency: float = 0.12
    half_life_min: float = C11_HALF_LIFE_MIN
    fix_rate: bool = True

    decay_dir: str = "Decay Curves"
    telescope_dir: str = "Proton Telescope"
    ch2_pattern: str = "Run{run:03d}_plastic.csv"
    graphite_pattern: str = "Run{run:03d}_puck.csv"
    telescope_pattern: str = "Run{run:03d}_1x2.csv"
    header_pattern: str = "Run{run:03d}.mpa"
    telescope_channels: int = TELESCOPE_CHANNELS


def _decay_field(kind: TargetKind) -> str:
    return "ch2_decay" if kind is TargetKind.CH2 else "graphite_decay"


def update_run_from_files(
    run: RunRecord,
    data_dir: Union[str, Path],
    config: Optional[SummaryUpdateConfig] = None,
) -> RunRecord:
    """
    Return ``run`` with decay counts and proton count refreshed from files.

    Parameters
    ----------
    run : RunRecord
        Record to refresh
    data_dir : str or Path
        Directory containing the decay-curve and telescope subdirectories
    config : SummaryUpdateConfig, optional
        File layout and fit settings

    Returns
    -------
    RunRecord
        A new record, or ``run`` itself when no files were found
    """
    config = config or SummaryUpdateConfig()
    data_dir = Path(data_dir)
    changes: Dict[str, object] = {}

    decay_dir = data_dir / config.decay_dir
    patterns = {TargetKind.CH2: config.ch2_pattern, TargetKind.GRAPHITE: config.graphite_pattern}
    transit_min = run.transit_time_s / 60.0
    for kind, pattern in patterns.items():
        path = decay_dir / pattern.format(run=run.run_number)
        if not path.exists():
            logger.debug(f"Run {run.run_number}: no {kind.value} decay curve at {path}")
            continue
        fit = fit_decay_curve(read_decay_curve(path), config.half_life_min, config.fix_rate)
        nuclei = activated_nuclei(fit, transit_min, config.counting_efficiency)
        logger.info(
            f"Run {run.run_number}: {kind.value} C-11 nuclei {nuclei} "
            f"(reduced chi2 {fit.reduced_chi_squared:.2f})"
        )
        changes[_decay_field(kind)] = nuclei

    telescope_dir = data_dir / config.telescope_dir
    data_path = telescope_dir / config.telescope_pattern.format(run=run.run_number)
    header_path = telescope_dir / config.header_pattern.format(run=run.run_number)
    if data_path.exists() and header_path.exists():
        roi = read_roi(header_path)
        histogram = read_telescope_histogram(data_path, config.telescope_channels)
        protons = count_in_region(histogram, roi)
        logger.info(f"Run {run.run_number}: {protons} protons in {roi}")
        changes["roi"] = roi
        changes["gross_protons"] = UncertainValue.from_counts(protons)
    else:
        logger.debug(f"Run {run.run_number}: telescope files not found in {telescope_dir}")

    if not changes:
        return run
    return run.with_updates(**changes)


def update_summary(
    summary: RunSummary,
    data_dir: Union[str, Path],
    config: Optional[SummaryUpdateConfig] = None,
) -> RunSummary:
    """Refresh every run of ``summary`` from the files under ``data_dir``."""
    config = config or SummaryUpdateConfig()
    updated = summary
    n_changed = 0
    for run in summary:
        refreshed = update_run_from_files(run, data_dir, config)
        if refreshed is not run:
            n_changed += 1
            updated = updated.with_run(refreshed)
    logger.info(f"Updated {n_changed} of {len(summary)} runs from {data_dir}")
    return updated


__all__ = ["SummaryUpdateConfig", "update_run_from_files", "update_summary"]
