"""
(n,2n) Activation Cross Section Pipeline

Per-row workflow turning a foreground/background run pair into proton flux,
neutron flux and one 12C(n,2n)11C cross section per activated target:

    run records -> proton flux -> sigma_np(E) -> neutron flux -> sigma(n,2n)

Each row depends only on its own run records and the fixed configuration,
so rows are computed independently. Failures are either raised (default)
or, with ``skip_failed``, logged and reported alongside the results.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from n2nxs.core.errors import DataShapeError, N2NError
from n2nxs.core.records import RunPair, RunPairRequest, RunSummary
from n2nxs.data.np_scattering import NPCrossSectionInterpolator
from n2nxs.physics.cross_section import (
    C11_HALF_LIFE_MIN,
    C11_HALF_LIFE_UNC_MIN,
    activation_cross_section_budget,
    c11_decay_constant,
)
from n2nxs.physics.flux import neutron_flux, proton_flux
from n2nxs.physics.targets import InstrumentGeometry, TargetKind
from n2nxs.uncertainty.budget import UncertaintyBudget
from n2nxs.uncertainty.uncertain import UncertainValue

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration
# ============================================================================

@dataclass
class PipelineConfig:
    """Configuration for the cross-section pipeline."""

    geometry: InstrumentGeometry = field(default_factory=InstrumentGeometry)

    # Counting-efficiency correction per target; decay counts are divided by it
    efficiencies: Dict[TargetKind, float] = field(default_factory=lambda: {
        TargetKind.CH2: 1.0,
        TargetKind.GRAPHITE: 1.0,
    })

    # C-11 half-life (min)
    half_life_min: float = C11_HALF_LIFE_MIN
    half_life_unc_min: float = C11_HALF_LIFE_UNC_MIN

    # Log and collect failing rows instead of aborting the batch
    skip_failed: bool = False

    def efficiency_for(self, kind: TargetKind) -> float:
        return self.efficiencies.get(kind, 1.0)

    def decay_constant(self) -> UncertainValue:
        return c11_decay_constant(self.half_life_min, self.half_life_unc_min)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> PipelineConfig:
        """
        Build a configuration from a JSON-style mapping.

        Recognised keys: ``geometry`` (see :meth:`InstrumentGeometry.from_dict`),
        ``efficiencies`` (``{"ch2": 5.83, "graphite": 1.0}``), ``half_life_min``,
        ``half_life_unc_min`` and ``skip_failed``.
        """
        if not data:
            return cls()
        known = {"geometry", "efficiencies", "half_life_min", "half_life_unc_min", "skip_failed"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise DataShapeError(f"Unknown configuration keys: {', '.join(unknown)}")

        config = cls(geometry=InstrumentGeometry.from_dict(data.get("geometry")))
        for name, value in (data.get("efficiencies") or {}).items():
            try:
                kind = TargetKind(name)
            except ValueError:
                raise DataShapeError(f"Unknown target in efficiencies: {name}") from None
            config.efficiencies[kind] = float(value)
        if "half_life_min" in data:
            config.half_life_min = float(data["half_life_min"])
        if "half_life_unc_min" in data:
            config.half_life_unc_min = float(data["half_life_unc_min"])
        skip_failed = data.get("skip_failed", False)
        if not isinstance(skip_failed, bool):
            raise DataShapeError(f"skip_failed must be true or false, got {skip_failed!r}")
        config.skip_failed = skip_failed
        return config

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> PipelineConfig:
        return cls.from_dict(json.loads(Path(path).read_text()))


# ============================================================================
# Results
# ============================================================================

@dataclass
class CrossSectionRow:
    """Calculated quantities for one foreground/background pair."""

    fg_run: int
    bg_run: int
    neutron_energy: float
    sigma_np: UncertainValue
    proton_flux: UncertainValue
    neutron_flux: UncertainValue
    cross_sections: Dict[TargetKind, UncertainValue] = field(default_factory=dict)
    budgets: Dict[TargetKind, UncertaintyBudget] = field(default_factory=dict)


@dataclass
class RowFailure:
    """A pair that could not be calculated."""

    request: RunPairRequest
    error_type: str
    message: str


@dataclass
class BatchResult:
    """Result of processing a list of run pairs."""

    rows: List[CrossSectionRow] = field(default_factory=list)
    failures: List[RowFailure] = field(default_factory=list)

    @property
    def n_processed(self) -> int:
        return len(self.rows) + len(self.failures)

    def get_row(self, fg_run: int, bg_run: int) -> Optional[CrossSectionRow]:
        for row in self.rows:
            if row.fg_run == fg_run and row.bg_run == bg_run:
                return row
        return None


# ============================================================================
# Processing Functions
# ============================================================================

def _require(value: Optional[UncertainValue], what: str, run_number: int) -> UncertainValue:
    if value is None:
        raise DataShapeError(f"Run {run_number} has no {what}")
    return value


def calculate_row(
    pair: RunPair,
    config: Optional[PipelineConfig] = None,
    interpolator: Optional[NPCrossSectionInterpolator] = None,
) -> CrossSectionRow:
    """
    Calculate fluxes and cross sections for one run pair.

    Parameters
    ----------
    pair : RunPair
        Foreground run (beam on target) and its background run
    config : PipelineConfig, optional
        Geometry, efficiencies and half-life; defaults when omitted
    interpolator : NPCrossSectionInterpolator, optional
        Source of sigma_np; the reference table when omitted

    Returns
    -------
    CrossSectionRow
        Targets without a decay count on the foreground run are omitted
    """
    config = config or PipelineConfig()
    interpolator = interpolator or NPCrossSectionInterpolator()
    fg, bg = pair.foreground, pair.background
    geometry = config.geometry

    phi_p = proton_flux(
        _require(fg.gross_protons, "proton count", fg.run_number), fg.clock_time, fg.live_fraction,
        _require(bg.gross_protons, "proton count", bg.run_number), bg.clock_time, bg.live_fraction,
    )
    sigma_np = interpolator.cross_section(fg.neutron_energy)

    # hydrogen thickness and solid angle do not depend on the decay count
    ch2 = geometry.target(TargetKind.CH2, UncertainValue.exact(0.0))
    phi_n = neutron_flux(
        phi_p, sigma_np, ch2.hydrogen_thickness(), ch2.solid_angle(), geometry.detector_solid_angle()
    )

    row = CrossSectionRow(
        fg_run=fg.run_number,
        bg_run=bg.run_number,
        neutron_energy=fg.neutron_energy,
        sigma_np=sigma_np,
        proton_flux=phi_p,
        neutron_flux=phi_n,
    )

    decay_const = config.decay_constant()
    decay_counts = {TargetKind.CH2: fg.ch2_decay, TargetKind.GRAPHITE: fg.graphite_decay}
    for kind, decay_count in decay_counts.items():
        if decay_count is None:
            continue
        target = geometry.target(kind, decay_count)
        budget = activation_cross_section_budget(
            target.decay_count,
            target.carbon_thickness(),
            target.solid_angle(),
            phi_n,
            fg.clock_time,
            decay_const,
            config.efficiency_for(kind),
            name=f"Run {fg.run_number} {kind.value}",
        )
        row.cross_sections[kind] = budget.to_uncertain_value()
        row.budgets[kind] = budget

    logger.debug(
        f"Run {fg.run_number}/{bg.run_number} at {fg.neutron_energy} MeV: "
        f"proton flux {phi_p}, neutron flux {phi_n}"
    )
    return row


def process_pairs(
    summary: RunSummary,
    requests: Sequence[RunPairRequest],
    config: Optional[PipelineConfig] = None,
) -> BatchResult:
    """
    Calculate every requested pair.

    Lookup, domain and data errors abort the batch unless
    ``config.skip_failed`` is set, in which case the failing pair is logged
    and recorded in :attr:`BatchResult.failures`.
    """
    config = config or PipelineConfig()
    interpolator = NPCrossSectionInterpolator()
    result = BatchResult()

    for request in requests:
        try:
            row = calculate_row(summary.pair(request), config, interpolator)
        except N2NError as exc:
            if not config.skip_failed:
                raise
            logger.warning(f"Skipping runs {request.fg_run}/{request.bg_run}: {exc}")
            result.failures.append(RowFailure(request, type(exc).__name__, str(exc)))
            continue
        result.rows.append(row)

    logger.info(f"Processed {result.n_processed} pairs: {len(result.rows)} ok, {len(result.failures)} failed")
    return result


# ============================================================================
# Output
# ============================================================================

RESULT_COLUMNS = (
    "fg_run",
    "bg_run",
    "neutron_energy_MeV",
    "sigma_np_mb_sr",
    "proton_flux",
    "proton_flux_unc",
    "neutron_flux",
    "neutron_flux_unc",
    "ch2_xs_mb",
    "ch2_xs_unc_mb",
    "graphite_xs_mb",
    "graphite_xs_unc_mb",
)


def results_to_dataframe(batch_result: BatchResult) -> pd.DataFrame:
    """
    Convert batch results to a pandas DataFrame.

    One row per pair; cross sections of targets without a decay count are NaN.
    """
    rows = []
    for row in batch_result.rows:
        record = {
            "fg_run": row.fg_run,
            "bg_run": row.bg_run,
            "neutron_energy_MeV": row.neutron_energy,
            "sigma_np_mb_sr": row.sigma_np.value,
            "proton_flux": row.proton_flux.value,
            "proton_flux_unc": row.proton_flux.uncertainty,
            "neutron_flux": row.neutron_flux.value,
            "neutron_flux_unc": row.neutron_flux.uncertainty,
        }
        for kind in TargetKind:
            xs = row.cross_sections.get(kind)
            record[f"{kind.value}_xs_mb"] = xs.value if xs is not None else float("nan")
            record[f"{kind.value}_xs_unc_mb"] = xs.uncertainty if xs is not None else float("nan")
        rows.append(record)
    return pd.DataFrame(rows, columns=list(RESULT_COLUMNS))


def budgets_to_dataframe(batch_result: BatchResult) -> pd.DataFrame:
    """Long-format table of every cross-section uncertainty component."""
    frames = []
    for row in batch_result.rows:
        for kind, budget in row.budgets.items():
            frame = budget.to_dataframe()
            frame.insert(0, "target", kind.value)
            frame.insert(0, "bg_run", row.bg_run)
            frame.insert(0, "fg_run", row.fg_run)
            frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=["fg_run", "bg_run", "target"])
    return pd.concat(frames, ignore_index=True)


def save_results_csv(batch_result: BatchResult, output_path: Union[str, Path]) -> None:
    """Save batch results to CSV with fixed-point numbers."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    results_to_dataframe(batch_result).to_csv(output_path, index=False, float_format="%.6f")
    logger.info(f"Saved results to {output_path}")


__all__ = [
    "PipelineConfig",
    "CrossSectionRow",
    "RowFailure",
    "BatchResult",
    "calculate_row",
    "process_pairs",
    "RESULT_COLUMNS",
    "results_to_dataframe",
    "budgets_to_dataframe",
    "save_results_csv",
]
