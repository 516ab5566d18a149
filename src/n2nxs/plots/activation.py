"""
Activation Analysis Plotting Module

Figures for checking a cross-section analysis:
- Decay curve with its fitted exponential and residuals
- Activation cross section versus neutron energy, per target
- The n-p reference cross section and its spline
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from n2nxs.data.np_scattering import NPCrossSectionInterpolator
from n2nxs.physics.decay import DecayCurve, DecayFitResult
from n2nxs.physics.targets import TargetKind
from n2nxs.workflows.cross_section_pipeline import BatchResult


# =============================================================================
# Plot Style Configuration
# =============================================================================

REPORT_STYLE = {
    "figure.figsize": (8, 6),
    "font.size": 11,
    "font.family": "serif",
    "axes.labelsize": 12,
    "axes.titlesize": 13,
    "legend.fontsize": 10,
    "lines.linewidth": 1.5,
    "axes.grid": True,
    "grid.alpha": 0.3,
    "grid.linestyle": "--",
    "figure.dpi": 150,
    "savefig.dpi": 300,
    "savefig.bbox": "tight",
}

TARGET_COLORS = {
    TargetKind.CH2: '#1f77b4',       # Blue
    TargetKind.GRAPHITE: '#d62728',  # Red
}

TARGET_LABELS = {
    TargetKind.CH2: 'CH$_2$',
    TargetKind.GRAPHITE: 'Graphite',
}


def apply_report_style():
    """Apply the report figure style."""
    plt.rcParams.update(REPORT_STYLE)


def _save(fig, save_path: Optional[Union[str, Path]]) -> None:
    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path, dpi=300, bbox_inches='tight')


# =============================================================================
# Decay Curves
# =============================================================================

def plot_decay_fit(
    curve: DecayCurve,
    fit: DecayFitResult,
    title: str = "C-11 Decay Curve",
    log_y: bool = True,
    figsize: Tuple[float, float] = (9, 7),
    save_path: Optional[Union[str, Path]] = None,
) -> Any:
    """
    Plot a decay curve with its fitted model and normalised residuals.

    Parameters
    ----------
    curve : DecayCurve
        Measured samples (time in minutes)
    fit : DecayFitResult
        Result of :func:`~n2nxs.physics.decay.fit_decay_curve`
    title : str
        Plot title
    log_y : bool
        Use log y-axis for the upper panel
    figsize : tuple
        Figure size
    save_path : Path, optional
        Save location

    Returns
    -------
    fig, (ax_main, ax_resid)
    """
    apply_report_style()

    fig, (ax, ax_resid) = plt.subplots(
        2, 1, figsize=figsize, sharex=True, gridspec_kw={'height_ratios': [3, 1]}
    )

    ax.errorbar(curve.times, curve.counts, yerr=curve.uncertainties,
                fmt='o', color='black', markersize=3, capsize=2, label='Data')

    t_fine = np.linspace(curve.times.min(), curve.times.max(), 400)
    half_life = np.log(2.0) / fit.rate
    ax.plot(t_fine, fit.evaluate(t_fine), '-', color='#d62728',
            label=f'Fit: $N_0$={fit.amplitude:.4g}, $t_{{1/2}}$={half_life:.3f} min')
    if fit.offset > 0:
        ax.axhline(fit.offset, color='gray', linestyle=':', alpha=0.7, label='Background')

    if log_y:
        ax.set_yscale('log')
    ax.set_ylabel('Counts')
    ax.set_title(title)
    ax.legend(loc='best')

    residuals = (curve.counts - fit.evaluate(curve.times)) / curve.uncertainties
    ax_resid.axhline(0.0, color='gray', linewidth=1)
    ax_resid.plot(curve.times, residuals, 'o', color='black', markersize=3)
    ax_resid.set_xlabel('Time (min)')
    ax_resid.set_ylabel('Residual ($\\sigma$)')
    ax_resid.text(0.98, 0.85, f'$\\chi^2_\\nu$ = {fit.reduced_chi_squared:.2f}',
                  transform=ax_resid.transAxes, ha='right', fontsize=9)

    plt.tight_layout()
    _save(fig, save_path)
    return fig, (ax, ax_resid)


# =============================================================================
# Cross Sections
# =============================================================================

def plot_cross_sections(
    batch_result: BatchResult,
    title: str = "$^{12}$C(n,2n)$^{11}$C Cross Section",
    figsize: Tuple[float, float] = (8, 6),
    save_path: Optional[Union[str, Path]] = None,
) -> Any:
    """
    Plot activation cross section versus neutron energy for each target.

    Returns
    -------
    fig, ax
    """
    apply_report_style()

    fig, ax = plt.subplots(figsize=figsize)

    for kind in TargetKind:
        points = [
            (row.neutron_energy, row.cross_sections[kind])
            for row in batch_result.rows
            if kind in row.cross_sections
        ]
        if not points:
            continue
        energies = np.array([p[0] for p in points])
        values = np.array([p[1].value for p in points])
        errors = np.array([p[1].uncertainty for p in points])
        ax.errorbar(energies, values, yerr=errors, fmt='o',
                    color=TARGET_COLORS[kind], label=TARGET_LABELS[kind],
                    capsize=3, markersize=5)

    ax.set_xlabel('Neutron Energy (MeV)')
    ax.set_ylabel('Cross Section (mb)')
    ax.set_title(title)
    if ax.get_legend_handles_labels()[0]:
        ax.legend(loc='best')

    plt.tight_layout()
    _save(fig, save_path)
    return fig, ax


def plot_np_cross_section(
    interpolator: Optional[NPCrossSectionInterpolator] = None,
    energy_range: Optional[Tuple[float, float]] = None,
    figsize: Tuple[float, float] = (8, 6),
    save_path: Optional[Union[str, Path]] = None,
) -> Any:
    """Plot the n-p reference nodes and the interpolating spline."""
    interpolator = interpolator or NPCrossSectionInterpolator()
    low, high = energy_range or interpolator.energy_range

    apply_report_style()
    fig, ax = plt.subplots(figsize=figsize)

    energies = np.linspace(low, high, 300)
    ax.plot(energies, interpolator.evaluate(energies), '-', color='#1f77b4', label='Natural cubic spline')
    nodes = np.asarray(interpolator.nodes)
    ax.plot(nodes[:, 0], nodes[:, 1], 's', color='black', label='Reference')

    ax.set_xlabel('Neutron Energy (MeV)')
    ax.set_ylabel('d$\\sigma$/d$\\Omega$ (mb/sr)')
    ax.set_title('n-p Elastic Scattering')
    ax.legend(loc='best')

    plt.tight_layout()
    _save(fig, save_path)
    return fig, ax


__all__ = [
    "REPORT_STYLE",
    "TARGET_COLORS",
    "apply_report_style",
    "plot_decay_fit",
    "plot_cross_sections",
    "plot_np_cross_section",
]
