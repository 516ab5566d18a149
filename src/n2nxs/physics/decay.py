"""
C-11 decay-curve fitting and activated-nuclei counts.

The annihilation-gamma counting rate of an activated target is fitted with

    f(t) = N0 * exp(-lambda * t) + A

where ``t`` is in minutes since the start of counting, ``N0`` the initial
counting rate, and ``A`` a constant background. By default the decay rate
is fixed to the C-11 value and only ``N0`` and ``A`` are free.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
from scipy import optimize

from n2nxs.core.errors import DataShapeError, DomainError
from n2nxs.physics.cross_section import C11_HALF_LIFE_MIN
from n2nxs.uncertainty.uncertain import UncertainValue


@dataclass
class DecayCurve:
    """
    Counting samples of a decaying target.

    Attributes
    ----------
    times : np.ndarray
        Sample times (min)
    counts : np.ndarray
        Counts per sample
    uncertainties : np.ndarray
        Count uncertainties; Poisson ``sqrt(N)`` when not supplied, with
        empty bins weighted as one count
    """

    times: np.ndarray
    counts: np.ndarray
    uncertainties: Optional[np.ndarray] = field(default=None)

    def __post_init__(self):
        self.times = np.asarray(self.times, dtype=float)
        self.counts = np.asarray(self.counts, dtype=float)
        if self.times.shape != self.counts.shape or self.times.ndim != 1:
            raise DataShapeError("Decay curve times and counts must be 1D arrays of equal length")
        if self.uncertainties is None:
            self.uncertainties = np.sqrt(np.clip(self.counts, 0.0, None))
        else:
            self.uncertainties = np.asarray(self.uncertainties, dtype=float)
            if self.uncertainties.shape != self.counts.shape:
                raise DataShapeError("Decay curve uncertainties must match counts")
        self.uncertainties = np.where(self.uncertainties > 0, self.uncertainties, 1.0)

    def __len__(self) -> int:
        return len(self.times)


@dataclass
class DecayFitResult:
    """Fitted decay-curve parameters with standard errors."""

    amplitude: float
    rate: float
    amplitude_stderr: float
    rate_stderr: float
    offset: float = 0.0
    offset_stderr: float = 0.0
    chi_squared: float = 0.0
    dof: int = 1

    @property
    def reduced_chi_squared(self) -> float:
        return self.chi_squared / self.dof if self.dof > 0 else 0.0

    def evaluate(self, t):
        return self.amplitude * np.exp(-self.rate * np.asarray(t, dtype=float)) + self.offset


def fit_decay_curve(
    curve: DecayCurve,
    half_life_min: float = C11_HALF_LIFE_MIN,
    fix_rate: bool = True,
) -> DecayFitResult:
    """
    Fit ``N0 exp(-lambda t) + A`` to a decay curve.

    Parameters
    ----------
    curve : DecayCurve
        Samples to fit
    half_life_min : float
        Half-life giving the (initial or fixed) decay rate, minutes
    fix_rate : bool
        Keep the decay rate fixed at ``ln 2 / half_life_min``

    Returns
    -------
    DecayFitResult
    """
    n_params = 2 if fix_rate else 3
    if len(curve) <= n_params:
        raise DataShapeError(f"Decay curve needs more than {n_params} samples, got {len(curve)}")

    rate0 = math.log(2.0) / half_life_min
    t, y, sigma = curve.times, curve.counts, curve.uncertainties

    if fix_rate:
        def model(x, n0, offset):
            return n0 * np.exp(-rate0 * x) + offset
        p0 = [float(np.max(y)), 0.0]
    else:
        def model(x, n0, rate, offset):
            return n0 * np.exp(-rate * x) + offset
        p0 = [float(np.max(y)), rate0, 0.0]

    try:
        popt, pcov = optimize.curve_fit(
            model, t, y, p0=p0, sigma=sigma, absolute_sigma=True, maxfev=5000,
        )
    except RuntimeError as exc:
        raise DomainError(f"Decay curve fit did not converge: {exc}") from exc

    perr = np.sqrt(np.diag(pcov))
    if not np.all(np.isfinite(perr)):
        raise DomainError("Decay curve fit produced undefined parameter errors")

    residuals = (y - model(t, *popt)) / sigma
    chi_sq = float(np.sum(residuals**2))

    if fix_rate:
        amplitude, offset = popt
        amp_err, off_err = perr
        rate, rate_err = rate0, 0.0
    else:
        amplitude, rate, offset = popt
        amp_err, rate_err, off_err = perr

    return DecayFitResult(
        amplitude=float(amplitude),
        rate=float(rate),
        amplitude_stderr=float(amp_err),
        rate_stderr=float(rate_err),
        offset=float(offset),
        offset_stderr=float(off_err),
        chi_squared=chi_sq,
        dof=len(curve) - n_params,
    )


def activated_nuclei(
    fit: DecayFitResult,
    transit_time_min: float,
    efficiency: float,
) -> UncertainValue:
    """
    C-11 nuclei present at the end of activation.

    ``N = N0 exp(lambda t_trans) / (lambda eff)``, where ``t_trans`` is the
    time between the end of activation and the start of counting. Both the
    amplitude and rate errors are propagated.
    """
    if efficiency <= 0:
        raise DomainError(f"Counting efficiency must be positive, got {efficiency}")
    if fit.rate <= 0:
        raise DomainError(f"Decay rate must be positive, got {fit.rate}")
    growth = math.exp(fit.rate * transit_time_min)
    value = fit.amplitude * growth / (fit.rate * efficiency)
    return UncertainValue.from_partials(
        value,
        [
            (growth / (fit.rate * efficiency), fit.amplitude_stderr),
            (value * (transit_time_min - 1.0 / fit.rate), fit.rate_stderr),
        ],
    )


def decay_curve_from_samples(samples: Sequence[Sequence[float]]) -> DecayCurve:
    """Build a curve from ``(time, count)`` or ``(time, count, uncertainty)`` rows."""
    array = np.asarray(samples, dtype=float)
    if array.ndim != 2 or array.shape[1] not in (2, 3):
        raise DataShapeError("Decay samples must be (time, count[, uncertainty]) rows")
    uncertainties = array[:, 2] if array.shape[1] == 3 else None
    return DecayCurve(array[:, 0], array[:, 1], uncertainties)


__all__ = [
    "DecayCurve",
    "DecayFitResult",
    "fit_decay_curve",
    "activated_nuclei",
    "decay_curve_from_samples",
]
