"""Proton and neutron flux from proton-telescope counts."""

from __future__ import annotations

from typing import Union

from n2nxs.core.errors import DomainError
from n2nxs.uncertainty.uncertain import UncertainValue, as_uncertain

# 1 mbarn = 1e-3 barn
MBARN_TO_BARN = 1e-3

Counts = Union[UncertainValue, int, float]


def counting_rate(
    counts: Counts,
    clock_time: Union[UncertainValue, float],
    live_fraction: Union[UncertainValue, float],
) -> UncertainValue:
    """
    Dead-time corrected counting rate, ``N / (t_clock * f_live)`` (1/s).

    Plain-number counts are given Poisson uncertainty ``sqrt(N)``.
    """
    if not isinstance(counts, UncertainValue):
        counts = UncertainValue.from_counts(counts)
    clock_time = as_uncertain(clock_time)
    live_fraction = as_uncertain(live_fraction)
    if clock_time.value == 0:
        raise DomainError("Counting rate is undefined for zero clock time")
    if live_fraction.value == 0:
        raise DomainError("Counting rate is undefined for zero live fraction")
    return counts / (clock_time * live_fraction)


def proton_flux(
    fg_counts: Counts,
    fg_clock: Union[UncertainValue, float],
    fg_live_frac: Union[UncertainValue, float],
    bg_counts: Counts,
    bg_clock: Union[UncertainValue, float],
    bg_live_frac: Union[UncertainValue, float],
) -> UncertainValue:
    """
    Background-subtracted proton rate seen by the telescope (protons/s).

    Foreground and background runs are independent, so their rate
    uncertainties add in quadrature.
    """
    foreground = counting_rate(fg_counts, fg_clock, fg_live_frac)
    background = counting_rate(bg_counts, bg_clock, bg_live_frac)
    return foreground - background


def neutron_flux(
    proton_flux: UncertainValue,
    sigma_np: Union[UncertainValue, float],
    ch2_hydrogen_thickness: UncertainValue,
    ch2_solid_angle: UncertainValue,
    detector_solid_angle: UncertainValue,
) -> UncertainValue:
    """
    Neutron flux incident on the CH2 target (neutrons/s/sr).

    ``phi_n = phi_p / (sigma_np * N_H * Omega_CH2 * Omega_det * 1e-3)``
    with ``sigma_np`` in mbarn/sr and ``N_H`` in nuclei/barn.
    """
    denominator = (
        as_uncertain(sigma_np)
        * ch2_hydrogen_thickness
        * ch2_solid_angle
        * detector_solid_angle
    ).scale(MBARN_TO_BARN)
    if denominator.value == 0:
        raise DomainError("Neutron flux normalisation is zero (check sigma_np, N_H and solid angles)")
    return proton_flux / denominator


__all__ = ["MBARN_TO_BARN", "counting_rate", "proton_flux", "neutron_flux"]
