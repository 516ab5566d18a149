"""
12C(n,2n)11C activation cross section.

The number of C-11 nuclei present at the end of the activation is related
to the cross section through the saturation of the C-11 population during
a constant-flux activation:

    sigma = (N_C11 / eff) * lambda / (N_C * Omega * Phi_n * 1e-3 * (1 - exp(-lambda t)))

with ``N_C`` in nuclei/barn, ``Phi_n`` in neutrons/s/sr and ``sigma`` in mbarn.
Uncertainties are propagated through every input, including the decay
constant and the activation time entering the saturation factor.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple, Union

from n2nxs.core.errors import DomainError
from n2nxs.physics.flux import MBARN_TO_BARN
from n2nxs.uncertainty.budget import UncertaintyBudget, UncertaintyCategory
from n2nxs.uncertainty.uncertain import UncertainValue, as_uncertain

# ENSDF: T1/2(11C) = 20.334(24) min
C11_HALF_LIFE_MIN = 20.334
C11_HALF_LIFE_UNC_MIN = 0.024

SATURATION_EPSILON = 1e-9


def decay_constant(half_life_s: Union[UncertainValue, float]) -> UncertainValue:
    """Decay constant ``ln(2) / T_half`` (1/s)."""
    half_life_s = as_uncertain(half_life_s)
    if half_life_s.value <= 0:
        raise DomainError(f"Half-life must be positive, got {half_life_s.value}")
    return math.log(2.0) / half_life_s


def c11_decay_constant(
    half_life_min: float = C11_HALF_LIFE_MIN,
    half_life_unc_min: float = C11_HALF_LIFE_UNC_MIN,
) -> UncertainValue:
    """C-11 decay constant (1/s) from a half-life given in minutes."""
    return decay_constant(UncertainValue(half_life_min * 60.0, half_life_unc_min * 60.0))


def saturation_factor(
    decay_const: Union[UncertainValue, float],
    activation_time: Union[UncertainValue, float],
) -> UncertainValue:
    """
    Saturation factor ``S = 1 - exp(-lambda t)``.

    Raises
    ------
    DomainError
        If the activation time is negative or S is effectively zero
    """
    decay_const = as_uncertain(decay_const)
    activation_time = as_uncertain(activation_time)
    if activation_time.value < 0:
        raise DomainError(f"Activation time cannot be negative: {activation_time.value}")
    x = decay_const.value * activation_time.value
    value = -math.expm1(-x)
    if value < SATURATION_EPSILON:
        raise DomainError(
            f"Saturation factor {value:.3g} is effectively zero (activation time {activation_time.value} s)"
        )
    decay_term = math.exp(-x)
    return UncertainValue.from_partials(
        value,
        [
            (activation_time.value * decay_term, decay_const.uncertainty),
            (decay_const.value * decay_term, activation_time.uncertainty),
        ],
    )


def _contributions(
    decay_count: UncertainValue,
    target_number_thickness: UncertainValue,
    target_solid_angle: UncertainValue,
    neutron_flux: UncertainValue,
    activation_time: Union[UncertainValue, float],
    decay_const: Optional[UncertainValue],
    efficiency: float,
) -> Tuple[float, List[Tuple[UncertaintyCategory, str, float]]]:
    if efficiency <= 0:
        raise DomainError(f"Counting efficiency must be positive, got {efficiency}")
    if decay_const is None:
        decay_const = c11_decay_constant()
    activation_time = as_uncertain(activation_time)
    for name, quantity in (
        ("target number thickness", target_number_thickness),
        ("target solid angle", target_solid_angle),
        ("neutron flux", neutron_flux),
    ):
        if quantity.value == 0:
            raise DomainError(f"Cross section is undefined for zero {name}")

    corrected = decay_count.scale(1.0 / efficiency)
    lam = decay_const.value
    t = activation_time.value
    saturation = saturation_factor(decay_const, activation_time).value
    decay_term = math.exp(-lam * t)

    per_nucleus = lam / (
        target_number_thickness.value
        * target_solid_angle.value
        * neutron_flux.value
        * MBARN_TO_BARN
        * saturation
    )
    sigma = corrected.value * per_nucleus

    # d(ln sigma)/d(lambda) and d(ln sigma)/dt
    dln_dlam = 1.0 / lam - t * decay_term / saturation
    dln_dt = lam * decay_term / saturation

    terms = [
        (UncertaintyCategory.COUNTING_STATISTICS, "Activated C-11 nuclei", per_nucleus * corrected.uncertainty),
        (
            UncertaintyCategory.TARGET_THICKNESS,
            "Target number thickness",
            sigma * target_number_thickness.uncertainty / target_number_thickness.value,
        ),
        (
            UncertaintyCategory.GEOMETRY,
            "Target solid angle",
            sigma * target_solid_angle.uncertainty / target_solid_angle.value,
        ),
        (
            UncertaintyCategory.NEUTRON_FLUX,
            "Neutron flux",
            sigma * neutron_flux.uncertainty / neutron_flux.value,
        ),
        (UncertaintyCategory.HALF_LIFE, "C-11 decay constant", sigma * dln_dlam * decay_const.uncertainty),
        (UncertaintyCategory.TIMING, "Activation time", sigma * dln_dt * activation_time.uncertainty),
    ]
    return sigma, terms


def activation_cross_section(
    decay_count: UncertainValue,
    target_number_thickness: UncertainValue,
    target_solid_angle: UncertainValue,
    neutron_flux: UncertainValue,
    activation_time: Union[UncertainValue, float],
    decay_const: Optional[UncertainValue] = None,
    efficiency: float = 1.0,
) -> UncertainValue:
    """
    Activation cross section (mbarn) with full first-order propagation.

    Parameters
    ----------
    decay_count : UncertainValue
        Activated C-11 nuclei at the end of activation
    target_number_thickness : UncertainValue
        Carbon number thickness of the target (nuclei/barn)
    target_solid_angle : UncertainValue
        Solid angle of the target seen from the source (sr)
    neutron_flux : UncertainValue
        Neutron flux (neutrons/s/sr)
    activation_time : UncertainValue or float
        Duration of the activation (s)
    decay_const : UncertainValue, optional
        Decay constant of the product (1/s); C-11 by default
    efficiency : float
        Counting efficiency correction; the decay count is divided by it

    Returns
    -------
    UncertainValue
        Cross section in mbarn
    """
    return activation_cross_section_budget(
        decay_count, target_number_thickness, target_solid_angle,
        neutron_flux, activation_time, decay_const, efficiency,
    ).to_uncertain_value()


def activation_cross_section_budget(
    decay_count: UncertainValue,
    target_number_thickness: UncertainValue,
    target_solid_angle: UncertainValue,
    neutron_flux: UncertainValue,
    activation_time: Union[UncertainValue, float],
    decay_const: Optional[UncertainValue] = None,
    efficiency: float = 1.0,
    name: str = "",
) -> UncertaintyBudget:
    """Per-source breakdown of the :func:`activation_cross_section` uncertainty."""
    sigma, terms = _contributions(
        decay_count, target_number_thickness, target_solid_angle,
        neutron_flux, activation_time, decay_const, efficiency,
    )
    budget = UncertaintyBudget(measurement=sigma, units="mbarn", name=name)
    for category, description, value in terms:
        budget.add_absolute(category, value, description)
    budget.compute_total()
    return budget


__all__ = [
    "C11_HALF_LIFE_MIN",
    "C11_HALF_LIFE_UNC_MIN",
    "SATURATION_EPSILON",
    "decay_constant",
    "c11_decay_constant",
    "saturation_factor",
    "activation_cross_section",
    "activation_cross_section_budget",
]
