"""n2nxs physics module."""

from n2nxs.physics.targets import (
    InstrumentGeometry,
    TargetKind,
    TargetMaterial,
    TargetSpec,
    material_for,
    number_thickness_of_element,
    solid_angle,
)
from n2nxs.physics.flux import (
    MBARN_TO_BARN,
    counting_rate,
    neutron_flux,
    proton_flux,
)
from n2nxs.physics.cross_section import (
    C11_HALF_LIFE_MIN,
    C11_HALF_LIFE_UNC_MIN,
    activation_cross_section,
    activation_cross_section_budget,
    c11_decay_constant,
    decay_constant,
    saturation_factor,
)
from n2nxs.physics.decay import (
    DecayCurve,
    DecayFitResult,
    activated_nuclei,
    fit_decay_curve,
)
from n2nxs.physics.telescope import Region, count_in_region, region_from_roi

__all__ = [
    # targets
    "InstrumentGeometry",
    "TargetKind",
    "TargetMaterial",
    "TargetSpec",
    "material_for",
    "number_thickness_of_element",
    "solid_angle",
    # flux
    "MBARN_TO_BARN",
    "counting_rate",
    "neutron_flux",
    "proton_flux",
    # cross section
    "C11_HALF_LIFE_MIN",
    "C11_HALF_LIFE_UNC_MIN",
    "activation_cross_section",
    "activation_cross_section_budget",
    "c11_decay_constant",
    "decay_constant",
    "saturation_factor",
    # collaborators
    "DecayCurve",
    "DecayFitResult",
    "activated_nuclei",
    "fit_decay_curve",
    "Region",
    "count_in_region",
    "region_from_roi",
]
