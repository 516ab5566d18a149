"""Activation targets, their material constants, and the instrument geometry."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from n2nxs.core.errors import DataShapeError, DomainError
from n2nxs.uncertainty.uncertain import UncertainValue, as_uncertain

# 1 u = 1.6605389e-24 g, 1 barn = 1e-24 cm^2
ATOMIC_MASS_UNIT_G = 1.6605389e-24
BARN_CM2 = 1e-24

HYDROGEN_MASS_U = 1.007825
CARBON_MASS_U = 12.0


class TargetKind(Enum):
    CH2 = "ch2"
    GRAPHITE = "graphite"


@dataclass(frozen=True)
class TargetMaterial:
    """Bulk material constants of a target (treated as exact)."""

    density_g_cm3: float
    molar_mass_u: float
    atoms_per_molecule: Mapping[str, int]


_MATERIALS: Dict[TargetKind, TargetMaterial] = {
    TargetKind.CH2: TargetMaterial(
        density_g_cm3=0.89,
        molar_mass_u=2 * HYDROGEN_MASS_U + CARBON_MASS_U,
        atoms_per_molecule={"H": 2, "C": 1},
    ),
    TargetKind.GRAPHITE: TargetMaterial(
        density_g_cm3=2.276,
        molar_mass_u=CARBON_MASS_U,
        atoms_per_molecule={"C": 1},
    ),
}


def material_for(kind: TargetKind) -> TargetMaterial:
    """Material constants for a target kind."""
    return _MATERIALS[kind]


def solid_angle(
    area: Union[UncertainValue, float],
    distance: Union[UncertainValue, float],
) -> UncertainValue:
    """
    Small-angle solid angle subtended by a flat area, ``A / d^2`` (sr).

    The distance enters squared, so its relative uncertainty counts twice:
    ``dO/O = sqrt((dA/A)^2 + (2 dd/d)^2)``.
    """
    area = as_uncertain(area)
    distance = as_uncertain(distance)
    if distance.value == 0:
        raise DomainError("Solid angle is undefined at zero distance")
    return area / distance.power(2)


def number_thickness_of_element(
    thickness: Union[UncertainValue, float],
    density: float,
    molar_mass: float,
    atoms_per_molecule: int,
) -> UncertainValue:
    """
    Areal number density of one element in a slab target.

    Parameters
    ----------
    thickness : UncertainValue or float
        Physical thickness (cm)
    density : float
        Mass density (g/cm^3), exact
    molar_mass : float
        Molecular mass (u), exact
    atoms_per_molecule : int
        Atoms of the element per molecule

    Returns
    -------
    UncertainValue
        Number thickness (nuclei/barn)
    """
    if molar_mass <= 0:
        raise DomainError(f"Molar mass must be positive, got {molar_mass}")
    factor = atoms_per_molecule * density / (molar_mass * ATOMIC_MASS_UNIT_G) * BARN_CM2
    return as_uncertain(thickness).scale(factor)


@dataclass(frozen=True)
class TargetSpec:
    """
    A target analysed for one run pair.

    Attributes
    ----------
    kind : TargetKind
        CH2 or graphite
    area : UncertainValue
        Face area (cm^2)
    distance : UncertainValue
        Distance from the neutron source (cm)
    thickness : UncertainValue
        Physical thickness (cm)
    decay_count : UncertainValue
        Activated C-11 nuclei in the target
    """

    kind: TargetKind
    area: UncertainValue
    distance: UncertainValue
    thickness: UncertainValue
    decay_count: UncertainValue

    @property
    def material(self) -> TargetMaterial:
        return material_for(self.kind)

    def solid_angle(self) -> UncertainValue:
        return solid_angle(self.area, self.distance)

    def number_thickness(self, element: str) -> UncertainValue:
        material = self.material
        atoms = material.atoms_per_molecule.get(element, 0)
        if atoms == 0:
            return UncertainValue.exact(0.0)
        return number_thickness_of_element(
            self.thickness, material.density_g_cm3, material.molar_mass_u, atoms
        )

    def carbon_thickness(self) -> UncertainValue:
        return self.number_thickness("C")

    def hydrogen_thickness(self) -> UncertainValue:
        return self.number_thickness("H")


def _exact(value: float):
    return field(default_factory=lambda: UncertainValue.exact(value))


@dataclass(frozen=True)
class InstrumentGeometry:
    """Fixed geometry of the proton telescope and the two targets (cm, cm^2)."""

    detector_area: UncertainValue = _exact(0.7133)
    detector_distance: UncertainValue = _exact(12.07)
    ch2_area: UncertainValue = _exact(5.067075)
    ch2_distance: UncertainValue = _exact(6.46)
    ch2_thickness: UncertainValue = _exact(0.164)
    graphite_area: UncertainValue = _exact(43.20869)
    graphite_distance: UncertainValue = _exact(14.52)
    graphite_thickness: UncertainValue = _exact(0.889)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> InstrumentGeometry:
        """
        Build a geometry overriding selected defaults.

        Each entry is a bare number (exact) or ``{"value": .., "uncertainty": ..}``.
        """
        if not data:
            return cls()
        known = set(cls.__dataclass_fields__)
        overrides = {}
        for key, raw in data.items():
            if key not in known:
                raise DataShapeError(f"Unknown geometry field: {key}")
            overrides[key] = _parse_uncertain(key, raw)
        return cls(**overrides)

    def detector_solid_angle(self) -> UncertainValue:
        return solid_angle(self.detector_area, self.detector_distance)

    def target(self, kind: TargetKind, decay_count: UncertainValue) -> TargetSpec:
        """Target of ``kind`` with this geometry and a per-run decay count."""
        if kind is TargetKind.CH2:
            return TargetSpec(kind, self.ch2_area, self.ch2_distance, self.ch2_thickness, decay_count)
        return TargetSpec(
            kind, self.graphite_area, self.graphite_distance, self.graphite_thickness, decay_count
        )


def _parse_uncertain(name: str, raw: Any) -> UncertainValue:
    if isinstance(raw, Mapping):
        try:
            return UncertainValue(float(raw["value"]), float(raw.get("uncertainty", 0.0)))
        except (KeyError, TypeError, ValueError) as exc:
            raise DataShapeError(f"Invalid value for {name}: {raw!r}") from exc
    try:
        return UncertainValue.exact(float(raw))
    except (TypeError, ValueError) as exc:
        raise DataShapeError(f"Invalid value for {name}: {raw!r}") from exc


__all__ = [
    "ATOMIC_MASS_UNIT_G",
    "BARN_CM2",
    "HYDROGEN_MASS_U",
    "CARBON_MASS_U",
    "TargetKind",
    "TargetMaterial",
    "material_for",
    "solid_angle",
    "number_thickness_of_element",
    "TargetSpec",
    "InstrumentGeometry",
]
