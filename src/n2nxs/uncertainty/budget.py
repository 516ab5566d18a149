"""
Per-source decomposition of a propagated uncertainty.

A budget holds the independent first-order contributions ``|df/dx_i| dx_i``
of every input to a derived quantity. Their quadrature sum is the
propagated standard uncertainty, and each squared term is that source's
share of the variance, which shows the dominant source for a run pair.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from n2nxs.uncertainty.uncertain import UncertainValue


class UncertaintyCategory(Enum):
    """Independent inputs of the (n,2n) activation measurement."""

    COUNTING_STATISTICS = "counting"
    TARGET_THICKNESS = "target_thickness"
    GEOMETRY = "geometry"
    NEUTRON_FLUX = "neutron_flux"
    HALF_LIFE = "half_life"
    TIMING = "timing"
    OTHER = "other"


@dataclass(frozen=True)
class UncertaintyComponent:
    """
    Contribution of one input.

    Attributes
    ----------
    category : UncertaintyCategory
        Input the contribution comes from
    value : float
        Absolute contribution, in the units of the measurement
    description : str
        Label used in tables
    relative : float
        ``value`` divided by the magnitude of the measurement
    """

    category: UncertaintyCategory
    value: float
    description: str = ""
    relative: float = 0.0

    @classmethod
    def from_relative(
        cls,
        category: UncertaintyCategory,
        relative: float,
        measurement: float,
        description: str = "",
    ) -> UncertaintyComponent:
        return cls(category, abs(relative * measurement), description, abs(relative))


@dataclass
class UncertaintyBudget:
    """Contributions to the uncertainty of one measured value."""

    measurement: float
    units: str = ""
    name: str = ""
    components: List[UncertaintyComponent] = field(default_factory=list)
    total_uncertainty: float = 0.0

    def add_absolute(
        self,
        category: UncertaintyCategory,
        value: float,
        description: str = "",
    ) -> UncertaintyComponent:
        relative = abs(value / self.measurement) if self.measurement != 0 else 0.0
        component = UncertaintyComponent(category, abs(value), description, relative)
        self.components.append(component)
        return component

    def add_relative(
        self,
        category: UncertaintyCategory,
        relative: float,
        description: str = "",
    ) -> UncertaintyComponent:
        component = UncertaintyComponent.from_relative(category, relative, self.measurement, description)
        self.components.append(component)
        return component

    def compute_total(self) -> float:
        """Quadrature sum of the components; stored in ``total_uncertainty``."""
        if self.components:
            self.total_uncertainty = float(np.linalg.norm([c.value for c in self.components]))
        return self.total_uncertainty

    @property
    def relative_total(self) -> float:
        if self.measurement == 0:
            return 0.0
        return self.total_uncertainty / abs(self.measurement)

    def _variance_fraction(self, value: float) -> float:
        total_var = self.total_uncertainty**2
        return value**2 / total_var if total_var > 0 else 0.0

    def variance_fractions(self) -> Dict[UncertaintyCategory, float]:
        """Share of the total variance per category (sums to 1)."""
        fractions: Dict[UncertaintyCategory, float] = {}
        for c in self.components:
            fractions[c.category] = fractions.get(c.category, 0.0) + self._variance_fraction(c.value)
        return fractions

    def fraction_by_category(self, category: UncertaintyCategory) -> float:
        return self.variance_fractions().get(category, 0.0)

    def to_uncertain_value(self) -> UncertainValue:
        """The measurement with the quadrature total as its uncertainty."""
        return UncertainValue(self.measurement, self.total_uncertainty)

    def dominant_component(self) -> Optional[UncertaintyComponent]:
        if not self.components:
            return None
        return max(self.components, key=lambda c: c.value)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per component, largest first."""
        rows = [
            {
                "category": c.category.value,
                "description": c.description,
                "uncertainty": c.value,
                "relative": c.relative,
                "variance_fraction": self._variance_fraction(c.value),
            }
            for c in sorted(self.components, key=lambda c: -c.value)
        ]
        return pd.DataFrame(
            rows, columns=["category", "description", "uncertainty", "relative", "variance_fraction"]
        )

    def summary_table(self) -> str:
        """Plain-text table for logs and reports."""
        title = self.name or "Uncertainty budget"
        lines = [
            f"{title}: {self.measurement:.6g} ± {self.total_uncertainty:.3g} {self.units}"
            f" ({100 * self.relative_total:.2f}%)",
            f"  {'source':<18}{'input':<26}{'abs':>11}{'rel %':>8}{'var %':>8}",
        ]
        for c in sorted(self.components, key=lambda c: -c.value):
            lines.append(
                f"  {c.category.value:<18}{c.description:<26}{c.value:>11.4g}"
                f"{100 * c.relative:>8.2f}{100 * self._variance_fraction(c.value):>8.1f}"
            )
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "units": self.units,
            "measurement": self.measurement,
            "total_uncertainty": self.total_uncertainty,
            "relative_total": self.relative_total,
            "components": [
                {
                    "category": c.category.value,
                    "description": c.description,
                    "value": c.value,
                    "relative": c.relative,
                    "variance_fraction": self._variance_fraction(c.value),
                }
                for c in self.components
            ],
        }


__all__ = [
    "UncertaintyCategory",
    "UncertaintyComponent",
    "UncertaintyBudget",
]
