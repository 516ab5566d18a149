"""Reference nuclear data."""

from n2nxs.data.np_scattering import (
    NP_REFERENCE_TABLE,
    NPCrossSectionInterpolator,
    interpolate,
)

__all__ = [
    "NP_REFERENCE_TABLE",
    "NPCrossSectionInterpolator",
    "interpolate",
]
