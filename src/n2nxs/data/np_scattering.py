"""
Elastic n-p scattering cross section used to normalise the neutron flux.

The proton telescope counts recoil protons scattered out of the CH2 target,
so the neutron flux follows from the differential (n,p) cross section at
the beam energy. The reference values below are lab-frame differential
cross sections tabulated between 20 and 28 MeV; intermediate energies are
obtained from a natural cubic spline through the nodes.

Data source: Nijmegen NN-online (http://nn-online.org/)
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple, Union

import numpy as np
from scipy import interpolate as sp_interpolate

from n2nxs.core.errors import DataShapeError
from n2nxs.uncertainty.uncertain import UncertainValue

logger = logging.getLogger(__name__)

# (energy MeV, differential cross section mbarn/sr)
NP_REFERENCE_TABLE: Tuple[Tuple[float, float], ...] = (
    (20.0, 153.0),
    (22.0, 139.0),
    (24.0, 128.0),
    (26.0, 119.0),
    (28.0, 111.0),
)


def _build_spline(nodes: Sequence[Tuple[float, float]]) -> sp_interpolate.CubicSpline:
    table = np.asarray(nodes, dtype=float)
    if table.ndim != 2 or table.shape[1] != 2:
        raise DataShapeError("Interpolation nodes must be (x, y) pairs")
    if table.shape[0] < 3:
        raise DataShapeError(f"At least 3 interpolation nodes are required, got {table.shape[0]}")
    if np.any(np.diff(table[:, 0]) <= 0):
        raise DataShapeError("Interpolation node energies must be strictly increasing")
    return sp_interpolate.CubicSpline(
        table[:, 0], table[:, 1], bc_type="natural", extrapolate=True
    )


def interpolate(
    nodes: Sequence[Tuple[float, float]],
    x: Union[float, np.ndarray],
) -> Union[float, np.ndarray]:
    """
    Natural cubic spline interpolation through ``nodes``.

    Parameters
    ----------
    nodes : sequence of (float, float)
        Strictly increasing x values with their y values
    x : float or np.ndarray
        Evaluation point(s); values outside the node span are extrapolated

    Returns
    -------
    float or np.ndarray
    """
    spline = _build_spline(nodes)
    result = spline(x)
    if np.ndim(result) == 0:
        return float(result)
    return result


class NPCrossSectionInterpolator:
    """
    Differential n-p cross section (mbarn/sr) at an arbitrary neutron energy.

    The spline is built once at construction; evaluation is stateless.
    Reference values are treated as exact, so the returned cross section
    carries no uncertainty.

    Examples
    --------
    >>> interp = NPCrossSectionInterpolator()
    >>> interp.evaluate(24.0)
    128.0
    """

    def __init__(self, nodes: Sequence[Tuple[float, float]] = NP_REFERENCE_TABLE):
        self.nodes = tuple((float(e), float(s)) for e, s in nodes)
        self._spline = _build_spline(self.nodes)

    @property
    def energy_range(self) -> Tuple[float, float]:
        return self.nodes[0][0], self.nodes[-1][0]

    def in_range(self, energy: float) -> bool:
        low, high = self.energy_range
        return low <= energy <= high

    def evaluate(self, energy: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        result = self._spline(energy)
        if np.ndim(result) == 0:
            return float(result)
        return result

    def cross_section(self, energy: float) -> UncertainValue:
        """Cross section at ``energy`` MeV as an exact value."""
        if not self.in_range(energy):
            low, high = self.energy_range
            logger.debug(f"Extrapolating n-p cross section to {energy} MeV (nodes span {low}-{high} MeV)")
        return UncertainValue.exact(self.evaluate(energy))


__all__ = [
    "NP_REFERENCE_TABLE",
    "interpolate",
    "NPCrossSectionInterpolator",
]
