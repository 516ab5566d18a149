"""Proton-telescope dE-E histogram and region-of-interest counting."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from n2nxs.core.errors import DataShapeError


@dataclass(frozen=True)
class Region:
    """Rectangular region of interest, inclusive on every edge (channels)."""

    min_x: int
    max_x: int
    min_y: int
    max_y: int

    def __post_init__(self):
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise DataShapeError(f"Region bounds are inverted: {self}")
        if min(self.min_x, self.min_y) < 0:
            raise DataShapeError(f"Region bounds cannot be negative: {self}")


def region_from_roi(roi_min: int, roi_max: int, xdim: int) -> Region:
    """
    Decode an MPA linear ROI (``index = y * xdim + x``) into a rectangle.
    """
    if xdim <= 0:
        raise DataShapeError(f"xdim must be positive, got {xdim}")
    return Region(
        min_x=roi_min % xdim,
        max_x=roi_max % xdim,
        min_y=roi_min // xdim,
        max_y=roi_max // xdim,
    )


def count_in_region(histogram: np.ndarray, region: Region) -> int:
    """
    Integrated count of ``histogram[x, y]`` over ``region``.

    Parameters
    ----------
    histogram : np.ndarray
        2D count histogram indexed by (x channel, y channel)
    region : Region
        Inclusive rectangle

    Returns
    -------
    int
    """
    histogram = np.asarray(histogram)
    if histogram.ndim != 2:
        raise DataShapeError(f"Histogram must be 2D, got {histogram.ndim}D")
    nx, ny = histogram.shape
    if region.max_x >= nx or region.max_y >= ny:
        raise DataShapeError(f"Region {region} exceeds histogram of shape {histogram.shape}")
    window = histogram[region.min_x:region.max_x + 1, region.min_y:region.max_y + 1]
    return int(np.sum(window, dtype=np.int64))


__all__ = ["Region", "region_from_roi", "count_in_region"]
