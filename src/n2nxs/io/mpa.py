"""
Readers for FAST ComTec MPA4 exports.

Three file kinds are produced per run:

- ``RunNNN_plastic.csv`` / ``RunNNN_puck.csv``: decay curves of the CH2 and
  graphite targets, a header followed by ``[DATA]`` and ``time count`` pairs
- ``RunNNN_1x2.csv``: proton-telescope dE-E map, starting with ``[DISPLAY]``;
  after ``[DATA]`` each line is ``a2 a1 value``
- ``RunNNN.mpa``: acquisition settings, starting with ``[MPA4A]``; the
  ``[MAP0]`` section holds the telescope region of interest
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Tuple, Union

import numpy as np

from n2nxs.core.errors import DataShapeError
from n2nxs.physics.decay import DecayCurve
from n2nxs.physics.telescope import Region, region_from_roi

TELESCOPE_CHANNELS = 1024


def _data_lines(lines: List[str], path: Path) -> Iterator[Tuple[int, List[str]]]:
    """Yield (line number, fields) for every line after the ``[DATA]`` marker."""
    try:
        start = next(i for i, line in enumerate(lines) if line.strip() == "[DATA]")
    except StopIteration:
        raise DataShapeError(f"{path}: no [DATA] section") from None
    for offset, line in enumerate(lines[start + 1:], start=start + 2):
        fields = line.split()
        if fields:
            yield offset, fields


def read_decay_curve(path: Union[str, Path]) -> DecayCurve:
    """Read a decay-curve export; uncertainties are Poisson."""
    path = Path(path)
    lines = path.read_text(encoding="utf-8", errors="ignore").splitlines()

    times: List[float] = []
    counts: List[float] = []
    for line_no, fields in _data_lines(lines, path):
        if len(fields) < 2:
            raise DataShapeError(f"{path}:{line_no}: expected 'time count', got {' '.join(fields)!r}")
        try:
            times.append(float(fields[0]))
            counts.append(float(fields[1]))
        except ValueError:
            raise DataShapeError(f"{path}:{line_no}: invalid decay sample {' '.join(fields)!r}") from None

    if not times:
        raise DataShapeError(f"{path}: decay curve is empty")
    return DecayCurve(np.array(times), np.array(counts))


def read_telescope_histogram(
    path: Union[str, Path],
    channels: int = TELESCOPE_CHANNELS,
) -> np.ndarray:
    """
    Read a telescope dE-E export into a ``(channels, channels)`` histogram
    indexed by ``[a2, a1]``.
    """
    path = Path(path)
    lines = path.read_text(encoding="utf-8", errors="ignore").splitlines()
    if not lines or not lines[0].startswith("[DISPLAY]"):
        raise DataShapeError(f"Not a valid MPA4 CSV data file: {path}")

    histogram = np.zeros((channels, channels), dtype=np.int64)
    for line_no, fields in _data_lines(lines, path):
        if len(fields) < 3:
            raise DataShapeError(f"{path}:{line_no}: expected 'a2 a1 value'")
        try:
            x, y, value = (int(v) for v in fields[:3])
        except ValueError:
            raise DataShapeError(f"{path}:{line_no}: invalid histogram entry") from None
        if not (0 <= x < channels and 0 <= y < channels):
            raise DataShapeError(f"{path}:{line_no}: channel ({x}, {y}) outside {channels}x{channels} map")
        histogram[x, y] += value
    return histogram


def read_roi(path: Union[str, Path]) -> Region:
    """Read the telescope region of interest from an ``.mpa`` header."""
    path = Path(path)
    lines = path.read_text(encoding="utf-8", errors="ignore").splitlines()
    if not lines or not lines[0].startswith("[MPA4A]"):
        raise DataShapeError(f"Not a valid MPA file: {path}")

    try:
        start = next(i for i, line in enumerate(lines) if line.startswith("[MAP0]"))
    except StopIteration:
        raise DataShapeError(f"{path}: no [MAP0] section") from None

    xdim = None
    roi = None
    for line in lines[start + 1:]:
        if line.startswith("["):
            break
        if line.startswith("param=") and line.strip() != "param=1":
            raise DataShapeError(f"{path}: [MAP0] is not the a2 x a1 map ({line.strip()})")
        if line.startswith("xdim="):
            xdim = line[len("xdim="):].strip()
        elif line.startswith("roi="):
            roi = line[len("roi="):].split()

    if xdim is None or roi is None or len(roi) < 2:
        raise DataShapeError(f"{path}: [MAP0] is missing xdim or roi")
    try:
        return region_from_roi(int(roi[0]), int(roi[1]), int(xdim))
    except ValueError as exc:
        raise DataShapeError(f"{path}: invalid region of interest: {exc}") from exc


__all__ = [
    "TELESCOPE_CHANNELS",
    "read_decay_curve",
    "read_telescope_histogram",
    "read_roi",
]
