"""Per-run measured quantities and foreground/background run pairs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, Optional

from n2nxs.core.errors import DataShapeError, RunNotFoundError
from n2nxs.physics.telescope import Region
from n2nxs.uncertainty.uncertain import UncertainValue


@dataclass(frozen=True)
class RunRecord:
    """
    Measured quantities of a single beam run.

    Attributes:
        run_number: Run identifier
        neutron_energy: Neutron energy (MeV)
        clock_time: Wall-clock duration of the run (s)
        live_fraction: Live-time fraction of the proton telescope (0-1)
        gross_protons: Protons counted in the telescope ROI
        ch2_decay: Activated C-11 nuclei in the CH2 target
        graphite_decay: Activated C-11 nuclei in the graphite target
        transit_time_s: Delay between end of activation and start of counting (s)
        roi: Telescope region of interest used for ``gross_protons``
    """

    run_number: int
    neutron_energy: float
    clock_time: UncertainValue
    live_fraction: UncertainValue
    gross_protons: Optional[UncertainValue] = None
    ch2_decay: Optional[UncertainValue] = None
    graphite_decay: Optional[UncertainValue] = None
    transit_time_s: float = 0.0
    roi: Optional[Region] = None

    def __post_init__(self):
        if not 0.0 <= self.live_fraction.value <= 1.0:
            raise DataShapeError(
                f"Run {self.run_number}: live fraction {self.live_fraction.value} outside [0, 1]"
            )
        if self.clock_time.value < 0:
            raise DataShapeError(f"Run {self.run_number}: negative clock time {self.clock_time.value}")
        if self.gross_protons is not None and self.gross_protons.value < 0:
            raise DataShapeError(f"Run {self.run_number}: negative proton count")

    def with_updates(self, **changes) -> RunRecord:
        return replace(self, **changes)


@dataclass(frozen=True)
class RunPairRequest:
    """Foreground/background run numbers of one analysed row."""

    fg_run: int
    bg_run: int


@dataclass(frozen=True)
class RunPair:
    """A resolved foreground run and its background run."""

    foreground: RunRecord
    background: RunRecord

    @property
    def neutron_energy(self) -> float:
        return self.foreground.neutron_energy


class RunSummary:
    """Lookup of run records by run number."""

    def __init__(self, runs: Iterable[RunRecord] = ()):
        self._runs: Dict[int, RunRecord] = {}
        for run in runs:
            if run.run_number in self._runs:
                raise DataShapeError(f"Duplicate run number {run.run_number}")
            self._runs[run.run_number] = run

    def __len__(self) -> int:
        return len(self._runs)

    def __iter__(self) -> Iterator[RunRecord]:
        return iter(sorted(self._runs.values(), key=lambda r: r.run_number))

    def __contains__(self, run_number: int) -> bool:
        return run_number in self._runs

    def get_run(self, run_number: int) -> RunRecord:
        try:
            return self._runs[run_number]
        except KeyError:
            raise RunNotFoundError(run_number) from None

    def pair(self, request: RunPairRequest) -> RunPair:
        return RunPair(self.get_run(request.fg_run), self.get_run(request.bg_run))

    def with_run(self, record: RunRecord) -> RunSummary:
        """New summary with ``record`` added or replaced."""
        runs = dict(self._runs)
        runs[record.run_number] = record
        return RunSummary(runs.values())


__all__ = ["RunRecord", "RunPairRequest", "RunPair", "RunSummary"]
