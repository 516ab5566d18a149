"""CSV readers and writers for run summaries and analysed run pairs."""

from __future__ import annotations

import csv
import math
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from n2nxs.core.errors import DataShapeError
from n2nxs.core.records import RunPairRequest, RunRecord, RunSummary
from n2nxs.physics.telescope import Region
from n2nxs.uncertainty.uncertain import UncertainValue

RUN_SUMMARY_REQUIRED = ("run_number", "neutron_energy_MeV", "clock_time_s", "live_fraction")
RUN_SUMMARY_COLUMNS = RUN_SUMMARY_REQUIRED + (
    "clock_time_unc_s",
    "live_fraction_unc",
    "gross_protons",
    "ch2_decay",
    "ch2_decay_unc",
    "graphite_decay",
    "graphite_decay_unc",
    "transit_time_s",
    "roi_min_x",
    "roi_max_x",
    "roi_min_y",
    "roi_max_y",
)
RUN_PAIR_REQUIRED = ("fg_run", "bg_run")


class _RowParser:
    """Typed field access for one CSV row, reporting file and line on failure."""

    def __init__(self, row: Dict[str, str], path: Path, line: int):
        self.row = row
        self.path = path
        self.line = line

    def error(self, message: str) -> DataShapeError:
        return DataShapeError(f"{self.path}:{self.line}: {message}")

    def text(self, name: str) -> str:
        return (self.row.get(name) or "").strip()

    def number(self, name: str) -> float:
        value = self.text(name)
        if not value:
            raise self.error(f"missing value for {name}")
        try:
            number = float(value)
        except ValueError:
            raise self.error(f"invalid number for {name}: {value!r}") from None
        if not math.isfinite(number):
            raise self.error(f"non-finite number for {name}: {value!r}")
        return number

    def optional_number(self, name: str, default: Optional[float] = None) -> Optional[float]:
        if not self.text(name):
            return default
        return self.number(name)

    def integer(self, name: str) -> int:
        value = self.number(name)
        if not value.is_integer():
            raise self.error(f"expected an integer for {name}, got {value}")
        return int(value)

    def optional_integer(self, name: str) -> Optional[int]:
        if not self.text(name):
            return None
        return self.integer(name)

    def uncertain(self, name: str, unc_name: str) -> Optional[UncertainValue]:
        value = self.optional_number(name)
        if value is None:
            return None
        uncertainty = self.optional_number(unc_name, 0.0)
        if uncertainty < 0:
            raise self.error(f"negative uncertainty for {name}")
        return UncertainValue(value, uncertainty)


def _check_header(reader: csv.DictReader, required, path: Path) -> None:
    header = [name.strip() for name in (reader.fieldnames or [])]
    missing = [name for name in required if name not in header]
    if missing:
        raise DataShapeError(f"{path}: missing required columns {', '.join(missing)}")
    reader.fieldnames = header


def _parse_run(parser: _RowParser) -> RunRecord:
    gross = parser.optional_integer("gross_protons")
    if gross is not None and gross < 0:
        raise parser.error("negative gross_protons")

    roi_fields = [parser.optional_integer(f) for f in ("roi_min_x", "roi_max_x", "roi_min_y", "roi_max_y")]
    if any(v is not None for v in roi_fields) and not all(v is not None for v in roi_fields):
        raise parser.error("incomplete region of interest")

    run_number = parser.integer("run_number")
    energy = parser.number("neutron_energy_MeV")
    clock = (parser.number("clock_time_s"), parser.optional_number("clock_time_unc_s", 0.0))
    live = (parser.number("live_fraction"), parser.optional_number("live_fraction_unc", 0.0))
    ch2_decay = parser.uncertain("ch2_decay", "ch2_decay_unc")
    graphite_decay = parser.uncertain("graphite_decay", "graphite_decay_unc")
    transit = parser.optional_number("transit_time_s", 0.0)

    try:
        return RunRecord(
            run_number=run_number,
            neutron_energy=energy,
            clock_time=UncertainValue(*clock),
            live_fraction=UncertainValue(*live),
            gross_protons=UncertainValue.from_counts(gross) if gross is not None else None,
            ch2_decay=ch2_decay,
            graphite_decay=graphite_decay,
            transit_time_s=transit,
            roi=Region(*roi_fields) if roi_fields[0] is not None else None,
        )
    except ValueError as exc:
        raise parser.error(str(exc)) from exc


def read_run_summary(path: Union[str, Path]) -> RunSummary:
    """Read a run summary CSV into a :class:`RunSummary`."""
    path = Path(path)
    runs: List[RunRecord] = []

    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        _check_header(reader, RUN_SUMMARY_REQUIRED, path)
        for row in reader:
            if not any((v or "").strip() for v in row.values()):
                continue
            runs.append(_parse_run(_RowParser(row, path, reader.line_num)))

    return RunSummary(runs)


def read_run_pairs(path: Union[str, Path]) -> List[RunPairRequest]:
    """Read the list of foreground/background run pairs to analyse."""
    path = Path(path)
    requests: List[RunPairRequest] = []

    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        _check_header(reader, RUN_PAIR_REQUIRED, path)
        for row in reader:
            if not any((v or "").strip() for v in row.values()):
                continue
            parser = _RowParser(row, path, reader.line_num)
            requests.append(RunPairRequest(parser.integer("fg_run"), parser.integer("bg_run")))

    return requests


def run_summary_to_dataframe(summary: RunSummary) -> pd.DataFrame:
    rows = []
    for run in summary:
        row = {
            "run_number": run.run_number,
            "neutron_energy_MeV": run.neutron_energy,
            "clock_time_s": run.clock_time.value,
            "live_fraction": run.live_fraction.value,
            "clock_time_unc_s": run.clock_time.uncertainty,
            "live_fraction_unc": run.live_fraction.uncertainty,
            "gross_protons": run.gross_protons.value if run.gross_protons is not None else None,
            "ch2_decay": run.ch2_decay.value if run.ch2_decay is not None else None,
            "ch2_decay_unc": run.ch2_decay.uncertainty if run.ch2_decay is not None else None,
            "graphite_decay": run.graphite_decay.value if run.graphite_decay is not None else None,
            "graphite_decay_unc": run.graphite_decay.uncertainty if run.graphite_decay is not None else None,
            "transit_time_s": run.transit_time_s,
            "roi_min_x": run.roi.min_x if run.roi is not None else None,
            "roi_max_x": run.roi.max_x if run.roi is not None else None,
            "roi_min_y": run.roi.min_y if run.roi is not None else None,
            "roi_max_y": run.roi.max_y if run.roi is not None else None,
        }
        rows.append(row)
    df = pd.DataFrame(rows, columns=list(RUN_SUMMARY_COLUMNS))
    for name in ("gross_protons", "roi_min_x", "roi_max_x", "roi_min_y", "roi_max_y"):
        df[name] = pd.to_numeric(df[name]).astype("Int64")
    return df


def write_run_summary(summary: RunSummary, path: Union[str, Path]) -> None:
    """Write a run summary in the format read by :func:`read_run_summary`."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    run_summary_to_dataframe(summary).to_csv(path, index=False)


__all__ = [
    "RUN_SUMMARY_REQUIRED",
    "RUN_SUMMARY_COLUMNS",
    "RUN_PAIR_REQUIRED",
    "read_run_summary",
    "read_run_pairs",
    "run_summary_to_dataframe",
    "write_run_summary",
]
