"""n2nxs I/O module for run summaries and instrument exports."""

from n2nxs.io.csv_readers import (
    read_run_pairs,
    read_run_summary,
    run_summary_to_dataframe,
    write_run_summary,
)
from n2nxs.io.mpa import read_decay_curve, read_roi, read_telescope_histogram

__all__ = [
    "read_run_pairs",
    "read_run_summary",
    "run_summary_to_dataframe",
    "write_run_summary",
    "read_decay_curve",
    "read_roi",
    "read_telescope_histogram",
]
