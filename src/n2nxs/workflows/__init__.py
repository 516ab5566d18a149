"""
n2nxs workflows: run-pair cross-section pipeline and run-summary refresh.
"""

from n2nxs.workflows.cross_section_pipeline import (
    BatchResult,
    CrossSectionRow,
    PipelineConfig,
    RowFailure,
    budgets_to_dataframe,
    calculate_row,
    process_pairs,
    results_to_dataframe,
    save_results_csv,
)
from n2nxs.workflows.summary_update import (
    SummaryUpdateConfig,
    update_run_from_files,
    update_summary,
)

__all__ = [
    "BatchResult",
    "CrossSectionRow",
    "PipelineConfig",
    "RowFailure",
    "budgets_to_dataframe",
    "calculate_row",
    "process_pairs",
    "results_to_dataframe",
    "save_results_csv",
    "SummaryUpdateConfig",
    "update_run_from_files",
    "update_summary",
]
