"""n2nxs plotting module."""

from n2nxs.plots.activation import (
    REPORT_STYLE,
    TARGET_COLORS,
    apply_report_style,
    plot_cross_sections,
    plot_decay_fit,
    plot_np_cross_section,
)

__all__ = [
    'REPORT_STYLE',
    'TARGET_COLORS',
    'apply_report_style',
    'plot_cross_sections',
    'plot_decay_fit',
    'plot_np_cross_section',
]
