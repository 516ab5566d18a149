"""Uncertainty propagation primitives and budgets."""

from n2nxs.uncertainty.uncertain import UncertainValue, as_uncertain
from n2nxs.uncertainty.budget import (
    UncertaintyBudget,
    UncertaintyCategory,
    UncertaintyComponent,
)

__all__ = [
    "UncertainValue",
    "as_uncertain",
    "UncertaintyBudget",
    "UncertaintyCategory",
    "UncertaintyComponent",
]
