"""Error taxonomy shared by the calculators and the tabular adapters."""

from __future__ import annotations


class N2NError(Exception):
    """Base class for all n2nxs failures."""
    pass


class DomainError(N2NError, ValueError):
    """A formula was evaluated outside its domain (zero divisor, zero live time, ...)."""
    pass


class DataShapeError(N2NError, ValueError):
    """An input record or instrument file is malformed."""
    pass


class RunNotFoundError(N2NError, LookupError):
    """A referenced run number does not exist in the run summary."""

    def __init__(self, run_number: int):
        super().__init__(f"Run {run_number} not found in run summary")
        self.run_number = run_number


__all__ = ["N2NError", "DomainError", "DataShapeError", "RunNotFoundError"]
