"""Core data structures and error types."""

from n2nxs.core.errors import DataShapeError, DomainError, N2NError, RunNotFoundError

__all__ = [
    "N2NError",
    "DomainError",
    "DataShapeError",
    "RunNotFoundError",
]
