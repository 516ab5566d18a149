"""Values with standard uncertainties and first-order error propagation.

Every operation assumes independent operands and linearised (Gaussian)
propagation: the output uncertainty is the root-sum-square of
``df/dx_i * dx_i`` over all inputs. Plain numbers mixed into an expression
are treated as exact constants.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from n2nxs.core.errors import DomainError

Number = Union[int, float]


@dataclass(frozen=True)
class UncertainValue:
    """
    A measured or derived quantity with its standard uncertainty.

    Attributes
    ----------
    value : float
        Nominal (central) value
    uncertainty : float
        Absolute standard uncertainty, same units as ``value``
    """

    value: float
    uncertainty: float = 0.0

    def __post_init__(self):
        if not math.isfinite(self.uncertainty) or self.uncertainty < 0:
            raise DomainError(f"Uncertainty must be finite and non-negative, got {self.uncertainty}")
        object.__setattr__(self, "value", float(self.value))
        object.__setattr__(self, "uncertainty", float(self.uncertainty))

    @classmethod
    def exact(cls, value: Number) -> UncertainValue:
        """Wrap a constant that carries no uncertainty."""
        return cls(value, 0.0)

    @classmethod
    def from_counts(cls, counts: Number) -> UncertainValue:
        """Poisson counting statistics, ``sqrt(N)``."""
        if counts < 0:
            raise DomainError(f"Counts cannot be negative: {counts}")
        return cls(counts, math.sqrt(counts))

    @classmethod
    def from_partials(
        cls,
        value: float,
        terms: Iterable[Tuple[float, float]],
    ) -> UncertainValue:
        """
        Build a result from ``(derivative, uncertainty)`` pairs.

        Parameters
        ----------
        value : float
            Nominal value of the function
        terms : iterable of (float, float)
            Partial derivative with respect to each input and that input's
            uncertainty

        Returns
        -------
        UncertainValue
        """
        variance = math.fsum((d * u) ** 2 for d, u in terms)
        return cls(value, math.sqrt(variance))

    @property
    def relative_uncertainty(self) -> float:
        """Uncertainty divided by the magnitude of the nominal value."""
        if self.value == 0:
            raise DomainError("Relative uncertainty is undefined for a zero nominal value")
        return self.uncertainty / abs(self.value)

    def scale(self, factor: Number) -> UncertainValue:
        """Multiply by an exact constant."""
        return UncertainValue(self.value * factor, self.uncertainty * abs(factor))

    def reciprocal(self) -> UncertainValue:
        if self.value == 0:
            raise DomainError("Cannot take the reciprocal of a zero nominal value")
        return UncertainValue(1.0 / self.value, self.uncertainty / self.value ** 2)

    def power(self, exponent: Number) -> UncertainValue:
        """Raise to an exact power, ``d(x^p) = |p x^(p-1)| dx``."""
        if self.value == 0 and exponent < 1:
            raise DomainError(f"Cannot raise zero to the power {exponent}")
        if self.value < 0 and not float(exponent).is_integer():
            raise DomainError(f"Cannot raise negative value {self.value} to a fractional power")
        result = self.value ** exponent
        derivative = exponent * self.value ** (exponent - 1) if exponent != 0 else 0.0
        return UncertainValue(result, abs(derivative) * self.uncertainty)

    def exp(self) -> UncertainValue:
        try:
            result = math.exp(self.value)
        except OverflowError:
            raise DomainError(f"exp({self.value}) overflows") from None
        return UncertainValue(result, result * self.uncertainty)

    def __neg__(self) -> UncertainValue:
        return UncertainValue(-self.value, self.uncertainty)

    def __add__(self, other) -> UncertainValue:
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return UncertainValue(
            self.value + other.value,
            math.hypot(self.uncertainty, other.uncertainty),
        )

    __radd__ = __add__

    def __sub__(self, other) -> UncertainValue:
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return UncertainValue(
            self.value - other.value,
            math.hypot(self.uncertainty, other.uncertainty),
        )

    def __rsub__(self, other) -> UncertainValue:
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return other - self

    def __mul__(self, other) -> UncertainValue:
        other = _coerce(other)
        if other is NotImplemented:
            return other
        # absolute form of the relative-quadrature law, defined at zero
        return UncertainValue(
            self.value * other.value,
            math.hypot(other.value * self.uncertainty, self.value * other.uncertainty),
        )

    __rmul__ = __mul__

    def __truediv__(self, other) -> UncertainValue:
        other = _coerce(other)
        if other is NotImplemented:
            return other
        if other.value == 0:
            raise DomainError("Division by a zero nominal value")
        quotient = self.value / other.value
        return UncertainValue(
            quotient,
            math.hypot(self.uncertainty / other.value, quotient * other.uncertainty / other.value),
        )

    def __rtruediv__(self, other) -> UncertainValue:
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return other / self

    def __str__(self) -> str:
        return f"{self.value:.6g} ± {self.uncertainty:.2g}"


def _coerce(other):
    if isinstance(other, UncertainValue):
        return other
    if isinstance(other, numbers.Real):
        return UncertainValue.exact(other)
    return NotImplemented


def as_uncertain(value: Union[UncertainValue, Number]) -> UncertainValue:
    """Return ``value`` unchanged or wrapped as an exact constant."""
    if isinstance(value, UncertainValue):
        return value
    return UncertainValue.exact(value)


__all__ = ["UncertainValue", "as_uncertain"]
