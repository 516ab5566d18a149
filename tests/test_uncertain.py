"""
Tests for UncertainValue propagation primitives.
"""

import math

import numpy as np
import pytest

from n2nxs.core.errors import DomainError
from n2nxs.uncertainty.uncertain import UncertainValue, as_uncertain


class TestConstruction:
    """Tests for construction and validation."""

    def test_negative_uncertainty_rejected(self):
        with pytest.raises(DomainError):
            UncertainValue(1.0, -0.1)

    def test_non_finite_uncertainty_rejected(self):
        with pytest.raises(DomainError):
            UncertainValue(1.0, float("inf"))

    def test_domain_error_is_value_error(self):
        with pytest.raises(ValueError):
            UncertainValue(1.0, -1.0)

    def test_exact(self):
        x = UncertainValue.exact(3)
        assert x.value == 3.0
        assert x.uncertainty == 0.0
        assert isinstance(x.value, float)

    def test_from_counts_poisson(self):
        x = UncertainValue.from_counts(100)
        assert x.value == 100.0
        assert x.uncertainty == 10.0

    def test_from_counts_negative(self):
        with pytest.raises(DomainError):
            UncertainValue.from_counts(-1)

    def test_from_partials_root_sum_square(self):
        x = UncertainValue.from_partials(5.0, [(2.0, 1.5), (1.0, 4.0)])
        assert x.value == 5.0
        assert x.uncertainty == pytest.approx(5.0)

    def test_as_uncertain(self):
        x = UncertainValue(2.0, 0.1)
        assert as_uncertain(x) is x
        assert as_uncertain(4.0) == UncertainValue(4.0, 0.0)

    def test_str(self):
        assert "±" in str(UncertainValue(1.5, 0.25))

    def test_immutable(self):
        x = UncertainValue(1.0, 0.1)
        with pytest.raises(AttributeError):
            x.value = 2.0


class TestArithmetic:
    """Tests for the propagation laws."""

    def test_add_quadrature(self):
        result = UncertainValue(1.0, 3.0) + UncertainValue(2.0, 4.0)
        assert result.value == 3.0
        assert result.uncertainty == pytest.approx(5.0)

    def test_subtract_quadrature(self):
        result = UncertainValue(10.0, 3.0) - UncertainValue(2.0, 4.0)
        assert result.value == 8.0
        assert result.uncertainty == pytest.approx(5.0)

    def test_multiply_relative_quadrature(self):
        a = UncertainValue(2.0, 0.2)
        b = UncertainValue(3.0, 0.6)
        result = a * b
        assert result.value == pytest.approx(6.0)
        assert result.relative_uncertainty == pytest.approx(math.hypot(0.1, 0.2))

    def test_multiply_by_zero_value(self):
        result = UncertainValue(0.0, 0.5) * UncertainValue(4.0, 0.0)
        assert result.value == 0.0
        assert result.uncertainty == pytest.approx(2.0)

    def test_divide_relative_quadrature(self):
        result = UncertainValue(6.0, 0.6) / UncertainValue(2.0, 0.2)
        assert result.value == pytest.approx(3.0)
        assert result.relative_uncertainty == pytest.approx(math.hypot(0.1, 0.1))

    def test_divide_by_zero(self):
        with pytest.raises(DomainError):
            UncertainValue(1.0, 0.1) / UncertainValue(0.0, 0.1)

    def test_divide_by_plain_zero(self):
        with pytest.raises(DomainError):
            UncertainValue(1.0, 0.1) / 0

    def test_plain_numbers_are_exact(self):
        x = UncertainValue(2.0, 0.5)
        assert (x + 1).uncertainty == 0.5
        assert (3 * x).uncertainty == pytest.approx(1.5)
        assert (x / 2).uncertainty == pytest.approx(0.25)

    def test_reflected_operators(self):
        x = UncertainValue(2.0, 0.2)
        diff = 5 - x
        assert diff.value == 3.0
        assert diff.uncertainty == pytest.approx(0.2)
        inv = 1 / x
        assert inv.value == pytest.approx(0.5)
        assert inv.uncertainty == pytest.approx(0.05)

    def test_negate_keeps_uncertainty(self):
        x = -UncertainValue(2.0, 0.2)
        assert x.value == -2.0
        assert x.uncertainty == 0.2

    def test_scale_uses_absolute_factor(self):
        x = UncertainValue(1.0, 0.5).scale(-2.0)
        assert x.value == -2.0
        assert x.uncertainty == 1.0

    def test_power(self):
        x = UncertainValue(3.0, 0.1).power(2)
        assert x.value == pytest.approx(9.0)
        assert x.uncertainty == pytest.approx(0.6)

    def test_power_of_zero_below_one(self):
        with pytest.raises(DomainError):
            UncertainValue(0.0, 0.1).power(0.5)

    def test_fractional_power_of_negative(self):
        with pytest.raises(DomainError):
            UncertainValue(-4.0, 0.1).power(0.5)

    def test_exp(self):
        x = UncertainValue(0.0, 0.1).exp()
        assert x.value == 1.0
        assert x.uncertainty == pytest.approx(0.1)

    def test_exp_overflow(self):
        with pytest.raises(DomainError):
            UncertainValue(1000.0, 1.0).exp()

    def test_reciprocal(self):
        x = UncertainValue(4.0, 0.4).reciprocal()
        assert x.value == 0.25
        assert x.uncertainty == pytest.approx(0.025)

    def test_reciprocal_of_zero(self):
        with pytest.raises(DomainError):
            UncertainValue(0.0, 0.1).reciprocal()

    def test_relative_uncertainty_of_zero(self):
        with pytest.raises(DomainError):
            UncertainValue(0.0, 0.1).relative_uncertainty

    def test_divide_then_multiply_round_trip(self):
        a = UncertainValue(7.5, 0.3)
        b = UncertainValue(-2.5, 0.1)
        assert ((a / b) * b).value == pytest.approx(a.value)
        assert (a / b).uncertainty == pytest.approx((a * b.reciprocal()).uncertainty)


def test_uncertainty_never_negative_for_random_inputs():
    rng = np.random.default_rng(20240607)
    for _ in range(500):
        a = UncertainValue(rng.uniform(-100, 100), rng.uniform(0, 10))
        b = UncertainValue(rng.uniform(0.5, 100) * rng.choice([-1, 1]), rng.uniform(0, 10))
        results = [a + b, a - b, a * b, a / b, b.reciprocal(), b.power(3), a.scale(rng.normal())]
        for result in results:
            assert result.uncertainty >= 0
            assert math.isfinite(result.uncertainty)
