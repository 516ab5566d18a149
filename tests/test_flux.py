"""
Tests for proton and neutron flux.
"""

import math

import pytest

from n2nxs.core.errors import DomainError
from n2nxs.physics.flux import MBARN_TO_BARN, counting_rate, neutron_flux, proton_flux
from n2nxs.uncertainty.uncertain import UncertainValue


class TestCountingRate:
    """Tests for dead-time corrected rates."""

    def test_plain_counts_are_poisson(self):
        rate = counting_rate(400, 100.0, 0.5)
        assert rate.value == pytest.approx(8.0)
        assert rate.uncertainty == pytest.approx(20.0 / 50.0)

    def test_explicit_count_uncertainty(self):
        rate = counting_rate(UncertainValue(400.0, 0.0), 100.0, UncertainValue(0.5, 0.005))
        assert rate.relative_uncertainty == pytest.approx(0.01)

    def test_zero_clock(self):
        with pytest.raises(DomainError):
            counting_rate(100, 0.0, 1.0)

    def test_zero_live_fraction(self):
        with pytest.raises(DomainError):
            counting_rate(100, 10.0, 0.0)


class TestProtonFlux:
    """Tests for background-subtracted proton flux."""

    def test_reference_case(self):
        flux = proton_flux(1000, 100, 1.0, 100, 100, 1.0)
        assert flux.value == 9.0
        assert flux.uncertainty == pytest.approx(math.sqrt(0.1 + 0.01))
        assert math.isfinite(flux.uncertainty)

    def test_background_uncertainty_adds(self):
        without_bg = proton_flux(1000, 100, 1.0, 0, 100, 1.0)
        with_bg = proton_flux(1000, 100, 1.0, 100, 100, 1.0)
        assert with_bg.uncertainty > without_bg.uncertainty

    def test_zero_background_live_time(self):
        with pytest.raises(DomainError):
            proton_flux(1000, 100, 1.0, 100, 100, 0.0)


class TestNeutronFlux:
    """Tests for the neutron flux normalisation."""

    def test_formula(self):
        phi_p = UncertainValue(9.0, 0.3)
        sigma = UncertainValue.exact(128.0)
        n_h = UncertainValue(0.0125, 0.000125)
        omega_ch2 = UncertainValue.exact(0.1214)
        omega_det = UncertainValue.exact(0.0049)
        flux = neutron_flux(phi_p, sigma, n_h, omega_ch2, omega_det)
        expected = 9.0 / (128.0 * 0.0125 * 0.1214 * 0.0049 * MBARN_TO_BARN)
        assert flux.value == pytest.approx(expected)
        assert flux.relative_uncertainty == pytest.approx(math.hypot(0.3 / 9.0, 0.01))

    def test_plain_sigma(self):
        args = (UncertainValue(9.0, 0.3), 128.0, UncertainValue.exact(0.0125),
                UncertainValue.exact(0.1214), UncertainValue.exact(0.0049))
        assert neutron_flux(*args).value > 0

    def test_zero_hydrogen_thickness(self):
        with pytest.raises(DomainError):
            neutron_flux(
                UncertainValue(9.0, 0.3), 128.0, UncertainValue.exact(0.0),
                UncertainValue.exact(0.1214), UncertainValue.exact(0.0049),
            )
