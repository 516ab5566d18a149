"""
Tests for uncertainty budget decomposition.
"""

import pytest

from n2nxs.uncertainty.budget import (
    UncertaintyBudget,
    UncertaintyCategory,
    UncertaintyComponent,
)


class TestUncertaintyComponent:
    """Tests for single components."""

    def test_from_relative(self):
        comp = UncertaintyComponent.from_relative(UncertaintyCategory.GEOMETRY, -0.02, 50.0, "Solid angle")
        assert comp.value == pytest.approx(1.0)
        assert comp.relative == pytest.approx(0.02)
        assert comp.description == "Solid angle"


class TestUncertaintyBudget:
    """Tests for combining components."""

    def make_budget(self):
        budget = UncertaintyBudget(measurement=100.0, units="mbarn", name="Run 1 ch2")
        budget.add_relative(UncertaintyCategory.COUNTING_STATISTICS, 0.03, "Activated C-11 nuclei")
        budget.add_absolute(UncertaintyCategory.NEUTRON_FLUX, -4.0, "Neutron flux")
        budget.compute_total()
        return budget

    def test_quadrature_total(self):
        budget = self.make_budget()
        assert budget.total_uncertainty == pytest.approx(5.0)
        assert budget.relative_total == pytest.approx(0.05)

    def test_dominant_component(self):
        assert self.make_budget().dominant_component().category == UncertaintyCategory.NEUTRON_FLUX

    def test_fraction_by_category(self):
        budget = self.make_budget()
        assert budget.fraction_by_category(UncertaintyCategory.COUNTING_STATISTICS) == pytest.approx(0.36)
        assert budget.fraction_by_category(UncertaintyCategory.HALF_LIFE) == 0.0

    def test_empty_budget(self):
        budget = UncertaintyBudget(measurement=1.0)
        assert budget.compute_total() == 0.0
        assert budget.dominant_component() is None
        assert budget.fraction_by_category(UncertaintyCategory.OTHER) == 0.0

    def test_zero_measurement(self):
        budget = UncertaintyBudget(measurement=0.0)
        budget.add_absolute(UncertaintyCategory.OTHER, 1.0)
        budget.compute_total()
        assert budget.components[0].relative == 0.0
        assert budget.relative_total == 0.0

    def test_summary_table(self):
        table = self.make_budget().summary_table()
        assert "Run 1 ch2" in table
        assert "neutron_flux" in table
        assert table.index("neutron_flux") < table.index("counting")

    def test_to_dict(self):
        data = self.make_budget().to_dict()
        assert data["units"] == "mbarn"
        assert data["total_uncertainty"] == pytest.approx(5.0)
        assert [c["category"] for c in data["components"]] == ["counting", "neutron_flux"]
        assert data["components"][1]["variance_fraction"] == pytest.approx(0.64)

    def test_to_uncertain_value(self):
        value = self.make_budget().to_uncertain_value()
        assert value.value == 100.0
        assert value.uncertainty == pytest.approx(5.0)
