"""Minimal 12C(n,2n)11C cross-section demo.

Builds a two-run summary in memory (a beam run with activated CH2 and
graphite targets, and a background run), calculates the row, and prints
the fluxes, cross sections and the uncertainty budget of the graphite
cross section.

Run:
  python examples/cross_section_demo.py
"""

from __future__ import annotations

from n2nxs.core.records import RunPairRequest, RunRecord, RunSummary
from n2nxs.physics.targets import TargetKind
from n2nxs.uncertainty.uncertain import UncertainValue
from n2nxs.workflows.cross_section_pipeline import PipelineConfig, process_pairs


def main() -> None:
    summary = RunSummary([
        RunRecord(
            run_number=12,
            neutron_energy=25.0,
            clock_time=UncertainValue(1800.0, 1.0),
            live_fraction=UncertainValue(0.92, 0.005),
            gross_protons=UncertainValue.from_counts(18250),
            ch2_decay=UncertainValue(3.1e3, 120.0),
            graphite_decay=UncertainValue(2.4e4, 450.0),
        ),
        RunRecord(
            run_number=13,
            neutron_energy=25.0,
            clock_time=UncertainValue(1800.0, 1.0),
            live_fraction=UncertainValue(0.97, 0.005),
            gross_protons=UncertainValue.from_counts(640),
        ),
    ])

    # Plastic-counting efficiency relative to the puck setup
    config = PipelineConfig()
    config.efficiencies[TargetKind.CH2] = 5.83

    result = process_pairs(summary, [RunPairRequest(12, 13)], config)
    row = result.rows[0]

    print("=== 12C(n,2n)11C cross-section demo ===")
    print(f"E_n:            {row.neutron_energy:.2f} MeV")
    print(f"sigma_np:       {row.sigma_np.value:.2f} mb/sr")
    print(f"Proton flux:    {row.proton_flux} 1/s")
    print(f"Neutron flux:   {row.neutron_flux} 1/s/sr")
    for kind, sigma in row.cross_sections.items():
        print(f"sigma({kind.value}):  {sigma} mb")
    print()
    print(row.budgets[TargetKind.GRAPHITE].summary_table())


if __name__ == "__main__":
    main()
