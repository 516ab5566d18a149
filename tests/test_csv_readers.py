"""
Tests for run-summary and run-pair CSV files.
"""

import pytest

from n2nxs.core.errors import DataShapeError, RunNotFoundError
from n2nxs.core.records import RunPairRequest, RunRecord, RunSummary
from n2nxs.io.csv_readers import (
    read_run_pairs,
    read_run_summary,
    run_summary_to_dataframe,
    write_run_summary,
)
from n2nxs.physics.telescope import Region
from n2nxs.uncertainty.uncertain import UncertainValue

SUMMARY_CSV = """run_number,neutron_energy_MeV,clock_time_s,live_fraction,gross_protons,ch2_decay,ch2_decay_unc,transit_time_s,comment
1,24.0,1200,0.9,10000,5000,100,120,beam on
2,24.0,1200,0.95,500,,,,background

3,22.0,600,0.85,8000,4000,90,60,
"""


def write_summary(tmp_path, text=SUMMARY_CSV):
    path = tmp_path / "Run_Summary.csv"
    path.write_text(text)
    return path


class TestReadRunSummary:
    """Tests for reading the run summary."""

    def test_read(self, tmp_path):
        summary = read_run_summary(write_summary(tmp_path))
        assert len(summary) == 3
        run = summary.get_run(1)
        assert run.neutron_energy == 24.0
        assert run.clock_time == UncertainValue(1200.0, 0.0)
        assert run.live_fraction.value == 0.9
        assert run.gross_protons == UncertainValue(10000.0, 100.0)
        assert run.ch2_decay == UncertainValue(5000.0, 100.0)
        assert run.graphite_decay is None
        assert run.transit_time_s == 120.0
        assert run.roi is None

    def test_missing_optional_values(self, tmp_path):
        run = read_run_summary(write_summary(tmp_path)).get_run(2)
        assert run.ch2_decay is None
        assert run.transit_time_s == 0.0

    def test_missing_required_column(self, tmp_path):
        path = write_summary(tmp_path, "run_number,neutron_energy_MeV,clock_time_s\n1,24,1200\n")
        with pytest.raises(DataShapeError, match="live_fraction"):
            read_run_summary(path)

    def test_live_fraction_out_of_range(self, tmp_path):
        path = write_summary(
            tmp_path, "run_number,neutron_energy_MeV,clock_time_s,live_fraction\n1,24,1200,0.9\n2,24,1200,1.5\n"
        )
        with pytest.raises(DataShapeError, match=r"Run_Summary.csv:3: .*live fraction"):
            read_run_summary(path)

    def test_unparsable_number(self, tmp_path):
        path = write_summary(tmp_path, "run_number,neutron_energy_MeV,clock_time_s,live_fraction\n1,abc,1200,0.9\n")
        with pytest.raises(DataShapeError, match="neutron_energy_MeV"):
            read_run_summary(path)

    @pytest.mark.parametrize("energy", ["nan", "inf", "-Infinity"])
    def test_non_finite_number(self, tmp_path, energy):
        path = write_summary(
            tmp_path, f"run_number,neutron_energy_MeV,clock_time_s,live_fraction\n1,{energy},1200,0.9\n"
        )
        with pytest.raises(DataShapeError, match=r"Run_Summary.csv:2: non-finite number for neutron_energy_MeV"):
            read_run_summary(path)

    def test_negative_counts(self, tmp_path):
        path = write_summary(
            tmp_path,
            "run_number,neutron_energy_MeV,clock_time_s,live_fraction,gross_protons\n1,24,1200,0.9,-5\n",
        )
        with pytest.raises(DataShapeError):
            read_run_summary(path)

    def test_incomplete_roi(self, tmp_path):
        path = write_summary(
            tmp_path,
            "run_number,neutron_energy_MeV,clock_time_s,live_fraction,roi_min_x\n1,24,1200,0.9,5\n",
        )
        with pytest.raises(DataShapeError, match="region of interest"):
            read_run_summary(path)

    def test_duplicate_run(self, tmp_path):
        path = write_summary(
            tmp_path, "run_number,neutron_energy_MeV,clock_time_s,live_fraction\n1,24,1200,0.9\n1,24,1200,0.9\n"
        )
        with pytest.raises(DataShapeError, match="Duplicate"):
            read_run_summary(path)


class TestRunSummary:
    """Tests for run lookup."""

    def test_missing_run(self, tmp_path):
        summary = read_run_summary(write_summary(tmp_path))
        with pytest.raises(RunNotFoundError) as excinfo:
            summary.get_run(99)
        assert excinfo.value.run_number == 99
        assert isinstance(excinfo.value, LookupError)

    def test_pair(self, tmp_path):
        summary = read_run_summary(write_summary(tmp_path))
        pair = summary.pair(RunPairRequest(1, 2))
        assert pair.foreground.run_number == 1
        assert pair.background.run_number == 2
        assert pair.neutron_energy == 24.0

    def test_with_run_returns_new_summary(self, tmp_path):
        summary = read_run_summary(write_summary(tmp_path))
        updated = summary.with_run(summary.get_run(2).with_updates(transit_time_s=30.0))
        assert summary.get_run(2).transit_time_s == 0.0
        assert updated.get_run(2).transit_time_s == 30.0
        assert [run.run_number for run in updated] == [1, 2, 3]


class TestWriteRunSummary:
    """Tests for writing the summary back."""

    def test_write_then_read(self, tmp_path):
        summary = RunSummary([
            RunRecord(
                run_number=7,
                neutron_energy=26.0,
                clock_time=UncertainValue(900.0, 1.0),
                live_fraction=UncertainValue(0.8, 0.01),
                gross_protons=UncertainValue.from_counts(1234),
                graphite_decay=UncertainValue(2.5e4, 400.0),
                transit_time_s=90.0,
                roi=Region(5, 15, 10, 20),
            ),
            RunRecord(8, 26.0, UncertainValue.exact(900.0), UncertainValue.exact(0.9)),
        ])
        path = tmp_path / "out" / "summary.csv"
        write_run_summary(summary, path)
        reread = read_run_summary(path)
        assert reread.get_run(7) == summary.get_run(7)
        assert reread.get_run(8) == summary.get_run(8)

    def test_dataframe_columns(self, tmp_path):
        df = run_summary_to_dataframe(read_run_summary(write_summary(tmp_path)))
        assert list(df["run_number"]) == [1, 2, 3]
        assert "comment" not in df.columns
        assert str(df["gross_protons"].dtype) == "Int64"


class TestReadRunPairs:
    """Tests for the run-pair list."""

    def test_read(self, tmp_path):
        path = tmp_path / "pairs.csv"
        path.write_text("fg_run,bg_run\n1,2\n3,2\n")
        assert read_run_pairs(path) == [RunPairRequest(1, 2), RunPairRequest(3, 2)]

    def test_missing_column(self, tmp_path):
        path = tmp_path / "pairs.csv"
        path.write_text("fg_run\n1\n")
        with pytest.raises(DataShapeError):
            read_run_pairs(path)
