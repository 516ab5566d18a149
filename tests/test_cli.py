"""
Tests for the n2nxs command line.
"""

import json

import matplotlib
matplotlib.use('Agg')

import pandas as pd
import pytest

from n2nxs.cli.app import build_parser, main

SUMMARY_CSV = """run_number,neutron_energy_MeV,clock_time_s,live_fraction,gross_protons,ch2_decay,ch2_decay_unc,graphite_decay,graphite_decay_unc
1,24.0,1200,0.9,10000,5000,100,20000,300
2,24.0,1200,0.95,500,,,,
"""


@pytest.fixture
def inputs(tmp_path):
    summary = tmp_path / "Run_Summary.csv"
    summary.write_text(SUMMARY_CSV)
    pairs = tmp_path / "pairs.csv"
    pairs.write_text("fg_run,bg_run\n1,2\n")
    return summary, pairs


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_np_xs(capsys):
    main(["np-xs", "24", "30"])
    out = capsys.readouterr().out.splitlines()
    assert "128.0000" in out[0]
    assert "extrapolated" not in out[0]
    assert "extrapolated" in out[1]


def test_calculate(inputs, tmp_path, capsys):
    summary, pairs = inputs
    output = tmp_path / "xs.csv"
    budget = tmp_path / "budget.csv"
    main(["calculate", "--summary", str(summary), "--pairs", str(pairs),
          "--output", str(output), "--budget", str(budget)])

    df = pd.read_csv(output)
    assert len(df) == 1
    assert df.loc[0, "ch2_xs_mb"] > 0
    assert df.loc[0, "graphite_xs_mb"] > 0
    assert set(pd.read_csv(budget)["target"]) == {"ch2", "graphite"}
    assert "Saved 1 rows" in capsys.readouterr().out


def test_calculate_with_config(inputs, tmp_path):
    summary, pairs = inputs
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"efficiencies": {"ch2": 2.0}}))
    plain, scaled = tmp_path / "plain.csv", tmp_path / "scaled.csv"

    main(["calculate", "--summary", str(summary), "--pairs", str(pairs), "--output", str(plain)])
    main(["calculate", "--summary", str(summary), "--pairs", str(pairs), "--output", str(scaled),
          "--config", str(config)])

    ratio = pd.read_csv(scaled).loc[0, "ch2_xs_mb"] / pd.read_csv(plain).loc[0, "ch2_xs_mb"]
    assert ratio == pytest.approx(0.5, rel=1e-5)


def test_calculate_missing_run_aborts(inputs, tmp_path):
    summary, pairs = inputs
    pairs.write_text("fg_run,bg_run\n1,2\n5,2\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["calculate", "--summary", str(summary), "--pairs", str(pairs),
              "--output", str(tmp_path / "xs.csv")])
    assert excinfo.value.code == 1


def test_calculate_skip_failed(inputs, tmp_path, capsys):
    summary, pairs = inputs
    pairs.write_text("fg_run,bg_run\n1,2\n5,2\n")
    output = tmp_path / "xs.csv"
    main(["calculate", "--summary", str(summary), "--pairs", str(pairs),
          "--output", str(output), "--skip-failed", "--plot", str(tmp_path / "xs.png")])
    assert len(pd.read_csv(output)) == 1
    assert (tmp_path / "xs.png").exists()
    assert "Skipped runs 5/2" in capsys.readouterr().out


def test_update_summary_without_files(inputs, tmp_path):
    summary, _ = inputs
    output = tmp_path / "updated.csv"
    main(["update-summary", "--summary", str(summary), "--data-dir", str(tmp_path / "data"),
          "--output", str(output)])
    df = pd.read_csv(output)
    assert list(df["run_number"]) == [1, 2]
    assert df.loc[0, "ch2_decay"] == 5000.0
