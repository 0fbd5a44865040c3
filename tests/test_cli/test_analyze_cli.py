import json
import logging

import numpy as np
import pandas as pd
import pytest

from cli import analyze as cli_analyze


@pytest.fixture
def bars_csv(tmp_path):
    path = tmp_path / "bars.csv"
    dates = pd.date_range("2024-01-01", periods=21, freq="D")
    close = np.concatenate([np.linspace(100, 80, 11), np.linspace(80, 120, 11)[1:]])
    pd.DataFrame(
        {"Date": dates.strftime("%Y-%m-%d"), "Open": close, "High": close, "Low": close,
         "Close": close, "Volume": 0}
    ).to_csv(path, index=False)
    return path


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_cli_analyze_prints_result_json(bars_csv, capsys):
    exit_code = cli_analyze.main([str(bars_csv)])
    assert exit_code == 0

    data = json.loads(capsys.readouterr().out)
    assert data["trend"] == "bullish"
    assert len(data["waves"]) == 1
    assert data["waves"][0]["startPrice"] == 80.0


def test_cli_analyze_with_external_text_and_output_file(bars_csv, tmp_path):
    external = tmp_path / "analysis.txt"
    external.write_text("Stock looks bearish going forward")
    out = tmp_path / "out" / "result.json"

    exit_code = cli_analyze.main([str(bars_csv), "--external", str(external), "--output", str(out)])
    assert exit_code == 0

    data = json.loads(out.read_text())
    assert data["analysis"] == "Stock looks bearish going forward"
    # Local waves exist, so the detected trend wins over the text
    assert data["trend"] == "bullish"


def test_cli_analyze_with_config(bars_csv, tmp_path, capsys):
    config = tmp_path / "wide.yaml"
    config.write_text("pivots:\n  window: 15\n")

    assert cli_analyze.main([str(bars_csv), "--config", str(config)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["waves"] == []


def test_cli_analyze_missing_bars_file(tmp_path, capsys):
    assert cli_analyze.main([str(tmp_path / "missing.csv")]) == 1
    assert "Data file not found" in capsys.readouterr().err


def test_cli_analyze_missing_external_file(bars_csv, tmp_path):
    assert cli_analyze.main([str(bars_csv), "--external", str(tmp_path / "nope.txt")]) == 1
