"""
End-to-end tests for ElliottWaveAnalyzer.
"""
import numpy as np
import pandas as pd
import pytest

from wavecore.analysis import ElliottWaveAnalyzer, analyze_waves
from wavecore.config import AnalysisConfig
from wavecore.shared.exceptions import InsufficientDataError, InvalidInputError, MalformedRecordWarning
from wavecore.shared.types import WaveNumber, WaveType

JAN_1_2024 = 1_704_067_200
DAY = 86_400


def make_records(closes, spread=0.0):
    return [
        {"timestamp": JAN_1_2024 + i * DAY, "open": c, "high": c + spread, "low": c - spread, "close": c}
        for i, c in enumerate(float(c) for c in closes)
    ]


@pytest.fixture
def analyzer():
    return ElliottWaveAnalyzer()


@pytest.fixture
def oscillating_frame():
    dates = pd.date_range("2023-01-01", periods=250, freq="D", tz="UTC")
    t = np.arange(250)
    close = 100 + 8 * np.sin(t * 2 * np.pi / 40) + 0.08 * t
    return pd.DataFrame(
        {"Open": close, "High": close + 0.5, "Low": close - 0.5, "Close": close, "Volume": 1000},
        index=dates,
    )


class TestScenarios:
    """Whole-pipeline scenarios."""

    def test_flat_series(self, analyzer):
        result = analyzer.analyze(make_records([50.0] * 100))
        assert result.waves == ()
        assert result.trend == "neutral"
        assert result.current_wave is None
        assert result.fib_targets == ()

    def test_v_shape(self, analyzer):
        closes = np.concatenate([np.linspace(100, 80, 11), np.linspace(80, 120, 11)[1:]])
        result = analyzer.analyze(make_records(closes))
        assert len(result.waves) == 1
        wave = result.waves[0]
        assert wave.number == WaveNumber.W1
        assert wave.wave_type == WaveType.IMPULSE
        assert wave.start_price == 80.0
        assert wave.end_price == 120.0
        assert result.current_wave == wave
        assert result.trend == "bullish"

    def test_bearish_text_without_waves(self, analyzer):
        result = analyzer.analyze(make_records([50.0] * 100), external="Stock looks bearish going forward")
        assert result.trend == "bearish"
        assert result.waves == ()

    def test_external_wave_before_data_reanchored(self, analyzer):
        records = make_records(100 + np.arange(365) * 0.1)
        external = {"waves": [{
            "number": 1,
            "startTimestamp": JAN_1_2024 - 30 * DAY,
            "startPrice": 95.0,
            "endTimestamp": JAN_1_2024 + 20 * DAY,
            "endPrice": 102.0,
        }]}
        result = analyzer.analyze(records, external=external)
        assert result.waves[0].start_timestamp == JAN_1_2024
        assert result.waves[0].start_price == 100.0


class TestAnalyzer:
    """Analyzer wiring and diagnostics."""

    def test_insufficient_data_is_a_diagnostic(self, analyzer):
        result = analyzer.analyze(make_records([1, 2, 3]))
        assert result.waves == ()
        assert any(isinstance(w, InsufficientDataError) for w in result.warnings)

    def test_malformed_bars_skipped(self, analyzer):
        records = make_records([50.0] * 20) + [{"timestamp": "bad", "open": 1}]
        result = analyzer.analyze(records)
        assert any(isinstance(w, MalformedRecordWarning) for w in result.warnings)

    def test_non_mapping_subwave_does_not_abort(self, analyzer):
        external = {"waves": [
            {"number": 1, "startTimestamp": JAN_1_2024, "startPrice": 50.0,
             "endTimestamp": JAN_1_2024 + 10 * DAY, "endPrice": 50.0, "subwaves": ["i"]},
            {"number": 2, "startTimestamp": JAN_1_2024 + 10 * DAY, "startPrice": 50.0,
             "endTimestamp": JAN_1_2024 + 20 * DAY, "endPrice": 50.0},
        ]}
        result = analyzer.analyze(make_records([50.0] * 100), external=external)
        assert [w.number for w in result.waves] == [WaveNumber.W1, WaveNumber.W2]
        assert result.waves[0].subwaves == ()

    def test_non_mapping_wave_record_skipped(self, analyzer):
        external = {"waves": [
            "wave one",
            {"number": 2, "startTimestamp": JAN_1_2024, "startPrice": 50.0},
        ]}
        result = analyzer.analyze(make_records([50.0] * 100), external=external)
        assert [w.number for w in result.waves] == [WaveNumber.W2]
        assert any(isinstance(w, MalformedRecordWarning) for w in result.warnings)

    def test_invalid_bars_type_raises(self, analyzer):
        with pytest.raises(InvalidInputError):
            analyzer.analyze("AAPL")

    def test_dataframe_input(self, analyzer, oscillating_frame):
        result = analyzer.analyze(oscillating_frame)
        assert len(result.waves) >= 5
        assert result.current_wave == result.waves[-1]
        for prev, cur in zip(result.waves, result.waves[1:]):
            assert cur.number == prev.number.next()
        assert result.impulse_pattern
        assert result.fib_targets

    def test_progress_callback(self, analyzer, oscillating_frame):
        calls = []
        result = analyzer.analyze(oscillating_frame, progress_callback=calls.append)
        assert calls
        assert tuple(calls[-1]) == result.waves

    def test_config_window_changes_minimum(self):
        analyzer = ElliottWaveAnalyzer(AnalysisConfig(pivot_window=20))
        result = analyzer.analyze(make_records(np.linspace(100, 120, 30)))
        assert any(isinstance(w, InsufficientDataError) for w in result.warnings)

    def test_same_input_same_result(self, analyzer, oscillating_frame):
        assert analyzer.analyze(oscillating_frame) == analyze_waves(oscillating_frame)
