"""
Tests for external analysis parsing and local/external merging.
"""
import json

import numpy as np
import pytest

from wavecore.shared.exceptions import UnparsableAnalysisWarning
from wavecore.shared.types import PriceBar, Wave, WaveNumber
from wavecore.validation.merger import (
    WaveMerger,
    parse_external_analysis,
    result_to_json,
    trend_from_text,
)

JAN_1_2024 = 1_704_067_200
DAY = 86_400


def ts(day):
    return JAN_1_2024 + day * DAY


@pytest.fixture
def bars():
    closes = 100 + np.arange(120) * 0.25
    return [
        PriceBar(timestamp=ts(i), open=c, high=c + 0.5, low=c - 0.5, close=c)
        for i, c in enumerate(float(c) for c in closes)
    ]


@pytest.fixture
def local_waves():
    return [
        Wave(number=WaveNumber.W1, start_timestamp=ts(0), start_price=100.0,
             end_timestamp=ts(10), end_price=110.0),
        Wave(number=WaveNumber.W2, start_timestamp=ts(10), start_price=110.0,
             end_timestamp=ts(20), end_price=104.0),
        Wave(number=WaveNumber.W3, start_timestamp=ts(20), start_price=104.0,
             end_timestamp=ts(119), end_price=130.0, is_complete=False),
    ]


@pytest.fixture
def external_payload():
    return {
        "completedWaves": [
            {"number": 1, "startTimestamp": ts(5), "startPrice": 101, "endTimestamp": ts(30), "endPrice": 115},
            {"number": 2, "startTimestamp": ts(30), "startPrice": 115, "endTimestamp": ts(50), "endPrice": 108},
        ],
        "currentWave": {"number": 3, "startTimestamp": ts(48), "startPrice": 107, "isComplete": False},
        "trend": "Bullish",
        "analysis": "Wave 3 under way",
        "targets": {"stopLoss": 107.5},
        "confidenceLevel": "medium",
    }


@pytest.fixture
def merger():
    return WaveMerger()


class TestTrendFromText:
    """Test keyword trend extraction."""

    def test_earliest_keyword_wins(self):
        assert trend_from_text("Bearish now, bullish later") == "bearish"
        assert trend_from_text("bullish then bearish") == "bullish"

    def test_no_keyword(self):
        assert trend_from_text("sideways") == "neutral"


class TestParseExternalAnalysis:
    """Test parsing of external payload shapes."""

    def test_none_and_blank(self):
        assert parse_external_analysis(None) is None
        assert parse_external_analysis("   ") is None

    def test_mapping(self, external_payload):
        ext = parse_external_analysis(external_payload)
        assert ext.parsed
        assert len(ext.records) == 3
        assert ext.trend == "bullish"
        assert ext.stop_loss == 107.5
        assert ext.confidence_level == "medium"

    def test_current_wave_anchored_to_last_completed(self, external_payload):
        ext = parse_external_analysis(external_payload)
        current = ext.records[-1]
        assert current["startTimestamp"] == ts(50)
        assert current["startPrice"] == 108

    def test_json_in_code_fence_with_trailing_comma(self, external_payload):
        body = json.dumps(external_payload)[:-1] + ",}"
        text = f"Here is my analysis:\n```json\n{body}\n```\nGood luck."
        ext = parse_external_analysis(text)
        assert ext.parsed
        assert ext.analysis == "Wave 3 under way"

    def test_json_list(self):
        ext = parse_external_analysis('[{"number": 1, "startTimestamp": 1, "startPrice": 2}]')
        assert ext.parsed
        assert len(ext.records) == 1

    def test_freeform_text(self):
        ext = parse_external_analysis("Stock looks bearish going forward")
        assert not ext.parsed
        assert ext.trend == "bearish"
        assert isinstance(ext.warnings[0], UnparsableAnalysisWarning)

    def test_prose_with_bracketed_numbers_is_text(self):
        text = "Stock looks bearish going forward, next supports [95, 90]."
        ext = parse_external_analysis(text)
        assert not ext.parsed
        assert ext.trend == "bearish"
        assert ext.analysis == text

    def test_empty_json_object_is_text(self):
        ext = parse_external_analysis("{}")
        assert not ext.parsed
        assert ext.analysis == "{}"

    def test_json_scalar_is_unparsable(self):
        assert not parse_external_analysis("42").parsed

    def test_unknown_trend_dropped(self):
        assert parse_external_analysis({"trend": "sideways"}).trend is None


class TestWaveMerger:
    """Test WaveMerger source selection and result building."""

    def test_local_only(self, merger, local_waves, bars):
        result = merger.merge(local_waves, None, bars)
        assert list(result.waves) == local_waves
        assert result.current_wave == local_waves[-1]
        assert result.trend == "bullish"
        assert result.fib_targets
        assert result.analysis is None

    def test_external_takes_precedence(self, merger, local_waves, bars, external_payload):
        result = merger.merge(local_waves, external_payload, bars)
        assert [w.start_timestamp for w in result.waves] == [ts(5), ts(30), ts(50)]
        assert result.current_wave.number == WaveNumber.W3
        assert result.stop_loss == 107.5
        assert result.confidence_level == "medium"

    def test_external_json_string(self, merger, local_waves, bars, external_payload):
        result = merger.merge(local_waves, json.dumps(external_payload), bars)
        assert len(result.waves) == 3

    def test_unparsable_text_without_local_waves(self, merger, bars):
        result = merger.merge([], "Stock looks bearish going forward", bars)
        assert result.trend == "bearish"
        assert result.waves == ()
        assert result.current_wave is None
        assert result.analysis == "Stock looks bearish going forward"
        assert any(isinstance(w, UnparsableAnalysisWarning) for w in result.warnings)

    def test_prose_with_bracketed_numbers_without_local_waves(self, merger, bars):
        text = "Stock looks bearish going forward, next supports [95, 90]."
        result = merger.merge([], text, bars)
        assert result.trend == "bearish"
        assert result.waves == ()
        assert result.analysis == text

    def test_unparsable_text_with_local_waves(self, merger, local_waves, bars):
        result = merger.merge(local_waves, "Looks bearish to me", bars)
        assert list(result.waves) == local_waves
        assert result.trend == "bullish"
        assert result.analysis == "Looks bearish to me"

    def test_external_entirely_out_of_range_uses_local(self, merger, local_waves, bars):
        payload = {"waves": [
            {"number": 1, "startTimestamp": ts(-40), "startPrice": 90, "endTimestamp": ts(-30), "endPrice": 95},
        ]}
        result = merger.merge(local_waves, payload, bars)
        assert list(result.waves) == local_waves

    def test_external_out_of_range_reanchored_without_local(self, merger, bars):
        payload = {"waves": [
            {"number": 1, "startTimestamp": ts(-30), "startPrice": 90, "endTimestamp": ts(10), "endPrice": 103},
        ]}
        result = merger.merge([], payload, bars)
        assert len(result.waves) == 1
        assert result.waves[0].start_timestamp == bars[0].timestamp
        assert result.waves[0].start_price == bars[0].close

    def test_external_without_usable_waves_uses_local(self, merger, local_waves, bars):
        result = merger.merge(local_waves, {"waves": [{"foo": 1}], "trend": "bearish"}, bars)
        assert list(result.waves) == local_waves
        assert result.warnings

    def test_invalid_waves_reported(self, merger, bars, external_payload):
        external_payload["invalidWaves"] = [
            {"number": 3, "startTimestamp": ts(40), "startPrice": 112, "endTimestamp": ts(45), "endPrice": 118},
        ]
        result = merger.merge([], external_payload, bars)
        assert len(result.invalid_waves) == 1
        assert result.invalid_waves[0].is_invalid
        assert all(not w.is_invalid for w in result.waves)

    def test_external_trend_used_when_local_neutral(self, merger, bars):
        result = merger.merge([], {"trend": "bearish"}, bars)
        assert result.waves == ()
        assert result.trend == "bearish"

    def test_result_json(self, merger, local_waves, bars):
        data = json.loads(result_to_json(merger.merge(local_waves, None, bars)))
        assert data["trend"] == "bullish"
        assert data["currentWave"]["number"] == 3
        assert len(data["waves"]) == 3
