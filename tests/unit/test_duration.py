"""Tests for stage-duration parsing and aggregates."""

from __future__ import annotations

import logging

import pytest

from storeload._internal.errors import ConfigError
from storeload.core.duration import Stage, parse_duration_minutes, peak_minutes, total_minutes


class TestParseDurationMinutes:
    """Tests for parse_duration_minutes."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("30s", 0.5),
            ("2m", 2.0),
            ("1h", 60.0),
            ("10s", 10 / 60),
            ("1.5m", 1.5),
            ("2H", 120.0),
        ],
    )
    def test_supported_units(self, text: str, expected: float) -> None:
        assert parse_duration_minutes(text) == pytest.approx(expected)

    def test_unsupported_unit_returns_none(self) -> None:
        assert parse_duration_minutes("5d") is None

    def test_unparsable_number_returns_none(self) -> None:
        assert parse_duration_minutes("abcm") is None

    def test_empty_string_returns_none(self) -> None:
        assert parse_duration_minutes("") is None

    def test_unsupported_unit_logs_warning(
        self, caplog: pytest.LogCaptureFixture, propagate_logs: None
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="storeload"):
            parse_duration_minutes("3w")
        assert "Unsupported duration unit" in caplog.text


class TestStageAggregates:
    """Tests for total_minutes and peak_minutes."""

    def test_total_of_mixed_units(self) -> None:
        assert total_minutes(["2m", "30s", "1h"]) == pytest.approx(62.5)

    def test_peak_of_mixed_units(self) -> None:
        assert peak_minutes(["2m", "30s", "1h"]) == pytest.approx(60.0)

    def test_accepts_stage_rows(self) -> None:
        stages = [Stage("2m", 10), Stage("5m", 10), Stage("2m", 0)]
        assert total_minutes(stages) == pytest.approx(9.0)
        assert peak_minutes(stages) == pytest.approx(5.0)

    def test_unsupported_unit_counts_as_zero(self) -> None:
        assert total_minutes(["2m", "5d"]) == pytest.approx(2.0)
        assert peak_minutes(["5d"]) == 0.0

    def test_total_of_empty_table_is_zero(self) -> None:
        assert total_minutes([]) == 0

    def test_peak_of_empty_table_raises(self) -> None:
        with pytest.raises(ConfigError, match="at least one stage"):
            peak_minutes([])
