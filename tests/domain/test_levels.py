from __future__ import annotations

import itertools
import logging

import pytest

from lib_log_scoped.domain.levels import LogLevel, coerce_level, meets_threshold


@pytest.mark.parametrize(
    "name, expected",
    [
        ("debug", LogLevel.DEBUG),
        ("INFO", LogLevel.INFO),
        ("Notice", LogLevel.NOTICE),
        ("warning", LogLevel.WARNING),
        (" error ", LogLevel.ERROR),
        ("CRITICAL", LogLevel.CRITICAL),
        ("alert", LogLevel.ALERT),
        ("Emergency", LogLevel.EMERGENCY),
    ],
)
def test_from_name_accepts_case_insensitive_matches(name: str, expected: LogLevel) -> None:
    assert LogLevel.from_name(name) is expected


def test_from_name_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        LogLevel.from_name("verbose")


def test_ranks_form_the_documented_sequence() -> None:
    assert [level.rank for level in LogLevel] == list(range(8))
    assert LogLevel.names() == ("debug", "info", "notice", "warning", "error", "critical", "alert", "emergency")


def test_meets_threshold_matches_rank_comparison_for_every_pair() -> None:
    for candidate, threshold in itertools.product(LogLevel, repeat=2):
        assert meets_threshold(candidate, threshold) == (candidate.rank >= threshold.rank)


def test_rank_order_is_strict() -> None:
    for first, second in itertools.combinations(LogLevel, 2):
        assert first.rank != second.rank


@pytest.mark.parametrize(
    "level, expected",
    [
        (LogLevel.DEBUG, logging.DEBUG),
        (LogLevel.INFO, logging.INFO),
        (LogLevel.NOTICE, 25),
        (LogLevel.WARNING, logging.WARNING),
        (LogLevel.ERROR, logging.ERROR),
        (LogLevel.CRITICAL, logging.CRITICAL),
        (LogLevel.ALERT, 60),
        (LogLevel.EMERGENCY, 70),
    ],
)
def test_to_python_level_preserves_order(level: LogLevel, expected: int) -> None:
    assert level.to_python_level() == expected


def test_every_level_has_an_icon_and_severity() -> None:
    for level in LogLevel:
        assert level.icon
        assert level.severity == level.name.lower()


def test_coerce_level_accepts_names_and_members() -> None:
    assert coerce_level("alert") is LogLevel.ALERT
    assert coerce_level(LogLevel.NOTICE) is LogLevel.NOTICE
    with pytest.raises(ValueError):
        coerce_level("loud")
