from __future__ import annotations

import pytest

from lib_log_scoped.domain.errors import InvalidScopeConfigurationError
from lib_log_scoped.domain.levels import LogLevel
from lib_log_scoped.domain.scope_level import (
    SUPPRESSED,
    DynamicLevel,
    coerce_scope_value,
    format_scope_level,
    parse_static_level,
    resolve_scope_level,
)


@pytest.mark.parametrize("value", [False, "false", "FALSE", "suppressed", "off", SUPPRESSED])
def test_suppression_spellings_parse_to_the_sentinel(value: object) -> None:
    assert parse_static_level(value) is SUPPRESSED


@pytest.mark.parametrize("value", ["verbose", 3, None, True, 1.5])
def test_unrecognised_values_parse_to_none(value: object) -> None:
    assert parse_static_level(value) is None


def test_coerce_scope_value_wraps_callables() -> None:
    coerced = coerce_scope_value(lambda: "error")
    assert isinstance(coerced, DynamicLevel)
    assert resolve_scope_level(coerced) is LogLevel.ERROR


def test_coerce_scope_value_keeps_unknown_values_verbatim() -> None:
    assert coerce_scope_value("verbose") == "verbose"
    assert coerce_scope_value("debug") is LogLevel.DEBUG


def test_dynamic_level_is_evaluated_on_every_call() -> None:
    answers = iter(["debug", "error", False])
    rule = DynamicLevel(lambda: next(answers))

    assert resolve_scope_level(rule) is LogLevel.DEBUG
    assert resolve_scope_level(rule) is LogLevel.ERROR
    assert resolve_scope_level(rule) is SUPPRESSED


def test_dynamic_level_rejects_non_level_results() -> None:
    rule = DynamicLevel(lambda: "invalid_level")

    with pytest.raises(InvalidScopeConfigurationError) as excinfo:
        resolve_scope_level(rule)

    assert excinfo.value.key == "closure"
    assert "invalid_level" in str(excinfo.value)


def test_dynamic_level_may_not_return_another_rule() -> None:
    rule = DynamicLevel(lambda: DynamicLevel(lambda: "debug"))

    with pytest.raises(InvalidScopeConfigurationError, match="DynamicLevel"):
        resolve_scope_level(rule)


def test_resolve_static_invalid_value_names_the_key() -> None:
    with pytest.raises(InvalidScopeConfigurationError) as excinfo:
        resolve_scope_level("loud", "scopes.payment")

    assert excinfo.value.key == "scopes.payment"


def test_format_scope_level_labels() -> None:
    assert format_scope_level(LogLevel.WARNING) == "warning"
    assert format_scope_level(SUPPRESSED) == "SUPPRESSED"
    assert format_scope_level(DynamicLevel(lambda: "info")) == "dynamic"
