from __future__ import annotations

import logging
from typing import Any

import pytest

from lib_log_scoped.application.decorate import DEBUG_KEY
from lib_log_scoped.application.scoped_logger import WARNING_KEY, ScopedLogger
from lib_log_scoped.domain.errors import (
    EmptyScopeIdentifierError,
    InvalidRuntimeOverrideError,
    InvalidScopeConfigurationError,
    UnknownScopeError,
)
from lib_log_scoped.domain.levels import LogLevel
from lib_log_scoped.domain.scope_level import SUPPRESSED

ALL_LEVELS = [level.severity for level in LogLevel]


class PaymentService:
    log_scope = "payment"


@pytest.fixture
def make_logger(recording_sink, static_frames):
    def factory(source: dict[str, Any] | None = None, *frames: Any, channel: str = "default") -> ScopedLogger:
        return ScopedLogger(recording_sink, source or {}, channel, frame_inspector=static_frames(*frames))

    return factory


def test_auth_scenario_gates_by_scope_level(make_logger, recording_sink) -> None:
    log = make_logger({"default_level": "info", "scopes": {"auth": "error"}})

    log.scope("auth").info("msg")
    log.scope("auth").error("msg")

    assert len(recording_sink.records) == 1
    record = recording_sink.records[0]
    assert record.level is LogLevel.ERROR
    assert record.context == {"scope": "auth"}


@pytest.mark.parametrize("severity", ALL_LEVELS)
def test_suppressed_scope_never_reaches_the_sink(make_logger, recording_sink, severity: str) -> None:
    log = make_logger({"scopes": {"noisy": False}})

    getattr(log.scope("noisy"), severity)("dropped")

    assert recording_sink.records == []


def test_most_verbose_scope_wins(make_logger, recording_sink) -> None:
    log = make_logger({"scopes": {"payment": "debug", "api": "error", "slow": "warning"}})

    log.scope(["payment", "api"]).debug("granted")
    log.scope(["slow", "api"]).debug("denied")

    assert recording_sink.messages == ["granted"]
    assert recording_sink.records[0].context["scope"] == "payment, api"


def test_suppression_dominates_multi_scope_calls(make_logger, recording_sink) -> None:
    log = make_logger({"scopes": {"payment": "debug", "noisy": False}})

    log.scope(["payment", "noisy"]).emergency("never")

    assert recording_sink.records == []


def test_runtime_override_wins_over_dynamic_rule(make_logger, recording_sink) -> None:
    calls: list[int] = []

    def rule() -> str:
        calls.append(1)
        return "error"

    log = make_logger({"scopes": {"dyn": rule}})
    log.set_runtime_level("dyn", "debug")

    log.scope("dyn").debug("visible")

    assert recording_sink.messages == ["visible"]
    assert calls == []


def test_dynamic_rule_is_evaluated_per_call(make_logger, recording_sink) -> None:
    answers = iter(["error", "debug"])
    log = make_logger({"scopes": {"dyn": lambda: next(answers)}})

    log.scope("dyn").info("first")
    log.scope("dyn").info("second")

    assert recording_sink.messages == ["second"]


def test_dynamic_rule_failure_fails_the_call_and_clears_the_scope(make_logger, recording_sink) -> None:
    log = make_logger({"scopes": {"dyn": lambda: "loud"}})

    with pytest.raises(InvalidScopeConfigurationError):
        log.scope("dyn").info("broken")
    log.info("after")

    assert recording_sink.records[0].context == {}


def test_runtime_override_can_suppress_and_be_cleared(make_logger, recording_sink) -> None:
    log = make_logger({"scopes": {"payment.*": "debug"}})

    log.set_runtime_level("payment.*", False)
    log.scope("payment.stripe").critical("muted")
    assert log.get_runtime_levels() == {"payment.*": SUPPRESSED}

    log.clear_runtime_level("payment.*")
    log.scope("payment.stripe").debug("back")

    assert recording_sink.messages == ["back"]


def test_invalid_runtime_override_leaves_table_unchanged(make_logger) -> None:
    log = make_logger({"scopes": {"auth": "error"}})

    with pytest.raises(InvalidRuntimeOverrideError) as excinfo:
        log.set_runtime_level("auth", "loud")

    assert excinfo.value.key == "runtime.auth"
    assert log.get_runtime_levels() == {}
    with pytest.raises(EmptyScopeIdentifierError):
        log.set_runtime_level("", "debug")


def test_clear_all_runtime_levels(make_logger) -> None:
    log = make_logger().set_runtime_level("a", "debug").set_runtime_level("b", LogLevel.ERROR)

    log.clear_all_runtime_levels()

    assert log.get_runtime_levels() == {}


def test_runtime_override_makes_a_scope_known(make_logger, recording_sink) -> None:
    log = make_logger({"unknown_scope_handling": "exception"})
    log.set_runtime_level("adhoc", "debug")

    log.scope("adhoc").debug("allowed")

    assert recording_sink.messages == ["allowed"]


def test_channel_overlay_applies_only_to_its_channel(recording_sink, static_frames) -> None:
    source = {"scopes": {"payment": "info"}, "channel_scopes": {"slack": {"payment": "critical", "payment.*": "error"}}}
    slack = ScopedLogger(recording_sink, source, "slack", frame_inspector=static_frames())
    daily = ScopedLogger(recording_sink, source, "daily", frame_inspector=static_frames())

    slack.scope("payment").error("slack-drop")
    daily.scope("payment").error("daily-keep")
    slack.scope("payment.refund").error("slack-pattern")

    assert recording_sink.messages == ["daily-keep", "slack-pattern"]
    assert slack.matched_pattern("payment.refund") == "payment.*"
    assert daily.matched_pattern("payment.refund") is None


def test_unknown_scope_exception_policy_emits_nothing(make_logger, recording_sink) -> None:
    log = make_logger({"scopes": {"auth": "debug"}})

    with pytest.raises(UnknownScopeError) as excinfo:
        log.scope(["auth", "ghost", "phantom"]).error("never")

    assert excinfo.value.scopes == ("ghost", "phantom")
    assert "Unknown scopes 'ghost', 'phantom'" in str(excinfo.value)
    assert recording_sink.records == []


def test_trailing_newline_does_not_make_a_scope_known(make_logger, recording_sink) -> None:
    log = make_logger({"scopes": {"auth": "error"}})

    with pytest.raises(UnknownScopeError) as excinfo:
        log.scope("auth\n").error("x")

    assert excinfo.value.scopes == ("auth\n",)
    assert recording_sink.records == []


def test_unknown_scope_log_policy_warns_then_uses_default(make_logger, recording_sink) -> None:
    log = make_logger({"unknown_scope_handling": "log"}).with_context({"request": "r-1"})

    log.scope("ghost").info("still here")

    assert [record.level for record in recording_sink.records] == [LogLevel.WARNING, LogLevel.INFO]
    warning, original = recording_sink.records
    assert warning.message == "Unknown scope 'ghost' used but not configured. Using default log level."
    assert warning.context == {WARNING_KEY: "unknown_scope", "unknown_scopes": ["ghost"]}
    assert original.context == {"request": "r-1", "scope": "ghost"}


def test_unknown_scope_ignore_policy_is_silent(make_logger, recording_sink) -> None:
    log = make_logger({"unknown_scope_handling": "ignore"})

    log.scope("ghost").info("quiet")

    assert recording_sink.messages == ["quiet"]


def test_unknown_declared_scope_follows_policy(make_logger, frame_factory) -> None:
    log = make_logger({}, frame_factory(owner=PaymentService))

    with pytest.raises(UnknownScopeError):
        log.info("declared but not configured")


def test_explicit_scope_does_not_leak_into_next_call(make_logger, recording_sink) -> None:
    log = make_logger({"scopes": {"x": "debug"}})

    log.scope("x").info("first")
    log.info("second")

    assert recording_sink.records[0].context == {"scope": "x"}
    assert recording_sink.records[1].context == {}


def test_explicit_scope_is_cleared_after_a_raising_call(make_logger, recording_sink) -> None:
    log = make_logger()

    with pytest.raises(UnknownScopeError):
        log.scope("ghost").info("boom")
    log.info("after")

    assert recording_sink.records[0].context == {}


def test_empty_scope_sequence_clears_pending_designation(make_logger, recording_sink) -> None:
    log = make_logger({"scopes": {"x": "debug"}})

    log.scope("x").scope([]).info("plain")

    assert recording_sink.records[0].context == {}
    with pytest.raises(EmptyScopeIdentifierError):
        log.scope("")


def test_bound_scope_applies_inside_the_block(make_logger, recording_sink) -> None:
    log = make_logger({"scopes": {"request": "debug"}})

    with log.bind_scope("request") as bound:
        bound.debug("inside")
    log.debug("outside")

    assert recording_sink.messages == ["inside"]
    assert recording_sink.records[0].context == {"scope": "request"}


def test_auto_detected_declared_scope(make_logger, recording_sink, frame_factory) -> None:
    log = make_logger({"scopes": {"payment": "debug"}}, frame_factory(owner=PaymentService))

    log.debug("from service")

    assert recording_sink.records[0].context == {"scope": "payment"}


def test_disabled_configuration_bypasses_filtering(make_logger, recording_sink) -> None:
    log = make_logger({"enabled": False, "scopes": {"noisy": False}}).with_context({"app": "demo"})

    log.scope("noisy").debug("raw", {"k": 1})
    log.scope("ghost").debug("also raw")

    assert recording_sink.messages == ["raw", "also raw"]
    assert recording_sink.records[0].context == {"app": "demo", "k": 1}


def test_scope_field_can_be_renamed_or_disabled(make_logger, recording_sink) -> None:
    renamed = make_logger({"scopes": {"auth": "debug"}, "scope_context_key": "log_scope"})
    hidden = make_logger({"scopes": {"auth": "debug"}, "include_scope_in_context": False})

    renamed.scope("auth").info("a")
    hidden.scope("auth").info("b")

    assert recording_sink.records[0].context == {"log_scope": "auth"}
    assert recording_sink.records[1].context == {}


def test_call_context_overrides_shared_context(make_logger, recording_sink) -> None:
    log = make_logger().with_context({"user": "alice", "tenant": "t1"})

    log.info("hello", {"user": "bob"})
    log.without_context().info("bare")

    assert recording_sink.records[0].context == {"user": "bob", "tenant": "t1"}
    assert recording_sink.records[1].context == {}
    assert log.shared_context == {}


def test_debug_bundle_explains_the_decision(make_logger, recording_sink) -> None:
    log = make_logger({"debug_mode": True, "scopes": {"payment.*": "debug"}})

    log.scope("payment.stripe").info("charged")

    assert recording_sink.records[0].context[DEBUG_KEY] == {
        "resolved_scope": "payment.stripe",
        "log_level": "info",
        "configured_level": "debug",
        "resolution_method": "explicit (scope() method)",
        "runtime_override": "no",
        "matched_pattern": "payment.*",
    }


def test_debug_bundle_without_scope(make_logger, recording_sink) -> None:
    log = make_logger({"debug_mode": True})

    log.warning("plain")

    bundle = recording_sink.records[0].context[DEBUG_KEY]
    assert bundle["resolved_scope"] == "(no scope)"
    assert bundle["configured_level"] == "info"
    assert bundle["resolution_method"] == "default (no scope detected)"
    assert "matched_pattern" not in bundle


def test_debug_bundle_reports_runtime_override(make_logger, recording_sink) -> None:
    log = make_logger({"debug_mode": True, "scopes": {"auth": "error"}}).set_runtime_level("auth", "debug")

    log.scope("auth").debug("verbose now")

    assert recording_sink.records[0].context[DEBUG_KEY]["runtime_override"] == "yes"


def test_metadata_describes_the_caller(make_logger, recording_sink, frame_factory) -> None:
    frames = (
        frame_factory("logging", file="/usr/lib/python3/logging/__init__.py"),
        frame_factory("requests.api", file="/venv/lib/site-packages/requests/api.py"),
        frame_factory(owner=PaymentService, qualname="PaymentService.charge", line=42),
    )
    log = make_logger(
        {"include_metadata": True, "metadata_base_path": "/srv/app", "auto_detection": {"enabled": False}},
        *frames,
    )

    log.info("charged")

    context = recording_sink.records[0].context
    assert context["file"] == "app/services.py"
    assert context["line"] == 42
    assert context["class"] == f"{PaymentService.__module__}.PaymentService"
    assert context["function"] == "charge"


def test_metadata_keeps_absolute_paths_outside_the_base(make_logger, recording_sink, frame_factory) -> None:
    log = make_logger(
        {"include_metadata": True, "metadata_base_path": "/elsewhere", "auto_detection": {"enabled": False}},
        frame_factory(),
    )

    log.info("x")

    context = recording_sink.records[0].context
    assert context["file"] == "/srv/app/app/services.py"
    assert "class" not in context


def test_introspection_helpers(make_logger) -> None:
    log = make_logger({"scopes": {"auth": "error", "payment.*": "debug", "noisy": False}}, channel="ops")

    assert log.channel == "ops"
    assert log.level_for("auth") is LogLevel.ERROR
    assert log.level_for("payment.x") is LogLevel.DEBUG
    assert log.level_for(None) is LogLevel.INFO
    assert log.would_log("auth", "critical")
    assert not log.would_log("auth", LogLevel.WARNING)
    assert not log.would_log("noisy", "emergency")
    assert set(log.configured_scopes()) == {"auth", "payment.*", "noisy"}
    log.matched_pattern("payment.x")
    assert log.pattern_cache_stats().cached_matches == 1


def test_unknown_level_name_is_rejected(make_logger) -> None:
    with pytest.raises(ValueError):
        make_logger().log("verbose", "nope")


def test_unknown_attributes_are_forwarded_to_the_sink(make_logger, recording_sink) -> None:
    log = make_logger()

    assert log.flush() == "flushed"
    assert recording_sink.flushes == 1
    with pytest.raises(AttributeError):
        _ = log._missing_private


def test_drops_are_reported_on_the_library_logger(make_logger, caplog: pytest.LogCaptureFixture) -> None:
    log = make_logger({"scopes": {"auth": "error"}})

    with caplog.at_level(logging.DEBUG, logger="lib_log_scoped"):
        log.scope("auth").info("hidden")

    assert any("Dropped info record" in message and "below threshold" in message for message in caplog.messages)
