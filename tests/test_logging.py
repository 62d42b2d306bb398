import json
import logging

from app.core.logging import ContextFilter, DevelopmentFormatter, LogContext, StructuredFormatter


def _record(msg="Plan requested", **extra):
    record = logging.LogRecord("onboarding.app.flow", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_log_context_is_copied_onto_records():
    record = _record()
    with LogContext(user_id="u1", status="step2"):
        ContextFilter().filter(record)
    assert record.user_id == "u1"
    assert record.status == "step2"


def test_nested_context_restores_outer_values():
    with LogContext(user_id="u1", step="pin"):
        with LogContext(step="plan"):
            inner = _record()
            ContextFilter().filter(inner)
        outer = _record()
        ContextFilter().filter(outer)
    after = _record()
    ContextFilter().filter(after)

    assert (inner.user_id, inner.step) == ("u1", "plan")
    assert outer.step == "pin"
    assert not hasattr(after, "user_id")


def test_explicit_extra_wins_over_context():
    record = _record(event="login")
    with LogContext(event="registered"):
        ContextFilter().filter(record)
    assert record.event == "login"


def test_structured_formatter_emits_json():
    line = StructuredFormatter().format(_record(user_id="u1", status="step3"))
    data = json.loads(line)
    assert data["message"] == "Plan requested"
    assert data["user_id"] == "u1"
    assert data["status"] == "step3"
    assert "step" not in data


def test_development_formatter_appends_context():
    line = DevelopmentFormatter().format(_record(user_id="u1"))
    assert "app.flow: Plan requested" in line
    assert "[user_id=u1]" in line
