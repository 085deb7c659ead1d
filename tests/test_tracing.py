import logging

import pytest

from shared.tracing import get_logger, log_event, span


def test_tracing_span_noop_offline() -> None:
    with span("unit.test", foo=1, bar="x"):
        log_event("inside-span", payload={"k": "v"})


def test_span_does_not_swallow_errors() -> None:
    with pytest.raises(RuntimeError):
        with span("unit.error"):
            raise RuntimeError("boom")


def test_get_logger_is_named() -> None:
    log = get_logger("assistant.test")
    assert isinstance(log, logging.Logger)
    assert log.name == "assistant.test"
