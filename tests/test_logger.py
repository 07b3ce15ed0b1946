import dataclasses
import datetime
import io
import re

import pytest
from rich.console import Console

from buttplug_client.core import logger as logger_module
from buttplug_client.core.exceptions import ConfigurationError
from buttplug_client.core.logger import ButtplugLogger, LogRecord, Severity
from buttplug_client.models import messages as msgs


def make_sink(maximum_level, maximum_console_level, console_enabled=True):
    out = io.StringIO()
    sink = ButtplugLogger(maximum_level, maximum_console_level, console_enabled,
                          console=Console(file=out, width=200))
    events: list[LogRecord] = []
    sink.log_event.subscribe(events.append)
    return sink, events, out


def test_thresholds_are_independent() -> None:
    sink, events, out = make_sink(Severity.TRACE, Severity.INFO)

    sink.trace("very chatty")
    assert [e.text for e in events] == ["very chatty"]
    assert out.getvalue() == ""

    sink.info("visible everywhere")
    assert len(events) == 2
    assert "Info : " in out.getvalue()
    assert out.getvalue().rstrip().endswith(": visible everywhere")


def test_console_level_does_not_admit_events() -> None:
    sink, events, out = make_sink(Severity.ERROR, Severity.DEBUG)

    sink.debug("console only")

    assert events == []
    assert "Debug : " in out.getvalue()


@pytest.mark.parametrize("level", [s for s in Severity if s != Severity.OFF])
def test_off_admits_nothing(level) -> None:
    sink, events, out = make_sink(Severity.OFF, Severity.OFF)

    sink.log("anything", level)

    assert events == []
    assert out.getvalue() == ""


def test_console_disabled_prints_nothing() -> None:
    sink, events, out = make_sink(Severity.OFF, Severity.TRACE, console_enabled=False)

    sink.fatal("boom")

    assert events == []
    assert out.getvalue() == ""


def test_warn_scenario() -> None:
    sink, events, out = make_sink(Severity.WARN, Severity.OFF)

    sink.warn("disk low")
    sink.debug("cache hit")

    assert len(events) == 1
    assert re.fullmatch(r"Warn : \d{1,2}:\d{1,2}:\d{1,2} : disk low", events[0].formatted)
    assert out.getvalue() == ""


def test_every_convenience_form_uses_its_level() -> None:
    sink, events, _ = make_sink(Severity.TRACE, Severity.OFF)

    sink.fatal("f")
    sink.error("e")
    sink.warn("w")
    sink.info("i")
    sink.debug("d")
    sink.trace("t")

    assert [e.level for e in events] == [
        Severity.FATAL, Severity.ERROR, Severity.WARN, Severity.INFO, Severity.DEBUG, Severity.TRACE,
    ]


def test_log_and_fail_logs_error_and_returns_message() -> None:
    sink, events, _ = make_sink(Severity.ERROR, Severity.OFF)

    result = sink.log_and_fail("device vanished", msgs.ErrorClass.ERROR_DEVICE, 17)

    assert isinstance(result, msgs.Error)
    assert result.error_message == "device vanished"
    assert result.error_code == msgs.ErrorClass.ERROR_DEVICE
    assert result.id == 17
    assert [(e.level, e.text) for e in events] == [(Severity.ERROR, "device vanished")]


def test_log_record_is_immutable() -> None:
    record = LogRecord("x", Severity.INFO)

    with pytest.raises(dataclasses.FrozenInstanceError):
        record.text = "y"


def test_severity_parse() -> None:
    assert Severity.parse("warn") is Severity.WARN
    assert Severity.parse(" Trace ") is Severity.TRACE
    with pytest.raises(ConfigurationError):
        Severity.parse("verbose")


def test_timestamp_is_unpadded_wall_clock(monkeypatch) -> None:
    class FixedClock(datetime.datetime):
        @classmethod
        def now(cls, tz=None):
            return cls(2026, 1, 2, 9, 5, 7)

    monkeypatch.setattr(logger_module, "datetime", FixedClock)

    assert LogRecord("x", Severity.INFO).formatted == "Info : 9:5:7 : x"
