"""
Leveled log sink for the Buttplug client.

The sink forwards accepted records to two independent outputs: an optional
rich console and the ``log`` event. Nothing is buffered.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Optional

from rich.console import Console

from buttplug_client.core.exceptions import ConfigurationError
from buttplug_client.core.patterns.observer import EventSubject
from buttplug_client.models.messages import Error, ErrorClass


class Severity(IntEnum):
    """Log levels, ordered from most suppressive to most verbose."""
    OFF   = 0
    FATAL = 1
    ERROR = 2
    WARN  = 3
    INFO  = 4
    DEBUG = 5
    TRACE = 6

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: str) -> "Severity":
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ConfigurationError(f"Unknown log level: {value!r}") from None


def _now() -> str:
    now = datetime.now()
    return f"{now.hour}:{now.minute}:{now.second}"


@dataclass(frozen=True)
class LogRecord:
    """One accepted log call."""
    text: str
    level: Severity
    timestamp: str = field(default_factory=_now)

    @property
    def formatted(self) -> str:
        return f"{self.level.label} : {self.timestamp} : {self.text}"


class ButtplugLogger:
    """
    Log sink with separate thresholds for console output and for ``log``
    event subscribers, so a subscriber asking for Trace cannot flood the
    console and the console level does not limit subscribers.

    One instance is built by the application and passed to the clients that
    should report through it.
    """

    def __init__(self,
                 maximum_level: Severity = Severity.OFF,
                 maximum_console_level: Severity = Severity.OFF,
                 console_enabled: bool = False,
                 console: Optional[Console] = None):
        self.maximum_level = maximum_level
        self.maximum_console_level = maximum_console_level
        self.console_enabled = console_enabled
        self.console = console or Console(stderr=True)
        self.log_event = EventSubject("log")

    def log(self, text: str, level: Severity) -> None:
        """Checks whether anything wants the message, then prints and/or emits it."""
        if level == Severity.OFF:
            return
        if level > self.maximum_level and level > self.maximum_console_level:
            return

        record = LogRecord(text, level)
        if self.console_enabled and level <= self.maximum_console_level:
            self.console.print(record.formatted, markup=False, highlight=False, emoji=False)
        if level <= self.maximum_level:
            self.log_event.notify(record)

    def log_and_fail(self, text: str, error_class: ErrorClass, msg_id: int) -> Error:
        """Log at Error, then build the Error message the caller should surface."""
        self.error(text)
        return Error(text, error_class, id=msg_id)

    def fatal(self, text: str) -> None:
        self.log(text, Severity.FATAL)

    def error(self, text: str) -> None:
        self.log(text, Severity.ERROR)

    def warn(self, text: str) -> None:
        self.log(text, Severity.WARN)

    def info(self, text: str) -> None:
        self.log(text, Severity.INFO)

    def debug(self, text: str) -> None:
        self.log(text, Severity.DEBUG)

    def trace(self, text: str) -> None:
        self.log(text, Severity.TRACE)
