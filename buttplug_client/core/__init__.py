# buttplug_client/core/__init__.py
"""Core infrastructure components for the Buttplug client."""

# Import order: most fundamental to most specific

from .exceptions import (
    ButtplugClientError,
    ConfigurationError,
    ClientUsageError,
    ConnectionFailedError,
    HandshakeError,
    MessageDecodeError,
    ProtocolError,
)

from .patterns.state_machine import StateMachine, ConnectionState
from .patterns.observer import EventSubject
from .logger import ButtplugLogger, LogRecord, Severity


__all__ = [
    "StateMachine",
    "ConnectionState",
    "EventSubject",
    "ButtplugLogger",
    "LogRecord",
    "Severity",
    "ButtplugClientError",
    "ConfigurationError",
    "ClientUsageError",
    "ConnectionFailedError",
    "HandshakeError",
    "MessageDecodeError",
    "ProtocolError",
]
