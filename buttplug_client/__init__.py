"""Buttplug Client - WebSocket client endpoint for the Buttplug device-control protocol"""

__version__ = '1.0.0'
__description__ = 'Buttplug protocol client over WebSocket'

# Core - most fundamental
from .core import (
    ButtplugLogger,
    LogRecord,
    Severity,
    ButtplugClientError,
    ClientUsageError,
    ConnectionFailedError,
    HandshakeError,
    MessageDecodeError,
    ProtocolError,
)

# Models
from .models import ButtplugMessage, DeviceInfo, ErrorClass, from_json

# Protocols
from .protocols import ButtplugClient, ButtplugWebsocketClient, ClientConfig

__all__ = [
    # Core
    'ButtplugLogger',
    'LogRecord',
    'Severity',
    'ButtplugClientError',
    'ClientUsageError',
    'ConnectionFailedError',
    'HandshakeError',
    'MessageDecodeError',
    'ProtocolError',

    # Models
    'ButtplugMessage',
    'DeviceInfo',
    'ErrorClass',
    'from_json',

    # Clients
    'ButtplugClient',
    'ButtplugWebsocketClient',
    'ClientConfig',
]
