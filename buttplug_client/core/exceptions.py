"""
Centralised exception definitions for the Buttplug client.
All custom exceptions should inherit from ButtplugClientError.
"""


class ButtplugClientError(Exception):
    """Base class for every custom exception thrown by this project."""


class ConfigurationError(ButtplugClientError):
    """Raised when configuration files or environment variables are invalid."""


class ClientUsageError(ButtplugClientError):
    """Raised when the client is used incorrectly (send while disconnected, double connect)."""


class ConnectionFailedError(ButtplugClientError):
    """The channel could not be opened, or closed before the session was usable."""

    def __init__(self, message: str, code=None, reason: str = ""):
        super().__init__(message)
        self.code = code
        self.reason = reason


class HandshakeError(ConnectionFailedError):
    """The post-connect handshake did not succeed."""


class MessageDecodeError(ButtplugClientError):
    """Inbound frame could not be turned into typed messages."""


class ProtocolError(ButtplugClientError):
    """The server answered a request with an Error message."""

    def __init__(self, message: str, error_class=None, msg_id: int = 0):
        super().__init__(message)
        self.error_class = error_class
        self.msg_id = msg_id
