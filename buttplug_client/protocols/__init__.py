"""Protocol client implementations."""

from .base_client import ButtplugClient, ClientConfig
from .websocket_client import ButtplugWebsocketClient

__all__ = [
    # Base classes
    'ButtplugClient',
    'ClientConfig',

    # Implementations
    'ButtplugWebsocketClient',
]
