"""Protocol message models and codec."""

from .messages import (
    ButtplugMessage,
    DeviceInfo,
    ErrorClass,
    from_json,
    SYSTEM_MESSAGE_ID,
)

__all__ = [
    'ButtplugMessage',
    'DeviceInfo',
    'ErrorClass',
    'from_json',
    'SYSTEM_MESSAGE_ID',
]
