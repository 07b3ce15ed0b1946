from __future__ import annotations
from dataclasses import MISSING, Field, dataclass, field, fields
from enum import IntEnum
from typing import Any, Dict, List, Type
import json

from buttplug_client.core.exceptions import MessageDecodeError

SYSTEM_MESSAGE_ID = 0
MESSAGE_SPEC_VERSION = 1

_REGISTRY: Dict[str, Type["ButtplugMessage"]] = {}


def _register(cls: Type["ButtplugMessage"]) -> Type["ButtplugMessage"]:
    _REGISTRY[cls.__name__] = cls
    return cls


def _wire_name(f: Field) -> str:
    return f.metadata.get("wire") or "".join(part.capitalize() for part in f.name.split("_"))


def _to_wire(value: Any) -> Any:
    if isinstance(value, IntEnum):
        return int(value)
    if isinstance(value, DeviceInfo):
        return value.to_payload()
    if isinstance(value, list):
        return [_to_wire(v) for v in value]
    return value


class ErrorClass(IntEnum):
    """Error classes carried by Error messages, in wire order."""
    ERROR_UNKNOWN = 0
    ERROR_INIT    = 1
    ERROR_PING    = 2
    ERROR_MSG     = 3
    ERROR_DEVICE  = 4


###############################################################################
# 1. BASE MESSAGE -------------------------------------------------------------
###############################################################################

@dataclass
class ButtplugMessage:
    """
    One protocol message. The envelope on the wire is
    ``{"<TypeName>": {"Id": <id>, <PascalCase fields>}}``.
    """
    id: int = field(default=SYSTEM_MESSAGE_ID, kw_only=True)

    @property
    def type_name(self) -> str:
        return type(self).__name__

    @property
    def is_system_message(self) -> bool:
        return self.id == SYSTEM_MESSAGE_ID

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"Id": self.id}
        for f in fields(self):
            if f.name == "id":
                continue
            payload[_wire_name(f)] = _to_wire(getattr(self, f.name))
        return payload

    def to_json(self) -> str:
        return json.dumps({self.type_name: self.to_payload()})

    # ---------- factory --------------------------------------------------- #
    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ButtplugMessage":
        if "Id" not in payload:
            raise MessageDecodeError(f"{cls.__name__} is missing 'Id'")
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "id":
                continue
            key = _wire_name(f)
            if key in payload:
                kwargs[f.name] = payload[key]
            elif f.default is MISSING and f.default_factory is MISSING:
                raise MessageDecodeError(f"{cls.__name__} is missing '{key}'")
        return cls(id=int(payload["Id"]), **kwargs)


###############################################################################
# 2. STATUS MESSAGES ----------------------------------------------------------
###############################################################################

@_register
@dataclass
class Ok(ButtplugMessage):
    pass


@_register
@dataclass
class Error(ButtplugMessage):
    error_message: str
    error_code: ErrorClass = ErrorClass.ERROR_UNKNOWN

    def __post_init__(self):
        self.error_code = ErrorClass(self.error_code)


@_register
@dataclass
class Ping(ButtplugMessage):
    pass


@_register
@dataclass
class Test(ButtplugMessage):
    test_string: str


###############################################################################
# 3. HANDSHAKE & LOGGING ------------------------------------------------------
###############################################################################

@_register
@dataclass
class RequestServerInfo(ButtplugMessage):
    client_name: str
    message_version: int = MESSAGE_SPEC_VERSION


@_register
@dataclass
class ServerInfo(ButtplugMessage):
    server_name: str
    message_version: int
    max_ping_time: int = 0
    major_version: int = 0
    minor_version: int = 0
    build_version: int = 0


@_register
@dataclass
class RequestLog(ButtplugMessage):
    log_level: str


@_register
@dataclass
class Log(ButtplugMessage):
    log_level: str
    log_message: str


###############################################################################
# 4. ENUMERATION & DEVICES ----------------------------------------------------
###############################################################################

@dataclass
class DeviceInfo:
    """A device as announced by the server."""
    device_index: int
    device_name: str
    device_messages: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "DeviceIndex": self.device_index,
            "DeviceName": self.device_name,
            "DeviceMessages": self.device_messages,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "DeviceInfo":
        return cls(
            device_index    = int(row["DeviceIndex"]),
            device_name     = row["DeviceName"],
            device_messages = row.get("DeviceMessages") or {},
        )


@_register
@dataclass
class StartScanning(ButtplugMessage):
    pass


@_register
@dataclass
class StopScanning(ButtplugMessage):
    pass


@_register
@dataclass
class ScanningFinished(ButtplugMessage):
    pass


@_register
@dataclass
class RequestDeviceList(ButtplugMessage):
    pass


@_register
@dataclass
class DeviceList(ButtplugMessage):
    devices: List[DeviceInfo] = field(default_factory=list)

    def __post_init__(self):
        self.devices = [d if isinstance(d, DeviceInfo) else DeviceInfo.from_row(d)
                        for d in self.devices]


@_register
@dataclass
class DeviceAdded(ButtplugMessage):
    device_index: int
    device_name: str
    device_messages: Dict[str, Any] = field(default_factory=dict)

    def to_device_info(self) -> DeviceInfo:
        return DeviceInfo(self.device_index, self.device_name, dict(self.device_messages))


@_register
@dataclass
class DeviceRemoved(ButtplugMessage):
    device_index: int


@_register
@dataclass
class StopDeviceCmd(ButtplugMessage):
    device_index: int


@_register
@dataclass
class StopAllDevices(ButtplugMessage):
    pass


###############################################################################
# 5. CODEC --------------------------------------------------------------------
###############################################################################

def from_json(text: str) -> List[ButtplugMessage]:
    """Decode one frame (a JSON array of envelopes) into typed messages."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as err:
        raise MessageDecodeError(f"Frame is not valid JSON: {err}") from err

    if not isinstance(raw, list) or not raw:
        raise MessageDecodeError("Frame must be a non-empty JSON array of messages")

    return [_decode_envelope(envelope) for envelope in raw]


def _decode_envelope(envelope: Any) -> ButtplugMessage:
    if not isinstance(envelope, dict) or len(envelope) != 1:
        raise MessageDecodeError(f"Malformed message envelope: {envelope!r}")

    (name, payload), = envelope.items()
    msg_cls = _REGISTRY.get(name)
    if msg_cls is None:
        raise MessageDecodeError(f"Unknown message type: {name}")
    if not isinstance(payload, dict):
        raise MessageDecodeError(f"{name} payload must be an object")

    try:
        return msg_cls.from_payload(payload)
    except (KeyError, TypeError, ValueError) as err:
        raise MessageDecodeError(f"Invalid {name} message: {err}") from err
