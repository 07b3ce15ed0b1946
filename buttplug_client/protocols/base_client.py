"""
Buttplug Protocol Client Framework
Base abstract class for Buttplug clients, independent of the channel carrying the messages
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import asyncio

from buttplug_client.core.exceptions import (
    ClientUsageError,
    ConnectionFailedError,
    ProtocolError,
)
from buttplug_client.core.logger import ButtplugLogger, Severity
from buttplug_client.core.patterns.observer import EventSubject
from buttplug_client.models import messages as msgs


class ClientConfig:
    """Configuration class for Buttplug clients."""

    def __init__(self,
                 client_name: str,
                 request_timeout: Optional[float] = 10.0,
                 max_message_size: Optional[int] = None):
        self.client_name = client_name
        self.request_timeout = request_timeout
        self.max_message_size = max_message_size


class ButtplugClient(ABC):
    """
    Abstract base class for Buttplug clients.

    Owns the protocol semantics above the channel: message ids, matching
    replies to requests, the server handshake, keepalive pings and the device
    table. Subclasses provide the channel and call the three hooks
    ``initialize_connection``, ``shutdown_connection`` and ``on_messages``.
    """

    def __init__(self, config: ClientConfig, logger: ButtplugLogger):
        self.config = config
        self.logger = logger
        self.server_info: Optional[msgs.ServerInfo] = None
        self.devices: Dict[int, msgs.DeviceInfo] = {}

        self._next_id = 1
        self._pending: Dict[int, asyncio.Future] = {}
        self._ping_task: Optional[asyncio.Task] = None

        self.close = EventSubject("close")
        self.error = EventSubject("error")
        self.device_added = EventSubject("device_added")
        self.device_removed = EventSubject("device_removed")
        self.scanning_finished = EventSubject("scanning_finished")
        self.server_log = EventSubject("server_log")

    # Abstract methods that subclasses must implement
    @property
    @abstractmethod
    def connected(self) -> bool:
        """True once the channel is open and the handshake has completed."""

    @abstractmethod
    async def connect(self, address: str) -> None:
        """Open the channel and run the handshake."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Tear the session down. Safe to call when not connected."""

    @abstractmethod
    async def send(self, message: msgs.ButtplugMessage) -> None:
        """Write one message to the channel."""

    # Async context manager protocol
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
        return False

    # Hooks called by the transport
    async def initialize_connection(self) -> bool:
        """Run the server handshake. Returns False instead of raising on failure."""
        request = msgs.RequestServerInfo(self.config.client_name)
        try:
            reply = await self.send_message(request)
        except (ProtocolError, ConnectionFailedError, ClientUsageError, asyncio.TimeoutError) as e:
            self.logger.log_and_fail(f"Handshake failed: {e}", msgs.ErrorClass.ERROR_INIT, request.id)
            return False

        if not isinstance(reply, msgs.ServerInfo):
            self.logger.log_and_fail(f"Handshake expected ServerInfo, got {reply.type_name}",
                                     msgs.ErrorClass.ERROR_INIT, request.id)
            return False

        self.server_info = reply
        self.logger.info(f"Connected to server '{reply.server_name}' "
                         f"(message version {reply.message_version})")
        if reply.max_ping_time > 0:
            self._ping_task = asyncio.create_task(self._ping_loop(reply.max_ping_time / 1000.0))
        return True

    def shutdown_connection(self) -> None:
        """Stop keepalive, fail every outstanding request, forget devices."""
        if self._ping_task is not None:
            if self._ping_task is not asyncio.current_task():
                self._ping_task.cancel()
            self._ping_task = None

        pending, self._pending = self._pending, {}
        for msg_id, future in pending.items():
            if not future.done():
                future.set_exception(ConnectionFailedError(f"Connection closed before reply to message {msg_id}"))

        self.devices.clear()
        self.server_info = None

    def on_messages(self, messages: List[msgs.ButtplugMessage]) -> None:
        """Route a decoded frame: replies to their requests, system messages to events."""
        for message in messages:
            if message.is_system_message:
                self._handle_system_message(message)
                continue

            future = self._pending.pop(message.id, None)
            if future is None:
                self.logger.warn(f"Reply {message.type_name} for unknown message id {message.id}")
            elif not future.done():
                future.set_result(message)

    def _handle_system_message(self, message: msgs.ButtplugMessage) -> None:
        if isinstance(message, msgs.DeviceAdded):
            device = message.to_device_info()
            self.devices[device.device_index] = device
            self.logger.debug(f"Device added: {device.device_name} ({device.device_index})")
            self.device_added.notify(device)
        elif isinstance(message, msgs.DeviceRemoved):
            device = self.devices.pop(message.device_index, None)
            if device is None:
                self.logger.warn(f"Removal of unknown device index {message.device_index}")
                return
            self.logger.debug(f"Device removed: {device.device_name} ({device.device_index})")
            self.device_removed.notify(device)
        elif isinstance(message, msgs.ScanningFinished):
            self.scanning_finished.notify()
        elif isinstance(message, msgs.Log):
            self.server_log.notify(message)
        elif isinstance(message, msgs.Error):
            self.logger.error(f"Server error: {message.error_message}")
            self.error.notify(ProtocolError(message.error_message, message.error_code, message.id))
        else:
            self.logger.warn(f"Unhandled system message: {message.type_name}")

    # Request/response
    async def send_message(self, message: msgs.ButtplugMessage) -> msgs.ButtplugMessage:
        """Send a request and wait for its reply. Error replies raise ProtocolError."""
        message.id = self._next_id
        self._next_id += 1

        future = asyncio.get_running_loop().create_future()
        self._pending[message.id] = future
        try:
            await self.send(message)
            if self.config.request_timeout is None:
                reply = await future
            else:
                reply = await asyncio.wait_for(future, self.config.request_timeout)
        finally:
            self._pending.pop(message.id, None)

        if isinstance(reply, msgs.Error):
            raise ProtocolError(reply.error_message, reply.error_code, reply.id)
        return reply

    async def send_checked(self, message: msgs.ButtplugMessage) -> None:
        """Send a request that must be answered with Ok."""
        reply = await self.send_message(message)
        if not isinstance(reply, msgs.Ok):
            raise ProtocolError(f"Expected Ok for {message.type_name}, got {reply.type_name}",
                                msgs.ErrorClass.ERROR_MSG, reply.id)

    # Commands
    async def start_scanning(self) -> None:
        await self.send_checked(msgs.StartScanning())

    async def stop_scanning(self) -> None:
        await self.send_checked(msgs.StopScanning())

    async def stop_all_devices(self) -> None:
        await self.send_checked(msgs.StopAllDevices())

    async def stop_device(self, device_index: int) -> None:
        if device_index not in self.devices:
            raise ClientUsageError(f"Unknown device index {device_index}")
        await self.send_checked(msgs.StopDeviceCmd(device_index))

    async def request_log(self, level: Severity) -> None:
        """Ask the server to forward its own log messages at or below ``level``."""
        await self.send_checked(msgs.RequestLog(level.label))

    async def ping(self) -> None:
        await self.send_checked(msgs.Ping())

    async def request_device_list(self) -> List[msgs.DeviceInfo]:
        reply = await self.send_message(msgs.RequestDeviceList())
        if not isinstance(reply, msgs.DeviceList):
            raise ProtocolError(f"Expected DeviceList, got {reply.type_name}",
                                msgs.ErrorClass.ERROR_MSG, reply.id)
        self.devices = {d.device_index: d for d in reply.devices}
        return list(reply.devices)

    async def _ping_loop(self, max_ping_time: float) -> None:
        interval = max_ping_time / 2
        while True:
            await asyncio.sleep(interval)
            try:
                await self.ping()
            except ProtocolError as e:
                self.logger.error(f"Ping rejected by server: {e}")
                self.error.notify(e)
            except (ConnectionFailedError, ClientUsageError, asyncio.TimeoutError) as e:
                self.logger.warn(f"Ping failed: {e}")
                self.error.notify(e)
                return
