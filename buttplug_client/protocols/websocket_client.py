"""
WebSocket Transport for the Buttplug client
Owns the channel lifecycle, frames outgoing messages and dispatches incoming ones
"""

from typing import List, Optional, Union
import asyncio
import contextlib

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from buttplug_client.core.exceptions import (
    ClientUsageError,
    ConnectionFailedError,
    HandshakeError,
    MessageDecodeError,
)
from buttplug_client.core.logger import ButtplugLogger
from buttplug_client.core.patterns.state_machine import ConnectionState, StateMachine
from buttplug_client.models import messages as msgs
from buttplug_client.protocols.base_client import ButtplugClient, ClientConfig

Frame = Union[str, bytes, bytearray, memoryview]


class ButtplugWebsocketClient(ButtplugClient):
    """
    Buttplug client speaking over a single WebSocket connection.

    Features:
    - Connect reports success only after the server handshake
    - Text and binary frames share one decode-and-dispatch path
    - Malformed frames are reported on ``error`` without ending the session
    - Teardown runs exactly once, whether local or remote initiated
    """

    def __init__(self, config: ClientConfig, logger: ButtplugLogger):
        super().__init__(config, logger)
        self._machine = StateMachine(ConnectionState.DISCONNECTED)
        self._ws: Optional[ClientConnection] = None
        self._reader: Optional[asyncio.Task] = None

    @property
    def connected(self) -> bool:
        return self._machine.state == ConnectionState.CONNECTED

    @property
    def connection_state(self) -> ConnectionState:
        return self._machine.state

    async def connect(self, address: str) -> None:
        if not self._machine.transition(ConnectionState.CONNECTING):
            raise ClientUsageError(f"Cannot connect while {self._machine.state.name.lower()}")

        self.logger.info(f"Connecting to {address}")
        try:
            ws = await connect(address, max_size=self.config.max_message_size)
        except (OSError, asyncio.TimeoutError, WebSocketException) as err:
            self._machine.transition(ConnectionState.DISCONNECTED)
            self.logger.error(f"Connection to {address} failed: {err}")
            raise ConnectionFailedError(f"Could not connect to {address}: {err}") from err
        except asyncio.CancelledError:
            self._machine.transition(ConnectionState.DISCONNECTED)
            raise

        self._ws = ws
        self._reader = asyncio.create_task(self._receive_loop(ws))
        handshake = asyncio.ensure_future(self.initialize_connection())
        try:
            await asyncio.wait({handshake, self._reader}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            handshake.cancel()
            await self._abort_session()
            raise

        if not handshake.done():
            handshake.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await handshake
            code, reason = ws.close_code, ws.close_reason
            await self._abort_session()
            self.logger.error(f"Connection closed during handshake (code {code})")
            raise ConnectionFailedError(f"Connection closed during handshake: {reason or code}",
                                        code=code, reason=reason or "")

        cause = handshake.exception()
        if cause is not None or not handshake.result():
            await self._abort_session()
            raise HandshakeError("Server handshake failed") from cause

        if self._reader.done():
            code, reason = ws.close_code, ws.close_reason
            await self._abort_session()
            raise ConnectionFailedError("Connection closed right after handshake",
                                        code=code, reason=reason or "")

        self._machine.transition(ConnectionState.CONNECTED)
        self.logger.info(f"Connected to {address}")

    async def disconnect(self) -> None:
        if not self._machine.transition(ConnectionState.DISCONNECTING):
            return
        await self._teardown()

    async def send(self, message: msgs.ButtplugMessage) -> None:
        if self._ws is None:
            raise ClientUsageError("ButtplugClient not connected")
        try:
            await self._ws.send("[" + message.to_json() + "]")
        except ConnectionClosed as err:
            raise ConnectionFailedError(f"Connection closed while sending {message.type_name}",
                                        code=err.rcvd.code if err.rcvd else None) from err

    async def _receive_loop(self, ws: ClientConnection) -> None:
        try:
            async for frame in ws:
                await self._handle_frame(frame)
        except ConnectionClosed as err:
            self.logger.warn(f"Connection lost: {err}")

        # Handshake-phase closes are handled by connect()
        if self._machine.transition(ConnectionState.DISCONNECTING):
            self.logger.info("Server closed the connection")
            await self._teardown()

    async def _handle_frame(self, frame: Frame) -> None:
        try:
            if isinstance(frame, str):
                text = frame
            else:
                text = await self._materialize(frame)
            messages = msgs.from_json(text)
        except MessageDecodeError as err:
            self.logger.error(f"Dropping malformed frame: {err}")
            self.error.notify(err)
            return
        self._dispatch(messages)

    async def _materialize(self, frame: Frame) -> str:
        try:
            return bytes(frame).decode("utf-8")
        except UnicodeDecodeError as err:
            raise MessageDecodeError(f"Binary frame is not UTF-8 text: {err}") from err

    def _dispatch(self, messages: List[msgs.ButtplugMessage]) -> None:
        self.logger.trace(f"Received {len(messages)} message(s)")
        try:
            self.on_messages(messages)
        except Exception as e:
            self.logger.error(f"Error handling messages: {e}")
            self.error.notify(e)

    async def _teardown(self) -> None:
        """Runs only from DISCONNECTING, so at most once per session."""
        try:
            self.shutdown_connection()
        finally:
            ws, self._ws = self._ws, None
            await self._stop_reader()
            if ws is not None:
                await ws.close()
            self._machine.transition(ConnectionState.DISCONNECTED)
            self.logger.info("Disconnected")
            self.close.notify()

    async def _abort_session(self) -> None:
        """Undo a half-open session from the connect phase. No close event."""
        self.shutdown_connection()
        ws, self._ws = self._ws, None
        await self._stop_reader()
        if ws is not None:
            await ws.close()
        self._machine.transition(ConnectionState.DISCONNECTED)

    async def _stop_reader(self) -> None:
        reader, self._reader = self._reader, None
        if reader is None or reader is asyncio.current_task():
            return
        reader.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await reader
