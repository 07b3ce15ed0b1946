"""Fake Buttplug server and small async utilities shared by the tests."""

from __future__ import annotations

import asyncio
import io
from collections.abc import Awaitable, Callable
from typing import Optional

from rich.console import Console
from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from buttplug_client.core.logger import ButtplugLogger, LogRecord, Severity
from buttplug_client.models import messages as msgs

Override = Callable[[msgs.ButtplugMessage, ServerConnection], Awaitable[Optional[msgs.ButtplugMessage]]]


def make_logger(maximum_level: Severity = Severity.TRACE) -> tuple[ButtplugLogger, list[LogRecord]]:
    logger = ButtplugLogger(maximum_level=maximum_level, console=Console(file=io.StringIO()))
    records: list[LogRecord] = []
    logger.log_event.subscribe(records.append)
    return logger, records


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


def frame(*messages: msgs.ButtplugMessage) -> str:
    return "[" + ",".join(m.to_json() for m in messages) + "]"


class FakeButtplugServer:
    """Local WebSocket server answering requests the way a Buttplug server would."""

    def __init__(self, max_ping_time: int = 0) -> None:
        self.max_ping_time = max_ping_time
        self.received: list[str] = []
        self.connections: list[ServerConnection] = []
        self.overrides: dict[str, Override] = {}
        self.devices: list[msgs.DeviceInfo] = []
        self.url = ""
        self._server: Optional[Server] = None

    async def __aenter__(self) -> "FakeButtplugServer":
        self._server = await serve(self._handler, "127.0.0.1", 0)
        port = next(iter(self._server.sockets)).getsockname()[1]
        self.url = f"ws://127.0.0.1:{port}"
        return self

    async def __aexit__(self, *exc) -> None:
        assert self._server is not None
        self._server.close()
        await self._server.wait_closed()

    def requests(self) -> list[msgs.ButtplugMessage]:
        return [m for text in self.received for m in msgs.from_json(text)]

    async def push(self, data) -> None:
        await self.connections[-1].send(data)

    async def _handler(self, ws: ServerConnection) -> None:
        self.connections.append(ws)
        try:
            async for text in ws:
                self.received.append(text)
                for message in msgs.from_json(text):
                    reply = await self._respond(message, ws)
                    if reply is not None:
                        await ws.send(frame(reply))
        except ConnectionClosed:
            pass

    async def _respond(self, message: msgs.ButtplugMessage,
                       ws: ServerConnection) -> Optional[msgs.ButtplugMessage]:
        override = self.overrides.get(message.type_name)
        if override is not None:
            return await override(message, ws)
        if isinstance(message, msgs.RequestServerInfo):
            return msgs.ServerInfo("Fake Server", message_version=1,
                                   max_ping_time=self.max_ping_time, id=message.id)
        if isinstance(message, msgs.RequestDeviceList):
            return msgs.DeviceList(list(self.devices), id=message.id)
        return msgs.Ok(id=message.id)


async def no_reply(message, ws):
    return None


def error_reply(error_class: msgs.ErrorClass, text: str = "rejected") -> Override:
    async def _reply(message, ws):
        return msgs.Error(text, error_class, id=message.id)
    return _reply
