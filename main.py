#!/usr/bin/env python3
import asyncio, sys
from config.logging_config import configure, build_logger
from config.app_config import settings
from buttplug_client import ButtplugWebsocketClient, ClientConfig

async def async_main():
    configure()
    logger = build_logger()
    client = ButtplugWebsocketClient(
        ClientConfig(
            client_name=settings.CLIENT_NAME,
            request_timeout=settings.REQUEST_TIMEOUT,
        ),
        logger,
    )
    closed = asyncio.Event()
    client.close.subscribe(closed.set)
    client.device_added.subscribe(lambda d: logger.info(f"🔌  {d.device_name} [{d.device_index}]"))
    client.device_removed.subscribe(lambda d: logger.info(f"❌  {d.device_name} [{d.device_index}]"))

    async with client:
        await client.connect(settings.SERVER_URL)
        await client.start_scanning()
        # keep process alive until the server goes away
        await closed.wait()

if __name__ == "__main__":
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        sys.exit("🌙  graceful shutdown")
