"""Centralised application settings (dotenv + env overrides)."""
from __future__ import annotations
import os
from pathlib import Path
from dotenv import load_dotenv

ROOT = Path(__file__).parents[1]
load_dotenv(ROOT / ".env", override=False)


def _flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


class settings:                            # pylint: disable=too-few-public-methods
    SERVER_URL          = os.getenv("BUTTPLUG_SERVER_URL", "ws://127.0.0.1:12345/buttplug")
    CLIENT_NAME         = os.getenv("BUTTPLUG_CLIENT_NAME", "Buttplug Python Client")
    REQUEST_TIMEOUT     = float(os.getenv("REQUEST_TIMEOUT", 10))
    LOG_LEVEL           = os.getenv("LOG_LEVEL", "INFO").upper()
    BUTTPLUG_LOG_LEVEL  = os.getenv("BUTTPLUG_LOG_LEVEL", "Info")
    CONSOLE_LOG_LEVEL   = os.getenv("BUTTPLUG_CONSOLE_LOG_LEVEL", "Off")
    CONSOLE_LOGGING     = _flag(os.getenv("BUTTPLUG_CONSOLE_LOGGING", "false"))
