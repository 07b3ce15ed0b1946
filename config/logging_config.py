"""Rich-handler logging preset and the bridge from the Buttplug log sink."""
import logging
from rich.logging import RichHandler

from buttplug_client.core.logger import ButtplugLogger, LogRecord, Severity
from .app_config import settings

_PY_LEVELS = {
    Severity.FATAL: logging.CRITICAL,
    Severity.ERROR: logging.ERROR,
    Severity.WARN:  logging.WARNING,
    Severity.INFO:  logging.INFO,
    Severity.DEBUG: logging.DEBUG,
    Severity.TRACE: logging.DEBUG,
}


def configure():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format="%(asctime)s │ %(name)-38s │ %(levelname)-8s │ %(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(rich_tracebacks=True, markup=True)],
    )


def build_logger() -> ButtplugLogger:
    """Create the process logger from settings and forward its records to stdlib logging."""
    sink = ButtplugLogger(
        maximum_level=Severity.parse(settings.BUTTPLUG_LOG_LEVEL),
        maximum_console_level=Severity.parse(settings.CONSOLE_LOG_LEVEL),
        console_enabled=settings.CONSOLE_LOGGING,
    )
    sink.log_event.subscribe(forward_to_logging)
    return sink


def forward_to_logging(record: LogRecord, logger_name: str = "buttplug") -> None:
    logging.getLogger(logger_name).log(_PY_LEVELS[record.level], record.text)
