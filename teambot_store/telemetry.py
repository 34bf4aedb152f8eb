import logging
from enum import Enum
from typing import Protocol


class SeverityLevel(str, Enum):
    VERBOSE = "verbose"
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LOG_LEVELS = {
    SeverityLevel.VERBOSE: logging.DEBUG,
    SeverityLevel.INFORMATION: logging.INFO,
    SeverityLevel.WARNING: logging.WARNING,
    SeverityLevel.ERROR: logging.ERROR,
    SeverityLevel.CRITICAL: logging.CRITICAL,
}


class Telemetry(Protocol):
    def track_trace(self, message: str, severity: SeverityLevel = SeverityLevel.INFORMATION) -> None: ...

    def track_exception(self, error: BaseException) -> None: ...


class LoggingTelemetry:
    """Telemetry sink that writes traces and exceptions to a standard logger."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("teambot_store")

    def track_trace(self, message: str, severity: SeverityLevel = SeverityLevel.INFORMATION) -> None:
        self.logger.log(_LOG_LEVELS[severity], message)

    def track_exception(self, error: BaseException) -> None:
        self.logger.error(
            "%s: %s",
            type(error).__name__,
            error,
            exc_info=(type(error), error, error.__traceback__),
        )
