"""Error types and the diagnostics sink used throughout the weather engine."""

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class WeatherError(Exception):
    """Base class for all weather engine errors."""


class WeatherFatalError(WeatherError):
    """Raised when the run must terminate."""


class ConfigurationError(WeatherFatalError):
    """Invalid or unresolvable input configuration."""


class WeatherFileError(WeatherFatalError):
    """Malformed weather file, unexpected end of file or date mismatch."""


class CalendarError(WeatherError):
    """A date specification cannot be resolved against a weekday table."""


class Diagnostics(Protocol):
    """Severity-leveled message sink. `fatal` never returns."""

    def warning(self, message: str) -> None: ...

    def severe(self, message: str) -> None: ...

    def fatal(self, message: str, error_cls: type = WeatherFatalError) -> None: ...


class LoggingDiagnostics:
    """Diagnostics sink that writes through `logging` and keeps tallies."""

    def __init__(self, name: Optional[str] = None):
        self.logger = logging.getLogger(name or __name__)
        self.warning_count = 0
        self.severe_count = 0
        self.messages: list[tuple[str, str]] = []

    def warning(self, message: str) -> None:
        self.warning_count += 1
        self.messages.append(("warning", message))
        self.logger.warning(message)

    def severe(self, message: str) -> None:
        self.severe_count += 1
        self.messages.append(("severe", message))
        self.logger.error(message)

    def fatal(self, message: str, error_cls: type = WeatherFatalError) -> None:
        self.messages.append(("fatal", message))
        self.logger.critical(message)
        raise error_cls(message)

    def check_severe(self, context: str) -> None:
        """Escalate previously reported severe errors to a fatal one."""
        if self.severe_count > 0:
            self.fatal(
                f"{context}: {self.severe_count} severe error(s) found, "
                "program terminates.",
                ConfigurationError,
            )

    def reset(self) -> None:
        self.warning_count = 0
        self.severe_count = 0
        self.messages.clear()
