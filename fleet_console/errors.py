"""User-facing configuration and usage errors with actionable messages."""


class ConsoleUsageError(ValueError):
    """Base class for user-facing console configuration and usage errors."""


class ConfigLoadError(ConsoleUsageError):
    """Raised when a console config file holds invalid values."""

    def __init__(self, details: str) -> None:
        super().__init__(f"Console configuration error: {details}")


class InvalidTargetError(ConsoleUsageError):
    """Raised when an agent prefix does not resolve to exactly one agent."""

    def __init__(self, details: str) -> None:
        super().__init__(f"Invalid target: {details}. Use 'agents' to list known ids.")
