"""Exceptions raised by the sheet synchronizer."""


class SheetSyncError(Exception):
    """Base class for sheetsync errors."""


class ConfigurationError(SheetSyncError):
    """A required credential is missing or still set to its placeholder."""

    def __init__(self, key: str, guidance: str = ""):
        self.key = key
        self.guidance = guidance
        message = f"{key} is not configured"
        if guidance:
            message = f"{message}: {guidance}"
        super().__init__(message)


class TransportError(SheetSyncError):
    """A fetch or upload failed at the HTTP or network level."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"HTTP {status_code}: {message}")
        else:
            super().__init__(message)
