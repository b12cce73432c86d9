"""Exception classes for PDF acquisition."""


class AcquisitionError(Exception):
    """Base acquisition exception."""

    def __init__(self, message: str, provider: str | None = None):
        self.message = message
        self.provider = provider
        super().__init__(message)


class NotAPdfError(AcquisitionError):
    """Payload is HTML, too small, or lacks the PDF header."""

    pass


class DownloadHTTPError(AcquisitionError):
    """Server answered with a non-success status."""

    def __init__(self, message: str, status_code: int, provider: str | None = None):
        super().__init__(message, provider=provider)
        self.status_code = status_code
