"""Exception classes for OCR processing."""


class OCRError(Exception):
    """Base OCR exception."""

    def __init__(self, message: str, provider: str | None = None):
        self.message = message
        self.provider = provider
        super().__init__(message)


class EngineUnavailableError(OCRError):
    """Engine is missing credentials or its backend is unreachable."""

    pass


class EngineTimeoutError(OCRError):
    """Engine did not finish within the attempt timeout."""

    pass


class EngineFailedError(OCRError):
    """Engine ran but produced no usable text."""

    pass


class NoEnginesAvailableError(OCRError):
    """No registered engine reports itself available."""

    pass


class OCRExhaustedError(OCRError):
    """Every engine in the fallback order failed or timed out."""

    def __init__(self, message: str, attempts: list[str] | None = None, provider: str | None = None):
        super().__init__(message, provider=provider)
        self.attempts = attempts or []
