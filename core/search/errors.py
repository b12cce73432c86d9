"""Exception classes for PDF search."""


class SearchError(Exception):
    """Base search exception."""

    def __init__(self, message: str, provider: str | None = None):
        self.message = message
        self.provider = provider
        super().__init__(message)


class ProviderError(SearchError):
    """A search backend returned an error or unusable response."""

    pass
