"""Exception types for compattable."""

from __future__ import annotations


class CompatError(Exception):
    """Base exception for expected application errors."""


class NetworkError(CompatError):
    """Raised when a network operation fails."""

    def __init__(self, url: str, *, cause: str | None = None) -> None:
        detail = f"Unable to connect to caniuse.com for {url}"
        if cause:
            detail = f"{detail} ({cause})"
        super().__init__(detail)


class RequestTimeoutError(CompatError):
    """Raised when a request times out."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Request timed out for {url}")


class HttpStatusError(CompatError):
    """Raised when a non-200 HTTP response is returned."""

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"Request failed with HTTP {status_code} for {url}")


class ContentError(CompatError):
    """Raised when a response body is empty or not valid JSON."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Received empty or malformed JSON from {url}")


class NoMatchesError(CompatError):
    """Raised when a search term resolves to no feature ids."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"No feature IDs found for '{query}'")


class RecordDecodeError(CompatError):
    """Raised when a feature payload does not match any accepted shape."""

    def __init__(self, feature_id: str, detail: str) -> None:
        self.feature_id = feature_id
        super().__init__(f"Unable to decode feature data for {feature_id}: {detail}")
