"""Exceptions raised while fetching, parsing and caching MacEats data."""

from __future__ import annotations


class ScraperError(RuntimeError):
    """Base class for every error raised by the dining scraper."""


class TransportError(ScraperError):
    """Raised when a request fails or upstream answers with a non-2xx status."""

    def __init__(self, url: str, message: str, *, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"{message} (status {status_code}) for {url}")
        else:
            super().__init__(f"{message} for {url}")


class UrlParseError(ScraperError):
    """Raised when a link cannot be resolved into an absolute URL."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"url parse error: {value!r}")


class TimeParseError(ScraperError):
    """Raised when a schedule cell does not follow the opening hours grammar."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"time parse error: {value!r}")


class ElementNotFoundError(ScraperError):
    """Raised when a required element is missing or has the wrong shape."""

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"element not found: {what}")


class TextNotFoundError(ScraperError):
    """Raised when an element that must carry text is empty."""

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"text not found: {what}")


class AttributeNotFoundError(ScraperError):
    """Raised when a required attribute is absent."""

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"attribute not found: {what}")


class EnumParseError(ScraperError):
    """Raised for a food type or coffee brand string outside the vocabulary."""

    def __init__(self, kind: str, value: str) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"{kind} parse error: {value!r}")


class CacheConsistencyError(ScraperError):
    """Raised when a freshly populated cache entry cannot be found."""
