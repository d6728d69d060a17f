from __future__ import annotations


class IdentityError(LookupError):
    """An email/phone could not be turned into a schedule alias."""

    code = "ALIAS_ERROR"

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"{self.code}: {key}")


class AliasNotFound(IdentityError):
    code = "ALIAS_NOT_FOUND"


class AliasEmpty(IdentityError):
    code = "ALIAS_EMPTY"


class FetchError(RuntimeError):
    """Transport, HTTP status or JSON decoding failure for one backend call."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason} ({url})")


class RequestCancelled(Exception):
    """A read was aborted through its cancellation token; not a data error."""
