"""seo_scout.errors: error taxonomy shared by the resolver, verifier and crawler.

Fatal errors (:class:`InvalidUrl`, :class:`BlockedSsrf`, :class:`VerificationFailed`,
:class:`AuditsBusy`, :class:`ConfigurationError`) abort a whole audit request.
:class:`FetchError` is per page and is turned into a degraded ``PageAudit`` by the
crawler; it never reaches the caller of ``crawl``.
"""
from __future__ import annotations

from typing import ClassVar

from seo_scout.localization import get_message


class AuditError(Exception):
    """Base class; the message is looked up in the localized catalogue."""

    key: ClassVar[str] = "server_error"

    def __init__(self, message: str | None = None, *, lang: str = "en") -> None:
        self.lang = lang
        super().__init__(message or get_message(lang, self.key))

    @property
    def message(self) -> str:
        return str(self)


class InvalidUrl(AuditError):
    """Malformed URL or unsupported scheme."""

    key = "invalid_url"


class BlockedSsrf(AuditError):
    """URL points at a disallowed port, host or network."""

    key = "blocked_ssrf"


class VerificationFailed(AuditError):
    """Human-verification token rejected, replayed or unverifiable."""

    key = "turnstile_failed"


class AuditsBusy(AuditError):
    """All service-wide audit slots are taken; the caller should retry later."""

    key = "rate_limited"


class ConfigurationError(AuditError):
    key = "server_error"


class FetchError(AuditError):
    """Timeout, oversize body or connection failure while fetching one page."""

    key = "server_error"

    def __init__(self, reason: str, *, url: str | None = None) -> None:
        self.url = url
        self.reason = reason
        super().__init__(reason)


__all__ = [
    "AuditError",
    "InvalidUrl",
    "BlockedSsrf",
    "VerificationFailed",
    "AuditsBusy",
    "ConfigurationError",
    "FetchError",
]
