"""seo_scout.security: SSRF-safe resolution, human verification and audit throttling."""

from seo_scout.security.limiter import AuditLimiter
from seo_scout.security.resolver import SafeResolver, is_blocked_address, resolve_safe
from seo_scout.security.verification import ReplayCache, TurnstileVerifier

__all__ = [
    "AuditLimiter",
    "SafeResolver",
    "is_blocked_address",
    "resolve_safe",
    "ReplayCache",
    "TurnstileVerifier",
]
