"""
Human-verification gate (Cloudflare Turnstile ``siteverify``).

A token is checked once against the upstream service with a tight timeout and at
most one retry on transport failure. Accepted tokens are remembered in a
time-expiring :class:`ReplayCache` so the same token cannot start two audits.
"""
from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from typing import Callable, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from seo_scout.config import TURNSTILE_VERIFY_URL
from seo_scout.errors import ConfigurationError, VerificationFailed
from seo_scout.logger import get_logger, mask_ip

MOCK_TOKEN = "mock-token"

log = get_logger("verification")


class ReplayCache:
    """Bounded map of token -> expiry time.

    Expired entries are dropped first; when the cache is still full the oldest
    entries go. Nothing is ever cleared wholesale.
    """

    def __init__(
        self,
        ttl: float = 300.0,
        max_size: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0 or max_size <= 0:
            raise ValueError("ttl and max_size must be positive")
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[str, float] = OrderedDict()

    def __len__(self) -> int:
        self._purge_expired()
        return len(self._entries)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and self.seen(token)

    def seen(self, token: str) -> bool:
        expires = self._entries.get(token)
        if expires is None:
            return False
        if expires <= self._clock():
            del self._entries[token]
            return False
        return True

    def add(self, token: str) -> None:
        self._purge_expired()
        self._entries.pop(token, None)
        while len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
        self._entries[token] = self._clock() + self.ttl

    def discard(self, token: str) -> None:
        self._entries.pop(token, None)

    def _purge_expired(self) -> None:
        now = self._clock()
        # insertion order == expiry order because ttl is constant
        while self._entries:
            token, expires = next(iter(self._entries.items()))
            if expires > now:
                break
            del self._entries[token]


class TurnstileVerifier:
    """Checks human-verification tokens against the challenge service."""

    def __init__(
        self,
        secret: Optional[str],
        *,
        verify_url: str = TURNSTILE_VERIFY_URL,
        timeout: float = 3.0,
        retries: int = 1,
        retry_delay: float = 0.3,
        cache: Optional[ReplayCache] = None,
        production: bool = False,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.secret = secret
        self.verify_url = verify_url
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.cache = cache if cache is not None else ReplayCache()
        self.production = production
        self._session = session

    async def verify(self, token: Optional[str], client_ip: str, lang: str = "en") -> None:
        """Return on success, raise :class:`VerificationFailed` otherwise."""
        if not self.production and (not self.secret or token == MOCK_TOKEN):
            log.warning("Verification skipped (development mode)")
            return

        if not self.secret:
            log.error("Verification secret is not configured")
            raise ConfigurationError(lang=lang)

        if not token or token == "undefined":
            raise VerificationFailed(lang=lang)

        if self.cache.seen(token):
            log.warning("Replayed verification token from %s", mask_ip(client_ip))
            raise VerificationFailed(lang=lang)

        # held while the upstream call is pending, dropped again on failure
        self.cache.add(token)
        accepted = False
        try:
            data = await self._post_with_retry(
                {"secret": self.secret, "response": token, "remoteip": client_ip}, lang
            )
            if not data.get("success"):
                log.warning("Verification rejected: %s", data.get("error-codes"))
                raise VerificationFailed(lang=lang)
            accepted = True
        finally:
            if not accepted:
                self.cache.discard(token)

    async def _post_with_retry(self, payload: dict[str, str], lang: str) -> dict:
        attempts = 0
        while True:
            try:
                return await self._post(payload)
            except (ClientError, asyncio.TimeoutError, ValueError) as exc:
                attempts += 1
                if attempts > self.retries:
                    log.warning("Verification unreachable after %d attempt(s): %s", attempts, exc)
                    raise VerificationFailed(lang=lang) from exc
                log.debug("Retry %d/%d for verification after %.2f s", attempts, self.retries, self.retry_delay)
                await asyncio.sleep(self.retry_delay)

    async def _post(self, payload: dict[str, str]) -> dict:
        timeout = ClientTimeout(total=self.timeout)
        if self._session is not None:
            async with self._session.post(self.verify_url, data=payload, timeout=timeout) as resp:
                return await self._read(resp)
        async with ClientSession(timeout=timeout) as session:
            async with session.post(self.verify_url, data=payload) as resp:
                return await self._read(resp)

    @staticmethod
    async def _read(resp) -> dict:
        data = await resp.json(content_type=None)
        if not isinstance(data, dict):
            raise ValueError(f"unexpected verification response: {data!r}")
        return data


__all__ = ["ReplayCache", "TurnstileVerifier", "MOCK_TOKEN"]
