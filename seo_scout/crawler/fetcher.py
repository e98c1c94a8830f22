# seo_scout/crawler/fetcher.py
"""
Fetcher module: one bounded HTTP GET per page.

The connection goes to an IP address that was checked beforehand (see
:class:`PinnedResolver`); the timeout covers the whole request and the body is
read in chunks so oversized responses are cut off instead of buffered.
Certificate validation is disabled: a successful fetch says nothing about the
site's TLS setup.
"""
from __future__ import annotations

import asyncio
import socket
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urljoin

from aiohttp import ClientError, ClientSession, ClientTimeout, TCPConnector
from aiohttp.abc import AbstractResolver

from seo_scout.crawler.models import FetchResult
from seo_scout.errors import FetchError

CHUNK_SIZE = 64 * 1024
MAX_REDIRECTS = 5
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

UrlGuard = Callable[[str], Awaitable[Any]]


class PinnedResolver(AbstractResolver):
    """aiohttp resolver that only answers with addresses pinned in advance.

    Hostnames that were never pinned are refused, so the HTTP client cannot fall
    back to a fresh DNS lookup between the safety check and the connection.
    """

    def __init__(self) -> None:
        self._pins: Dict[str, str] = {}

    def pin(self, hostname: str, ip: str) -> None:
        self._pins[hostname.lower()] = ip

    def pinned(self, hostname: str) -> str | None:
        return self._pins.get(hostname.lower())

    async def resolve(
        self, host: str, port: int = 0, family: socket.AddressFamily = socket.AF_INET
    ) -> List[Dict[str, Any]]:
        ip = self.pinned(host)
        if ip is None:
            raise OSError(f"No pinned address for {host}")
        ip_family = socket.AF_INET6 if ":" in ip else socket.AF_INET
        return [
            {
                "hostname": host,
                "host": ip,
                "port": port,
                "family": ip_family,
                "proto": 0,
                "flags": socket.AI_NUMERICHOST,
            }
        ]

    async def close(self) -> None:
        self._pins.clear()


def open_session(user_agent: str, resolver: AbstractResolver, concurrency: int) -> ClientSession:
    """ClientSession wired to *resolver*, without DNS cache or certificate checks."""
    connector = TCPConnector(
        resolver=resolver,
        use_dns_cache=False,
        ssl=False,
        limit=max(1, concurrency),
    )
    return ClientSession(
        connector=connector,
        headers={"User-Agent": user_agent},
        raise_for_status=False,
    )


class Fetcher:
    """Performs bounded GET requests through a shared session.

    *guard* is awaited with every URL before it is requested, redirect targets
    included; it is expected to raise when the URL is not safe to contact.
    """

    def __init__(
        self,
        session: ClientSession,
        *,
        timeout_ms: int,
        max_bytes: int,
        guard: Optional[UrlGuard] = None,
    ) -> None:
        self.session = session
        self.timeout = ClientTimeout(total=timeout_ms / 1000)
        self.max_bytes = max_bytes
        self._guard = guard

    async def fetch(self, url: str) -> FetchResult:
        """
        GET *url* and return status, body and time to first byte.

        Raises FetchError on timeout, oversize body, too many redirects or
        connection failure. Non-2xx statuses are returned, not raised.
        """
        start = time.monotonic()
        try:
            async with asyncio.timeout(self.timeout.total):
                return await self._follow(url, start)
        except TimeoutError:
            raise FetchError(f"timeout of {self.timeout.total:g}s exceeded", url=url) from None
        except ClientError as exc:
            raise FetchError(str(exc) or exc.__class__.__name__, url=url) from exc
        except OSError as exc:
            raise FetchError(str(exc) or exc.__class__.__name__, url=url) from exc

    async def _follow(self, url: str, start: float) -> FetchResult:
        target = url
        for _ in range(MAX_REDIRECTS + 1):
            if self._guard is not None:
                await self._guard(target)
            async with self.session.get(target, timeout=self.timeout, allow_redirects=False) as resp:
                location = resp.headers.get("Location")
                if resp.status in REDIRECT_STATUSES and location:
                    target = urljoin(target, location)
                    continue
                ttfb_ms = int((time.monotonic() - start) * 1000)
                body = await self._read_body(resp, url)
                return FetchResult(
                    url=url,
                    status=resp.status,
                    body=body,
                    ttfb_ms=ttfb_ms,
                    encoding=resp.charset,
                )
        raise FetchError(f"more than {MAX_REDIRECTS} redirects", url=url)

    async def _read_body(self, resp, url: str) -> bytes:
        declared = resp.content_length
        if declared is not None and declared > self.max_bytes:
            raise FetchError(f"Response too large ({declared} bytes > {self.max_bytes})", url=url)
        chunks: List[bytes] = []
        received = 0
        async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
            received += len(chunk)
            if received > self.max_bytes:
                raise FetchError(f"Response too large (> {self.max_bytes} bytes)", url=url)
            chunks.append(chunk)
        return b"".join(chunks)
