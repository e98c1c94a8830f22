"""
SSRF-safe URL resolution.

A URL is only fetched after its scheme, port and host pass validation and every
address its hostname resolves to sits outside the blocked networks. The first
checked address is returned so the caller can connect to that literal address
instead of resolving the hostname a second time (DNS rebinding).
"""
from __future__ import annotations

import asyncio
import ipaddress
import socket
from typing import Iterable, List, Mapping, Sequence, Union
from urllib.parse import SplitResult, urlsplit

from seo_scout.errors import BlockedSsrf, InvalidUrl
from seo_scout.logger import get_logger

_Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

BLOCKED_RANGES_V4: Sequence[str] = (
    "0.0.0.0/8",
    "10.0.0.0/8",
    "100.64.0.0/10",
    "127.0.0.0/8",
    "169.254.0.0/16",
    "172.16.0.0/12",
    "192.0.0.0/24",
    "192.0.2.0/24",
    "192.88.99.0/24",
    "192.168.0.0/16",
    "198.18.0.0/15",
    "198.51.100.0/24",
    "203.0.113.0/24",
    "224.0.0.0/4",
    "240.0.0.0/4",
    "255.255.255.255/32",
)

BLOCKED_RANGES_V6: Sequence[str] = (
    "::/128",
    "::1/128",
    "fc00::/7",
    "fe80::/10",
)

BLOCKED_NETWORKS: tuple[_Network, ...] = tuple(
    ipaddress.ip_network(cidr) for cidr in (*BLOCKED_RANGES_V4, *BLOCKED_RANGES_V6)
)
BLOCKED_HOSTS: frozenset[str] = frozenset({"localhost", "127.0.0.1", "0.0.0.0"})
DEFAULT_PORTS: Mapping[str, int] = {"http": 80, "https": 443}

log = get_logger("resolver")


def is_blocked_address(address: str, networks: Iterable[_Network] = BLOCKED_NETWORKS) -> bool:
    """True when *address* is unparseable or falls inside one of *networks*."""
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return True
    candidates = [ip]
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        candidates.append(ip.ipv4_mapped)
    for net in networks:
        for candidate in candidates:
            if candidate.version == net.version and candidate in net:
                return True
    return False


class SafeResolver:
    """Validates URLs and resolves hostnames to addresses that are safe to connect to."""

    def __init__(
        self,
        *,
        ports: Mapping[str, int] = DEFAULT_PORTS,
        blocked_hosts: Iterable[str] = BLOCKED_HOSTS,
        blocked_networks: Iterable[_Network] = BLOCKED_NETWORKS,
    ) -> None:
        self.ports = dict(ports)
        self.blocked_hosts = frozenset(h.lower() for h in blocked_hosts)
        self.blocked_networks = tuple(blocked_networks)

    def validate(self, url: str, lang: str = "en") -> SplitResult:
        """Scheme, port and static host checks. No network access."""
        try:
            parsed = urlsplit(url.strip())
            port = parsed.port
        except (ValueError, AttributeError):
            raise InvalidUrl(lang=lang) from None

        if parsed.scheme not in self.ports:
            raise InvalidUrl(lang=lang)
        hostname = parsed.hostname
        if not hostname:
            raise InvalidUrl(lang=lang)

        effective_port = port if port is not None else DEFAULT_PORTS.get(parsed.scheme)
        if effective_port != self.ports[parsed.scheme]:
            log.warning("Blocked %s: port %s not allowed", url, effective_port)
            raise BlockedSsrf(lang=lang)

        if hostname.lower() in self.blocked_hosts:
            log.warning("Blocked %s: host %s", url, hostname)
            raise BlockedSsrf(lang=lang)
        return parsed

    async def lookup(self, hostname: str, lang: str = "en") -> str:
        """Resolve every address of *hostname*; fail if any of them is blocked."""
        addresses = await self._getaddrinfo(hostname)
        if not addresses:
            log.warning("No addresses for %s", hostname)
            raise BlockedSsrf(lang=lang)
        for address in addresses:
            if is_blocked_address(address, self.blocked_networks):
                log.warning("Blocked %s: resolves to %s", hostname, address)
                raise BlockedSsrf(lang=lang)
        return addresses[0]

    async def resolve(self, url: str, lang: str = "en") -> str:
        parsed = self.validate(url, lang)
        return await self.lookup(parsed.hostname or "", lang)

    async def _getaddrinfo(self, hostname: str) -> List[str]:
        loop = asyncio.get_running_loop()
        try:
            infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
        except (socket.gaierror, UnicodeError, OSError) as exc:
            log.warning("DNS lookup failed for %s: %s", hostname, exc)
            return []
        addresses: List[str] = []
        for _family, _type, _proto, _canon, sockaddr in infos:
            address = str(sockaddr[0])
            if address not in addresses:
                addresses.append(address)
        return addresses


_DEFAULT_RESOLVER = SafeResolver()


def default_resolver() -> SafeResolver:
    return _DEFAULT_RESOLVER


async def resolve_safe(url: str, lang: str = "en") -> str:
    """Validate *url* and return the pinned IP to connect to.

    Raises :class:`InvalidUrl` or :class:`BlockedSsrf`.
    """
    return await default_resolver().resolve(url, lang)


__all__ = [
    "SafeResolver",
    "resolve_safe",
    "default_resolver",
    "is_blocked_address",
    "BLOCKED_NETWORKS",
    "BLOCKED_HOSTS",
    "BLOCKED_RANGES_V4",
    "BLOCKED_RANGES_V6",
]
