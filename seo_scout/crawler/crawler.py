# seo_scout/crawler/crawler.py
"""
Same-origin crawl scheduler.

Concurrency is opportunistic: up to ``concurrency`` page jobs run at once and
free slots are refilled as soon as any single job finishes, so the visit order
differs between runs. Only the bounds are guaranteed: ``max_pages``,
``max_depth``, ``concurrency`` and the wall-clock ceiling for scheduling.
"""
from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Callable, Deque, List, Optional, Set, Tuple
from urllib.parse import urlsplit

from aiohttp import ClientSession
from bs4.exceptions import ParserRejectedMarkup

from seo_scout.analyzer import analyze
from seo_scout.config import DEFAULT_USER_AGENT, CrawlerOptions
from seo_scout.crawler.fetcher import Fetcher, PinnedResolver, open_session
from seo_scout.crawler.link_extractor import normalize_url
from seo_scout.crawler.models import CrawlTask, PageAudit
from seo_scout.errors import AuditError, InvalidUrl
from seo_scout.logger import get_logger
from seo_scout.security.resolver import SafeResolver, default_resolver

__all__ = ("AsyncCrawler", "crawl")

_Outcome = Tuple[CrawlTask, PageAudit, List[str]]


class AsyncCrawler:
    """Fetches and scores pages of one site within the configured limits."""

    def __init__(
        self,
        options: CrawlerOptions,
        *,
        resolver: Optional[SafeResolver] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        lang: str = "en",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.options = options
        self.resolver = resolver or default_resolver()
        self.user_agent = user_agent
        self.lang = lang
        self._clock = clock
        self.logger = get_logger("crawler")

        self.frontier: Deque[CrawlTask] = deque()
        self.visited: Set[str] = set()
        self.results: List[PageAudit] = []
        self.max_in_flight = 0

        self.session: Optional[ClientSession] = None
        self._pins = PinnedResolver()
        self._fetcher: Optional[Fetcher] = None
        self._start_hostname = ""

    async def __aenter__(self) -> AsyncCrawler:
        self.session = open_session(self.user_agent, self._pins, self.options.concurrency)
        self._fetcher = Fetcher(
            self.session,
            timeout_ms=self.options.per_page_timeout_ms,
            max_bytes=self.options.max_html_bytes,
            guard=self._guard,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self, start_url: str, pinned_ip: Optional[str] = None) -> List[PageAudit]:
        """
        Crawl from *start_url* and return one PageAudit per visited URL.

        *pinned_ip* is the address already checked for the start host; without it
        the host is resolved (and checked) on the first fetch. Only a malformed
        start URL raises; page-level failures become score-0 audits.
        """
        if self._fetcher is None:
            raise RuntimeError("Session not initialized")

        try:
            parsed = urlsplit(start_url.strip())
            root = normalize_url(start_url.strip())
        except ValueError:
            raise InvalidUrl(lang=self.lang) from None
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise InvalidUrl(lang=self.lang)
        self._start_hostname = parsed.hostname.lower()
        if pinned_ip:
            self._pins.pin(self._start_hostname, pinned_ip)

        # one run per call
        self.frontier.clear()
        self.visited.clear()
        self.results.clear()
        self.max_in_flight = 0

        self.logger.info("Crawl started: %s", start_url)
        started = self._clock()
        self.visited.add(root)
        self.frontier.append(CrawlTask(root, 0))

        running: Set[asyncio.Task[_Outcome]] = set()
        while self.frontier or running:
            if len(self.results) >= self.options.max_pages:
                break
            if self._clock() - started > self.options.crawl_timeout_s:
                self.logger.info("Crawl time ceiling reached, %d page(s) left unscheduled", len(self.frontier))
                break

            while len(running) < self.options.concurrency and self.frontier:
                task = self.frontier.popleft()
                running.add(asyncio.create_task(self._process(task)))
            self.max_in_flight = max(self.max_in_flight, len(running))

            if not running:
                break
            done, running = await asyncio.wait(running, return_when=asyncio.FIRST_COMPLETED)
            for job in done:
                self._complete(*job.result())

        if running:
            # in-flight pages are never cancelled, only waited for
            for outcome in await asyncio.gather(*running):
                self._complete(*outcome, discover=False)

        duration = self._clock() - started
        self.logger.info(
            "Crawl finished: %d page(s) in %.2f s (%.2f pages/s)",
            len(self.results),
            duration,
            len(self.results) / duration if duration else 0,
        )
        return list(self.results)

    async def _process(self, task: CrawlTask) -> _Outcome:
        if self._fetcher is None:
            raise RuntimeError("Session not initialized")
        start = self._clock()
        try:
            fetched = await self._fetcher.fetch(task.url)
        except AuditError as exc:
            self.logger.warning("Failed %s: %s", task.url, exc)
            return task, PageAudit.failed(task.url, str(exc), self._elapsed_ms(start)), []

        try:
            analysis = analyze(
                fetched.text(),
                task.url,
                self._start_hostname,
                status=fetched.status,
                ttfb_ms=fetched.ttfb_ms,
                html_bytes=len(fetched.body),
            )
        except ParserRejectedMarkup as exc:
            self.logger.warning("Unparseable HTML at %s: %s", task.url, exc)
            reason = f"unparseable HTML ({exc})"
            return task, PageAudit.failed(task.url, reason, self._elapsed_ms(start)), []
        except Exception as exc:
            # one broken page never aborts the crawl
            self.logger.warning("Analysis failed for %s: %r", task.url, exc, exc_info=True)
            reason = f"analysis error ({exc.__class__.__name__})"
            return task, PageAudit.failed(task.url, reason, self._elapsed_ms(start)), []

        audit = PageAudit(
            url=task.url,
            status=fetched.status,
            score=analysis.score,
            issues=tuple(analysis.issues),
            metadata=analysis.metadata,
            duration_ms=self._elapsed_ms(start),
        )
        return task, audit, analysis.internal_links

    def _complete(
        self, task: CrawlTask, audit: PageAudit, links: List[str], discover: bool = True
    ) -> None:
        self.results.append(audit)
        if not discover:
            return
        for link in links:
            self._enqueue(link, task.depth + 1)

    def _enqueue(self, url: str, depth: int) -> bool:
        """Mark *url* visited and queue it; no await between the check and the insert."""
        if depth > self.options.max_depth:
            return False
        if url in self.visited or len(self.visited) >= self.options.max_pages:
            return False
        self.visited.add(url)
        self.frontier.append(CrawlTask(url, depth))
        self.logger.debug("Queued %s at depth %d", url, depth)
        return True

    async def _guard(self, url: str) -> None:
        """Validate *url* and make sure its host is pinned to a checked address."""
        parsed = self.resolver.validate(url, self.lang)
        hostname = (parsed.hostname or "").lower()
        if self._pins.pinned(hostname) is None:
            ip = await self.resolver.lookup(hostname, self.lang)
            self._pins.pin(hostname, ip)

    def _elapsed_ms(self, start: float) -> int:
        return int((self._clock() - start) * 1000)


async def crawl(
    start_url: str,
    options: CrawlerOptions,
    *,
    pinned_ip: Optional[str] = None,
    resolver: Optional[SafeResolver] = None,
    user_agent: str = DEFAULT_USER_AGENT,
    lang: str = "en",
) -> List[PageAudit]:
    """Open a crawler for a single run and return its page audits."""
    async with AsyncCrawler(options, resolver=resolver, user_agent=user_agent, lang=lang) as crawler:
        return await crawler.crawl(start_url, pinned_ip=pinned_ip)
