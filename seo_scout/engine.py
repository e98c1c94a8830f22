# File: seo_scout/engine.py
"""seo_scout.engine: orchestration of one audit request.

Order of operations: take a service-wide audit slot, check the
human-verification token, validate and resolve the URL, crawl against the
pinned address, aggregate.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from seo_scout.aggregator import AggregateReport, aggregate
from seo_scout.config import AuditConfig
from seo_scout.crawler.crawler import AsyncCrawler
from seo_scout.crawler.models import PageAudit
from seo_scout.logger import audit_record, logger, mask_ip
from seo_scout.security.limiter import AuditLimiter
from seo_scout.security.resolver import SafeResolver, default_resolver
from seo_scout.security.verification import ReplayCache, TurnstileVerifier

__all__ = ["AuditResult", "AuditService", "start_audit"]


@dataclass(slots=True)
class AuditResult:
    """Outcome of a full audit: aggregate figures plus every page record."""

    site: str
    report: AggregateReport
    pages: List[PageAudit] = field(default_factory=list)
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        data = self.report.to_dict()
        return {
            "success": True,
            "requestId": self.request_id,
            "site": self.site,
            "score": data["score"],
            "healthLevel": data["healthLevel"],
            "summary": data["summary"],
            "pagesAudited": data["pagesAudited"],
            "durationMs": data["durationMs"],
            "preview": data["preview"],
            "report": [page.to_dict() for page in self.pages],
        }

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


class AuditService:
    """Facade for the CLI and embedding services."""

    def __init__(
        self,
        config: AuditConfig,
        *,
        limiter: Optional[AuditLimiter] = None,
        verifier: Optional[TurnstileVerifier] = None,
        resolver: Optional[SafeResolver] = None,
    ) -> None:
        self.config = config
        self.limiter = limiter or AuditLimiter(config.max_concurrent_audits)
        self.verifier = verifier or TurnstileVerifier(
            config.turnstile_secret,
            verify_url=config.turnstile_verify_url,
            timeout=config.verify_timeout_s,
            cache=ReplayCache(),
            production=config.production,
        )
        self.resolver = resolver or default_resolver()

    async def run_audit(
        self,
        url: str,
        token: Optional[str] = None,
        client_ip: str = "",
        lang: Optional[str] = None,
    ) -> AuditResult:
        """Audit *url*; raises the fatal AuditError subclasses, never page errors."""
        lang = lang or self.config.default_lang
        with self.limiter.slot(lang):
            await self.verifier.verify(token, client_ip, lang)
            pinned_ip = await self.resolver.resolve(url, lang)

            logger.info("Audit started: %s (client %s)", url, mask_ip(client_ip))
            async with AsyncCrawler(
                self.config.crawler,
                resolver=self.resolver,
                user_agent=self.config.user_agent,
                lang=lang,
            ) as crawler:
                pages = await crawler.crawl(url, pinned_ip=pinned_ip)

        report = aggregate(pages)
        result = AuditResult(site=urlsplit(url.strip()).hostname or "", report=report, pages=pages)
        audit_record(
            {
                "requestId": result.request_id,
                "site": result.site,
                "score": report.overall_score,
                "healthLevel": report.health_tier,
                "pagesAudited": report.pages_audited,
                "durationMs": report.total_duration_ms,
                "lang": lang,
                "ip": client_ip,
            }
        )
        return result


async def start_audit(
    config: AuditConfig,
    url: str,
    *,
    token: Optional[str] = None,
    client_ip: str = "",
    lang: Optional[str] = None,
) -> AuditResult:
    """One-shot helper used by the CLI: build a service and run a single audit."""
    return await AuditService(config).run_audit(url, token=token, client_ip=client_ip, lang=lang)
