"""
SEO Scout package initializer.
Defines package version and exposes the CLI and the core entry points.
"""
__version__ = "0.1.0"

from seo_scout.aggregator import aggregate
from seo_scout.cli import cli
from seo_scout.crawler.crawler import crawl
from seo_scout.security.resolver import resolve_safe

__all__ = ["__version__", "aggregate", "cli", "crawl", "resolve_safe"]
