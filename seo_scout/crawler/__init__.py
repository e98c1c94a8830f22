"""seo_scout.crawler: crawl scheduler, page fetcher, link discovery and data models."""
