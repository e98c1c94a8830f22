#!/usr/bin/env python3
"""
Command-line entry point for SEO Scout.

Commands:
  audit URL   Crawl URL, score its pages and print/save the report
  config      Show the effective configuration

Common options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --log-format FORMAT Logging format string

audit options:
  --max-pages INT     Override crawler.max_pages
  --max-depth INT     Override crawler.max_depth
  --concurrency INT   Override crawler.concurrency
  --timeout-ms INT    Override crawler.per_page_timeout_ms
  --lang [en|tr]      Language of error messages
  --token TEXT        Human-verification token
  --json PATH         Save the JSON report to a file
  --html PATH         Save the HTML report to a file
  --pretty            Indent JSON output

Example:
  seo-scout audit https://example.com --max-pages 20 --json report.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from seo_scout import __version__
from seo_scout.config import CrawlerOptions, load_config
from seo_scout.engine import start_audit
from seo_scout.errors import AuditError
from seo_scout.logger import init_logging
from seo_scout.report.html_report import render_html
from seo_scout.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SEO Scout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON configuration file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stderr only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(name)s %(message)s',
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SEO Scout command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
        stream=sys.stderr,
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


def _override_crawler(cfg, **overrides):
    changes = {k: v for k, v in overrides.items() if v is not None}
    if not changes:
        return cfg
    crawler = CrawlerOptions(**{**cfg.crawler.model_dump(), **changes})
    return cfg.model_copy(update={'crawler': crawler})


@cli.command('audit', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--max-pages', type=int, default=None, help='Maximum pages to audit')
@click.option('--max-depth', type=int, default=None, help='Maximum link depth')
@click.option('--concurrency', type=int, default=None, help='Parallel fetches')
@click.option('--timeout-ms', 'timeout_ms', type=int, default=None, help='Per-page timeout (ms)')
@click.option('--lang', type=click.Choice(['en', 'tr']), default=None, help='Message language')
@click.option('--token', default=None, help='Human-verification token')
@click.option('--client-ip', 'client_ip', default='', help='Client address passed to verification')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the JSON report to a file'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the HTML report to a file'
)
@click.option('--pretty', is_flag=True, help='Indent JSON output (2 spaces)')
@click.pass_context
def audit(ctx, url, max_pages, max_depth, concurrency, timeout_ms, lang, token, client_ip,
          json_output, html_output, pretty):
    """Audit URL and print or save the report."""
    try:
        cfg = _override_crawler(
            ctx.obj['config'],
            max_pages=max_pages,
            max_depth=max_depth,
            concurrency=concurrency,
            per_page_timeout_ms=timeout_ms,
        )
    except ValidationError as e:
        print_error(f'Invalid crawler options: {e}')

    try:
        result = asyncio.run(start_audit(cfg, url, token=token, client_ip=client_ip, lang=lang))
    except AuditError as e:
        print_error(str(e))

    # print to stdout unless a file was requested
    if not json_output and not html_output:
        click.echo(result.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(result, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Failed to save JSON report: {e}')

    if html_output:
        try:
            saved_html = render_html(result, html_output)
            click.echo(f'HTML report: {saved_html}')
        except OSError as e:
            print_error(f'Failed to save HTML report: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    data = cfg.model_dump()
    if data.get('turnstile_secret'):
        data['turnstile_secret'] = '***'
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
