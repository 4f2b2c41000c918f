#!/usr/bin/env python3
"""
Command line entry point of the WebQA analyzer.

Commands:
  analyze   Analyse one page and print/save the report
  discover  Run resource discovery only and print the bucket counters
  serve     Start the HTTP API (POST /analyze)
  config    Show the effective configuration

Global options:
  --config PATH       YAML/JSON config file (built-in defaults if omitted)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout if omitted)
  --log-format FORMAT Logging format string

analyze options:
  --json PATH         Save the JSON report to a file
  --html PATH         Save the HTML report to a file
  --template DIR      Directory with the Jinja2 template
  --pretty            Indent JSON output (2 spaces)
  --timeout SEC       Timeout of the whole analysis (seconds)

Example:
  webqa --log-level WARNING analyze https://example.com --pretty
"""
import sys
import asyncio
from pathlib import Path

import click

from webqa import __version__
from webqa.config import AnalyzerConfig, load_config
from webqa.engine import analyze_url, discover_url
from webqa.exceptions import WebQAError
from webqa.logger import DEFAULT_FORMAT, init_logging
from webqa.report import DEFAULT_TEMPLATE_DIR
from webqa.report.html_report import render_html
from webqa.report.json_report import render_json
from webqa.server import run_server

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _run(coro, timeout):
    if timeout:
        return asyncio.run(asyncio.wait_for(coro, timeout=timeout))
    return asyncio.run(coro)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='WebQA, version %(version)s')
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
    help='Log file (stdout if omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """WebQA: front-end quality analysis of a web page."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path) if config_path else AnalyzerConfig()
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('analyze', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
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
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with the report.html.j2 template'
)
@click.option(
    '--pretty', is_flag=True,
    help='Indent JSON output (2 spaces)'
)
@click.option(
    '--timeout', 'timeout',
    type=float,
    default=None,
    help='Timeout of the whole analysis (seconds)'
)
@click.pass_context
def analyze(ctx, url, json_output, html_output, template_dir, pretty, timeout):
    """Analyse URL and produce the report."""
    cfg = ctx.obj['config']
    try:
        report = _run(analyze_url(url, cfg), timeout)
    except asyncio.TimeoutError:
        print_error(f'Analysis did not finish within {timeout} seconds')
    except WebQAError as e:
        print_error(str(e))
    except Exception as e:
        print_error(f'Failed to analyze the website: {e}')

    if not json_output and not html_output:
        click.echo(report.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Failed to save JSON report: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir or DEFAULT_TEMPLATE_DIR, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Failed to save HTML report: {e}')


@cli.command('discover', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--pretty', is_flag=True, help='Indent JSON output (2 spaces)')
@click.pass_context
def discover(ctx, url, pretty):
    """Run resource discovery on URL and print what was found per type."""
    cfg = ctx.obj['config']
    try:
        result = asyncio.run(discover_url(url, cfg))
    except WebQAError as e:
        print_error(str(e))
    except Exception as e:
        print_error(f'Discovery failed: {e}')
    click.echo(result.json(pretty=pretty))


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default='0.0.0.0', show_default=True, help='Interface to bind')
@click.option('--port', default=5000, show_default=True, type=int, help='Port to listen on')
@click.pass_context
def serve(ctx, host, port):
    """Start the HTTP API."""
    run_server(ctx.obj['config'], host=host, port=port)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the current configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


# expose these names at module level for test monkey-patching
cli.analyze_url = analyze_url
cli.discover_url = discover_url
cli.render_json = render_json
cli.render_html = render_html
cli.run_server = run_server

if __name__ == "__main__":
    cli()
