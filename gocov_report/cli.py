"""CLI entry point - command definitions using Click.

Commands:
    init          Generate a template config file
    report        Per-function coverage report from files, stdin and configured sources
"""

import sys
from pathlib import Path

import click

from gocov_report import __version__
from gocov_report.config import DEFAULT_CONFIG_PATH


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _verbose(ctx: click.Context, message: str) -> None:
    if ctx.obj["verbose"]:
        click.echo(f"[verbose] {message}", err=True)


def _load_config(ctx: click.Context, required: bool):
    """Load the config file. Exits on error.

    Returns None when the file does not exist and *required* is false.
    """
    from gocov_report.config import ConfigError, load

    config_path = ctx.obj["config_path"]
    if not required and not Path(config_path).exists():
        return None
    try:
        return load(config_path)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


def _make_client(ctx: click.Context, config):
    """Return a CoverageClient for the configured server."""
    from gocov_report.client import CoverageClient

    _verbose(ctx, f"Connecting to {config.url}")
    return CoverageClient(url=config.url, token=config.token or None)


def _emit_text(text: str, ctx: click.Context) -> None:
    """Write the report to stdout or to the file specified by --output."""
    output_path: str | None = ctx.obj["output_path"]
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Report written to '{output_path}'", err=True)
    else:
        click.echo(text, nl=False)


def _handle_errors(func):
    """Decorator that catches library exceptions and exits cleanly."""
    import functools

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from gocov_report.client import (
            AuthenticationError,
            CoverageClientError,
            NetworkError,
            NotFoundError,
        )
        from gocov_report.config import SourceNotFoundError
        from gocov_report.models import ModelError
        from gocov_report.reports.coverage import DuplicatePackageError

        try:
            return func(*args, **kwargs)
        except SourceNotFoundError as exc:
            click.echo(f"Source error: {exc}", err=True)
            sys.exit(1)
        except DuplicatePackageError as exc:
            click.echo(f"Duplicate package: {exc}", err=True)
            sys.exit(1)
        except ModelError as exc:
            click.echo(f"Invalid coverage data: {exc}", err=True)
            sys.exit(1)
        except AuthenticationError as exc:
            click.echo(f"Authentication error: {exc}", err=True)
            sys.exit(1)
        except NotFoundError as exc:
            click.echo(f"Not found: {exc}", err=True)
            sys.exit(1)
        except NetworkError as exc:
            click.echo(f"Network error: {exc}", err=True)
            sys.exit(1)
        except CoverageClientError as exc:
            click.echo(f"Server error: {exc}", err=True)
            sys.exit(1)
        except OSError as exc:
            click.echo(f"I/O error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default=DEFAULT_CONFIG_PATH, show_default=True,
              help="Path to the configuration file (sources and defaults).")
@click.option("--output", "output_path", default=None,
              help="Write the report to a file instead of stdout.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="gocov-report")
@click.pass_context
def cli(ctx: click.Context, config_path: str, output_path: str | None,
        verbose: bool) -> None:
    """Coverage report tool - rank functions by statement coverage."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["output_path"] = output_path
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default=DEFAULT_CONFIG_PATH, show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template gocov-report.yaml file."""
    from gocov_report.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your coverage sources and default list.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# report
# ---------------------------------------------------------------------------

@cli.command("report")
@click.argument("files", nargs=-1)
@click.option("--source", "-s", "source_names", multiple=True,
              help="Source defined in the config file. Repeatable.")
@click.pass_context
@_handle_errors
def report_command(ctx: click.Context, files: tuple[str, ...],
                   source_names: tuple[str, ...]) -> None:
    """Print per-function coverage for gocov JSON documents.

    FILES are file paths, or "-" for stdin. With no FILES and no --source,
    the config file's default sources are reported; without a config file
    the document is read from stdin.
    """
    from gocov_report.models import load_packages
    from gocov_report.reports.coverage import Report, render_report

    config = None
    sources = []
    if source_names:
        config = _load_config(ctx, required=True)
        sources = [config.source(name) for name in source_names]
    elif not files:
        config = _load_config(ctx, required=False)
        if config is not None:
            sources = config.defaults()

    if not files and not sources:
        files = ("-",)

    report = Report()

    for path in files:
        _verbose(ctx, f"Loading coverage from {'stdin' if path == '-' else path}")
        for package in load_packages(path):
            report.add_package(package)

    client = None
    for source in sources:
        if source.is_remote:
            if client is None:
                client = _make_client(ctx, config)
            _verbose(ctx, f"Fetching source '{source.name}' from {source.endpoint}")
            packages = client.get_packages(source.endpoint)
        else:
            _verbose(ctx, f"Loading source '{source.name}' from {source.file}")
            packages = load_packages(source.file)
        for package in source.apply(packages):
            report.add_package(package)

    _verbose(ctx, f"Rendering {len(report)} package(s)")
    _emit_text(render_report(report), ctx)
