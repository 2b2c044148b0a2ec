#!/usr/bin/env python3
"""Main CLI entry point for Site Scuba using Typer.

This module provides the command-line interface: `run` audits a site from
its seed URL, `validate-config` checks a configuration file and `version`
prints the installed version.
"""

import asyncio
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

import typer

from .. import __version__
from ..audit.utils.url_normalizer import is_valid_http_url
from .config import load_configuration, print_configuration, validate_configuration
from .runner import CLIRunner, ExitCode, configure_logging


app = typer.Typer(
    name="scuba",
    help="Site Scuba - Website health and SEO smoke auditing",
    add_completion=False,
    rich_markup_mode="rich"
)


@app.callback()
def main():
    """
    Site Scuba - Website health and SEO smoke auditing.

    Collects the internal links of a site's navigation and footer from its
    seed page, then audits every linked page for HTTP status, white screens,
    layout landmarks and basic SEO tags.
    """
    pass


@app.command(name="version")
def show_version():
    """Show version information."""
    typer.echo(f"Site Scuba CLI v{__version__}")


def _seconds_to_ms(value: Optional[float]) -> Optional[int]:
    if value is None:
        return None
    return int(value * 1000)


@app.command()
def run(
    seed_url: Annotated[
        Optional[str],
        typer.Argument(help="Seed URL; its navigation and footer links are audited")
    ] = None,

    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to configuration file (YAML or JSON)")
    ] = None,

    origins: Annotated[
        Optional[List[str]],
        typer.Option("--origin", help="Allowed origin (repeatable, defaults to the seed's origin)")
    ] = None,

    special_paths: Annotated[
        Optional[List[str]],
        typer.Option("--special", help="Path substring of pages without navbar/footer (repeatable)")
    ] = None,

    max_pages: Annotated[
        Optional[int],
        typer.Option("--max-pages", help="Maximum number of pages to audit")
    ] = None,

    seed_timeout: Annotated[
        Optional[float],
        typer.Option("--seed-timeout", help="Seed page load timeout in seconds")
    ] = None,

    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", help="Page navigation timeout in seconds")
    ] = None,

    idle_timeout: Annotated[
        Optional[float],
        typer.Option("--idle-timeout", help="Network idle wait in seconds")
    ] = None,

    settle: Annotated[
        Optional[float],
        typer.Option("--settle", help="Delay after network idle in seconds (0 disables)")
    ] = None,

    output_format: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Report format: text, json, yaml")
    ] = None,

    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Write the report to this file")
    ] = None,

    headful: Annotated[
        bool,
        typer.Option("--headful", help="Run browser with GUI")
    ] = False,

    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose output and debug logging")
    ] = False,

    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only report errors")
    ] = False,

    print_config: Annotated[
        bool,
        typer.Option("--print-config", help="Print effective configuration and exit")
    ] = False,
):
    """
    Audit a site starting from its seed URL.

    Examples:

        # Audit the links of the homepage navigation and footer
        scuba run https://www.example.com/

        # Accept a second origin, exempt checkout pages from layout checks
        scuba run --origin https://shop.example.com --special /checkout \\
            https://www.example.com/

        # CI/CD integration
        scuba run --format json --out reports/audit.json https://www.example.com/
    """

    if not seed_url and not print_config:
        typer.echo("❌ No seed URL specified", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    if seed_url and not is_valid_http_url(seed_url):
        typer.echo(f"❌ Invalid seed URL: {seed_url}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    # Only explicitly provided values override lower-precedence sources
    crawl_overrides: Dict[str, Any] = {}
    if origins:
        crawl_overrides["allowed_origins"] = origins
    if special_paths:
        crawl_overrides["special_layout_paths"] = special_paths
    if max_pages is not None:
        crawl_overrides["max_pages"] = max_pages
    if seed_timeout is not None:
        crawl_overrides["seed_timeout_ms"] = _seconds_to_ms(seed_timeout)
    if timeout is not None:
        crawl_overrides["navigation_timeout_ms"] = _seconds_to_ms(timeout)
    if idle_timeout is not None:
        crawl_overrides["idle_timeout_ms"] = _seconds_to_ms(idle_timeout)
    if settle is not None:
        crawl_overrides["settle_delay_ms"] = _seconds_to_ms(settle)

    output_overrides: Dict[str, Any] = {}
    if output_format is not None:
        output_overrides["format"] = output_format
    if out is not None:
        output_overrides["output_file"] = out
    if verbose:
        output_overrides["verbose"] = True
    if quiet:
        output_overrides["quiet"] = True

    cli_overrides: Dict[str, Any] = {}
    if crawl_overrides:
        cli_overrides["crawl"] = crawl_overrides
    if output_overrides:
        cli_overrides["output"] = output_overrides
    if headful:
        cli_overrides["browser"] = {"headful": True}

    try:
        full_config = load_configuration(
            config_file=config_file,
            cli_overrides=cli_overrides,
            search_paths=[Path.cwd()]
        )
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"❌ Configuration error: {e}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    if print_config:
        typer.echo("# Effective Configuration")
        typer.echo("# Loaded from: " + " -> ".join(full_config.loaded_from))
        typer.echo(print_configuration(full_config, "yaml"))
        raise typer.Exit()

    validation_errors = validate_configuration(full_config)
    if validation_errors:
        for error in validation_errors:
            typer.echo(f"❌ Configuration error: {error}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    configure_logging(verbose=full_config.output.verbose, quiet=full_config.output.quiet)

    runner = CLIRunner(seed_url, full_config)

    try:
        exit_code = asyncio.run(runner.run())
    except KeyboardInterrupt:
        typer.echo("❌ Operation interrupted by user", err=True)
        raise typer.Exit(code=ExitCode.RUNTIME_ERROR.value)

    raise typer.Exit(code=exit_code.value)


@app.command()
def validate_config(
    config_file: Annotated[
        Path,
        typer.Argument(help="Path to configuration file to validate")
    ],

    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Print the effective configuration")
    ] = False,
):
    """
    Validate a configuration file without running an audit.
    """

    if not config_file.exists():
        typer.echo(f"❌ Configuration file not found: {config_file}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    try:
        full_config = load_configuration(config_file=config_file)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"❌ Configuration validation failed: {e}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    validation_errors = validate_configuration(full_config)
    if validation_errors:
        for error in validation_errors:
            typer.echo(f"❌ Configuration error: {error}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    typer.echo(f"✅ Configuration file {config_file} is valid")

    if verbose:
        typer.echo(f"   Format: {config_file.suffix}")
        typer.echo(f"   Size: {config_file.stat().st_size} bytes")
        typer.echo(print_configuration(full_config, "yaml"))


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
