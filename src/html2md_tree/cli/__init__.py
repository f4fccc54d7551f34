from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..config import AppConfig, dump_config, load_config
from ..core import ConversionService
from ..models import ConversionOptions, ConversionReport

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Convert a directory tree of HTML files into Markdown.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _attach_rich_handler(logger: logging.Logger, level: str | int) -> None:
    logger.setLevel(level)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=err_console, show_path=False, markup=False))


def _configure_logging(level: str, verbose: bool = False) -> None:
    _attach_rich_handler(logging.getLogger("html2md_tree"), "DEBUG" if verbose else level)
    # readability logs recovered Unparseable errors with full tracebacks
    _attach_rich_handler(logging.getLogger("readability"), "DEBUG" if verbose else logging.CRITICAL)


def _build_options(
    cfg: AppConfig,
    source: Path | None,
    target: Path | None,
    use_markitdown: bool,
    domain: str | None,
) -> ConversionOptions:
    return ConversionOptions(
        source_dir=source or cfg.converter.source_dir,
        target_dir=target or cfg.converter.target_dir,
        use_markitdown=use_markitdown or cfg.converter.use_markitdown,
        domain=cfg.converter.domain if domain is None else domain,
    )


def _print_report(report: ConversionReport) -> None:
    if report.fatal_error:
        console.print(f"[red]Conversion failed[/red]: {escape(report.fatal_error)}")
        return
    if report.failed:
        table = Table(title="Failed files")
        table.add_column("File")
        table.add_column("Code")
        table.add_column("Message")
        for failure in report.failed:
            table.add_row(escape(failure.relative.as_posix()), failure.code, escape(failure.message))
        console.print(table)
    if report.warnings:
        summary = ", ".join(f"{name} x{count}" for name, count in sorted(report.warnings.items()))
        console.print(f"[yellow]Warnings[/yellow]: {summary}")
    console.print(
        f"Processed {report.total} HTML files: "
        f"{len(report.converted)} converted, {len(report.failed)} failed, "
        f"{len(report.skipped)} other files skipped."
    )


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def convert(
    source: Path | None = typer.Option(
        None, "--source", "-s", help="Source directory containing HTML files (default: ./html_files)"
    ),
    target: Path | None = typer.Option(
        None, "--target", "-t", help="Target directory for Markdown files (default: ./markdown_files)"
    ),
    use_markitdown: bool = typer.Option(
        False, "--use-markitdown", "-m", help="Use the markitdown command instead of the in-process pipeline"
    ),
    domain: str | None = typer.Option(
        None, "--domain", "-d", help="Domain prefix for root-relative links (default: domain.com)"
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Append JSONL run log entries here"),
    fail_on_error: bool = typer.Option(
        False, "--fail-on-error", help="Exit with status 1 when any file fails"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    show_config: bool = typer.Option(
        False, "--show-config", help="Print the effective configuration as JSON and exit"
    ),
) -> None:
    cfg = load_config(config)
    if log_file is not None:
        cfg.logging.run_log = log_file
    options = _build_options(cfg, source, target, use_markitdown, domain)
    if show_config:
        cfg.converter.source_dir = options.source_dir
        cfg.converter.target_dir = options.target_dir
        cfg.converter.use_markitdown = options.use_markitdown
        cfg.converter.domain = options.domain
        console.print_json(dump_config(cfg))
        raise typer.Exit()

    _configure_logging(cfg.logging.level, verbose)
    report = ConversionService(options, cfg).convert_tree()
    _print_report(report)

    if report.fatal_error or (fail_on_error and report.failed):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
