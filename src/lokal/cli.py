"""Command-line interface for lokal."""

import functools
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import ConfigLoader, LokalConfig
from .errors import LokalError
from .extraction.scanner import Scanner
from .extraction.wrapper import Wrapper
from .models.extracted_string import DirectoryWrapResult
from .models.locale_file import LocaleData
from .storage.locale_store import LocaleStore
from .translation.providers import create_provider
from .translation.sync_engine import HashCache, SyncEngine, flatten_keys

console = Console()

PREVIEW_LIMIT = 20


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def handle_errors(func):
    """Report pipeline errors in red and abort instead of printing a traceback."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LokalError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise click.Abort()

    return wrapper


def _load_config(config_path: Optional[str]) -> LokalConfig:
    loader = ConfigLoader()
    config = loader.load_file(Path(config_path)) if config_path else loader.load()

    errors = config.validate()
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        raise click.Abort()

    if loader.config_path:
        console.print(f"[dim]Using config {loader.config_path}[/dim]")
    return config


def _merge_into_default(store: LocaleStore, locale: str, new_data: LocaleData) -> Tuple[int, int]:
    """Merge new keys into a catalog and save it; returns (added, total)."""
    existing = store.load_locale(locale)
    before = len(flatten_keys(existing.data)) if existing else 0

    merged = store.merge_locale_data(locale, new_data, preserve_existing=True)
    store.save_locale(locale, merged, existing.source_hashes if existing else None)

    total = len(flatten_keys(merged))
    return total - before, total


def _print_warnings(store: LocaleStore) -> None:
    for warning in store.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    store.warnings.clear()


@click.group()
@click.version_option(version=__version__)
def cli():
    """Extract, wrap and translate UI strings in JS/TS/JSX/TSX projects."""
    pass


@cli.command()
@click.option(
    "--locales", "-l",
    default="en",
    help="Comma-separated list of locales"
)
@click.option(
    "--default-locale", "-d",
    default=None,
    help="Default (source) locale (defaults to the first locale)"
)
@click.option(
    "--dir",
    "project_dir",
    type=click.Path(file_okay=False),
    default=".",
    help="Project directory"
)
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite an existing lokal.config.json"
)
@handle_errors
def init(locales: str, default_locale: Optional[str], project_dir: str, force: bool):
    """Create lokal.config.json and the default locale catalog."""
    root = Path(project_dir)
    config_path = root / "lokal.config.json"
    if config_path.exists() and not force:
        console.print(f"[yellow]{config_path} already exists[/yellow] (use --force to overwrite)")
        raise click.Abort()

    locale_list = [locale.strip() for locale in locales.split(",") if locale.strip()]
    default = default_locale or (locale_list[0] if locale_list else "en")
    if default not in locale_list:
        locale_list.insert(0, default)

    config = LokalConfig(locales=locale_list, default_locale=default, root=root.resolve())
    errors = config.validate()
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        raise click.Abort()

    root.mkdir(parents=True, exist_ok=True)
    document = {
        "locales": config.locales,
        "defaultLocale": config.default_locale,
        "functionName": config.function_name,
        "componentName": config.component_name,
        "sourceDir": config.source_dir,
        "outputDir": config.output_dir,
    }
    config_path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    console.print(f"[green]Created:[/green] {config_path}")

    store = LocaleStore(config.output_path)
    if not store.locale_exists(config.default_locale):
        store.save_locale(config.default_locale, {})
        console.print(f"[green]Created:[/green] {config.output_path / (config.default_locale + '.json')}")

    console.print(Panel(
        "1. [cyan]lokal wrap --dry-run[/cyan] to preview strings to wrap\n"
        "2. [cyan]lokal wrap[/cyan] to wrap them\n"
        "3. [cyan]lokal translate --all[/cyan] to translate",
        title="Next steps",
    ))


@cli.command()
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config file"
)
@click.option(
    "--output", "-o",
    "output_dir",
    type=click.Path(file_okay=False),
    help="Locale output directory (overrides config)"
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@handle_errors
def scan(config_path: Optional[str], output_dir: Optional[str], verbose: bool):
    """Scan source files for t() calls and <T> elements."""
    _setup_logging(verbose)
    config = _load_config(config_path)
    if output_dir:
        config.output_dir = str(Path(output_dir).resolve())

    console.print(f"[blue]Scanning:[/blue] {config.source_path}")
    scanner = Scanner.from_config(config)
    with console.status("Scanning..."):
        result = scanner.scan_directory(
            config.source_path,
            extensions=config.extensions,
            exclude_dirs=[config.output_path],
        )

    for error in result.errors:
        console.print(f"[red]Error:[/red] {error}")

    strings = result.unique_keys()
    console.print(
        f"[green]Found:[/green] {len(strings)} unique strings "
        f"in {result.files_scanned} files"
    )
    if verbose:
        for item in strings.values():
            console.print(f"  [dim]{item.file}:{item.line}[/dim] {item.key}")

    if not strings:
        return

    store = LocaleStore(config.output_path)
    added, total = _merge_into_default(
        store, config.default_locale, {key: item.value for key, item in strings.items()}
    )
    _print_warnings(store)
    console.print(
        f"[green]Updated:[/green] {config.default_locale}.json "
        f"({added} new, {total} total)"
    )


@cli.command()
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config file"
)
@click.option(
    "--src", "-s",
    "source_dir",
    type=click.Path(exists=True),
    help="Source directory or file (overrides config)"
)
@click.option(
    "--function", "-f",
    "function_name",
    default=None,
    help="Translation function name (overrides config)"
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Preview strings that would be wrapped without changing files"
)
@click.option("--yes", "-y", is_flag=True, help="Apply without asking for confirmation")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@handle_errors
def wrap(
    config_path: Optional[str],
    source_dir: Optional[str],
    function_name: Optional[str],
    dry_run: bool,
    yes: bool,
    verbose: bool,
):
    """Wrap literal UI text in translation calls.

    Files are rewritten in place, one at a time. Do not run two wraps
    over the same project at once.
    """
    _setup_logging(verbose)
    config = _load_config(config_path)
    if source_dir:
        config.source_dir = str(Path(source_dir).resolve())
    if function_name:
        config.function_name = function_name

    wrapper = Wrapper.from_config(config)
    console.print(f"[blue]Wrapping:[/blue] {config.source_path}")

    preview = wrapper.wrap_directory(
        config.source_path,
        extensions=config.extensions,
        dry_run=True,
        exclude_dirs=[config.output_path],
    )
    _print_wrap_preview(preview)

    if preview.total_wrapped == 0:
        console.print("[green]Nothing to wrap[/green]")
        return

    if dry_run:
        console.print("\n[yellow]Dry run - no changes saved[/yellow]")
        return

    if not yes and not click.confirm(
        f"Wrap {preview.total_wrapped} strings in {preview.modified_files} files?",
        default=True,
    ):
        console.print("[yellow]Cancelled[/yellow]")
        return

    result = wrapper.wrap_directory(
        config.source_path,
        extensions=config.extensions,
        dry_run=False,
        exclude_dirs=[config.output_path],
    )
    for error in result.errors:
        console.print(f"[red]Error:[/red] {error}")

    written = sum(1 for r in result.results if r.written)
    console.print(
        f"[green]Wrapped:[/green] {result.total_wrapped} strings in {written} files"
    )

    new_keys = result.new_keys()
    if new_keys:
        store = LocaleStore(config.output_path)
        added, total = _merge_into_default(store, config.default_locale, new_keys)
        _print_warnings(store)
        console.print(
            f"[green]Updated:[/green] {config.default_locale}.json "
            f"({added} new, {total} total)"
        )


def _print_wrap_preview(result: DirectoryWrapResult) -> None:
    """Print the strings a wrap pass found."""
    for error in result.errors:
        console.print(f"[red]Error:[/red] {error}")

    rows = [
        (r.file, item)
        for r in result.results
        for item in r.wrapped
    ]
    if not rows:
        return

    table = Table(title=f"{len(rows)} strings in {result.modified_files} files")
    table.add_column("Location", style="dim", max_width=40)
    table.add_column("Text", max_width=40)
    table.add_column("Replacement", style="cyan", max_width=50)

    for file, item in rows[:PREVIEW_LIMIT]:
        table.add_row(f"{Path(file).name}:{item.line}", item.original[:40], item.wrapped)

    console.print(table)
    if len(rows) > PREVIEW_LIMIT:
        console.print(f"[dim]... and {len(rows) - PREVIEW_LIMIT} more[/dim]")


@cli.command()
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config file"
)
@click.option(
    "--locale", "-l",
    "locales",
    multiple=True,
    help="Target locale (repeatable)"
)
@click.option(
    "--all", "-a",
    "all_locales",
    is_flag=True,
    help="Translate every configured locale"
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@handle_errors
def translate(config_path: Optional[str], locales: Tuple[str, ...], all_locales: bool, verbose: bool):
    """Translate missing keys from the default locale into target locales."""
    _setup_logging(verbose)
    config = _load_config(config_path)

    if all_locales:
        targets = config.target_locales
    elif locales:
        targets = [locale for locale in locales if locale != config.default_locale]
    else:
        console.print("[red]Error:[/red] specify --locale or --all")
        raise click.Abort()

    if not targets:
        console.print("[yellow]No target locales to translate[/yellow]")
        return

    errors = config.validate_ai()
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        raise click.Abort()

    store = LocaleStore(config.output_path)
    source = store.load_locale(config.default_locale)
    _print_warnings(store)
    if source is None:
        console.print(
            f"[red]Error:[/red] no {config.default_locale}.json found; "
            "run [cyan]lokal scan[/cyan] or [cyan]lokal wrap[/cyan] first"
        )
        raise click.Abort()

    provider = create_provider(config.ai)
    console.print(
        f"[blue]Translating from {config.default_locale} with {config.ai.provider}:[/blue] "
        f"{', '.join(targets)}"
    )

    failures: List[str] = []
    for locale in targets:
        target = store.load_locale(locale)
        _print_warnings(store)

        hash_cache = HashCache.from_locale_file(target)
        engine = SyncEngine(
            provider,
            batch_size=config.ai.batch_size,
            max_concurrency=config.ai.max_concurrency,
            hash_cache=hash_cache,
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Translating to {locale}", total=None)
            result = engine.sync(
                source.data,
                target.data if target else {},
                config.default_locale,
                locale,
            )

        if result.requested or target is None:
            store.save_locale(locale, result.data, hash_cache.to_dict())

        _print_sync_result(locale, result)
        failures.extend(f"{locale}:{key}" for key in result.failed)

    if failures:
        console.print(f"\n[yellow]{len(failures)} translations failed; rerun to retry[/yellow]")
    else:
        console.print("\n[green]Done![/green]")


def _print_sync_result(locale: str, result) -> None:
    """Print one locale's translation summary."""
    if not result.requested:
        console.print(f"  [green]{locale}: all strings already translated[/green]")
        return

    console.print(
        f"  [cyan]{locale}:[/cyan] {len(result.translated)} translated, "
        f"{len(result.failed)} failed, {result.skipped} skipped"
    )
    for key, error in list(result.failed.items())[:PREVIEW_LIMIT]:
        console.print(f"    [red]{key}[/red]: {error}")


@cli.command()
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config file"
)
@handle_errors
def stats(config_path: Optional[str]):
    """Show translation coverage per locale."""
    config = _load_config(config_path)
    store = LocaleStore(config.output_path)

    catalogs = store.load_all_locales()
    _print_warnings(store)

    source = catalogs.get(config.default_locale)
    source_keys = set(flatten_keys(source.data)) if source else set()

    table = Table(title=f"Locales in {config.output_path}")
    table.add_column("Locale", style="cyan")
    table.add_column("Keys", justify="right")
    table.add_column("Coverage", justify="right")
    table.add_column("Last updated", style="dim")

    for locale in sorted(set(config.locales) | set(catalogs)):
        catalog = catalogs.get(locale)
        if catalog is None:
            table.add_row(locale, "-", "missing", "")
            continue

        keys = set(flatten_keys(catalog.data))
        if locale == config.default_locale:
            coverage = "source"
        elif source_keys:
            covered = len(keys & source_keys)
            coverage = f"{covered}/{len(source_keys)} ({covered / len(source_keys) * 100:.1f}%)"
        else:
            coverage = "-"
        table.add_row(locale, str(len(keys)), coverage, catalog.last_updated[:19])

    console.print(table)


if __name__ == "__main__":
    cli()
