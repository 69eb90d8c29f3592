"""Command line interface for tooldir."""

from __future__ import annotations

import difflib
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from tooldir.catalog import (
    ALL_CATEGORIES,
    BatchImporter,
    CatalogChange,
    CatalogError,
    CatalogStore,
    FilterState,
    ImportProgress,
    ParseFailureError,
    PricingTier,
    StaticDocumentSource,
    ToolRecord,
    apply_filters,
    catalog_stats,
    featured_tools,
    filter_state_from_query,
    filter_state_to_query,
    known_categories,
    list_sections,
    manage_filter,
    parse_import_text,
    pricing_tier,
    read_import_file,
    write_export,
)
from tooldir.catalog.transfer import EXPORT_FILENAME, export_collection
from tooldir.config import ConfigError, ConfigManager, TooldirConfig, resolve_with_precedence
from tooldir.logging_config import configure_logging
from tooldir.storage import FileKeyValueStore, StorageError
from tooldir.storage.watch import StorageWatcher

console = Console()

_PRICING_CHOICES = [tier.value for tier in PricingTier]


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


@contextmanager
def _guarded(json_output: bool, action: str) -> Iterator[None]:
    """Translate domain errors raised inside a command into CLI errors."""
    try:
        yield
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except ParseFailureError as exc:
        _handle_cli_error(str(exc), code="parse_error", json_output=json_output, original=exc)
    except StorageError as exc:
        _handle_cli_error(str(exc), code="storage_error", json_output=json_output, original=exc)
    except CatalogError as exc:
        _handle_cli_error(str(exc), code="catalog_error", json_output=json_output, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(
            exc.format_message(), code="cli_error", json_output=json_output, original=exc
        )
    except click.exceptions.Abort:
        raise
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while {action}: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    if summary_only and mode not in {"summary", "warning", "error"}:
        return

    console.print(message)


def _format_summary_line(command: str, target: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {target}: {parts}.[/green]"


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """

    node = target
    for segment in path[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


def _output_options(command: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared ``--json``/``--summary``/``--quiet`` flags."""
    command = click.option("--quiet", is_flag=True, help="Suppress non-error output.")(command)
    command = click.option(
        "--summary", "summary_mode", is_flag=True, help="Only emit summary lines."
    )(command)
    return click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")(command)


def _output_modes(
    ctx: click.Context,
    config: TooldirConfig,
    *,
    json_output: bool,
    quiet: bool,
    summary_mode: bool,
) -> tuple[bool, bool]:
    """Resolve quiet/summary flags against configuration defaults.

    Returns:
        tuple[bool, bool]: Effective quiet and summary-only settings.

    Raises:
        click.ClickException: If the requested modes conflict.
    """
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _load_config(cli_overrides: dict[str, Any] | None = None) -> TooldirConfig:
    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load(cli_overrides=cli_overrides)
    configure_logging(config.logging)
    return config


def _build_store(config: TooldirConfig) -> CatalogStore:
    return CatalogStore(
        FileKeyValueStore(Path(config.storage.path)),
        StaticDocumentSource(Path(config.catalog.document_path)),
        override_key=config.catalog.override_key,
        importer=BatchImporter(
            config.importing.batch_size, logo_lookup=config.catalog.logo_lookup
        ),
        logo_lookup=config.catalog.logo_lookup,
    )


def _tools_table(records: list[ToolRecord], *, title: str | None = None) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("ID", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Pricing")
    table.add_column("Flags")
    table.add_column("↑", justify="right")
    table.add_column("URL", overflow="fold")
    for record in records:
        flags = [
            label
            for label, enabled in (
                ("top", record.top),
                ("featured", record.featured),
                ("verified", record.verified),
            )
            if enabled
        ]
        tier = pricing_tier(record.pricing_text)
        table.add_row(
            str(record.id),
            record.name,
            record.category,
            tier.value if tier else "",
            ", ".join(flags),
            str(record.upvotes),
            record.url,
        )
    return table


def _record_payload(records: list[ToolRecord]) -> list[dict[str, Any]]:
    return [record.model_dump(mode="json") for record in records]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tooldir")
def cli() -> None:
    """Browse, filter, and curate a catalog of tools."""


@cli.command("list")
@click.option("--category", type=str, help="Only show tools in this category.")
@click.option("-q", "--search", "query", type=str, help="Free-text search query.")
@click.option("--verified", "verified_only", is_flag=True, help="Only show verified tools.")
@click.option(
    "--pricing",
    type=click.Choice(_PRICING_CHOICES, case_sensitive=False),
    help="Only show tools in this pricing tier.",
)
@click.option("--featured", is_flag=True, help="Show the featured grid instead of all tools.")
@click.option("--link", type=str, help="Restore filters from a shared `category=..&q=..` link.")
@_output_options
@click.pass_context
def list_tools(
    ctx: click.Context,
    category: str | None,
    query: str | None,
    verified_only: bool,
    pricing: str | None,
    featured: bool,
    link: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """List tools matching every given filter."""
    with _guarded(json_output, "listing tools"):
        config = _load_config()
        quiet_enabled, summary_only = _output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        store = _build_store(config)

        state = filter_state_from_query(link or "")
        update: dict[str, Any] = {}
        if category is not None:
            update["category"] = category or ALL_CATEGORIES
        if query is not None:
            update["query"] = query
        if verified_only:
            update["verified_only"] = True
        if pricing:
            update["pricing"] = PricingTier(pricing)
        state = state.model_copy(update=update)

        collection = store.current()
        if featured:
            results = featured_tools(collection, state, limit=config.display.featured_limit)
        else:
            results = apply_filters(collection, state)
        share = filter_state_to_query(state)

        if json_output:
            console.print_json(
                data={
                    "context": {
                        "filters": state.model_dump(mode="json"),
                        "link": share,
                        "featured": featured,
                    },
                    "counts": {"matches": len(results), "total": len(collection)},
                    "results": _record_payload(results),
                }
            )
            return

        if results:
            _emit_message(
                _tools_table(results, title="Featured" if featured else None),
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        else:
            _emit_message(
                "[yellow]No tools match the current filters.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        if share:
            _emit_message(
                f"Share: ?{share}", mode="detail", quiet=quiet_enabled, summary_only=summary_only
            )
        _emit_message(
            _format_summary_line(
                "List", config.catalog.document_path, {"matches": len(results), "total": len(collection)}
            ),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit categories as JSON.")
def categories(json_output: bool) -> None:
    """Show the known categories and how many tools each holds."""
    with _guarded(json_output, "listing categories"):
        config = _load_config()
        collection = _build_store(config).current()
        counts = {
            category: (
                len(collection)
                if category == ALL_CATEGORIES
                else sum(1 for record in collection if record.category == category)
            )
            for category in known_categories(collection)
        }

        if json_output:
            console.print_json(
                data={"categories": [{"name": name, "count": n} for name, n in counts.items()]}
            )
            return

        table = Table()
        table.add_column("Category")
        table.add_column("Tools", justify="right")
        for name, n in counts.items():
            table.add_row(name, str(n))
        console.print(table)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit sections as JSON.")
def sections(json_output: bool) -> None:
    """Show every category with all of its tools, alphabetically."""
    with _guarded(json_output, "listing sections"):
        config = _load_config()
        grouped = list_sections(_build_store(config).current())

        if json_output:
            console.print_json(
                data={
                    "sections": [
                        {
                            "category": section.category,
                            "count": section.count,
                            "tools": _record_payload(section.tools),
                        }
                        for section in grouped
                    ]
                }
            )
            return

        for section in grouped:
            console.print(f"[bold]{section.category}[/bold] ({section.count})")
            for record in section.tools:
                console.print(f"  - {record.name}  {record.url}")


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit dashboard counters as JSON.")
def stats(json_output: bool) -> None:
    """Show dashboard counters for the catalog."""
    with _guarded(json_output, "computing stats"):
        config = _load_config()
        summary = catalog_stats(
            _build_store(config).current(), latest=config.display.latest_count
        )

        if json_output:
            console.print_json(
                data={
                    "total": summary.total,
                    "featured": summary.featured,
                    "categories": summary.categories,
                    "latest": list(summary.latest),
                }
            )
            return

        console.print(f"Total tools: {summary.total}")
        console.print(f"Featured: {summary.featured}")
        console.print(f"Categories: {summary.categories}")
        if summary.latest:
            console.print("Latest:")
            for name in summary.latest:
                console.print(f"  - {name}")


@cli.command()
@click.option("--name", default="", help="Substring of the tool name.")
@click.option("--category", default="", help="Substring of the category.")
@click.option("--section", default="", help="Substring of the section.")
@click.option("--json", "json_output", is_flag=True, help="Emit rows as JSON.")
def manage(name: str, category: str, section: str, json_output: bool) -> None:
    """Admin view: filter tools by name, category, and section substrings."""
    with _guarded(json_output, "filtering tools"):
        config = _load_config()
        rows = manage_filter(
            _build_store(config).current(),
            name=name,
            category=category,
            section=section,
            limit=config.display.manage_limit,
        )

        if json_output:
            console.print_json(data={"count": len(rows), "results": _record_payload(rows)})
            return

        table = Table()
        for column in ("ID", "Name", "Category", "Section", "Website", "Flags"):
            table.add_column(column, overflow="fold")
        for record in rows:
            flags = " ".join(
                label
                for label, enabled in (
                    ("Featured", record.featured),
                    ("Top", record.top),
                    ("Verified", record.verified),
                )
                if enabled
            )
            table.add_row(
                str(record.id), record.name, record.category, record.section, record.url, flags
            )
        console.print(table)


def _preview_import(
    store: CatalogStore,
    candidates: list[Any],
    *,
    source: str,
    limit: int,
    json_output: bool,
    quiet: bool,
    summary_only: bool,
) -> None:
    """Report how an import would partition without touching the override."""
    result = store.preview_import(candidates)
    counts = result.counts
    if json_output:
        console.print_json(
            data={
                "context": {"source": source, "dry_run": True},
                "counts": counts,
                "accepted": _record_payload(result.accepted),
            }
        )
        return

    if result.accepted:
        shown = result.accepted[:limit]
        title = f"Preview ({len(shown)} of {len(result.accepted)})"
        _emit_message(
            _tools_table(shown, title=title), mode="detail", quiet=quiet, summary_only=summary_only
        )
    _emit_message(
        f"[green]{counts['accepted']} tools would be imported.[/green]",
        mode="detail",
        quiet=quiet,
        summary_only=summary_only,
    )
    if counts["duplicates"] or counts["rejected"]:
        _emit_message(
            f"[yellow]Would skip {counts['duplicates']} duplicates and "
            f"{counts['rejected']} items missing required fields.[/yellow]",
            mode="warning",
            quiet=quiet,
            summary_only=summary_only,
        )
    _emit_message(
        _format_summary_line("Import preview", source, counts),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )

@cli.command("import")
@click.argument("source", type=str)
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    help="Candidates processed per progress update; overrides importing.batch_size.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Preview what would be imported without saving anything.",
)
@_output_options
@click.pass_context
def import_tools(
    ctx: click.Context,
    source: str,
    batch_size: int | None,
    dry_run: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Import tools from a .json FILE, or from pasted JSON on stdin with `-`."""
    with _guarded(json_output, "importing tools"):
        config = _load_config(
            {"importing.batch_size": batch_size} if batch_size is not None else None
        )
        quiet_enabled, summary_only = _output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        if source == "-":
            candidates = parse_import_text(sys.stdin.read())
        else:
            path = Path(source).expanduser()
            if not path.exists():
                raise click.ClickException(f"File not found: {path}")
            candidates = read_import_file(path)

        store = _build_store(config)
        if dry_run:
            _preview_import(
                store,
                candidates,
                source=source,
                limit=config.importing.preview_rows,
                json_output=json_output,
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
            return

        show_progress = not (json_output or quiet_enabled or summary_only)
        if show_progress:
            with Progress(
                TextColumn("Importing…"),
                BarColumn(),
                MofNCompleteColumn(),
                console=console,
                transient=True,
            ) as progress:
                task_id = progress.add_task("import", total=len(candidates))

                def _advance(update: ImportProgress) -> None:
                    progress.update(task_id, completed=update.processed, total=update.total)

                result = store.import_records(candidates, on_progress=_advance)
        else:
            result = store.import_records(candidates)

        counts = result.counts
        if json_output:
            console.print_json(
                data={
                    "context": {"source": source, "override_key": store.override_key},
                    "counts": counts,
                    "accepted": _record_payload(result.accepted),
                }
            )
            return

        _emit_message(
            f"[green]{counts['accepted']} tools imported successfully.[/green]",
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
        if counts["duplicates"] or counts["rejected"]:
            _emit_message(
                f"[yellow]Skipped {counts['duplicates']} duplicates and "
                f"{counts['rejected']} items missing required fields.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        _emit_message(
            _format_summary_line("Import", source, counts),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )


@cli.command("export")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=str),
    default=EXPORT_FILENAME,
    show_default=True,
    help="Destination file for the export.",
)
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the export instead of writing it.")
def export_tools(output: str, to_stdout: bool) -> None:
    """Export the current catalog as indented JSON."""
    with _guarded(False, "exporting tools"):
        config = _load_config()
        collection = _build_store(config).current()
        if to_stdout:
            click.echo(export_collection(collection))
            return
        target = write_export(collection, Path(output).expanduser())
        console.print(f"[green]Exported {len(collection)} tools to {target}.[/green]")


@cli.command()
@click.option("--name", required=True, help="Tool name.")
@click.option("--url", required=True, help="Tool website.")
@click.option("--category", required=True, help="Tool category.")
@click.option("--description", default="", help="Short description.")
@click.option("--section", default="", help="Auxiliary section label.")
@click.option("--pricing", "pricing_text", default="", help="Free-form pricing text.")
@click.option("--logo", default="", help="Logo address; derived from the url when omitted.")
@click.option("--featured", is_flag=True, help="Mark as featured.")
@click.option("--top", is_flag=True, help="Mark as top.")
@click.option("--verified", is_flag=True, help="Mark as verified.")
@click.option("--json", "json_output", is_flag=True, help="Emit the added tool as JSON.")
def add(json_output: bool, **fields: Any) -> None:
    """Add a tool at the top of the catalog."""
    with _guarded(json_output, "adding a tool"):
        config = _load_config()
        record = _build_store(config).add_tool(fields)
        if json_output:
            console.print_json(data=record.model_dump(mode="json"))
            return
        console.print(f"[green]Added {record.name} ({record.id}).[/green]")


@cli.command()
@click.argument("ref")
@click.option("--name", help="New name.")
@click.option("--url", help="New website.")
@click.option("--category", help="New category.")
@click.option("--description", help="New description.")
@click.option("--section", help="New section.")
@click.option("--pricing", "pricing_text", help="New pricing text.")
@click.option("--logo", help="New logo address.")
@click.option("--featured/--no-featured", default=None, help="Set or clear the featured flag.")
@click.option("--top/--no-top", default=None, help="Set or clear the top flag.")
@click.option("--verified/--no-verified", default=None, help="Set or clear the verified flag.")
@click.option("--json", "json_output", is_flag=True, help="Emit the edited tool as JSON.")
def edit(ref: str, json_output: bool, **fields: Any) -> None:
    """Edit the tool whose id (or exact name) is REF."""
    with _guarded(json_output, "editing a tool"):
        changes = {key: value for key, value in fields.items() if value is not None}
        if not changes:
            raise click.ClickException("Nothing to change; pass at least one field option.")
        config = _load_config()
        record = _build_store(config).update_tool(ref, changes)
        if json_output:
            console.print_json(data=record.model_dump(mode="json"))
            return
        console.print(f"[green]Updated {record.name} ({record.id}).[/green]")


@cli.command()
@click.argument("ref")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
def delete(ref: str, yes: bool) -> None:
    """Delete the tool whose id (or exact name) is REF."""
    with _guarded(False, "deleting a tool"):
        config = _load_config()
        store = _build_store(config)
        target = store.find(ref)
        if not yes and not click.confirm(f"Delete {target.name}?"):
            console.print("[yellow]Delete cancelled.[/yellow]")
            return
        store.delete_tool(target.id)
        console.print(f"[green]Deleted {target.name}.[/green]")


@cli.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
def reset(yes: bool) -> None:
    """Discard local edits and fall back to the published catalog."""
    with _guarded(False, "resetting the catalog"):
        config = _load_config()
        if not yes and not click.confirm("Discard all local catalog edits?"):
            console.print("[yellow]Reset cancelled.[/yellow]")
            return
        collection = _build_store(config).reset()
        console.print(f"[green]Catalog reset; {len(collection)} tools available.[/green]")


@cli.command()
@click.option(
    "--debounce",
    type=float,
    default=None,
    help="Seconds to wait for writes to settle (defaults to storage.debounce_seconds).",
)
@_output_options
@click.pass_context
def watch(
    ctx: click.Context,
    debounce: float | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Reload the catalog whenever another process rewrites the storage file."""
    with _guarded(json_output, "watching storage"):
        config = _load_config()
        quiet_enabled, summary_only = _output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        if debounce is not None and debounce <= 0:
            raise click.ClickException("--debounce must be greater than zero.")

        storage = FileKeyValueStore(Path(config.storage.path))
        store = CatalogStore(
            storage,
            StaticDocumentSource(Path(config.catalog.document_path)),
            override_key=config.catalog.override_key,
            logo_lookup=config.catalog.logo_lookup,
        )
        store.load()
        watcher = StorageWatcher(
            storage,
            debounce_seconds=debounce if debounce is not None else config.storage.debounce_seconds,
        )

        def _report(change: CatalogChange) -> None:
            if json_output:
                console.print_json(
                    data={"key": change.key, "size": change.size, "origin": change.origin}
                )
                return
            _emit_message(
                _format_summary_line("Watch", watcher.path, {"key": change.key, "tools": change.size}),
                mode="summary",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

        store.subscribe(_report)
        _emit_message(
            f"[cyan]Watching {watcher.path}. Press Ctrl+C to stop.[/cyan]",
            mode="detail",
            quiet=quiet_enabled or json_output,
            summary_only=summary_only,
        )
        try:
            watcher.watch(lambda _events: None)
        except KeyboardInterrupt:
            watcher.stop()
            _emit_message(
                "[yellow]Watch stopped by user request.[/yellow]",
                mode="summary",
                quiet=quiet_enabled or json_output,
                summary_only=summary_only,
            )
        finally:
            store.close()


@cli.group()
def config() -> None:
    """Manage tooldir configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'importing.batch_size'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=TooldirConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    # The timestamp line always changes; only report real edits.
    meaningful = [
        line
        for line in diff
        if line.startswith(("+", "-"))
        and not line.startswith(("+++", "---"))
        and "Last updated:" not in line
    ]
    if not meaningful:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session."""
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited: Optional[str] = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=TooldirConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
