"""frecent CLI — local tracker commands, settings/config editing, HTTP server."""

from __future__ import annotations

import contextlib
import json
import logging
from collections.abc import Iterator
from datetime import datetime
from typing import Any, NoReturn, get_args, get_origin

import httpx
import typer
from pydantic import BaseModel, ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from frecent import __version__
from frecent.client import FrecentClient
from frecent.config import FrecentConfig, loadConfig
from frecent.models import TrackerSettings
from frecent.service import (
    svcAgingPreview,
    svcClear,
    svcDelete,
    svcEntries,
    svcGetSettings,
    svcRemove,
    svcRename,
    svcSearch,
    svcStats,
    svcUpdateSettings,
    svcVisit,
)
from frecent.state import AppState, createAppState

_FORMAT_HELP = "Output format: human|json"


# ============================================================
# Helpers
# ============================================================


def _checkFormat(format: str) -> None:
    if format not in ("human", "json"):
        raise typer.BadParameter(f"Invalid format {format!r}; choose human or json")


def _setupLogging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(name)s | %(message)s",
    )


@contextlib.contextmanager
def _localState() -> Iterator[AppState]:
    """Open the data file directly; pending saves are written on exit."""
    cfg = loadConfig()
    _setupLogging(cfg.log_level)
    state = createAppState(config=cfg)
    try:
        yield state
    finally:
        state.tracker.flush()


def _fmtVal(v: Any) -> str:
    if v is None:
        return "[dim](not set)[/dim]"
    if isinstance(v, bool):
        return "true" if v else "false"
    if v == "":
        return "[dim](empty)[/dim]"
    return str(v)


def _fmtTime(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def _annStr(ann: Any) -> str:
    """Return a simple string representation of a type annotation."""
    args = get_args(ann)
    if args:
        non_none = [a for a in args if a is not type(None)]
        has_none = type(None) in args
        base = non_none[0] if non_none else args[0]
        name = getattr(base, "__name__", str(base))
        return f"{name} | None" if has_none else name
    return getattr(ann, "__name__", str(ann))


def _getFieldAnnotation(model: type[BaseModel], key: str) -> Any:
    f = model.model_fields.get(key)
    return f.annotation if f else None


def _coerceTyped(value: str, annotation: Any) -> Any:
    """Coerce string value using the field annotation."""
    origin = get_origin(annotation)
    args = get_args(annotation) if origin else ()
    types = [a for a in args if a is not type(None)] if args else [annotation]
    base = types[0] if types else str

    if value.lower() in ("none", "null") and type(None) in (args or []):
        return None
    if base is bool:
        if value.lower() in ("true", "yes", "1", "on"):
            return True
        if value.lower() in ("false", "no", "0", "off"):
            return False
        raise ValueError(f"Expected bool, got {value!r}")
    if base is int:
        return int(value)
    if base is float:
        return float(value)
    return value


def _fail(format: str, message: str, label: str = "Error") -> NoReturn:
    if format == "json":
        print(json.dumps({"ok": False, "error": message}))
    else:
        _console.print(f"[red]{label}:[/red] {message}")
    raise typer.Exit(1)


def _renderSection(title: str, pairs: list[tuple[str, Any, Any]]) -> None:
    """Print a section with title + key/value table. pairs = (key, value, default)."""
    _console.print(f"\n[bold]{title}[/bold]")
    t = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
    t.add_column("key", style="dim")
    t.add_column("val")
    for key, val, default in pairs:
        fmt = _fmtVal(val)
        if val != default:
            fmt = f"[yellow]{fmt}[/yellow]"
        t.add_row(key, fmt)
    _console.print(t)


def _renderEntries(entries: list[dict], empty: str) -> None:
    if not entries:
        _console.print(f"[dim]{empty}[/dim]")
        return
    t = Table(box=box.SIMPLE, padding=(0, 1))
    t.add_column("#", style="dim", justify="right")
    t.add_column("note")
    t.add_column("frecency", justify="right", style="cyan")
    t.add_column("score", justify="right", style="dim")
    t.add_column("last visit", style="dim")
    for i, e in enumerate(entries, start=1):
        t.add_row(
            str(i),
            e["path"],
            f"{e['frecency']:.1f}",
            f"{e['score']:.1f}",
            _fmtTime(e["last_access"]),
        )
    _console.print(t)


# ============================================================
# CLI (typer)
# ============================================================

_cli = typer.Typer(
    name="frecent",
    help="Frecency-ranked recent notes, zoxide style.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
_settings_cli = typer.Typer(help="Read/write tracker settings stored with the visit data.")
_config_cli = typer.Typer(help="Read/write [bold]~/.frecent/config.json[/bold].")
_cli.add_typer(_settings_cli, name="settings")
_cli.add_typer(_config_cli, name="config")

_console = Console()


def _printVersion(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


@_cli.callback()
def _main(
    version: bool = typer.Option(
        False, "--version", callback=_printVersion, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Frecency-ranked recent notes, zoxide style."""


@_cli.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: int | None = typer.Option(None, "--port", help="Port (default from config)"),
) -> None:
    """Run the HTTP API that editor hosts post visit events to."""
    import uvicorn

    from frecent.server.app import createApp

    cfg = loadConfig()
    _setupLogging("INFO")
    p = port or cfg.port
    uvicorn.run(createApp(config=cfg, port=p), host=host or cfg.host, port=p)


@_cli.command()
def status(
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Check whether the HTTP server is reachable."""
    _checkFormat(format)
    cfg = loadConfig()
    url = f"http://{cfg.host}:{cfg.port}/api"
    try:
        with FrecentClient(url) as client:
            info = client.stats()
    except httpx.HTTPError as e:
        if format == "json":
            print(json.dumps({"running": False, "url": url, "error": str(e)}))
        else:
            _console.print(f"[red]Not running[/red] at {url}")
        raise typer.Exit(1) from e
    if format == "json":
        print(json.dumps({"running": True, "url": url, **info}))
    else:
        _console.print(f"[green]Running[/green] at {url} — {info['tracked']} tracked notes")


@_cli.command()
def visit(
    path: str = typer.Argument(help="Note path, e.g. Projects/plan.md"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Record a visit to a note."""
    _checkFormat(format)
    with _localState() as state:
        result = svcVisit(state, path)
    if format == "json":
        print(json.dumps(result))
    elif result["tracked"]:
        _console.print(f"[green]Visited[/green] {path} (score {result['score']:.1f})")
    else:
        _console.print(f"[yellow]Visited[/yellow] {path} (pruned by aging)")


@_cli.command()
def rename(
    old_path: str = typer.Argument(help="Previous path"),
    new_path: str = typer.Argument(help="New path"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Move a note's history to its new path, merging if the new path is tracked."""
    _checkFormat(format)
    with _localState() as state:
        result = svcRename(state, old_path, new_path)
    if format == "json":
        print(json.dumps(result))
    elif result["renamed"]:
        _console.print(f"[green]Renamed[/green] {old_path} → {new_path}")
    else:
        _console.print(f"[dim]Not tracked:[/dim] {old_path}")


@_cli.command()
def delete(
    path: str = typer.Argument(help="Path of the deleted note"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Forget a note that was deleted."""
    _checkFormat(format)
    with _localState() as state:
        result = svcDelete(state, path)
    if format == "json":
        print(json.dumps(result))
    elif result["deleted"]:
        _console.print(f"[green]Deleted[/green] {path}")
    else:
        _console.print(f"[dim]Not tracked:[/dim] {path}")


@_cli.command()
def remove(
    path: str = typer.Argument(help="Note path to drop from the list"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Remove a note from the list without touching the note."""
    _checkFormat(format)
    with _localState() as state:
        result = svcRemove(state, path)
    if format == "json":
        print(json.dumps(result))
    elif result["removed"]:
        _console.print(f"[green]Removed[/green] {path}")
    else:
        _console.print(f"[dim]Not tracked:[/dim] {path}")


@_cli.command("list")
def list_entries(
    limit: int | None = typer.Option(None, "--limit", "-n", min=0, help="Max rows"),
    unbounded: bool = typer.Option(False, "--all", help="Ignore the max_items cap"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Show notes ranked by frecency."""
    _checkFormat(format)
    with _localState() as state:
        result = svcEntries(state, limit, unbounded)
    if format == "json":
        print(json.dumps(result))
    else:
        _renderEntries(result["entries"], "No notes tracked yet.")


@_cli.command()
def search(
    query: str = typer.Argument(help="Text to match against note names"),
    limit: int | None = typer.Option(None, "--limit", "-n", min=0, help="Max rows"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Search tracked notes by name, best ranked first."""
    _checkFormat(format)
    with _localState() as state:
        result = svcSearch(state, query, limit)
    if format == "json":
        print(json.dumps(result))
    else:
        _renderEntries(result["entries"], "No matching notes.")


@_cli.command()
def stats(
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Tracked notes, total score and how much of the age pool is used."""
    _checkFormat(format)
    with _localState() as state:
        result = svcStats(state)
    if format == "json":
        print(json.dumps(result))
        return
    t = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
    t.add_column("key", style="dim")
    t.add_column("val")
    t.add_row("tracked notes", str(result["tracked"]))
    t.add_row("total score", f"{result['total_score']:.1f} / {result['max_age']:g}")
    t.add_row("age pool used", f"{result['age_pool_used_pct']:.1f}%")
    t.add_row("data file", result["data_path"])
    _console.print(t)


@_cli.command()
def clear(
    yes: bool = typer.Option(False, "--yes", help="Skip confirmation"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Remove all tracked visit data. Cannot be undone."""
    _checkFormat(format)
    if not yes:
        if format == "json":
            _fail(format, "Refusing to clear without --yes")
        typer.confirm("Remove all tracked visit data?", abort=True)
    with _localState() as state:
        result = svcClear(state)
    if format == "json":
        print(json.dumps({"ok": True, **result}))
    else:
        _console.print(f"[green]Cleared[/green] {result['cleared']} notes")


# ── settings ─────────────────────────────────────────────────


@_settings_cli.command("list")
def settings_list(
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Show tracker settings."""
    _checkFormat(format)
    with _localState() as state:
        current = svcGetSettings(state)
    if format == "json":
        print(json.dumps(current))
        return
    defaults = TrackerSettings().model_dump()
    ranking = ["max_items", "exclude_paths", "max_age", "record_on_every_visit"]
    display = ["open_in_new_tab", "show_frecency_badge", "show_score_badge"]
    _renderSection("Ranking", [(k, current[k], defaults[k]) for k in ranking])
    _renderSection("Display", [(k, current[k], defaults[k]) for k in display])


@_settings_cli.command("get")
def settings_get(
    key: str = typer.Argument(help="Setting name, e.g. max_age"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Get a single tracker setting."""
    _checkFormat(format)
    ann = _getFieldAnnotation(TrackerSettings, key)
    if ann is None:
        _fail(format, f"Key not found: {key}", "Key not found")
    with _localState() as state:
        value = svcGetSettings(state)[key]
    if format == "json":
        print(json.dumps({"key": key, "value": value, "type": _annStr(ann)}))
    else:
        _console.print(f"[bold]{key}[/bold] = {_fmtVal(value)}  [dim]({_annStr(ann)})[/dim]")


@_settings_cli.command("set")
def settings_set(
    key: str = typer.Argument(help="Setting name"),
    value: str = typer.Argument(help="Value (type-coerced via schema)"),
    yes: bool = typer.Option(False, "--yes", help="Apply even if aging would prune notes"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Set a tracker setting. Lowering max_age ages scores immediately."""
    _checkFormat(format)
    ann = _getFieldAnnotation(TrackerSettings, key)
    if ann is None:
        _fail(format, f"Key not found: {key}", "Key not found")
    try:
        coerced = _coerceTyped(value, ann)
    except ValueError as e:
        _fail(format, str(e), "Invalid")

    with _localState() as state:
        if key == "max_age" and not yes:
            preview = svcAgingPreview(state, coerced)
            if preview["would_prune"]:
                _fail(
                    format,
                    f"Reducing to {coerced:g} will prune {preview['would_prune']} note(s) "
                    f"(current total: {preview['total_score']:.1f}). Re-run with --yes.",
                    "Would prune",
                )
        try:
            result = svcUpdateSettings(state, {key: coerced})
        except ValidationError as e:
            _fail(format, str(e), "Invalid value")

    if format == "json":
        print(json.dumps({"ok": True, "key": key, "value": coerced, "pruned": result["pruned"]}))
    else:
        _console.print(f"[green]Set[/green] {key} = {coerced!r}")
        if result["pruned"]:
            _console.print(f"[yellow]Pruned {result['pruned']} note(s)[/yellow]")


# ── config ───────────────────────────────────────────────────


@_config_cli.command("list")
def config_list(
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Pretty-print the current config grouped by section."""
    _checkFormat(format)
    cfg = loadConfig()

    if format == "json":
        print(json.dumps(cfg.model_dump()))
        raise typer.Exit()

    d = cfg.model_dump()
    dd = FrecentConfig().model_dump()
    _renderSection("Storage", [(k, d[k], dd[k]) for k in ("data_path", "debounce_seconds")])
    _renderSection("Server", [(k, d[k], dd[k]) for k in ("host", "port")])
    _renderSection("Logging", [("log_level", d["log_level"], dd["log_level"])])


@_config_cli.command("get")
def config_get(
    key: str = typer.Argument(help="Config key, e.g. port"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Get a single config value."""
    _checkFormat(format)
    ann = _getFieldAnnotation(FrecentConfig, key)
    if ann is None:
        _fail(format, f"Key not found: {key}", "Key not found")
    value = loadConfig().model_dump()[key]
    if format == "json":
        print(json.dumps({"key": key, "value": value, "type": _annStr(ann)}))
    else:
        _console.print(f"[bold]{key}[/bold] = {_fmtVal(value)}  [dim]({_annStr(ann)})[/dim]")


@_config_cli.command("set")
def config_set(
    key: str = typer.Argument(help="Config key"),
    value: str = typer.Argument(help="Value (type-coerced via schema)"),
    format: str = typer.Option("human", "--format", "-f", help=_FORMAT_HELP),
) -> None:
    """Set a config value."""
    _checkFormat(format)
    from frecent.config import CONFIG_PATH

    ann = _getFieldAnnotation(FrecentConfig, key)
    if ann is None:
        _fail(format, f"Key not found: {key}", "Key not found")
    try:
        coerced = _coerceTyped(value, ann)
    except ValueError as e:
        _fail(format, str(e), "Invalid")

    raw: dict = {}
    if CONFIG_PATH.exists():
        with contextlib.suppress(json.JSONDecodeError):
            raw = json.loads(CONFIG_PATH.read_text())
    raw[key] = coerced

    try:
        FrecentConfig(**raw)
    except ValidationError as e:
        _fail(format, str(e), "Invalid value")

    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(json.dumps(raw, indent=2) + "\n")
    if format == "json":
        print(json.dumps({"ok": True, "key": key, "value": coerced}))
    else:
        _console.print(f"[green]Set[/green] {key} = {coerced!r}")


def main() -> None:
    _cli()


if __name__ == "__main__":
    main()
