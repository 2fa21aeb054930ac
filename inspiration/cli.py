from __future__ import annotations
from datetime import UTC, datetime
from pathlib import Path
from typing import List, Optional
import json
import typer
from rich.console import Console
from rich.table import Table
from rich.markdown import Markdown
from rich.markup import escape

from .config import load_settings
from .db import init_db
from .debuglog import DebugLog, LogEntry
from .errors import InspirationError, ValidationError
from .formatter import format_text
from .gateway import build_gateway
from .logs import setup_logging
from .models import TagBase
from .services import (
    capture_note, clear_all, create_note, delete_note,
    get_note, list_notes, update_note,
)
from .tags import filter_notes, tag_counts

app = typer.Typer(help="Inspiration notes: AI-tagged notes from the terminal")
console = Console()


@app.callback()
def _boot():
    setup_logging(load_settings().log_level)
    init_db()


def _parse_tag(raw: str) -> TagBase:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip() or not value.strip():
        raise typer.BadParameter(f"expected key=value, got {raw!r}")
    return TagBase(key=key.strip(), value=value.strip())


def _fail(exc: InspirationError) -> None:
    console.print(f"[red]Error[/]: {escape(str(exc))}")
    raise typer.Exit(1)


def _print_debug(entries: list[LogEntry]) -> None:
    if entries:
        e = entries[-1]
        console.print(f"[dim]{e.timestamp} {e.type} {e.model} ({len(e.content)} chars)[/]")


@app.command()
def add(
    content: str = typer.Argument(...),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-g", help="key=value, repeatable"),
):
    """Store a note with hand-written tags (no AI call)."""
    try:
        n = create_note(content, [_parse_tag(t) for t in tag or []])
    except InspirationError as e:
        _fail(e)
    console.print(f"[green]Created[/] #{n.id} ({len(n.tags)} tags)")


@app.command()
def capture(
    content: str = typer.Argument(...),
    debug: bool = typer.Option(False, "--debug", help="print AI traffic"),
):
    """Let the AI tag the note, then store it."""
    settings = load_settings()
    debug_log = DebugLog(limit=settings.debug_log_limit)
    if debug:
        debug_log.subscribe(_print_debug)
    gateway = build_gateway(settings, debug_log)
    try:
        n = capture_note(content, gateway)
    except InspirationError as e:
        _fail(e)
    finally:
        debug_log.close()
    console.print(f"[green]Captured[/] #{n.id}: " + ", ".join(f"{t.key}={t.value}" for t in n.tags))


@app.command("list")
def _list(
    tag: Optional[List[str]] = typer.Option(None, "--tag", help="tag value; repeat to AND"),
):
    notes = filter_notes(list_notes(), tag or [])
    table = Table(title="Inspiration notes")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Content", style="bold")
    table.add_column("Tags", style="magenta")
    table.add_column("Created")
    for n in notes:
        table.add_row(
            str(n.id), n.content if len(n.content) <= 60 else n.content[:57] + "...",
            ", ".join(t.value for t in n.tags),
            n.created_at.isoformat(timespec="minutes"),
        )
    console.print(table)


@app.command()
def show(note_id: int):
    n = get_note(note_id)
    if not n:
        console.print(f"[red]Not found[/]: {note_id}")
        raise typer.Exit(1)
    console.rule(f"#{n.id}")
    if n.tags:
        console.print("[dim]tags:[/] " + ", ".join(f"{t.key}={t.value}" for t in n.tags))
    console.print(Markdown(n.content))


@app.command()
def tags():
    """Tag values by number of notes, most common first."""
    table = Table(title="Tags")
    table.add_column("Value", style="magenta")
    table.add_column("Notes", justify="right")
    for value, count in tag_counts(list_notes()):
        table.add_row(value, str(count))
    console.print(table)


@app.command()
def edit(note_id: int, content: str = typer.Argument(...)):
    try:
        n = update_note(note_id, content)
    except InspirationError as e:
        _fail(e)
    if n is None:
        console.print(f"[yellow]No note[/] #{note_id}; nothing changed")
        return
    console.print(f"[green]Updated[/] #{n.id}")


@app.command()
def delete(note_id: int):
    delete_note(note_id)
    console.print(f"[yellow]Deleted[/] #{note_id}")


@app.command()
def clear(yes: bool = typer.Option(False, "--yes", "-y", help="skip confirmation")):
    """Delete every note and tag. Cannot be undone."""
    if not yes:
        typer.confirm("Delete ALL notes and tags?", abort=True)
    count = clear_all()
    console.print(f"[red]Cleared[/] {count} notes")


@app.command("format")
def format_(text: str = typer.Argument(...)):
    """Space out CJK and Latin text locally (no AI)."""
    console.print(format_text(text), markup=False, highlight=False)


@app.command()
def export(to: Path = typer.Option(..., "--to")):
    notes = list_notes()
    payload = [
        {
            "id": n.id,
            "content": n.content,
            "tags": [{"key": t.key, "value": t.value} for t in n.tags],
            "created_at": n.created_at.isoformat(),
            "updated_at": n.updated_at.isoformat(),
        }
        for n in notes
    ]
    to.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    console.print(f"[green]Exported[/] {len(payload)} notes → {to}")


def _stamp(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    dt = datetime.fromisoformat(raw)
    # stored as naive UTC
    return dt.astimezone(UTC).replace(tzinfo=None) if dt.tzinfo else dt


def _import_entry(item) -> dict:
    try:
        return {
            "content": item["content"],
            "tags": [TagBase.model_validate(t) for t in item.get("tags") or []],
            "created_at": _stamp(item.get("created_at")),
            "updated_at": _stamp(item.get("updated_at")),
        }
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ValidationError(f"bad note entry: {e!r}") from e


@app.command("import")
def import_(from_: Path = typer.Option(..., "--from")):
    """Load notes written by `export`; all entries are checked before any is stored."""
    try:
        data = json.loads(from_.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        console.print(f"[red]Error[/]: cannot read {from_}: {escape(str(e))}")
        raise typer.Exit(1)
    try:
        if not isinstance(data, list):
            raise ValidationError("expected a JSON list of notes")
        entries = [_import_entry(item) for item in data]
        for entry in entries:
            if not isinstance(entry["content"], str) or not entry["content"].strip():
                raise ValidationError("Note content must not be empty")
        # oldest first so notes with equal timestamps keep the original order
        for entry in reversed(entries):
            create_note(**entry)
    except InspirationError as e:
        _fail(e)
    console.print(f"[green]Imported[/] {len(entries)} notes")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
    reload: bool = typer.Option(False, "--reload"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("inspiration.app:create_app", factory=True, host=host, port=port, reload=reload)


def main():
    app()


if __name__ == "__main__":
    main()
