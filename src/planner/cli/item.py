"""
Planner CLI - Attention item detail: notes, documents, photos and links.
"""

from collections.abc import Callable

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from planner.cli.attention import require_item
from planner.cli.common import connect_client, get_config
from planner.core.detail import Document, ItemDetailSync, Link, Note, Photo
from planner.core.remote import SubCollection, SyncClient, sub_collection_path
from planner.core.timestamps import time_ago

console = Console()
app = typer.Typer(help="Notes, documents, photos and links of one attention item")


def _open_detail(item_id: str) -> tuple[SyncClient, ItemDetailSync]:
    config = get_config()
    client = connect_client(config)
    item = require_item(client, item_id)
    detail = ItemDetailSync(client, author=config.author)
    detail.open(item_id, item)
    return client, detail


def _read(client: SyncClient, kind: SubCollection, item_id: str, parse: Callable) -> list:
    records: list = []
    client.get(sub_collection_path(kind, item_id), lambda snapshot: records.extend(parse(snapshot)))
    return records


@app.command()
def show(item_id: str = typer.Argument(..., help="Attention item id")) -> None:
    """Show an item with its notes, documents, photos and links."""
    client = connect_client()
    item = require_item(client, item_id)

    header = f"{item.biz}  [bold]{item.title}[/bold]  [dim]({item.status})[/dim]"
    console.print(Panel(item.detail or "[dim]No detail[/dim]", title=header, title_align="left"))

    notes: list[Note] = _read(client, SubCollection.NOTES, item_id, Note.newest_first)
    docs: list[Document] = _read(client, SubCollection.DOCUMENTS, item_id, Document.newest_first)
    photos: list[Photo] = _read(client, SubCollection.PHOTOS, item_id, Photo.newest_first)
    links: list[Link] = _read(client, SubCollection.LINKS, item_id, Link.newest_first)

    console.print(f"\n[bold]📝 Notes[/bold] ({len(notes)})")
    for note in notes:
        when = time_ago(note.created_at) if note.created_at else ""
        console.print(f"  [dim]{note.id}[/dim] [cyan]{note.author}[/cyan] [dim]{when}[/dim]")
        console.print(f"    {note.text}")

    console.print(f"\n[bold]📎 Docs[/bold] ({len(docs)})")
    for doc in docs:
        console.print(f"  [dim]{doc.id}[/dim] {doc.kind.icon} {doc.display_title}  [dim]{doc.url}[/dim]")

    console.print(f"\n[bold]📷 Photos[/bold] ({len(photos)})")
    for photo in photos:
        caption = f" {photo.caption}" if photo.caption else ""
        console.print(f"  [dim]{photo.id}[/dim] {photo.url}{caption}")

    console.print(f"\n[bold]🔗 Links[/bold] ({len(links)})")
    if links:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Link", style="dim", overflow="fold")
        table.add_column("Label")
        table.add_column("Item", overflow="fold")
        table.add_column("Target id", style="dim", overflow="fold")
        for link in links:
            table.add_row(link.id, link.label, link.display_title, link.target_id)
        console.print(table)


@app.command()
def note(
    item_id: str = typer.Argument(..., help="Attention item id"),
    text: str = typer.Argument(..., help="Note text"),
) -> None:
    """Add a note."""
    _, detail = _open_detail(item_id)
    key = detail.add_note(text)
    detail.close()
    if key is None:
        console.print("[yellow]Empty note; nothing added.[/yellow]")
        return
    console.print(f"[green]✓[/green] Added note {key}")


@app.command()
def doc(
    item_id: str = typer.Argument(..., help="Attention item id"),
    url: str = typer.Argument(..., help="URL or file path"),
    title: str = typer.Option("", "--title", "-t", help="Document name (defaults to the URL)"),
) -> None:
    """Attach a document."""
    _, detail = _open_detail(item_id)
    key = detail.add_doc(url, title)
    detail.close()
    if key is None:
        console.print("[yellow]Empty URL; nothing added.[/yellow]")
        return
    console.print(f"[green]✓[/green] Added document {key}")


@app.command()
def photo(
    item_id: str = typer.Argument(..., help="Attention item id"),
    url: str = typer.Argument(..., help="Image URL"),
    caption: str = typer.Option("", "--caption", "-c", help="Caption"),
) -> None:
    """Attach a photo by URL."""
    _, detail = _open_detail(item_id)
    key = detail.add_photo(url, caption)
    detail.close()
    if key is None:
        console.print("[yellow]Empty URL; nothing added.[/yellow]")
        return
    console.print(f"[green]✓[/green] Added photo {key}")


@app.command()
def link(
    item_id: str = typer.Argument(..., help="Attention item id"),
    target_id: str = typer.Argument(..., help="Item to link to"),
    label: str = typer.Option("", "--label", "-l", help="Relationship (default: Related)"),
) -> None:
    """Link two items in both directions."""
    _, detail = _open_detail(item_id)
    titles: dict[str, str] = {}
    detail.link_targets(lambda targets: titles.update(targets))
    keys = detail.add_link(target_id, label, titles.get(target_id))
    detail.close()
    if keys is None:
        console.print("[yellow]An item cannot be linked to itself.[/yellow]")
        return
    console.print(f"[green]✓[/green] Linked {item_id} ↔ {target_id}")


def _remove(item_id: str, remove: Callable[[ItemDetailSync, str], None], record_id: str) -> None:
    _, detail = _open_detail(item_id)
    remove(detail, record_id)
    detail.close()


@app.command()
def unlink(
    item_id: str = typer.Argument(..., help="Attention item id"),
    link_id: str = typer.Argument(..., help="Link record id (from `planner item show`)"),
) -> None:
    """Remove a link from this item (the other item keeps its side)."""
    _remove(item_id, ItemDetailSync.delete_link, link_id)
    console.print(f"[green]✓[/green] Removed link {link_id}")


@app.command(name="rm-note")
def rm_note(
    item_id: str = typer.Argument(..., help="Attention item id"),
    note_id: str = typer.Argument(..., help="Note id"),
) -> None:
    """Delete a note."""
    _remove(item_id, ItemDetailSync.delete_note, note_id)
    console.print(f"[green]✓[/green] Deleted note {note_id}")


@app.command(name="rm-doc")
def rm_doc(
    item_id: str = typer.Argument(..., help="Attention item id"),
    doc_id: str = typer.Argument(..., help="Document id"),
) -> None:
    """Delete a document."""
    _remove(item_id, ItemDetailSync.delete_doc, doc_id)
    console.print(f"[green]✓[/green] Deleted document {doc_id}")


@app.command(name="rm-photo")
def rm_photo(
    item_id: str = typer.Argument(..., help="Attention item id"),
    photo_id: str = typer.Argument(..., help="Photo id"),
) -> None:
    """Delete a photo."""
    _remove(item_id, ItemDetailSync.delete_photo, photo_id)
    console.print(f"[green]✓[/green] Deleted photo {photo_id}")
