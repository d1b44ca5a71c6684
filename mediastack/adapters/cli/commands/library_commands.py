"""
Commandes de gestion de la bibliotheque.

- add : ajout d'un element, auto-rempli depuis le fournisseur du type
- list : affichage filtre, trie et regroupe par date
- update : mise a jour partielle d'un element
- progress : avance (ou recule) la progression
- move : changement de statut
- delete / restore : suppression avec annulation limitee dans le temps
"""

import asyncio
from datetime import date
from typing import Annotated, Any, Optional

import typer

from mediastack.adapters.cli.helpers import (
    close_providers,
    console,
    find_item,
    format_progress,
    items_table,
    suppress_loguru,
    with_container,
)
from mediastack.core.entities import LibraryItem
from mediastack.core.value_objects import ItemStatus, MediaKind, provider_family_for
from mediastack.services.library import LibraryService
from mediastack.services.views import GroupMode, SortMode, filter_items, group_items, sort_items


def load_library(container) -> tuple[LibraryService, str]:
    """Charge la bibliotheque de l'utilisateur configure dans un LibraryService."""
    user_id = container.config().user_id
    result = container.library_store().load(user_id)
    if not result.remote_ok:
        console.print(f"[yellow]{result.status}[/yellow]")
    return container.library_service(items=result.items), user_id


def save_library(container, library: LibraryService, user_id: str) -> None:
    """Sauvegarde la bibliotheque et signale les ecritures en echec."""
    result = container.library_store().save(user_id, library.items)
    if result.remote_ok and result.local_ok:
        style = "green"
    elif result.remote_ok or result.local_ok:
        style = "yellow"
    else:
        style = "red"
    console.print(f"[{style}]{result.status}[/{style}]")


def _resolve_item(library: LibraryService, item_id: str) -> Optional[LibraryItem]:
    item = find_item(library.items, item_id)
    if item is None:
        console.print(f"[red]Element introuvable ou ambigu:[/red] {item_id}")
    return item


def _build_update(**options: Any) -> dict[str, Any]:
    """Ne garde que les options explicitement passees."""
    return {name: value for name, value in options.items() if value is not None}


# ============================================================================
# add
# ============================================================================


def add(
    title: Annotated[str, typer.Argument(help="Titre de l'element")],
    kind: Annotated[MediaKind, typer.Option("--kind", "-k", help="Type de media")] = MediaKind.MOVIE,
    status: Annotated[ItemStatus, typer.Option("--status", "-s", help="Statut")] = ItemStatus.COMPLETED,
    rating: Annotated[Optional[float], typer.Option("--rating", "-r", help="Note 0-10")] = None,
    finished: Annotated[Optional[str], typer.Option("--date", help="Date de fin (YYYY-MM-DD)")] = None,
    note: Annotated[Optional[str], typer.Option("--note", help="Note libre")] = None,
    tags: Annotated[Optional[list[str]], typer.Option("--tag", "-t", help="Tag (repetable)")] = None,
    rewatch: Annotated[int, typer.Option("--rewatch", help="Nombre de revisionnages")] = 0,
    current: Annotated[Optional[int], typer.Option("--current", help="Progression courante")] = None,
    total: Annotated[Optional[int], typer.Option("--total", help="Progression totale")] = None,
    pick: Annotated[int, typer.Option("--pick", help="Rang de la suggestion a utiliser")] = 1,
    autofill: Annotated[
        bool, typer.Option("--autofill/--no-autofill", help="Auto-remplissage depuis le fournisseur")
    ] = True,
) -> None:
    """Ajoute un element a la bibliotheque."""
    asyncio.run(
        _add_async(
            title=title,
            kind=kind,
            status=status,
            rating=rating,
            finished=finished,
            note=note,
            tags=tags or [],
            rewatch=rewatch,
            current=current,
            total=total,
            pick=pick,
            autofill=autofill,
        )
    )


@with_container()
async def _add_async(
    container,
    title: str,
    kind: MediaKind,
    status: ItemStatus,
    rating: Optional[float],
    finished: Optional[str],
    note: Optional[str],
    tags: list[str],
    rewatch: int,
    current: Optional[int],
    total: Optional[int],
    pick: int,
    autofill: bool,
) -> None:
    """Implementation async de la commande add."""
    try:
        finished_on = date.fromisoformat(finished) if finished else None
    except ValueError:
        console.print(f"[red]Date invalide:[/red] {finished}")
        raise typer.Exit(code=1)

    draft = LibraryItem(
        title=title,
        kind=kind,
        status=status,
        rating=rating,
        date_finished=finished_on,
        note=note,
        manual_tags=tuple(tags),
        rewatch_count=rewatch,
        manual_progress_current=current,
        manual_progress_total=total,
    )

    if autofill and provider_family_for(kind) is not None:
        try:
            draft = await _autofill(container, draft, pick)
        finally:
            await close_providers(container)

    library, user_id = load_library(container)
    item = library.add(draft)
    if item is None:
        console.print("[red]Titre vide: rien a ajouter.[/red]")
        raise typer.Exit(code=1)

    console.print(items_table([item], title="Ajoute"))
    save_library(container, library, user_id)


async def _autofill(container, draft: LibraryItem, pick: int) -> LibraryItem:
    """Recherche le titre chez le fournisseur et fusionne la suggestion choisie."""
    session = container.suggestion_session(debounce_seconds=0)
    with suppress_loguru():
        session.update_query(draft.title, draft.kind)
        await session.wait_idle()

    state = session.state
    candidate = session.accept(pick - 1)
    if candidate is None:
        console.print(f"[yellow]Pas d'auto-remplissage[/yellow] ({state.status or 'aucun fournisseur'})")
        return draft

    resolution = await container.metadata_resolver().resolve(draft, candidate)
    style = "green" if resolution.details_loaded else "yellow"
    console.print(f"[{style}]{resolution.status}[/{style}] {candidate.title}")
    return resolution.draft


# ============================================================================
# list
# ============================================================================


def list_items(
    status: Annotated[Optional[ItemStatus], typer.Option("--status", "-s", help="Filtrer par statut")] = None,
    query: Annotated[Optional[str], typer.Option("--query", "-q", help="Recherche titre/note/tags")] = None,
    sort: Annotated[SortMode, typer.Option("--sort", help="Ordre d'affichage")] = SortMode.NEWEST,
    group: Annotated[GroupMode, typer.Option("--group", "-g", help="Regroupement par date")] = GroupMode.NONE,
) -> None:
    """Affiche la bibliotheque."""
    asyncio.run(_list_async(status, query, sort, group))


@with_container()
async def _list_async(
    container,
    status: Optional[ItemStatus],
    query: Optional[str],
    sort: SortMode,
    group: GroupMode,
) -> None:
    """Implementation async de la commande list."""
    library, _ = load_library(container)
    items = sort_items(filter_items(library.items, status, query), sort)

    if not items:
        console.print("[yellow]Aucun element.[/yellow]")
        return

    for label, members in group_items(items, group):
        console.print(items_table(members, title=f"{label} ({len(members)})"))


# ============================================================================
# update / progress / move
# ============================================================================


def update(
    item_id: Annotated[str, typer.Argument(help="ID (ou prefixe) de l'element")],
    title: Annotated[Optional[str], typer.Option("--title", help="Titre")] = None,
    kind: Annotated[Optional[MediaKind], typer.Option("--kind", "-k", help="Type de media")] = None,
    status: Annotated[Optional[ItemStatus], typer.Option("--status", "-s", help="Statut")] = None,
    rating: Annotated[Optional[float], typer.Option("--rating", "-r", help="Note 0-10")] = None,
    finished: Annotated[Optional[str], typer.Option("--date", help="Date de fin (YYYY-MM-DD)")] = None,
    note: Annotated[Optional[str], typer.Option("--note", help="Note libre")] = None,
    tags: Annotated[Optional[list[str]], typer.Option("--tag", "-t", help="Tags manuels (remplacent)")] = None,
    rewatch: Annotated[Optional[int], typer.Option("--rewatch", help="Nombre de revisionnages")] = None,
    current: Annotated[Optional[int], typer.Option("--current", help="Progression courante")] = None,
    total: Annotated[Optional[int], typer.Option("--total", help="Progression totale")] = None,
) -> None:
    """Met a jour un element (seules les options passees sont modifiees)."""
    changes = _build_update(
        title=title,
        kind=kind,
        status=status,
        rating=rating,
        date_finished=finished,
        note=note,
        manual_tags=tuple(tags) if tags else None,
        rewatch_count=rewatch,
        manual_progress_current=current,
        manual_progress_total=total,
    )
    asyncio.run(_update_async(item_id, changes))


@with_container()
async def _update_async(container, item_id: str, changes: dict[str, Any]) -> None:
    """Implementation async de la commande update."""
    if not changes:
        console.print("[yellow]Aucune modification demandee.[/yellow]")
        return

    library, user_id = load_library(container)
    item = _resolve_item(library, item_id)
    if item is None:
        raise typer.Exit(code=1)

    try:
        updated = library.apply(item.id, changes)
    except ValueError as e:
        console.print(f"[red]Valeur invalide:[/red] {e}")
        raise typer.Exit(code=1)
    console.print(items_table([updated], title="Mis a jour"))
    save_library(container, library, user_id)


def progress(
    item_id: Annotated[str, typer.Argument(help="ID (ou prefixe) de l'element")],
    by: Annotated[int, typer.Option("--by", "-b", help="Pas (negatif pour reculer)")] = 1,
) -> None:
    """Avance la progression d'un element (auto-complete au dernier episode)."""
    asyncio.run(_progress_async(item_id, by))


@with_container()
async def _progress_async(container, item_id: str, by: int) -> None:
    """Implementation async de la commande progress."""
    library, user_id = load_library(container)
    item = _resolve_item(library, item_id)
    if item is None:
        raise typer.Exit(code=1)

    updated = library.increment(item.id, by)
    console.print(f"{updated.title}: {format_progress(updated)} ({updated.status.value})")
    if updated.status is ItemStatus.COMPLETED and item.status is not ItemStatus.COMPLETED:
        console.print("[green]Termine ![/green]")
    save_library(container, library, user_id)


def move(
    item_id: Annotated[str, typer.Argument(help="ID (ou prefixe) de l'element")],
    status: Annotated[ItemStatus, typer.Argument(help="Nouveau statut")],
) -> None:
    """Change le statut d'un element."""
    asyncio.run(_move_async(item_id, status))


@with_container()
async def _move_async(container, item_id: str, status: ItemStatus) -> None:
    """Implementation async de la commande move."""
    library, user_id = load_library(container)
    item = _resolve_item(library, item_id)
    if item is None:
        raise typer.Exit(code=1)

    updated = library.move(item.id, status)
    if updated is None:
        console.print(f"[dim]{item.title} est deja {status.value}.[/dim]")
        return
    console.print(f"{updated.title} -> [bold]{updated.status.value}[/bold]")
    save_library(container, library, user_id)


# ============================================================================
# delete / restore
# ============================================================================


def delete(
    item_id: Annotated[str, typer.Argument(help="ID (ou prefixe) de l'element")],
) -> None:
    """Supprime un element (annulable avec `restore` pendant quelques secondes)."""
    asyncio.run(_delete_async(item_id))


@with_container()
async def _delete_async(container, item_id: str) -> None:
    """Implementation async de la commande delete."""
    library, user_id = load_library(container)
    item = _resolve_item(library, item_id)
    if item is None:
        raise typer.Exit(code=1)

    token = library.remove(item.id)
    container.undo_slot().put(user_id, token)
    window = container.config().undo_window_seconds
    console.print(f"Supprime: [bold]{item.title}[/bold] ([dim]restore[/dim] pour annuler, {window:g}s)")
    save_library(container, library, user_id)


def restore() -> None:
    """Restaure le dernier element supprime."""
    asyncio.run(_restore_async())


@with_container()
async def _restore_async(container) -> None:
    """Implementation async de la commande restore."""
    library, user_id = load_library(container)
    token = container.undo_slot().take(user_id)
    if token is None:
        console.print("[yellow]Rien a restaurer.[/yellow]")
        return

    item = library.restore(token)
    if item is None:
        console.print("[yellow]Delai d'annulation depasse.[/yellow]")
        return
    console.print(f"Restaure: [bold]{item.title}[/bold]")
    save_library(container, library, user_id)
