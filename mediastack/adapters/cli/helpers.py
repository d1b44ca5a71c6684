"""
Utilitaires partages pour les commandes CLI de MediaStack.

Ce module fournit :
- suppress_loguru : context manager pour desactiver/reactiver les logs loguru
- with_container : decorateur injectant un container initialise
- console : instance Rich Console partagee
- find_item : recherche d'un element par prefixe d'identifiant
- rendu Rich des elements (tableau, progression, note)
"""

from contextlib import contextmanager
from functools import wraps
from typing import Optional

from loguru import logger as loguru_logger
from rich.console import Console
from rich.table import Table

from mediastack.container import Container
from mediastack.core.entities import LibraryItem
from mediastack.core.value_objects import ItemStatus
from mediastack.services.progress import effective_progress

console = Console()

STATUS_STYLES = {
    ItemStatus.PLANNED: "blue",
    ItemStatus.IN_PROGRESS: "yellow",
    ItemStatus.DROPPED: "red",
    ItemStatus.COMPLETED: "green",
}


@contextmanager
def suppress_loguru():
    """
    Context manager pour desactiver les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("mediastack")
    try:
        yield
    finally:
        loguru_logger.enable("mediastack")


def with_container(requires_db: bool = True):
    """
    Decorateur qui injecte un container initialise en premier argument.

    Args:
        requires_db: Si True (defaut), initialise la base de donnees.

    Usage:
        @with_container()
        async def my_command(container, ...):
            config = container.config()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            container = Container()
            if requires_db:
                container.database.init()
            return await func(container, *args, **kwargs)
        return wrapper
    return decorator


def find_item(items: list[LibraryItem], id_prefix: str) -> Optional[LibraryItem]:
    """
    Retrouve un element par son identifiant ou un prefixe non ambigu.

    Returns:
        L'element, ou None si aucun ou plusieurs elements correspondent
    """
    prefix = id_prefix.strip().lower()
    if not prefix:
        return None
    matches = [i for i in items if i.id and i.id.lower().startswith(prefix)]
    exact = [i for i in matches if i.id.lower() == prefix]
    if exact:
        return exact[0]
    return matches[0] if len(matches) == 1 else None


def format_progress(item: LibraryItem) -> str:
    """Progression lisible : "3/12", "3/?" ou "" si inconnue."""
    current, total = effective_progress(item)
    if current is None and total is None:
        return ""
    return f"{current if current is not None else 0}/{total if total is not None else '?'}"


def format_rating(rating: Optional[float]) -> str:
    if rating is None:
        return ""
    return f"{rating:g}/10"


def format_hours(minutes: int) -> str:
    """Duree en heures : une decimale sous 10h, arrondie au-dela."""
    if minutes <= 0:
        return "0h"
    hours = minutes / 60
    if hours < 10:
        return f"{hours:.1f}h"
    return f"{round(hours)}h"


def items_table(items: list[LibraryItem], title: Optional[str] = None) -> Table:
    """Construit le tableau Rich d'une liste d'elements."""
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Titre", style="bold")
    table.add_column("Type")
    table.add_column("Statut")
    table.add_column("Note", justify="right")
    table.add_column("Progression", justify="right")
    table.add_column("Tags", style="cyan")

    for item in items:
        style = STATUS_STYLES.get(item.status, "white")
        table.add_row(
            (item.id or "")[:8],
            item.title,
            item.kind.value,
            f"[{style}]{item.status.value}[/{style}]",
            format_rating(item.rating),
            format_progress(item),
            ", ".join(item.tags),
        )
    return table


async def close_providers(container) -> None:
    """Ferme les clients HTTP des fournisseurs et le cache API."""
    for client in (container.tmdb_client(), container.igdb_client(), container.anilist_client()):
        await client.close()
    container.api_cache().close()
