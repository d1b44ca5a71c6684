"""
Commandes de decouverte et de synthese.

- search : suggestions classees pour un titre (et completion fantome)
- recommend : recommandations d'apres le profil de gouts
- stats : statistiques de la bibliotheque
"""

import asyncio
from typing import Annotated, Optional

import typer
from rich.panel import Panel
from rich.table import Table

from mediastack.adapters.cli.commands.library_commands import load_library
from mediastack.adapters.cli.helpers import (
    close_providers,
    console,
    format_hours,
    format_rating,
    items_table,
    suppress_loguru,
    with_container,
)
from mediastack.core.value_objects import MediaKind, provider_family_for
from mediastack.services.recommender import RecommendationMode
from mediastack.services.stats import compute_stats


# ============================================================================
# search
# ============================================================================


def search(
    kind: Annotated[MediaKind, typer.Argument(help="Type de media")],
    query: Annotated[str, typer.Argument(help="Titre recherche")],
) -> None:
    """Affiche les suggestions classees pour un titre."""
    asyncio.run(_search_async(kind, query))


@with_container(requires_db=False)
async def _search_async(container, kind: MediaKind, query: str) -> None:
    """Implementation async de la commande search."""
    if provider_family_for(kind) is None:
        console.print(f"[yellow]Aucun fournisseur pour le type {kind.value}.[/yellow]")
        return

    session = container.suggestion_session(debounce_seconds=0)
    try:
        with suppress_loguru():
            session.update_query(query, kind)
            await session.wait_idle()
    finally:
        await close_providers(container)

    state = session.state
    if not state.suggestions:
        console.print(f"[yellow]{state.status or 'Aucune correspondance.'}[/yellow]")
        return

    table = Table(title=f"Suggestions pour '{query}'")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Titre", style="bold")
    table.add_column("Annee")
    table.add_column("Score", justify="right")
    table.add_column("ID", style="dim")
    for rank, candidate in enumerate(state.suggestions, start=1):
        table.add_row(
            str(rank),
            candidate.title,
            candidate.subtitle or "",
            f"{candidate.score:.2f}",
            f"{candidate.family.value}:{candidate.provider_id}",
        )
    console.print(table)
    if state.ghost:
        console.print(f"Completion: [dim]{state.ghost}[/dim]")
    console.print(f"[dim]{state.status}[/dim]")


# ============================================================================
# recommend
# ============================================================================


def recommend(
    random_pick: Annotated[
        bool, typer.Option("--random", help="Une seule idee, tiree au hasard (ponderee)")
    ] = False,
) -> None:
    """Recommande des elements d'apres vos notes."""
    mode = RecommendationMode.RANDOM if random_pick else RecommendationMode.RANKED
    asyncio.run(_recommend_async(mode))


@with_container()
async def _recommend_async(container, mode: RecommendationMode) -> None:
    """Implementation async de la commande recommend."""
    library, _ = load_library(container)
    engine = container.recommendation_engine()

    try:
        with suppress_loguru():
            with console.status("[cyan]Calcul des recommandations..."):
                result = await engine.recommend(library.items, mode)
    finally:
        await close_providers(container)

    if result.profile.tag_names:
        console.print(f"[dim]Vos genres: {', '.join(result.profile.tag_names[:6])}[/dim]")

    if not result.picks:
        console.print(f"[yellow]{result.status}[/yellow]")
        return

    table = Table(title=result.status)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Titre", style="bold")
    table.add_column("Type")
    table.add_column("Score", justify="right")
    table.add_column("Tags", style="cyan")
    for rank, pick in enumerate(result.picks, start=1):
        table.add_row(
            str(rank),
            pick.candidate.title,
            pick.candidate.kind.value,
            f"{pick.score:.2f}",
            ", ".join(pick.tags[:4]),
        )
    console.print(table)


# ============================================================================
# stats
# ============================================================================


def stats(
    exclude: Annotated[
        Optional[list[MediaKind]],
        typer.Option("--exclude", "-x", help="Type exclu du total termine (repetable)"),
    ] = None,
) -> None:
    """Affiche les statistiques de la bibliotheque."""
    asyncio.run(_stats_async(exclude or []))


@with_container()
async def _stats_async(container, exclude: list[MediaKind]) -> None:
    """Implementation async de la commande stats."""
    library, _ = load_library(container)
    summary = compute_stats(library.items, exclude)

    lines = [
        f"Elements: [bold]{summary.total}[/bold]",
        f"Termines: [bold]{summary.completed_count}[/bold] ({format_hours(summary.completed_minutes)})",
        f"Revisionnages: {summary.total_rewatches}",
    ]
    if summary.average_runtime is not None:
        lines.append(f"Duree moyenne: {summary.average_runtime:g} min")
    if exclude:
        lines.append(f"[dim]Exclus: {', '.join(k.value for k in exclude)}[/dim]")
    console.print(Panel("\n".join(lines), title="Bibliotheque", border_style="cyan"))

    table = Table(title="Par type")
    table.add_column("Type")
    table.add_column("Elements", justify="right")
    table.add_column("Note moyenne", justify="right")
    for kind, count in sorted(summary.by_kind.items(), key=lambda entry: entry[1], reverse=True):
        table.add_row(kind.value, str(count), format_rating(summary.average_rating_by_kind.get(kind)))
    console.print(table)

    if summary.by_status:
        console.print(
            "Statuts: "
            + ", ".join(f"{status.value} {count}" for status, count in summary.by_status.items())
        )
    if summary.top_tags:
        console.print("Tags: " + ", ".join(f"{tag} ({count})" for tag, count in summary.top_tags))
    if summary.recent_completed:
        console.print(items_table(summary.recent_completed, title="Derniers termines"))
