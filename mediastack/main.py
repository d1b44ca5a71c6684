"""
Point d'entrée CLI de MediaStack.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from .adapters.cli.commands import (
    add,
    delete,
    list_items,
    move,
    progress,
    recommend,
    restore,
    search,
    stats,
    update,
)
from .config import Settings
from .container import Container
from .logging_config import configure_logging

__version__ = "0.1.0"

app = typer.Typer(
    name="mediastack",
    help="Suivi personnel de films, series, anime, manga, livres et jeux",
)
container = Container()

# Etat global pour les options de verbosite
state = {"verbose": 0, "quiet": False}


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv)"),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """MediaStack - Suivi de media personnel."""
    state["verbose"] = verbose
    state["quiet"] = quiet
    configure_logging(get_config(), verbosity=verbose, quiet=quiet)


# Monter les commandes depuis commands/
app.command()(add)
app.command(name="list")(list_items)
app.command()(update)
app.command()(progress)
app.command()(move)
app.command()(delete)
app.command()(restore)
app.command()(search)
app.command()(recommend)
app.command()(stats)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration MediaStack")
    typer.echo(f"Utilisateur : {config.user_id}")
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"Sauvegarde locale : {config.backup_dir}")
    typer.echo(f"Cache API : {config.cache_dir}")
    typer.echo(f"API TMDB : {'activée' if config.tmdb_enabled else 'désactivée'}")
    typer.echo(f"API IGDB : {'activée' if config.igdb_enabled else 'désactivée'}")
    typer.echo("API AniList : activée")
    typer.echo(f"Niveau de log : {config.log_level}")
    typer.echo(f"Journal : {config.log_file or 'désactivé'}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"MediaStack v{__version__}")


def main() -> None:
    """Point d'entrée de l'application."""
    app()


if __name__ == "__main__":
    main()
