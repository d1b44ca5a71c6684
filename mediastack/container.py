"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour la CLI : configuration,
base de donnees, clients fournisseurs, stockage et services du moteur.
"""

from typing import Optional

from dependency_injector import containers, providers
from sqlmodel import Session

from .adapters.api.anilist_client import AniListClient
from .adapters.api.cache import APICache
from .adapters.api.igdb_client import IGDBClient
from .adapters.api.tmdb_client import TMDBClient
from .config import Settings
from .core.ports.api_clients import IMetadataProvider, ITrendingFeed
from .core.value_objects import ProviderFamily
from .infrastructure.persistence.database import create_db_engine, init_db
from .infrastructure.persistence.local_backup import JsonLibraryBackup
from .infrastructure.persistence.repositories import SQLModelLibraryStore
from .infrastructure.persistence.synced_store import SyncedLibraryStore
from .infrastructure.persistence.undo_slot import UndoSlot
from .services.library import LibraryService
from .services.progress import ProgressStatusEngine
from .services.recommender import RecommendationEngine
from .services.resolver import MetadataResolver
from .services.suggestions import SuggestionRanker, SuggestionSession


def build_provider_registry(
    settings: Settings,
    tmdb: TMDBClient,
    igdb: IGDBClient,
    anilist: AniListClient,
) -> dict[ProviderFamily, IMetadataProvider]:
    """Fournisseurs actifs : un fournisseur sans identifiants n'est pas enregistre."""
    registry: dict[ProviderFamily, IMetadataProvider] = {ProviderFamily.ANILIST: anilist}
    if settings.tmdb_enabled:
        registry[ProviderFamily.TMDB] = tmdb
    if settings.igdb_enabled:
        registry[ProviderFamily.IGDB] = igdb
    return registry


def build_trending_feed(settings: Settings, tmdb: TMDBClient) -> Optional[ITrendingFeed]:
    """Flux de tendances TMDB, None si TMDB n'est pas configure."""
    return tmdb if settings.tmdb_enabled else None


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Cree les tables une fois
        store = container.library_store()
        engine = container.recommendation_engine()
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - engine partage, Resource pour initialisation unique
    db_engine = providers.Singleton(create_db_engine, database_url=config.provided.database_url)
    database = providers.Resource(init_db, engine=db_engine)

    # Session factory - nouvelle session a chaque appel
    session = providers.Factory(Session, db_engine)

    # Cache API - Singleton pour partage entre clients
    api_cache = providers.Singleton(APICache, cache_dir=config.provided.cache_dir)

    # Clients fournisseurs - crees meme sans identifiants, filtres par le registre
    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
        result_limit=config.provided.provider_result_limit,
    )
    igdb_client = providers.Singleton(
        IGDBClient,
        client_id=config.provided.igdb_client_id,
        client_secret=config.provided.igdb_client_secret,
        cache=api_cache,
        result_limit=config.provided.provider_result_limit,
    )
    anilist_client = providers.Singleton(
        AniListClient,
        cache=api_cache,
        result_limit=config.provided.provider_result_limit,
    )

    provider_registry = providers.Singleton(
        build_provider_registry,
        settings=config,
        tmdb=tmdb_client,
        igdb=igdb_client,
        anilist=anilist_client,
    )
    trending_feed = providers.Singleton(build_trending_feed, settings=config, tmdb=tmdb_client)

    # Stockage - distant (base) + sauvegarde locale JSON
    remote_store = providers.Factory(SQLModelLibraryStore, session=session)
    local_backup = providers.Singleton(JsonLibraryBackup, backup_dir=config.provided.backup_dir)
    library_store = providers.Factory(SyncedLibraryStore, remote=remote_store, local=local_backup)
    undo_slot = providers.Singleton(
        UndoSlot,
        directory=config.provided.cache_dir,
        window_seconds=config.provided.undo_window_seconds,
    )

    # Services du moteur
    progress_engine = providers.Singleton(ProgressStatusEngine)
    suggestion_ranker = providers.Singleton(SuggestionRanker)
    metadata_resolver = providers.Factory(MetadataResolver, providers=provider_registry)
    suggestion_session = providers.Factory(
        SuggestionSession,
        providers=provider_registry,
        ranker=suggestion_ranker,
        debounce_seconds=config.provided.suggestion_debounce_seconds,
    )
    recommendation_engine = providers.Factory(
        RecommendationEngine,
        providers=provider_registry,
        trending_feed=trending_feed,
    )

    # Proprietaire de la bibliotheque - Factory : items passes a l'appel
    # Utiliser: container.library_service(items=result.items)
    library_service = providers.Factory(
        LibraryService,
        engine=progress_engine,
        undo_window_seconds=config.provided.undo_window_seconds,
    )
