"""
Tests unitaires pour les commandes CLI principales.

Tests couvrant:
- add: ajout avec et sans auto-remplissage, validation de la date
- update / progress / move: mises a jour partielles, auto-completion
- delete / restore: jeton d'annulation conserve entre deux commandes
- search / recommend / stats: affichage des resultats des services
- aide et version de l'application
"""

import io
from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

from mediastack.adapters.cli.commands.discovery_commands import (
    _recommend_async,
    _search_async,
    _stats_async,
)
from mediastack.adapters.cli.commands.library_commands import (
    _add_async,
    _delete_async,
    _move_async,
    _progress_async,
    _restore_async,
    _update_async,
)
from mediastack.adapters.cli.helpers import find_item, format_hours, format_progress
from mediastack.core.ports.api_clients import CandidateDetails
from mediastack.core.value_objects import ItemStatus, MediaKind, ProviderFamily, ProviderRef
from mediastack.infrastructure.persistence.synced_store import STATUS_LOADED, STATUS_SAVED, SyncResult
from mediastack.main import app
from mediastack.services.library import LibraryService
from mediastack.services.progress import ProgressStatusEngine
from mediastack.services.recommender import RecommendationEngine, RecommendationMode
from mediastack.services.resolver import MetadataResolver
from mediastack.services.suggestions import SuggestionSession
from tests.fixtures.fakes import FIXED_TODAY, FakeProvider, make_candidate, make_item

# Chemins de patch des sous-modules de commandes
_LIBRARY = "mediastack.adapters.cli.commands.library_commands"
_DISCOVERY = "mediastack.adapters.cli.commands.discovery_commands"

runner = CliRunner()


# ============================================================================
# Fixtures
# ============================================================================


def _printed(mock_console: MagicMock) -> str:
    """Texte affiche par la console mockee (panneaux et tableaux rendus)."""
    recorder = Console(file=io.StringIO(), record=True, width=200)
    for call in mock_console.print.call_args_list:
        recorder.print(*call.args, **call.kwargs)
    return recorder.export_text()


@pytest.fixture
def library_items():
    return [
        make_item(
            "Breaking Bad",
            id="bb000001",
            kind=MediaKind.TV,
            status=ItemStatus.IN_PROGRESS,
            progress_current=61,
            progress_total=62,
            rating=10,
            auto_tags=("Drama", "Crime"),
            provider=ProviderRef(ProviderFamily.TMDB, "1396", MediaKind.TV),
        ),
        make_item("Heat", id="he000001", rating=9, runtime_minutes=170),
    ]


@pytest.fixture
def tmdb():
    provider = FakeProvider(ProviderFamily.TMDB)
    provider.search_results = [
        make_candidate("27205", "Inception", genres=("Action",), subtitle="2010"),
        make_candidate("250845", "Inception: The Cobol Job"),
    ]
    provider.details_by_id["27205"] = CandidateDetails(genres=("Science Fiction",), runtime_minutes=148)
    return provider


@pytest.fixture
def mock_container(library_items, tmdb):
    """Mock le Container pour les tests.

    Patche Container dans helpers.py car c'est la que le decorateur
    @with_container() l'importe et l'instancie. Les services du moteur
    sont reels, seuls les stockages et les fournisseurs sont simules.
    """
    with patch("mediastack.adapters.cli.helpers.Container") as mock_cls:
        container = MagicMock()
        mock_cls.return_value = container
        container.database.init = MagicMock()
        container.config.return_value = MagicMock(user_id="local", undo_window_seconds=10)

        store = MagicMock()
        store.load.return_value = SyncResult(items=list(library_items), status=STATUS_LOADED)
        store.save.side_effect = lambda user_id, items: SyncResult(items=items, status=STATUS_SAVED)
        container.library_store.return_value = store

        engine = ProgressStatusEngine(today=lambda: FIXED_TODAY)
        container.library_service.side_effect = lambda items: LibraryService(engine, items=items)

        registry = {ProviderFamily.TMDB: tmdb}
        container.suggestion_session.side_effect = lambda debounce_seconds: SuggestionSession(
            registry, debounce_seconds=debounce_seconds
        )
        container.metadata_resolver.return_value = MetadataResolver(registry)
        container.recommendation_engine.return_value = RecommendationEngine(registry)

        for client in (container.tmdb_client, container.igdb_client, container.anilist_client):
            client.return_value.close = AsyncMock()
        yield container


def _saved_items(container) -> list:
    return container.library_store.return_value.save.call_args.args[1]


# ============================================================================
# Tests helpers
# ============================================================================


class TestHelpers:
    def test_find_item_by_prefix(self, library_items):
        assert find_item(library_items, "bb").title == "Breaking Bad"
        assert find_item(library_items, "HE000001").title == "Heat"

    def test_find_item_ambiguous_or_missing(self, library_items):
        items = library_items + [make_item("Hero", id="he000002")]
        assert find_item(items, "he") is None
        assert find_item(items, "zz") is None
        assert find_item(items, "") is None

    def test_format_progress(self, library_items):
        assert format_progress(library_items[0]) == "61/62"
        assert format_progress(make_item("x", kind=MediaKind.BOOK, progress_current=3)) == "3/?"
        assert format_progress(make_item("x", kind=MediaKind.BOOK)) == ""

    def test_format_hours(self):
        assert format_hours(0) == "0h"
        assert format_hours(90) == "1.5h"
        assert format_hours(3287) == "55h"


# ============================================================================
# Tests add
# ============================================================================


def _add_kwargs(**overrides):
    kwargs = dict(
        title="Heat 2",
        kind=MediaKind.MOVIE,
        status=ItemStatus.COMPLETED,
        rating=None,
        finished=None,
        note=None,
        tags=[],
        rewatch=0,
        current=None,
        total=None,
        pick=1,
        autofill=False,
    )
    kwargs.update(overrides)
    return kwargs


class TestAddCommand:
    @pytest.mark.asyncio
    async def test_add_without_autofill(self, mock_container):
        with patch(f"{_LIBRARY}.console"):
            await _add_async(**_add_kwargs(tags=["Favori"]))

        saved = _saved_items(mock_container)
        assert saved[0].title == "Heat 2"
        assert saved[0].manual_tags == ("Favori",)
        assert saved[0].date_finished == FIXED_TODAY
        assert len(saved) == 3

    @pytest.mark.asyncio
    async def test_add_with_autofill(self, mock_container, tmdb):
        with patch(f"{_LIBRARY}.console") as mock_console:
            await _add_async(**_add_kwargs(title="incep", status=ItemStatus.PLANNED, autofill=True))

        added = _saved_items(mock_container)[0]
        assert added.title == "Inception"
        assert added.provider.provider_id == "27205"
        assert added.runtime_minutes == 148
        assert added.auto_tags == ("Science Fiction",)
        assert "Auto-remplissage termine." in _printed(mock_console)
        mock_container.tmdb_client.return_value.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_add_pick_out_of_range_keeps_draft(self, mock_container):
        with patch(f"{_LIBRARY}.console"):
            await _add_async(**_add_kwargs(title="incep", autofill=True, pick=9))

        added = _saved_items(mock_container)[0]
        assert added.title == "incep"
        assert added.provider is None

    @pytest.mark.asyncio
    async def test_add_invalid_date(self, mock_container):
        with patch(f"{_LIBRARY}.console") as mock_console:
            with pytest.raises(typer.Exit):
                await _add_async(**_add_kwargs(finished="17/05/2024"))

        assert "Date invalide" in _printed(mock_console)
        mock_container.library_store.return_value.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_empty_title(self, mock_container):
        with patch(f"{_LIBRARY}.console"):
            with pytest.raises(typer.Exit):
                await _add_async(**_add_kwargs(title="  "))


# ============================================================================
# Tests update / progress / move
# ============================================================================


class TestUpdateCommands:
    @pytest.mark.asyncio
    async def test_update_rating_is_clamped(self, mock_container):
        with patch(f"{_LIBRARY}.console"):
            await _update_async("he", {"rating": 12})

        heat = next(i for i in _saved_items(mock_container) if i.title == "Heat")
        assert heat.rating == 10.0

    @pytest.mark.asyncio
    async def test_update_unknown_item(self, mock_container):
        with patch(f"{_LIBRARY}.console") as mock_console:
            with pytest.raises(typer.Exit):
                await _update_async("zz", {"rating": 5})

        assert "introuvable" in _printed(mock_console)

    @pytest.mark.asyncio
    async def test_update_without_changes(self, mock_container):
        with patch(f"{_LIBRARY}.console") as mock_console:
            await _update_async("he", {})

        assert "Aucune modification" in _printed(mock_console)
        mock_container.library_store.return_value.load.assert_not_called()

    @pytest.mark.asyncio
    async def test_progress_to_last_episode_completes(self, mock_container):
        with patch(f"{_LIBRARY}.console") as mock_console:
            await _progress_async("bb", 1)

        show = _saved_items(mock_container)[0]
        assert show.status is ItemStatus.COMPLETED
        assert show.date_finished == FIXED_TODAY
        assert "Breaking Bad: 62/62 (completed)" in _printed(mock_console)
        assert "Termine" in _printed(mock_console)

    @pytest.mark.asyncio
    async def test_move_same_status_is_noop(self, mock_container):
        with patch(f"{_LIBRARY}.console") as mock_console:
            await _move_async("he", ItemStatus.COMPLETED)

        assert "deja completed" in _printed(mock_console)
        mock_container.library_store.return_value.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_move_changes_status(self, mock_container):
        with patch(f"{_LIBRARY}.console"):
            await _move_async("bb", ItemStatus.DROPPED)

        assert _saved_items(mock_container)[0].status is ItemStatus.DROPPED


# ============================================================================
# Tests delete / restore
# ============================================================================


class TestDeleteRestore:
    @pytest.mark.asyncio
    async def test_delete_stores_undo_token(self, mock_container):
        with patch(f"{_LIBRARY}.console"):
            await _delete_async("bb")

        assert [i.title for i in _saved_items(mock_container)] == ["Heat"]
        user_id, token = mock_container.undo_slot.return_value.put.call_args.args
        assert user_id == "local"
        assert token.item.title == "Breaking Bad"
        assert token.index == 0

    @pytest.mark.asyncio
    async def test_restore_reinserts_item(self, mock_container, library_items):
        with patch(f"{_LIBRARY}.console"):
            await _delete_async("bb")
        token = mock_container.undo_slot.return_value.put.call_args.args[1]

        mock_container.library_store.return_value.load.return_value = SyncResult(
            items=[library_items[1]], status=STATUS_LOADED
        )
        mock_container.undo_slot.return_value.take.return_value = token
        with patch(f"{_LIBRARY}.console") as mock_console:
            await _restore_async()

        assert [i.title for i in _saved_items(mock_container)] == ["Breaking Bad", "Heat"]
        assert "Restaure" in _printed(mock_console)

    @pytest.mark.asyncio
    async def test_restore_nothing(self, mock_container):
        mock_container.undo_slot.return_value.take.return_value = None
        with patch(f"{_LIBRARY}.console") as mock_console:
            await _restore_async()

        assert "Rien a restaurer" in _printed(mock_console)


# ============================================================================
# Tests search / recommend / stats
# ============================================================================


class TestDiscoveryCommands:
    @pytest.mark.asyncio
    async def test_search_book_has_no_provider(self, mock_container):
        with patch(f"{_DISCOVERY}.console") as mock_console:
            await _search_async(MediaKind.BOOK, "Dune")

        assert "Aucun fournisseur" in _printed(mock_console)

    @pytest.mark.asyncio
    async def test_search_prints_suggestions(self, mock_container, tmdb):
        with patch(f"{_DISCOVERY}.console") as mock_console:
            await _search_async(MediaKind.MOVIE, "Incep")

        assert tmdb.search_calls == [(MediaKind.MOVIE, "Incep")]
        assert "Completion" in _printed(mock_console)
        assert "Inception" in _printed(mock_console)

    @pytest.mark.asyncio
    async def test_search_error_status(self, mock_container, tmdb):
        tmdb.search_error = RuntimeError("boom")
        with patch(f"{_DISCOVERY}.console") as mock_console:
            await _search_async(MediaKind.MOVIE, "Incep")

        assert "Erreur TMDB : boom" in _printed(mock_console)

    @pytest.mark.asyncio
    async def test_recommend(self, mock_container, tmdb, library_items):
        """Le profil vient des elements termines et notes."""
        finished = replace(library_items[0], status=ItemStatus.COMPLETED)
        mock_container.library_store.return_value.load.return_value = SyncResult(
            items=[finished, library_items[1]], status=STATUS_LOADED
        )
        tmdb.similar_by_id["1396"] = [
            make_candidate("60059", "Better Call Saul", kind=MediaKind.TV, genres=("Drama", "Crime"))
        ]
        with patch(f"{_DISCOVERY}.console") as mock_console:
            await _recommend_async(RecommendationMode.RANKED)

        printed = _printed(mock_console)
        assert "Vos genres: Drama, Crime" in printed
        assert "Better Call Saul" in printed

    @pytest.mark.asyncio
    async def test_recommend_empty_pool(self, mock_container):
        with patch(f"{_DISCOVERY}.console") as mock_console:
            await _recommend_async(RecommendationMode.RANDOM)

        assert "Aucune nouvelle suggestion" in _printed(mock_console)

    @pytest.mark.asyncio
    async def test_stats(self, mock_container):
        with patch(f"{_DISCOVERY}.console") as mock_console:
            await _stats_async([MediaKind.TV])

        printed = _printed(mock_console)
        assert mock_console.print.call_count >= 2
        assert "Exclus: tv" in printed


# ============================================================================
# Tests application
# ============================================================================


class TestApp:
    def test_help_lists_commands(self):
        with patch("mediastack.main.configure_logging"):
            result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("add", "list", "progress", "restore", "search", "recommend", "stats"):
            assert command in result.stdout

    def test_add_help(self):
        with patch("mediastack.main.configure_logging"):
            result = runner.invoke(app, ["add", "--help"])

        assert result.exit_code == 0
        assert "--autofill" in result.stdout

    def test_version(self):
        with patch("mediastack.main.configure_logging"):
            result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "MediaStack v0.1.0" in result.stdout
