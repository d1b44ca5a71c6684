"""
Fixtures pytest partagees pour les tests MediaStack.

Ce module contient les fixtures communes utilisees dans les tests:
- Moteur de progression avec date du jour figee
- Fournisseur films/series en memoire (voir tests/fixtures/fakes.py)
"""

import pytest

from mediastack.core.value_objects import ProviderFamily
from mediastack.services.progress import ProgressStatusEngine
from tests.fixtures.fakes import FIXED_TODAY, FakeProvider


@pytest.fixture
def engine() -> ProgressStatusEngine:
    """ProgressStatusEngine avec une date du jour figee."""
    return ProgressStatusEngine(today=lambda: FIXED_TODAY)


@pytest.fixture
def tmdb_provider() -> FakeProvider:
    """Fournisseur films/series en memoire."""
    return FakeProvider(ProviderFamily.TMDB)
