"""
Classement des suggestions et recherche au fil de la frappe.

SuggestionRanker ordonne les candidats d'un fournisseur par similarite
avec la requete et determine la completion fantome a afficher.

SuggestionSession relance le classement a chaque changement de requete et
interroge le fournisseur apres un delai de calme (debounce). Les reponses
d'une requete depassee sont ignorees : la cle (type + requete normalisee)
capturee au depart est comparee a la cle courante a l'arrivee.

Aucun candidat n'est jamais applique automatiquement : la selection est
une action explicite (accept / accept_ghost) suivie de MetadataResolver.
"""

import asyncio
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from loguru import logger

from mediastack.core.ports.api_clients import Candidate, IMetadataProvider
from mediastack.core.value_objects import MediaKind, ProviderFamily, provider_family_for
from mediastack.services.matcher import is_prefix_completion, normalize_title, similarity
from mediastack.utils.constants import MAX_SUGGESTIONS, MIN_QUERY_LENGTH, PROVIDER_LABELS


@dataclass
class RankedSuggestions:
    """Resultat du classement.

    Attributes:
        suggestions: Candidats tries par score decroissant (7 au plus)
        ghost: Titre litteral propose en completion en ligne, ou None
    """

    suggestions: list[Candidate] = field(default_factory=list)
    ghost: Optional[str] = None


class SuggestionRanker:
    """
    Service de classement des candidats par similarite de titre.

    Le classement est deterministe : a score egal, l'ordre du fournisseur
    est conserve (tri stable).
    """

    MAX_SUGGESTIONS: int = MAX_SUGGESTIONS

    def rank(self, query: str, candidates: list[Candidate]) -> RankedSuggestions:
        """
        Score et trie les candidats, puis calcule la completion fantome.

        Args:
            query: Texte courant saisi par l'utilisateur
            candidates: Candidats bruts du fournisseur

        Returns:
            RankedSuggestions (vide si la requete fait moins de 2 caracteres)
        """
        if len(normalize_title(query)) < MIN_QUERY_LENGTH or not candidates:
            return RankedSuggestions()

        scored = [replace(c, score=similarity(query, c.title)) for c in candidates]
        scored.sort(key=lambda c: c.score, reverse=True)
        top = scored[: self.MAX_SUGGESTIONS]

        ghost = top[0].title if is_prefix_completion(query, top[0].title) else None
        return RankedSuggestions(suggestions=top, ghost=ghost)


@dataclass
class SuggestionState:
    """Etat expose a l'interface pendant la saisie."""

    query: str = ""
    kind: Optional[MediaKind] = None
    suggestions: list[Candidate] = field(default_factory=list)
    ghost: Optional[str] = None
    status: str = ""


def query_key(kind: MediaKind, query: str) -> str:
    """Cle de fraicheur d'une recherche : type + requete normalisee."""
    return f"{kind.value}:{normalize_title(query)}"


class SuggestionSession:
    """
    Recherche au fil de la frappe avec debounce et detection des reponses obsoletes.

    Chaque appel a update_query annule le minuteur en attente et en arme un
    nouveau. Une fois le minuteur ecoule, la recherche part et n'est plus
    annulee ; sa reponse n'est appliquee que si aucune saisie n'a eu lieu
    depuis (meme generation) et que la cle type + requete est inchangee.

    Example:
        session = SuggestionSession({ProviderFamily.TMDB: tmdb}, debounce_seconds=0.65)
        session.update_query("Inc", MediaKind.MOVIE)
        session.update_query("Incep", MediaKind.MOVIE)
        await session.wait_idle()
        print(session.state.suggestions, session.state.ghost)
    """

    def __init__(
        self,
        providers: Mapping[ProviderFamily, IMetadataProvider],
        ranker: Optional[SuggestionRanker] = None,
        debounce_seconds: float = 0.65,
    ) -> None:
        """
        Initialise la session.

        Args:
            providers: Fournisseurs disponibles, par famille
            ranker: Service de classement (un nouveau par defaut)
            debounce_seconds: Delai de calme avant d'interroger le fournisseur
        """
        self._providers = dict(providers)
        self._ranker = ranker or SuggestionRanker()
        self._debounce = debounce_seconds
        self._generation = 0
        self._current_key: Optional[str] = None
        self._candidates: list[Candidate] = []
        self._timer: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()
        self._state = SuggestionState()

    @property
    def state(self) -> SuggestionState:
        """Etat courant (requete, suggestions, completion fantome, statut)."""
        return self._state

    def _provider_for(self, kind: MediaKind) -> Optional[IMetadataProvider]:
        family = provider_family_for(kind)
        return self._providers.get(family) if family else None

    def _is_current(self, generation: int, key: str) -> bool:
        return generation == self._generation and key == self._current_key

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def update_query(self, query: str, kind: MediaKind) -> None:
        """
        Prend en compte une nouvelle saisie.

        Re-classe immediatement les derniers candidats connus contre le
        nouveau texte, puis programme une recherche apres le debounce.
        Doit etre appele depuis une boucle asyncio active.
        """
        self._generation += 1
        self._cancel_timer()

        previous_kind = self._state.kind
        self._current_key = query_key(kind, query)
        if previous_kind != kind:
            self._candidates = []

        if len(normalize_title(query)) < MIN_QUERY_LENGTH:
            self._candidates = []
            self._state = SuggestionState(query=query, kind=kind)
            return

        provider = self._provider_for(kind)
        if provider is None:
            self._state = SuggestionState(query=query, kind=kind)
            return

        ranked = self._ranker.rank(query, self._candidates)
        self._state = SuggestionState(
            query=query,
            kind=kind,
            suggestions=ranked.suggestions,
            ghost=ranked.ghost,
            status=self._state.status,
        )

        loop = asyncio.get_running_loop()
        self._timer = loop.create_task(
            self._debounced_search(self._generation, self._current_key, provider, kind, query)
        )

    async def _debounced_search(
        self,
        generation: int,
        key: str,
        provider: IMetadataProvider,
        kind: MediaKind,
        query: str,
    ) -> None:
        await asyncio.sleep(self._debounce)

        # Minuteur ecoule : la recherche n'est plus annulable
        current = asyncio.current_task()
        if self._timer is current:
            self._timer = None
        self._inflight.add(current)
        try:
            await self._search(generation, key, provider, kind, query)
        finally:
            self._inflight.discard(current)

    async def _search(
        self,
        generation: int,
        key: str,
        provider: IMetadataProvider,
        kind: MediaKind,
        query: str,
    ) -> None:
        label = PROVIDER_LABELS.get(provider.family.value, provider.family.value)
        if self._is_current(generation, key):
            self._state.status = f"Recherche {label}…"
        logger.debug(f"Recherche #{generation} {label}: {query!r} ({kind.value})")

        try:
            candidates = await provider.search(kind, query.strip())
        except Exception as e:
            logger.warning(f"Recherche {label} en echec pour {query!r}: {e}")
            if self._is_current(generation, key):
                self._state.status = f"Erreur {label} : {e}"
            return

        if not self._is_current(generation, key):
            logger.debug(f"Reponse obsolete ignoree (#{generation}, {key})")
            return

        self._candidates = candidates
        ranked = self._ranker.rank(self._state.query, candidates)
        if ranked.suggestions:
            status = f"{len(ranked.suggestions)} suggestion(s)"
        else:
            status = "Aucune correspondance."
        self._state = replace(
            self._state,
            suggestions=ranked.suggestions,
            ghost=ranked.ghost,
            status=status,
        )

    def accept(self, index: int) -> Optional[Candidate]:
        """Selection explicite de la suggestion a la position donnee (0-indexee)."""
        if 0 <= index < len(self._state.suggestions):
            return self._state.suggestions[index]
        return None

    def accept_ghost(self) -> Optional[Candidate]:
        """Accepte la completion fantome : retourne le candidat de tete."""
        if self._state.ghost is None or not self._state.suggestions:
            return None
        return self._state.suggestions[0]

    async def wait_idle(self) -> None:
        """Attend la fin du minuteur et des recherches en cours."""
        while self._timer is not None or self._inflight:
            pending = [t for t in (self._timer, *self._inflight) if t is not None]
            await asyncio.gather(*pending, return_exceptions=True)
            if self._timer is not None and self._timer.done():
                self._timer = None

    def cancel(self) -> None:
        """Annule le minuteur en attente (les recherches parties se terminent)."""
        self._cancel_timer()
