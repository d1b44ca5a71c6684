"""
Moteur de recommandation.

Etapes:
1. Profil de gouts : genres ponderes par la note des meilleurs elements
   termines, et repartition des types parmi les elements recents
2. Pool de candidats : elements similaires aux elements "graines" les
   mieux notes, plus les tendances films/series ; dedoublonnage et
   exclusion des titres deja en bibliotheque ; pool borne a 80
3. Scoring : 65% recouvrement de tags + 35% preference de type
4. Sortie : liste diversifiee (2 au plus par tag principal) ou tirage
   aleatoire pondere par le score

Heuristiques simples, deterministes et explicables. Aucun candidat n'est
persiste : agir sur une recommandation repasse par le brouillon et
MetadataResolver.
"""

import random
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Mapping, Optional

from loguru import logger

from mediastack.core.entities import LibraryItem
from mediastack.core.ports.api_clients import Candidate, IMetadataProvider, ITrendingFeed
from mediastack.core.value_objects import ItemStatus, ProviderFamily, TasteProfile
from mediastack.utils.constants import (
    DETAIL_FAILURE_SCORE,
    KIND_PREFERENCE_WINDOW,
    KIND_WEIGHT,
    MAX_PER_PRIMARY_TAG,
    MAX_POOL_SIZE,
    MAX_SEEDS,
    NO_TAG_BASE_SCORE,
    RANDOM_POOL_SIZE,
    RANDOM_WEIGHT_EPSILON,
    RANKED_LIST_SIZE,
    TAG_OVERLAP_CAP,
    TAG_WEIGHT,
    TASTE_SOURCE_ITEMS,
    TASTE_TOP_TAGS,
    TRENDING_SUB_KINDS,
)
from mediastack.utils.helpers import merge_tags, safe_lower, to_utc

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class RecommendationMode(Enum):
    """Mode de sortie."""

    RANKED = "ranked"
    RANDOM = "random"


@dataclass
class ScoredCandidate:
    """Candidat recommande avec son score et ses tags resolus."""

    candidate: Candidate
    score: float
    tags: tuple[str, ...] = ()

    @property
    def primary_tag(self) -> Optional[str]:
        """Premier tag (cle de diversification), None si aucun tag."""
        return self.tags[0].lower() if self.tags else None


@dataclass
class RecommendationResult:
    """Resultat d'une recommandation.

    Attributes:
        picks: Liste classee (mode RANKED) ou un seul element (mode RANDOM)
        status: Message court destine a l'utilisateur
        profile: Profil de gouts utilise
    """

    picks: list[ScoredCandidate] = field(default_factory=list)
    status: str = ""
    profile: TasteProfile = field(default_factory=TasteProfile)


def _recency_key(item: LibraryItem) -> datetime:
    return to_utc(item.created_at) or _OLDEST


def build_taste_profile(library: list[LibraryItem]) -> TasteProfile:
    """
    Calcule le profil de gouts.

    Genres : 12 elements termines les mieux notes, chaque genre recoit
    note/10 ; 12 genres gardes. Types : fraction de chaque type parmi les
    30 elements les plus recents (tous statuts).
    """
    rated_completed = [
        i for i in library if i.status is ItemStatus.COMPLETED and i.rating is not None
    ]
    rated_completed.sort(key=lambda i: i.rating, reverse=True)

    weights: dict[str, float] = defaultdict(float)
    labels: dict[str, str] = {}
    for item in rated_completed[:TASTE_SOURCE_ITEMS]:
        for tag in item.tags:
            key = tag.lower()
            labels.setdefault(key, tag)
            weights[key] += item.rating / 10

    ranked = sorted(weights.items(), key=lambda entry: entry[1], reverse=True)[:TASTE_TOP_TAGS]
    top_tags = tuple((labels[key], weight) for key, weight in ranked)

    recent = sorted(library, key=_recency_key, reverse=True)[:KIND_PREFERENCE_WINDOW]
    counts = Counter(i.kind for i in recent)
    preference = {kind: count / len(recent) for kind, count in counts.items()} if recent else {}

    return TasteProfile(top_tags=top_tags, kind_preference=preference)


def score_candidate(tags: tuple[str, ...], candidate: Candidate, profile: TasteProfile) -> float:
    """
    Score d'un candidat selon le profil.

    score = 0.65 x recouvrement + 0.35 x preference de type, avec
    recouvrement = |tags communs| / min(|tags profil|, 8), borne a 1.
    Sans tags (candidat ou historique) : 0.15 + 0.35 x preference.
    """
    kind_preference = profile.preference_for(candidate.kind)
    user_tags = {t.lower() for t in profile.tag_names}
    if not tags or not user_tags:
        return NO_TAG_BASE_SCORE + KIND_WEIGHT * kind_preference

    overlap = len({t.lower() for t in tags} & user_tags)
    ratio = min(1.0, overlap / min(len(user_tags), TAG_OVERLAP_CAP))
    return TAG_WEIGHT * ratio + KIND_WEIGHT * kind_preference


def diversify(scored: list[ScoredCandidate], limit: int = RANKED_LIST_SIZE) -> list[ScoredCandidate]:
    """
    Parcourt la liste triee et ecarte un candidat des que son tag principal
    est deja apparu deux fois. S'arrete a `limit` elements.
    """
    kept: list[ScoredCandidate] = []
    seen: Counter = Counter()
    for entry in scored:
        tag = entry.primary_tag
        if tag is not None and seen[tag] >= MAX_PER_PRIMARY_TAG:
            continue
        if tag is not None:
            seen[tag] += 1
        kept.append(entry)
        if len(kept) >= limit:
            break
    return kept or scored[:limit]


class RecommendationEngine:
    """
    Service de recommandation.

    Les appels fournisseurs sont faits sequentiellement, graine par graine
    puis candidat par candidat ; un echec n'interrompt jamais les autres.

    Example:
        engine = RecommendationEngine(
            providers={ProviderFamily.TMDB: tmdb},
            trending_feed=tmdb,
        )
        result = await engine.recommend(library, RecommendationMode.RANKED)
    """

    def __init__(
        self,
        providers: Mapping[ProviderFamily, IMetadataProvider],
        trending_feed: Optional[ITrendingFeed] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialise le moteur.

        Args:
            providers: Fournisseurs disponibles, par famille
            trending_feed: Flux de tendances films/series (optionnel)
            rng: Generateur aleatoire (injectable pour des tirages reproductibles)
        """
        self._providers = dict(providers)
        self._trending = trending_feed
        self._rng = rng or random.Random()

    @staticmethod
    def select_seeds(library: list[LibraryItem]) -> list[LibraryItem]:
        """Graines : elements notes et lies a un fournisseur, mieux notes d'abord."""
        linked = [i for i in library if i.provider is not None]
        rated = [i for i in linked if i.rating is not None]
        if rated:
            rated.sort(key=lambda i: i.rating, reverse=True)
            return rated[:MAX_SEEDS]
        return linked[:MAX_SEEDS]

    async def gather_pool(self, library: list[LibraryItem]) -> list[Candidate]:
        """Constitue le pool de candidats (dedoublonne, hors bibliotheque, 80 au plus)."""
        raw: list[Candidate] = []

        for seed in self.select_seeds(library):
            ref = seed.provider
            provider = self._providers.get(ref.family)
            if provider is None:
                continue
            try:
                raw.extend(await provider.similar(ref.provider_id, ref.kind))
            except Exception as e:
                logger.warning(f"Elements similaires en echec pour {seed.title}: {e}")

        if self._trending is not None:
            for sub_kind in TRENDING_SUB_KINDS:
                try:
                    raw.extend(await self._trending.trending(sub_kind))
                except Exception as e:
                    logger.warning(f"Tendances {sub_kind} en echec: {e}")

        owned = {safe_lower(i.title) for i in library}
        seen: set[tuple[str, str]] = set()
        pool: list[Candidate] = []
        for candidate in raw:
            key = candidate.ref.key
            title = safe_lower(candidate.title)
            if not title or key in seen or title in owned:
                continue
            seen.add(key)
            pool.append(candidate)
            if len(pool) >= MAX_POOL_SIZE:
                break
        return pool

    async def _score(self, candidate: Candidate, profile: TasteProfile) -> ScoredCandidate:
        provider = self._providers.get(candidate.family)
        if provider is None:
            return ScoredCandidate(candidate, score_candidate(candidate.genres, candidate, profile), candidate.genres)
        try:
            details = await provider.details(candidate.provider_id, candidate.kind)
        except Exception as e:
            logger.warning(f"Details en echec pour {candidate.title}: {e}")
            return ScoredCandidate(candidate, DETAIL_FAILURE_SCORE, candidate.genres)

        tags = merge_tags(details.genres if details and details.genres else candidate.genres)
        return ScoredCandidate(candidate, score_candidate(tags, candidate, profile), tags)

    def pick_weighted(self, scored: list[ScoredCandidate]) -> Optional[ScoredCandidate]:
        """Tirage a la roulette parmi les 30 meilleurs, pondere par max(score, epsilon)."""
        top = scored[:RANDOM_POOL_SIZE]
        if not top:
            return None
        weights = [max(entry.score, RANDOM_WEIGHT_EPSILON) for entry in top]
        threshold = self._rng.random() * sum(weights)
        cumulative = 0.0
        for entry, weight in zip(top, weights):
            cumulative += weight
            if threshold < cumulative:
                return entry
        return top[-1]

    async def recommend(
        self,
        library: list[LibraryItem],
        mode: RecommendationMode = RecommendationMode.RANKED,
    ) -> RecommendationResult:
        """
        Calcule des recommandations.

        Args:
            library: Bibliotheque complete
            mode: Liste classee ou tirage aleatoire unique

        Returns:
            RecommendationResult (jamais d'exception fournisseur)
        """
        profile = build_taste_profile(library)
        pool = await self.gather_pool(library)
        if not pool:
            status = (
                "Aucune nouvelle suggestion (notez et liez plus d'elements)."
                if self.select_seeds(library)
                else "Notez et auto-remplissez au moins un element d'abord."
            )
            return RecommendationResult(status=status, profile=profile)

        scored = [await self._score(candidate, profile) for candidate in pool]
        scored.sort(key=lambda entry: entry.score, reverse=True)
        logger.debug(f"Recommandation: {len(pool)} candidat(s) scores")

        if mode is RecommendationMode.RANDOM:
            pick = self.pick_weighted(scored)
            return RecommendationResult(picks=[pick], status="Voici une idee.", profile=profile)

        picks = diversify(scored)
        return RecommendationResult(picks=picks, status="Voici vos suggestions.", profile=profile)
