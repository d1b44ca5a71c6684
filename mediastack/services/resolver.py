"""
Resolution d'un candidat choisi dans un brouillon.

MetadataResolver recupere les details du candidat (second aller-retour,
distinct de la recherche) puis fusionne ses champs dans le brouillon :

- Titre toujours remplace ; couverture et duree seulement si fournies
- Reference fournisseur remplacee (les autres familles sont effacees)
- Tags auto-remplis remplaces en bloc ; tags manuels jamais touches
- Total de progression deduit (episodes/chapitres, 1 pour un film)

Un echec de la recuperation des details n'interrompt pas la resolution :
les champs du resultat de recherche sont utilises et un message de
statut recuperable est retourne.
"""

from dataclasses import dataclass, replace
from typing import Mapping, Optional

from loguru import logger

from mediastack.core.entities import LibraryItem
from mediastack.core.ports.api_clients import Candidate, CandidateDetails, IMetadataProvider
from mediastack.core.value_objects import ItemStatus, MediaKind, ProviderFamily
from mediastack.utils.constants import PROVIDER_LABELS
from mediastack.utils.helpers import merge_tags


@dataclass
class Resolution:
    """Resultat d'une resolution.

    Attributes:
        draft: Brouillon mis a jour
        status: Message court destine a l'utilisateur
        details_loaded: Vrai si les details enrichis ont ete obtenus
    """

    draft: LibraryItem
    status: str
    details_loaded: bool = False


def merge_candidate(
    draft: LibraryItem,
    candidate: Candidate,
    details: Optional[CandidateDetails] = None,
) -> LibraryItem:
    """
    Fusionne un candidat (et ses details eventuels) dans un brouillon.

    Fonction pure : le brouillon d'origine n'est pas modifie.

    Args:
        draft: Brouillon courant
        candidate: Candidat choisi par l'utilisateur
        details: Details enrichis, ou None pour s'en tenir a la recherche

    Returns:
        Nouveau brouillon
    """
    genres = candidate.genres
    cover_url = candidate.cover_url
    runtime = candidate.runtime_minutes
    hint = candidate.progress_total_hint
    if details is not None:
        genres = details.genres or genres
        cover_url = details.cover_url or cover_url
        runtime = details.runtime_minutes if details.runtime_minutes is not None else runtime
        hint = details.progress_total_hint if details.progress_total_hint is not None else hint

    # Le total auto-rempli suit le candidat courant, sauf total saisi par l'utilisateur
    progress_total = draft.progress_total
    if hint is not None and hint > 0 and draft.manual_progress_total is None:
        progress_total = hint
    elif progress_total is None and draft.kind is MediaKind.MOVIE:
        progress_total = 1

    merged = replace(
        draft,
        title=candidate.title,
        cover_url=cover_url or draft.cover_url,
        runtime_minutes=runtime if runtime is not None else draft.runtime_minutes,
        provider=candidate.ref,
        auto_tags=merge_tags(genres),
        progress_total=progress_total,
    )

    # Element deja termine sans progression : on le considere vu en entier
    if (
        merged.status is ItemStatus.COMPLETED
        and merged.effective_current is None
        and merged.effective_total is not None
    ):
        merged = replace(merged, progress_current=merged.effective_total)

    return merged


class MetadataResolver:
    """
    Service de resolution des candidats.

    Example:
        resolver = MetadataResolver({ProviderFamily.TMDB: tmdb_client})
        resolution = await resolver.resolve(draft, candidate)
        print(resolution.status)
    """

    def __init__(self, providers: Mapping[ProviderFamily, IMetadataProvider]) -> None:
        """
        Initialise le resolver.

        Args:
            providers: Fournisseurs disponibles, par famille
        """
        self._providers = dict(providers)

    async def _fetch_details(self, candidate: Candidate) -> tuple[Optional[CandidateDetails], str]:
        label = PROVIDER_LABELS.get(candidate.family.value, candidate.family.value)
        provider = self._providers.get(candidate.family)
        if provider is None:
            logger.warning(f"Fournisseur {label} non configure, details ignores")
            return None, f"{label} non configure : champs de recherche utilises."

        try:
            details = await provider.details(candidate.provider_id, candidate.kind)
        except Exception as e:
            logger.warning(
                f"Details {label} en echec pour {candidate.title} ({candidate.provider_id}): {e}"
            )
            return None, f"Details {label} indisponibles ({e}) : champs de recherche utilises."

        if details is None:
            logger.info(f"Details {label} introuvables pour {candidate.title}")
            return None, f"Details {label} introuvables : champs de recherche utilises."

        return details, "Auto-remplissage termine."

    async def resolve(self, draft: LibraryItem, candidate: Candidate) -> Resolution:
        """
        Resout un candidat choisi dans le brouillon.

        Ne leve jamais d'exception liee au fournisseur.

        Args:
            draft: Brouillon courant
            candidate: Candidat explicitement choisi

        Returns:
            Resolution avec le brouillon mis a jour et un message de statut
        """
        details, status = await self._fetch_details(candidate)
        merged = merge_candidate(draft, candidate, details)
        logger.debug(
            f"Resolution: {candidate.title} ({candidate.family.value}:{candidate.provider_id}) "
            f"tags={list(merged.auto_tags)} total={merged.progress_total}"
        )
        return Resolution(draft=merged, status=status, details_loaded=details is not None)
