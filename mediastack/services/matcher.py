"""
Similarite de titres pour le matching des candidats.

Le score est dans [0, 1] :
- Titres normalises identiques : 1.0
- Le candidat prolonge la requete (prefixe) : 0.85 + 0.15 x (|requete| / |candidat|)
- Sinon : 1 - distance d'edition / longueur max

La branche prefixe est volontairement asymetrique : un candidat qui
complete la requete est mieux note que l'inverse.

Le scoring est deterministe pour des resultats reproductibles.
"""

import re

from rapidfuzz.distance import Levenshtein

from mediastack.utils.constants import PREFIX_BASE_SCORE, PREFIX_BOOST

_APOSTROPHES = re.compile(r"['‘’‛ʼ´`]")
_NON_ALNUM = re.compile(r"[\W_]+")


def normalize_title(title: str) -> str:
    """
    Normalise un titre pour la comparaison.

    Minuscules, apostrophes (droites, typographiques, accents) retirees,
    suites de caracteres non alphanumeriques remplacees par un espace.
    """
    text = _APOSTROPHES.sub("", (title or "").lower())
    return _NON_ALNUM.sub(" ", text).strip()


def _prefix_score(query: str, candidate: str) -> float:
    """Score de completion par prefixe, dans [0.85, 1.0]."""
    boost = PREFIX_BOOST * min(1.0, len(query) / len(candidate))
    return min(1.0, PREFIX_BASE_SCORE + boost)


def _edit_score(a: str, b: str) -> float:
    """Similarite par distance d'edition (insertion, suppression, substitution)."""
    distance = Levenshtein.distance(a, b)
    return max(0.0, 1.0 - distance / max(len(a), len(b)))


def is_prefix_completion(query: str, candidate_title: str) -> bool:
    """Vrai si le titre normalise du candidat commence par la requete normalisee."""
    norm_query = normalize_title(query)
    return bool(norm_query) and normalize_title(candidate_title).startswith(norm_query)


def similarity(query: str, candidate_title: str) -> float:
    """
    Calcule la similarite entre une requete et un titre candidat.

    Args:
        query: Texte saisi par l'utilisateur
        candidate_title: Titre retourne par le fournisseur

    Returns:
        Score de 0.0 a 1.0
    """
    norm_query = normalize_title(query)
    norm_candidate = normalize_title(candidate_title)

    if not norm_query or not norm_candidate:
        return 0.0
    if norm_query == norm_candidate:
        return 1.0
    if norm_candidate.startswith(norm_query):
        return _prefix_score(norm_query, norm_candidate)
    return _edit_score(norm_query, norm_candidate)
