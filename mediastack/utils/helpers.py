"""
Fonctions utilitaires partagees dans le projet MediaStack.

- safe_lower : cle de comparaison insensible a la casse
- merge_tags : union de groupes de tags, ordre conserve, doublons fusionnes
- clamp_rating : note bornee a [0, 10] et arrondie au demi-point
- to_utc : date-heure explicite en UTC (valeur naive supposee UTC)
"""

from datetime import datetime, timezone
from typing import Iterable, Optional


def safe_lower(text: Optional[str]) -> str:
    """Retourne le texte nettoye et en minuscules ('' pour None)."""
    return (text or "").strip().lower()


def merge_tags(*groups: Iterable[str]) -> tuple[str, ...]:
    """
    Fusionne plusieurs groupes de tags.

    L'ordre d'apparition est conserve, les tags vides sont ignores et les
    doublons sont fusionnes sans tenir compte de la casse (la premiere
    graphie rencontree est gardee).
    """
    seen: set[str] = set()
    merged: list[str] = []
    for group in groups:
        for raw in group:
            tag = (raw or "").strip()
            if not tag:
                continue
            key = tag.lower()
            if key in seen:
                continue
            seen.add(key)
            merged.append(tag)
    return tuple(merged)


def clamp_rating(value: Optional[float]) -> Optional[float]:
    """Borne une note a [0, 10] avec une granularite d'un demi-point."""
    if value is None:
        return None
    bounded = max(0.0, min(10.0, float(value)))
    return round(bounded * 2) / 2


def clamp_non_negative(value: Optional[int]) -> Optional[int]:
    """Ramene une valeur entiere negative a 0 (None reste None)."""
    if value is None:
        return None
    return max(0, int(value))


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Ramene une date-heure en UTC explicite.

    Une valeur naive (anciennes sauvegardes, SQLite qui ne conserve pas le
    fuseau) est consideree comme deja exprimee en UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
