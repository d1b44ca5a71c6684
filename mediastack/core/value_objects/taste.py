"""
Profil de gouts derive de la bibliotheque.

Objet valeur ephemere recalcule a chaque recommandation.
"""

from dataclasses import dataclass, field

from mediastack.core.value_objects.media import MediaKind


@dataclass(frozen=True)
class TasteProfile:
    """
    Ponderation des genres et preference de types de media.

    Attributs:
        top_tags: Tags tries par poids decroissant (tag, poids cumule)
        kind_preference: Fraction de chaque type parmi les elements recents
    """

    top_tags: tuple[tuple[str, float], ...] = ()
    kind_preference: dict[MediaKind, float] = field(default_factory=dict)

    @property
    def tag_names(self) -> tuple[str, ...]:
        """Noms des tags du profil, dans l'ordre de poids."""
        return tuple(tag for tag, _ in self.top_tags)

    def preference_for(self, kind: MediaKind) -> float:
        """Fraction associee a un type de media (0 si absent)."""
        return self.kind_preference.get(kind, 0.0)
