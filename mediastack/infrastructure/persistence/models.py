"""
Modeles SQLModel pour la base de donnees MediaStack.

Ces modeles representent les tables de la base. Ils sont distincts des
entites de domaine (dataclass dans core/entities/) selon l'architecture
hexagonale.

Tables:
- library_items: Elements de bibliotheque, une ligne par element, ordonnes
  par la colonne position (l'ordre de la liste fait partie de la donnee)

Les champs JSON (*_json) stockent les listes de tags serialisees.
"""

from __future__ import annotations

import json
from datetime import date, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, Index, SQLModel


class LibraryItemModel(SQLModel, table=True):
    """
    Modele representant un element de bibliotheque d'un utilisateur.

    La reference fournisseur est aplatie en trois colonnes
    (provider_family, provider_id, provider_kind), toutes nulles si
    l'element n'est lie a aucun fournisseur.
    """

    __tablename__ = "library_items"
    __table_args__ = (Index("ix_library_items_user_position", "user_id", "position"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    item_id: str = Field(index=True)
    position: int = 0
    title: str
    kind: str
    status: str
    rating: float | None = None
    date_finished: date | None = None
    note: str | None = None
    auto_tags_json: str | None = None  # JSON: ["Drama", "Crime"]
    manual_tags_json: str | None = None
    created_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))  # UTC
    rewatch_count: int = 0
    runtime_minutes: int | None = None
    cover_url: str | None = None
    provider_family: str | None = None
    provider_id: str | None = None
    provider_kind: str | None = None
    progress_current: int | None = None
    progress_total: int | None = None
    manual_progress_current: int | None = None
    manual_progress_total: int | None = None

    @property
    def auto_tags(self) -> list[str]:
        """Retourne les tags auto-remplis deserialises."""
        if self.auto_tags_json:
            return json.loads(self.auto_tags_json)
        return []

    @auto_tags.setter
    def auto_tags(self, value: list[str]) -> None:
        """Serialise les tags auto-remplis en JSON."""
        self.auto_tags_json = json.dumps(value) if value else None

    @property
    def manual_tags(self) -> list[str]:
        """Retourne les tags manuels deserialises."""
        if self.manual_tags_json:
            return json.loads(self.manual_tags_json)
        return []

    @manual_tags.setter
    def manual_tags(self, value: list[str]) -> None:
        """Serialise les tags manuels en JSON."""
        self.manual_tags_json = json.dumps(value) if value else None
