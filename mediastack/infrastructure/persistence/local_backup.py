"""
Sauvegarde locale de la bibliotheque en JSON.

Un fichier par utilisateur ({backup_dir}/{user_id}.json) de la forme
{"items": [...]}. Sert de cache local et de repli quand la base distante
est injoignable.
"""

import json
from pathlib import Path
from typing import Optional

from loguru import logger

from mediastack.core.entities import LibraryItem
from mediastack.core.ports.repositories import ILibraryStore
from mediastack.infrastructure.persistence.serialization import item_to_record, items_from_records


class JsonLibraryBackup(ILibraryStore):
    """
    Stockage JSON local.

    L'ecriture passe par un fichier temporaire renomme, pour ne jamais
    laisser une sauvegarde tronquee.
    """

    def __init__(self, backup_dir: Path) -> None:
        self._backup_dir = Path(backup_dir)

    def path_for(self, user_id: str) -> Path:
        """Chemin du fichier de sauvegarde d'un utilisateur."""
        safe_id = "".join(c if c.isalnum() or c in "-_" else "_" for c in user_id) or "local"
        return self._backup_dir / f"{safe_id}.json"

    def load(self, user_id: str) -> Optional[list[LibraryItem]]:
        """Charge la sauvegarde (None si absente ou illisible)."""
        path = self.path_for(user_id)
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Sauvegarde locale illisible {path}: {e}")
            return None

        records = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(records, list):
            logger.warning(f"Sauvegarde locale sans liste 'items': {path}")
            return None
        return items_from_records(r for r in records if isinstance(r, dict))

    def save(self, user_id: str, items: list[LibraryItem]) -> None:
        """Ecrit la sauvegarde complete."""
        path = self.path_for(user_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        payload = {"items": [item_to_record(item) for item in items]}
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(path)
