"""
Module de persistance de la bibliotheque.

- database.py : engine SQLModel, session factory, initialisation
- models.py : modele SQLModel de la table library_items
- repositories/ : SQLModelLibraryStore (ILibraryStore en base)
- local_backup.py : JsonLibraryBackup (ILibraryStore en fichier JSON)
- synced_store.py : SyncedLibraryStore (base + repli local)
- serialization.py : conversion LibraryItem <-> enregistrement JSON

Usage:
    from mediastack.infrastructure.persistence import init_db, get_session

    init_db()
    store = SQLModelLibraryStore(next(get_session()))
"""

from mediastack.infrastructure.persistence.database import get_engine, get_session, init_db
from mediastack.infrastructure.persistence.local_backup import JsonLibraryBackup
from mediastack.infrastructure.persistence.models import LibraryItemModel
from mediastack.infrastructure.persistence.synced_store import SyncedLibraryStore, SyncResult

__all__ = [
    "get_engine",
    "get_session",
    "init_db",
    "JsonLibraryBackup",
    "LibraryItemModel",
    "SyncedLibraryStore",
    "SyncResult",
]
