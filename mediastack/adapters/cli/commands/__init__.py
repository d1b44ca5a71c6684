"""Sous-package CLI commands - re-exporte les commandes publiques."""

from mediastack.adapters.cli.commands.discovery_commands import (
    recommend,
    search,
    stats,
)
from mediastack.adapters.cli.commands.library_commands import (
    add,
    delete,
    list_items,
    move,
    progress,
    restore,
    update,
)

__all__ = [
    "add",
    "delete",
    "list_items",
    "move",
    "progress",
    "recommend",
    "restore",
    "search",
    "stats",
    "update",
]
