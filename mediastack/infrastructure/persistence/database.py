"""
Configuration de la base de donnees pour MediaStack.

Ce module fournit :
- Engine SQLModel (SQLite par defaut, toute URL SQLAlchemy acceptee)
- Session factory avec context manager
- Fonction d'initialisation des tables

La base de donnees est configuree via MEDIASTACK_DATABASE_URL
(defaut: sqlite:///mediastack.db).
"""

from collections.abc import Generator
from pathlib import Path
from typing import Optional

from sqlalchemy import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Engine global - initialise lors du premier appel a get_engine()
_engine: Optional[Engine] = None


def create_db_engine(database_url: str) -> Engine:
    """
    Cree un engine pour l'URL donnee.

    Pour un fichier SQLite, le repertoire parent est cree. Une base SQLite
    en memoire partage une connexion unique (StaticPool) pour que toutes
    les sessions voient les memes tables.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False)

    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if database_url.startswith("sqlite:///"):
        db_path = Path(database_url.replace("sqlite:///", "", 1))
        db_path.parent.mkdir(exist_ok=True, parents=True)

    return create_engine(
        database_url,
        echo=False,
        connect_args={"check_same_thread": False},
    )


def get_engine() -> Engine:
    """
    Retourne l'engine de l'application, en le creant si necessaire.

    Utilise la configuration de l'application pour l'URL de la base.
    """
    global _engine
    if _engine is None:
        from mediastack.config import Settings

        _engine = create_db_engine(Settings().database_url)
    return _engine


def reset_engine() -> None:
    """Libere l'engine global (tests, changement de configuration)."""
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None


def get_session() -> Generator[Session, None, None]:
    """
    Generateur de session SQLModel.

    Utilisation avec next() :
        session = next(get_session())

    Yields:
        Session SQLModel connectee a l'engine de l'application
    """
    with Session(get_engine()) as session:
        yield session


def init_db(engine: Optional[Engine] = None) -> None:
    """
    Initialise la base de donnees en creant les tables manquantes.

    Les modeles sont importes ici pour enregistrer leurs metadonnees dans
    SQLModel.metadata sans import circulaire.
    """
    from mediastack.infrastructure.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())
