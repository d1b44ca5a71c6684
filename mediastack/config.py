"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe MEDIASTACK_,
et peut optionnellement être fournie via un fichier .env.

Les identifiants des fournisseurs (TMDB, IGDB) sont optionnels : un fournisseur non configuré
n'est pas enregistré et ses types de media n'ont simplement pas de suggestions.
AniList ne demande aucun identifiant.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Fichier .env à la racine du projet (parent de mediastack/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe MEDIASTACK_.
    Exemple : MEDIASTACK_LOG_LEVEL=DEBUG

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIASTACK_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Stockage
    database_url: str = Field(default="sqlite:///mediastack.db")
    backup_dir: Path = Field(default=Path("~/.mediastack/backup"))
    cache_dir: Path = Field(default=Path(".cache/api"))
    user_id: str = Field(default="local", min_length=1)

    # Fournisseurs (OPTIONNELS)
    tmdb_api_key: Optional[str] = Field(default=None)
    igdb_client_id: Optional[str] = Field(default=None)
    igdb_client_secret: Optional[str] = Field(default=None)

    # Moteur
    suggestion_debounce_ms: int = Field(default=650, ge=0)
    undo_window_seconds: float = Field(default=10, gt=0)
    provider_result_limit: int = Field(default=10, ge=1, le=50)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Optional[Path] = Field(default=Path("logs/mediastack.log"))  # vide = pas de fichier
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("backup_dir", "cache_dir", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_log_file(cls, v: str | Path | None) -> Optional[Path]:
        """Chemin du journal ; une valeur vide désactive le fichier."""
        if v is None or str(v).strip() == "":
            return None
        return Path(v).expanduser()

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Niveau loguru en majuscules (DEBUG, INFO, WARNING, ERROR)."""
        level = str(v).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Niveau de log inconnu: {v}")
        return level

    @property
    def tmdb_enabled(self) -> bool:
        """Vérifie si l'API TMDB est configurée."""
        return bool(self.tmdb_api_key)

    @property
    def igdb_enabled(self) -> bool:
        """Vérifie si l'API IGDB est configurée (client ID et secret)."""
        return bool(self.igdb_client_id and self.igdb_client_secret)

    @property
    def suggestion_debounce_seconds(self) -> float:
        """Délai de debounce des suggestions, en secondes."""
        return self.suggestion_debounce_ms / 1000
