"""
Journalisation de MediaStack via loguru.

Deux destinations :
- stderr : messages courts et colorés ; niveau choisi par -q / -v / -vv,
  sinon par MEDIASTACK_LOG_LEVEL
- fichier : une ligne JSON par événement, niveau DEBUG (appels fournisseurs
  compris), rotation et compression zip ; désactivé si log_file est vide

Chaque événement porte l'utilisateur de la bibliothèque (extra["user_id"]),
ce qui permet de filtrer le journal JSON quand plusieurs bibliothèques
partagent la même machine.
"""

import sys

from loguru import logger

from .config import Settings

# -v / -vv ; au-delà, on reste en DEBUG
VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def console_level(settings: Settings, verbosity: int = 0, quiet: bool = False) -> str:
    """Niveau de la sortie stderr : -q force ERROR, -v/-vv priment sur la configuration."""
    if quiet:
        return "ERROR"
    if verbosity > 0:
        return VERBOSITY_LEVELS[min(verbosity, max(VERBOSITY_LEVELS))]
    return settings.log_level


def configure_logging(settings: Settings, verbosity: int = 0, quiet: bool = False) -> str:
    """Configure loguru d'après les paramètres de l'application.

    Args :
        settings : Paramètres (niveau, fichier, rotation, rétention, utilisateur)
        verbosity : Nombre de -v passés à la CLI
        quiet : Mode silencieux (erreurs uniquement sur stderr)

    Returns :
        Le niveau retenu pour stderr
    """
    level = console_level(settings, verbosity, quiet)

    logger.remove()
    logger.configure(extra={"user_id": settings.user_id})
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            level="DEBUG",
            format="{message}",
            serialize=True,
            rotation=settings.log_rotation_size,
            retention=settings.log_retention_count,
            compression="zip",
            enqueue=True,
        )

    logger.debug(
        "Logging configuré",
        console_level=level,
        log_file=str(settings.log_file) if settings.log_file else None,
    )
    return level
