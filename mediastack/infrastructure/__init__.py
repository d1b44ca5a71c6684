"""Infrastructure : persistance de la bibliotheque (base SQL, sauvegarde JSON locale)."""
