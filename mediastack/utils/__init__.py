"""Utilitaires partages (normalisation de tags, constantes du moteur)."""
