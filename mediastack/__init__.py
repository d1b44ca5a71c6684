"""
MediaStack - Suivi personnel de films, series, jeux, anime/manga et livres.

Ce package fournit le moteur de decision qui transforme un titre saisi
librement en un enregistrement de bibliotheque coherent : matching flou
contre les fournisseurs de metadonnees, fusion des metadonnees, machine a
etats statut/progression et recommandations.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, objets valeur)
- services/ : Couche application (cas d'utilisation, orchestration)
- adapters/ : Couche infrastructure (CLI, clients API)
- infrastructure/ : Persistance (SQLModel, sauvegarde locale JSON)
"""
