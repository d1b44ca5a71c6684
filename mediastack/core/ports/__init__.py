"""
Ports (interfaces abstraites) definissant les contrats pour les adaptateurs.

Ports client API : Contrats pour les fournisseurs de metadonnees
- IMetadataProvider : recherche, details, elements similaires
- ITrendingFeed : tendances films/series
- Candidate, CandidateDetails : resultats des fournisseurs

Ports repository : Contrats de persistance
- ILibraryStore : chargement/sauvegarde de la bibliotheque
"""

from mediastack.core.ports.api_clients import (
    Candidate,
    CandidateDetails,
    IMetadataProvider,
    ITrendingFeed,
    ProviderConfigError,
    ProviderResponseError,
)
from mediastack.core.ports.repositories import ILibraryStore

__all__ = [
    # Clients API
    "Candidate",
    "CandidateDetails",
    "IMetadataProvider",
    "ITrendingFeed",
    "ProviderConfigError",
    "ProviderResponseError",
    # Repositories
    "ILibraryStore",
]
