"""
Constantes du moteur de decision MediaStack.

Regroupe les seuils et limites utilises par le matching, les suggestions
et les recommandations pour qu'ils soient ajustables en un seul endroit.
"""

# Suggestions
MIN_QUERY_LENGTH = 2
MAX_SUGGESTIONS = 7

# Matching par prefixe : score dans [PREFIX_BASE_SCORE, 1.0)
PREFIX_BASE_SCORE = 0.85
PREFIX_BOOST = 0.15

# Profil de gouts
TASTE_SOURCE_ITEMS = 12
TASTE_TOP_TAGS = 12
KIND_PREFERENCE_WINDOW = 30

# Pool de candidats
MAX_SEEDS = 10
MAX_POOL_SIZE = 80
TRENDING_SUB_KINDS = ("movie", "tv")

# Scoring des recommandations
TAG_WEIGHT = 0.65
KIND_WEIGHT = 0.35
NO_TAG_BASE_SCORE = 0.15
DETAIL_FAILURE_SCORE = 0.1
TAG_OVERLAP_CAP = 8

# Sorties
RANKED_LIST_SIZE = 8
MAX_PER_PRIMARY_TAG = 2
RANDOM_POOL_SIZE = 30
RANDOM_WEIGHT_EPSILON = 1e-6

# Statistiques
STATS_TOP_TAGS = 12
STATS_RECENT_COMPLETED = 10

# Libelles fournisseurs pour les messages utilisateur
PROVIDER_LABELS = {
    "tmdb": "TMDB",
    "igdb": "IGDB",
    "anilist": "AniList",
}

# Genres TMDB (ids des resultats de recherche/tendances -> noms)
TMDB_GENRE_MAPPING = {
    28: "Action",
    12: "Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    14: "Fantasy",
    36: "History",
    27: "Horror",
    10402: "Music",
    9648: "Mystery",
    10749: "Romance",
    878: "Science Fiction",
    10770: "TV Movie",
    53: "Thriller",
    10752: "War",
    37: "Western",
    # Genres propres aux series
    10759: "Action & Adventure",
    10762: "Kids",
    10763: "News",
    10764: "Reality",
    10765: "Sci-Fi & Fantasy",
    10766: "Soap",
    10767: "Talk",
    10768: "War & Politics",
}
