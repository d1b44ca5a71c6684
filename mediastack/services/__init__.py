"""
Couche application (cas d'utilisation).

Les services orchestrent la logique du domaine :
- matcher : similarite de titres (normalisation + distance d'edition)
- suggestions : classement des candidats et recherche au fil de la frappe
- resolver : fusion d'un candidat choisi dans un brouillon
- progress : machine a etats statut/progression
- library : proprietaire unique de la bibliotheque et du tampon d'annulation
- recommender : profil de gouts et recommandations
- stats : statistiques derivees de la bibliotheque

Les services dependent des ports (interfaces) de core/, jamais des
implementations concretes de adapters/.
"""
