"""
Couche domaine de MediaStack.

Contient les entites (LibraryItem), les objets valeur (types de media,
statuts, familles de fournisseurs) et les ports (interfaces abstraites)
vers les fournisseurs de metadonnees et la persistance.
"""
