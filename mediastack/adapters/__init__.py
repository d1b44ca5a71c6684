"""Adaptateurs : clients des fournisseurs de metadonnees et interface CLI."""
