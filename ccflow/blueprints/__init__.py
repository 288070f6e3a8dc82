"""Blueprints bundled with ccflow; one directory per blueprint id."""
