"""Composition root for wiring dependencies.

This package centralizes infrastructure-aware wiring so the API layer can
depend on application services without importing infrastructure directly.
"""
