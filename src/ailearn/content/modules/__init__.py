"""Bundled module definitions."""
