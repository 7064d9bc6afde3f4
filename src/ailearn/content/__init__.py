"""Bundled learning content."""
