"""Bundled game content."""
