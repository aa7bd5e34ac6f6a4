"""Bundled static data: progression tunables, card catalog and level table."""
