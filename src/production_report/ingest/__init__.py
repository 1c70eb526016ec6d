"""Ingest utilities: read CSV / feed sources and parse them into records."""
