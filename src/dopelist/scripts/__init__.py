"""Operational scripts: migrations, catalog seeding and development tokens."""
