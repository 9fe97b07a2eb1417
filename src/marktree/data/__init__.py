"""Bundled sample data for seeding new stores."""
