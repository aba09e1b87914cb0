"""Shared storage layer: models, repositories, database and migrations."""
