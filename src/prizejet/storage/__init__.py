"""Persistence: models, sessions, repositories and exports."""
