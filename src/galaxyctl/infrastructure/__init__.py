"""Infrastructure layer — SQLite persistence and the registry store.

This layer depends on stdlib and third-party libs (SQLAlchemy).
It must never import from services, commands, or output.
"""
