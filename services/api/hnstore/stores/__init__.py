"""Data stores for persistence and caching.

Stores handle:
- SQL database: engine, sessions, ORM base
- Redis: shared item cache with TTL

No traversal/ranking logic in stores - that belongs in services.
"""
