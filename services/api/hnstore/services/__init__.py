"""Business logic services.

Services contain the caching, fan-out, traversal and snapshot logic and are
called by routes and background tasks. Dependencies (gateway, cache backend,
session factory) are passed in explicitly.
"""
