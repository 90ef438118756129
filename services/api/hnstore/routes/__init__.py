"""API routes."""

from fastapi import APIRouter

from hnstore.routes import bookmarks, items, lists, stats

api_router = APIRouter()

# Item lookups and tree materialization
api_router.include_router(items.router, prefix="/v1/items", tags=["items"])

# Ranked lists and recent changes
api_router.include_router(lists.router, prefix="/v1", tags=["lists"])

# Bookmarks
api_router.include_router(bookmarks.router, prefix="/v1/bookmarks", tags=["bookmarks"])

# Backfill progress
api_router.include_router(stats.router, prefix="/v1", tags=["stats"])
