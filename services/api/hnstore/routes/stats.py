"""Store statistics.

GET /v1/stats - progress of the backfill sweeper
"""

from fastapi import APIRouter

from hnstore.schemas import StoreStats
from hnstore.services.backfill import read_cursor
from hnstore.stores.postgres import get_session

router = APIRouter()


@router.get("/stats", response_model=StoreStats)
async def get_stats() -> StoreStats:
    async with get_session() as session:
        cursor = await read_cursor(session)
    return StoreStats(backfill_cursor=cursor)
