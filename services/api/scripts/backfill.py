#!/usr/bin/env python3
"""One-off backfill job (Railway Cron or manual).

Behavior:
- Resume from the persisted backfill cursor (config key "backfill_ptr")
- Sweep ids upward in batches, storing durable item copies
- Stop at the upstream max id or after BACKFILL_MAX_BATCHES batches

Run (local / Railway):
  cd services/api
  python -m scripts.backfill

Optional env vars:
  BACKFILL_BATCH_SIZE=100
  BACKFILL_MAX_BATCHES=50
"""

import asyncio
import os
import sys
from dataclasses import asdict


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402

from hnstore.services.backfill import BackfillSweeper  # noqa: E402
from hnstore.services.hn_client import close_hn_client  # noqa: E402
from hnstore.services.item_store import get_item_store  # noqa: E402
from hnstore.settings import get_settings  # noqa: E402
from hnstore.stores.postgres import close_db, init_db, ping_db  # noqa: E402
from hnstore.stores.redis import close_redis, init_redis  # noqa: E402

load_dotenv()


async def main() -> None:
    settings = get_settings()
    await init_db()
    await ping_db()
    if settings.cache_backend == "redis":
        await init_redis()

    try:
        max_batches = int(os.getenv("BACKFILL_MAX_BATCHES", "50"))
        sweeper = BackfillSweeper(get_item_store(), batch_size=settings.backfill_batch_size)

        batches: list[dict] = []
        for _ in range(max_batches):
            stats = await sweeper.run_batch()
            batches.append(asdict(stats))
            if stats.done:
                break

        # Final output for cron logs (single JSON-ish blob)
        print(
            {
                "ok": True,
                "batches": len(batches),
                "stored": sum(b["stored"] for b in batches),
                "cursor": batches[-1]["end_id"] if batches else None,
                "done": bool(batches and batches[-1]["done"]),
            }
        )
    finally:
        await close_hn_client()
        await close_redis()
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
