"""Perpetual background loops.

Each loop runs one step per wake and sleeps a fixed interval in between. A
failed step is logged and the loop carries on; only cancellation stops it.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

logger = logging.getLogger("uvicorn.error")


async def run_periodic(
    name: str,
    interval_seconds: float,
    step: Callable[[], Awaitable[Any]],
    *,
    max_cycles: int | None = None,
) -> None:
    """Run `step` forever (or `max_cycles` times), sleeping between runs."""
    logger.info(f"Starting background loop: {name} (every {interval_seconds:g}s)")
    cycles = 0
    while True:
        try:
            await step()
        except Exception:
            logger.exception(f"{name}: cycle failed, will retry next interval")

        cycles += 1
        if max_cycles is not None and cycles >= max_cycles:
            return
        await asyncio.sleep(interval_seconds)


def spawn(name: str, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
    """Start a named background task on the running loop."""
    return asyncio.create_task(coro, name=name)


async def cancel_all(tasks: list[asyncio.Task[None]]) -> None:
    """Cancel tasks and wait for them to unwind."""
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
