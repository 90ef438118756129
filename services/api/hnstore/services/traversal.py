"""Comment-tree traversal.

descendants(): breadth-first, one get_many round per queue slice. Ids that do
not fit under the cap wait at the head of the queue for the next round, so the
result is always a breadth-first prefix of the tree.
ancestors(): single-parent walk from a comment up to its story.

Both stop at `cap` results (a fuse, not a semantic limit) and truncate rather
than fail. The item graph is assumed acyclic; ids already collected are never
queued again, which with the cap bounds the work if the upstream misbehaves.
"""

import logging

from hnstore.schemas.items import Item
from hnstore.services.fetcher import ItemFetcher

logger = logging.getLogger("uvicorn.error")

DEFAULT_CAP = 10_000


class TreeWalker:
    def __init__(self, fetcher: ItemFetcher, cap: int = DEFAULT_CAP) -> None:
        if cap < 1:
            raise ValueError("cap must be >= 1")
        self.fetcher = fetcher
        self.cap = cap

    async def descendants(self, root_id: int) -> dict[int, Item]:
        """All items below root_id (root excluded), keyed by id.

        Raises:
            UpstreamError: the root itself could not be fetched. Failures
                further down only shrink the result.
        """
        results: dict[int, Item] = {}
        root = await self.fetcher.cache.get(root_id)
        if root is None:
            return results

        seen = {root_id}
        queue = _unseen(root.child_ids(), seen)

        while queue and len(results) < self.cap:
            room = self.cap - len(results)
            batch, queue = queue[:room], queue[room:]

            fetched = await self.fetcher.get_many(batch)
            seen.update(batch)

            children: list[int] = []
            for item_id in batch:
                item = fetched.get(item_id)
                if item is None:
                    continue
                results[item_id] = item
                children.extend(item.child_ids())

            queue = _unseen(queue + children, seen)

        if queue:
            logger.warning(f"descendants({root_id}) hit the {self.cap} item cap, truncating")
        return results

    async def ancestors(self, item_id: int) -> dict[int, Item]:
        """Parent chain above item_id up to the root story, keyed by id.

        Raises:
            UpstreamError: the starting item could not be fetched.
        """
        results: dict[int, Item] = {}
        item = await self.fetcher.cache.get(item_id)
        if item is None:
            return results

        seen = {item_id}
        parent_id = item.parent_id()
        while parent_id is not None and parent_id not in seen and len(results) < self.cap:
            seen.add(parent_id)
            found = await self.fetcher.get_many([parent_id])
            parent = found.get(parent_id)
            if parent is None:
                break
            results[parent_id] = parent
            parent_id = parent.parent_id()

        return results


def _unseen(ids: list[int], seen: set[int]) -> list[int]:
    """Dedupe ids, keeping first-seen order, and drop ones already visited."""
    return [i for i in dict.fromkeys(ids) if i not in seen]
