# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    header_tree.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# header_tree.py
'''
The header tree: every header seen so far, across all nodes and branches.

The tree is shared by all pollers and guarded by a single asyncio.Lock.
Rules for callers:
- hold the lock only for in-memory lookups or inserts, never while
  waiting on the network
- the async helpers (contains, max_leaf_height, insert_headers) each take
  the lock for exactly one operation
- the plain methods assume the caller already holds the lock

Headers are only ever added. A lookup that races with another poller's
insert can therefore at worst cause one duplicate fetch.
'''

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Set

from forkforge.core_defs import HeaderInfo

logger = logging.getLogger(__name__)


class HeaderTree:
    """
    Headers keyed by block hash, with a parent -> children index built
    from each header's previous block hash.
    """

    def __init__(self):
        self.lock = asyncio.Lock()
        self._headers: Dict[str, HeaderInfo] = {}
        # prev hash -> hashes of stored headers pointing to it
        self._children: Dict[str, Set[str]] = {}

    def __len__(self) -> int:
        return len(self._headers)

    def __contains__(self, block_hash: str) -> bool:
        return block_hash in self._headers

    def get(self, block_hash: str) -> Optional[HeaderInfo]:
        return self._headers.get(block_hash)

    def children(self, block_hash: str) -> Set[str]:
        return set(self._children.get(block_hash, ()))

    def insert(self, header_info: HeaderInfo) -> bool:
        """Adds one header. Returns False if the hash was already known."""
        block_hash = header_info.block_hash
        if block_hash in self._headers:
            return False
        self._headers[block_hash] = header_info
        self._children.setdefault(header_info.header.prev_blockhash, set()).add(block_hash)
        return True

    def leaves(self) -> List[HeaderInfo]:
        """Stored headers without a stored child."""
        return [info for block_hash, info in self._headers.items() if not self._children.get(block_hash)]

    def max_leaf(self) -> Optional[HeaderInfo]:
        # equal heights are interchangeable here
        return max(self.leaves(), key=lambda info: info.height, default=None)

    def fork_points(self) -> List[HeaderInfo]:
        """Stored headers with more than one stored child, lowest first."""
        forks = [
            self._headers[parent]
            for parent, kids in self._children.items()
            if len(kids) > 1 and parent in self._headers
        ]
        return sorted(forks, key=lambda info: info.height)

    # --- locked helpers ---

    async def contains(self, block_hash: str) -> bool:
        async with self.lock:
            return block_hash in self._headers

    async def max_leaf_height(self) -> Optional[int]:
        """Height of the highest leaf, None for an empty tree."""
        async with self.lock:
            leaf = self.max_leaf()
            return leaf.height if leaf is not None else None

    async def insert_headers(self, headers: Iterable[HeaderInfo]) -> int:
        """Inserts all headers under one lock. Returns the number of new ones."""
        async with self.lock:
            added = sum(1 for info in headers if self.insert(info))
        logger.debug(f"inserted {added} new headers, tree size {len(self._headers)}")
        return added
