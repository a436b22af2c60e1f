# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    header_sync.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# header_sync.py
'''
Works out which headers a node knows that the header tree does not, and
fetches exactly those.

Two parts:
- active chain: walk the heights above the tree's highest leaf up to the
  active tip, in bulk over REST where the node offers it
- non-active tips: walk each unknown fork tip back to its fork root, one
  header at a time (REST only serves descendants, never ancestors)

Nothing here writes to the tree. The caller inserts the returned headers
with HeaderTree.insert_headers().
'''

import logging
from typing import List, Optional

from forkforge.config import Config
from forkforge.core_defs import ChainTip, ChainTipStatus, HeaderInfo
from forkforge.errors import DataError
from forkforge.header_tree import HeaderTree
from forkforge.node import Node
from forkforge.blockchain_api import fetch_rest_headers

logger = logging.getLogger(__name__)


def first_fork_tip(tips: List[ChainTip], min_fork_height: int) -> Optional[ChainTip]:
    """The tip with the lowest fork root above min_fork_height."""
    candidates = [tip for tip in tips if tip.fork_root_height > min_fork_height]
    return min(candidates, key=lambda tip: tip.fork_root_height, default=None)


def active_tip(tips: List[ChainTip]) -> ChainTip:
    active = [tip for tip in tips if tip.status == ChainTipStatus.ACTIVE]
    if not active:
        raise DataError("No 'active' chain tip returned")
    return active[-1]


async def new_headers(node: Node, tips: List[ChainTip], tree: HeaderTree, min_fork_height: int) -> List[HeaderInfo]:
    """
    All headers the tree is missing for this node: the active chain first,
    then the non-active branches. No global ordering across the two parts.
    """
    headers = await new_active_headers(node, tips, tree, min_fork_height)
    headers.extend(await new_nonactive_headers(node, tips, tree, min_fork_height))
    return headers


async def new_active_headers(node: Node, tips: List[ChainTip], tree: HeaderTree, min_fork_height: int) -> List[HeaderInfo]:
    """
    Missing headers of the node's active chain, ascending by height.

    Returns an empty list if no tip forks off above min_fork_height.

    Raises:
        DataError: no tip has status 'active'.
        FetchError: any node query failed; nothing is returned in that case.
    """
    new: List[HeaderInfo] = []

    fork_tip = first_fork_tip(tips, min_fork_height)
    if fork_tip is None:
        logger.warning(f"No tip qualifies as first_fork_tip. Is min_fork_height={min_fork_height} reasonable for this network?")
        return new

    scan_start_height = max(fork_tip.fork_root_height - Config.SCAN_SAFETY_MARGIN, 0)

    max_leaf_height = await tree.max_leaf_height()
    current_height = scan_start_height if max_leaf_height is None else max_leaf_height

    tip = active_tip(tips)

    if node.use_rest():
        height = current_height + 1
        while height <= tip.height:
            header_hash = await node.block_hash(height)
            if await tree.contains(header_hash):
                height += 1
                continue
            count = min(Config.REST_HEADERS_STEP, tip.height - height + 1)
            headers = await fetch_rest_headers(node.rpc_url(), count, header_hash)
            if not headers:
                raise DataError(f"REST returned no headers starting at {header_hash} (height {height})")
            for offset, header in enumerate(headers):
                new.append(HeaderInfo(height=height + offset, header=header))
            height += len(headers)
    else:
        for height in range(current_height + 1, tip.height + 1):
            header_hash = await node.block_hash(height)
            if await tree.contains(header_hash):
                continue
            header = await node.block_header(header_hash)
            new.append(HeaderInfo(height=height, header=header))

    if new:
        logger.info(f"{node.info().name}: {len(new)} new active-chain headers up to height {tip.height}")
    return new


async def new_nonactive_headers(node: Node, tips: List[ChainTip], tree: HeaderTree, min_fork_height: int) -> List[HeaderInfo]:
    """
    Headers of non-active branches the tree does not know yet.

    A branch is skipped if its tip is already in the tree. Only the tip is
    checked, so a branch that grew since the last cycle is walked back in
    full, including the part already stored.
    """
    new: List[HeaderInfo] = []

    for inactive_tip in tips:
        if inactive_tip.status == ChainTipStatus.ACTIVE:
            continue
        if inactive_tip.fork_root_height <= min_fork_height:
            continue
        if await tree.contains(inactive_tip.block_hash):
            continue

        next_hash = inactive_tip.block_hash
        for i in range(inactive_tip.branchlen + 1):
            height = inactive_tip.height - i
            logger.debug(f"loading non-active-chain header: hash={next_hash}, height={height}")
            header = await node.block_header(next_hash)
            new.append(HeaderInfo(height=height, header=header))
            next_hash = header.prev_blockhash

    return new
