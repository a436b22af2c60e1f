# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    ff_sync.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# ff_sync.py
'''
Polls every configured node and grows one shared header tree from their
chain tips, so forks, stale branches and reorgs become visible.

Nodes are read from Config.NODES_FILE (see forkforge/node_config.py).

Modes:
- continuous (default): poll all nodes every POLLING_INTERVAL seconds
- --duration N: poll for N minutes, then stop
- --once: a single cycle

Pause/stop a running instance with:
    python -m forkforge.control_process sync pause|resume|stop
'''

import argparse
import asyncio
import logging

from forkforge.config import Config
from forkforge.errors import FetchError, NotSupportedError
from forkforge.header_sync import new_headers
from forkforge.header_tree import HeaderTree
from forkforge.node import Node
from forkforge.node_config import load_nodes
from forkforge import utils

Config.ensure_output_dir()

logging.basicConfig(
    level=logging.DEBUG if Config.VERBOSE else logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(Config.LOG_FILE, mode='a', encoding='utf-8'),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)

PROCESS_NAME = "sync"


async def sync_node(node: Node, tree: HeaderTree, min_fork_height: int, log_version: bool = False) -> int:
    """
    One sync cycle for one node. Returns the number of headers added to the tree.
    Fetch failures are logged; the next cycle simply tries again.
    """
    info = node.info()
    try:
        if log_version:
            try:
                logger.info(f"{info}: version {await node.version()}")
            except NotSupportedError:
                logger.debug(f"{info}: version not available for this backend")

        tips = await node.tips()
        headers = await new_headers(node, tips, tree, min_fork_height)
    except FetchError as e:
        logger.error(f"Sync failed for {info}: {e}")
        return 0

    added = await tree.insert_headers(headers)
    logger.info(f"{info}: {len(tips)} tips, fetched {len(headers)} headers, {added} new in tree")
    return added


async def sync_cycle(nodes, tree: HeaderTree, min_fork_height: int, first_cycle: bool = False):
    # nodes are polled concurrently; they only meet at the tree lock
    results = await asyncio.gather(
        *(sync_node(node, tree, min_fork_height, log_version=first_cycle) for node in nodes),
        return_exceptions=True,
    )
    for node, result in zip(nodes, results):
        if isinstance(result, Exception):
            logger.error(f"Unexpected error while syncing {node.info()}: {result!r}")
    logger.info(f"Header tree: {await utils.tree_summary(tree)}")


async def main_sync(once: bool, duration_minutes: int | None, min_fork_height: int):
    nodes = load_nodes(Config.NODES_FILE)
    if not nodes:
        logger.error(f"No nodes configured in {Config.NODES_FILE}.")
        return

    tree = HeaderTree()
    logger.info(f"\n--- Starting ForkForge sync for {len(nodes)} nodes (min_fork_height={min_fork_height}) ---")

    if once:
        await sync_cycle(nodes, tree, min_fork_height, first_cycle=True)
        return

    loop = asyncio.get_running_loop()
    deadline = loop.time() + duration_minutes * 60 if duration_minutes else None
    first_cycle = True
    try:
        while True:
            if await utils.check_process_controls(PROCESS_NAME):
                break
            await sync_cycle(nodes, tree, min_fork_height, first_cycle=first_cycle)
            first_cycle = False
            if deadline is not None and loop.time() >= deadline:
                logger.info(f"Duration of {duration_minutes} minutes reached.")
                break
            await asyncio.sleep(Config.POLLING_INTERVAL)
    except asyncio.CancelledError:
        pass

    logger.info("\n--- ForkForge sync has been stopped. ---")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Poll nodes and build the shared block header tree.")
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--once', action='store_true', help="Run a single sync cycle and exit.")
    group.add_argument('-d', '--duration', type=int, metavar='MINUTES', help="Run for a specific duration in minutes.")
    parser.add_argument('--min-fork-height', type=int, default=Config.MIN_FORK_HEIGHT,
                        help=f"Ignore tips forking off at or below this height (default: {Config.MIN_FORK_HEIGHT}).")
    args = parser.parse_args()

    try:
        asyncio.run(main_sync(args.once, args.duration, args.min_fork_height))
    except KeyboardInterrupt:
        logger.info("\n--- ForkForge sync stopped by user (Ctrl+C). ---")
    except (OSError, ValueError) as e:
        logger.error(f"Could not start sync: {e}")
