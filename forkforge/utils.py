# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    utils.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# utils.py
# little helpers for the long-running sync process
# - pause/stop flag files (see control_process.py)
# - tree summaries for the log

import asyncio
import logging
import os

from forkforge.header_tree import HeaderTree

logger = logging.getLogger(__name__)

PAUSE_CHECK_INTERVAL = 5  # seconds


def flag_file(process_name: str, action: str) -> str:
    return f"{process_name}.{action}.flag"


async def check_process_controls(process_name: str) -> bool:
    """
    Checks for pause and stop flag files for a given process.
    Blocks while paused. Returns True if the process should stop.
    """
    pause_flag = flag_file(process_name, "pause")
    stop_flag = flag_file(process_name, "stop")

    if os.path.exists(pause_flag):
        logger.info(f"'{pause_flag}' detected. Pausing. To resume, run 'control_process.py {process_name} resume'.")
        while os.path.exists(pause_flag):
            await asyncio.sleep(PAUSE_CHECK_INTERVAL)
        logger.info(f"'{pause_flag}' removed. Resuming.")

    if os.path.exists(stop_flag):
        logger.info(f"'{stop_flag}' detected. Stopping gracefully.")
        try:
            os.remove(stop_flag)
        except OSError as e:
            logger.error(f"Error removing {stop_flag}: {e}")
        return True

    return False


async def tree_summary(tree: HeaderTree) -> str:
    """One log line describing the tree: size, tips, forks."""
    async with tree.lock:
        size = len(tree)
        leaves = sorted(tree.leaves(), key=lambda info: info.height, reverse=True)
        forks = tree.fork_points()
    if not leaves:
        return "tree is empty"
    best = leaves[0]
    fork_heights = ", ".join(str(info.height) for info in forks) or "none"
    return (
        f"{size} headers, {len(leaves)} tips, highest {best.height} ({best.block_hash}), "
        f"fork points at heights: {fork_heights}"
    )
