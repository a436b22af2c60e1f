# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    test_ff_sync.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# test_ff_sync.py
# One polling cycle end to end: tips -> new headers -> tree.

import httpx
import pytest

import ff_sync
from forkforge import utils
from forkforge.core_defs import ChainTipStatus
from forkforge.header_tree import HeaderTree
from forkforge.node import BitcoinCoreNode, NodeInfo

from chain_helpers import FakeNode, make_chain, tip_of


@pytest.fixture
def forked_node():
    main = make_chain(21)
    fork = make_chain(2, start_height=18, prev_hash=main[17].block_hash, salt=3)
    tips = [tip_of(main, ChainTipStatus.ACTIVE), tip_of(fork, ChainTipStatus.VALID_FORK, branchlen=2)]
    return FakeNode(main, extra=fork, tips=tips)


@pytest.mark.asyncio
async def test_sync_node_fills_tree(forked_node):
    tree = HeaderTree()

    added = await ff_sync.sync_node(forked_node, tree, 0, log_version=True)

    # fork root 17 -> scan start 12: heights 13..20 plus two fork headers
    assert added == 10
    assert [info.height for info in tree.fork_points()] == [17]
    assert "fork points at heights: 17" in await utils.tree_summary(tree)


@pytest.mark.asyncio
async def test_second_cycle_fetches_nothing_new(forked_node):
    tree = HeaderTree()
    await ff_sync.sync_node(forked_node, tree, 0)
    forked_node.header_calls.clear()

    assert await ff_sync.sync_node(forked_node, tree, 0) == 0
    assert forked_node.header_calls == []


@pytest.mark.asyncio
async def test_failed_node_does_not_touch_tree():
    chain = make_chain(5)
    node = FakeNode(chain, tips=[tip_of(chain, ChainTipStatus.VALID_FORK)])
    tree = HeaderTree()

    assert await ff_sync.sync_node(node, tree, 0) == 0
    assert len(tree) == 0


@pytest.mark.asyncio
async def test_stop_flag_is_consumed(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert await utils.check_process_controls("sync") is False

    (tmp_path / "sync.stop.flag").touch()
    assert await utils.check_process_controls("sync") is True
    assert not (tmp_path / "sync.stop.flag").exists()


@pytest.mark.asyncio
async def test_empty_tree_summary():
    assert await utils.tree_summary(HeaderTree()) == "tree is empty"


@pytest.mark.asyncio
async def test_misconfigured_node_does_not_stop_the_cycle(forked_node):
    # user without password: the client cannot even build its auth header
    broken = BitcoinCoreNode(NodeInfo(7, "broken", "no password"), "127.0.0.1:8332", rpc_user="user",
                             transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    tree = HeaderTree()

    await ff_sync.sync_cycle([broken, forked_node], tree, 0, first_cycle=True)

    assert len(tree) == 10
    assert [info.height for info in tree.fork_points()] == [17]


@pytest.mark.asyncio
async def test_unexpected_node_error_is_logged_and_others_sync(forked_node, caplog):
    chain = make_chain(3)

    class ExplodingNode(FakeNode):
        async def tips(self):
            raise KeyError("boom")

    tree = HeaderTree()
    await ff_sync.sync_cycle([ExplodingNode(chain), forked_node], tree, 0)

    assert len(tree) == 10
    assert "Unexpected error while syncing" in caplog.text
