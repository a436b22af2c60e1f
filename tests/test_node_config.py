# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    test_node_config.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

import json

import pytest

from forkforge.node import BitcoinCoreNode, BtcdNode
from forkforge.node_config import build_node, load_nodes

CORE = {"id": 0, "name": "core", "description": "Bitcoin Core", "implementation": "bitcoincore",
        "rpc_host": "127.0.0.1", "rpc_port": 8332, "rpc_user": "u", "rpc_password": "p", "use_rest": True}
BTCD = {"id": 1, "name": "btcd", "implementation": "btcd",
        "rpc_host": "10.0.0.2", "rpc_port": "8334", "rpc_user": "u", "rpc_password": "p"}


def test_build_both_backends():
    core = build_node(CORE)
    btcd = build_node(BTCD)

    assert isinstance(core, BitcoinCoreNode)
    assert core.use_rest() is True
    assert core.rpc_url() == "127.0.0.1:8332"
    assert isinstance(btcd, BtcdNode)
    assert btcd.rpc_url() == "10.0.0.2:8334"
    assert btcd.info().description == ""


@pytest.mark.parametrize("definition", [
    {**CORE, "implementation": "geth"},
    {k: v for k, v in CORE.items() if k != "rpc_port"},
    {k: v for k, v in CORE.items() if k not in ("rpc_user", "rpc_password")},
    {k: v for k, v in CORE.items() if k != "rpc_password"},
    {k: v for k, v in BTCD.items() if k != "rpc_password"},
    {**CORE, "id": "first"},
])
def test_invalid_definitions(definition):
    with pytest.raises(ValueError):
        build_node(definition)


def test_load_nodes(tmp_path):
    nodes_file = tmp_path / "nodes.json"
    nodes_file.write_text(json.dumps([CORE, BTCD]))

    nodes = load_nodes(str(nodes_file))

    assert [n.info().name for n in nodes] == ["core", "btcd"]


def test_load_nodes_rejects_duplicate_ids(tmp_path):
    nodes_file = tmp_path / "nodes.json"
    nodes_file.write_text(json.dumps([CORE, {**BTCD, "id": 0}]))

    with pytest.raises(ValueError):
        load_nodes(str(nodes_file))


def test_load_nodes_rejects_non_list(tmp_path):
    nodes_file = tmp_path / "nodes.json"
    nodes_file.write_text(json.dumps(CORE))

    with pytest.raises(ValueError):
        load_nodes(str(nodes_file))
