# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    node_config.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# node_config.py
'''
Builds Node objects from the node definition file (Config.NODES_FILE).

Example nodes.json:
[
    {"id": 0, "name": "core-26", "description": "Bitcoin Core 26.0",
     "implementation": "bitcoincore", "rpc_host": "127.0.0.1", "rpc_port": 8332,
     "rpc_cookie_file": "/home/bitcoin/.bitcoin/.cookie", "use_rest": true},
    {"id": 1, "name": "btcd", "description": "btcd 0.24",
     "implementation": "btcd", "rpc_host": "127.0.0.1", "rpc_port": 8334,
     "rpc_user": "user", "rpc_password": "pass"}
]
'''

import json
import logging
from typing import Any, Dict, List

from forkforge.node import BitcoinCoreNode, BtcdNode, Node, NodeInfo

logger = logging.getLogger(__name__)

IMPLEMENTATIONS = ("bitcoincore", "btcd")


def build_node(definition: Dict[str, Any]) -> Node:
    """
    Creates one backend from its definition.

    Raises:
        ValueError: unknown implementation or missing/invalid fields.
    """
    try:
        info = NodeInfo(
            id=int(definition["id"]),
            name=str(definition["name"]),
            description=str(definition.get("description", "")),
        )
        implementation = str(definition.get("implementation", "bitcoincore")).lower()
        rpc_url = f"{definition['rpc_host']}:{int(definition['rpc_port'])}"
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid node definition {definition!r}: {e}") from e

    if implementation == "bitcoincore":
        if not definition.get("rpc_cookie_file") and "rpc_user" not in definition:
            raise ValueError(f"Node '{info.name}' needs rpc_user/rpc_password or rpc_cookie_file.")
        if "rpc_user" in definition and "rpc_password" not in definition:
            raise ValueError(f"Node '{info.name}' has rpc_user but no rpc_password.")
        return BitcoinCoreNode(
            info,
            rpc_url,
            rpc_user=definition.get("rpc_user"),
            rpc_password=definition.get("rpc_password"),
            rpc_cookie_file=definition.get("rpc_cookie_file"),
            use_rest=bool(definition.get("use_rest", False)),
        )
    if implementation == "btcd":
        if "rpc_user" not in definition or "rpc_password" not in definition:
            raise ValueError(f"btcd node '{info.name}' needs rpc_user and rpc_password.")
        if definition.get("use_rest"):
            logger.warning(f"Node '{info.name}': btcd has no REST interface, ignoring use_rest.")
        return BtcdNode(info, rpc_url, str(definition["rpc_user"]), str(definition["rpc_password"]))

    raise ValueError(f"Unknown implementation '{implementation}' for node '{info.name}'. Use one of {IMPLEMENTATIONS}.")


def load_nodes(file_path: str) -> List[Node]:
    """Loads all node definitions. Node ids must be unique."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            definitions = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse JSON in '{file_path}': {e}") from e

    if not isinstance(definitions, list):
        raise ValueError(f"'{file_path}' must contain a list of node definitions.")

    nodes = [build_node(d) for d in definitions]
    ids = [n.info().id for n in nodes]
    if len(ids) != len(set(ids)):
        raise ValueError(f"Duplicate node ids in '{file_path}': {ids}")

    logger.info(f"Loaded {len(nodes)} node definitions from {file_path}")
    return nodes
