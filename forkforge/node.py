# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    node.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# node.py
'''
Node backends.

Node is the small capability set the header synchronization needs.
Each backend implements it over its own protocol:
- BitcoinCoreNode: blocking RPC client in a worker thread, optional REST
- BtcdNode: raw JSON-RPC only, no version call, no REST
The synchronization itself lives in header_sync.py and works on any Node.
'''

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

import httpx

from forkforge.config import Config
from forkforge.core_defs import BlockHeader, ChainTip
from forkforge.errors import DispatchError, FetchError, NotSupportedError
from forkforge import jsonrpc
from forkforge.rpc_client import BitcoinRPCClient, normalize_url

logger = logging.getLogger(__name__)

BTCD_USE_REST = False


@dataclass(frozen=True)
class NodeInfo:
    id: int
    name: str
    description: str

    def __str__(self) -> str:
        return f"Node(id={self.id}, name='{self.name}', description='{self.description}')"


class Node(ABC):

    @abstractmethod
    def info(self) -> NodeInfo:
        ...

    @abstractmethod
    def use_rest(self) -> bool:
        """True if headers can be bulk-loaded over REST."""

    @abstractmethod
    def rpc_url(self) -> str:
        """host:port of the node."""

    @abstractmethod
    async def version(self) -> str:
        ...

    @abstractmethod
    async def block_header(self, block_hash: str) -> BlockHeader:
        ...

    @abstractmethod
    async def block_hash(self, height: int) -> str:
        ...

    @abstractmethod
    async def tips(self) -> List[ChainTip]:
        ...


class BitcoinCoreNode(Node):

    def __init__(
        self,
        info: NodeInfo,
        rpc_url: str,
        rpc_user: Optional[str] = None,
        rpc_password: Optional[str] = None,
        rpc_cookie_file: Optional[str] = None,
        use_rest: bool = False,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._info = info
        self._rpc_url = rpc_url
        self._rpc_user = rpc_user
        self._rpc_password = rpc_password
        self._rpc_cookie_file = rpc_cookie_file
        self._use_rest = use_rest
        self._timeout = timeout if timeout is not None else Config.rpc_timeout()
        self._transport = transport

    def _rpc_client(self) -> BitcoinRPCClient:
        # a fresh client per call picks up a rotated .cookie after node restarts;
        # runs in the worker thread since the cookie is read from disk
        try:
            return BitcoinRPCClient(
                self._rpc_url,
                user=self._rpc_user,
                password=self._rpc_password,
                cookie_file=self._rpc_cookie_file,
                timeout=self._timeout,
                transport=self._transport,
            )
        except FetchError as e:
            logger.error(f"Could not create a RPC client for node {self._info}: {e}")
            raise

    def _call_blocking(self, method: str, *args: Any) -> Any:
        rpc = self._rpc_client()
        return getattr(rpc, method)(*args)

    async def _dispatch(self, method: str, *args: Any) -> Any:
        """Creates a client and runs one blocking RPC call in the default thread pool."""
        try:
            return await asyncio.to_thread(self._call_blocking, method, *args)
        except FetchError:
            raise
        except Exception as e:
            # executor shut down, loop closing, or the client failed outside its own error handling
            logger.error(f"RPC {method} for node {self._info} failed in dispatch: {e!r}")
            raise DispatchError(f"could not dispatch {method} for node {self._info}: {e!r}") from e

    def info(self) -> NodeInfo:
        return self._info

    def use_rest(self) -> bool:
        return self._use_rest

    def rpc_url(self) -> str:
        return self._rpc_url

    async def version(self) -> str:
        network_info = await self._dispatch("get_network_info")
        return str(network_info.get("subversion", ""))

    async def block_hash(self, height: int) -> str:
        return await self._dispatch("get_block_hash", height)

    async def block_header(self, block_hash: str) -> BlockHeader:
        return await self._dispatch("get_block_header", block_hash)

    async def tips(self) -> List[ChainTip]:
        return await self._dispatch("get_chain_tips")


class BtcdNode(Node):

    def __init__(
        self,
        info: NodeInfo,
        rpc_url: str,
        rpc_user: str,
        rpc_password: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._info = info
        self._rpc_url = rpc_url
        self._rpc_user = rpc_user
        self._rpc_password = rpc_password
        self._timeout = timeout if timeout is not None else Config.rpc_timeout()
        self._transport = transport

    def _call_kwargs(self) -> dict:
        return {"timeout": self._timeout, "transport": self._transport}

    def info(self) -> NodeInfo:
        return self._info

    def use_rest(self) -> bool:
        return BTCD_USE_REST

    def rpc_url(self) -> str:
        return self._rpc_url

    async def version(self) -> str:
        raise NotSupportedError(f"btcd node {self._info} has no getnetworkinfo call")

    async def block_header(self, block_hash: str) -> BlockHeader:
        return await jsonrpc.btcd_blockheader(
            normalize_url(self._rpc_url), self._rpc_user, self._rpc_password, block_hash, **self._call_kwargs()
        )

    async def block_hash(self, height: int) -> str:
        return await jsonrpc.btcd_blockhash(
            normalize_url(self._rpc_url), self._rpc_user, self._rpc_password, height, **self._call_kwargs()
        )

    async def tips(self) -> List[ChainTip]:
        return await jsonrpc.btcd_chaintips(
            normalize_url(self._rpc_url), self._rpc_user, self._rpc_password, **self._call_kwargs()
        )
