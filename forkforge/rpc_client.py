# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    rpc_client.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# rpc_client.py
'''
Blocking JSON-RPC client for Bitcoin Core.
Must not be called on the event loop directly; BitcoinCoreNode dispatches
every call with asyncio.to_thread.
'''

import logging
from typing import Any, Dict, List, Optional

import httpx

from forkforge.core_defs import BlockHeader, ChainTip
from forkforge.errors import DecodeError, TransportError
from forkforge.jsonrpc import build_request, parse_response, expect_block_hash, parse_chain_tips

logger = logging.getLogger(__name__)


def normalize_url(rpc_url: str) -> str:
    """Node addresses are configured as host:port; httpx wants a scheme."""
    if rpc_url.startswith(("http://", "https://")):
        return rpc_url
    return f"http://{rpc_url}"


def read_cookie_file(cookie_file: str) -> tuple:
    """Reads `user:password` from a Bitcoin Core .cookie file."""
    try:
        with open(cookie_file, 'r', encoding='utf-8') as f:
            content = f.read().strip()
    except OSError as e:
        raise TransportError(f"could not read RPC cookie file {cookie_file}: {e}") from e
    user, sep, password = content.partition(":")
    if not sep:
        raise TransportError(f"RPC cookie file {cookie_file} has no 'user:password' content")
    return user, password


class BitcoinRPCClient:
    """
    Minimal Bitcoin Core RPC client covering the calls fork monitoring needs.
    Authentication is either user/password or a cookie file.
    """

    def __init__(
        self,
        rpc_url: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        cookie_file: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = normalize_url(rpc_url)
        if cookie_file:
            user, password = read_cookie_file(cookie_file)
        self.auth = (user, password) if user is not None else None
        self.timeout = timeout
        self.transport = transport

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        payload = build_request(method, params)
        try:
            with httpx.Client(auth=self.auth, timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout Error: RPC {method} to {self.url} timed out after {self.timeout} seconds.")
            raise TransportError(f"RPC {method} timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Connection Error: RPC {method} to {self.url} failed: {e}")
            raise TransportError(f"RPC {method} failed: {e}") from e

        return parse_response(response.status_code, response.text)

    def get_network_info(self) -> Dict[str, Any]:
        result = self.call("getnetworkinfo")
        if not isinstance(result, dict):
            raise DecodeError(f"getnetworkinfo returned {result!r}")
        return result

    def get_block_hash(self, height: int) -> str:
        return expect_block_hash(self.call("getblockhash", [height]))

    def get_block_header(self, block_hash: str) -> BlockHeader:
        # verbose=false returns the serialized header as hex
        result = self.call("getblockheader", [block_hash, False])
        if not isinstance(result, str):
            raise DecodeError(f"getblockheader returned {result!r}, expected hex string")
        return BlockHeader.from_hex(result)

    def get_chain_tips(self) -> List[ChainTip]:
        return parse_chain_tips(self.call("getchaintips"))
