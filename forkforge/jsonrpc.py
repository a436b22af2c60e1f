# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    jsonrpc.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# jsonrpc.py
'''
JSON-RPC request/response helpers.

build_request()/parse_response() are shared with the blocking Bitcoin Core
client in rpc_client.py. The btcd_* coroutines talk to btcd directly with
httpx.AsyncClient; btcd offers no REST interface and no getnetworkinfo.
'''

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from forkforge.core_defs import BlockHeader, ChainTip
from forkforge.errors import DecodeError, RPCError, TransportError

logger = logging.getLogger(__name__)

REQUEST_ID = "forkforge"


def build_request(method: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
    return {
        "jsonrpc": "1.0",
        "id": REQUEST_ID,
        "method": method,
        "params": params or [],
    }


def parse_response(status_code: int, body: str) -> Any:
    """
    Extracts the `result` of a JSON-RPC answer.

    Bitcoin Core answers RPC errors with HTTP 500 and a JSON error object,
    so the body is inspected before the status code.

    Raises:
        RPCError: error object present, or non-200 without a usable body.
        DecodeError: 200 answer that is not a JSON-RPC response.
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as e:
        if status_code != 200:
            raise RPCError(status_code, body.strip() or "empty response") from e
        raise DecodeError(f"RPC response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError(f"unexpected RPC response format: {data!r}")

    error = data.get("error")
    if error:
        if isinstance(error, dict):
            try:
                code = int(error.get("code", status_code))
            except (TypeError, ValueError) as e:
                raise DecodeError(f"RPC error object with invalid code: {error!r}") from e
            raise RPCError(code, str(error.get("message", error)))
        raise RPCError(status_code, str(error))

    if status_code != 200:
        raise RPCError(status_code, body.strip())

    if "result" not in data:
        raise DecodeError(f"RPC response without result: {data!r}")
    return data["result"]


def expect_block_hash(value: Any) -> str:
    """Checks that `value` looks like a 32-byte hex hash."""
    if not isinstance(value, str) or len(value) != 64:
        raise DecodeError(f"expected a block hash, got {value!r}")
    try:
        bytes.fromhex(value)
    except ValueError as e:
        raise DecodeError(f"block hash is not valid hex: {value!r}") from e
    return value.lower()


def parse_chain_tips(result: Any) -> List[ChainTip]:
    if not isinstance(result, list):
        raise DecodeError(f"getchaintips returned {type(result).__name__}, expected list")
    return [ChainTip.from_rpc(entry) for entry in result]


async def _btcd_call(
    url: str,
    user: str,
    password: str,
    method: str,
    params: Optional[List[Any]] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """One request, one response. No retries."""
    payload = build_request(method, params)
    logger.debug(f"btcd RPC {method}{payload['params']} -> {url}")
    try:
        async with httpx.AsyncClient(auth=(user, password), timeout=timeout, transport=transport) as client:
            response = await client.post(url, json=payload)
    except httpx.TimeoutException as e:
        logger.error(f"Timeout Error: btcd RPC {method} to {url} timed out after {timeout} seconds.")
        raise TransportError(f"btcd RPC {method} timed out: {e}") from e
    except httpx.HTTPError as e:
        logger.error(f"Connection Error: btcd RPC {method} to {url} failed: {e}")
        raise TransportError(f"btcd RPC {method} failed: {e}") from e

    return parse_response(response.status_code, response.text)


async def btcd_blockhash(url: str, user: str, password: str, height: int, **kwargs) -> str:
    result = await _btcd_call(url, user, password, "getblockhash", [height], **kwargs)
    return expect_block_hash(result)


async def btcd_blockheader(url: str, user: str, password: str, block_hash: str, **kwargs) -> BlockHeader:
    result = await _btcd_call(url, user, password, "getblockheader", [block_hash, False], **kwargs)
    if not isinstance(result, str):
        raise DecodeError(f"getblockheader returned {result!r}, expected hex string")
    return BlockHeader.from_hex(result)


async def btcd_chaintips(url: str, user: str, password: str, **kwargs) -> List[ChainTip]:
    result = await _btcd_call(url, user, password, "getchaintips", **kwargs)
    return parse_chain_tips(result)
