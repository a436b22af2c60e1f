# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    blockchain_api.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# blockchain_api.py
'''
Bulk header download over the Bitcoin Core REST interface
(bitcoind -rest=1):

    GET /rest/headers/<count>/<hash>.bin

The body is a plain concatenation of 80-byte serialized headers, starting
with <hash> and following the active chain.
'''

import asyncio
import logging
from typing import List, Optional

import aiohttp

from forkforge.config import Config
from forkforge.core_defs import BlockHeader, HEADER_SIZE
from forkforge.errors import DecodeError, RESTError, TransportError

logger = logging.getLogger(__name__)


def rest_headers_url(rpc_url: str, count: int, start_hash: str) -> str:
    return f"http://{rpc_url}/rest/headers/{count}/{start_hash}.bin"


def decode_headers(payload: bytes) -> List[BlockHeader]:
    """
    Splits the payload into 80-byte chunks and decodes them in order.
    One bad chunk (including a short trailing one) fails the whole batch.
    """
    headers = []
    for offset in range(0, len(payload), HEADER_SIZE):
        chunk = payload[offset:offset + HEADER_SIZE]
        try:
            headers.append(BlockHeader.from_bytes(chunk))
        except DecodeError as e:
            raise DecodeError(f"could not deserialize REST header response at offset {offset}: {e}") from e
    return headers


async def fetch_rest_headers(
    rpc_url: str,
    count: int,
    start_hash: str,
    timeout: Optional[float] = None,
) -> List[BlockHeader]:
    """
    Loads up to `count` active-chain headers starting at `start_hash`.

    Raises:
        RESTError: status other than 200 (url, status, reason and body attached).
        TransportError: connection failure or timeout.
        DecodeError: malformed payload.
    """
    if timeout is None:
        timeout = Config.REST_TIMEOUT
    url = rest_headers_url(rpc_url, count, start_hash)
    logger.debug(f"loading active-chain headers starting from {start_hash}")

    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(url) as response:
                payload = await response.read()
                if response.status != 200:
                    body = payload.decode('utf-8', errors='replace')
                    logger.error(f"Request failed for {url}: Status {response.status}, Error: {body.strip()}")
                    raise RESTError(url, response.status, response.reason, body)
    except asyncio.TimeoutError as e:
        logger.error(f"Timeout Error: Request to {url} timed out after {timeout} seconds.")
        raise TransportError(f"REST request to {url} timed out") from e
    except aiohttp.ClientError as e:
        logger.error(f"Connection Error: Failed to load {url}: {e}")
        raise TransportError(f"REST request to {url} failed: {e}") from e

    headers = decode_headers(payload)
    logger.debug(f"loaded {len(headers)} active-chain headers starting from {start_hash}")
    return headers
