# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    core_defs.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# core_defs.py
'''
Common definitions shared between the node backends, the header tree
and the header synchronization:
- the 80-byte block header codec
- chain tips as reported by getchaintips
- (height, header) pairs handed back to the caller
'''

import hashlib
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any

from forkforge.errors import DecodeError

HEADER_SIZE = 80  # bytes
HEADER_FORMAT = '<i32s32sIII'  # version, prev, merkle root, time, bits, nonce


def hash256(data: bytes) -> bytes:
    """Double SHA-256."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


@dataclass(frozen=True)
class BlockHeader:
    """
    A Bitcoin block header.
    Hashes are kept as hex strings in display (Big-Endian) order,
    the same way the RPC interfaces print them.
    """
    version: int
    prev_blockhash: str
    merkle_root: str
    time: int
    bits: int
    nonce: int

    def serialize(self) -> bytes:
        """Returns the 80-byte wire representation (Little-Endian fields)."""
        return struct.pack(
            HEADER_FORMAT,
            self.version,
            bytes.fromhex(self.prev_blockhash)[::-1],
            bytes.fromhex(self.merkle_root)[::-1],
            self.time,
            self.bits,
            self.nonce,
        )

    @property
    def block_hash(self) -> str:
        return hash256(self.serialize())[::-1].hex()

    @classmethod
    def from_bytes(cls, raw: bytes) -> "BlockHeader":
        """
        Deserializes exactly 80 bytes.

        Raises:
            DecodeError: if the input has the wrong length.
        """
        if len(raw) != HEADER_SIZE:
            raise DecodeError(f"block header must be {HEADER_SIZE} bytes, got {len(raw)}")
        try:
            version, prev, merkle, time, bits, nonce = struct.unpack(HEADER_FORMAT, raw)
        except struct.error as e:
            raise DecodeError(f"could not unpack block header: {e}") from e
        return cls(
            version=version,
            prev_blockhash=prev[::-1].hex(),
            merkle_root=merkle[::-1].hex(),
            time=time,
            bits=bits,
            nonce=nonce,
        )

    @classmethod
    def from_hex(cls, raw_hex: str) -> "BlockHeader":
        """Deserializes the hex form returned by `getblockheader <hash> false`."""
        try:
            raw = bytes.fromhex(raw_hex)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"block header is not valid hex: {e}") from e
        return cls.from_bytes(raw)


class ChainTipStatus(Enum):
    ACTIVE = "active"
    VALID_FORK = "valid-fork"
    VALID_HEADERS = "valid-headers"
    HEADERS_ONLY = "headers-only"
    INVALID = "invalid"


@dataclass(frozen=True)
class ChainTip:
    block_hash: str
    height: int
    branchlen: int
    status: ChainTipStatus

    @property
    def fork_root_height(self) -> int:
        """Height at which this branch split off the active chain."""
        return self.height - self.branchlen

    @classmethod
    def from_rpc(cls, entry: Dict[str, Any]) -> "ChainTip":
        """
        Builds a tip from one entry of the getchaintips result.
        Bitcoin Core and btcd use the same field names.
        """
        try:
            return cls(
                block_hash=str(entry["hash"]),
                height=int(entry["height"]),
                branchlen=int(entry["branchlen"]),
                status=ChainTipStatus(entry["status"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"malformed chain tip {entry!r}: {e}") from e


@dataclass(frozen=True)
class HeaderInfo:
    """A header together with the height the reporting node assigned it."""
    height: int
    header: BlockHeader

    @property
    def block_hash(self) -> str:
        return self.header.block_hash
