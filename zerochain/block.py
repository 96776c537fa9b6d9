"""Block headers, blocks, proof-of-work checks and the genesis block."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import Any, List

from Crypto.Hash import keccak

from zerochain.uint256 import U256

_ZERO_HASH = bytes(32)
_MAX_EXTRA_DATA = 32


def keccak256(data: bytes) -> bytes:
    """The Keccak-256 digest of data."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


class BlockErrorKind(enum.Enum):
    INVALID_PARENT_HASH = "Invalid parent hash"
    INVALID_BLOCK_NUMBER = "Invalid block number"
    INVALID_TIMESTAMP = "Invalid timestamp"
    INVALID_DIFFICULTY = "Invalid difficulty"
    INVALID_POW = "Invalid PoW"
    GAS_LIMIT_TOO_HIGH = "Gas limit too high"
    EXTRA_DATA_TOO_LARGE = "Extra data too large"
    INVALID_TRANSACTION_ROOT = "Invalid transaction root"
    INVALID_STATE_ROOT = "Invalid state root"
    BLOCK_TOO_LARGE = "Block too large"


class BlockError(Exception):
    """Raised when a block or header fails validation."""

    def __init__(self, kind: BlockErrorKind) -> None:
        super().__init__(kind.value)
        self.kind = kind


@dataclass
class BlockHeader:
    version: int = 1
    parent_hash: bytes = _ZERO_HASH
    uncle_hashes: List[bytes] = field(default_factory=list)
    coinbase: bytes = bytes(20)
    state_root: bytes = _ZERO_HASH
    transactions_root: bytes = _ZERO_HASH
    receipts_root: bytes = _ZERO_HASH
    number: U256 = field(default_factory=U256.zero)
    gas_limit: int = 0
    gas_used: int = 0
    timestamp: int = 0
    difficulty: U256 = field(default_factory=U256.one)
    nonce: int = 0
    extra_data: bytes = b""
    mix_hash: bytes = _ZERO_HASH
    base_fee_per_gas: U256 = field(default_factory=U256.zero)
    hash: bytes = _ZERO_HASH

    def encode(self) -> bytes:
        """The fields that the header hash commits to, concatenated."""
        return b"".join(
            (
                struct.pack(">I", self.version),
                bytes(self.parent_hash),
                self.number.to_big_endian(),
                struct.pack(">Q", self.timestamp),
                struct.pack(">Q", self.nonce),
                self.difficulty.to_big_endian(),
            )
        )

    def compute_hash(self) -> bytes:
        return keccak256(self.encode())

    def validate(self, parent: "BlockHeader") -> None:
        """Raise BlockError unless this header may follow parent."""
        if self.parent_hash != parent.hash:
            raise BlockError(BlockErrorKind.INVALID_PARENT_HASH)
        if self.number != parent.number + U256.one():
            raise BlockError(BlockErrorKind.INVALID_BLOCK_NUMBER)
        if self.timestamp <= parent.timestamp:
            raise BlockError(BlockErrorKind.INVALID_TIMESTAMP)
        if len(self.extra_data) > _MAX_EXTRA_DATA:
            raise BlockError(BlockErrorKind.EXTRA_DATA_TOO_LARGE)

    def verify_pow(self) -> None:
        """Raise BlockError if the proof-of-work hash exceeds the target."""
        target = difficulty_to_target(self.difficulty)
        pow_hash = compute_header_pow_hash(self, self.nonce)
        if U256.from_big_endian(pow_hash) > target:
            raise BlockError(BlockErrorKind.INVALID_POW)


@dataclass
class Block:
    header: BlockHeader
    transactions: List[Any] = field(default_factory=list)
    uncles: List[BlockHeader] = field(default_factory=list)

    def encode(self) -> bytes:
        return self.header.number.to_big_endian()


def difficulty_to_target(difficulty: U256) -> U256:
    """The largest acceptable PoW hash; zero difficulty gives a zero target."""
    return U256.from_big_endian(b"\xff" * 32) // difficulty


def compute_header_pow_hash(header: BlockHeader, nonce: int) -> bytes:
    return keccak256(header.encode() + struct.pack(">Q", nonce))


def create_genesis_block() -> Block:
    header = BlockHeader(
        version=1,
        parent_hash=_ZERO_HASH,
        coinbase=bytes(20),
        number=U256.zero(),
        gas_limit=30_000_000,
        gas_used=0,
        timestamp=0,
        difficulty=U256.from_u128(1_000_000_000_000_000),
        nonce=0,
        extra_data=b"ZeroChain Genesis",
        base_fee_per_gas=U256(1_000_000_000),
    )
    header.hash = header.compute_hash()
    return Block(header=header)