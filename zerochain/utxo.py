"""UTXO records, lock/unlock scripts and UTXO transactions."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from functools import reduce
from typing import Any, List, Optional

from zerochain.uint256 import U256


def _now() -> int:
    return int(time.time())


class UtxoErrorKind(enum.Enum):
    EMPTY_INPUTS = "Empty inputs"
    EMPTY_OUTPUTS = "Empty outputs"
    INVALID_AMOUNT = "Invalid amount"
    NOT_FOUND = "UTXO not found"
    ALREADY_SPENT = "UTXO already spent"
    INVALID_LOCK_SCRIPT = "Invalid lock script"
    INVALID_UNLOCK_SCRIPT = "Invalid unlock script"
    SIGNATURE_VERIFICATION_FAILED = "Signature verification failed"


class UtxoError(Exception):
    """Raised when a UTXO operation or transaction is invalid."""

    def __init__(self, kind: UtxoErrorKind) -> None:
        super().__init__(kind.value)
        self.kind = kind


class UnlockScript:
    """Base for data that unlocks a locked output."""


@dataclass(frozen=True)
class P2PKHUnlock(UnlockScript):
    pubkey: bytes
    signature: Any


@dataclass(frozen=True)
class TimeLockUnlock(UnlockScript):
    current_time: int


@dataclass(frozen=True)
class MultiSigUnlock(UnlockScript):
    signatures: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class CustomScriptUnlock(UnlockScript):
    data: bytes = b""


class LockScript:
    """Base for conditions that lock an output."""

    def verify(self, unlock_script: UnlockScript, signature_data: bytes) -> bool:
        """Whether the unlock script satisfies this lock."""
        return False


@dataclass(frozen=True)
class P2PKHLock(LockScript):
    pubkey_hash: bytes

    def verify(self, unlock_script: UnlockScript, signature_data: bytes) -> bool:
        # Key matching is not checked here; any P2PKH unlock is accepted.
        return isinstance(unlock_script, P2PKHUnlock)


@dataclass(frozen=True)
class P2SHLock(LockScript):
    script_hash: bytes


@dataclass(frozen=True)
class TimeLock(LockScript):
    unlock_time: int

    def verify(self, unlock_script: UnlockScript, signature_data: bytes) -> bool:
        return (
            isinstance(unlock_script, TimeLockUnlock)
            and unlock_script.current_time >= self.unlock_time
        )


@dataclass(frozen=True)
class MultiSigLock(LockScript):
    pubkeys: List[bytes] = field(default_factory=list)
    threshold: int = 0

    def verify(self, unlock_script: UnlockScript, signature_data: bytes) -> bool:
        return (
            isinstance(unlock_script, MultiSigUnlock)
            and len(unlock_script.signatures) >= self.threshold
        )


@dataclass(frozen=True)
class CustomScriptLock(LockScript):
    script: bytes = b""


@dataclass
class UtxoReference:
    """A pointer to one output of a transaction."""

    tx_hash: bytes
    output_index: int
    amount: U256
    lock_script: LockScript
    spent: bool = False


@dataclass
class UtxoOutput:
    """A transaction output that may be spent once."""

    amount: U256
    lock_script: LockScript
    spent: bool = False
    spent_by: Optional[bytes] = None
    created_at: int = field(default_factory=_now)

    def spend(self, tx_hash: bytes) -> None:
        self.spent = True
        self.spent_by = tx_hash


@dataclass
class UtxoInput:
    reference: UtxoReference
    unlock_script: UnlockScript


@dataclass
class UtxoTransaction:
    inputs: List[UtxoInput] = field(default_factory=list)
    outputs: List[UtxoOutput] = field(default_factory=list)
    lock_time: int = 0

    def input_amount(self) -> U256:
        return reduce(
            lambda acc, item: acc + item.reference.amount, self.inputs, U256.zero()
        )

    def output_amount(self) -> U256:
        return reduce(lambda acc, item: acc + item.amount, self.outputs, U256.zero())

    def fee(self) -> U256:
        """Inputs minus outputs, wrapping if outputs exceed inputs."""
        return self.input_amount() - self.output_amount()

    def validate(self) -> None:
        """Raise UtxoError if the transaction is structurally invalid."""
        if not self.inputs:
            raise UtxoError(UtxoErrorKind.EMPTY_INPUTS)
        if not self.outputs:
            raise UtxoError(UtxoErrorKind.EMPTY_OUTPUTS)
        if self.input_amount() < self.output_amount():
            raise UtxoError(UtxoErrorKind.INVALID_AMOUNT)