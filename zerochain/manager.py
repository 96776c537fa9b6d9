"""An in-memory account manager: accounts, storage, code and UTXOs."""

from __future__ import annotations

import enum
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from zerochain.account import (
    Account,
    AccountConfig,
    AccountNotFound,
    AccountState,
    Verifier,
)
from zerochain.uint256 import I256, U256
from zerochain.utxo import LockScript, UtxoOutput, UtxoReference

_ZERO_HASH = bytes(32)
_ZERO_ADDRESS = bytes(20)
# Placeholder hashes used until real transaction hashing and state tries exist.
_UTXO_TX_HASH = bytes([1]) * 32
_UPDATED_STATE_ROOT = bytes([1]) * 32


def _now() -> int:
    return int(time.time())


class BalanceChangeReason(enum.Enum):
    """Why a balance changed."""

    BLOCK_REWARD = "BlockReward"
    UNCLE_REWARD = "UncleReward"
    TRANSACTION_FEE = "TransactionFee"
    TRANSFER = "Transfer"
    CONTRACT_EXECUTION = "ContractExecution"
    GOVERNANCE = "Governance"
    OTHER = "Other"


@dataclass(frozen=True)
class StorageChange:
    key: bytes
    old_value: bytes
    new_value: bytes


@dataclass(frozen=True)
class CodeChange:
    old_hash: bytes
    new_code: bytes


@dataclass
class AccountChange:
    """A batch of changes to one account."""

    address: bytes
    balance_change: Optional[Union[I256, int]] = None
    nonce_change: Optional[int] = None
    storage_changes: List[StorageChange] = field(default_factory=list)
    code_change: Optional[CodeChange] = None


@dataclass
class AccountProof:
    account_proof: List[bytes] = field(default_factory=list)
    storage_proofs: List[List[bytes]] = field(default_factory=list)
    state_root: bytes = _ZERO_HASH


class InMemoryAccountManager:
    """Keeps accounts and their data in memory; safe to share between threads."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._accounts: Dict[bytes, Account] = {}
        self._storage: Dict[bytes, Dict[bytes, bytes]] = {}
        self._code: Dict[bytes, bytes] = {}
        self._utxos: Dict[bytes, UtxoOutput] = {}
        self._state_root: bytes = _ZERO_HASH

    @classmethod
    def with_genesis(cls, genesis_accounts: Iterable[Account]) -> "InMemoryAccountManager":
        """A manager preloaded with the given accounts."""
        manager = cls()
        for account in genesis_accounts:
            manager._accounts[bytes(account.address)] = account
        return manager

    def _require(self, address: bytes) -> Account:
        account = self._accounts.get(bytes(address))
        if account is None:
            raise AccountNotFound(address)
        return account

    def get_account(self, address: bytes) -> Optional[Account]:
        with self._lock:
            return self._accounts.get(bytes(address))

    def create_account(
        self,
        account_type: Any,
        config: Optional[AccountConfig] = None,
        address: Optional[bytes] = None,
    ) -> Account:
        """Create and store an active account; the address defaults to all zeros."""
        now = _now()
        account = Account(
            address=bytes(address) if address is not None else _ZERO_ADDRESS,
            account_type=account_type,
            config=config if config is not None else AccountConfig(),
            state=AccountState.ACTIVE,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._accounts[account.address] = account
        return account

    def update_balance(
        self,
        address: bytes,
        amount: Union[I256, int],
        reason: BalanceChangeReason = BalanceChangeReason.OTHER,
    ) -> None:
        with self._lock:
            self._require(address).update_balance(amount)

    def spend_utxo(self, address: bytes, utxo_ref: UtxoReference, signature: Any) -> None:
        """Mark the referenced output spent; unknown references are ignored."""
        with self._lock:
            utxo = self._utxos.get(bytes(utxo_ref.tx_hash))
            if utxo is not None:
                utxo.spend(utxo_ref.tx_hash)

    def create_utxo(self, address: bytes, amount: U256, lock_script: LockScript) -> UtxoReference:
        tx_hash = _UTXO_TX_HASH
        with self._lock:
            self._utxos[tx_hash] = UtxoOutput(amount, lock_script)
        return UtxoReference(
            tx_hash=tx_hash,
            output_index=0,
            amount=amount,
            lock_script=lock_script,
            spent=False,
        )

    def verify_signature(
        self,
        account: Account,
        tx_hash: bytes,
        signature: Any,
        verifier: Optional[Verifier] = None,
    ) -> bool:
        return account.verify_signature(tx_hash, signature, verifier)

    def get_nonce(self, address: bytes) -> int:
        with self._lock:
            return self._require(address).nonce

    def increment_nonce(self, address: bytes) -> None:
        with self._lock:
            self._require(address).increment_nonce()

    def get_storage(self, address: bytes, key: bytes) -> bytes:
        """The stored value, or the zero hash when nothing is stored."""
        with self._lock:
            return self._storage.get(bytes(address), {}).get(bytes(key), _ZERO_HASH)

    def set_storage(self, address: bytes, key: bytes, value: bytes) -> None:
        with self._lock:
            self._storage.setdefault(bytes(address), {})[bytes(key)] = bytes(value)

    def get_proof(self, address: bytes, keys: Sequence[bytes]) -> AccountProof:
        with self._lock:
            return AccountProof(state_root=self._state_root)

    def get_code(self, code_hash: bytes) -> Optional[bytes]:
        with self._lock:
            return self._code.get(bytes(code_hash))

    def apply_changes(self, changes: Iterable[AccountChange]) -> bytes:
        """Apply changes in order and return the new state root.

        Changes applied before a failure are kept.
        """
        with self._lock:
            for change in changes:
                if change.balance_change is not None:
                    self.update_balance(
                        change.address, change.balance_change, BalanceChangeReason.OTHER
                    )
                if change.nonce_change is not None:
                    self._require(change.address).nonce = change.nonce_change
                for storage_change in change.storage_changes:
                    self.set_storage(change.address, storage_change.key, storage_change.new_value)
                if change.code_change is not None:
                    self._code[bytes(change.code_change.old_hash)] = bytes(
                        change.code_change.new_code
                    )
            self._state_root = _UPDATED_STATE_ROOT
            return self._state_root

    def get_utxos(self, address: bytes) -> List[UtxoOutput]:
        """All unspent outputs held by the manager."""
        with self._lock:
            return [utxo for utxo in self._utxos.values() if not utxo.spent]