"""Accounts, their types and configuration, and the account state machine."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from zerochain.uint256 import I256, U256

_U64_MAX = (1 << 64) - 1
_U128_MAX = (1 << 128) - 1
_ZERO_HASH = bytes(32)
_ZERO_ADDRESS = bytes(20)
_PLACEHOLDER_PUBLIC_KEY = bytes(65)


def _now() -> int:
    return int(time.time())


def _hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


# Errors


class AccountError(Exception):
    """Base class for account failures."""


class AccountNotFound(AccountError):
    def __init__(self, address: bytes) -> None:
        super().__init__(f"Account not found: {_hex(address)}")
        self.address = address


class InvalidAccountType(AccountError):
    def __init__(self) -> None:
        super().__init__("Invalid account type")


class InvalidStateTransition(AccountError):
    def __init__(self, from_state: "AccountState", event: "StateEvent") -> None:
        super().__init__(
            f"Invalid state transition from {from_state.value} with event {event.value}"
        )
        self.from_state = from_state
        self.event = event


class InsufficientBalance(AccountError):
    def __init__(self, have: U256, need: U256) -> None:
        super().__init__(f"Insufficient balance: have {have}, need {need}")
        self.have = have
        self.need = need


class InvalidSignature(AccountError):
    def __init__(self) -> None:
        super().__init__("Invalid signature")


class NonceMismatch(AccountError):
    def __init__(self, expected: int, got: int) -> None:
        super().__init__(f"Nonce mismatch: expected {expected}, got {got}")
        self.expected = expected
        self.got = got


class AccountFrozen(AccountError):
    def __init__(self) -> None:
        super().__init__("Account is frozen")


class AccountDestroyed(AccountError):
    def __init__(self) -> None:
        super().__init__("Account is destroyed")


# Enumerations


class AccountState(enum.Enum):
    INACTIVE = "Inactive"
    ACTIVE = "Active"
    FROZEN = "Frozen"
    DESTROYED = "Destroyed"


class StateEvent(enum.Enum):
    ACCOUNT_CREATED = "AccountCreated"
    DEPOSIT_RECEIVED = "DepositReceived"
    WITHDRAWAL_COMPLETED = "WithdrawalCompleted"
    FROZEN_BY_GOVERNANCE = "FrozenByGovernance"
    UNFROZEN_BY_GOVERNANCE = "UnfrozenByGovernance"
    ACCOUNT_DESTROYED = "AccountDestroyed"


class SignatureScheme(enum.Enum):
    ECDSA_SECP256K1 = "EcdsaSecp256k1"
    ED25519 = "Ed25519"
    BLS12_381 = "Bls12_381"


class PermissionLevel(enum.Enum):
    STANDARD = "Standard"
    RESTRICTED = "Restricted"
    ADMIN = "Admin"
    SUPER_ADMIN = "SuperAdmin"


class OperationType(enum.Enum):
    TRANSFER = "Transfer"
    CONTRACT_CALL = "ContractCall"
    CONTRACT_DEPLOY = "ContractDeploy"
    GOVERNANCE = "Governance"
    ADMIN = "Admin"


_TRANSITIONS: Dict[tuple, AccountState] = {
    (AccountState.INACTIVE, StateEvent.DEPOSIT_RECEIVED): AccountState.ACTIVE,
    (AccountState.ACTIVE, StateEvent.FROZEN_BY_GOVERNANCE): AccountState.FROZEN,
    (AccountState.FROZEN, StateEvent.UNFROZEN_BY_GOVERNANCE): AccountState.ACTIVE,
    (AccountState.ACTIVE, StateEvent.ACCOUNT_DESTROYED): AccountState.DESTROYED,
}


# Account types


@dataclass(frozen=True)
class RecoveryConfig:
    """Social recovery settings for an abstract account."""

    guardians: List[bytes] = field(default_factory=list)
    guardian_threshold: int = 0
    recovery_delay: int = 0
    recovery_expiry: int = 0


@dataclass(frozen=True)
class ExternalOwned:
    """An account controlled by a key pair."""

    public_key: bytes
    signature_scheme: SignatureScheme = SignatureScheme.ECDSA_SECP256K1


@dataclass(frozen=True)
class ContractAccount:
    creator: bytes
    contract_version: int = 1
    upgradeable: bool = False
    admin: Optional[bytes] = None


@dataclass(frozen=True)
class AbstractAccount:
    """A smart-contract wallet whose checks are delegated to a validator."""

    validator: bytes
    owners: List[bytes] = field(default_factory=list)
    threshold: int = 1
    recovery_config: Optional[RecoveryConfig] = None


@dataclass(frozen=True)
class MultiSigAccount:
    signers: List[bytes] = field(default_factory=list)
    required: int = 1
    daily_limit: Optional[U256] = None


_AccountType = Union[ExternalOwned, ContractAccount, AbstractAccount, MultiSigAccount]


# Configuration


@dataclass
class TransactionLimits:
    max_tx_amount: Optional[U256] = None
    daily_limit: Optional[U256] = None
    daily_used: U256 = field(default_factory=U256.zero)
    daily_reset_at: int = 0


@dataclass
class Permissions:
    contract_whitelist: List[bytes] = field(default_factory=list)
    contract_blacklist: List[bytes] = field(default_factory=list)
    multisig_operations: List[OperationType] = field(default_factory=list)
    permission_level: PermissionLevel = PermissionLevel.STANDARD


@dataclass
class AccountConfig:
    enable_utxo: bool = False
    gas_tokens: List[bytes] = field(default_factory=list)
    limits: TransactionLimits = field(default_factory=TransactionLimits)
    permissions: Permissions = field(default_factory=Permissions)
    metadata: Dict[str, str] = field(default_factory=dict)


# Account


def _default_account_type() -> ExternalOwned:
    return ExternalOwned(_PLACEHOLDER_PUBLIC_KEY, SignatureScheme.ECDSA_SECP256K1)


Verifier = Callable[[bytes, Any, bytes], bool]


@dataclass
class Account:
    """An account in the hybrid balance/UTXO model."""

    address: bytes = _ZERO_ADDRESS
    account_type: _AccountType = field(default_factory=_default_account_type)
    version: int = 1
    balance: U256 = field(default_factory=U256.zero)
    utxo_refs: List[Any] = field(default_factory=list)
    nonce: int = 0
    storage_root: bytes = _ZERO_HASH
    code_hash: bytes = _ZERO_HASH
    config: AccountConfig = field(default_factory=AccountConfig)
    state: AccountState = AccountState.INACTIVE
    created_at: int = 0
    updated_at: int = 0

    @classmethod
    def new_eoa(cls, public_key: bytes, address: bytes) -> "Account":
        """A fresh, inactive externally owned account."""
        now = _now()
        return cls(
            address=address,
            account_type=ExternalOwned(public_key, SignatureScheme.ECDSA_SECP256K1),
            state=AccountState.INACTIVE,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def new_contract(cls, creator: bytes, address: bytes) -> "Account":
        """A fresh, active, non-upgradeable contract account."""
        now = _now()
        return cls(
            address=address,
            account_type=ContractAccount(creator=creator),
            state=AccountState.ACTIVE,
            created_at=now,
            updated_at=now,
        )

    def can_perform_operation(self) -> bool:
        return self.state is AccountState.ACTIVE

    def can_receive(self) -> bool:
        return self.state is not AccountState.DESTROYED

    def verify_signature(
        self, tx_hash: bytes, signature: Any, verifier: Optional[Verifier] = None
    ) -> bool:
        """Check a signature over tx_hash for this account.

        For key-owned accounts the verifier is called as
        verifier(tx_hash, signature, public_key); without one,
        signature.verify(tx_hash, public_key) is used. Multi-signature and
        abstract accounts are accepted here; contract accounts cannot sign.
        """
        account_type = self.account_type
        if isinstance(account_type, ExternalOwned):
            try:
                if verifier is not None:
                    return bool(verifier(tx_hash, signature, account_type.public_key))
                return bool(signature.verify(tx_hash, account_type.public_key))
            except Exception as exc:
                raise InvalidSignature() from exc
        if isinstance(account_type, (MultiSigAccount, AbstractAccount)):
            return True
        raise InvalidAccountType()

    def increment_nonce(self) -> None:
        """Advance the nonce, wrapping to zero past the u64 range."""
        self.nonce = 0 if self.nonce >= _U64_MAX else self.nonce + 1
        self.updated_at = _now()

    def update_balance(self, amount: Union[I256, int]) -> None:
        """Add a signed amount to the balance."""
        delta = amount if isinstance(amount, I256) else I256(amount)
        if delta.is_positive():
            new_balance, overflow = self.balance.overflowing_add(U256(delta.value))
            if overflow:
                raise InsufficientBalance(self.balance, U256.from_u128(_U128_MAX))
        else:
            need = U256(-delta.value)
            new_balance, underflow = self.balance.overflowing_sub(need)
            if underflow:
                raise InsufficientBalance(self.balance, need)
        self.balance = new_balance
        self.updated_at = _now()

    def transition_state(self, event: StateEvent) -> None:
        """Move the account through its state machine."""
        new_state = _TRANSITIONS.get((self.state, event))
        if new_state is None:
            raise InvalidStateTransition(self.state, event)
        self.state = new_state
        self.updated_at = _now()