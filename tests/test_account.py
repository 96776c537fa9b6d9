import pytest

from zerochain.account import (
    AbstractAccount,
    Account,
    AccountState,
    ContractAccount,
    ExternalOwned,
    InsufficientBalance,
    InvalidAccountType,
    InvalidSignature,
    InvalidStateTransition,
    MultiSigAccount,
    SignatureScheme,
    StateEvent,
)
from zerochain.uint256 import I256, U256


def _public_key() -> bytes:
    return b"\x04" + bytes(64)


def _eoa() -> Account:
    return Account.new_eoa(_public_key(), bytes([1]) * 20)


def test_account_creation():
    addr = bytes([1]) * 20
    account = Account.new_eoa(_public_key(), addr)
    assert account.address == addr
    assert account.balance.is_zero()
    assert account.nonce == 0
    assert account.state is AccountState.INACTIVE
    assert account.account_type.signature_scheme is SignatureScheme.ECDSA_SECP256K1


def test_account_balance_update():
    account = _eoa()
    account.update_balance(I256(1000))
    assert account.balance.as_u64() == 1000
    account.update_balance(I256(-300))
    assert account.balance.as_u64() == 700


def test_balance_update_accepts_int():
    account = _eoa()
    account.update_balance(5)
    assert account.balance == U256(5)


def test_balance_underflow_raises_and_keeps_balance():
    account = _eoa()
    account.update_balance(100)
    with pytest.raises(InsufficientBalance) as info:
        account.update_balance(-300)
    assert info.value.have == U256(100)
    assert account.balance == U256(100)


def test_balance_overflow_raises():
    account = _eoa()
    account.balance = U256((1 << 256) - 1)
    with pytest.raises(InsufficientBalance):
        account.update_balance(1)


def test_account_state_transition():
    account = _eoa()
    account.transition_state(StateEvent.DEPOSIT_RECEIVED)
    assert account.state is AccountState.ACTIVE
    account.transition_state(StateEvent.FROZEN_BY_GOVERNANCE)
    assert account.state is AccountState.FROZEN
    account.transition_state(StateEvent.UNFROZEN_BY_GOVERNANCE)
    assert account.state is AccountState.ACTIVE


def test_invalid_transition_raises():
    account = _eoa()
    with pytest.raises(InvalidStateTransition) as info:
        account.transition_state(StateEvent.FROZEN_BY_GOVERNANCE)
    assert info.value.from_state is AccountState.INACTIVE
    assert account.state is AccountState.INACTIVE


def test_destroyed_cannot_receive():
    account = _eoa()
    account.transition_state(StateEvent.DEPOSIT_RECEIVED)
    assert account.can_perform_operation()
    account.transition_state(StateEvent.ACCOUNT_DESTROYED)
    assert not account.can_receive()
    assert not account.can_perform_operation()


def test_new_contract_is_active():
    account = Account.new_contract(bytes([2]) * 20, bytes([3]) * 20)
    assert account.state is AccountState.ACTIVE
    assert isinstance(account.account_type, ContractAccount)
    assert account.account_type.creator == bytes([2]) * 20


def test_contract_cannot_verify_signature():
    account = Account.new_contract(bytes([2]) * 20, bytes([3]) * 20)
    with pytest.raises(InvalidAccountType):
        account.verify_signature(bytes(32), object())


def test_eoa_signature_uses_verifier():
    account = _eoa()
    seen = []

    def verifier(message, signature, public_key):
        seen.append((message, signature, public_key))
        return signature == "good"

    assert account.verify_signature(bytes(32), "good", verifier) is True
    assert account.verify_signature(bytes(32), "bad", verifier) is False
    assert seen[0] == (bytes(32), "good", _public_key())


def test_eoa_signature_error_becomes_invalid_signature():
    account = _eoa()

    def verifier(message, signature, public_key):
        raise ValueError("malformed")

    with pytest.raises(InvalidSignature):
        account.verify_signature(bytes(32), "sig", verifier)


def test_multisig_and_abstract_accept():
    multisig = Account(account_type=MultiSigAccount(signers=[bytes(20)], required=1))
    abstract = Account(account_type=AbstractAccount(validator=bytes(20)))
    assert multisig.verify_signature(bytes(32), None) is True
    assert abstract.verify_signature(bytes(32), None) is True


def test_increment_nonce_and_wrap():
    account = _eoa()
    account.increment_nonce()
    assert account.nonce == 1
    account.nonce = (1 << 64) - 1
    account.increment_nonce()
    assert account.nonce == 0


def test_default_account():
    account = Account()
    assert account.version == 1
    assert account.address == bytes(20)
    assert isinstance(account.account_type, ExternalOwned)
    assert account.state is AccountState.INACTIVE