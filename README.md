# zerochain

A Python library with the building blocks of a small account-based
blockchain node:

- `zerochain.uint256`: `U256` and `I256` fixed-width integers. Ordinary
  operators on `U256` wrap; `overflowing_add`, `overflowing_sub`,
  `overflowing_mul` and `overflowing_pow` also report overflow, and
  `saturating_add` / `saturating_sub` clamp. Division or remainder by zero
  yields zero.
- `zerochain.account`: `Account` with its balance, nonce and state machine
  (`AccountState`, `StateEvent`), the account kinds `ExternalOwned`,
  `ContractAccount`, `AbstractAccount` and `MultiSigAccount`, configuration
  records, and errors derived from `AccountError`.
- `zerochain.manager`: `InMemoryAccountManager`, which keeps accounts,
  storage, contract code and UTXOs in memory and applies batches of
  `AccountChange` records.
- `zerochain.utxo`: lock and unlock scripts (`P2PKHLock`, `TimeLock`,
  `MultiSigLock`, ...), `UtxoOutput`, `UtxoReference` and `UtxoTransaction`
  with fee calculation and validation (`UtxoError`).
- `zerochain.block`: `BlockHeader`, `Block`, `keccak256`,
  `difficulty_to_target`, proof-of-work checking and `create_genesis_block`.
- `zerochain.rpc_client`: a JSON-RPC 2.0 client (`rpc_call`) and helpers for
  account queries, compute transaction results and submitting a compute
  transaction from a JSON file. Failures raise `RpcCallError`.
- `zerochain.miner`: proof-of-work hashing, `solve_work`, and `run_miner`,
  a loop that fetches work with `zero_getWork` and submits solutions with
  `zero_submitWork`.
- `zerochain.rest`: `RestConfig`, `RestServer` with its route table, and the
  `health_check` endpoint.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Examples

```python
from zerochain.uint256 import U256, I256
from zerochain.account import Account, StateEvent
from zerochain.block import create_genesis_block

total = U256(100) + U256(50)
print(total.as_u64())                     # 150
print(U256(0).overflowing_sub(U256(1)))   # (U256(2**256 - 1), True)

account = Account.new_eoa(public_key=bytes(65), address=bytes([1]) * 20)
account.update_balance(I256(1000))
account.update_balance(-300)
account.transition_state(StateEvent.DEPOSIT_RECEIVED)
print(account.balance, account.state)     # 700 AccountState.ACTIVE

genesis = create_genesis_block()
print(genesis.header.hash.hex())
```

Solving a unit of mining work locally:

```python
from zerochain.miner import WorkPayload, solve_work

work = WorkPayload(
    work_id="w1",
    prev_hash="0x" + "00" * 32,
    height=1,
    target_leading_zero_bytes=1,
)
nonce, digest = solve_work(work)
print(nonce, digest[0])   # digest starts with a zero byte
```

Talking to a node:

```python
from zerochain.rpc_client import get_account, RpcCallError

try:
    info = get_account("http://127.0.0.1:8545", "0x...")
except RpcCallError as exc:
    print(exc)
```

The health endpoint of the REST service:

```python
from zerochain.rest import RestServer

server = RestServer()
print(server.handle("/health"))   # {'status': 'ok', 'version': '0.1.0'}
```

## What this package does not do

- There is no command-line program; everything is used as a library.
- No server listens on a socket. `RestServer.start` only logs and marks the
  server as running; requests are answered by calling `RestServer.handle`.
- There are no WebSocket subscriptions, network profiles or configuration
  files.
- Nothing is stored on disk: `InMemoryAccountManager` keeps its state in
  memory only, and state roots and proofs are placeholders rather than
  Merkle proofs.
- Signatures are not checked by the library itself: `Account.verify_signature`
  calls a verifier you supply (or the signature object's own `verify`).