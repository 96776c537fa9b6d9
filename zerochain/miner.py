"""A proof-of-work mining worker that fetches and submits work over RPC."""

from __future__ import annotations

import json
import re
import struct
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from zerochain.block import keccak256
from zerochain.rpc_client import RpcCallError, build_payload

_U64_MAX = (1 << 64) - 1
_HEX = re.compile(r"[0-9a-fA-F]*")
_PROGRESS_EVERY = 50_000
_RPC_TIMEOUT_SECS = 10
_FETCH_RETRY_SECS = 2
_BAD_WORK_RETRY_SECS = 1

Progress = Callable[[int, int, int], None]


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string")
    return value


def _require_uint(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"field `{key}` must be a non-negative integer")
    return value


@dataclass(frozen=True)
class WorkPayload:
    """A unit of mining work handed out by the node."""

    work_id: str
    prev_hash: str
    height: int
    target_leading_zero_bytes: int

    @classmethod
    def from_dict(cls, data: Any) -> "WorkPayload":
        if not isinstance(data, dict):
            raise ValueError("work payload must be an object")
        return cls(
            work_id=_require_str(data, "work_id"),
            prev_hash=_require_str(data, "prev_hash"),
            height=_require_uint(data, "height"),
            target_leading_zero_bytes=_require_uint(data, "target_leading_zero_bytes"),
        )


@dataclass(frozen=True)
class SubmitWorkResult:
    """The node's verdict on a submitted share."""

    accepted: bool
    reason: Optional[str] = None
    block_hash: Optional[str] = None
    height: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Any) -> "SubmitWorkResult":
        if not isinstance(data, dict):
            raise ValueError("submit result must be an object")
        accepted = data.get("accepted")
        if not isinstance(accepted, bool):
            raise ValueError("field `accepted` must be a boolean")
        for key in ("reason", "block_hash"):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ValueError(f"field `{key}` must be a string or null")
        height = data.get("height")
        if height is not None:
            height = _require_uint(data, "height")
        return cls(
            accepted=accepted,
            reason=data.get("reason"),
            block_hash=data.get("block_hash"),
            height=height,
        )


def compute_pow_hash(prev_hash: bytes, height: int, nonce: int) -> bytes:
    """Keccak-256 of prev_hash followed by big-endian height and nonce."""
    return keccak256(bytes(prev_hash) + struct.pack(">QQ", height, nonce))


def leading_zero_bytes(digest: bytes) -> int:
    """How many zero bytes the digest starts with."""
    count = 0
    for byte in digest:
        if byte != 0:
            break
        count += 1
    return count


def decode_prev_hash(prev_hash: str) -> bytes:
    """Decode a 32-byte hash written as hex, with any leading '0x' removed."""
    body = prev_hash
    while body.startswith("0x"):
        body = body[2:]
    if len(body) % 2 or not _HEX.fullmatch(body):
        raise ValueError(f"invalid prev_hash hex: {prev_hash!r}")
    decoded = bytes.fromhex(body)
    if len(decoded) != 32:
        raise ValueError(f"invalid prev_hash length: {len(decoded)} bytes")
    return decoded


def solve_work(work: WorkPayload, progress: Optional[Progress] = None) -> Tuple[int, bytes]:
    """Search nonces from zero until the hash meets the target.

    Returns the winning nonce and its hash. Every 50,000 nonces, progress is
    called with the height, the nonce and the last hash's leading zero bytes.
    """
    prev_hash = decode_prev_hash(work.prev_hash)
    nonce = 0
    while True:
        digest = compute_pow_hash(prev_hash, work.height, nonce)
        zeros = leading_zero_bytes(digest)
        if zeros >= work.target_leading_zero_bytes:
            return nonce, digest
        nonce = min(nonce + 1, _U64_MAX)
        if progress is not None and nonce % _PROGRESS_EVERY == 0:
            progress(work.height, nonce, zeros)


def _rpc_call(rpc_url: str, method: str, params: Any) -> Any:
    data = json.dumps(build_payload(method, params)).encode("utf-8")
    request = urllib.request.Request(
        rpc_url,
        data=data,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=_RPC_TIMEOUT_SECS) as response:
            body = response.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as exc:
        text = exc.read().decode("utf-8", errors="replace")
        raise RpcCallError(
            f"rpc {method} failed with status {exc.code} {exc.reason}: {text}"
        ) from exc
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise RpcCallError(f"rpc {method} request failed: {exc}") from exc

    try:
        envelope = json.loads(body)
        if not isinstance(envelope, dict):
            raise ValueError("response is not an object")
    except ValueError as exc:
        raise RpcCallError(f"decode rpc {method} response failed: {exc} (body={body})") from exc

    error = envelope.get("error")
    if error is not None:
        message = error.get("message") if isinstance(error, dict) else None
        if not isinstance(message, str):
            raise RpcCallError(
                f"decode rpc {method} response failed: malformed error (body={body})"
            )
        raise RpcCallError(f"rpc {method} returned error: {message}")
    result = envelope.get("result")
    if result is None:
        raise RpcCallError(f"rpc {method} returned empty result")
    return result


def _print_progress(height: int, nonce: int, zeros: int) -> None:
    print(f"   Mining block #{height}... nonce: {nonce} (leading zeros: {zeros})")


def _short_hash(block_hash: Optional[str]) -> str:
    body = block_hash if block_hash is not None else "0x"
    while body.startswith("0x"):
        body = body[2:]
    return body[:16] if body else "unknown"


def run_miner(
    rpc_url: str, miner_label: str = "zerochain-local", rounds: Optional[int] = None
) -> int:
    """Fetch, solve and submit work; run forever unless rounds is given.

    Returns the number of blocks the node accepted.
    """
    accepted = 0
    completed = 0
    while rounds is None or completed < rounds:
        completed += 1
        try:
            work = WorkPayload.from_dict(_rpc_call(rpc_url, "zero_getWork", []))
        except (RpcCallError, ValueError) as exc:
            print(f"   ⚠️ Failed to fetch mining work: {exc}")
            time.sleep(_FETCH_RETRY_SECS)
            continue

        try:
            decode_prev_hash(work.prev_hash)
        except ValueError as exc:
            print(f"   ⚠️ Invalid prev_hash in work {work.work_id}: {exc}")
            time.sleep(_BAD_WORK_RETRY_SECS)
            continue

        nonce, digest = solve_work(work, _print_progress)
        share = {
            "work_id": work.work_id,
            "nonce": nonce,
            "hash_hex": "0x" + digest.hex(),
            "miner": miner_label,
        }
        try:
            result = SubmitWorkResult.from_dict(_rpc_call(rpc_url, "zero_submitWork", [share]))
        except (RpcCallError, ValueError) as exc:
            print(f"   ⚠️ Failed to submit share at height {work.height}: {exc}")
            continue

        if result.accepted:
            accepted += 1
            height = result.height if result.height is not None else work.height
            print(
                f"   ⛏️  Block #{height} mined! Hash: 0x{_short_hash(result.block_hash)}... "
                f"Nonce: {nonce}"
            )
        else:
            reason = result.reason if result.reason is not None else "unknown_reason"
            print(f"   ⚠️ Share rejected at height {work.height}: {reason}")
    return accepted