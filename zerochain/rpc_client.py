"""JSON-RPC client helpers for querying and submitting to a node."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Any, Dict, Optional, Union

_NODE_REJECTED_COMPUTE_TX = -32010
_REJECTED_COMPUTE_TX_MESSAGE = "当前节点拒绝提交 compute 交易，请检查节点配置与交易内容。"


class RpcCallError(Exception):
    """Raised when an RPC call fails at the transport, HTTP or protocol level."""


def build_payload(method: str, params: Any = None) -> Dict[str, Any]:
    """The JSON-RPC 2.0 request object for one call."""
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "method": method,
        "params": params if params is not None else [],
    }


def format_rpc_error(method: str, code: int, message: str) -> str:
    """A readable message for an error object returned by the node."""
    if code == _NODE_REJECTED_COMPUTE_TX and method == "zero_submitComputeTx":
        return _REJECTED_COMPUTE_TX_MESSAGE
    return f"rpc `{method}` error {code}: {message}"


def parse_rpc_response(method: str, body: Union[bytes, str, Dict[str, Any]]) -> Any:
    """Extract the result from a response body, raising RpcCallError on errors."""
    if isinstance(body, dict):
        envelope = body
    else:
        try:
            envelope = json.loads(body)
        except (TypeError, ValueError) as exc:
            raise RpcCallError(f"failed to decode rpc response for `{method}`: {exc}") from exc
    if not isinstance(envelope, dict):
        raise RpcCallError(f"failed to decode rpc response for `{method}`: not an object")

    error = envelope.get("error")
    if error is not None:
        if (
            not isinstance(error, dict)
            or isinstance(error.get("code"), bool)
            or not isinstance(error.get("code"), int)
            or not isinstance(error.get("message"), str)
        ):
            raise RpcCallError(
                f"failed to decode rpc response for `{method}`: malformed error object"
            )
        raise RpcCallError(format_rpc_error(method, error["code"], error["message"]))

    result = envelope.get("result")
    if result is None:
        raise RpcCallError(f"rpc `{method}` missing result field")
    return result


def rpc_call(rpc_url: str, method: str, params: Any = None) -> Any:
    """POST a JSON-RPC request and return its result."""
    data = json.dumps(build_payload(method, params)).encode("utf-8")
    request = urllib.request.Request(
        rpc_url,
        data=data,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request) as response:
            body = response.read()
    except urllib.error.HTTPError as exc:
        raise RpcCallError(f"rpc http status {exc.code} {exc.reason} for `{method}`") from exc
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise RpcCallError(f"failed to call rpc method `{method}`: {exc}") from exc
    return parse_rpc_response(method, body)


def get_account(rpc_url: str, address: str) -> Any:
    """Fetch account information for an address."""
    return rpc_call(rpc_url, "zero_getAccount", [address])


def get_compute_tx_result(rpc_url: str, tx_id: str) -> Any:
    """Fetch the result of a native compute transaction."""
    return rpc_call(rpc_url, "zero_getComputeTxResult", [tx_id])


def load_tx_file(tx_file: str) -> Dict[str, Any]:
    """Read a transaction JSON file; its top level must be an object."""
    try:
        with open(tx_file, encoding="utf-8") as handle:
            raw = handle.read()
    except OSError as exc:
        raise OSError(f"failed to read tx file `{tx_file}`: {exc}") from exc
    try:
        tx_value = json.loads(raw)
    except ValueError as exc:
        raise ValueError(f"failed to parse tx json from `{tx_file}`: {exc}") from exc
    if not isinstance(tx_value, dict):
        raise ValueError("transaction payload must be a JSON object")
    return tx_value


def submit_compute_tx(rpc_url: str, tx_file: str) -> Any:
    """Submit the transaction stored in tx_file and return the node's answer."""
    tx_value = load_tx_file(tx_file)
    return rpc_call(rpc_url, "zero_submitComputeTx", [tx_value])