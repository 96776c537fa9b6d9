import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from zerochain.rpc_client import (
    RpcCallError,
    build_payload,
    format_rpc_error,
    get_account,
    get_compute_tx_result,
    load_tx_file,
    parse_rpc_response,
    rpc_call,
    submit_compute_tx,
)


class _Handler(BaseHTTPRequestHandler):
    def do_POST(self):
        length = int(self.headers["Content-Length"])
        body = json.loads(self.rfile.read(length))
        self.server.requests.append(body)
        status, reply = self.server.responder(body)
        data = reply if isinstance(reply, bytes) else json.dumps(reply).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, *args):
        pass


@pytest.fixture
def rpc_server():
    servers = []

    def start(responder):
        server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
        server.requests = []
        server.responder = responder
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        host, port = server.server_address
        return server, f"http://{host}:{port}"

    yield start
    for server in servers:
        server.shutdown()
        server.server_close()


def test_build_payload_fields():
    payload = build_payload("zero_getAccount", ["0xabc"])
    assert payload == {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "zero_getAccount",
        "params": ["0xabc"],
    }


def test_build_payload_defaults_to_empty_params():
    assert build_payload("zero_getWork")["params"] == []


def test_format_rpc_error_special_case():
    message = format_rpc_error("zero_submitComputeTx", -32010, "rejected")
    assert message == "当前节点拒绝提交 compute 交易，请检查节点配置与交易内容。"


def test_format_rpc_error_generic():
    message = format_rpc_error("zero_getAccount", -32601, "Method not found")
    assert message == "rpc `zero_getAccount` error -32601: Method not found"


def test_format_rpc_error_same_code_other_method_is_generic():
    message = format_rpc_error("zero_getAccount", -32010, "boom")
    assert "zero_getAccount" in message and "boom" in message


def test_parse_rpc_response_returns_result():
    body = json.dumps({"jsonrpc": "2.0", "id": 1, "result": {"ok": True}})
    assert parse_rpc_response("m", body) == {"ok": True}


def test_parse_rpc_response_accepts_dict():
    assert parse_rpc_response("m", {"result": [1, 2]}) == [1, 2]


def test_parse_rpc_response_error_object():
    with pytest.raises(RpcCallError) as info:
        parse_rpc_response("zero_getAccount", {"error": {"code": -1, "message": "bad"}})
    assert str(info.value) == format_rpc_error("zero_getAccount", -1, "bad")


def test_parse_rpc_response_missing_result():
    with pytest.raises(RpcCallError, match="missing result field"):
        parse_rpc_response("zero_getAccount", {"jsonrpc": "2.0", "id": 1})


def test_parse_rpc_response_null_result_is_missing():
    with pytest.raises(RpcCallError, match="missing result field"):
        parse_rpc_response("m", '{"result": null}')


def test_parse_rpc_response_bad_json():
    with pytest.raises(RpcCallError, match="failed to decode rpc response"):
        parse_rpc_response("m", b"not json")


def test_parse_rpc_response_malformed_error():
    with pytest.raises(RpcCallError, match="failed to decode"):
        parse_rpc_response("m", {"error": {"code": "x"}})


def test_rpc_call_round_trip(rpc_server):
    server, url = rpc_server(lambda body: (200, {"jsonrpc": "2.0", "id": 1, "result": {"seen": body["params"]}}))
    result = rpc_call(url, "zero_getAccount", ["0xabc"])
    assert result == {"seen": ["0xabc"]}
    assert server.requests == [build_payload("zero_getAccount", ["0xabc"])]


def test_rpc_call_http_status_error(rpc_server):
    _, url = rpc_server(lambda body: (500, {"oops": True}))
    with pytest.raises(RpcCallError, match="rpc http status 500"):
        rpc_call(url, "zero_getAccount", [])


def test_rpc_call_error_response(rpc_server):
    _, url = rpc_server(lambda body: (200, {"error": {"code": -32010, "message": "no"}}))
    with pytest.raises(RpcCallError) as info:
        rpc_call(url, "zero_submitComputeTx", [{}])
    assert str(info.value) == format_rpc_error("zero_submitComputeTx", -32010, "no")


def test_rpc_call_connection_failure(rpc_server):
    server, url = rpc_server(lambda body: (200, {"result": 1}))
    server.shutdown()
    server.server_close()
    with pytest.raises(RpcCallError, match="failed to call rpc method `zero_getWork`"):
        rpc_call(url, "zero_getWork", [])


def test_get_account_and_tx_result_methods(rpc_server):
    server, url = rpc_server(lambda body: (200, {"result": body["method"]}))
    assert get_account(url, "0xabc") == "zero_getAccount"
    assert get_compute_tx_result(url, "0x01") == "zero_getComputeTxResult"
    assert [r["params"] for r in server.requests] == [["0xabc"], ["0x01"]]


def test_load_tx_file_object(tmp_path):
    path = tmp_path / "tx.json"
    path.write_text(json.dumps({"tx_id": "0x01", "nonce": 1}), encoding="utf-8")
    assert load_tx_file(str(path)) == {"tx_id": "0x01", "nonce": 1}


def test_load_tx_file_rejects_non_object(tmp_path):
    path = tmp_path / "tx.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError, match="must be a JSON object"):
        load_tx_file(str(path))


def test_load_tx_file_rejects_bad_json(tmp_path):
    path = tmp_path / "tx.json"
    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(ValueError, match="failed to parse tx json"):
        load_tx_file(str(path))


def test_load_tx_file_missing(tmp_path):
    with pytest.raises(OSError, match="failed to read tx file"):
        load_tx_file(str(tmp_path / "absent.json"))


def test_submit_compute_tx_sends_file_contents(rpc_server, tmp_path):
    tx = {"tx_id": "0x01", "command": "Mint"}
    path = tmp_path / "tx.json"
    path.write_text(json.dumps(tx), encoding="utf-8")
    server, url = rpc_server(lambda body: (200, {"result": {"ok": True}}))
    assert submit_compute_tx(url, str(path)) == {"ok": True}
    assert server.requests[0]["method"] == "zero_submitComputeTx"
    assert server.requests[0]["params"] == [tx]