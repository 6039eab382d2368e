# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

import json
import socket
import threading

from unittest.mock import MagicMock

import pytest

from flows_ansible.__main__ import main
from flows_ansible.plugin import Plugin
from flows_ansible.plugin_utils.config import ServeConfig
from flows_ansible.plugin_utils.errors import PlaybookExecutionError, PluginError
from flows_ansible.plugin_utils.metadata import PLUGIN_METADATA
from flows_ansible.plugin_utils.models import Response
from flows_ansible.server import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    PLUGIN_ERROR,
    PluginRPCServer,
    create_server,
    handshake_line,
    serve,
)


@pytest.fixture
def plugin():
    impl = MagicMock(spec=Plugin)
    impl.info.return_value = PLUGIN_METADATA
    impl.execute_task.return_value = Response(success=True)
    impl.endpoint_request.side_effect = Plugin().endpoint_request
    return impl


@pytest.fixture
def rpc(plugin):
    return PluginRPCServer(plugin)


def _call(method, params=None, request_id=1):
    request = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        request["params"] = params
    return request


def test_info(rpc):
    response = rpc.dispatch(_call("Plugin.Info", [{}]))

    assert response == {"jsonrpc": "2.0", "id": 1, "result": PLUGIN_METADATA.to_dict()}


def test_execute_task(rpc, plugin):
    params = {
        "execution": {"id": "execution-1"},
        "step": {"id": "step-1", "action": {"params": [{"key": "playbook", "value": "a.yml"}]}},
        "workspace": "/workspace",
        "platform": "exflow",
    }

    response = rpc.dispatch(_call("Plugin.ExecuteTask", params))

    assert response["result"] == {"success": True}
    request = plugin.execute_task.call_args[0][0]
    assert request.execution.id == "execution-1"
    assert request.step.action.params[0].value == "a.yml"
    assert request.workspace == "/workspace"


def test_execute_task_failure(rpc, plugin):
    plugin.execute_task.side_effect = PlaybookExecutionError("one or more hosts failed", rc=2)

    response = rpc.dispatch(_call("Plugin.ExecuteTask", [{}]))

    assert "result" not in response
    assert response["error"] == {
        "code": PLUGIN_ERROR,
        "message": "one or more hosts failed",
        "data": {"success": False},
    }


@pytest.mark.parametrize("params", [None, [{}], {"path": "/hook"}])
def test_endpoint_request(rpc, params):
    response = rpc.dispatch(_call("Plugin.EndpointRequest", params))

    assert response["error"]["code"] == PLUGIN_ERROR
    assert response["error"]["message"] == "not implemented"
    assert response["error"]["data"] == {"success": False}


def test_unexpected_error(rpc, plugin):
    plugin.info.side_effect = RuntimeError("boom")

    response = rpc.dispatch(_call("Plugin.Info"))

    assert response["error"] == {"code": INTERNAL_ERROR, "message": "boom"}


def test_method_not_found(rpc):
    response = rpc.dispatch(_call("Plugin.Shutdown"))

    assert response["error"]["code"] == METHOD_NOT_FOUND


@pytest.mark.parametrize("params", [["a", "b"], "step", 42])
def test_invalid_params(rpc, params):
    response = rpc.dispatch(_call("Plugin.ExecuteTask", params))

    assert response["error"]["code"] == INVALID_PARAMS


def test_invalid_request(rpc):
    assert rpc.dispatch(["Plugin.Info"])["error"]["code"] == INVALID_REQUEST
    assert rpc.dispatch({"id": 3})["error"]["code"] == INVALID_REQUEST


def test_notification_has_no_response(rpc, plugin):
    assert rpc.dispatch({"jsonrpc": "2.0", "method": "Plugin.Info"}) is None
    plugin.info.assert_called_once()


def test_handle_line_parse_error(rpc):
    response = rpc.handle_line("{not json")

    assert response["id"] is None
    assert response["error"]["code"] == PARSE_ERROR


def test_handle_line_bytes(rpc):
    response = rpc.handle_line(json.dumps(_call("Plugin.Info", [{}])).encode("utf-8"))

    assert response["result"]["name"] == "Ansible"


def test_handle_line_invalid_utf8(rpc):
    response = rpc.handle_line(b"\xff\xfe")

    assert response["id"] is None
    assert response["error"]["code"] == PARSE_ERROR


def test_handshake_line():
    assert handshake_line(("127.0.0.1", 12345)) == "1|1|tcp|127.0.0.1:12345|jsonrpc"


def test_serve_without_magic_cookie():
    with pytest.raises(PluginError, match="This binary is a plugin"):
        serve(config=ServeConfig(magic_cookie=None))


def test_main_without_magic_cookie(monkeypatch, capsys):
    monkeypatch.delenv("PLUGIN_MAGIC_COOKIE", raising=False)

    assert main() == 1
    assert "This binary is a plugin" in capsys.readouterr().err


def test_create_server_no_free_port():
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen(1)
    port = blocker.getsockname()[1]
    try:
        with pytest.raises(PluginError, match="Couldn't bind plugin TCP listener"):
            create_server(MagicMock(spec=Plugin), ServeConfig(min_port=port, max_port=port))
    finally:
        blocker.close()


def test_server_round_trip(plugin):
    server = create_server(plugin, ServeConfig(min_port=0, max_port=0))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        with socket.create_connection(server.server_address, timeout=5) as conn:
            stream = conn.makefile("rwb")
            stream.write((json.dumps(_call("Plugin.Info", [{}], request_id=7)) + "\n").encode())
            stream.write(b"\n")
            stream.write((json.dumps(_call("Plugin.EndpointRequest", [{}], 8)) + "\n").encode())
            stream.flush()

            info = json.loads(stream.readline())
            endpoint = json.loads(stream.readline())
            stream.close()
    finally:
        server.shutdown()
        server.server_close()

    assert info["id"] == 7
    assert info["result"]["name"] == "Ansible"
    assert endpoint["id"] == 8
    assert endpoint["error"]["data"] == {"success": False}


def test_server_keeps_connection_after_invalid_utf8(plugin):
    server = create_server(plugin, ServeConfig(min_port=0, max_port=0))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        with socket.create_connection(server.server_address, timeout=5) as conn:
            stream = conn.makefile("rwb")
            stream.write(b"\xff\xfe\n")
            stream.write((json.dumps(_call("Plugin.Info", [{}], request_id=9)) + "\n").encode())
            stream.flush()

            error = json.loads(stream.readline())
            info = json.loads(stream.readline())
            stream.close()
    finally:
        server.shutdown()
        server.server_close()

    assert error["error"]["code"] == PARSE_ERROR
    assert info["id"] == 9
    assert info["result"]["name"] == "Ansible"
