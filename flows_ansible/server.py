# -*- coding: utf-8 -*-

# Copyright (c) 2025 Red Hat, Inc.
# GNU General Public License v3.0+ (see COPYING or https://www.gnu.org/licenses/gpl-3.0.txt)

"""RPC server exposing the plugin to the flow runner.

The runner starts the plugin binary with the magic cookie in its environment,
reads the handshake line from stdout and then talks newline delimited JSON-RPC
2.0 over the announced TCP address.
"""

import json
import socketserver
import sys

from typing import Any, Callable, Dict, Optional, TextIO, Tuple, Union

from ansible.utils.display import Display

from flows_ansible.plugin import Plugin
from flows_ansible.plugin_utils.config import (
    APP_PROTOCOL_VERSION,
    CORE_PROTOCOL_VERSION,
    ServeConfig,
)
from flows_ansible.plugin_utils.errors import PluginError
from flows_ansible.plugin_utils.models import ExecuteTaskRequest, Response
from flows_ansible.plugin_utils.runner import AnsibleRunnerPlaybook


display = Display()

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
PLUGIN_ERROR = -32000

NOT_A_PLUGIN_MESSAGE = (
    "This binary is a plugin. These are not meant to be executed directly. "
    "Please execute the program that consumes these plugins, which will "
    "load any plugins automatically"
)


class InvalidParams(Exception):
    pass


class PluginRPCServer:
    """Dispatch JSON-RPC requests to a plugin implementation.

    Attributes:
        impl: The plugin serving the calls.
    """

    def __init__(self, impl: Plugin) -> None:
        self.impl = impl
        self._methods: Dict[str, Tuple[Callable[[Dict[str, Any]], Dict[str, Any]], bool]] = {
            "Plugin.ExecuteTask": (self._execute_task, True),
            "Plugin.EndpointRequest": (self._endpoint_request, True),
            "Plugin.Info": (self._info, False),
        }

    @staticmethod
    def _single_param(params: Any) -> Dict[str, Any]:
        # net/rpc style callers send the request as the only positional argument
        if isinstance(params, list):
            if len(params) > 1:
                raise InvalidParams(f"expected a single argument, got {len(params)}")
            params = params[0] if params else None
        if params is None:
            return {}
        if not isinstance(params, dict):
            raise InvalidParams(f"expected an object, got {type(params).__name__}")
        return params

    def _execute_task(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            request = ExecuteTaskRequest.from_dict(params)
        except (AttributeError, TypeError) as e:
            raise InvalidParams(str(e))
        return self.impl.execute_task(request).to_dict()

    def _endpoint_request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.impl.endpoint_request(params).to_dict()

    def _info(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.impl.info(params).to_dict()

    @staticmethod
    def _error(
        request_id: Any, code: int, message: str, data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": code, "message": message}
        if data is not None:
            error["data"] = data
        return {"jsonrpc": "2.0", "id": request_id, "error": error}

    def dispatch(self, request: Any) -> Optional[Dict[str, Any]]:
        """Handle a decoded JSON-RPC request.

        Args:
            request: The JSON-RPC request object.
        Returns:
            The JSON-RPC response, or None for notifications.
        """
        if not isinstance(request, dict) or not isinstance(request.get("method"), str):
            return self._error(None, INVALID_REQUEST, "Invalid request")

        request_id = request.get("id")
        method = request["method"]
        display.vvv(f"[rpc] {method} id={request_id}")

        if method not in self._methods:
            response = self._error(request_id, METHOD_NOT_FOUND, f"Method '{method}' not found")
        else:
            handler, reports_response = self._methods[method]
            try:
                result = handler(self._single_param(request.get("params")))
                response = {"jsonrpc": "2.0", "id": request_id, "result": result}
            except InvalidParams as e:
                response = self._error(request_id, INVALID_PARAMS, f"Invalid params: {e}")
            except PluginError as e:
                data = Response(success=False).to_dict() if reports_response else None
                response = self._error(request_id, PLUGIN_ERROR, str(e), data)
            except Exception as e:
                display.warning(f"[rpc] {method} failed unexpectedly: {e}")
                response = self._error(request_id, INTERNAL_ERROR, str(e))

        if "id" not in request:
            return None
        return response

    def handle_line(self, line: Union[str, bytes]) -> Optional[Dict[str, Any]]:
        """Decode a single line of the stream and dispatch it."""
        try:
            if isinstance(line, bytes):
                line = line.decode("utf-8")
            request = json.loads(line)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            return self._error(None, PARSE_ERROR, f"Parse error: {e}")
        return self.dispatch(request)


class _RequestHandler(socketserver.StreamRequestHandler):
    server: "ThreadingRPCServer"

    def handle(self) -> None:
        for raw_line in self.rfile:
            line = raw_line.strip()
            if not line:
                continue
            response = self.server.rpc.handle_line(line)
            if response is None:
                continue
            self.wfile.write((json.dumps(response) + "\n").encode("utf-8"))
            self.wfile.flush()


class ThreadingRPCServer(socketserver.ThreadingTCPServer):
    """TCP server handling every runner connection on its own thread."""

    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, address: Tuple[str, int], rpc: PluginRPCServer) -> None:
        self.rpc = rpc
        super().__init__(address, _RequestHandler)


def create_server(plugin: Plugin, config: ServeConfig) -> ThreadingRPCServer:
    """Bind the RPC server to the first free port of the configured range.

    Raises:
        PluginError: If no port of the range could be bound.
    """
    rpc = PluginRPCServer(plugin)
    last_error: Optional[OSError] = None
    for port in range(config.min_port, config.max_port + 1):
        try:
            return ThreadingRPCServer((config.host, port), rpc)
        except OSError as e:
            last_error = e
    raise PluginError(
        f"Couldn't bind plugin TCP listener in {config.min_port}-{config.max_port}: {last_error}"
    )


def handshake_line(address: Tuple[str, int]) -> str:
    host, port = address[0], address[1]
    return f"{CORE_PROTOCOL_VERSION}|{APP_PROTOCOL_VERSION}|tcp|{host}:{port}|jsonrpc"


def serve(
    plugin: Optional[Plugin] = None,
    config: Optional[ServeConfig] = None,
    out: Optional[TextIO] = None,
) -> None:
    """Announce the plugin to the runner and serve until interrupted.

    Raises:
        PluginError: If the handshake cookie is missing or no port is free.
    """
    if config is None:
        config = ServeConfig.from_env()
    if not config.handshake_valid:
        raise PluginError(NOT_A_PLUGIN_MESSAGE)
    if plugin is None:
        plugin = Plugin(runner=AnsibleRunnerPlaybook(config.playbook_bin))
    if out is None:
        out = sys.stdout

    with create_server(plugin, config) as server:
        out.write(handshake_line(server.server_address) + "\n")
        out.flush()
        host, port = server.server_address[0], server.server_address[1]
        display.vvv(f"[rpc] Serving plugin on {host}:{port}")
        server.serve_forever()
