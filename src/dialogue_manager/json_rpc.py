"""
Line-delimited JSON-RPC 2.0 over stdio for the dialogue server.
"""

import json
import logging
import sys
from typing import IO, Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

# JSON-RPC 2.0 constants
JSONRPC_VERSION = "2.0"
ERROR_PARSE = -32700
ERROR_INVALID_REQUEST = -32600
ERROR_METHOD_NOT_FOUND = -32601
ERROR_INVALID_PARAMS = -32602
ERROR_INTERNAL = -32603

Handler = Callable[[Dict[str, Any]], Any]


class JsonRpcError(Exception):
    """An error that maps onto a JSON-RPC error object.

    Handlers raise it to answer with a specific code, e.g. invalid params.
    """

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> dict:
        d = {"code": self.code, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d


class JsonRpcRequest:
    """JSON-RPC 2.0 Request"""

    def __init__(self, data: Any):
        if not isinstance(data, dict):
            raise JsonRpcError(ERROR_INVALID_REQUEST, "Request must be a JSON object")

        self.id = data.get("id")
        self.is_notification = "id" not in data
        self.method = data.get("method")
        self.params = data.get("params", {})

        if data.get("jsonrpc") != JSONRPC_VERSION:
            raise JsonRpcError(
                ERROR_INVALID_REQUEST, f"Invalid JSON-RPC version: {data.get('jsonrpc')}"
            )
        if not self.method or not isinstance(self.method, str):
            raise JsonRpcError(ERROR_INVALID_REQUEST, "Missing method")
        if self.params is None:
            self.params = {}
        if not isinstance(self.params, dict):
            raise JsonRpcError(ERROR_INVALID_PARAMS, "Params must be an object")


def create_error_response(request_id: Any, error: JsonRpcError) -> dict:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error.to_dict()}


def create_result_response(request_id: Any, result: Any) -> dict:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


class JsonRpcServer:
    """
    A synchronous JSON-RPC 2.0 server reading one request per line.

    Handlers take the params object and return the result; anything they
    raise becomes an error response. Notifications get no response.
    """

    def __init__(
        self,
        server_name: str,
        input_stream: Optional[IO[str]] = None,
        output_stream: Optional[IO[str]] = None,
    ):
        self.server_name = server_name
        self.input_stream = input_stream or sys.stdin
        self.output_stream = output_stream or sys.stdout
        self._handlers: Dict[str, Handler] = {}
        self._running = False

    def register_handler(self, method: str, handler: Handler):
        """Register a handler for a JSON-RPC method."""
        logger.info(f"Registering handler for method: {method}")
        self._handlers[method] = handler

    def _write_message(self, message: dict):
        self.output_stream.write(json.dumps(message) + "\n")
        self.output_stream.flush()

    def process_request(self, request_str: str) -> Optional[dict]:
        """Handle one raw request line and return the response, if any."""
        try:
            request_data = json.loads(request_str)
        except json.JSONDecodeError as e:
            return create_error_response(None, JsonRpcError(ERROR_PARSE, f"Parse error: {e}"))

        request_id = request_data.get("id") if isinstance(request_data, dict) else None
        try:
            request = JsonRpcRequest(request_data)
        except JsonRpcError as e:
            return create_error_response(request_id, e)

        handler = self._handlers.get(request.method)
        if not handler:
            error = JsonRpcError(ERROR_METHOD_NOT_FOUND, f"Method not found: {request.method}")
            return None if request.is_notification else create_error_response(request_id, error)

        try:
            result = handler(request.params)
        except JsonRpcError as e:
            logger.warning(f"{request.method} rejected: {e.message}")
            response = create_error_response(request_id, e)
        except Exception as e:
            logger.error(f"Handler error for {request.method}: {e}", exc_info=True)
            response = create_error_response(
                request_id, JsonRpcError(ERROR_INTERNAL, f"Internal error: {e}")
            )
        else:
            response = create_result_response(request_id, result)

        return None if request.is_notification else response

    def _serve_line(self, line: str) -> None:
        line = line.strip()
        if not line:
            return
        response = self.process_request(line)
        if response:
            self._write_message(response)

    def run(self):
        """Serve requests until EOF or stop()."""
        logger.info(f"{self.server_name} listening on stdio ({len(self._handlers)} methods)")
        self._running = True
        try:
            for line in iter(self.input_stream.readline, ""):
                if not self._running:
                    break
                try:
                    self._serve_line(line)
                except Exception as e:
                    logger.error(f"Failed to serve request line: {e}", exc_info=True)
            else:
                logger.info("Input closed")
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self._running = False
            logger.info(f"{self.server_name} stopped")

    def stop(self):
        """Stop the server."""
        self._running = False
