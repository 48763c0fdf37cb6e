"""IPC (Inter-Process Communication) for daemon-client communication.

Uses JSON-RPC 2.0 protocol over Unix domain sockets, one newline-terminated
message per request and response.
"""

import json
import logging
import socket
import threading
from pathlib import Path
from typing import Any, Callable, Optional

from chessclock.daemon.platform import get_ipc_socket_path

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
NOT_FOUND = -32004


class IPCError(Exception):
    """IPC communication error.

    Attributes:
        code: JSON-RPC error code returned by the daemon, if any
    """

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class RPCError(Exception):
    """Raised by a handler to answer with a specific JSON-RPC error code."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class IPCServer:
    """IPC server for handling client requests.

    Implements JSON-RPC 2.0 server over a Unix socket. Each client
    connection is served on its own thread.
    """

    def __init__(self, socket_path: Optional[Path] = None):
        """Initialize IPC server.

        Args:
            socket_path: Path to socket (default: platform-specific)
        """
        self.socket_path = socket_path or get_ipc_socket_path()
        self.socket: Optional[socket.socket] = None
        self.running = False
        self.handlers: dict[str, Callable[..., Any]] = {}
        self._server_thread: Optional[threading.Thread] = None

    def register_handler(self, method: str, handler: Callable[..., Any]) -> None:
        """Register a handler for a JSON-RPC method.

        Args:
            method: Method name (e.g., 'start', 'tally')
            handler: Callable taking the params dict
        """
        self.handlers[method] = handler
        logger.debug(f"Registered handler for method: {method}")

    def start(self) -> None:
        """Start the IPC server."""
        if self.running:
            logger.warning("IPC server already running")
            return

        # Clean up any stale socket
        if self.socket_path.exists():
            self.socket_path.unlink()

        self.socket_path.parent.mkdir(parents=True, exist_ok=True)
        self.socket = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self.socket.bind(str(self.socket_path))
        self.socket.listen(5)
        # Owner only
        self.socket_path.chmod(0o600)

        self.running = True
        self._server_thread = threading.Thread(target=self._accept_loop, daemon=True)
        self._server_thread.start()
        logger.info(f"IPC server started on {self.socket_path}")

    def _accept_loop(self) -> None:
        """Accept client connections."""
        while self.running:
            try:
                server_socket = self.socket
                if server_socket is None:
                    break

                server_socket.settimeout(1.0)  # Allow periodic checks of self.running
                try:
                    client_socket, _ = server_socket.accept()
                except socket.timeout:
                    continue

                client_thread = threading.Thread(
                    target=self._handle_client, args=(client_socket,), daemon=True
                )
                client_thread.start()
            except OSError as e:
                if self.running:  # Only log if not shutting down
                    logger.error(f"Error in accept loop: {e}")

    def _handle_client(self, client_socket: socket.socket) -> None:
        """Handle a client connection.

        Args:
            client_socket: Client socket
        """
        try:
            client_socket.settimeout(None)
            data = b""
            while True:
                chunk = client_socket.recv(4096)
                if not chunk:
                    break
                data += chunk
                if b"\n" in chunk:
                    break

            if not data:
                return

            try:
                request = json.loads(data.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                response = self._create_error_response(None, PARSE_ERROR, str(e))
            else:
                response = self._process_request(request)

            client_socket.sendall(json.dumps(response).encode("utf-8") + b"\n")

        except OSError as e:
            logger.error(f"Error handling client: {e}")
        finally:
            client_socket.close()

    def _process_request(self, request: Any) -> dict[str, Any]:
        """Process a JSON-RPC request.

        Args:
            request: Decoded JSON-RPC request

        Returns:
            JSON-RPC response dictionary
        """
        if not isinstance(request, dict):
            return self._create_error_response(None, INVALID_REQUEST, "Invalid Request")

        request_id = request.get("id")
        method = request.get("method")
        params = request.get("params", {})

        if not method or not isinstance(method, str):
            return self._create_error_response(request_id, INVALID_REQUEST, "Invalid Request")
        if not isinstance(params, dict):
            return self._create_error_response(request_id, INVALID_PARAMS, "Params must be an object")

        handler = self.handlers.get(method)
        if not handler:
            return self._create_error_response(
                request_id, METHOD_NOT_FOUND, f"Method not found: {method}"
            )

        try:
            result = handler(params)
            return self._create_success_response(request_id, result)
        except RPCError as e:
            logger.debug(f"Handler for {method} returned error {e.code}: {e.message}")
            return self._create_error_response(request_id, e.code, e.message)
        except Exception as e:
            logger.error(f"Error in handler for {method}: {e}")
            return self._create_error_response(request_id, INTERNAL_ERROR, str(e))

    def _create_success_response(self, request_id: Optional[Any], result: Any) -> dict[str, Any]:
        """Create a JSON-RPC success response."""
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    def _create_error_response(
        self, request_id: Optional[Any], code: int, message: str
    ) -> dict[str, Any]:
        """Create a JSON-RPC error response."""
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {"code": code, "message": message},
        }

    def stop(self) -> None:
        """Stop the IPC server."""
        if not self.running:
            return

        logger.info("Stopping IPC server...")
        self.running = False

        if self.socket:
            self.socket.close()
            self.socket = None

        if self._server_thread:
            self._server_thread.join(timeout=2.0)

        if self.socket_path.exists():
            self.socket_path.unlink()

        logger.info("IPC server stopped")


class IPCClient:
    """IPC client for communicating with daemon.

    Implements JSON-RPC 2.0 client over a Unix socket.
    """

    def __init__(self, socket_path: Optional[Path] = None, timeout: float = 5.0):
        """Initialize IPC client.

        Args:
            socket_path: Path to socket (default: platform-specific)
            timeout: Connection timeout in seconds
        """
        self.socket_path = socket_path or get_ipc_socket_path()
        self.timeout = timeout
        self._request_id = 0

    def call(self, method: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Call a remote method.

        Args:
            method: Method name
            params: Method parameters

        Returns:
            Method result

        Raises:
            IPCError: If communication fails or method returns error
        """
        self._request_id += 1
        request = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or {},
        }

        try:
            response = self._send_request(request)
        except (OSError, ValueError) as e:
            raise IPCError(f"Failed to communicate with daemon: {e}")

        if "error" in response:
            error = response["error"]
            raise IPCError(error.get("message", "Unknown error"), code=error.get("code"))

        return response.get("result")

    def _send_request(self, request: dict[str, Any]) -> dict[str, Any]:
        """Send request and receive response.

        Args:
            request: JSON-RPC request

        Returns:
            JSON-RPC response
        """
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(self.timeout)

        try:
            sock.connect(str(self.socket_path))

            request_data = json.dumps(request).encode("utf-8") + b"\n"
            sock.sendall(request_data)

            response_data = b""
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                response_data += chunk
                if b"\n" in chunk:
                    break

            response = json.loads(response_data.decode("utf-8"))
            return response  # type: ignore[no-any-return]

        finally:
            sock.close()

    def is_daemon_running(self) -> bool:
        """Check if daemon is running.

        Returns:
            True if daemon is accessible, False otherwise
        """
        try:
            self.call("ping")
            return True
        except IPCError:
            return False
