"""
=============================================================================
FILE SERVER
=============================================================================

Ties the listener, the request-line parser and the FileResponder together.

=============================================================================
REQUEST FLOW
=============================================================================

    1. ACCEPT
       └── SocketServer accepts, wraps the socket in a Connection

    2. THREAD
       └── One daemon thread per connection

    3. READ
       └── Connection buffers the request head

    4. PARSE
       └── "GET /path HTTP/1.0" → "/path"
       └── Malformed or not GET → drop the connection

    5. RESOLVE
       └── web_root + "/path"
       └── ".." segment → 404 without touching the filesystem

    6. RESPOND
       └── FileResponder writes 200 + file, or 404

    7. CLOSE
       └── Always, whatever the ResponseResult says

=============================================================================
"""

import logging
import threading
from typing import Optional

from .config import ResponderConfig
from .core import SocketServer, Connection, ConnectionState
from .core.transfer import write_message
from .handlers import FileResponder, ResponseResult
from .http import (
    HTTPParseError,
    NOT_FOUND_RESPONSE,
    parse_request_path,
    resolve_file_path,
)


logger = logging.getLogger(__name__)


class FileServer:
    """
    HTTP/1.0 static file server.

    Usage:
        server = FileServer(ResponderConfig(port=8080, web_root="www"))
        server.run()  # Blocks until Ctrl+C / SIGTERM
    """

    def __init__(self, config: Optional[ResponderConfig] = None):
        """
        Initialize the file server.

        Args:
            config: Server configuration. Uses defaults if not provided.
        """
        self.config = config or ResponderConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)

        self._responder = FileResponder(
            content_types=self.config.content_types,
            default_content_type=self.config.default_content_type,
            send_content_length=self.config.send_content_length,
        )

    @property
    def address(self):
        """Bound (host, port) of the listener."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns once shutdown() is called or a signal is received.
        """
        self._setup_logging()

        logger.info(f"Starting {self.config.server_name}, serving {self.config.web_root}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight responses finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("fileresponder").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Serve a connection on its own thread.

        Called by SocketServer for each accepted client.
        """
        thread = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        thread.start()

    def _process_connection(self, conn: Connection):
        """
        Read, parse and answer one request, then close (runs in its thread).
        """
        with conn:
            try:
                raw_request = conn.read_request()
                if raw_request is None:
                    logger.debug(f"[{conn.id}] Client closed before sending a request")
                    return

                try:
                    request_path = parse_request_path(raw_request)
                except HTTPParseError as e:
                    logger.warning(f"[{conn.id}] Bad request ({e.status_code}): {e}")
                    return

                conn.state = ConnectionState.RESPONDING

                file_path = resolve_file_path(self.config.web_root, request_path)
                if file_path is None:
                    logger.warning(f"[{conn.id}] Refused path: {request_path}")
                    write_message(conn.socket, NOT_FOUND_RESPONSE)
                    return

                result = self._responder.respond(conn.socket, file_path)
                self._log_result(conn, request_path, result)

            except TimeoutError:
                logger.info(f"[{conn.id}] Request read timeout")
            except ValueError as e:
                logger.warning(f"[{conn.id}] {e}")
            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

    def _log_result(self, conn: Connection, request_path: str, result: ResponseResult):
        if result.completed:
            logger.info(
                f"[{conn.id}] {conn.client_ip} GET {request_path} "
                f"{result.status.value} {result.bytes_sent}B"
            )
        else:
            logger.warning(
                f"[{conn.id}] {conn.client_ip} GET {request_path} "
                f"{result.status.value} aborted ({result.reason.value}) "
                f"after {result.bytes_sent}B"
            )
