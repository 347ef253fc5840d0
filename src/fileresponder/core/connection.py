"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for its single HTTP/1.0 exchange.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

A request line may arrive split across several recv() calls:

    First recv():  "GET /ind"
    Second recv(): "ex.html HTTP/1.0\r\n\r\n"

So we buffer until the blank line (\r\n\r\n) that ends the request head.
GET requests carry no body, so nothing after the head is read.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► RESPONDING ──────► CLOSING ──────► CLOSED
     │             │                                  ▲
     └─────────────┴──────────────────────────────────┘
             (client went away / bad request)

HTTP/1.0 has no keep-alive here: one request, one response, then close.
Closing the socket is what tells the client the body is over.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


HEAD_TERMINATOR = b"\r\n\r\n"


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Reading the request head
    RESPONDING = "responding"  # Responder owns the socket
    CLOSING = "closing"        # Shutdown sequence
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client address tuple as returned by accept().
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ResponderConfig)
    buffer_size: int = 2048
    timeout: Optional[float] = None
    max_request_size: int = 2000

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        # None keeps the socket fully blocking, which sendfile() expects
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one request head from the socket.

        Returns:
            Bytes up to and including the blank line, or None if the client
            closed the connection first.

        Raises:
            TimeoutError: If a timeout is configured and expires.
            ValueError: If the head grows past max_request_size.
        """
        self.state = ConnectionState.READING

        try:
            while HEAD_TERMINATOR not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return None

                self._buffer += chunk

                if len(self._buffer) > self.max_request_size:
                    raise ValueError(f"Request too large: {len(self._buffer)} bytes")
        except socket.timeout:
            raise TimeoutError("Request read timeout")

        head_end = self._buffer.find(HEAD_TERMINATOR) + len(HEAD_TERMINATOR)
        return self._buffer[:head_end]

    def _recv(self) -> bytes:
        """
        Receive data from the socket.

        Returns:
            Received bytes, or empty bytes if the client disconnected.
        """
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_RDWR) first so the client sees the end of the body
        even if another reference to the socket is still alive, then
        release the descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
