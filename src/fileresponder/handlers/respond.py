"""
=============================================================================
FILE RESPONDER
=============================================================================

Writes one complete HTTP/1.0 response for a resolved filesystem path.

=============================================================================
DECISION FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   open(path, O_RDONLY)                                               │
    │       │                                                              │
    │       ├── fails ─────────────────────────► 404        NOT_FOUND      │
    │       │                                                              │
    │   fstat(fd)                                                          │
    │       │                                                              │
    │       ├── not S_ISREG (dir, device...) ──► 404        FOUND_NOT_     │
    │       │                                               REGULAR        │
    │       │                                                              │
    │       └── regular file                                               │
    │               │                                                      │
    │               ├── HTTP/1.0 200 OK\r\n                                │
    │               ├── Content-Type: <token>\r\n\r\n                      │
    │               └── sendfile() loop ───────► body       FOUND_REGULAR  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Any failed write stops the response on the spot. Headers already on the
wire cannot be taken back, so the client just sees a short body. The
caller gets a ResponseResult saying how far the response got and closes
the connection either way.

=============================================================================
"""

import os
import stat
import socket
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from ..core.transfer import (
    AbortReason,
    DEFAULT_CHUNK_SIZE,
    TransferContext,
    send_file_body,
    write_message,
)
from ..http.mime_types import (
    DEFAULT_CONTENT_TYPES,
    DEFAULT_MIME_TYPE,
    validate_content_types,
    write_content_type,
)
from ..http.status_codes import (
    CONTENT_TYPE_PREFIX,
    CRLF,
    HEADER_TERMINATOR,
    HTTPStatus,
    NOT_FOUND_RESPONSE,
    status_line,
)


logger = logging.getLogger(__name__)


class Outcome(Enum):
    """What the filesystem said about the requested path."""
    FOUND_REGULAR = "found_regular"
    FOUND_NOT_REGULAR = "found_not_regular"
    NOT_FOUND = "not_found"


class Completion(Enum):
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ResponseResult:
    """
    Result of one respond() call.

    Attributes:
        outcome: Which response was chosen.
        completion: Whether every byte of it was written.
        reason: Why it was aborted, None when completed.
        bytes_sent: Body bytes transferred (always 0 for a 404).
    """
    outcome: Outcome
    completion: Completion
    reason: Optional[AbortReason] = None
    bytes_sent: int = 0

    @property
    def completed(self) -> bool:
        return self.completion is Completion.COMPLETED

    @property
    def status(self) -> HTTPStatus:
        if self.outcome is Outcome.FOUND_REGULAR:
            return HTTPStatus.OK
        return HTTPStatus.NOT_FOUND

    @classmethod
    def done(cls, outcome: Outcome, bytes_sent: int = 0) -> "ResponseResult":
        return cls(outcome, Completion.COMPLETED, None, bytes_sent)

    @classmethod
    def aborted(
        cls, outcome: Outcome, reason: AbortReason, bytes_sent: int = 0
    ) -> "ResponseResult":
        return cls(outcome, Completion.ABORTED, reason, bytes_sent)


class FileResponder:
    """
    Stateless HTTP/1.0 file responder.

    One instance can be shared by every connection thread: respond() keeps
    all of its state in locals and the TransferContext it creates.

    Usage:
        responder = FileResponder()
        result = responder.respond(client_socket, "www/index.html")
        if not result.completed:
            logger.warning(f"Response aborted: {result.reason}")
        client_socket.close()
    """

    def __init__(
        self,
        content_types: Optional[Mapping[str, str]] = None,
        default_content_type: Optional[str] = None,
        send_content_length: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Initialize the responder.

        Args:
            content_types: Extension to MIME token catalog.
                          None uses DEFAULT_CONTENT_TYPES.
            default_content_type: Token for unknown extensions.
            send_content_length: Add a Content-Length header to 200
                                responses. Off by default.
            chunk_size: Maximum bytes requested per sendfile() call.

        Raises:
            ValueError: The catalog or default holds a token that cannot be
                written as a header value.
        """
        if content_types is not None or default_content_type is not None:
            validate_content_types(
                DEFAULT_CONTENT_TYPES if content_types is None else content_types,
                DEFAULT_MIME_TYPE if default_content_type is None else default_content_type,
            )

        self.content_types = content_types
        self.default_content_type = default_content_type
        self.send_content_length = send_content_length
        self.chunk_size = chunk_size

    def respond(self, sock: socket.socket, file_path: str) -> ResponseResult:
        """
        Write the response for `file_path` to `sock`.

        Never raises for I/O problems: a missing file becomes a 404, and a
        broken socket ends the response early with an ABORTED result.

        Args:
            sock: Connected client socket. Left open.
            file_path: Path already joined with the web root.

        Returns:
            ResponseResult describing what was sent.
        """
        # ─────────────────────────────────────────────────────────────────
        # OPEN: anything we can't open is a 404
        # ─────────────────────────────────────────────────────────────────
        try:
            fd = os.open(file_path, os.O_RDONLY)
        except (OSError, ValueError) as e:
            # ValueError: embedded NUL byte in the path
            logger.debug(f"open {file_path}: {e}")
            return self._not_found(sock, Outcome.NOT_FOUND)

        try:
            # ─────────────────────────────────────────────────────────────
            # INSPECT: only regular files get a 200
            # ─────────────────────────────────────────────────────────────
            try:
                file_stat = os.fstat(fd)
            except OSError as e:
                logger.debug(f"fstat {file_path}: {e}")
                return self._not_found(sock, Outcome.NOT_FOUND)

            if not stat.S_ISREG(file_stat.st_mode):
                return self._not_found(sock, Outcome.FOUND_NOT_REGULAR)

            return self._send_file(sock, file_path, fd, file_stat.st_size)
        finally:
            os.close(fd)

    def _not_found(self, sock: socket.socket, outcome: Outcome) -> ResponseResult:
        if not write_message(sock, NOT_FOUND_RESPONSE):
            return ResponseResult.aborted(outcome, AbortReason.WRITE_FAILED)
        return ResponseResult.done(outcome)

    def _send_file(
        self, sock: socket.socket, file_path: str, fd: int, size: int
    ) -> ResponseResult:
        outcome = Outcome.FOUND_REGULAR

        # ─────────────────────────────────────────────────────────────────
        # HEADERS
        # ─────────────────────────────────────────────────────────────────
        if not write_message(sock, status_line(HTTPStatus.OK)):
            return ResponseResult.aborted(outcome, AbortReason.WRITE_FAILED)

        if not write_message(sock, CONTENT_TYPE_PREFIX):
            return ResponseResult.aborted(outcome, AbortReason.WRITE_FAILED)

        if not write_content_type(
            sock, file_path, self.content_types, self.default_content_type
        ):
            return ResponseResult.aborted(outcome, AbortReason.WRITE_FAILED)

        if self.send_content_length:
            if not write_message(sock, f"{CRLF}Content-Length: {size}"):
                return ResponseResult.aborted(outcome, AbortReason.WRITE_FAILED)

        if not write_message(sock, HEADER_TERMINATOR):
            return ResponseResult.aborted(outcome, AbortReason.WRITE_FAILED)

        # ─────────────────────────────────────────────────────────────────
        # BODY
        # ─────────────────────────────────────────────────────────────────
        context = TransferContext(sock=sock, fd=fd, size=size)
        reason = send_file_body(context, self.chunk_size)
        if reason is not None:
            return ResponseResult.aborted(outcome, reason, context.sent)

        return ResponseResult.done(outcome, context.sent)


def respond(sock: socket.socket, file_path: str, **kwargs) -> ResponseResult:
    """
    Respond with the default catalog.

    Args:
        sock: Connected client socket.
        file_path: Path already joined with the web root.
        **kwargs: Additional arguments for FileResponder.

    Example:
        result = respond(client_socket, "www/index.html")
    """
    return FileResponder(**kwargs).respond(sock, file_path)
