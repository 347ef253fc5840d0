"""
=============================================================================
SOCKET WRITES AND ZERO-COPY FILE TRANSFER
=============================================================================

Two primitives every response is built from:

1. write_message()   Send a short header string, all of it or nothing more.
2. send_file_body()  Stream a file to the socket with os.sendfile().

=============================================================================
WHY sendfile()?
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                 read()/send() vs sendfile()                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   read() + send()                  sendfile()                       │
    │   ───────────────                  ──────────                       │
    │                                                                      │
    │   disk → page cache                disk → page cache                │
    │   page cache → Python bytes        page cache → socket buffer       │
    │   Python bytes → socket buffer                                      │
    │                                                                      │
    │   2 syscalls per chunk             1 syscall per chunk              │
    │   file data crosses into           file data never leaves           │
    │   user space                       the kernel                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A single sendfile() call may move fewer bytes than asked, so the body is
sent in a loop that tracks the running offset.

=============================================================================
"""

import os
import socket
import selectors
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


# Largest count Linux moves in one sendfile() call
DEFAULT_CHUNK_SIZE = 0x7FFFF000


class AbortReason(Enum):
    """Why a response stopped before it was fully written."""
    WRITE_FAILED = "write_failed"        # A header write hit a socket error
    TRANSFER_FAILED = "transfer_failed"  # sendfile() hit a socket/file error
    FILE_TRUNCATED = "file_truncated"    # File shrank below its recorded size


@dataclass
class TransferContext:
    """
    State of one body transfer.

    Attributes:
        sock: Client socket, written to by sendfile().
        fd: Read-only descriptor of the file being served.
        size: File size recorded by fstat() before headers were sent.
        sent: Body bytes transferred so far (also the file offset).
    """
    sock: socket.socket
    fd: int
    size: int
    sent: int = 0

    @property
    def remaining(self) -> int:
        return self.size - self.sent

    @property
    def complete(self) -> bool:
        return self.sent >= self.size


def write_message(sock: socket.socket, text: str) -> bool:
    """
    Write all of `text` to the socket.

    Loops on send() so a short write is completed rather than silently
    truncating the header.

    Args:
        sock: Connected client socket.
        text: Header text. Encoded as latin-1, which covers every literal
              and MIME token the responder sends.

    Returns:
        True if every byte was written. False on a socket error, a send
        that made no progress, or text that is not latin-1 (nothing is
        written in that case).
    """
    try:
        data = text.encode("latin-1")
    except UnicodeEncodeError as e:
        logger.error(f"write: cannot encode header text: {e}")
        return False

    total = 0

    while total < len(data):
        try:
            written = sock.send(data[total:])
        except OSError as e:
            logger.error(f"write: {e}")
            return False

        if written <= 0:
            logger.error(f"write: no progress after {total} of {len(data)} bytes")
            return False

        total += written

    return True


def send_file_body(
    context: TransferContext,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Optional[AbortReason]:
    """
    Copy the file to the socket with os.sendfile() until `context.size`
    bytes have been sent.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       Transfer Loop                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   while sent < size:                                                 │
    │       n = sendfile(sock, fd, offset=sent, count=remaining)          │
    │       │                                                              │
    │       ├── n > 0           sent += n, loop                            │
    │       ├── n == 0          file shrank: FILE_TRUNCATED                │
    │       ├── EAGAIN          socket has a timeout: wait, retry          │
    │       └── other error     TRANSFER_FAILED, write nothing more        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    The count never exceeds the remaining size, so a file that grows while
    it is being sent is cut at the size recorded up front.

    Args:
        context: Transfer state. `context.sent` is updated in place.
        chunk_size: Upper bound on the count passed to one sendfile() call.

    Returns:
        None when the whole body was sent, otherwise the AbortReason.
    """
    out_fd = context.sock.fileno()

    while not context.complete:
        count = min(context.remaining, chunk_size)
        try:
            sent = os.sendfile(out_fd, context.fd, context.sent, count)
        except BlockingIOError:
            # A socket with a timeout is non-blocking at the OS level
            if not _wait_writable(context.sock):
                logger.error(f"sendfile: timed out after {context.sent} of {context.size} bytes")
                return AbortReason.TRANSFER_FAILED
            continue
        except OSError as e:
            logger.error(f"sendfile: {e}")
            return AbortReason.TRANSFER_FAILED

        if sent == 0:
            logger.error(
                f"sendfile: file ended after {context.sent} of {context.size} bytes"
            )
            return AbortReason.FILE_TRUNCATED

        context.sent += sent

    return None


def _wait_writable(sock: socket.socket) -> bool:
    """Block until the socket is writable or its timeout expires."""
    with selectors.DefaultSelector() as selector:
        selector.register(sock, selectors.EVENT_WRITE)
        return bool(selector.select(sock.gettimeout()))
