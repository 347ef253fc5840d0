"""
=============================================================================
CORE MODULE - Sockets, Connections and File Transfer
=============================================================================

Low-level building blocks of the file server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer     bind/listen/accept loop                          │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection       one client socket, one request head              │
    │        │                                                             │
    │        ▼                                                             │
    │   transfer         write_message() for headers,                     │
    │                    send_file_body() for the sendfile() loop         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .transfer import (
    AbortReason,
    TransferContext,
    send_file_body,
    write_message,
)

__all__ = [
    "SocketServer",      # Listening socket and accept loop
    "Connection",        # Wrapper for one client socket
    "ConnectionState",   # Enum for connection lifecycle states
    "AbortReason",       # Why a response stopped early
    "TransferContext",   # fd/size/offset of one body transfer
    "send_file_body",    # sendfile() loop
    "write_message",     # Complete write of a header string
]
