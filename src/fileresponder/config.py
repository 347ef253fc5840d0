"""
=============================================================================
RESPONDER CONFIGURATION
=============================================================================

Centralized configuration for the file responder and the small server
that wraps it.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── fileresponder 4 8080 ./www                                │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_PORT=3000 HTTP_WEB_ROOT=./www python -m fileresponder│
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The MIME catalog lives here as plain data. Extending the set of served
types is a matter of passing a bigger dict, not editing comparisons.

=============================================================================
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from .http.mime_types import (
    DEFAULT_CONTENT_TYPES,
    DEFAULT_MIME_TYPE,
    validate_content_types,
)


# Address families accepted on the command line, as in "server 4 8080 www"
PROTOCOLS = (4, 6)


@dataclass
class ResponderConfig:
    """
    Configuration for the file responder.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - protocol, host, port, backlog, buffer_size, timeout

    REQUEST SETTINGS
    - web_root, max_request_size

    RESPONSE SETTINGS
    - content_types, default_content_type, send_content_length

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    protocol: int = 4
    """
    IP version to listen on.
    - 4 - AF_INET
    - 6 - AF_INET6
    """

    host: Optional[str] = None
    """
    The address to bind to.
    None = every interface of the chosen family ("0.0.0.0" or "::").
    """

    port: int = 8080
    """
    The port number to listen on. 0 lets the OS pick one (tests).
    """

    backlog: int = 128
    """
    Maximum number of queued connections.
    """

    buffer_size: int = 2048
    """
    Size of each recv() when reading the request head.
    """

    timeout: Optional[float] = None
    """
    Socket timeout in seconds for client connections.
    None = fully blocking sockets. A stalled client then blocks its
    connection thread until the peer goes away.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    web_root: str = "."
    """
    Directory that request paths are joined onto.
    """

    max_request_size: int = 2000
    """
    Maximum size of a request head in bytes.
    """

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    content_types: dict = field(default_factory=lambda: dict(DEFAULT_CONTENT_TYPES))
    """
    Extension (with the leading dot) to MIME token. Matched exactly.
    """

    default_content_type: str = DEFAULT_MIME_TYPE
    """
    MIME token used when the extension is missing or unknown.
    """

    send_content_length: bool = False
    """
    Emit a Content-Length header on 200 responses.
    HTTP/1.0 clients read until close, so the default response omits it.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    server_name: str = "fileresponder/1.0"
    """
    Name used in the startup log line.
    """

    @property
    def bind_host(self) -> str:
        """Address actually passed to bind()."""
        if self.host:
            return self.host
        return "::" if self.protocol == 6 else "0.0.0.0"

    @classmethod
    def from_env(cls) -> "ResponderConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_PROTOCOL   IP version, 4 or 6 (default: 4)
        HTTP_HOST       Bind address (default: all interfaces)
        HTTP_PORT       Server port (default: 8080)
        HTTP_WEB_ROOT   Directory to serve (default: .)
        HTTP_TIMEOUT    Client socket timeout in seconds (default: none)
        HTTP_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        return cls(
            protocol=int(os.getenv("HTTP_PROTOCOL", "4")),
            host=os.getenv("HTTP_HOST") or None,
            port=int(os.getenv("HTTP_PORT", "8080")),
            web_root=os.getenv("HTTP_WEB_ROOT", "."),
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails before the first
        connection is accepted.
        """
        if self.protocol not in PROTOCOLS:
            raise ValueError(f"Invalid protocol: {self.protocol}. Must be 4 or 6.")

        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if not os.path.isdir(self.web_root):
            raise ValueError(f"Web root is not a directory: {self.web_root}")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_request_size < 16:
            raise ValueError("max_request_size must be >= 16")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        validate_content_types(self.content_types, self.default_content_type)
