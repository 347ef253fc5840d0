"""
=============================================================================
REQUEST LINE PARSING
=============================================================================

Turns the head of an HTTP request into the filesystem path the responder
serves.

=============================================================================
WHAT WE READ
=============================================================================

Only the request line matters. Headers are read off the socket but ignored:

    GET /css/site.css HTTP/1.0\r\n        ← method, target, version
    Host: localhost:8080\r\n              ← ignored
    \r\n

    ┌────────────────────────────────────────────────────────────────────┐
    │  target            web root     file path                          │
    ├────────────────────────────────────────────────────────────────────┤
    │  /index.html       www          www/index.html                     │
    │  /a/b.js?v=3       www          www/a/b.js                         │
    │  /../etc/passwd    www          (refused → 404)                    │
    └────────────────────────────────────────────────────────────────────┘

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The responder opens whatever path it is given, so this is the only place
".." can be stopped. Any ".." path segment is refused outright; nothing is
resolved against the real filesystem.

=============================================================================
"""

from typing import Optional


SUPPORTED_METHOD = "GET"
PARENT_SEGMENT = ".."


class HTTPParseError(Exception):
    """
    Raised when the request line can't be used.

    Carries the HTTP status code that describes the problem, mainly for
    logging. The server drops such connections without a response.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


def parse_request_path(data: bytes) -> str:
    """
    Extract the request target from a raw request head.

    Args:
        data: Raw bytes up to and including the blank line.

    Returns:
        The request target, e.g. "/index.html".

    Raises:
        HTTPParseError: If the request line is malformed or not a GET.
    """
    line_end = data.find(b"\r\n")
    if line_end == -1:
        raise HTTPParseError("Incomplete request: no request line")

    try:
        request_line = data[:line_end].decode("ascii")
    except UnicodeDecodeError:
        raise HTTPParseError("Request line is not ASCII")

    parts = request_line.split(" ")
    if len(parts) != 3:
        raise HTTPParseError(f"Malformed request line: {request_line!r}")

    method, target, version = parts

    if method != SUPPORTED_METHOD:
        raise HTTPParseError(f"Unsupported method: {method}", status_code=405)

    if not version.startswith("HTTP/"):
        raise HTTPParseError(f"Invalid HTTP version: {version}", status_code=505)

    if not target:
        raise HTTPParseError("Empty request target")

    return target


def resolve_file_path(web_root: str, request_path: str) -> Optional[str]:
    """
    Join a request target onto the web root.

    Args:
        web_root: Directory being served, used as-is.
        request_path: Target from parse_request_path().

    Returns:
        The file path to respond with, or None if the target must not be
        served (not absolute, or contains a ".." segment).
    """
    path = request_path.split("?", 1)[0]

    if not path.startswith("/"):
        return None

    if PARENT_SEGMENT in path.split("/"):
        return None

    return web_root.rstrip("/") + path
