"""
=============================================================================
HTTP/1.0 STATUS LINES
=============================================================================

The responder only ever produces two statuses:

    ┌────────────────────────────────────────────────────────────────────┐
    │  200 OK          The path is a regular file, body follows          │
    │  404 Not Found   The path is missing, unreadable, or not a         │
    │                  regular file (directory, device, socket...)       │
    └────────────────────────────────────────────────────────────────────┘

Every response is HTTP/1.0: the body ends when the connection closes, so
no Content-Length or Transfer-Encoding is required.

=============================================================================
"""

from enum import IntEnum


HTTP_VERSION = "HTTP/1.0"
CRLF = "\r\n"


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the responder.

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Get the reason phrase for this status code."""
        return _PHRASES[self]


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
}


def status_line(status: HTTPStatus) -> str:
    """
    Build a status line including its CRLF.

        >>> status_line(HTTPStatus.OK)
        'HTTP/1.0 200 OK\\r\\n'
    """
    return f"{HTTP_VERSION} {status.value} {status.phrase}{CRLF}"


# Complete header-only response for anything that is not a regular file
NOT_FOUND_RESPONSE = status_line(HTTPStatus.NOT_FOUND) + CRLF

CONTENT_TYPE_PREFIX = "Content-Type: "

# Ends the Content-Type line and the header block in one write
HEADER_TERMINATOR = CRLF + CRLF
