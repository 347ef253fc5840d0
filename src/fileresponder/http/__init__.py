"""
=============================================================================
HTTP MODULE
=============================================================================

The protocol side of the responder:

- request.py       Request line → request target → file path
- status_codes.py  HTTP/1.0 status lines and header literals
- mime_types.py    File extension → Content-Type token

=============================================================================
"""

from .request import HTTPParseError, parse_request_path, resolve_file_path
from .status_codes import HTTPStatus, NOT_FOUND_RESPONSE, status_line
from .mime_types import (
    DEFAULT_CONTENT_TYPES,
    DEFAULT_MIME_TYPE,
    get_extension,
    resolve_content_type,
    validate_content_types,
    write_content_type,
)

__all__ = [
    # Request parsing
    "HTTPParseError",
    "parse_request_path",
    "resolve_file_path",

    # Status lines
    "HTTPStatus",
    "NOT_FOUND_RESPONSE",
    "status_line",

    # MIME types
    "DEFAULT_CONTENT_TYPES",
    "DEFAULT_MIME_TYPE",
    "get_extension",
    "resolve_content_type",
    "validate_content_types",
    "write_content_type",
]
