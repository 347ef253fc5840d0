"""
=============================================================================
CONTENT-TYPE RESOLUTION
=============================================================================

Maps a file path to the MIME token sent in the Content-Type header.

=============================================================================
HOW THE EXTENSION IS FOUND
=============================================================================

Only the text after the LAST "." of the whole path counts:

    ┌────────────────────────────────────────────────────────────────────┐
    │  path                         extension        MIME token          │
    ├────────────────────────────────────────────────────────────────────┤
    │  www/index.html               .html            text/html           │
    │  www/a.b.css                  .css             text/css            │
    │  www/photo.JPEG               .JPEG            application/octet-  │
    │                                                stream (no match)   │
    │  www/v1.2/README              .2/README        application/octet-  │
    │                                                stream (no match)   │
    │  www/Makefile                 (none)           application/octet-  │
    │                                                stream              │
    └────────────────────────────────────────────────────────────────────┘

Matching is exact and case-sensitive. There is no multi-segment lookup
(".tar.gz" is just ".gz").

=============================================================================
"""

import logging
import socket
from typing import Mapping, Optional

from ..core.transfer import write_message


logger = logging.getLogger(__name__)


EXTENSION_DELIMITER = "."

# =============================================================================
# MIME TYPE CATALOG
# =============================================================================
#
# Keys keep the leading dot so they compare directly against get_extension().
# Pass a different mapping to resolve_content_type() to extend it.
#
# =============================================================================

DEFAULT_CONTENT_TYPES = {
    ".html": "text/html",
    ".jpeg": "image/jpeg",
    ".js": "text/javascript",
    ".css": "text/css",
}

# Unknown or missing extension: "treat as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_extension(path: str) -> Optional[str]:
    """
    Return the substring from the last "." to the end of `path`.

    Examples:
        >>> get_extension("www/a.b.css")
        '.css'

        >>> get_extension("www/Makefile") is None
        True
    """
    index = path.rfind(EXTENSION_DELIMITER)
    if index == -1:
        return None
    return path[index:]


def resolve_content_type(
    path: str,
    content_types: Optional[Mapping[str, str]] = None,
    default: Optional[str] = None,
) -> str:
    """
    Get the MIME token for a file path.

    Pure lookup, no filesystem access.

    Args:
        path: File path as given to the responder.
        content_types: Extension catalog. Uses DEFAULT_CONTENT_TYPES if None.
        default: Token for unmatched paths. Uses DEFAULT_MIME_TYPE if None.

    Returns:
        The MIME token.
    """
    if content_types is None:
        content_types = DEFAULT_CONTENT_TYPES
    if default is None:
        default = DEFAULT_MIME_TYPE

    extension = get_extension(path)
    if extension is None:
        return default
    return content_types.get(extension, default)


def validate_content_types(
    content_types: Mapping[str, str],
    default: str = DEFAULT_MIME_TYPE,
) -> None:
    """
    Check a catalog before any of it reaches the wire.

    Raises:
        ValueError: An extension lacks its leading ".", or a token is not
            latin-1 or contains a line break.
    """
    for extension, mime_type in content_types.items():
        if not extension.startswith(EXTENSION_DELIMITER):
            raise ValueError(f"Content type extension must start with '.': {extension!r}")
        check_header_value(mime_type)

    check_header_value(default)


def check_header_value(value: str) -> None:
    """Header values are written as latin-1 and must stay on one line."""
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        raise ValueError(f"Content type is not latin-1: {value!r}")
    if "\r" in value or "\n" in value:
        raise ValueError(f"Content type contains a line break: {value!r}")


def write_content_type(
    sock: socket.socket,
    path: str,
    content_types: Optional[Mapping[str, str]] = None,
    default: Optional[str] = None,
) -> bool:
    """
    Write the MIME token for `path` to the socket.

    Returns:
        False if the write failed, True otherwise.
    """
    mime_type = resolve_content_type(path, content_types, default)
    logger.debug(f"Content-Type for {path}: {mime_type}")
    return write_message(sock, mime_type)
