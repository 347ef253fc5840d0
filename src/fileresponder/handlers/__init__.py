"""
=============================================================================
HANDLERS MODULE
=============================================================================

FileResponder / respond()
   - 200 + Content-Type + sendfile() body for regular files
   - 404 for anything missing or not a regular file
   - Returns a ResponseResult instead of raising

=============================================================================
"""

from .respond import (
    Completion,
    FileResponder,
    Outcome,
    ResponseResult,
    respond,
)

__all__ = [
    "Completion",
    "FileResponder",
    "Outcome",
    "ResponseResult",
    "respond",
]
