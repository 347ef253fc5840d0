"""
=============================================================================
FILERESPONDER - Minimal HTTP/1.0 File Server
=============================================================================

Answers one GET per connection with either a file or a 404:

    HTTP/1.0 200 OK\r\n
    Content-Type: text/html\r\n
    \r\n
    <file bytes, streamed with sendfile()>

    HTTP/1.0 404 Not Found\r\n
    \r\n

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    fileresponder/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m fileresponder)
    ├── server.py            # FileServer: accept → parse → respond → close
    ├── config.py            # ResponderConfig dataclass
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop
    │   ├── connection.py    # One client socket
    │   └── transfer.py      # write_message(), sendfile() loop
    ├── http/
    │   ├── request.py       # Request line parsing, web root joining
    │   ├── status_codes.py  # Status lines and header literals
    │   └── mime_types.py    # Extension → MIME token
    └── handlers/
        └── respond.py       # FileResponder

=============================================================================
QUICK START
=============================================================================

    from fileresponder import FileServer, ResponderConfig

    FileServer(ResponderConfig(port=8080, web_root="www")).run()

Or reuse the responder on a socket you accepted yourself:

    from fileresponder import respond

    result = respond(client_socket, "www/index.html")
    client_socket.close()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ResponderConfig
from .handlers import FileResponder, ResponseResult, respond
from .server import FileServer

__all__ = [
    "FileServer",
    "FileResponder",
    "ResponderConfig",
    "ResponseResult",
    "respond",
    "__version__",
]
