"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Tuple

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fileresponder import FileServer, ResponderConfig
from fileresponder.handlers import FileResponder, ResponseResult


@pytest.fixture
def web_root(tmp_path: Path) -> Path:
    """A small web root with one file per catalog entry plus a few oddities."""
    (tmp_path / "index.html").write_bytes(b"<html><body>Hello</body></html>\n")
    (tmp_path / "site.css").write_bytes(b"body { color: red; }\n")
    (tmp_path / "app.js").write_bytes(b"console.log('hi');\n")
    (tmp_path / "photo.jpeg").write_bytes(bytes(range(256)) * 4)
    (tmp_path / "README").write_bytes(b"no extension\n")
    (tmp_path / "empty.html").write_bytes(b"")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "a.b.css").write_bytes(b"p {}\n")
    return tmp_path


def read_all(sock: socket.socket) -> bytes:
    """Read until the peer closes."""
    chunks = []
    while True:
        data = sock.recv(65536)
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks)


def run_exchange(
    file_path, responder: FileResponder = None
) -> Tuple[bytes, ResponseResult]:
    """
    Run the responder on one end of a socketpair and collect what the
    other end receives.

    The responder runs in a thread so files bigger than the socket buffer
    don't deadlock the test.
    """
    responder = responder or FileResponder()
    server_sock, client_sock = socket.socketpair()
    outcome = {}

    def target():
        try:
            outcome["result"] = responder.respond(server_sock, str(file_path))
        finally:
            server_sock.close()

    thread = threading.Thread(target=target)
    thread.start()
    try:
        data = read_all(client_sock)
    finally:
        client_sock.close()
        thread.join(timeout=10.0)

    return data, outcome["result"]


class FakeSocket:
    """
    Socket stand-in that records writes and can fail or short-write.

    Args:
        fail_on_call: 1-based send() call that raises BrokenPipeError.
        max_write: Largest number of bytes accepted per send().
    """

    def __init__(self, fail_on_call: int = None, max_write: int = None):
        self.fail_on_call = fail_on_call
        self.max_write = max_write
        self.calls = 0
        self.sent = b""

    def send(self, data: bytes) -> int:
        self.calls += 1
        if self.fail_on_call is not None and self.calls >= self.fail_on_call:
            raise BrokenPipeError(32, "Broken pipe")
        if self.max_write is not None:
            data = data[:self.max_write]
        self.sent += data
        return len(data)

    def fileno(self) -> int:
        return -1


@pytest.fixture
def exchange():
    """The run_exchange() helper, as a fixture."""
    return run_exchange


@pytest.fixture
def fake_socket():
    """Factory for FakeSocket instances."""
    return FakeSocket


@pytest.fixture
def read_response():
    """The read_all() helper, as a fixture."""
    return read_all


class RunningServer:
    """Server helper that runs in a background thread."""

    def __init__(self, server: FileServer):
        self.server = server
        self._thread: threading.Thread = None
        self.port: int = None

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")
        self.port = self.server.address[1]

    def request(self, raw: bytes) -> bytes:
        """Send raw request bytes and return the whole response."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(raw)
            return read_all(sock)

    def get(self, path: str) -> bytes:
        return self.request(f"GET {path} HTTP/1.0\r\nHost: localhost\r\n\r\n".encode())

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def running_server(web_root: Path) -> Generator[RunningServer, None, None]:
    """A live server on 127.0.0.1 with an OS-assigned port."""
    server = FileServer(ResponderConfig(
        protocol=4,
        host="127.0.0.1",
        port=0,
        web_root=str(web_root),
        log_level="WARNING",
    ))

    running = RunningServer(server)
    running.start()

    yield running

    running.stop()
