"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fileserver import FileServer, ServerConfig


INDEX_HTML = b"<!DOCTYPE html><title>home</title><p>hello</p>\n"


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """
    A small document root.

        www/
        ├── index.html
        ├── notes.txt
        ├── data.json
        ├── blob                  (no extension)
        ├── sub/
        │   ├── a.txt
        │   ├── B.txt
        │   ├── my file.txt
        │   ├── a&b.txt
        │   └── inner/
        └── site/
            └── index.htm
    """
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "notes.txt").write_text("plain notes\n")
    (root / "data.json").write_text('{"ok": true}')
    (root / "blob").write_bytes(bytes(range(256)))

    sub = root / "sub"
    sub.mkdir()
    (sub / "a.txt").write_text("a")
    (sub / "B.txt").write_text("b")
    (sub / "my file.txt").write_text("spaced")
    (sub / "a&b.txt").write_text("amp")
    (sub / "inner").mkdir()

    site = root / "site"
    site.mkdir()
    (site / "index.htm").write_text("<p>site</p>")

    return root.resolve()


@pytest.fixture
def config(docroot: Path) -> ServerConfig:
    """Test server configuration serving docroot."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        root_dir=str(docroot),
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class RunningServer:
    """FileServer running in a background thread."""

    def __init__(self, server: FileServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server and wait for its thread."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        return send_raw(self.port, raw, timeout=timeout)

    def get(self, target: str) -> bytes:
        """Send a minimal GET request for target."""
        return self.request(
            f"GET {target} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode("utf-8")
        )


def send_raw(port: int, raw: bytes, timeout: float = 5.0) -> bytes:
    """Connect to 127.0.0.1:port, send raw, return everything received."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        s.sendall(raw)
        chunks = []
        while True:
            chunk = s.recv(65536)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes) -> tuple[str, dict, bytes]:
    """Split a raw response into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[RunningServer, None, None]:
    """A started FileServer serving docroot on a free port."""
    srv = RunningServer(FileServer(config, install_signals=False))
    srv.start()

    yield srv

    srv.stop()
