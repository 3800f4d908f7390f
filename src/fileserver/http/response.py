"""
=============================================================================
HTTP RESPONSE BUILDER AND WRITER
=============================================================================

Builds HTTP/1.1 responses and writes them onto a connection.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (in insertion order) ─────────────────────────────────┐ │
    │  │    Content-Type: text/html\r\n                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    bytes in memory, or a file streamed in chunks               │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
NO CONTENT-LENGTH
=============================================================================

Every response is followed by closing the connection, so the client learns
where the body ends from the close itself. That is why the writer adds
nothing on its own: no Content-Length, no Date, no Server, no Connection.
The headers on the wire are exactly the ones the response carries.

It also means a file can be streamed without knowing its size up front.

=============================================================================
THE FOUR RESPONSES
=============================================================================

    static_file(path, mime)   200, Content-Type: <mime>, file bytes
    listing(html)             200, Content-Type: text/html; charset=utf-8
    redirect(location)        301, Location: <location>, no body
    not_found()               404, no headers, no body

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be written.

    Attributes:
        status:    Status code (enum, carries the reason phrase)
        headers:   Ordered (name, value) pairs, written in this order
        body:      In-memory body
        body_file: File to stream as the body instead of `body`
        version:   Protocol version for the status line
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""
    body_file: Optional[Path] = None
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def get_header(self, name: str) -> Optional[str]:
        """Get the first header with this name (case-insensitive)."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    def head_bytes(self) -> bytes:
        """
        Serialize the status line, headers and blank line.

            HTTP/1.1 200 OK\\r\\n
            Content-Type: text/plain\\r\\n
            \\r\\n
        """
        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in self.headers)
        lines.append("")
        return ("\r\n".join(lines) + "\r\n").encode("utf-8")

    def to_bytes(self) -> bytes:
        """
        Serialize the whole response in memory.

        Only valid for responses without a body_file; file bodies are
        streamed by ResponseWriter.
        """
        if self.body_file is not None:
            raise ValueError("File-backed responses must be streamed")
        return self.head_bytes() + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("Content-Type", "text/plain")
            .body("hello")
            .build())

    Every method except build() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: list[tuple[str, str]] = []
        self._body: bytes = b""
        self._body_file: Optional[Path] = None

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """
        Append a header.

        Headers keep the order they were added in. Adding the same name
        twice sends it twice.
        """
        self._headers.append((name, value))
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """Set the Content-Type header."""
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set an in-memory body. Strings are encoded as UTF-8."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = body
        self._body_file = None
        return self

    def html(self, html: str) -> "ResponseBuilder":
        """Set an HTML body with Content-Type text/html; charset=utf-8."""
        return self.content_type("text/html; charset=utf-8").body(html)

    def file(self, path: Path, content_type: str) -> "ResponseBuilder":
        """
        Stream a file as the body.

        The file is not opened here. ResponseWriter opens it right before
        writing, so a file that vanishes in between fails the write
        instead of producing a half-built response object.
        """
        self._body = b""
        self._body_file = path
        return self.content_type(content_type)

    def redirect(self, location: str) -> "ResponseBuilder":
        """
        Make this a permanent (301) redirect to location.

        301 tells clients the resource lives at the new URL for good.
        For directories the only difference is the trailing slash, which
        will never change, so permanent is the right choice.
        """
        self._status = HTTPStatus.MOVED_PERMANENTLY
        return self.header("Location", location)

    def build(self) -> HTTPResponse:
        """Build the HTTPResponse."""
        return HTTPResponse(
            status=self._status,
            headers=list(self._headers),
            body=self._body,
            body_file=self._body_file,
        )


class ResponseWriter:
    """
    Writes HTTPResponse objects onto a binary stream.

    =========================================================================
    WRITE ORDER
    =========================================================================

        1. Open body_file (if any)      ← fails before anything is sent
        2. Write status line + headers + blank line
        3. Write body:
             bytes      → one write
             body_file  → read/write loop, chunk_size bytes at a time

    Step 1 comes first so that a missing or unreadable file closes the
    connection with nothing written, rather than after a "200 OK" the
    client would believe.

    Once step 2 has happened an error can only truncate the response.
    The caller closes the connection and the client sees a short body.

    =========================================================================
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.chunk_size = chunk_size

    def write(self, response: HTTPResponse, wfile: BinaryIO) -> int:
        """
        Write a complete response.

        Args:
            response: The response to send.
            wfile: Writable binary stream (socket makefile, BytesIO...).

        Returns:
            Number of body bytes written.

        Raises:
            OSError: Opening the file or writing to the stream failed.
        """
        if response.body_file is None:
            wfile.write(response.head_bytes())
            wfile.write(response.body)
            wfile.flush()
            return len(response.body)

        with open(response.body_file, "rb") as source:
            wfile.write(response.head_bytes())
            sent = self._copy(source, wfile)
        wfile.flush()
        return sent

    def _copy(self, source: BinaryIO, wfile: BinaryIO) -> int:
        """Copy source to wfile in bounded chunks."""
        sent = 0
        while True:
            chunk = source.read(self.chunk_size)
            if not chunk:
                break
            wfile.write(chunk)
            sent += len(chunk)
        logger.debug(f"Streamed {sent} bytes")
        return sent


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One function per outcome of the resolver. Handlers use these rather than
# the builder so the exact wire format lives in one place.
#
# =============================================================================

def static_file(path: Path, mime_type: str) -> HTTPResponse:
    """200 OK streaming a file, with its Content-Type."""
    return ResponseBuilder().status(HTTPStatus.OK).file(path, mime_type).build()


def listing(html: str) -> HTTPResponse:
    """200 OK carrying a rendered directory listing."""
    return ResponseBuilder().status(HTTPStatus.OK).html(html).build()


def redirect(location: str) -> HTTPResponse:
    """301 Moved Permanently to location, empty body."""
    return ResponseBuilder().redirect(location).build()


def not_found() -> HTTPResponse:
    """404 Not Found with no headers and an empty body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()
