"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads the head of an HTTP/1.1 request from a connection and turns it into
a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    GET /docs/readme.txt?raw=1 HTTP/1.1\r\n                     │ │
    │  │    ─┬─ ──────────┬─────────── ───┬────                         │ │
    │  │     │            │               │                              │ │
    │  │   Method       Target          Version                          │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: localhost:8080\r\n                                    │ │
    │  │    User-Agent: curl/8.5.0\r\n                                  │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Request bodies are not supported, so parsing stops at the end of the
header section and whatever follows is never read.

=============================================================================
PARSING RULES
=============================================================================

1. The request line must be EXACTLY three tokens separated by single
   spaces. "GET /" or "GET  / HTTP/1.1" (two spaces) are both rejected.

2. Header lines are read until either:
   - a blank line (the normal end of the head), or
   - a line without ":" (treated as the end too, not as an error)

3. Each header is split at the FIRST colon, so "Host: a:80" keeps the
   port in the value. Name and value are stripped of surrounding
   whitespace.

4. Header names are stored exactly as sent. A repeated header replaces
   the earlier value.

5. Lines may end with CRLF or a bare LF.

The parser does not judge the method, target or version. Deciding what
can be served is the resolver's job (handlers/static.py).

=============================================================================
"""

import io
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Optional

from ..errors import MalformedRequestLine, ProtocolError


# Default limits, overridable through ServerConfig
MAX_LINE_LENGTH = 8192
MAX_HEADERS = 100


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request head.

    Created once per connection and never modified afterwards.

    Attributes:
        method:         Request method exactly as sent ("GET")
        target:         Raw request target, query string included
                        ("/docs/a%20b.txt?raw=1")
        version:        Protocol version string ("HTTP/1.1")
        headers:        Header name → value, names as received
        client_address: (ip, port) of the peer, for logging
    """

    method: str
    target: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    client_address: tuple[str, int] = ("", 0)

    @property
    def path(self) -> str:
        """
        The target without its query string.

        "/search?q=x"  →  "/search"
        """
        return self.target.split("?", 1)[0]

    @property
    def query(self) -> str:
        """
        The raw query string ("" when there is none).

        Accepted syntactically but never used to pick a resource.
        """
        _, _, query = self.target.partition("?")
        return query

    def get_header(self, name: str, default: str = "") -> str:
        """
        Look up a header without caring about the case of its name.

        Headers are stored as received, so this scans them. Requests
        carry a handful of headers, which keeps this cheap.
        """
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default


class RequestParser:
    """
    Parses a request head from a binary stream.

    =========================================================================
    USAGE
    =========================================================================

        parser = RequestParser()

        # From a socket
        with sock.makefile("rb") as rfile:
            request = parser.parse(rfile, client_address=addr)

        # From bytes (tests)
        request = parse_request(b"GET / HTTP/1.1\\r\\n\\r\\n")

    =========================================================================
    LIMITS
    =========================================================================

    A line longer than max_line_length bytes, or more than max_headers
    header lines, raises ProtocolError. Without these a client could make
    the server buffer an endless line.

    =========================================================================
    """

    def __init__(
        self,
        max_line_length: int = MAX_LINE_LENGTH,
        max_headers: int = MAX_HEADERS,
    ):
        self.max_line_length = max_line_length
        self.max_headers = max_headers

    def parse(
        self,
        stream: BinaryIO,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Read and parse one request head.

        Args:
            stream: Binary stream positioned at the start of a request.
            client_address: Peer address to record on the request.

        Returns:
            The parsed HTTPRequest.

        Raises:
            MalformedRequestLine: Missing or malformed request line.
            ProtocolError: Line too long, too many headers, or bytes that
                           are not valid UTF-8.
            OSError: The underlying connection failed (including timeouts).
        """
        # ─────────────────────────────────────────────────────────────────
        # REQUEST LINE
        # ─────────────────────────────────────────────────────────────────
        line = self._read_line(stream)
        if line is None:
            raise MalformedRequestLine("")

        method, target, version = self._parse_request_line(line)

        # ─────────────────────────────────────────────────────────────────
        # HEADERS
        # ─────────────────────────────────────────────────────────────────
        headers: Dict[str, str] = {}
        while True:
            line = self._read_line(stream)
            if not line:
                break  # Blank line or end of stream

            name, sep, value = line.partition(":")
            if not sep:
                break  # No colon: end of headers

            if len(headers) >= self.max_headers:
                raise ProtocolError(f"Too many headers (limit {self.max_headers})")

            headers[name.strip()] = value.strip()

        return HTTPRequest(
            method=method,
            target=target,
            version=version,
            headers=headers,
            client_address=client_address,
        )

    def _read_line(self, stream: BinaryIO) -> Optional[str]:
        """
        Read one line and strip its terminator.

        Returns:
            The decoded line, or None at end of stream.
        """
        # +2 leaves room for the CRLF of a line that is exactly at the limit
        raw = stream.readline(self.max_line_length + 2)
        if not raw:
            return None

        if raw.endswith(b"\r\n"):
            raw = raw[:-2]
        elif raw.endswith(b"\n"):
            raw = raw[:-1]

        if len(raw) > self.max_line_length:
            raise ProtocolError(
                f"Line exceeds {self.max_line_length} bytes"
            )

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Request head is not valid UTF-8: {e}") from e

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD SP TARGET SP VERSION" into its three parts.

        Raises:
            MalformedRequestLine: If there are not exactly three tokens.
        """
        parts = line.split(" ")
        if len(parts) != 3:
            raise MalformedRequestLine(line)
        method, target, version = parts
        return method, target, version


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """
    Parse a request head held in memory.

    Args:
        data: Raw request bytes.
        client_address: Client's (ip, port) tuple.

    Returns:
        Parsed HTTPRequest object.
    """
    return RequestParser().parse(io.BytesIO(data), client_address)
