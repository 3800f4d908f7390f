"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted TCP socket for exactly one request/response exchange.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONNECTION LIFECYCLE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   NEW ──► READING ──► WRITING ──► CLOSED                            │
    │              │            │                                          │
    │              └────────────┴──► CLOSED   (any error, any timeout)    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no keep-alive: the server reads one request head, writes one
response and closes. Closing is also how the client knows the body has
ended, since no Content-Length is sent.

=============================================================================
TIMEOUTS
=============================================================================

The socket gets a timeout as soon as the connection is created. It bounds
every single recv() and send():

    - a client that connects and never sends a request line
    - a client that stops reading halfway through a large file

Both surface as TimeoutError (an OSError) in the worker, which closes the
connection. The rest of the server is unaffected.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Where a connection is in its single exchange."""
    NEW = "new"              # Just accepted
    READING = "reading"      # Reading the request head
    WRITING = "writing"      # Sending the response
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short random identifier used in log lines.
        timeout: Per-operation socket timeout in seconds (None = blocking).
        state: Current ConnectionState.
        created_at: When the connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    timeout: Optional[float] = 30.0
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    _rfile: Optional[BinaryIO] = field(default=None, repr=False)
    _wfile: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    @property
    def rfile(self) -> BinaryIO:
        """
        Buffered reader over the socket.

        Buffering lets the parser call readline() without one recv()
        per byte.
        """
        if self._rfile is None:
            self._rfile = self.socket.makefile("rb")
        self.state = ConnectionState.READING
        return self._rfile

    @property
    def wfile(self) -> BinaryIO:
        """Buffered writer over the socket; flushed by ResponseWriter."""
        if self._wfile is None:
            self._wfile = self.socket.makefile("wb")
        self.state = ConnectionState.WRITING
        return self._wfile

    def close(self):
        """
        Close the connection.

        ┌─────────────────────────────────────────────────────────────────┐
        │ 1. Close the file wrappers (flushes pending response bytes)     │
        │ 2. shutdown(SHUT_WR)  → FIN, the client sees end of body        │
        │ 3. close()            → release the file descriptor             │
        └─────────────────────────────────────────────────────────────────┘

        Safe to call more than once. Errors are expected here (the peer may
        already be gone) and are logged at DEBUG only.
        """
        if self.state == ConnectionState.CLOSED:
            return

        for stream in (self._wfile, self._rfile):
            if stream is None:
                continue
            try:
                stream.close()
            except OSError as e:
                logger.debug(f"[{self.id}] Error closing stream: {e}")

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER: For use with 'with' statement
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
