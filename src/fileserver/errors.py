"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every way a single request can fail, as exception classes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        FAILURE KINDS                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   FileServerError                                                   │
    │   ├── ProtocolError          bad method / version / target          │
    │   │   └── MalformedRequestLine   not "METHOD TARGET VERSION"        │
    │   └── DecodeError            bad percent-encoding                   │
    │       ├── MalformedEncoding      "%" without two hex digits         │
    │       └── UnsupportedCharacter   non-ASCII in ASCII-only mode       │
    │                                                                      │
    │   OSError (built-in)         filesystem or socket failure           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

None of these ever reach the accept loop. The per-connection handler in
server.py catches them, logs the cause and closes that one connection.
Protocol and decode errors get no response at all; an OSError may leave a
partially written response behind (headers cannot be taken back).

=============================================================================
"""


class FileServerError(Exception):
    """Base class for request pipeline failures."""


class ProtocolError(FileServerError):
    """
    The request cannot be serviced.

    Raised for anything other than ``GET`` over ``HTTP/1.1``, for targets
    that do not start with ``/``, and for request lines or headers that
    break the parser's limits.
    """


class MalformedRequestLine(ProtocolError):
    """The request line is missing or is not exactly three tokens."""

    def __init__(self, line: str):
        super().__init__(f"Invalid request line: {line!r}")
        self.line = line


class DecodeError(FileServerError):
    """Percent-encoding could not be processed."""


class MalformedEncoding(DecodeError):
    """A ``%`` escape is truncated or not followed by two hex digits."""

    def __init__(self, text: str, position: int):
        super().__init__(
            f"Malformed percent-encoding at offset {position}: {text!r}"
        )
        self.text = text
        self.position = position


class UnsupportedCharacter(DecodeError):
    """A non-ASCII character was given to the ASCII-only encoder."""

    def __init__(self, char: str):
        super().__init__(f"Cannot percent-encode non-ASCII character {char!r}")
        self.char = char
