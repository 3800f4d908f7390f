"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server puts on the wire, with their reason phrases.

    HTTP/1.1 301 Moved Permanently
             ─── ─────────────────
              │          │
              │          └── Reason phrase (HTTPStatus.phrase)
              └───────────── Status code   (int(HTTPStatus))

Only three outcomes exist for a request that can be serviced:

    200 OK                  file or directory listing
    301 Moved Permanently   directory requested without a trailing slash
    404 Not Found           nothing at that path

Malformed requests get no status line at all; the connection is closed.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    MOVED_PERMANENTLY = 301
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Reason phrase that follows the code in the status line."""
        return _STATUS_PHRASES[self]

    @property
    def is_redirect(self) -> bool:
        """Check if this is a 3xx (redirection) status code."""
        return 300 <= self < 400

    @property
    def is_error(self) -> bool:
        """Check if this is an error status code (4xx or 5xx)."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.NOT_FOUND: "Not Found",
}
