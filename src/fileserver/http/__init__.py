"""
=============================================================================
HTTP MODULE
=============================================================================

Protocol-level building blocks, none of which touch the filesystem:

    request.py       Request head parsing        → HTTPRequest
    encoding.py      Percent-encoding, HTML escaping
    paths.py         Traversal-safe path normalization
    mime_types.py    Extension → Content-Type
    response.py      HTTPResponse, ResponseBuilder, ResponseWriter
    status_codes.py  HTTPStatus (200, 301, 404)

=============================================================================
"""

from .request import HTTPRequest, RequestParser, parse_request
from .encoding import percent_encode, percent_decode, html_escape, display_text
from .paths import normalize_path, split_segments
from .mime_types import get_mime_type, DEFAULT_MIME_TYPE
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ResponseWriter,
    static_file,    # 200 + file body
    listing,        # 200 + HTML listing
    redirect,       # 301
    not_found,      # 404
)
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "parse_request",

    # Encoding
    "percent_encode",
    "percent_decode",
    "html_escape",
    "display_text",

    # Paths
    "normalize_path",
    "split_segments",

    # MIME types
    "get_mime_type",
    "DEFAULT_MIME_TYPE",

    # Responses
    "HTTPResponse",
    "ResponseBuilder",
    "ResponseWriter",
    "static_file",
    "listing",
    "redirect",
    "not_found",

    # Status codes
    "HTTPStatus",
]
