"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Decides what a request refers to on disk and turns that into a response.

=============================================================================
RESOLUTION PIPELINE
=============================================================================

    GET /docs/../img/my%20logo.png?v=2 HTTP/1.1
                     │
                     ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 1. VALIDATE      method == GET, version == HTTP/1.1,               │
    │                  target starts with "/"      else ProtocolError    │
    │ 2. STRIP QUERY   "/docs/../img/my%20logo.png"                      │
    │ 3. DECODE        "/docs/../img/my logo.png"  else DecodeError      │
    │ 4. NORMALIZE     "img/my logo.png"                                 │
    │ 5. CLASSIFY      look at <root>/img/my logo.png                    │
    └─────────────────────────────────────────────────────────────────────┘
                     │
                     ▼
         StaticFile | Directory | Redirect | NotFound

=============================================================================
CLASSIFICATION ORDER
=============================================================================

Files always win over directories, and index.html over index.htm:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  <path>                is a file?  → StaticFile(<path>)            │
    │  <path>/index.html     is a file?  → StaticFile(index.html)        │
    │  <path>/index.htm      is a file?  → StaticFile(index.htm)         │
    │  <path>                is a dir?                                   │
    │       request path ends in "/"     → Directory(<path>)             │
    │       otherwise                    → Redirect(<request path>/)     │
    │  (nothing)                         → NotFound                      │
    └─────────────────────────────────────────────────────────────────────┘

Why redirect instead of listing "/photos" directly? Listing links are
relative. On the page "/photos" a link "beach.png" resolves to
"/beach.png"; on "/photos/" it resolves to "/photos/beach.png".

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /../../etc/passwd HTTP/1.1

The normalizer absorbs every ".." that would climb above the root, so
this names <root>/etc/passwd, which normally does not exist → 404.

Symlinks inside the root can still point anywhere. With
follow_symlinks=False every candidate is fully resolved and must stay
inside the root:

    full_path.resolve().relative_to(root_dir)   # raises if outside

=============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..errors import ProtocolError
from ..http.encoding import percent_decode
from ..http.mime_types import get_mime_type
from ..http.paths import split_segments
from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    static_file, listing, redirect, not_found,
)
from .listing import DirectoryListingRenderer


logger = logging.getLogger(__name__)


def _is_file(path: Path) -> bool:
    """Path.is_file(), but any OSError (e.g. ENAMETOOLONG) means no."""
    try:
        return path.is_file()
    except OSError:
        return False


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


# =============================================================================
# RESOURCES
# =============================================================================
#
# The outcome of resolving one request. Built fresh per request and
# consumed immediately by the handler.
#
# =============================================================================

@dataclass(frozen=True)
class StaticFile:
    """A regular file to send back."""
    path: Path
    mime_type: str


@dataclass(frozen=True)
class Directory:
    """A directory without an index file, to be listed."""
    path: Path
    display_name: str


@dataclass(frozen=True)
class Redirect:
    """A directory requested without its trailing slash."""
    location: str


@dataclass(frozen=True)
class NotFound:
    """Nothing exists at the requested path."""


Resource = Union[StaticFile, Directory, Redirect, NotFound]


class ResourceResolver:
    """
    Maps requests onto files and directories below a root directory.

    The root is fixed at construction and every lookup is made relative to
    it. Nothing here depends on the process working directory.

    Usage:
        resolver = ResourceResolver("/var/www")
        resource = resolver.resolve(request)
    """

    SUPPORTED_METHOD = "GET"
    SUPPORTED_VERSION = "HTTP/1.1"
    INDEX_FILES = ("index.html", "index.htm")

    def __init__(self, root_dir: Union[str, Path], follow_symlinks: bool = True):
        """
        Args:
            root_dir: Directory to serve. Resolved to an absolute path.
            follow_symlinks: Serve symlinks that point outside root_dir.
                             When False such targets are reported as
                             missing.

        Raises:
            ValueError: If root_dir is not an existing directory.
        """
        self.root_dir = Path(root_dir).resolve()
        self.follow_symlinks = follow_symlinks

        if not self.root_dir.is_dir():
            raise ValueError(f"Root directory does not exist: {root_dir}")

    def resolve(self, request: HTTPRequest) -> Resource:
        """
        Resolve a parsed request to a Resource.

        Raises:
            ProtocolError: Unsupported method or version, or a target that
                           does not start with "/".
            DecodeError: Malformed percent-encoding in the path.
        """
        self.validate(request)

        request_path = request.path
        segments = split_segments(percent_decode(request_path))
        return self.classify(request_path, segments, request.query)

    def validate(self, request: HTTPRequest) -> None:
        """
        Reject anything this server does not serve.

        Raises:
            ProtocolError: With a message naming the offending part.
        """
        if request.method != self.SUPPORTED_METHOD:
            raise ProtocolError(f"Unsupported HTTP method: {request.method}")
        if request.version != self.SUPPORTED_VERSION:
            raise ProtocolError(f"Unsupported HTTP version: {request.version}")
        if not request.target.startswith("/"):
            raise ProtocolError(f"Request target must be absolute: {request.target}")

    def classify(
        self,
        request_path: str,
        segments: list[str],
        query: str = "",
    ) -> Resource:
        """
        Work out what exists on disk for a normalized path.

        Args:
            request_path: The path as sent by the client, query removed,
                          still percent-encoded. Used for the trailing
                          slash check and the redirect location.
            segments: Normalized path segments (see http/paths.py). An
                      empty list is the root itself.
            query: Query string to carry over on a redirect.

        Returns:
            StaticFile, Directory, Redirect or NotFound.
        """
        base = self.root_dir.joinpath(*segments)

        # ─────────────────────────────────────────────────────────────────
        # FILES FIRST: the path itself, then its index files
        # ─────────────────────────────────────────────────────────────────
        candidates = [base] + [base / name for name in self.INDEX_FILES]
        for candidate in candidates:
            if _is_file(candidate) and self._inside_root(candidate):
                return StaticFile(candidate, get_mime_type(candidate.name))

        # ─────────────────────────────────────────────────────────────────
        # THEN DIRECTORIES
        # ─────────────────────────────────────────────────────────────────
        if _is_dir(base) and self._inside_root(base):
            if not request_path.endswith("/"):
                location = request_path + "/"
                if query:
                    location += "?" + query
                return Redirect(location)

            display_name = "/" + "".join(f"{s}/" for s in segments)
            return Directory(base, display_name)

        return NotFound()

    def _inside_root(self, path: Path) -> bool:
        """
        Check that path, with symlinks expanded, stays below the root.

        Always true when symlinks may be followed anywhere.
        """
        if self.follow_symlinks:
            return True
        try:
            path.resolve().relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Symlink escapes root, refusing: {path}")
            return False
        return True


class StaticFileHandler:
    """
    Request → response for a static file tree.

    =========================================================================
    FLOW
    =========================================================================

        handle(request)
            │
            ├──► resolver.resolve(request)     → Resource
            │
            └──► respond(resource)
                    StaticFile → 200 + file stream
                    Directory  → 200 + rendered listing
                    Redirect   → 301 + Location
                    NotFound   → 404

    =========================================================================
    USAGE
    =========================================================================

        handler = StaticFileHandler("/var/www")
        response = handler.handle(request)
        ResponseWriter().write(response, wfile)

    =========================================================================
    """

    def __init__(
        self,
        root_dir: Union[str, Path],
        follow_symlinks: bool = True,
        sort_listings: bool = True,
    ):
        self.resolver = ResourceResolver(root_dir, follow_symlinks=follow_symlinks)
        self.renderer = DirectoryListingRenderer(sort_entries=sort_listings)

    @property
    def root_dir(self) -> Path:
        """Absolute root directory being served."""
        return self.resolver.root_dir

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Handle one request.

        Raises:
            ProtocolError: Request cannot be serviced.
            DecodeError: Malformed percent-encoding.
            OSError: Directory listing failed.
        """
        resource = self.resolver.resolve(request)
        return self.respond(resource)

    def respond(self, resource: Resource) -> HTTPResponse:
        """Build the response for an already resolved resource."""
        if isinstance(resource, StaticFile):
            return static_file(resource.path, resource.mime_type)
        if isinstance(resource, Directory):
            html = self.renderer.render(resource.path, resource.display_name)
            return listing(html)
        if isinstance(resource, Redirect):
            return redirect(resource.location)
        return not_found()
