"""
=============================================================================
HANDLERS MODULE
=============================================================================

Filesystem-facing request handling.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST → HANDLER → RESPONSE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTPRequest ──► ResourceResolver ──► Resource                    │
    │                                            │                         │
    │                    StaticFileHandler ◄─────┘                         │
    │                         │                                            │
    │                         ├── DirectoryListingRenderer (directories)  │
    │                         ▼                                            │
    │                    HTTPResponse                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    static.py    ResourceResolver, resource types, StaticFileHandler
    listing.py   DirectoryListingRenderer

=============================================================================
"""

from .static import (
    StaticFileHandler,
    ResourceResolver,
    Resource,
    StaticFile,
    Directory,
    Redirect,
    NotFound,
)
from .listing import DirectoryListingRenderer

__all__ = [
    "StaticFileHandler",
    "ResourceResolver",
    "Resource",
    "StaticFile",
    "Directory",
    "Redirect",
    "NotFound",
    "DirectoryListingRenderer",
]
