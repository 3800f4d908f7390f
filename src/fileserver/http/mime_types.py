"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions to the Content-Type sent with static files.

MIME types tell the client how to interpret the response body. They follow
the format type/subtype:

    ┌────────────────────────────────────────────────────────────────────┐
    │                    SUPPORTED MIME TYPES                            │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  html, htm     → text/html                                         │
    │  css           → text/css                                          │
    │  js            → text/javascript                                   │
    │  txt           → text/plain                                        │
    │  json          → application/json                                  │
    │  jpg, jpeg     → image/jpeg                                        │
    │  png           → image/png                                         │
    │                                                                     │
    │  anything else → application/octet-stream                          │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

=============================================================================
EXTENSION RULES
=============================================================================

The extension is everything after the LAST dot of the file name:

    "report.2024.json"  → "json"   → application/json
    "noext"             → (none)   → application/octet-stream
    "archive."          → ""       → application/octet-stream
    "PHOTO.JPG"         → "JPG"    → application/octet-stream

Matching is case-sensitive on purpose; the table is small and fixed, so
"JPG" is simply unknown rather than guessed at.

=============================================================================
"""

from pathlib import Path, PurePosixPath
from typing import Optional, Union


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Extension (without the dot) → MIME type.
#
MIME_TYPES = {
    # Text
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "text/javascript",       # Modern standard (was application/javascript)
    "txt": "text/plain",
    "json": "application/json",    # Data, not prose, hence application/

    # Images
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
}

# "I don't know what this is, treat it as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_extension(filename: Union[str, Path]) -> Optional[str]:
    """
    Get the extension of a file name (text after the last dot).

    Only the final path component is considered, so dots in directory
    names are ignored.

    Returns:
        The extension without the dot, or None if the name has no dot.
    """
    name = PurePosixPath(str(filename)).name
    base, dot, extension = name.rpartition(".")
    if not dot:
        return None
    return extension


def get_mime_type(filename: Union[str, Path]) -> str:
    """
    Get the MIME type for a file based on its extension.

    Never fails: unknown or missing extensions map to
    application/octet-stream.

    Examples:
        >>> get_mime_type("a.b.json")
        'application/json'

        >>> get_mime_type("/srv/www/index.htm")
        'text/html'

        >>> get_mime_type("noext")
        'application/octet-stream'
    """
    extension = get_extension(filename)
    if extension is None:
        return DEFAULT_MIME_TYPE
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)
