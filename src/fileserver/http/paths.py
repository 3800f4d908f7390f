"""
=============================================================================
PATH NORMALIZATION
=============================================================================

Turns a decoded URL path into a root-relative path that can never point
above the document root.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     normalize_path() BY EXAMPLE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   "/usr/bin/../lib//./"                                             │
    │                                                                      │
    │   split on "/":  ["", "usr", "bin", "..", "lib", "", ".", ""]       │
    │                                                                      │
    │   ""     skip            []                                         │
    │   "usr"  push            ["usr"]                                    │
    │   "bin"  push            ["usr", "bin"]                             │
    │   ".."   pop             ["usr"]                                    │
    │   "lib"  push            ["usr", "lib"]                             │
    │   ""     skip            ["usr", "lib"]                             │
    │   "."    skip            ["usr", "lib"]                             │
    │   ""     skip            ["usr", "lib"]                             │
    │                                                                      │
    │   join with "/":  "usr/lib"                                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY THIS STOPS PATH TRAVERSAL
=============================================================================

A ".." can only remove a segment that an earlier step pushed. At the root
the stack is empty and there is nothing to pop, so the extra ".." is
simply dropped:

    "../../../../etc///passwd"   →   "etc/passwd"

The result is joined onto the configured root directory, so the worst a
client can do is name something inside it. Symlinks are a separate matter
and are handled by the resolver (see handlers/static.py).

This works purely on strings and never touches the filesystem, unlike
Path.resolve() which needs the path to exist to expand symlinks.

=============================================================================
"""


def split_segments(path: str) -> list[str]:
    """
    Split a slash-separated path into normalized segments.

    Empty and "." segments are dropped; ".." removes the previous
    segment if there is one.

    Args:
        path: Any slash-separated path, absolute or relative.

    Returns:
        List of non-empty segments, none equal to "." or "..".
    """
    segments: list[str] = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if segments:
                segments.pop()
            continue
        segments.append(part)
    return segments


def normalize_path(path: str) -> str:
    """
    Collapse a path into its traversal-safe, root-relative form.

    Total (never raises) and idempotent:
    normalize_path(normalize_path(p)) == normalize_path(p).

    Args:
        path: Decoded URL path, e.g. "/docs/../img/./logo.png".

    Returns:
        Normalized path without leading or trailing slash, e.g.
        "img/logo.png". The root itself is the empty string.

    Examples:
        >>> normalize_path("/usr/bin/../lib//./")
        'usr/lib'

        >>> normalize_path("/../../")
        ''
    """
    return "/".join(split_segments(path))
