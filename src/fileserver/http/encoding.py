"""
=============================================================================
PERCENT-ENCODING AND HTML ESCAPING
=============================================================================

Two small codecs that sit on either side of the pipeline:

    INCOMING                                   OUTGOING
    ────────                                   ────────
    GET /my%20notes/a+b.txt                    <a href="my%20notes">
          │                                          ▲
          ▼                                          │
    percent_decode()                           percent_encode()
          │                                          ▲
          ▼                                          │
    "/my notes/a b.txt"                        "my notes"  (filename)

                                               html_escape()
                                               "<b>" → "&lt;b&gt;"

=============================================================================
UNRESERVED CHARACTERS
=============================================================================

RFC 3986 section 2.3 lists the characters that never need escaping:

    ALPHA / DIGIT / "-" / "." / "_" / "~"

Everything else is written as "%" followed by two uppercase hex digits of
the byte value. Characters outside ASCII are first encoded as UTF-8 and
each resulting byte is escaped:

    "é"  →  b"\\xc3\\xa9"  →  "%C3%A9"

=============================================================================
FILENAMES THAT ARE NOT VALID UTF-8
=============================================================================

On POSIX, Python hands back undecodable filename bytes as lone surrogates
(the "surrogateescape" error handler, see os.fsdecode). Both directions use
the same handler, so a name read from disk survives encode → HTTP → decode
and still opens the same file.

=============================================================================
"""

import string

from ..errors import MalformedEncoding, UnsupportedCharacter


# Unreserved characters pass through percent_encode() unchanged
UNRESERVED = frozenset(string.ascii_letters + string.digits + ".~_-")

_HEX_DIGITS = frozenset(string.hexdigits)

# Order matters: "&" first, otherwise the "&" of "&lt;" would be escaped again
_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def percent_encode(text: str, ascii_only: bool = False) -> str:
    """
    Percent-encode text for use as a URL path segment.

    Args:
        text: Text to encode (usually a single filename).
        ascii_only: Refuse non-ASCII input instead of encoding its UTF-8
                    bytes.

    Returns:
        The encoded text. Only unreserved characters appear literally.

    Raises:
        UnsupportedCharacter: If ascii_only is set and text contains a
                              non-ASCII character.

    Examples:
        >>> percent_encode("my file.txt")
        'my%20file.txt'

        >>> percent_encode("café")
        'caf%C3%A9'
    """
    out = []
    for char in text:
        if char in UNRESERVED:
            out.append(char)
        elif char.isascii():
            out.append(f"%{ord(char):02X}")
        elif ascii_only:
            raise UnsupportedCharacter(char)
        else:
            for byte in char.encode("utf-8", errors="surrogateescape"):
                out.append(f"%{byte:02X}")
    return "".join(out)


def percent_decode(text: str) -> str:
    """
    Decode a percent-encoded URL path.

    =====================================================================
    ALGORITHM
    =====================================================================

    1. Replace every "+" with a space (form-encoding convention, applied
       before scanning so an escaped "%2B" still decodes to "+")
    2. Scan left to right, collecting bytes:
         "%" + two hex digits  → one byte
         anything else         → its UTF-8 bytes
    3. Decode the collected bytes as UTF-8

    =====================================================================

    Args:
        text: The raw path from the request line (query already removed).

    Returns:
        The decoded path.

    Raises:
        MalformedEncoding: If a "%" is not followed by two hex digits.
    """
    text = text.replace("+", " ")
    if "%" not in text:
        return text

    buffer = bytearray()
    i = 0
    while i < len(text):
        char = text[i]
        if char == "%":
            digits = text[i + 1:i + 3]
            if len(digits) != 2 or not all(d in _HEX_DIGITS for d in digits):
                raise MalformedEncoding(text, i)
            buffer.append(int(digits, 16))
            i += 3
        else:
            buffer.extend(char.encode("utf-8", errors="surrogateescape"))
            i += 1

    return buffer.decode("utf-8", errors="surrogateescape")


def html_escape(text: str) -> str:
    """
    Escape text for safe inclusion in HTML content and attribute values.

    Unlike html.escape(), the single quote becomes the named entity
    "&apos;" rather than "&#x27;".

    Example:
        >>> html_escape('<b>"it\\'s"</b>')
        '&lt;b&gt;&quot;it&apos;s&quot;&lt;/b&gt;'
    """
    for raw, entity in _HTML_ESCAPES:
        text = text.replace(raw, entity)
    return text


def display_text(text: str) -> str:
    """
    Make a filename printable as UTF-8.

    Lone surrogates left by surrogateescape (undecodable filename bytes)
    cannot be encoded for the page, so each is shown as U+FFFD instead.

    Example:
        >>> display_text("bad\\udcff.txt")
        'bad\\ufffd.txt'
    """
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
