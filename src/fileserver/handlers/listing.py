"""
=============================================================================
DIRECTORY LISTING
=============================================================================

Renders an HTML index page for a directory that has no index file.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Index of /photos/                                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Directory Listing                                                 │
    │   Directory: /photos/                                               │
    │   ─────────────────────────                                         │
    │   • ..                          href=".."                           │
    │   • 📁 2024/                    href="2024"                         │
    │   • 📄 beach day.png            href="beach%20day.png"              │
    │   ─────────────────────────                                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Links are RELATIVE. They only resolve correctly when the page URL ends in
"/", which is why the resolver redirects "/photos" to "/photos/" before a
listing is ever rendered.

=============================================================================
ESCAPING
=============================================================================

A filename is attacker-controlled text as far as the page is concerned.
It goes into the page twice, escaped differently each time:

    href  → percent_encode(name)          "a&b.txt" → "a%26b.txt"
    text  → html_escape("📄 " + name)     "a&b.txt" → "📄 a&amp;b.txt"

Undecodable bytes in a name are shown as U+FFFD in the text (see
display_text) but kept exactly in the href.

=============================================================================
"""

import os
from pathlib import Path

from ..http.encoding import display_text, html_escape, percent_encode


DIRECTORY_MARKER = "📁"
FILE_MARKER = "📄"

_PAGE_HEAD = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Index of {title}</title>
  <style>
  body {{
    background-color: Canvas;
    color: CanvasText;
    color-scheme: light dark;
  }}
  a, a:visited, a:active {{
    text-decoration: none;
  }}
  </style>
</head>
<body>
<h1>Directory Listing</h1>
<h2>Directory: {title}</h2>
<hr>
<ul>
"""

_PAGE_TAIL = """</ul>
<hr>
</body>
</html>
"""


class DirectoryListingRenderer:
    """
    Builds the HTML listing for one directory.

    The whole page is built in memory before anything is sent. If the
    directory cannot be read halfway through, the caller gets an OSError
    and no partial page reaches the client.

    Args:
        sort_entries: Sort entries by name, ignoring case. When False the
                      order is whatever the filesystem returns, which
                      differs between platforms and even between runs.
    """

    def __init__(self, sort_entries: bool = True):
        self.sort_entries = sort_entries

    def render(self, directory: Path, display_name: str) -> str:
        """
        Render the listing page.

        Args:
            directory: Filesystem directory to enumerate.
            display_name: Name shown in the title and heading, normally
                          the URL path ("/photos/").

        Returns:
            Complete HTML document.

        Raises:
            OSError: Directory unreadable, or an entry's type unknown.
        """
        title = html_escape(display_text(display_name))
        parts = [_PAGE_HEAD.format(title=title)]

        # Parent link always comes first, even at the root where the
        # normalizer turns ".." back into "/"
        parts.append('  <li><a href="..">..</a></li>\n')

        for name, is_dir in self._entries(directory):
            if is_dir:
                label = f"{DIRECTORY_MARKER} {name}/"
            else:
                label = f"{FILE_MARKER} {name}"
            parts.append(
                f'  <li><a href="{percent_encode(name)}">{html_escape(display_text(label))}</a></li>\n'
            )

        parts.append(_PAGE_TAIL)
        return "".join(parts)

    def _entries(self, directory: Path) -> list[tuple[str, bool]]:
        """
        Read (name, is_directory) for every entry.

        Uses the entry's own type: a symlink to a directory is listed as
        a file, and following the link is left to the next request.
        """
        entries = []
        with os.scandir(directory) as it:
            for entry in it:
                entries.append((entry.name, entry.is_dir(follow_symlinks=False)))

        if self.sort_entries:
            entries.sort(key=lambda item: (item[0].casefold(), item[0]))
        return entries
