"""
=============================================================================
FILESERVER - Static File Server over HTTP/1.1
=============================================================================

Serves one directory tree over HTTP/1.1 using raw sockets: files are
streamed with a MIME type guessed from their extension, directories
without an index file get an HTML listing.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    fileserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m fileserver)
    ├── server.py            # FileServer: wires everything together
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # Exception hierarchy
    ├── access_log.py        # One line per answered request
    ├── core/                # Networking
    │   ├── socket_server.py # Listening socket, accept loop, signals
    │   ├── connection.py    # Client socket wrapper
    │   └── thread_pool.py   # Worker threads
    ├── http/                # Protocol pieces
    │   ├── request.py       # Request head parsing
    │   ├── response.py      # Response building and writing
    │   ├── encoding.py      # Percent-encoding, HTML escaping
    │   ├── paths.py         # URL path normalization
    │   ├── status_codes.py  # 200 / 301 / 404
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/            # Filesystem side
        ├── static.py        # Resolve requests, build responses
        └── listing.py       # Directory listing HTML

=============================================================================
QUICK START
=============================================================================

    from fileserver import FileServer, ServerConfig

    FileServer(ServerConfig(root_dir="./public", port=8000)).run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer
from .config import ServerConfig

__all__ = ["FileServer", "ServerConfig", "__version__"]
