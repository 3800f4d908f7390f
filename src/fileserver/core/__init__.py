"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the file server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates the listening socket, binds, listens                     │
    │  • Runs the accept() loop on the main thread                        │
    │  • Stops on SIGINT/SIGTERM or shutdown()                            │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ Hands off each accepted connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          THREAD POOL                                 │
    │  • Bounded queue of connection tasks                                │
    │  • min..max worker threads pulling from it                          │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ One worker per connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Client socket with a timeout and buffered reader/writer          │
    │  • Closed after exactly one response                                │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
