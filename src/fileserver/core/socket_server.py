"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket and nothing else. Every accepted client socket
is wrapped in a Connection and handed to a callback; what happens to it
afterwards is the file server's business.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       SOCKET LIFECYCLE                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   socket()  ──►  bind()  ──►  listen()  ──►  accept() loop          │
    │                                                  │                   │
    │                                                  ├─► Connection      │
    │                                                  └─► callback(conn)  │
    │                                                                      │
    │   shutdown()  ──►  loop notices within 1s  ──►  close()             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR
    Restarting the server does not fail with "Address already in use"
    while the old socket sits in TIME_WAIT.

TCP_NODELAY
    Response heads are small writes followed by the body. Nagle's
    algorithm would hold the head back waiting for more data.

Accept timeout (1s)
    accept() would otherwise block forever and shutdown() could not take
    effect until the next client connected.

=============================================================================
ADDRESSES
=============================================================================

A host containing ":" is an IPv6 literal and gets an AF_INET6 socket,
everything else AF_INET. Port 0 asks the OS for a free port; the one it
picked is available from `address` once the socket is bound.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    bind()            Create, configure, bind and listen              │
    │        │                                                             │
    │        ▼                                                             │
    │    start(callback)   bind() if needed, install signals, accept loop  │
    │        │                                                             │
    │        └──► while running:                                           │
    │                accept()        Wait for connection (1s max)          │
    │                Connection()    Wrap client socket, set timeout       │
    │                callback(conn)  Hand off to FileServer                │
    │                                                                      │
    │    shutdown()        Stop the loop (any thread, signal handler)     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    ACCEPT_TIMEOUT = 1.0

    def __init__(self, config: ServerConfig, install_signals: bool = True):
        """
        Initialize the socket server.

        Args:
            config: Server configuration (host, port, backlog, timeout).
            install_signals: Install SIGINT/SIGTERM handlers in start().
                             Only possible from the main thread, so tests
                             running the server in a background thread
                             turn it off.
        """
        self.config = config
        self.install_signals = install_signals

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the accept loop has exited
        self._shutdown_event = threading.Event()
        # Set once the socket is listening
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        Before bind() this is just the configured address. Afterwards it
        is what the OS reports, which matters when port 0 was requested.
        """
        if self._socket is not None:
            host, port = self._socket.getsockname()[:2]
            return (host, port)
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """
        Create and configure the listening socket.

        Returns:
            Configured socket ready for binding.
        """
        family = socket.AF_INET6 if ":" in self.config.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)

        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # Lets the accept loop check self._running once a second
        sock.settimeout(self.ACCEPT_TIMEOUT)

        return sock

    def bind(self):
        """
        Create the socket, bind it and start listening.

        Called by start() when needed. Calling it first lets the caller
        learn the real port before the (blocking) accept loop begins.

        Raises:
            OSError: Address in use, permission denied, bad host, ...
        """
        if self._socket is not None:
            return

        sock = self._create_socket()
        try:
            sock.bind((self.config.host, self.config.port))
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            raise

        sock.listen(self.config.backlog)
        self._socket = sock

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")

    def _setup_signals(self):
        """
        Setup signal handlers for graceful shutdown.

        SIGTERM (docker stop, kill) and SIGINT (Ctrl+C) both stop the
        accept loop; the previous handlers come back in _cleanup().
        """
        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Start accepting connections.

        This method BLOCKS until shutdown() is called.

        Args:
            connection_handler: Called with every accepted Connection, on
                                the accepting thread. It must not block for
                                long; FileServer only queues the work.

        Raises:
            OSError: If the socket cannot be bound.
        """
        self.bind()

        self._running = True
        self._shutdown_event.clear()

        if self.install_signals:
            self._setup_signals()

        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept until shutdown.

        A failing accept() never takes the server down: EMFILE, a client
        resetting before accept() returns and similar are logged and the
        loop goes on. Only an error after shutdown() (socket closed under
        us) ends it.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break
                logger.error(f"Accept error: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            try:
                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    timeout=self.config.timeout,
                )
            except OSError as e:
                logger.warning(f"Could not set up connection from {client_address[0]}: {e}")
                client_socket.close()
                continue

            connection_handler(conn)

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call from any thread, from a signal handler and more than
        once. Returns immediately; use wait_for_shutdown() to block until
        the loop has exited.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Clean up resources once the accept loop has exited."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        self._ready_event.clear()
        self._shutdown_event.set()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. True if it is."""
        return self._ready_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the accept loop has exited and the socket is closed.

        Args:
            timeout: Maximum time to wait in seconds. None = wait forever.

        Returns:
            True if shutdown completed, False if timeout.
        """
        return self._shutdown_event.wait(timeout)
