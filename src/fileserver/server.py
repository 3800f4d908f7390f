"""
=============================================================================
FILE SERVER
=============================================================================

Ties the pieces together: socket server, thread pool, request parser,
static file handler, response writer and access log.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    FILE SERVER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   FileServer    │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────────┐    │
    │    │ SocketServer │    │  ThreadPool  │    │StaticFileHandler │    │
    │    └──────────────┘    └──────────────┘    └──────────────────┘    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ONE CONNECTION, ONE REQUEST
=============================================================================

    1. ACCEPT       SocketServer wraps the socket in a Connection
    2. QUEUE        ThreadPool.submit(block=False); full queue → close
    3. PARSE        RequestParser reads the request head
    4. HANDLE       StaticFileHandler resolves and builds the response
    5. WRITE        ResponseWriter sends head + body
    6. LOG          one access line
    7. CLOSE        always, whatever happened above

=============================================================================
ERROR BOUNDARY
=============================================================================

Everything in steps 3 to 6 runs inside one try block per connection.

    ProtocolError, DecodeError   WARNING, close without a response
    OSError                      ERROR, close (whatever was already sent
                                 stays sent)
    anything else                logged with traceback, close

The accept loop and the other workers never see these exceptions.

=============================================================================
"""

import logging
import time
from typing import Optional, Tuple

from .access_log import AccessLog, emit
from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .errors import ProtocolError, DecodeError
from .handlers import StaticFileHandler
from .http import RequestParser, ResponseWriter


logger = logging.getLogger(__name__)


class FileServer:
    """
    Static file server over HTTP/1.1.

    Usage:
        server = FileServer(ServerConfig(root_dir="./public", port=8000))
        server.run()   # blocks until Ctrl+C / SIGTERM

    From another thread (tests):
        server = FileServer(config, install_signals=False)
        threading.Thread(target=server.run, daemon=True).start()
        server.wait_until_ready()
        ...
        server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None, install_signals: bool = True):
        """
        Args:
            config: Server configuration. Defaults to ServerConfig().
            install_signals: Handle SIGINT/SIGTERM. Must be False when
                             run() is not called from the main thread.

        Raises:
            ValueError: Invalid configuration.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config, install_signals=install_signals)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(
            max_line_length=self.config.max_line_length,
            max_headers=self.config.max_headers,
        )
        self._writer = ResponseWriter(chunk_size=self.config.chunk_size)
        self._handler = StaticFileHandler(
            self.config.root_dir,
            follow_symlinks=self.config.follow_symlinks,
            sort_listings=self.config.sort_listings,
        )

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: The address could not be bound.
        """
        self._setup_logging()
        self._thread_pool.start()

        try:
            self._socket_server.bind()
            self._print_startup_banner()
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask the server to stop. run() returns once it has."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server accepts connections."""
        return self._socket_server.wait_until_ready(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is closed."""
        return self._socket_server.wait_for_shutdown(timeout)

    def _print_startup_banner(self):
        host, port = self.address
        print(f"Listening on http://{host}:{port}")
        print(f"Serving directory: {self._handler.root_dir}")

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("fileserver").setLevel(level)

    def _shutdown(self):
        """
        Graceful shutdown.

        The accept loop has already stopped when this runs. Connections
        still queued or in progress get up to config.timeout to finish.
        """
        logger.info("Shutting down server...")
        logger.debug(f"Thread pool at shutdown: {self._thread_pool.stats}")
        self._thread_pool.shutdown(wait=True, timeout=self.config.timeout)
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Queue a connection for a worker (runs on the accept thread).

        Never blocks: if the queue is full the connection is closed
        straight away, without a response.
        """
        submitted = self._thread_pool.submit(
            self._process_connection,
            args=(conn,),
            block=False,
        )

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, dropping connection from {conn.client_ip}")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Serve one request on a connection (runs in a worker thread).

        The connection is closed on every path out of here.
        """
        with conn:
            start_time = time.time()
            try:
                request = self._parser.parse(conn.rfile, conn.address)
                response = self._handler.handle(request)
                bytes_sent = self._writer.write(response, conn.wfile)
            except (ProtocolError, DecodeError) as e:
                logger.warning(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
                return
            except OSError as e:
                logger.error(f"[{conn.id}] I/O error: {e}")
                return
            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")
                return

            duration_ms = (time.time() - start_time) * 1000
            entry = AccessLog.from_exchange(conn.id, request, response, bytes_sent, duration_ms)
            emit(entry, self.config.log_format)
