"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable of the server in one dataclass.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                   WHERE SETTINGS COME FROM                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   dataclass defaults                                                │
    │        │                                                             │
    │        ▼                                                             │
    │   FILESERVER_* environment variables   (ServerConfig.from_env)      │
    │        │                                                             │
    │        ▼                                                             │
    │   command-line flags                   (__main__.py)                │
    │        │                                                             │
    │        ▼                                                             │
    │   validate()  ── fail fast on nonsense before binding a socket      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK      host, port, backlog, timeout
    CONTENT      root_dir, follow_symlinks, sort_listings, chunk_size
    PARSING      max_line_length, max_headers
    THREADING    min_workers, max_workers, queue_size
    LOGGING      log_level, log_format

    =========================================================================
    EXAMPLES
    =========================================================================

    Serve the current directory on every interface (the defaults):
        ServerConfig()

    Serve a build directory locally, verbose:
        ServerConfig(host="127.0.0.1", root_dir="./dist", log_level="DEBUG")

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    - "0.0.0.0" - All network interfaces
    - "127.0.0.1" - Localhost only
    """

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free one (tests)."""

    backlog: int = 128
    """Connections the OS queues before accept() picks them up."""

    timeout: Optional[float] = 30.0
    """
    Read/write timeout per connection, in seconds.
    A client that never finishes its request line is dropped after this.
    None = wait forever (only sensible for debugging).
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Directory to serve. Nothing outside it is reachable by URL."""

    follow_symlinks: bool = True
    """Serve symlinks whose target lies outside root_dir."""

    sort_listings: bool = True
    """Sort directory listings by name (case-insensitive)."""

    chunk_size: int = 8192
    """Bytes per read/write when streaming a file."""

    # ─────────────────────────────────────────────────────────────────────
    # PARSING LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_line_length: int = 8192
    """Longest request or header line accepted, in bytes."""

    max_headers: int = 100
    """Most header lines accepted per request."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """Worker threads created at startup."""

    max_workers: int = 16
    """Upper bound when the pool grows under load."""

    queue_size: int = 100
    """Accepted connections waiting for a worker before new ones are dropped."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: 'text' (Apache style) or 'json'."""

    @property
    def root_path(self) -> Path:
        """root_dir as an absolute Path."""
        return Path(self.root_dir).resolve()

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        FILESERVER_HOST        Bind address      (default: 0.0.0.0)
        FILESERVER_PORT        Port              (default: 8080)
        FILESERVER_ROOT        Served directory  (default: .)
        FILESERVER_WORKERS     Max workers       (default: 16)
        FILESERVER_TIMEOUT     Socket timeout    (default: 30)
        FILESERVER_LOG_LEVEL   Logging level     (default: INFO)
        FILESERVER_LOG_FORMAT  text or json      (default: text)

        =====================================================================
        """
        max_workers = int(os.getenv("FILESERVER_WORKERS", "16"))
        return cls(
            host=os.getenv("FILESERVER_HOST", "0.0.0.0"),
            port=int(os.getenv("FILESERVER_PORT", "8080")),
            root_dir=os.getenv("FILESERVER_ROOT", "."),
            min_workers=min(cls.min_workers, max_workers),
            max_workers=max_workers,
            timeout=float(os.getenv("FILESERVER_TIMEOUT", "30")),
            log_level=os.getenv("FILESERVER_LOG_LEVEL", "INFO"),
            log_format=os.getenv("FILESERVER_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Runs at startup, not at first use, so a typo fails immediately
        instead of on the first request.

        Raises:
            ValueError: Describing the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not self.root_path.is_dir():
            raise ValueError(f"Root directory does not exist: {self.root_dir}")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if self.max_line_length < 64:
            raise ValueError("max_line_length must be >= 64")

        if self.max_headers < 0:
            raise ValueError("max_headers must be >= 0")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}"
            )
