"""
=============================================================================
ACCESS LOG
=============================================================================

One line per request that was answered.

    TEXT (default, Apache style):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [10/Jun/2024:10:55:36 +0000] "GET /docs/" 200 1.42ms  │
    │ ──────────────────────────────────────────────────────────────────  │
    │ IP              Timestamp                  Request      Status Time │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (log_format="json"):
    {"connection_id": "a1b2c3d4", "client_ip": "127.0.0.1",
     "method": "GET", "target": "/docs/", "status_code": 200,
     "bytes_sent": 1875, "duration_ms": 1.42, "timestamp": "..."}

Requests that are dropped without a response (protocol or decode errors)
have no access line; they show up as WARNINGs from fileserver.server.

Lines go to the "fileserver.access" logger so they can be routed on their
own:

    logging.getLogger("fileserver.access").addHandler(file_handler)

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass

from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("fileserver.access")


@dataclass
class AccessLog:
    """A single access log entry."""

    connection_id: str
    client_ip: str
    method: str
    target: str
    status_code: int
    bytes_sent: int
    duration_ms: float
    timestamp: str

    @classmethod
    def from_exchange(
        cls,
        connection_id: str,
        request: HTTPRequest,
        response: HTTPResponse,
        bytes_sent: int,
        duration_ms: float,
    ) -> "AccessLog":
        return cls(
            connection_id=connection_id,
            client_ip=request.client_address[0],
            method=request.method,
            target=request.target,
            status_code=int(response.status),
            bytes_sent=bytes_sent,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "connection_id": self.connection_id,
            "client_ip": self.client_ip,
            "method": self.method,
            "target": self.target,
            "status_code": self.status_code,
            "bytes_sent": self.bytes_sent,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        """Format as an Apache-style access line."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.duration_ms:.2f}ms'
        )


def emit(entry: AccessLog, log_format: str = "text") -> None:
    """Write an entry to the access logger at INFO."""
    if log_format == "json":
        logger.info(json.dumps(entry.to_dict()))
    else:
        logger.info(entry.to_text())
