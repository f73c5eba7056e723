"""
Process entry point: bind a port (retrying on the next ones while the
configured port is busy) and serve the app with uvicorn.
"""

from __future__ import annotations

import argparse
import errno
import logging
import socket
from typing import Optional, Sequence

import uvicorn

from sample_backend.app import create_app
from sample_backend.config import get_settings
from sample_backend.logging_config import configure_logging

logger = logging.getLogger(__name__)


class PortUnavailableError(RuntimeError):
    def __init__(self, port: int):
        super().__init__(f"port {port} is already in use")
        self.port = port


def bind_socket(host: str, port: int, retries: int = 0) -> socket.socket:
    """
    Bind ``host:port``; while the address is in use, move on to the next
    port, at most ``retries`` times. Raises PortUnavailableError when the
    budget is exhausted.
    """
    while True:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError as exc:
            sock.close()
            if exc.errno != errno.EADDRINUSE:
                raise
            if retries <= 0:
                raise PortUnavailableError(port) from exc
            logger.warning("port %d is in use, retrying on %d", port, port + 1)
            port += 1
            retries -= 1
            continue
        sock.set_inheritable(True)
        return sock


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Sample CRUD + auth backend")
    parser.add_argument("--host", type=str, default=settings.host, help="Interface to bind")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind (disables retrying on the next ports)",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=None,
        help="How many following ports to try when the port is busy",
    )
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)

    if args.port is not None:
        port, retries = args.port, 0
    else:
        port, retries = settings.listen_port, settings.retry_budget
    if args.retries is not None:
        retries = args.retries

    app = create_app(settings)
    try:
        sock = bind_socket(args.host, port, retries)
    except PortUnavailableError as exc:
        logger.error("%s. Try: PORT=5000 sample-backend", exc)
        app.state.database.dispose()
        return 1

    bound_port = sock.getsockname()[1]
    logger.info("sqlite: %s", app.state.database.location)
    logger.info("listening on http://localhost:%d", bound_port)

    config = uvicorn.Config(app, log_config=None, log_level=settings.log_level.lower())
    server = uvicorn.Server(config)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
        app.state.database.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
