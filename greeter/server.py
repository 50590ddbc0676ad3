"""Startup sequence: logging, settings, socket bind and the serve loop."""

from __future__ import annotations

import logging
import socket
import sys
from typing import Mapping, Optional

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from .config import Settings
from .main import create_app

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(message)s"
LOG_DATEFMT = "%Y/%m/%d %H:%M:%S"


def configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt=LOG_DATEFMT, stream=sys.stderr)


def _listener(family: int) -> socket.socket:
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        if family == socket.AF_INET6:
            sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
    except OSError:
        sock.close()
        raise
    return sock


def bind_socket(host: str, port: int) -> socket.socket:
    """Create a TCP socket bound to ``(host, port)``.

    An empty ``host`` means every interface: a dual-stack ``::`` socket that
    also accepts IPv4 clients, or ``0.0.0.0`` when the host has no IPv6.
    Raises ``OSError`` when the address cannot be bound, e.g. the port is
    already in use or needs privileges the process does not have.
    """
    if host:
        sock = _listener(socket.AF_INET6 if ":" in host else socket.AF_INET)
    else:
        try:
            sock = _listener(socket.AF_INET6)
            host = "::"
        except OSError:
            sock = _listener(socket.AF_INET)
            host = "0.0.0.0"
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock


def build_server(app: FastAPI) -> uvicorn.Server:
    # Logging stays with the root logger; handlers write their own request line
    # and uvicorn only reports problems.
    config = uvicorn.Config(app, log_config=None, log_level="warning", access_log=False)
    return uvicorn.Server(config)


def run(environ: Optional[Mapping[str, str]] = None) -> None:
    configure_logging()
    try:
        settings = Settings.from_env(environ)
    except ValidationError as exc:
        logger.critical("invalid PORT: %s", exc.errors()[0]["msg"])
        sys.exit(1)

    app = create_app(settings.hostname)
    logger.info("Starting server on port %s", settings.port)
    try:
        sock = bind_socket(settings.host, settings.port)
    except OSError as exc:
        logger.critical("listen tcp %s:%s: %s", settings.host, settings.port, exc)
        sys.exit(1)

    build_server(app).run(sockets=[sock])
