"""Process settings resolved once at startup."""

from __future__ import annotations

import os
import socket
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PORT = 2222
UNKNOWN_HOSTNAME = "unknown"


def resolve_hostname() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return UNKNOWN_HOSTNAME


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    hostname: str = UNKNOWN_HOSTNAME
    host: str = ""  # all interfaces, IPv6 and IPv4
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from the environment.

        Only ``PORT`` is read; an unset or empty value falls back to the
        default port. A value that is not a valid port raises
        ``pydantic.ValidationError``.
        """
        env = os.environ if environ is None else environ
        port = env.get("PORT") or str(DEFAULT_PORT)
        return cls(hostname=resolve_hostname(), port=port)
