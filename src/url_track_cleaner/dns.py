"""Host resolution used to check that a redirect target is reachable."""
from __future__ import annotations

import asyncio
import logging
import socket
from typing import Protocol

logger = logging.getLogger(__name__)


class HostResolver(Protocol):
    async def lookup(self, host: str) -> list[str]:
        """Return the addresses for ``host``; raise ``OSError`` if it cannot be resolved."""
        ...


class SystemResolver:
    """Resolve through the event loop's ``getaddrinfo`` (runs in the default executor).

    Only the host name is looked up; no port is needed for an existence check.
    """

    async def lookup(self, host: str) -> list[str]:
        loop = asyncio.get_running_loop()
        try:
            infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
        except UnicodeError as e:
            # IDNA rejects empty or over-long labels before any lookup happens
            raise socket.gaierror(socket.EAI_NONAME, f"invalid host name {host!r}: {e}") from e
        addresses = list(dict.fromkeys(info[4][0] for info in infos))
        logger.debug("Resolved %s to %d address(es)", host, len(addresses))
        return addresses
