import socket

import httpx


class FakeResolver:
    """Answers lookups from a dict; unknown hosts fail like getaddrinfo does."""

    def __init__(self, hosts: dict[str, list[str]] | None = None):
        self.hosts = hosts or {}
        self.lookups: list[str] = []

    async def lookup(self, host: str) -> list[str]:
        self.lookups.append(host)
        if host not in self.hosts:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        return self.hosts[host]


def make_client(handler, requests: list | None = None) -> httpx.AsyncClient:
    """AsyncClient over a MockTransport, optionally recording each request."""

    def _handle(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return handler(request)

    return httpx.AsyncClient(transport=httpx.MockTransport(_handle), follow_redirects=False)
