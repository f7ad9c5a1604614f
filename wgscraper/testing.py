"""In-memory stand-ins for the network collaborators of a fetcher.

They satisfy the :class:`~wgscraper.fetching.Transport` and
:class:`~wgscraper.fetching.IdentityRotator` protocols without any I/O, so
fetch, listing and index flows can be driven from canned pages.
"""

from __future__ import annotations

import asyncio

from wgscraper.errors import IdentityRotationError, TransportError
from wgscraper.models.fetch import TransportResponse


def ok(body: str) -> TransportResponse:
    return TransportResponse(status_code=200, status_text="OK", body=body)


class FakeTransport:
    """Serves canned responses per URL and records every request.

    Each URL maps to a list of responses served in order; the last one
    repeats once the list is exhausted. Unknown URLs fail like a dead host.
    """

    def __init__(self, routes: dict[str, list[TransportResponse]] | None = None) -> None:
        self.routes = {url: list(responses) for url, responses in (routes or {}).items()}
        self.requests: list[str] = []

    def add(self, url: str, *responses: TransportResponse) -> None:
        self.routes.setdefault(url, []).extend(responses)

    async def fetch(self, url: str) -> TransportResponse:
        self.requests.append(url)
        queue = self.routes.get(url)
        if not queue:
            raise TransportError(url, "ConnectError: no route to host")
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]


class FakeRotator:
    """Counts rotations; optionally fails every one of them."""

    def __init__(self, fail: bool = False) -> None:
        self.calls = 0
        self.fail = fail

    async def rotate(self) -> None:
        self.calls += 1
        if self.fail:
            raise IdentityRotationError("control port refused NEWNYM")


class RecordingSleep:
    """Records backoff delays and yields to the event loop instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)
