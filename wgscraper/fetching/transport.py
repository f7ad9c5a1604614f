"""Network collaborators of the resilient fetcher.

The fetcher only relies on the two protocols defined here. The concrete
implementations route requests through Tor with ``httpx`` and request a new
circuit through the Tor control port with ``stem``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

import chardet
import httpx
import stem
import stem.connection
from stem import Signal
from stem.control import Controller

from wgscraper.config import FetcherConfig, TorConfig
from wgscraper.errors import IdentityRotationError, TransportError
from wgscraper.models.fetch import TransportResponse

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Retrieves the raw body of a URL."""

    async def fetch(self, url: str) -> TransportResponse:
        """Fetch ``url``; transport-level failures raise TransportError."""
        ...


class IdentityRotator(Protocol):
    """Changes the network origin of subsequent requests."""

    async def rotate(self) -> None:
        """Rotate identity; failures raise IdentityRotationError."""
        ...


def detect_encoding(content: bytes) -> str:
    """Fallback decoding for responses that declare no charset."""
    detected = chardet.detect(content)
    encoding = detected.get("encoding") or "utf-8"
    confidence = detected.get("confidence") or 0

    if confidence < 0.7:
        logger.warning(
            "Low confidence encoding detection: %s (%.0f%%)",
            encoding,
            confidence * 100,
        )
    return encoding


class HttpxTransport:
    """Transport backed by an ``httpx.AsyncClient``.

    Args:
        client: The client to issue requests with. It is owned by the
            transport and closed by :meth:`aclose`.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_config(cls, fetcher: FetcherConfig, tor: TorConfig) -> HttpxTransport:
        """Build a transport that goes through the Tor SOCKS proxy if enabled."""
        client = httpx.AsyncClient(
            headers={"user-agent": fetcher.user_agent},
            timeout=fetcher.timeout_seconds,
            proxy=tor.proxy_url if tor.enabled else None,
            follow_redirects=True,
            default_encoding=detect_encoding,
        )
        return cls(client)

    async def fetch(self, url: str) -> TransportResponse:
        """Issue a GET request.

        Non-success statuses are returned as they are; only failures to get
        any response at all raise.

        Raises:
            TransportError: If the request could not be completed.
        """
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise TransportError(url, f"{type(exc).__name__}: {exc}") from exc

        return TransportResponse(
            status_code=response.status_code,
            status_text=response.reason_phrase,
            body=response.text,
        )

    async def aclose(self) -> None:
        await self._client.aclose()


class TorIdentityRotator:
    """Requests a fresh Tor circuit by sending NEWNYM to the control port.

    Args:
        control_port: Port of the Tor control interface.
        password: Control port password; ``None`` tries cookie or no auth.
        host: Address of the Tor control interface.
    """

    def __init__(
        self, control_port: int, password: str | None = None, host: str = "127.0.0.1"
    ) -> None:
        self._control_port = control_port
        self._password = password
        self._host = host

    @classmethod
    def from_config(cls, tor: TorConfig, password: str | None) -> TorIdentityRotator:
        return cls(control_port=tor.control_port, password=password, host=tor.socks_host)

    async def rotate(self) -> None:
        """Request a new circuit without blocking the event loop.

        Raises:
            IdentityRotationError: If the control port refused the request.
        """
        await asyncio.to_thread(self._new_identity)

    def _new_identity(self) -> None:
        try:
            with Controller.from_port(address=self._host, port=self._control_port) as controller:
                controller.authenticate(password=self._password)
                # Tor rate-limits NEWNYM and silently ignores early signals
                wait = controller.get_newnym_wait()
                if wait > 0:
                    logger.info("Waiting %.1fs before requesting a new Tor circuit", wait)
                    time.sleep(wait)
                controller.signal(Signal.NEWNYM)
        except (stem.ControllerError, stem.connection.AuthenticationFailure) as exc:
            raise IdentityRotationError(
                f"Could not rotate Tor identity via {self._host}:{self._control_port}: {exc}"
            ) from exc
        logger.info("Requested new Tor circuit")
