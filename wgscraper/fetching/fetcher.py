"""Fetching documents from a site that serves challenge pages.

Each request runs through a small state machine::

    REQUESTING --ok--> EVALUATING --clean--> DELIVERED
        |                   |
        | error/non-2xx     | challenge marker found
        v                   v
      FAILED            CHALLENGED --retry allowed--> (rotate) --> REQUESTING
                            |
                            +--retries used up--> BlockedResult

Transport failures are fatal and never retried. Only challenge pages are
retried, each time after rotating the network identity. Whether retries are
bounded is decided by the :class:`~wgscraper.config.RetryPolicy`.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from wgscraper.config import FetcherConfig, RetryPolicy
from wgscraper.errors import ChallengeDetected, TransportError
from wgscraper.fetching.transport import IdentityRotator, Transport
from wgscraper.models.fetch import BlockedResult, TransportResponse
from wgscraper.selection.document import Document

logger = logging.getLogger(__name__)

T = TypeVar("T")

Continuation = Callable[[Document], Awaitable[T] | T]
Sleep = Callable[[float], Awaitable[None]]


class FetchState(Enum):
    REQUESTING = "requesting"
    EVALUATING = "evaluating"
    CHALLENGED = "challenged"
    DELIVERED = "delivered"
    FAILED = "failed"


class ResilientFetcher:
    """Retrieves documents, rotating identity whenever a challenge page comes back.

    Args:
        transport: Issues the actual requests.
        rotator: Changes the network identity after a challenge.
        policy: Retry policy; unbounded by default.
        challenge_selector: CSS selector whose presence marks a challenge page.
        sleep: Awaitable used for the backoff delay.
    """

    def __init__(
        self,
        transport: Transport,
        rotator: IdentityRotator,
        policy: RetryPolicy | None = None,
        challenge_selector: str = FetcherConfig().challenge_selector,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._rotator = rotator
        self._policy = policy or RetryPolicy.unbounded()
        self._challenge_selector = challenge_selector
        self._sleep = sleep

    @classmethod
    def from_config(
        cls, config: FetcherConfig, transport: Transport, rotator: IdentityRotator
    ) -> ResilientFetcher:
        return cls(
            transport=transport,
            rotator=rotator,
            policy=config.retry,
            challenge_selector=config.challenge_selector,
        )

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def is_challenge(self, document: Document) -> bool:
        return document.root.query(self._challenge_selector).exists()

    def _enter(self, url: str, state: FetchState) -> None:
        logger.debug("%s -> %s", url, state.value)

    async def _request(self, url: str) -> TransportResponse:
        """REQUESTING: one attempt; any failure moves to FAILED and raises."""
        try:
            response = await self._transport.fetch(url)
        except TransportError:
            self._enter(url, FetchState.FAILED)
            raise
        if not response.ok:
            self._enter(url, FetchState.FAILED)
            raise TransportError(
                url,
                f"status code {response.status_code}: {response.status_text}",
                status_code=response.status_code,
                status_text=response.status_text,
            )
        return response

    def _evaluate(self, url: str, response: TransportResponse) -> Document:
        """EVALUATING: the clean document, or ChallengeDetected."""
        document = Document.parse(response.body, url)
        if self.is_challenge(document):
            raise ChallengeDetected(url)
        return document

    async def fetch(self, url: str, continuation: Continuation) -> T | BlockedResult:
        """Fetch ``url`` and hand the clean document to ``continuation``.

        Args:
            url: The document to retrieve.
            continuation: Called with the parsed document; may be a coroutine
                function.

        Returns:
            The continuation's result, or a BlockedResult when a bounded policy
            ran out of retries.

        Raises:
            TransportError: If the transport failed or answered with a
                non-success status.
            IdentityRotationError: If identity rotation failed.
        """
        attempts = 0
        retries = 0

        while True:
            self._enter(url, FetchState.REQUESTING)
            attempts += 1
            response = await self._request(url)

            self._enter(url, FetchState.EVALUATING)
            try:
                document = self._evaluate(url, response)
            except ChallengeDetected:
                self._enter(url, FetchState.CHALLENGED)
                logger.warning("Challenge page on attempt %d for %s", attempts, url)
                if not self._policy.allows_retry(retries):
                    logger.error(
                        "Giving up on %s after %d attempt(s): still challenged", url, attempts
                    )
                    return BlockedResult(url=url, attempts=attempts)
                await self._rotator.rotate()
                retries += 1
                logger.info("Rotated identity for %s (retry %d)", url, retries)
                if self._policy.backoff_seconds > 0:
                    await self._sleep(self._policy.backoff_seconds)
                continue

            self._enter(url, FetchState.DELIVERED)
            result = continuation(document)
            if inspect.isawaitable(result):
                result = await result
            return result

    async def fetch_document(self, url: str) -> Document | BlockedResult:
        """Fetch ``url`` and return the parsed document itself."""
        return await self.fetch(url, lambda document: document)
