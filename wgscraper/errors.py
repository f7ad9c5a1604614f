"""Error hierarchy for fetching and extraction.

Fetch errors describe what happened on the wire. Extraction errors describe
what was wrong with a document and carry the provenance trail of the
selection that produced the offending value, so a failure can be traced to
the chain of queries that led there.
"""

from __future__ import annotations

from collections.abc import Sequence


def format_provenance(provenance: Sequence[str]) -> str:
    """Render a provenance trail as ``root > step > step``."""
    return " > ".join(["root", *provenance])


class WgScraperError(Exception):
    """Base class for all errors raised by wgscraper."""


# ── Fetching ─────────────────────────────────────────────────────────────────


class FetchError(WgScraperError):
    """Base class for errors raised while retrieving a document."""


class TransportError(FetchError):
    """The transport failed or answered with a non-success status.

    Never retried: rotating identity does not fix a bad URL or a server error.
    """

    def __init__(
        self,
        url: str,
        message: str,
        status_code: int | None = None,
        status_text: str = "",
    ) -> None:
        super().__init__(f"Request to {url} failed: {message}")
        self.url = url
        self.status_code = status_code
        self.status_text = status_text


class ChallengeDetected(FetchError):
    """A challenge page was served instead of the requested document."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Challenge page served for {url}")
        self.url = url


class IdentityRotationError(FetchError):
    """The identity-rotation collaborator could not change the network origin."""


# ── Extraction ───────────────────────────────────────────────────────────────


class ExtractionError(WgScraperError):
    """Base class for errors raised while extracting data from a document.

    Args:
        message: Human-readable description of the failure.
        provenance: Query steps that produced the selection involved.
    """

    def __init__(self, message: str, provenance: Sequence[str] = ()) -> None:
        self.message = message
        self.provenance = tuple(provenance)
        super().__init__(message)

    def __str__(self) -> str:
        if not self.provenance:
            return self.message
        return f"{self.message} (selection: {format_provenance(self.provenance)})"


class CardinalityError(ExtractionError):
    """A selection resolved to the wrong number of nodes."""

    def __init__(
        self, message: str, count: int, provenance: Sequence[str] = ()
    ) -> None:
        super().__init__(message, provenance)
        self.count = count


class MissingDataError(ExtractionError):
    """An expected attribute or text content is absent."""


class PatternMismatchError(ExtractionError):
    """Input text did not conform to an expected pattern."""

    def __init__(self, text: str, pattern: str, message: str | None = None) -> None:
        super().__init__(message or f"String {text!r} does not match {pattern!r}")
        self.text = text
        self.pattern = pattern


class InternalSchemaError(ExtractionError):
    """An extraction pattern contradicts its own required/optional contract.

    Points at a bug in the pattern definitions, not at the input.
    """


class SchemaDriftError(ExtractionError):
    """The document contains a section that is not in the known allow-list."""

    def __init__(self, heading: str, provenance: Sequence[str] = ()) -> None:
        super().__init__(f"Encountered unknown section {heading!r}", provenance)
        self.heading = heading


class RecordAssemblyError(ExtractionError):
    """Assembling a record failed; wraps the failing step's error with the URL."""

    def __init__(self, url: str, step: str, cause: ExtractionError) -> None:
        super().__init__(
            f"Failed to assemble record from {url} at step '{step}': {cause.message}",
            cause.provenance,
        )
        self.url = url
        self.step = step
        self.cause = cause
