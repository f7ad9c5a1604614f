"""Fetch result models."""

from pydantic import BaseModel, ConfigDict


class TransportResponse(BaseModel):
    """A raw response as reported by the transport collaborator."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    status_text: str = ""
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class BlockedResult(BaseModel):
    """The site kept serving challenge pages until the retries ran out."""

    model_config = ConfigDict(frozen=True)

    url: str
    attempts: int
