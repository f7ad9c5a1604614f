"""Document retrieval with challenge detection and identity rotation."""

from wgscraper.fetching.fanout import gather_all_or_nothing
from wgscraper.fetching.fetcher import FetchState, ResilientFetcher
from wgscraper.fetching.transport import (
    HttpxTransport,
    IdentityRotator,
    TorIdentityRotator,
    Transport,
)

__all__ = [
    "FetchState",
    "gather_all_or_nothing",
    "HttpxTransport",
    "IdentityRotator",
    "ResilientFetcher",
    "TorIdentityRotator",
    "Transport",
]
