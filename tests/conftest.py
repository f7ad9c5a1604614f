"""Shared fixtures: HTML fixtures and fake network collaborators."""

from pathlib import Path

import pytest

from wgscraper.testing import FakeRotator, FakeTransport, RecordingSleep

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def flat_html() -> str:
    return (FIXTURES_DIR / "flat_ad.html").read_text(encoding="utf-8")


@pytest.fixture
def challenge_html() -> str:
    return (FIXTURES_DIR / "challenge.html").read_text(encoding="utf-8")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def rotator() -> FakeRotator:
    return FakeRotator()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
