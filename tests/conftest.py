"""Shared pytest fixtures for gemfreely tests."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

from gemfreely.config import Config
from gemfreely.feed.models import FeedDialect, FeedEntry

load_dotenv()


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live WriteFreely instance",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live WriteFreely instance"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(
        wf_url="https://blog.example.com",
        alias="gemlog",
        access_token="test-token",
        insecure=False,
    )


@pytest.fixture
def mock_wf_client(mock_config):
    """Create a mock WriteFreelyClient instance for testing."""
    from gemfreely.core.client import WriteFreelyClient

    client = MagicMock(spec=WriteFreelyClient)
    client.config = mock_config
    return client


@pytest.fixture
def make_entry():
    """Factory fixture for feed entries."""

    def _make_entry(
        key: str = "gemini://example.org/gemlog/hello.gmi",
        title: str = "Hello",
        body: str | None = "# Hello\nFirst post.\n",
        updated: datetime | None = None,
        dialect: FeedDialect = FeedDialect.GEMFEED,
    ) -> FeedEntry:
        return FeedEntry(
            source_id=key,
            title=title,
            url=key,
            slug=key.rsplit("/", 1)[-1].removesuffix(".gmi"),
            published=datetime(2024, 3, 5, 12, tzinfo=timezone.utc),
            updated=updated,
            body=body,
            dialect=dialect,
        )

    return _make_entry
