"""Unified configuration schema for gemfreely.

Defines Pydantic models for the YAML config structure with dedicated
sections for the WriteFreely connection, named sync profiles, and logging.
The ``writefreely`` section supplies fallbacks to ``config.load_config``.

Usage:
    from gemfreely.config_schema import build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
    profile = unified.profile("gemlog")
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class WriteFreelyConfig(BaseModel):
    """WriteFreely connection settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    url: str | None = Field(
        default=None, description="WriteFreely instance root URL"
    )
    alias: str | None = Field(
        default=None, description="Blog (collection) alias"
    )
    token: str | None = Field(default=None, description="Access token")
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Read timeout for every network call, in seconds",
    )
    max_parallel_requests: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Maximum concurrent publish calls (1-32)",
    )

    model_config = {"frozen": True}


class SyncProfileConfig(BaseModel):
    """A named gemlog-to-blog sync profile.

    Attributes:
        feed_url: Gemlog feed URL (``gemini://``, ``http://`` or ``https://``).
        collection: Target collection alias; defaults to the connection alias.
        dialect: Feed dialect, or ``auto`` to detect it.
        strip_before_marker: Drop body text up to and including this marker.
        strip_after_marker: Drop body text from this marker onward.
        freshness: How the reconciler decides a remote post is current.
        date_format: ``strftime`` fallback for Atom dates feedparser
            cannot read.
    """

    feed_url: str
    collection: str | None = None
    dialect: Literal["auto", "atom", "gemfeed"] = "auto"
    strip_before_marker: str | None = None
    strip_after_marker: str | None = None
    freshness: Literal["content-hash", "timestamp", "always-update"] = (
        "content-hash"
    )
    date_format: str = "%Y-%m-%d %H:%M:%S %z"

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: ``text`` or ``json``.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: Literal["text", "json"] = Field(
        default="text", description="Log line format"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    writefreely: WriteFreelyConfig = Field(
        default_factory=WriteFreelyConfig
    )
    sync: dict[str, SyncProfileConfig] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}

    def profile(self, name: str) -> SyncProfileConfig:
        """Return the sync profile called *name*.

        Raises:
            ValueError: If no such profile is configured.
        """
        try:
            return self.sync[name]
        except KeyError:
            available = ", ".join(sorted(self.sync)) or "none"
            raise ValueError(
                f"Unknown sync profile '{name}'. Configured profiles: {available}"
            ) from None


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully; anything absent gets defaults.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
