"""Connection configuration for the WriteFreely side of a sync.

Reads WriteFreely connection settings from CLI args, environment variables,
.env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    WRITEFREELY_URL: WriteFreely instance root URL (required)
    WRITEFREELY_ALIAS: Blog/collection alias (required for sync)
    WRITEFREELY_TOKEN: Access token from ``gemfreely login`` (required for sync and logout)
    WRITEFREELY_INSECURE: Skip SSL verification (optional, default: false)
    GEMFREELY_TIMEOUT: Per-request read timeout in seconds (optional, default: 30)
    GEMFREELY_MAX_PARALLEL_REQUESTS: Max concurrent publish calls (optional, default: 1)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


@dataclass
class Config:
    wf_url: str
    alias: str = ""
    access_token: str = ""
    insecure: bool = False
    debug: bool = False
    timeout: float = 30.0
    max_parallel_requests: int = 1


def validate_config(
    config: Config,
    require_alias: bool = False,
    require_token: bool = False,
) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.
        require_alias: Fail when no collection alias is configured.
        require_token: Fail when no access token is configured.

    Raises:
        ValueError: If URL format is invalid or a required value is empty.
    """
    config.wf_url = config.wf_url.strip()

    if not config.wf_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid WriteFreely URL '{config.wf_url}': must start with http:// or https://"
        )

    parsed = urlparse(config.wf_url)
    if not parsed.hostname:
        raise ValueError(
            f"Invalid WriteFreely URL '{config.wf_url}': URL must include a hostname"
        )

    config.wf_url = config.wf_url.removesuffix("/")
    config.alias = config.alias.strip()
    config.access_token = config.access_token.strip()

    if require_alias and not config.alias:
        raise ValueError(
            "WriteFreely alias cannot be empty. Set WRITEFREELY_ALIAS or pass --alias."
        )

    if require_token and not config.access_token:
        raise ValueError(
            "WriteFreely access token required. Run 'gemfreely login' and set "
            "WRITEFREELY_TOKEN or pass --token."
        )

    if not (1 <= config.max_parallel_requests <= 32):
        raise ValueError(
            f"Invalid max_parallel_requests {config.max_parallel_requests}: "
            "must be a number between 1 and 32"
        )

    if config.timeout <= 0:
        raise ValueError(
            f"Invalid timeout {config.timeout}: must be greater than 0"
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def load_config(
    url: str | None = None,
    alias: str | None = None,
    token: str | None = None,
    insecure: bool = False,
    debug: bool = False,
    max_parallel_requests: int | None = None,
    yaml_fallbacks: dict | None = None,
    require_alias: bool = False,
    require_token: bool = False,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        url: Override WriteFreely URL.
        alias: Override collection alias.
        token: Override access token.
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        max_parallel_requests: Override publish concurrency (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``writefreely`` section.
        require_alias: Whether the calling command needs an alias.
        require_token: Whether the calling command needs a token.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If required config is missing after checking all
            sources, or a numeric value is out of range.
    """
    fb = yaml_fallbacks or {}

    # --- String fields: CLI > env > YAML ---

    wf_url = url or os.getenv("WRITEFREELY_URL") or fb.get("url")
    if not wf_url:
        raise ValueError(
            "WriteFreely URL not found. Set WRITEFREELY_URL environment variable, "
            "pass --wf-url, or add 'url' to the writefreely section of config.yml."
        )

    wf_alias = alias or os.getenv("WRITEFREELY_ALIAS") or fb.get("alias") or ""
    wf_token = token or os.getenv("WRITEFREELY_TOKEN") or fb.get("token") or ""

    # --- Boolean fields: CLI > env > YAML > default ---

    def get_bool_env(key: str) -> bool | None:
        """Return True/False from env var, or None if unset."""
        val = os.getenv(key)
        if val is None:
            return None
        return val.lower() in ("true", "1", "yes", "on")

    if insecure:
        final_insecure = True
    else:
        env_insecure = get_bool_env("WRITEFREELY_INSECURE")
        if env_insecure is not None:
            final_insecure = env_insecure
        else:
            final_insecure = bool(fb.get("insecure", False))

    if debug:
        final_debug = True
    else:
        env_debug = get_bool_env("GEMFREELY_DEBUG")
        if env_debug is not None:
            final_debug = env_debug
        else:
            final_debug = bool(fb.get("debug", False))

    # --- Numeric fields: CLI > env > YAML > default ---

    timeout_raw = os.getenv("GEMFREELY_TIMEOUT")
    if timeout_raw is not None:
        try:
            final_timeout = float(timeout_raw)
        except ValueError:
            raise ValueError(
                f"Invalid GEMFREELY_TIMEOUT '{timeout_raw}': must be a number of seconds"
            ) from None
    elif "timeout" in fb:
        final_timeout = float(fb["timeout"])
    else:
        final_timeout = 30.0

    if max_parallel_requests is not None:
        final_max_parallel = max_parallel_requests
    else:
        max_parallel_raw = os.getenv("GEMFREELY_MAX_PARALLEL_REQUESTS")
        if max_parallel_raw is not None:
            try:
                final_max_parallel = int(max_parallel_raw)
            except ValueError:
                raise ValueError(
                    f"Invalid GEMFREELY_MAX_PARALLEL_REQUESTS '{max_parallel_raw}': "
                    "must be a number between 1 and 32"
                ) from None
        elif "max_parallel_requests" in fb:
            final_max_parallel = int(fb["max_parallel_requests"])
        else:
            final_max_parallel = 1

    config = Config(
        wf_url=wf_url,
        alias=wf_alias,
        access_token=wf_token,
        insecure=final_insecure,
        debug=final_debug,
        timeout=final_timeout,
        max_parallel_requests=final_max_parallel,
    )

    validate_config(
        config, require_alias=require_alias, require_token=require_token
    )

    return config
