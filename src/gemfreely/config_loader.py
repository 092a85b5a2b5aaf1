"""
YAML config files for gemfreely.

A config file holds up to three sections::

    writefreely:   # connection: url, alias, token, username, ...
    sync:          # named sync profiles: feed_url, markers, freshness, ...
    logging:       # level, file, format

Files are looked up in ``$GEMFREELY_CONFIG``, ``./.gemfreely/`` and
``~/.config/gemfreely/``.  A project file replaces whole sections of the
global file, so a project that defines ``sync`` does not inherit the
global profiles.  String values may reference the environment as
``${VAR}`` or ``${VAR:-default}``, which keeps tokens out of the file::

    writefreely:
      token: ${WRITEFREELY_TOKEN}
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GEMFREELY_CONFIG"

CONFIG_SECTIONS = ("writefreely", "sync", "logging")

_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+?)(?::-(?P<default>.*?))?\}")


def expand_env(value: Any) -> Any:
    """Expand ``${VAR}`` references in every string inside *value*.

    An unset or empty variable expands to its default, or to ``""``.
    Non-string scalars are returned unchanged.
    """
    if isinstance(value, str):
        return _ENV_REFERENCE.sub(_env_value, value)
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    return value


def _env_value(match: re.Match) -> str:
    return os.environ.get(match["name"]) or match["default"] or ""


def config_search_path() -> list[Path]:
    """Return every place a config file may live, highest precedence first."""
    paths: list[Path] = []
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        paths.append(Path(explicit).expanduser().resolve())

    project = Path.cwd() / ".gemfreely"
    paths.append(project / "config.yml")
    paths.append(project / "config.yaml")
    paths.append(Path.home() / ".config" / "gemfreely" / "config.yml")
    return paths


def discover_config_files() -> list[Path]:
    """Return the config files that exist, highest precedence first."""
    return [path for path in config_search_path() if path.is_file()]


def read_config_file(path: Path) -> dict[str, Any]:
    """Read the known sections of one config file.

    Unknown top-level keys are logged and dropped.  An empty file reads
    as ``{}``.

    Raises:
        ValueError: If the file is not valid YAML or its root is not a
            mapping.
    """
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"{path} must be a mapping of sections, not {type(data).__name__}"
        )

    unknown = sorted(str(key) for key in data if key not in CONFIG_SECTIONS)
    if unknown:
        logger.warning("Ignoring unknown sections in %s: %s", path, ", ".join(unknown))
    return {key: data[key] for key in CONFIG_SECTIONS if key in data}


def load_hierarchical_config() -> dict[str, Any]:
    """Merge all discovered config files and expand env references.

    Returns ``{}`` when no config file exists.
    """
    merged: dict[str, Any] = {}
    for path in reversed(discover_config_files()):
        logger.debug("Loading config: %s", path)
        merged.update(read_config_file(path))
    return expand_env(merged)
