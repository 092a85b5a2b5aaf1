"""Tests for gemfreely.config -- env-var config loading and validation.

NOT to be confused with test_config_loader.py (hierarchical YAML config)
or test_config_schema.py (Pydantic models). This tests the connection
bootstrap path: validate_config() and load_config().
"""

import logging

import pytest

from gemfreely.config import Config, load_config, validate_config

_ENV_VARS = (
    "WRITEFREELY_URL",
    "WRITEFREELY_ALIAS",
    "WRITEFREELY_TOKEN",
    "WRITEFREELY_INSECURE",
    "GEMFREELY_DEBUG",
    "GEMFREELY_TIMEOUT",
    "GEMFREELY_MAX_PARALLEL_REQUESTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# -------------------------------------------------------------------------
# validate_config()
# -------------------------------------------------------------------------


class TestValidateConfig:
    """Tests for validate_config() -- URL format and required values."""

    def test_valid_config(self):
        config = Config(wf_url="https://blog.example.com", alias="gemlog")
        validate_config(config)  # should not raise

    def test_http_url_valid(self):
        config = Config(wf_url="http://localhost:8080")
        validate_config(config)

    def test_invalid_url_no_scheme(self):
        config = Config(wf_url="blog.example.com")
        with pytest.raises(
            ValueError, match="must start with http:// or https://"
        ):
            validate_config(config)

    def test_gemini_url_rejected(self):
        config = Config(wf_url="gemini://example.org")
        with pytest.raises(
            ValueError, match="must start with http:// or https://"
        ):
            validate_config(config)

    def test_empty_host_url(self):
        """URL with scheme but no hostname should be rejected."""
        config = Config(wf_url="https://")
        with pytest.raises(ValueError, match="must include a hostname"):
            validate_config(config)

    def test_trailing_slash_stripped(self):
        config = Config(wf_url="https://blog.example.com/")
        validate_config(config)
        assert config.wf_url == "https://blog.example.com"

    def test_whitespace_stripped(self):
        config = Config(
            wf_url="  https://blog.example.com  ",
            alias=" gemlog ",
            access_token=" tok ",
        )
        validate_config(config)
        assert config.wf_url == "https://blog.example.com"
        assert config.alias == "gemlog"
        assert config.access_token == "tok"

    def test_alias_required(self):
        config = Config(wf_url="https://blog.example.com", alias="  ")
        with pytest.raises(ValueError, match="alias cannot be empty"):
            validate_config(config, require_alias=True)

    def test_alias_optional_by_default(self):
        config = Config(wf_url="https://blog.example.com")
        validate_config(config)

    def test_token_required(self):
        config = Config(wf_url="https://blog.example.com", alias="gemlog")
        with pytest.raises(ValueError, match="access token required"):
            validate_config(config, require_token=True)

    @pytest.mark.parametrize("value", [0, 33, -1])
    def test_max_parallel_out_of_range(self, value):
        config = Config(
            wf_url="https://blog.example.com", max_parallel_requests=value
        )
        with pytest.raises(ValueError, match="between 1 and 32"):
            validate_config(config)

    def test_timeout_must_be_positive(self):
        config = Config(wf_url="https://blog.example.com", timeout=0)
        with pytest.raises(ValueError, match="greater than 0"):
            validate_config(config)

    def test_insecure_logs_warning(self, caplog):
        config = Config(wf_url="https://blog.example.com", insecure=True)
        with caplog.at_level(logging.WARNING, logger="gemfreely.config"):
            validate_config(config)
        assert "SSL verification disabled" in caplog.text

    def test_secure_no_warning(self, caplog):
        config = Config(wf_url="https://blog.example.com")
        with caplog.at_level(logging.WARNING, logger="gemfreely.config"):
            validate_config(config)
        assert "SSL verification disabled" not in caplog.text


# -------------------------------------------------------------------------
# load_config()
# -------------------------------------------------------------------------


class TestLoadConfig:
    """Tests for load_config() -- env vars, CLI overrides, YAML fallbacks."""

    def test_load_from_env_vars(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        monkeypatch.setenv("WRITEFREELY_ALIAS", "gemlog")
        monkeypatch.setenv("WRITEFREELY_TOKEN", "secret")

        config = load_config()

        assert config.wf_url == "https://blog.example.com"
        assert config.alias == "gemlog"
        assert config.access_token == "secret"

    def test_cli_args_override_env(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://env.example.com")
        monkeypatch.setenv("WRITEFREELY_ALIAS", "env-alias")
        monkeypatch.setenv("WRITEFREELY_TOKEN", "env-token")

        config = load_config(
            url="https://cli.example.com",
            alias="cli-alias",
            token="cli-token",
        )

        assert config.wf_url == "https://cli.example.com"
        assert config.alias == "cli-alias"
        assert config.access_token == "cli-token"

    def test_env_overrides_yaml(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_ALIAS", "env-alias")

        config = load_config(
            yaml_fallbacks={
                "url": "https://yaml.example.com",
                "alias": "yaml-alias",
            }
        )

        assert config.wf_url == "https://yaml.example.com"
        assert config.alias == "env-alias"

    def test_missing_url_raises(self):
        with pytest.raises(ValueError, match="WriteFreely URL not found"):
            load_config()

    def test_missing_token_raises_when_required(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        with pytest.raises(ValueError, match="gemfreely login"):
            load_config(require_token=True)

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")

        config = load_config()

        assert config.alias == ""
        assert config.access_token == ""
        assert config.insecure is False
        assert config.debug is False
        assert config.timeout == 30.0
        assert config.max_parallel_requests == 1

    # --- Boolean env var parsing ---

    @pytest.mark.parametrize("value", ["true", "1", "yes", "on", "TRUE"])
    def test_insecure_truthy_values(self, monkeypatch, value):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        monkeypatch.setenv("WRITEFREELY_INSECURE", value)

        assert load_config().insecure is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "random"])
    def test_insecure_falsy_values(self, monkeypatch, value):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        monkeypatch.setenv("WRITEFREELY_INSECURE", value)

        assert load_config().insecure is False

    def test_insecure_env_false_beats_yaml_true(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        monkeypatch.setenv("WRITEFREELY_INSECURE", "false")

        config = load_config(yaml_fallbacks={"insecure": True})
        assert config.insecure is False

    def test_debug_from_env(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        monkeypatch.setenv("GEMFREELY_DEBUG", "true")

        assert load_config().debug is True

    # --- Numeric fields ---

    def test_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        monkeypatch.setenv("GEMFREELY_TIMEOUT", "5.5")

        assert load_config().timeout == 5.5

    def test_timeout_non_numeric(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        monkeypatch.setenv("GEMFREELY_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="Invalid GEMFREELY_TIMEOUT 'soon'"):
            load_config()

    def test_max_parallel_cli_beats_env(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        monkeypatch.setenv("GEMFREELY_MAX_PARALLEL_REQUESTS", "8")

        assert load_config(max_parallel_requests=3).max_parallel_requests == 3

    def test_max_parallel_from_env(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        monkeypatch.setenv("GEMFREELY_MAX_PARALLEL_REQUESTS", "8")

        assert load_config().max_parallel_requests == 8

    def test_max_parallel_from_yaml(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")

        config = load_config(yaml_fallbacks={"max_parallel_requests": 4})
        assert config.max_parallel_requests == 4

    def test_max_parallel_non_numeric(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")
        monkeypatch.setenv("GEMFREELY_MAX_PARALLEL_REQUESTS", "abc")

        with pytest.raises(
            ValueError, match="Invalid GEMFREELY_MAX_PARALLEL_REQUESTS 'abc'"
        ):
            load_config()

    def test_max_parallel_out_of_range(self, monkeypatch):
        monkeypatch.setenv("WRITEFREELY_URL", "https://blog.example.com")

        with pytest.raises(ValueError, match="between 1 and 32"):
            load_config(max_parallel_requests=64)
