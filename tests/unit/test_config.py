"""Unit tests for gateway, server and client configuration."""

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from docchat.config import (
    MAX_UPLOAD_SIZE,
    ClientConfig,
    GatewayConfig,
    ServerConfig,
    get_gateway_config,
)


class TestGatewayConfig:
    """Tests for GatewayConfig validation."""

    def test_valid_config_with_all_fields(self) -> None:
        """Config accepts valid values for all fields."""
        config = GatewayConfig(
            document_store_url="https://store.example",
            document_store_api_key="key-123",
            language_model_url="https://llm.example/v1/chat/completions",
            language_model_name="llama",
            language_model_api_key="llm-key",
            upstream_timeout=10.0,
            upload_dir=Path("/tmp/uploads"),
        )

        assert config.document_store_url == "https://store.example"
        assert config.document_store_api_key == "key-123"
        assert config.language_model_api_key == "llm-key"
        assert config.upstream_timeout == 10.0
        assert config.upload_dir == Path("/tmp/uploads")

    def test_config_with_default_values(self) -> None:
        """Config uses sensible defaults when only the API key is provided."""
        with patch.dict(
            "os.environ",
            {
                "SUPAVEC_API_URL": "https://api.supavec.com",
                "LLM_API_URL": "https://llama3b.gaia.domains/v1/chat/completions",
                "LLM_MODEL": "llama",
                "UPSTREAM_TIMEOUT": "60",
                "UPLOAD_DIR": "uploads",
            },
        ):
            config = GatewayConfig(document_store_api_key="key")

        assert config.document_store_url == "https://api.supavec.com"
        assert config.language_model_url == "https://llama3b.gaia.domains/v1/chat/completions"
        assert config.language_model_name == "llama"
        assert config.upstream_timeout == 60.0
        assert config.upload_dir == Path("uploads")
        assert config.max_upload_size == MAX_UPLOAD_SIZE == 100 * 1024 * 1024

    def test_config_fails_with_missing_api_key(self) -> None:
        """Config raises when the document store API key is missing."""
        with pytest.raises(ValidationError) as exc_info:
            GatewayConfig(document_store_api_key="")

        assert "SUPAVEC_API_KEY is required" in str(exc_info.value)

    def test_config_fails_with_whitespace_api_key(self) -> None:
        """Config rejects whitespace-only API key."""
        with pytest.raises(ValidationError) as exc_info:
            GatewayConfig(document_store_api_key="   ")

        assert "SUPAVEC_API_KEY is required" in str(exc_info.value)

    def test_config_strips_api_key_whitespace(self) -> None:
        """Config strips leading/trailing whitespace from API key."""
        config = GatewayConfig(document_store_api_key="  key-123  ")

        assert config.document_store_api_key == "key-123"

    def test_config_strips_trailing_slash_from_store_url(self) -> None:
        config = GatewayConfig(
            document_store_api_key="key", document_store_url="https://store.example/"
        )

        assert config.document_store_url == "https://store.example"

    def test_config_rejects_non_positive_timeout(self) -> None:
        """Config rejects a zero upstream timeout."""
        with pytest.raises(ValidationError) as exc_info:
            GatewayConfig(document_store_api_key="key", upstream_timeout=0)

        assert "upstream_timeout" in str(exc_info.value)

    def test_get_config_from_environment(self) -> None:
        """get_gateway_config loads values from environment."""
        with patch.dict(
            "os.environ",
            {"SUPAVEC_API_KEY": "env-key", "LLM_API_KEY": "llm-env-key", "UPSTREAM_TIMEOUT": "12.5"},
        ):
            config = get_gateway_config()

        assert config.document_store_api_key == "env-key"
        assert config.language_model_api_key == "llm-env-key"
        assert config.upstream_timeout == 12.5

    def test_get_config_fails_without_env_var(self) -> None:
        """get_gateway_config raises when SUPAVEC_API_KEY is not set."""
        with (
            patch.dict("os.environ", {"SUPAVEC_API_KEY": ""}),
            pytest.raises(ValidationError),
        ):
            get_gateway_config()

    @pytest.mark.parametrize(
        "env",
        [
            {"SUPAVEC_API_KEY": "   "},
            {"SUPAVEC_API_KEY": "key", "UPSTREAM_TIMEOUT": "-5"},
            {"SUPAVEC_API_KEY": "key", "UPSTREAM_TIMEOUT": "0"},
        ],
    )
    def test_environment_values_are_validated(self, env: dict[str, str]) -> None:
        """Values read from the environment go through the same validators."""
        with patch.dict("os.environ", env), pytest.raises(ValidationError):
            GatewayConfig()

    def test_environment_values_are_normalized(self) -> None:
        with patch.dict(
            "os.environ",
            {"SUPAVEC_API_KEY": "  env-key  ", "SUPAVEC_API_URL": "https://store.example/"},
        ):
            config = GatewayConfig()

        assert config.document_store_api_key == "env-key"
        assert config.document_store_url == "https://store.example"


class TestServerConfig:
    """Tests for ServerConfig defaults."""

    def test_defaults(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            config = ServerConfig()

        assert config.frontend_url == "http://localhost:3000"
        assert config.port == 3001
        assert config.host == "0.0.0.0"

    def test_reads_environment(self) -> None:
        with patch.dict("os.environ", {"FRONTEND_URL": "https://app.example", "PORT": "8081"}):
            config = ServerConfig()

        assert config.frontend_url == "https://app.example"
        assert config.port == 8081

    def test_rejects_out_of_range_port(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)

    def test_rejects_out_of_range_port_from_environment(self) -> None:
        with patch.dict("os.environ", {"PORT": "0"}), pytest.raises(ValidationError):
            ServerConfig()


class TestClientConfig:
    """Tests for ClientConfig defaults."""

    def test_defaults(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            config = ClientConfig()

        assert config.api_base_url == "http://localhost:3001/api"
        assert config.page_size == 10
        assert config.timeout == 120.0

    def test_strips_trailing_slash(self) -> None:
        config = ClientConfig(api_base_url="https://gateway.example/api/")

        assert config.api_base_url == "https://gateway.example/api"

    def test_strips_trailing_slash_from_environment(self) -> None:
        """A trailing slash in API_BASE_URL would otherwise produce '//files' URLs."""
        with patch.dict("os.environ", {"API_BASE_URL": "http://gateway.example/api/"}):
            config = ClientConfig()

        assert config.api_base_url == "http://gateway.example/api"

    def test_rejects_non_positive_timeout_from_environment(self) -> None:
        with patch.dict("os.environ", {"CLIENT_TIMEOUT": "-1"}), pytest.raises(ValidationError):
            ClientConfig()
