"""
Unit tests for settings and credential loading.
"""

import pytest
from pydantic import ValidationError

from comfyui_nodes.config import (
    ComfyUICredentials,
    ComfyUISettings,
    load_comfyui_credentials,
    load_x_credentials,
)
from comfyui_nodes.exceptions import CredentialsError


class TestComfyUISettings:
    """Test cases for ComfyUISettings."""

    def test_defaults(self):
        settings = ComfyUISettings(_env_file=None)

        assert settings.poll_interval_seconds == 10.0
        assert settings.initial_poll_delay_seconds is None
        assert settings.default_timeout_minutes == 30.0
        assert settings.download_attempts == 3
        assert settings.download_retry_delay_seconds == 2.0
        assert settings.log_level == "INFO"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("COMFYUI_POLL_INTERVAL_SECONDS", "2.5")
        monkeypatch.setenv("COMFYUI_API_URL", "http://gpu-box:8188")
        monkeypatch.setenv("COMFYUI_LOG_LEVEL", "debug")

        settings = ComfyUISettings(_env_file=None)

        assert settings.poll_interval_seconds == 2.5
        assert settings.api_url == "http://gpu-box:8188"
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            ComfyUISettings(_env_file=None, log_level="chatty")

    def test_non_positive_interval(self):
        with pytest.raises(ValidationError):
            ComfyUISettings(_env_file=None, poll_interval_seconds=0)


class TestCredentials:
    """Test cases for credential models."""

    def test_host_aliases_and_trailing_slash(self):
        credentials = load_comfyui_credentials({"apiUrl": "http://comfy.test/", "apiKey": "k"})

        assert credentials.api_url == "http://comfy.test"
        assert credentials.auth_headers() == {"Authorization": "Bearer k"}

    def test_no_key_no_header(self):
        assert ComfyUICredentials(api_url="http://comfy.test").auth_headers() == {}

    @pytest.mark.parametrize("raw", [None, {}, {"apiKey": "k"}, {"apiUrl": ""}])
    def test_invalid_comfyui_credentials(self, raw):
        with pytest.raises(CredentialsError):
            load_comfyui_credentials(raw)

    def test_x_credentials(self):
        assert load_x_credentials({"accessToken": "tok"}).access_token == "tok"

    def test_missing_x_credentials(self):
        with pytest.raises(CredentialsError):
            load_x_credentials({"clientId": "abc"})
