"""Unit tests for settings loading."""

from pathlib import Path

import pytest
import yaml

from sprintrack import config
from sprintrack.config import Settings, load_settings
from sprintrack.recovery import FatalError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate each test from the real config file and environment."""
    monkeypatch.setattr(config, "DEFAULT_CONFIG_FILE", tmp_path / "absent.yml")
    for name in config.ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


def _write_config(tmp_path, content) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump(content))
    return path


class TestLoadSettings:
    """Test the file then environment layering."""

    def test_defaults_without_file(self):
        settings = load_settings()
        assert settings.backend == "file"
        assert settings.data_file == config.DEFAULT_DATA_FILE
        assert settings.firebase.database_url is None

    def test_reads_file(self, tmp_path):
        path = _write_config(tmp_path, {"backend": "memory", "memory_latency": 0.25})
        settings = load_settings(path)
        assert settings.backend == "memory"
        assert settings.memory_latency == 0.25

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = _write_config(tmp_path, {"backend": "memory", "firebase": {"timeout": 5}})
        monkeypatch.setenv("SPRINTRACK_BACKEND", "firebase")
        monkeypatch.setenv("FIREBASE_DATABASEURL", "https://demo.firebaseio.com")
        monkeypatch.setenv("FIREBASE_AUTH", "secret")

        settings = load_settings(path)

        assert settings.backend == "firebase"
        assert settings.firebase.database_url == "https://demo.firebaseio.com"
        assert settings.firebase.auth_token == "secret"
        assert settings.firebase.timeout == 5

    def test_web_api_key_is_not_a_credential(self, monkeypatch):
        """Test FIREBASE_APIKEY never becomes the REST auth parameter."""
        monkeypatch.setenv("FIREBASE_APIKEY", "AIza-web-key")
        assert load_settings().firebase.auth_token is None

    def test_empty_section_takes_overrides(self, tmp_path, monkeypatch):
        """Test an empty `firebase:` section still accepts environment values."""
        path = tmp_path / "config.yml"
        path.write_text("backend: firebase\nfirebase:\n")
        monkeypatch.setenv("FIREBASE_DATABASEURL", "https://demo.firebaseio.com")

        settings = load_settings(path)

        assert settings.firebase.database_url == "https://demo.firebaseio.com"
        assert settings.firebase.timeout == 30.0

    def test_data_file_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SPRINTRACK_DATA_FILE", str(tmp_path / "store.yml"))
        assert load_settings().data_file == tmp_path / "store.yml"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FatalError):
            load_settings(tmp_path / "nope.yml")

    def test_firebase_without_url(self, monkeypatch):
        monkeypatch.setenv("SPRINTRACK_BACKEND", "firebase")
        with pytest.raises(FatalError):
            load_settings()

    def test_unknown_backend(self, tmp_path):
        path = _write_config(tmp_path, {"backend": "sqlite"})
        with pytest.raises(FatalError):
            load_settings(path)

    def test_settings_model_directly(self):
        assert Settings(backend="memory").memory_latency == 0.0
