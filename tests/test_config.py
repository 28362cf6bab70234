import pytest
from pydantic import ValidationError

from openapi_context.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("SPEC_PATH", "CHUNK_SIZE", "LOG_LEVEL"):
            monkeypatch.delenv(f"OPENAPI_CONTEXT_{name}", raising=False)
        settings = Settings()
        assert settings.spec_path == "/app/spec"
        assert settings.chunk_size == 2000
        assert settings.smart_breaks is True
        assert settings.max_examples == 1
        assert settings.include_descriptions is False

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("OPENAPI_CONTEXT_CHUNK_SIZE", "500")
        monkeypatch.setenv("OPENAPI_CONTEXT_SMART_BREAKS", "false")
        settings = Settings()
        assert settings.chunk_size == 500
        assert settings.smart_breaks is False

    def test_chunk_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(chunk_size=0)

    def test_get_settings_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()
