"""
Tests for environment-driven settings
"""
import os
from unittest.mock import patch

import pytest

from bioexplorer.config import Settings
from bioexplorer.errors import MissingCredentialError


class TestSettings:
    """Test settings parsing and credential lookup"""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.generation_models == ["gemini-2.0-flash", "gemini-1.5-flash", "gemini-1.5-pro"]
        assert settings.max_context_chars == 10000
        assert settings.chunk_max_length == 7000
        assert settings.embedding_dimensions == 768

    def test_generation_models_from_comma_list(self):
        with patch.dict(os.environ, {"GENERATION_MODELS": "gemini-2.5-flash, gemini-2.0-flash ,"}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.generation_models == ["gemini-2.5-flash", "gemini-2.0-flash"]

    def test_numeric_overrides(self):
        env = {"MAX_CONTEXT_CHARS": "2000", "EMBED_DELAY_SECONDS": "0"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.max_context_chars == 2000
        assert settings.embed_delay_seconds == 0

    def test_gemini_key_takes_precedence(self):
        env = {"GOOGLE_GEMINI_AI_API_KEY": "primary", "GOOGLE_API_KEY": "secondary"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.require_api_key() == "primary"

    def test_google_api_key_fallback(self):
        with patch.dict(os.environ, {"GOOGLE_API_KEY": "secondary"}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.gemini_api_key == "secondary"

    def test_missing_key_raises(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        with pytest.raises(MissingCredentialError):
            settings.require_api_key()

    def test_ensure_directories(self, tmp_path):
        settings = Settings(
            _env_file=None,
            chroma_persist_dir=str(tmp_path / "chroma"),
            database_url=f"sqlite:///{tmp_path / 'db' / 'pubs.db'}",
        )

        settings.ensure_directories()

        assert (tmp_path / "chroma").is_dir()
        assert (tmp_path / "db").is_dir()
