"""Tests for environment configuration"""

from pathlib import Path

import pytest

from acordao_drafter.config import MODELS, load_settings, resolve_model


@pytest.fixture
def clean_env(monkeypatch):
    for name in ('ANTHROPIC_API_KEY', 'MODEL', 'MAX_OUTPUT_TOKENS', 'PDF_MODE', 'CASES_DIR', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr('acordao_drafter.config.load_dotenv', lambda: None)
    return monkeypatch


class TestResolveModel:

    def test_aliases(self):
        assert resolve_model('sonnet') == MODELS['sonnet']
        assert resolve_model(' OPUS ') == MODELS['opus']

    def test_full_id_passes_through(self):
        assert resolve_model('claude-3-5-haiku-latest') == 'claude-3-5-haiku-latest'


class TestLoadSettings:

    def test_defaults(self, clean_env):
        settings = load_settings()
        assert settings.api_key is None
        assert settings.model == MODELS['sonnet']
        assert settings.max_output_tokens == 64000
        assert settings.pdf_mode == 'document'

    def test_from_environment(self, clean_env, tmp_path):
        clean_env.setenv('ANTHROPIC_API_KEY', 'sk-test')
        clean_env.setenv('MODEL', 'opus')
        clean_env.setenv('MAX_OUTPUT_TOKENS', '8000')
        clean_env.setenv('PDF_MODE', 'TEXT')
        clean_env.setenv('CASES_DIR', str(tmp_path))
        clean_env.setenv('LOG_LEVEL', 'debug')

        settings = load_settings()
        assert settings.api_key == 'sk-test'
        assert settings.model == MODELS['opus']
        assert settings.max_output_tokens == 8000
        assert settings.pdf_mode == 'text'
        assert settings.cases_dir == Path(tmp_path)
        assert settings.log_level == 'DEBUG'

    def test_invalid_pdf_mode(self, clean_env):
        clean_env.setenv('PDF_MODE', 'image')
        with pytest.raises(ValueError):
            load_settings()

    def test_invalid_token_count(self, clean_env):
        clean_env.setenv('MAX_OUTPUT_TOKENS', 'many')
        with pytest.raises(ValueError):
            load_settings()
