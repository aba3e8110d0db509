import pytest
from pydantic import ValidationError

from app.auth.dependencies import get_session_store, get_token_source
from app.auth.magic_link import FixedTokenSource, QueryTokenSource
from app.core.config import Environment, create_settings
from tests.conftest import make_settings


class TestSettings:
    """Tests for configuration validation."""

    def test_defaults(self):
        settings = make_settings()
        assert settings.use_whitelist is False
        assert settings.address == "localhost:3000"
        assert settings.full_address == "http://localhost:3000"
        assert settings.host == "localhost"
        assert settings.port == 3000
        assert settings.session_duration_minutes == 60
        assert settings.magic_link_url == "http://localhost:3000/authenticate"

    def test_placeholder_session_secret_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(session_secret="your-secret-key")

    def test_short_session_secret_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(session_secret="too-short")

    def test_bad_address_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(address="localhost")

    def test_token_override_refused_in_production(self):
        with pytest.raises(ValidationError):
            make_settings(environment=Environment.PRODUCTION, magic_link_token_override="fixed")

    def test_whitelist_flag_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("USEWHITELIST", "true")
        assert make_settings().use_whitelist is True

    def test_missing_required_config_exits(self, monkeypatch, tmp_path):
        # No .env.local in the working directory, so only the environment counts
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SESSION_SECRET", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            create_settings()
        assert exc_info.value.code == 1


class TestDependencyWiring:
    """Tests for settings-driven component construction."""

    def test_token_source_defaults_to_query_string(self):
        assert isinstance(get_token_source(make_settings()), QueryTokenSource)

    def test_token_source_uses_fixed_token_when_configured(self):
        source = get_token_source(make_settings(magic_link_token_override="magic-token-fixed"))
        assert isinstance(source, FixedTokenSource)
        assert source.token == "magic-token-fixed"

    def test_session_cookie_is_secure_in_production(self):
        assert get_session_store(make_settings()).secure is False
        assert get_session_store(make_settings(environment=Environment.PRODUCTION)).secure is True
