import logging

import pytest

from core import config


class TestValidateRequiredEnv:
    def test_missing_token_raises(self, monkeypatch):
        monkeypatch.setattr(config, "DISCORD_TOKEN", "")
        with pytest.raises(EnvironmentError, match="DISCORD_TOKEN"):
            config.validate_required_env()

    def test_bad_url_only_warns(self, monkeypatch, caplog):
        monkeypatch.setattr(config, "DISCORD_TOKEN", "token")
        monkeypatch.setattr(config, "NEWSDESK_API_URL", "localhost:8080")
        with caplog.at_level(logging.WARNING, logger="newsdesk.config"):
            config.validate_required_env()
        assert "NEWSDESK_API_URL" in caplog.text

    def test_defaults(self):
        assert config.DEFAULT_PAGE == 1
        assert config.DEFAULT_PAGE_SIZE in config.PAGE_SIZE_CHOICES
