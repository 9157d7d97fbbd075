"""Tests for reorder-bot configuration."""

import tempfile
from pathlib import Path

from reorder_bot.config import (
    DEFAULT_FROM_NAME,
    DEFAULT_SUBJECT,
    ReorderConfig,
    SendGridConfig,
)


class TestReorderConfig:
    """Test configuration loading and parsing."""

    def test_default_config(self):
        """Default config should have sensible values."""
        config = ReorderConfig()

        assert config.db_path == Path("reorder.db")
        assert config.sendgrid.api_base == "https://api.sendgrid.com/v3"
        assert config.sendgrid.from_name == DEFAULT_FROM_NAME
        assert config.sendgrid.timeout_seconds == 10.0
        assert config.notification.subject == DEFAULT_SUBJECT

    def test_from_dict(self):
        """Should parse config from dictionary."""
        data = {
            "db_path": "stock.db",
            "sendgrid": {
                "api_key_env": "MY_SENDGRID_KEY",
                "from_email": "pharmacy@example.org",
                "from_name": "Central Pharmacy",
                "timeout_seconds": 3,
            },
            "notification": {"subject": "Quote needed"},
        }

        config = ReorderConfig.from_dict(data)

        assert config.db_path == Path("stock.db")
        assert config.sendgrid.api_key_env == "MY_SENDGRID_KEY"
        assert config.sendgrid.from_email == "pharmacy@example.org"
        assert config.sendgrid.from_name == "Central Pharmacy"
        assert config.sendgrid.timeout_seconds == 3
        assert config.notification.subject == "Quote needed"

    def test_missing_from_name_falls_back(self):
        """Sender display name defaults when absent or empty."""
        config = ReorderConfig.from_dict({"sendgrid": {"from_email": "p@example.org"}})
        assert config.sendgrid.from_name == DEFAULT_FROM_NAME

        config = ReorderConfig.from_dict({"sendgrid": {"from_name": ""}})
        assert config.sendgrid.from_name == DEFAULT_FROM_NAME

    def test_from_yaml(self):
        """Should load config from YAML file."""
        yaml_content = """
plugins:
  datasette-reorder-notify:
    reorder_db_path: "pharmacy.db"
    reorder:
      sendgrid:
        api_base: "http://127.0.0.1:9010/v3"
        from_email: "pharmacy@example.org"
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            f.flush()
            yaml_path = Path(f.name)

        try:
            config = ReorderConfig.from_yaml(yaml_path)

            assert config.db_path == Path("pharmacy.db")
            assert config.sendgrid.api_base == "http://127.0.0.1:9010/v3"
            assert config.sendgrid.from_email == "pharmacy@example.org"
        finally:
            yaml_path.unlink()

    def test_from_yaml_bot_db_path_wins(self):
        """A db_path in the reorder section overrides the plugin-level one."""
        yaml_content = """
plugins:
  datasette-reorder-notify:
    reorder_db_path: "plugin.db"
    reorder:
      db_path: "bot.db"
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            f.flush()
            yaml_path = Path(f.name)

        try:
            config = ReorderConfig.from_yaml(yaml_path)
            assert config.db_path == Path("bot.db")
        finally:
            yaml_path.unlink()

    def test_from_yaml_missing_file(self):
        """Should return defaults for missing file."""
        config = ReorderConfig.from_yaml(Path("/nonexistent/config.yaml"))

        assert config.db_path == Path("reorder.db")
        assert config.sendgrid.from_name == DEFAULT_FROM_NAME

    def test_from_plugin_config_none(self):
        """Missing plugin config gives defaults."""
        config = ReorderConfig.from_plugin_config(None)
        assert config.db_path == Path("reorder.db")

    def test_to_dict_omits_secrets(self):
        """Should serialize config without the API key."""
        config = ReorderConfig()
        config.sendgrid.api_key = "secret"

        data = config.to_dict()

        assert "api_key" not in data["sendgrid"]
        assert "secret" not in str(data)
        assert data["notification"]["subject"] == DEFAULT_SUBJECT


class TestSendGridConfig:
    """Test SendGrid configuration."""

    def test_get_api_key_from_config(self):
        config = SendGridConfig(api_key="direct_key")
        assert config.get_api_key() == "direct_key"

    def test_get_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("TEST_SENDGRID_KEY", "env_key")
        config = SendGridConfig(api_key_env="TEST_SENDGRID_KEY")
        assert config.get_api_key() == "env_key"

    def test_get_api_key_prefers_direct(self, monkeypatch):
        monkeypatch.setenv("TEST_SENDGRID_KEY", "env_key")
        config = SendGridConfig(api_key="direct", api_key_env="TEST_SENDGRID_KEY")
        assert config.get_api_key() == "direct"

    def test_get_api_key_none(self, monkeypatch):
        monkeypatch.delenv("SENDGRID_API_KEY", raising=False)
        config = SendGridConfig()
        assert config.get_api_key() is None
