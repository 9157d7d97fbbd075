"""
Configuration for reorder-bot.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

PLUGIN_NAME = "datasette-reorder-notify"

DEFAULT_FROM_NAME = "Pharmacy"
DEFAULT_SUBJECT = "Restocking quote request"


@dataclass
class SendGridConfig:
    """SendGrid delivery provider configuration."""

    api_base: str = "https://api.sendgrid.com/v3"
    api_key: str | None = None
    api_key_env: str | None = "SENDGRID_API_KEY"
    from_email: str = ""
    from_name: str = DEFAULT_FROM_NAME
    timeout_seconds: float = 10.0

    def get_api_key(self) -> str | None:
        """Get API key from config or environment."""
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class NotificationConfig:
    """Wording of the quote request sent to suppliers."""

    subject: str = DEFAULT_SUBJECT


@dataclass
class ReorderConfig:
    """Complete reorder-bot configuration."""

    db_path: Path = field(default_factory=lambda: Path("reorder.db"))

    sendgrid: SendGridConfig = field(default_factory=SendGridConfig)
    notification: NotificationConfig = field(default_factory=NotificationConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReorderConfig":
        """Create config from a dictionary (e.g., from YAML)."""
        config = cls()

        if "db_path" in data:
            config.db_path = Path(data["db_path"])

        if "sendgrid" in data:
            sg = data["sendgrid"]
            config.sendgrid = SendGridConfig(
                api_base=sg.get("api_base", config.sendgrid.api_base),
                api_key=sg.get("api_key"),
                api_key_env=sg.get("api_key_env", config.sendgrid.api_key_env),
                from_email=sg.get("from_email", ""),
                # An empty display name falls back to the default
                from_name=sg.get("from_name") or DEFAULT_FROM_NAME,
                timeout_seconds=sg.get("timeout_seconds", 10.0),
            )

        if "notification" in data:
            notification = data["notification"]
            config.notification = NotificationConfig(
                subject=notification.get("subject") or DEFAULT_SUBJECT,
            )

        return config

    @classmethod
    def from_plugin_config(cls, plugin_config: dict[str, Any] | None) -> "ReorderConfig":
        """Build config from the datasette-reorder-notify plugin section."""
        plugin_config = plugin_config or {}
        reorder_config = plugin_config.get("reorder", {}) or {}

        config = cls.from_dict(reorder_config)

        # db_path may live at the plugin level, shared with the route
        if "db_path" not in reorder_config:
            config.db_path = Path(plugin_config.get("reorder_db_path", "reorder.db"))

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "ReorderConfig":
        """Load config from a YAML file (datasette.yaml format)."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        plugin_config = data.get("plugins", {}).get(PLUGIN_NAME, {})
        return cls.from_plugin_config(plugin_config)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for JSON serialization (no secrets)."""
        return {
            "db_path": str(self.db_path),
            "sendgrid": {
                "api_base": self.sendgrid.api_base,
                "api_key_env": self.sendgrid.api_key_env,
                "from_email": self.sendgrid.from_email,
                "from_name": self.sendgrid.from_name,
                "timeout_seconds": self.sendgrid.timeout_seconds,
            },
            "notification": {
                "subject": self.notification.subject,
            },
        }
