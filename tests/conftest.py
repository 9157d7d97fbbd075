"""Shared pytest fixtures for reorder-notify tests."""

import sqlite3

import pytest
from datasette.app import Datasette

from datasette_reorder_notify.migrations import run_migrations
from reorder_bot.dispatch import DeliveryProvider, ProviderResponse


class RecordingProvider(DeliveryProvider):
    """Delivery provider that records messages instead of sending them."""

    def __init__(self):
        self.calls: list[dict] = []
        self.responses: dict[str, ProviderResponse] = {}
        self.failures: dict[str, Exception] = {}

    def reject(self, recipient: str, status_code: int = 400, body: str = "bad request"):
        self.responses[recipient] = ProviderResponse(status_code=status_code, body=body)

    def fail(self, recipient: str, error: Exception):
        self.failures[recipient] = error

    @property
    def recipients(self) -> list[str]:
        return [c["recipient"] for c in self.calls]

    async def send(self, sender, recipient, subject, body):
        self.calls.append(
            {"sender": sender, "recipient": recipient, "subject": subject, "body": body}
        )
        if recipient in self.failures:
            raise self.failures[recipient]
        return self.responses.get(recipient, ProviderResponse(status_code=202))


@pytest.fixture
def provider():
    """A fresh recording delivery provider."""
    return RecordingProvider()


@pytest.fixture
def db_path(tmp_path):
    """Create a temporary database with full schema via migrations."""
    db_file = tmp_path / "test_reorder.db"
    run_migrations(db_file, verbose=False)
    return db_file


@pytest.fixture
def seed(db_path):
    """Return a helper that inserts categories, items and suppliers.

    Example:
        seed(
            categories={"PAIN": "Pain relief"},
            items=[("Aspirin", "PAIN", 2, 10)],
            suppliers=[("SupA", "a@x.com", ["PAIN"])],
        )
    """

    def _seed(categories=None, items=None, suppliers=None):
        conn = sqlite3.connect(db_path)
        try:
            for code, label in (categories or {}).items():
                conn.execute(
                    "INSERT INTO categories (code, label) VALUES (?, ?)", (code, label)
                )
            for name, code, stock, threshold in items or []:
                conn.execute(
                    """
                    INSERT INTO stock_items
                        (name, category_code, units_in_stock, reorder_level)
                    VALUES (?, ?, ?, ?)
                    """,
                    (name, code, stock, threshold),
                )
            for name, email, codes in suppliers or []:
                cursor = conn.execute(
                    "INSERT INTO suppliers (name, email) VALUES (?, ?)", (name, email)
                )
                for position, code in enumerate(codes):
                    conn.execute(
                        """
                        INSERT INTO supplier_categories
                            (supplier_id, category_code, position)
                        VALUES (?, ?, ?)
                        """,
                        (cursor.lastrowid, code, position),
                    )
            conn.commit()
        finally:
            conn.close()

    return _seed


@pytest.fixture
def datasette(db_path):
    """Create a Datasette instance with the plugin configured."""
    return Datasette(
        [str(db_path)],
        config={
            "plugins": {
                "datasette-reorder-notify": {
                    "reorder_db_path": str(db_path),
                    "reorder": {
                        "sendgrid": {
                            "api_key": "test_key",
                            "from_email": "pharmacy@example.org",
                        }
                    },
                }
            },
        },
    )
