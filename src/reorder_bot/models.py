"""
Data models and database operations for reorder-bot.

The bot only reads from the database: stock levels and supplier records are
owned by inventory management and supplier onboarding respectively.
"""

import sqlite3
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

# Category label -> formatted item lines, read-only
Sections = Mapping[str, tuple[str, ...]]


def freeze_sections(sections: Mapping[str, Any]) -> Sections:
    """Copy label -> lines into a read-only mapping of tuples."""
    return MappingProxyType({label: tuple(lines) for label, lines in sections.items()})


@dataclass(frozen=True)
class Category:
    """A product category. Identity is the code; the label is for display."""

    code: str
    label: str = field(compare=False)


@dataclass(frozen=True)
class StockItem:
    """A stocked item with its current quantity and reorder threshold."""

    item_id: int
    name: str
    category: Category
    units_in_stock: int
    reorder_level: int

    @property
    def needs_reorder(self) -> bool:
        return self.units_in_stock < self.reorder_level


@dataclass(frozen=True)
class Supplier:
    """A supplier and the categories it can provide, in declared order."""

    supplier_id: int
    name: str
    email: str
    categories: tuple[Category, ...] = ()


@dataclass(frozen=True)
class SupplierNotification:
    """Record of the quote request sent to one supplier during a run."""

    supplier: str
    email: str
    items_by_category: Sections = field(hash=False)

    def __post_init__(self):
        object.__setattr__(self, "items_by_category", freeze_sections(self.items_by_category))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "supplier": self.supplier,
            "email": self.email,
            "items_by_category": {
                label: list(lines) for label, lines in self.items_by_category.items()
            },
        }


class StockDatabase:
    """Read-only database operations for reorder-bot."""

    def __init__(self, db_path: Path):
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def get_items_below_threshold(self) -> list[StockItem]:
        """Get items whose stock is strictly below their reorder level."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                """
                SELECT i.item_id, i.name, i.units_in_stock, i.reorder_level,
                       c.code AS category_code, c.label AS category_label
                FROM stock_items i
                JOIN categories c ON c.code = i.category_code
                WHERE i.units_in_stock < i.reorder_level
                ORDER BY i.item_id ASC
                """
            )
            return [
                StockItem(
                    item_id=row["item_id"],
                    name=row["name"],
                    category=Category(row["category_code"], row["category_label"]),
                    units_in_stock=row["units_in_stock"],
                    reorder_level=row["reorder_level"],
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    def get_suppliers(self) -> list[Supplier]:
        """Get all suppliers with their categories, in directory order."""
        conn = self._connect()
        try:
            supplier_rows = conn.execute(
                "SELECT supplier_id, name, email FROM suppliers ORDER BY supplier_id ASC"
            ).fetchall()
            categories = self._categories_by_supplier(conn)
            return [
                Supplier(
                    supplier_id=row["supplier_id"],
                    name=row["name"],
                    email=row["email"],
                    categories=tuple(categories.get(row["supplier_id"], [])),
                )
                for row in supplier_rows
            ]
        finally:
            conn.close()

    def get_supplier_by_name(self, name: str) -> Supplier | None:
        """Get a single supplier by its (unique) name."""
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT supplier_id, name, email FROM suppliers WHERE name = ?",
                (name,),
            ).fetchone()
            if row is None:
                return None
            categories = self._categories_by_supplier(conn, row["supplier_id"])
            return Supplier(
                supplier_id=row["supplier_id"],
                name=row["name"],
                email=row["email"],
                categories=tuple(categories.get(row["supplier_id"], [])),
            )
        finally:
            conn.close()

    def _categories_by_supplier(
        self,
        conn: sqlite3.Connection,
        supplier_id: int | None = None,
    ) -> dict[int, list[Category]]:
        """Map supplier_id to its categories in association order."""
        sql = """
            SELECT sc.supplier_id, c.code, c.label
            FROM supplier_categories sc
            JOIN categories c ON c.code = sc.category_code
        """
        params: tuple = ()
        if supplier_id is not None:
            sql += " WHERE sc.supplier_id = ?"
            params = (supplier_id,)
        sql += " ORDER BY sc.supplier_id ASC, sc.position ASC, sc.rowid ASC"

        result: dict[int, list[Category]] = {}
        for row in conn.execute(sql, params).fetchall():
            result.setdefault(row["supplier_id"], []).append(
                Category(row["code"], row["label"])
            )
        return result
