"""
Quote request composition.

Everything here is a pure function of its inputs so messages can be checked
without touching the database or the network.
"""

from dataclasses import dataclass, field

from .config import DEFAULT_SUBJECT
from .matching import PendingGroups
from .models import Sections, StockItem, Supplier, freeze_sections

GREETING = "Hello {name},"
INTRODUCTION = (
    "We are contacting you to request a restocking quote "
    "for the following items:"
)
CLOSING = (
    "Please send us your quote at your earliest convenience.\n"
    "\n"
    "Best regards,\n"
    "The Pharmacy"
)


@dataclass(frozen=True)
class ComposedMessage:
    """A rendered quote request, ready to dispatch."""

    subject: str
    body: str
    items_by_category: Sections = field(hash=False)

    def __post_init__(self):
        object.__setattr__(self, "items_by_category", freeze_sections(self.items_by_category))


def format_item(item: StockItem) -> str:
    """Render one item line, e.g. ``Aspirin (stock: 2, threshold: 10)``."""
    return f"{item.name} (stock: {int(item.units_in_stock)}, threshold: {int(item.reorder_level)})"


def items_by_label(matched: PendingGroups) -> dict[str, list[str]]:
    """
    Convert matched groups to category label -> formatted item lines.

    Distinct category codes sharing a label end up in a single section,
    positioned where the label was first seen.
    """
    sections: dict[str, list[str]] = {}
    for category, items in matched.items():
        sections.setdefault(category.label, []).extend(format_item(i) for i in items)
    return sections


def compose_body(supplier_name: str, items_by_category: Sections) -> str:
    """Render the plain-text message body."""
    lines = [GREETING.format(name=supplier_name), "", INTRODUCTION, ""]
    for label, item_lines in items_by_category.items():
        lines.append(f"=== {label} ===")
        lines.extend(f"  - {line}" for line in item_lines)
        lines.append("")
    lines.append(CLOSING)
    return "\n".join(lines)


def compose_message(
    supplier: Supplier,
    matched: PendingGroups,
    subject: str = DEFAULT_SUBJECT,
) -> ComposedMessage:
    """Compose the quote request for a supplier from its matched groups."""
    sections = items_by_label(matched)
    return ComposedMessage(
        subject=subject,
        body=compose_body(supplier.name, sections),
        items_by_category=sections,
    )
