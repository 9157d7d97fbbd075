"""
Category grouping and supplier matching.

Both functions are pure and preserve ordering: dicts keep insertion order,
and that order decides the order of sections in the message a supplier gets.
"""

from collections.abc import Iterable

from .models import Category, StockItem, Supplier

PendingGroups = dict[Category, list[StockItem]]


def group_by_category(items: Iterable[StockItem]) -> PendingGroups:
    """
    Group candidate items by category code.

    Categories appear in order of first appearance and items keep the order
    they were received in. No sorting is applied.
    """
    groups: PendingGroups = {}
    for item in items:
        groups.setdefault(item.category, []).append(item)
    return groups


def match_supplier(supplier: Supplier, pending: PendingGroups) -> PendingGroups:
    """
    Restrict pending groups to the categories a supplier declares.

    The result follows the supplier's declared category order. A category
    declared more than once is only included the first time.
    """
    matched: PendingGroups = {}
    for category in supplier.categories:
        if category in matched:
            continue
        items = pending.get(category)
        if items:
            matched[category] = items
    return matched
