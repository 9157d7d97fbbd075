"""
reorder-bot: Restocking quote requests for low-stock items.

Finds stock items that have fallen below their reorder threshold, groups them
by category, and sends each supplier able to provide those categories a single
consolidated quote request.
"""

__version__ = "0.1.0"
