"""
CLI runner for reorder-bot.

Usage:
    python -m reorder_bot.run [OPTIONS]

    # Check stock and send quote requests once
    python -m reorder_bot.run --once

    # Show what would be sent without sending
    python -m reorder_bot.run --dry-run

    # Preview the message for one supplier
    python -m reorder_bot.run --supplier "Acme Medical"
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .config import ReorderConfig
from .dispatch import DispatchError
from .models import StockDatabase, SupplierNotification
from .pipeline import ReorderPipeline

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("reorder-bot")


async def run_once(config: ReorderConfig) -> list[SupplierNotification]:
    """Check stock levels and notify suppliers once."""
    db = StockDatabase(config.db_path)
    pipeline = ReorderPipeline(config, db)

    logger.info("Starting reorder run")
    return await pipeline.run()


def dry_run(config: ReorderConfig) -> int:
    """Log the quote requests a run would send."""
    db = StockDatabase(config.db_path)
    planned = ReorderPipeline(config, db).plan()

    logger.info(f"Dry run: would notify {len(planned)} supplier(s)")
    for p in planned:
        sections = ", ".join(p.message.items_by_category)
        logger.info(f"  - {p.supplier.name} <{p.supplier.email}>: {sections}")
    return 0


def preview_supplier(config: ReorderConfig, name: str) -> int:
    """Print the message one supplier would receive."""
    db = StockDatabase(config.db_path)
    supplier = db.get_supplier_by_name(name)
    if supplier is None:
        logger.error(f"Supplier not found: {name}")
        return 1

    planned = ReorderPipeline(config, db).plan(suppliers=[supplier])
    if not planned:
        logger.info(f"Nothing to request from {name}")
        return 0

    message = planned[0].message
    print(f"To: {supplier.email}")
    print(f"Subject: {message.subject}")
    print()
    print(message.body)
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="reorder-bot: Restocking quote requests for low-stock items",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Send quote requests once
    python -m reorder_bot.run --once

    # Show what would be sent
    python -m reorder_bot.run --dry-run

    # Preview one supplier's message
    python -m reorder_bot.run --supplier "Acme Medical"

    # Use a specific config file
    python -m reorder_bot.run --config datasette.yaml --once
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("datasette.yaml"),
        help="Path to config file (default: datasette.yaml)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Override database path from config",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Check stock and send quote requests once, then exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show which suppliers would be notified without sending",
    )
    parser.add_argument(
        "--supplier",
        type=str,
        help="Print the message a specific supplier would receive",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = ReorderConfig.from_yaml(args.config)
    if args.db:
        config.db_path = args.db

    logger.info(f"Config loaded from {args.config}")
    logger.info(f"Database: {config.db_path}")

    if not config.db_path.exists():
        logger.error(f"Database not found: {config.db_path}")
        logger.error("Run 'python scripts/init_db.py' first to create the database.")
        return 1

    if args.supplier:
        return preview_supplier(config, args.supplier)

    if args.dry_run:
        return dry_run(config)

    if args.once:
        try:
            sent = asyncio.run(run_once(config))
        except DispatchError as e:
            logger.error(f"Run aborted at supplier {e.supplier}: {e}")
            logger.error(f"{len(e.sent)} quote request(s) were sent before the failure")
            return 1
        print(json.dumps([n.to_dict() for n in sent], indent=2))
        return 0

    # Default: show help
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
