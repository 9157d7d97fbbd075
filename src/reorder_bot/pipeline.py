"""
Reorder notification pipeline.

Reads stock state, groups low-stock items by category, matches categories to
suppliers and sends each matched supplier one quote request.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from .compose import ComposedMessage, compose_message
from .config import ReorderConfig
from .dispatch import DeliveryProvider, DispatchGateway, SendGridProvider, Sender
from .matching import PendingGroups, group_by_category, match_supplier
from .models import StockDatabase, Supplier, SupplierNotification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedNotification:
    """A composed quote request that has not been sent."""

    supplier: Supplier
    message: ComposedMessage

    def to_notification(self) -> SupplierNotification:
        return SupplierNotification(
            supplier=self.supplier.name,
            email=self.supplier.email,
            items_by_category=self.message.items_by_category,
        )


class ReorderPipeline:
    """
    The main reorder pipeline.

    Suppliers are handled strictly one after another in directory order. The
    first failed delivery aborts the run: suppliers already notified stay
    notified and the remaining ones are not attempted.
    """

    def __init__(
        self,
        config: ReorderConfig,
        db: StockDatabase,
        provider: DeliveryProvider | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Reorder configuration
            db: Stock and supplier database
            provider: Optional delivery provider (for testing)
        """
        self.config = config
        self.db = db
        self._provider = provider

    def _get_provider(self) -> DeliveryProvider:
        """Get or create the delivery provider."""
        if self._provider is not None:
            return self._provider

        sendgrid = self.config.sendgrid
        api_key = sendgrid.get_api_key()
        if not api_key:
            logger.warning("No SendGrid API key configured; deliveries will be rejected")
        if not sendgrid.from_email:
            logger.warning("No sender address configured; deliveries will be rejected")
        return SendGridProvider(
            api_key=api_key,
            api_base=sendgrid.api_base,
            timeout_seconds=sendgrid.timeout_seconds,
        )

    def _get_gateway(self) -> DispatchGateway:
        sender = Sender(
            email=self.config.sendgrid.from_email,
            name=self.config.sendgrid.from_name,
        )
        return DispatchGateway(self._get_provider(), sender)

    def _compose_all(
        self,
        pending: PendingGroups,
        suppliers: list[Supplier],
    ) -> Iterator[PlannedNotification]:
        """Yield a composed message for every supplier with matching categories."""
        for supplier in suppliers:
            matched = match_supplier(supplier, pending)
            if not matched:
                logger.debug(f"No pending categories for supplier {supplier.name}")
                continue

            logger.debug(
                f"Supplier {supplier.name} matched {len(matched)} categor(ies): "
                f"{', '.join(c.code for c in matched)}"
            )
            yield PlannedNotification(
                supplier=supplier,
                message=compose_message(
                    supplier, matched, subject=self.config.notification.subject
                ),
            )

    def _pending_groups(self) -> PendingGroups:
        candidates = [i for i in self.db.get_items_below_threshold() if i.needs_reorder]
        if not candidates:
            logger.info("No items to reorder.")
            return {}

        logger.info(f"{len(candidates)} item(s) to reorder.")
        return group_by_category(candidates)

    def plan(self, suppliers: list[Supplier] | None = None) -> list[PlannedNotification]:
        """
        Compose quote requests without sending anything.

        Args:
            suppliers: Restrict planning to these suppliers (default: all)
        """
        pending = self._pending_groups()
        if not pending:
            return []

        if suppliers is None:
            suppliers = self.db.get_suppliers()
        return list(self._compose_all(pending, suppliers))

    async def run(self) -> list[SupplierNotification]:
        """
        Check stock levels and send quote requests.

        Returns the notifications sent, in supplier directory order.
        Raises DispatchError on the first failed delivery.
        """
        pending = self._pending_groups()
        if not pending:
            return []

        suppliers = self.db.get_suppliers()
        gateway = self._get_gateway()
        sent: list[SupplierNotification] = []

        for planned in self._compose_all(pending, suppliers):
            supplier = planned.supplier
            outcome = await gateway.send(
                supplier.email,
                planned.message.subject,
                planned.message.body,
            )
            outcome.raise_for_status(supplier.name, supplier.email, sent)

            logger.info(f"Quote request sent to {supplier.name} ({supplier.email})")
            sent.append(planned.to_notification())

        logger.info(f"{len(sent)} quote request(s) sent.")
        return sent
