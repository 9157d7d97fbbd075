"""
Dispatch gateway for reorder-bot.

Sends composed quote requests through a delivery provider and classifies the
outcome. The provider is a small interface so tests can substitute one that
records calls instead of talking to the network.

API Documentation: https://www.twilio.com/docs/sendgrid/api-reference/mail-send/mail-send
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from .models import SupplierNotification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sender:
    """Identity quote requests are sent from."""

    email: str
    name: str


@dataclass(frozen=True)
class ProviderResponse:
    """Status returned by a delivery provider."""

    status_code: int
    body: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class DeliveryProvider(ABC):
    """Something that can deliver a plain-text message to an address."""

    @abstractmethod
    async def send(
        self,
        sender: Sender,
        recipient: str,
        subject: str,
        body: str,
    ) -> ProviderResponse:
        """
        Deliver a message.

        Returns the provider's response. Raises httpx.RequestError (or
        OSError) when the provider cannot be reached.
        """
        pass


class SendGridProvider(DeliveryProvider):
    """Delivery through the SendGrid v3 mail/send endpoint."""

    def __init__(
        self,
        api_key: str | None,
        api_base: str = "https://api.sendgrid.com/v3",
        timeout_seconds: float = 10.0,
    ):
        self.api_key = api_key or ""
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout_seconds

    def build_payload(
        self,
        sender: Sender,
        recipient: str,
        subject: str,
        body: str,
    ) -> dict[str, Any]:
        """Build the mail/send request body."""
        return {
            "personalizations": [{"to": [{"email": recipient}]}],
            "from": {"email": sender.email, "name": sender.name},
            "subject": subject,
            "content": [{"type": "text/plain", "value": body}],
        }

    async def send(
        self,
        sender: Sender,
        recipient: str,
        subject: str,
        body: str,
    ) -> ProviderResponse:
        payload = self.build_payload(sender, recipient, subject, body)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.api_base}/mail/send",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
            )
            return ProviderResponse(status_code=response.status_code, body=response.text)


# -----------------------------------------------------------------------------
# Outcomes and errors
# -----------------------------------------------------------------------------


class DeliveryStatus(str, Enum):
    """Classification of a single dispatch attempt."""

    DELIVERED = "delivered"
    REJECTED = "rejected"
    TRANSPORT_FAILURE = "transport_failure"


class DispatchError(Exception):
    """A quote request could not be delivered; the run stops here."""

    def __init__(
        self,
        message: str,
        supplier: str,
        email: str,
        sent: list[SupplierNotification] | None = None,
    ):
        super().__init__(message)
        self.supplier = supplier
        self.email = email
        # Notifications delivered earlier in the same run
        self.sent: list[SupplierNotification] = list(sent or [])


class DispatchRejected(DispatchError):
    """The provider was reached but declined the message."""

    def __init__(
        self,
        supplier: str,
        email: str,
        status_code: int | None,
        provider_message: str | None,
        sent: list[SupplierNotification] | None = None,
    ):
        super().__init__(
            f"Delivery to {email} rejected (HTTP {status_code})",
            supplier=supplier,
            email=email,
            sent=sent,
        )
        self.status_code = status_code
        self.provider_message = provider_message


class DispatchTransportFailure(DispatchError):
    """The provider could not be reached."""

    def __init__(
        self,
        supplier: str,
        email: str,
        cause: BaseException | None,
        sent: list[SupplierNotification] | None = None,
    ):
        super().__init__(
            f"Error delivering to {email}: {cause}",
            supplier=supplier,
            email=email,
            sent=sent,
        )
        self.cause = cause


@dataclass
class DispatchOutcome:
    """Result of one dispatch attempt."""

    status: DeliveryStatus
    status_code: int | None = None
    message: str | None = None
    cause: BaseException | None = field(default=None, repr=False)

    @property
    def delivered(self) -> bool:
        return self.status == DeliveryStatus.DELIVERED

    def raise_for_status(
        self,
        supplier: str,
        email: str,
        sent: list[SupplierNotification] | None = None,
    ) -> None:
        """Raise the matching DispatchError unless the message was delivered."""
        if self.status == DeliveryStatus.REJECTED:
            raise DispatchRejected(supplier, email, self.status_code, self.message, sent)
        if self.status == DeliveryStatus.TRANSPORT_FAILURE:
            raise DispatchTransportFailure(supplier, email, self.cause, sent) from self.cause


class DispatchGateway:
    """Sends quote requests through a provider, one attempt each."""

    def __init__(self, provider: DeliveryProvider, sender: Sender):
        self.provider = provider
        self.sender = sender

    async def send(self, address: str, subject: str, body: str) -> DispatchOutcome:
        """Send a message and classify the provider's answer."""
        try:
            response = await self.provider.send(self.sender, address, subject, body)
        except (httpx.RequestError, OSError) as e:
            logger.error(f"Error sending mail to {address}: {e}")
            return DispatchOutcome(
                status=DeliveryStatus.TRANSPORT_FAILURE,
                message=str(e),
                cause=e,
            )

        if response.is_success:
            logger.info(f"Mail sent to {address} - Status: {response.status_code}")
            return DispatchOutcome(
                status=DeliveryStatus.DELIVERED,
                status_code=response.status_code,
            )

        logger.error(
            f"Failed to send mail to {address} - Status: {response.status_code}, "
            f"Body: {response.body}"
        )
        return DispatchOutcome(
            status=DeliveryStatus.REJECTED,
            status_code=response.status_code,
            message=response.body,
        )
