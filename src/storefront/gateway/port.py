"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and MidtransGateway
(production) without changing any checkout or cancellation code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentSession:
    """Opaque handle for the gateway's interactive payment step."""

    token: str
    redirect_url: str | None = None


@dataclass(frozen=True)
class RefundResult:
    """Result of a refund attempt."""

    success: bool
    gateway_refund_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_session(
        self,
        order_reference: str,
        amount: int,
        items: list[dict],
        customer: dict,
    ) -> PaymentSession:
        """Open a payment session for an order.

        ``items`` are ``{id, price, quantity, name}`` dicts and ``customer``
        is ``{first_name, email}``. Raises PaymentGatewayError on failure.
        """
        ...

    @abstractmethod
    def refund(self, payment_reference: str, amount: int) -> RefundResult:
        """Refund ``amount`` of the payment made under ``payment_reference``."""
        ...
