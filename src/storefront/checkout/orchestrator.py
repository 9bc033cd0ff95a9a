"""Checkout orchestration — turns a cart into a paid order.

Flow:
    1. begin(): validate, generate a reference, save the shipping address
       to the profile, place a pending order with its lines, then open a
       payment session with the gateway.
    2. The shopper completes (or abandons) the gateway's payment step.
    3. complete(): on success mark the order paid, withdraw the sold units
       from stock and clear the cart. Any other outcome leaves the order
       pending and returns an advisory for the shopper.

Payment and stock are not one transaction. A pending order whose payment
never completes stays pending and is left for admins to deal with.
"""

import json
from dataclasses import dataclass, field
from enum import Enum

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.customer.profile import SaveShippingAddress, saved_address_for
from storefront.exceptions import OrderNotFound, PaymentGatewayError
from storefront.gateway import get_gateway
from storefront.gateway.port import PaymentGateway
from storefront.inventory.ledger import InventoryLedger
from storefront.order.payment import RecordPaymentSuccess
from storefront.order.placement import PlaceOrder
from storefront.order.queries import find_order
from storefront.order.reference import generate_order_reference

logger = structlog.get_logger(__name__)


class PaymentOutcome(Enum):
    SUCCESS = "success"
    PENDING = "pending"
    ERROR = "error"
    CLOSE = "close"


ADVISORIES = {
    PaymentOutcome.PENDING: "Waiting for payment...",
    PaymentOutcome.ERROR: "Payment failed",
    PaymentOutcome.CLOSE: "You closed the popup",
}

ORDER_HISTORY_PATH = "/orders"


@dataclass(frozen=True)
class Shopper:
    user_id: str
    email: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class PendingCheckout:
    order_id: str
    reference: str
    total_amount: int
    token: str
    redirect_url: str | None = None


@dataclass(frozen=True)
class CheckoutResult:
    outcome: PaymentOutcome
    order_id: str
    reference: str
    paid: bool
    message: str | None = None
    redirect_to: str | None = None
    stock: dict = field(default_factory=dict)


class CheckoutOrchestrator:
    def __init__(self, gateway: PaymentGateway | None = None, ledger: InventoryLedger | None = None) -> None:
        self._gateway = gateway
        self.ledger = ledger or InventoryLedger()

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway or get_gateway()

    def begin(self, cart_session, shopper: Shopper, shipping_address: str | None = None) -> PendingCheckout:
        """Place a pending order for the cart and open a payment session.

        Raises ValidationError before any side effect when the shopper, cart
        or address is missing, and PaymentGatewayError when the gateway
        cannot open a session (the order then stays pending).
        """
        if shopper is None or not shopper.user_id:
            raise ValidationError({"user_id": ["A signed-in shopper is required"]})
        if cart_session.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})

        address = (shipping_address or "").strip() or (saved_address_for(shopper.user_id) or "").strip()
        if not address:
            raise ValidationError({"shipping_address": ["Shipping address is required"]})

        reference = generate_order_reference()
        self._save_address(shopper.user_id, address, reference)

        cart_lines = list(cart_session.lines)
        order_id = current_domain.process(
            PlaceOrder(
                reference=reference,
                owner_id=shopper.user_id,
                shipping_address=address,
                lines=json.dumps(
                    [
                        {
                            "product_id": str(line.product_id),
                            "quantity": line.quantity,
                            "price_at_purchase": line.unit_price,
                        }
                        for line in cart_lines
                    ]
                ),
            ),
            asynchronous=False,
        )
        total_amount = sum(line.subtotal for line in cart_lines)

        try:
            session = self.gateway.create_session(
                order_reference=reference,
                amount=total_amount,
                items=[
                    {
                        "id": str(line.product_id),
                        "price": line.unit_price,
                        "quantity": line.quantity,
                        "name": line.name or "Item",
                    }
                    for line in cart_lines
                ],
                customer={"first_name": shopper.name or shopper.email, "email": shopper.email},
            )
        except PaymentGatewayError:
            logger.error("Payment session failed, order left pending", order_id=order_id, reference=reference)
            raise

        logger.info("Checkout started", order_id=order_id, reference=reference, total_amount=total_amount)
        return PendingCheckout(
            order_id=order_id,
            reference=reference,
            total_amount=total_amount,
            token=session.token,
            redirect_url=session.redirect_url,
        )

    def complete(self, checkout: PendingCheckout, outcome, cart_session=None) -> CheckoutResult:
        """Apply the gateway's callback outcome for ``checkout``."""
        outcome = PaymentOutcome(outcome)

        if outcome != PaymentOutcome.SUCCESS:
            logger.info("Payment not completed", reference=checkout.reference, outcome=outcome.value)
            return CheckoutResult(
                outcome=outcome,
                order_id=checkout.order_id,
                reference=checkout.reference,
                paid=False,
                message=ADVISORIES[outcome],
            )

        newly_paid = current_domain.process(RecordPaymentSuccess(order_id=checkout.order_id), asynchronous=False)

        stock = {}
        if newly_paid:
            order = find_order(checkout.order_id)
            if order is None:
                raise OrderNotFound(checkout.order_id)
            for line in order.lines:
                stock[str(line.product_id)] = self.ledger.withdraw(line.product_id, line.quantity)
        else:
            logger.info("Duplicate payment confirmation ignored", reference=checkout.reference)

        if cart_session is not None:
            cart_session.clear()

        logger.info("Checkout completed", order_id=checkout.order_id, reference=checkout.reference)
        return CheckoutResult(
            outcome=outcome,
            order_id=checkout.order_id,
            reference=checkout.reference,
            paid=True,
            redirect_to=ORDER_HISTORY_PATH,
            stock=stock,
        )

    def _save_address(self, user_id, address, reference):
        try:
            current_domain.process(SaveShippingAddress(user_id=user_id, address=address), asynchronous=False)
        except Exception as exc:
            logger.warning("Could not save shipping address", user_id=user_id, reference=reference, error=str(exc))
