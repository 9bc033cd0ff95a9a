"""Cancellation workflow — refund, restock, notify, then erase the order.

This is a compensating transaction across the payment gateway, the data
store and the email service, ordered by blast radius:

    1. Resolve the order and the owner's contact email (abort if missing).
    2. Refund the full total. If the gateway does not confirm, abort with
       nothing changed.
    3. Restore stock line by line. Products that no longer exist are skipped.
    4. Email the refund confirmation (best-effort).
    5. Delete the order lines and then the order.

Once the refund is confirmed every later step is attempted even if an
earlier one fails. Progress is kept in a CancellationRecord, saved after
every restored line and after the email, so that a re-run resumes without
refunding or restocking twice, and a re-run on a finished cancellation is
a no-op.
"""

from dataclasses import asdict, dataclass, field

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cancellation.record import CancellationRecord
from storefront.customer.profile import contact_email_for
from storefront.exceptions import ContactNotFound, OrderNotFound, RefundFailed
from storefront.gateway import get_gateway
from storefront.gateway.port import PaymentGateway
from storefront.inventory.ledger import InventoryLedger
from storefront.notifications.mailer import send_refund_confirmation
from storefront.order.erasure import EraseOrder
from storefront.order.order import Order
from storefront.order.queries import describe_lines, find_order
from storefront.templates import format_amount
from storefront.utils.locks import KeyedLocks

logger = structlog.get_logger(__name__)

_lock_for = KeyedLocks()

COMPLETE_MESSAGE = "Order cancelled and refunded"
INCOMPLETE_MESSAGE = "Refund processed, cleanup may be incomplete"
ALREADY_CANCELLED_MESSAGE = "Order already cancelled"


@dataclass
class CancellationReport:
    order_id: str
    reference: str
    refund_amount: int = 0
    refund_id: str | None = None
    already_cancelled: bool = False
    resumed: bool = False
    restocked: dict = field(default_factory=dict)
    skipped_products: list = field(default_factory=list)
    failed_restocks: list = field(default_factory=list)
    email_sent: bool = False
    order_deleted: bool = False

    @property
    def cleanup_complete(self) -> bool:
        return self.already_cancelled or (self.order_deleted and not self.failed_restocks)

    @property
    def message(self) -> str:
        if self.already_cancelled:
            return ALREADY_CANCELLED_MESSAGE
        return COMPLETE_MESSAGE if self.cleanup_complete else INCOMPLETE_MESSAGE

    def to_dict(self) -> dict:
        return {**asdict(self), "cleanup_complete": self.cleanup_complete, "message": self.message}


class CancellationWorkflow:
    def __init__(self, gateway: PaymentGateway | None = None, ledger: InventoryLedger | None = None) -> None:
        self._gateway = gateway
        self.ledger = ledger or InventoryLedger()

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway or get_gateway()

    def run(self, order_id) -> CancellationReport:
        if not order_id:
            raise ValidationError({"order_id": ["Missing orderId"]})

        with _lock_for(order_id):
            record = self._find_record(order_id)
            if record is not None and record.is_complete:
                logger.info("Cancellation already complete", order_id=str(order_id), reference=record.reference)
                return CancellationReport(
                    order_id=str(order_id),
                    reference=record.reference,
                    refund_amount=record.refund_amount,
                    refund_id=record.refund_id,
                    already_cancelled=True,
                    email_sent=record.notified_at is not None,
                    order_deleted=True,
                )

            if record is None:
                record = self._refund(order_id)
                report = CancellationReport(order_id=str(order_id), reference=record.reference)
            else:
                logger.warning("Resuming cancellation", order_id=str(order_id), reference=record.reference)
                report = CancellationReport(order_id=str(order_id), reference=record.reference, resumed=True)

            report.refund_amount = record.refund_amount
            report.refund_id = record.refund_id

            self._restock(record, report)
            self._notify(record, report)
            self._erase(record, report)

            if report.cleanup_complete:
                record.mark_completed()
            self._save_record(record)

        log = logger.info if report.cleanup_complete else logger.error
        log(
            "Cancellation finished",
            order_id=report.order_id,
            reference=report.reference,
            cleanup_complete=report.cleanup_complete,
            failed_restocks=report.failed_restocks,
            order_deleted=report.order_deleted,
        )
        return report

    # -------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------
    def _refund(self, order_id) -> CancellationRecord:
        order = find_order(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        if not order.is_cancellable:
            raise ValidationError({"status": [f"Cannot cancel an order in {order.status} state"]})

        recipient = contact_email_for(order.owner_id)
        if recipient is None:
            raise ContactNotFound(order.owner_id)

        try:
            result = self.gateway.refund(order.reference, order.total_amount)
        except Exception as exc:
            logger.error("Refund request raised", reference=order.reference, error=str(exc))
            raise RefundFailed(order.reference, str(exc)) from exc

        if not result.success:
            logger.error("Refund declined", reference=order.reference, reason=result.failure_reason)
            raise RefundFailed(order.reference, result.failure_reason)

        logger.info(
            "Refund issued",
            order_id=str(order.id),
            reference=order.reference,
            amount=order.total_amount,
            refund_id=result.gateway_refund_id,
        )

        record = CancellationRecord.open(
            order_id=order.id,
            reference=order.reference,
            owner_id=order.owner_id,
            recipient=recipient,
            refund_amount=order.total_amount,
            refund_id=result.gateway_refund_id,
            lines=describe_lines(order.lines or [], fallback="Item"),
        )
        self._save_record(record)
        self._mark_requested(order, result.gateway_refund_id)
        return record

    def _restock(self, record, report):
        for line in record.pending_lines():
            try:
                new_stock = self.ledger.restore(line["product_id"], line["quantity"])
            except Exception as exc:
                logger.error(
                    "Stock restore failed",
                    reference=record.reference,
                    product_id=line["product_id"],
                    quantity=line["quantity"],
                    error=str(exc),
                )
                report.failed_restocks.append(line["product_id"])
                continue

            if new_stock is None:
                report.skipped_products.append(line["product_id"])
            else:
                report.restocked[line["product_id"]] = new_stock
            record.mark_restocked(line["line_id"])
            self._save_record(record)

    def _notify(self, record, report):
        if record.notified_at is not None:
            report.email_sent = True
            return
        if send_refund_confirmation(record.recipient, record.reference, record.refund_amount, record.line_items):
            record.mark_notified()
            self._save_record(record)
            report.email_sent = True

    def _erase(self, record, report):
        try:
            report.order_deleted = self._delete_order(record.order_id, record.refund_amount)
        except Exception as exc:
            logger.error("Order deletion failed", reference=record.reference, error=str(exc))
            report.order_deleted = False

    # -------------------------------------------------------------------
    # Persistence helpers
    # -------------------------------------------------------------------
    def _delete_order(self, order_id, refunded_amount) -> bool:
        return current_domain.process(
            EraseOrder(order_id=str(order_id), refunded_amount=refunded_amount), asynchronous=False
        )

    def _mark_requested(self, order, refund_id):
        try:
            order.request_cancellation(refund_id=refund_id)
            current_domain.repository_for(Order).add(order)
        except Exception as exc:
            logger.warning("Could not mark cancellation requested", reference=order.reference, error=str(exc))

    def _find_record(self, order_id) -> CancellationRecord | None:
        try:
            return current_domain.repository_for(CancellationRecord).get(str(order_id))
        except ObjectNotFoundError:
            return None

    def _save_record(self, record):
        try:
            current_domain.repository_for(CancellationRecord).add(record)
        except Exception as exc:
            logger.error("Could not save cancellation progress", reference=record.reference, error=str(exc))


def cancellation_prompt(order) -> str:
    """Confirmation text shown to an admin before cancelling ``order``."""
    return (
        f"Cancel order {order.reference}?\n\n"
        "This will:\n"
        f"- Refund {format_amount(order.total_amount)} to the customer through the payment gateway\n"
        "- Restore the stock of every item in the order\n"
        "- Permanently delete the order\n\n"
        "This cannot be undone."
    )
