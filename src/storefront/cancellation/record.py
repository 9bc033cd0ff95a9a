"""CancellationRecord aggregate — the resume log of one order cancellation.

The order itself is hard-deleted at the end of a cancellation, so this
record is what survives: the refund, the recipient, the order's former
contents and how far the cleanup got. A re-run reads it to skip the
refund and the lines already restocked.
"""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.aggregate
class CancellationRecord:
    order_id = Identifier(identifier=True)
    reference = String(required=True, max_length=64)
    owner_id = Identifier(required=True)
    recipient = String(max_length=254)
    refund_amount = Integer(required=True, min_value=0)
    refund_id = String(max_length=255)
    lines = Text(required=True)  # JSON: former order lines with display names
    restocked_line_ids = Text(default="[]")  # JSON: list of line ids
    refunded_at = DateTime()
    notified_at = DateTime()
    completed_at = DateTime()

    @classmethod
    def open(cls, order_id, reference, owner_id, recipient, refund_amount, refund_id, lines):
        return cls(
            order_id=str(order_id),
            reference=reference,
            owner_id=str(owner_id),
            recipient=recipient,
            refund_amount=refund_amount,
            refund_id=refund_id,
            lines=json.dumps(lines),
            restocked_line_ids="[]",
            refunded_at=datetime.now(UTC),
        )

    @property
    def line_items(self) -> list[dict]:
        return json.loads(self.lines or "[]")

    @property
    def restocked(self) -> set[str]:
        return set(json.loads(self.restocked_line_ids or "[]"))

    def pending_lines(self) -> list[dict]:
        done = self.restocked
        return [line for line in self.line_items if line["line_id"] not in done]

    def mark_restocked(self, line_id):
        done = self.restocked
        done.add(str(line_id))
        self.restocked_line_ids = json.dumps(sorted(done))

    def mark_notified(self):
        self.notified_at = datetime.now(UTC)

    def mark_completed(self):
        self.completed_at = datetime.now(UTC)

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None
