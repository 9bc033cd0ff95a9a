"""Configurable fake payment gateway for development and testing.

Simulates the gateway without any external calls. It can be configured at
runtime to succeed or fail, and records every call for test assertions.
"""

from uuid import uuid4

from storefront.exceptions import PaymentGatewayError
from storefront.gateway.port import PaymentGateway, PaymentSession, RefundResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Payment declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_session(
        self,
        order_reference: str,
        amount: int,
        items: list[dict],
        customer: dict,
    ) -> PaymentSession:
        self.calls.append(
            {
                "method": "create_session",
                "order_reference": order_reference,
                "amount": amount,
                "items": items,
                "customer": customer,
            }
        )

        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason)

        token = f"fake_tok_{uuid4().hex[:12]}"
        return PaymentSession(token=token, redirect_url=f"https://pay.example.test/{token}")

    def refund(self, payment_reference: str, amount: int) -> RefundResult:
        self.calls.append(
            {
                "method": "refund",
                "payment_reference": payment_reference,
                "amount": amount,
            }
        )

        if self.should_succeed:
            return RefundResult(
                success=True,
                gateway_refund_id=f"fake_ref_{uuid4().hex[:12]}",
                gateway_status="succeeded",
            )
        return RefundResult(
            success=False,
            gateway_status="failed",
            failure_reason=self.failure_reason,
        )

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]
