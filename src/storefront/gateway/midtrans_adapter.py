"""Midtrans payment gateway adapter.

Uses the Snap API to open payment sessions and the Core API to refund
settled transactions. Both authenticate with HTTP basic auth, the server key
as username and an empty password.
"""

import time

import httpx
import structlog

from storefront.exceptions import PaymentGatewayError
from storefront.gateway.port import PaymentGateway, PaymentSession, RefundResult

logger = structlog.get_logger(__name__)

SANDBOX_SNAP_URL = "https://app.sandbox.midtrans.com"
SANDBOX_API_URL = "https://api.sandbox.midtrans.com"
PRODUCTION_SNAP_URL = "https://app.midtrans.com"
PRODUCTION_API_URL = "https://api.midtrans.com"


class MidtransGateway(PaymentGateway):
    def __init__(
        self,
        server_key: str,
        is_production: bool = False,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not server_key:
            raise ValueError("Midtrans server key is required")
        self.server_key = server_key
        self.is_production = is_production
        self.snap_url = PRODUCTION_SNAP_URL if is_production else SANDBOX_SNAP_URL
        self.api_url = PRODUCTION_API_URL if is_production else SANDBOX_API_URL
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))

    @property
    def _auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self.server_key, "")

    def create_session(
        self,
        order_reference: str,
        amount: int,
        items: list[dict],
        customer: dict,
    ) -> PaymentSession:
        payload = {
            "transaction_details": {"order_id": order_reference, "gross_amount": amount},
            "item_details": items,
            "customer_details": customer,
        }

        try:
            response = self._client.post(
                f"{self.snap_url}/snap/v1/transactions",
                json=payload,
                auth=self._auth,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            logger.error("Midtrans session request failed", reference=order_reference, error=str(exc))
            raise PaymentGatewayError(f"Payment gateway unreachable: {exc}") from exc

        if response.status_code >= 400:
            logger.error(
                "Midtrans rejected session",
                reference=order_reference,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise PaymentGatewayError(f"Payment gateway rejected the transaction ({response.status_code})")

        body = response.json()
        if not body.get("token"):
            raise PaymentGatewayError("Payment gateway returned no token")
        return PaymentSession(token=body["token"], redirect_url=body.get("redirect_url"))

    def refund(self, payment_reference: str, amount: int) -> RefundResult:
        payload = {"refund_key": f"refund-{time.time_ns() // 1_000_000}", "amount": amount}

        try:
            response = self._client.post(
                f"{self.api_url}/v2/{payment_reference}/refund",
                json=payload,
                auth=self._auth,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            logger.error("Midtrans refund request failed", reference=payment_reference, error=str(exc))
            return RefundResult(success=False, failure_reason=str(exc))

        try:
            body = response.json()
        except ValueError:
            body = {}

        # Midtrans reports business failures in the body's status_code even on HTTP 200.
        gateway_code = str(body.get("status_code", response.status_code))
        if response.status_code >= 400 or not gateway_code.startswith("2"):
            reason = body.get("status_message") or response.text[:500]
            logger.error(
                "Midtrans refund failed",
                reference=payment_reference,
                status_code=gateway_code,
                reason=reason,
            )
            return RefundResult(success=False, gateway_status=gateway_code, failure_reason=reason)

        return RefundResult(
            success=True,
            gateway_refund_id=str(body.get("refund_key") or payload["refund_key"]),
            gateway_status=body.get("transaction_status", gateway_code),
        )

    def close(self) -> None:
        self._client.close()
