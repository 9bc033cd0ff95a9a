"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- MidtransGateway for production (PAYMENT_GATEWAY=midtrans)
"""

import os

from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    name = os.environ.get("PAYMENT_GATEWAY", "fake").lower()
    if name == "midtrans":
        from storefront.gateway.midtrans_adapter import MidtransGateway

        return MidtransGateway(
            server_key=os.environ.get("MIDTRANS_SERVER_KEY", ""),
            is_production=os.environ.get("MIDTRANS_IS_PRODUCTION", "false").lower() == "true",
        )
    if name == "fake":
        return FakeGateway()
    raise ValueError(f"Unknown payment gateway: {name}")


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to FakeGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
