"""Tests for the payment gateway and email adapters over HTTP."""

import base64
import json

import httpx
import pytest
from storefront.channel import get_email_channel, reset_email_channel
from storefront.channel.fake_email import FakeEmailAdapter
from storefront.channel.resend_email import ResendEmailAdapter
from storefront.exceptions import PaymentGatewayError
from storefront.gateway import get_gateway, reset_gateway
from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.midtrans_adapter import MidtransGateway


def _client(handler, requests):
    def recording(request):
        requests.append(request)
        return handler(request)

    return httpx.Client(transport=httpx.MockTransport(recording))


def _basic_user(request):
    encoded = request.headers["Authorization"].split(" ", 1)[1]
    return base64.b64decode(encoded).decode().split(":", 1)[0]


class TestMidtransSession:
    def test_create_session(self):
        requests = []
        client = _client(
            lambda r: httpx.Response(201, json={"token": "snap-tok", "redirect_url": "https://pay/snap-tok"}),
            requests,
        )
        gateway = MidtransGateway(server_key="SB-Mid-server-key", client=client)

        session = gateway.create_session(
            order_reference="ORDER-1",
            amount=30000,
            items=[{"id": "p-1", "price": 10000, "quantity": 3, "name": "Kopi Susu"}],
            customer={"first_name": "Sari", "email": "sari@example.com"},
        )

        assert session.token == "snap-tok"
        assert session.redirect_url == "https://pay/snap-tok"
        request = requests[0]
        assert str(request.url) == "https://app.sandbox.midtrans.com/snap/v1/transactions"
        assert _basic_user(request) == "SB-Mid-server-key"
        body = json.loads(request.content)
        assert body["transaction_details"] == {"order_id": "ORDER-1", "gross_amount": 30000}
        assert body["customer_details"]["email"] == "sari@example.com"

    def test_production_urls(self):
        requests = []
        client = _client(lambda r: httpx.Response(201, json={"token": "t"}), requests)
        MidtransGateway(server_key="key", is_production=True, client=client).create_session("ORDER-1", 1, [], {})
        assert requests[0].url.host == "app.midtrans.com"

    def test_rejection_raises(self):
        client = _client(lambda r: httpx.Response(400, json={"error_messages": ["bad"]}), [])
        with pytest.raises(PaymentGatewayError):
            MidtransGateway(server_key="key", client=client).create_session("ORDER-1", 1, [], {})

    def test_unreachable_raises(self):
        def fail(request):
            raise httpx.ConnectError("no route", request=request)

        with pytest.raises(PaymentGatewayError):
            MidtransGateway(server_key="key", client=_client(fail, [])).create_session("ORDER-1", 1, [], {})

    def test_requires_server_key(self):
        with pytest.raises(ValueError):
            MidtransGateway(server_key="")


class TestMidtransRefund:
    def test_refund_success(self):
        requests = []
        client = _client(
            lambda r: httpx.Response(
                200, json={"status_code": "200", "transaction_status": "refund", "refund_key": "refund-1"}
            ),
            requests,
        )
        result = MidtransGateway(server_key="key", client=client).refund("ORDER-1", 30000)

        assert result.success is True
        assert result.gateway_refund_id == "refund-1"
        request = requests[0]
        assert str(request.url) == "https://api.sandbox.midtrans.com/v2/ORDER-1/refund"
        body = json.loads(request.content)
        assert body["amount"] == 30000
        assert body["refund_key"].startswith("refund-")

    def test_business_failure_in_body(self):
        client = _client(
            lambda r: httpx.Response(200, json={"status_code": "412", "status_message": "Not settled"}), []
        )
        result = MidtransGateway(server_key="key", client=client).refund("ORDER-1", 30000)
        assert result.success is False
        assert result.failure_reason == "Not settled"

    def test_http_failure(self):
        client = _client(lambda r: httpx.Response(500, text="oops"), [])
        assert MidtransGateway(server_key="key", client=client).refund("ORDER-1", 1).success is False

    def test_unreachable(self):
        def fail(request):
            raise httpx.ReadTimeout("slow", request=request)

        assert MidtransGateway(server_key="key", client=_client(fail, [])).refund("ORDER-1", 1).success is False


class TestResend:
    def test_send(self):
        requests = []
        client = _client(lambda r: httpx.Response(200, json={"id": "re_123"}), requests)
        adapter = ResendEmailAdapter(api_key="re_key", sender="Shop <orders@shop.test>", client=client)

        result = adapter.send(to="sari@example.com", subject="Hi", body="Body")

        assert result == {"message_id": "re_123", "status": "sent"}
        request = requests[0]
        assert request.headers["Authorization"] == "Bearer re_key"
        assert json.loads(request.content) == {
            "from": "Shop <orders@shop.test>",
            "to": ["sari@example.com"],
            "subject": "Hi",
            "text": "Body",
        }

    def test_rejection(self):
        client = _client(lambda r: httpx.Response(422, json={"message": "invalid"}), [])
        result = ResendEmailAdapter(api_key="k", sender="s", client=client).send("a@b.c", "s", "b")
        assert result["status"] == "failed"


class TestFactories:
    def test_gateway_defaults_to_fake(self, monkeypatch):
        monkeypatch.delenv("PAYMENT_GATEWAY", raising=False)
        reset_gateway()
        assert isinstance(get_gateway(), FakeGateway)

    def test_gateway_from_environment(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_GATEWAY", "midtrans")
        monkeypatch.setenv("MIDTRANS_SERVER_KEY", "SB-key")
        reset_gateway()
        gateway = get_gateway()
        assert isinstance(gateway, MidtransGateway)
        assert gateway.is_production is False

    def test_unknown_gateway(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_GATEWAY", "paypal")
        reset_gateway()
        with pytest.raises(ValueError):
            get_gateway()

    def test_email_defaults_to_fake(self, monkeypatch):
        monkeypatch.delenv("EMAIL_ADAPTER", raising=False)
        reset_email_channel()
        assert isinstance(get_email_channel(), FakeEmailAdapter)

    def test_email_from_environment(self, monkeypatch):
        monkeypatch.setenv("EMAIL_ADAPTER", "resend")
        monkeypatch.setenv("RESEND_API_KEY", "re_key")
        reset_email_channel()
        assert isinstance(get_email_channel(), ResendEmailAdapter)
