"""Resend email adapter — delivers through the Resend HTTP API."""

import httpx
import structlog

from storefront.channel.email_port import EmailPort, failed, sent

logger = structlog.get_logger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class ResendEmailAdapter(EmailPort):
    def __init__(
        self,
        api_key: str,
        sender: str,
        timeout: float = 15.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Resend API key is required")
        self.api_key = api_key
        self.sender = sender
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))

    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> dict:
        payload = {"from": self.sender, "to": [to], "subject": subject, "text": body}
        if html_body:
            payload["html"] = html_body

        try:
            response = self._client.post(
                RESEND_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as exc:
            return failed(str(exc))

        if response.status_code >= 400:
            return failed(f"Resend returned {response.status_code}: {response.text[:300]}")

        return sent(response.json().get("id"))

    def close(self) -> None:
        self._client.close()
