"""Email channel port — how the storefront hands customer mail to a provider.

Adapters never raise for a rejected message. They return a delivery result
``{"message_id", "status", "error"?}`` built with ``sent()`` or ``failed()``,
and the mailer decides what to log.
"""

from abc import ABC, abstractmethod

SENT = "sent"
FAILED = "failed"


def sent(message_id: str | None) -> dict:
    return {"message_id": message_id, "status": SENT}


def failed(error: str) -> dict:
    return {"message_id": None, "status": FAILED, "error": error}


def is_delivered(result: dict | None) -> bool:
    return bool(result) and result.get("status") == SENT


class EmailPort(ABC):
    """A provider that delivers plain-text storefront mail to one recipient."""

    @abstractmethod
    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> dict:
        """Deliver one message and return its delivery result."""
