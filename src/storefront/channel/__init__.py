"""Email channel registry.

Provides singleton access to the email adapter. Uses the fake adapter by
default; EMAIL_ADAPTER=resend switches to Resend in production.
"""

import os

from storefront.channel.email_port import EmailPort

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    """Return the configured email adapter (singleton)."""
    global _email_channel
    if _email_channel is None:
        adapter = os.environ.get("EMAIL_ADAPTER", "fake").lower()
        if adapter == "resend":
            from storefront.channel.resend_email import ResendEmailAdapter

            _email_channel = ResendEmailAdapter(
                api_key=os.environ.get("RESEND_API_KEY", ""),
                sender=os.environ.get("EMAIL_FROM", "Storefront <orders@storefront.test>"),
            )
        elif adapter == "fake":
            from storefront.channel.fake_email import FakeEmailAdapter

            _email_channel = FakeEmailAdapter()
        else:
            raise ValueError(f"Unknown email adapter: {adapter}")
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_email_channel():
    """Reset the email singleton (useful for testing)."""
    global _email_channel
    _email_channel = None
