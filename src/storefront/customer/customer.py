"""Customer aggregate — the shopper profile keyed by the authenticated user id.

Authentication lives outside the storefront. The profile only carries what
the order workflows need: the contact email and the saved shipping address.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from storefront.domain import storefront


@storefront.aggregate
class Customer:
    user_id = Identifier(identifier=True)
    email = String(max_length=254)
    full_name = String(max_length=255)
    address = Text()
    updated_at = DateTime()

    @classmethod
    def register(cls, user_id, email=None, full_name=None, address=None):
        return cls(
            user_id=user_id,
            email=email,
            full_name=full_name,
            address=address,
            updated_at=datetime.now(UTC),
        )

    def save_address(self, address):
        if not address or not address.strip():
            raise ValidationError({"address": ["Shipping address is required"]})
        self.address = address.strip()
        self.updated_at = datetime.now(UTC)
