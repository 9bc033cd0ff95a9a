"""Customer profile commands and lookups."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.customer.customer import Customer
from storefront.domain import storefront


@storefront.command(part_of="Customer")
class RegisterCustomer:
    user_id = Identifier(required=True)
    email = String(max_length=254)
    full_name = String(max_length=255)
    address = Text()


@storefront.command(part_of="Customer")
class SaveShippingAddress:
    user_id = Identifier(required=True)
    address = Text(required=True)


@storefront.command_handler(part_of=Customer)
class CustomerProfileHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        repo = current_domain.repository_for(Customer)
        try:
            customer = repo.get(command.user_id)
            customer.email = command.email or customer.email
            customer.full_name = command.full_name or customer.full_name
            if command.address:
                customer.save_address(command.address)
        except ObjectNotFoundError:
            customer = Customer.register(
                user_id=command.user_id,
                email=command.email,
                full_name=command.full_name,
                address=command.address,
            )
        repo.add(customer)
        return str(customer.user_id)

    @handle(SaveShippingAddress)
    def save_shipping_address(self, command):
        repo = current_domain.repository_for(Customer)
        try:
            customer = repo.get(command.user_id)
        except ObjectNotFoundError:
            customer = Customer.register(user_id=command.user_id)
        customer.save_address(command.address)
        repo.add(customer)


def find_customer(user_id) -> Customer | None:
    if not user_id:
        return None
    try:
        return current_domain.repository_for(Customer).get(str(user_id))
    except ObjectNotFoundError:
        return None


def contact_email_for(user_id) -> str | None:
    """Return the customer's contact email, or None when it cannot be resolved."""
    customer = find_customer(user_id)
    if customer is None or not customer.email:
        return None
    return customer.email


def saved_address_for(user_id) -> str | None:
    customer = find_customer(user_id)
    return customer.address if customer else None
