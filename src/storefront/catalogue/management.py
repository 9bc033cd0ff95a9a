"""Catalogue administration — commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=255)
    price = Integer(required=True, min_value=0)
    stock = Integer(default=0, min_value=0)
    category = String(max_length=100)
    image_url = String(max_length=1000)


@storefront.command(part_of="Product")
class UpdateProduct:
    """Edit a product. Fields left unset keep their current value."""

    product_id = Identifier(required=True)
    name = String(max_length=255)
    price = Integer(min_value=0)
    stock = Integer(min_value=0)
    category = String(max_length=100)
    image_url = String(max_length=1000)


@storefront.command(part_of="Product")
class RemoveProduct:
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Product)
class CatalogueHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.add(
            name=command.name,
            price=command.price,
            stock=command.stock or 0,
            category=command.category,
            image_url=command.image_url,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        changes = {
            field: getattr(command, field)
            for field in ("name", "price", "stock", "category", "image_url")
            if getattr(command, field) is not None
        }
        product.update_details(**changes)
        repo.add(product)

    @handle(RemoveProduct)
    def remove_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.remove()
        repo.add(product)
        repo._dao.delete(product)
