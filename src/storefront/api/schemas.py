"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands. Request bodies accept the camelCase keys the
storefront client sends as well as snake_case. Identifiers are optional at
this layer so that a missing one is reported as ``Missing orderId`` rather
than a schema error.
"""

from pydantic import BaseModel, ConfigDict, Field


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Payment sessions
# ---------------------------------------------------------------------------
class TransactionItemSchema(_Request):
    id: str
    price: int = Field(ge=0)
    quantity: int = Field(ge=1)
    name: str | None = None


class TransactionCustomerSchema(_Request):
    name: str | None = None
    email: str | None = None


class CreateTransactionRequest(_Request):
    order_id: str | None = Field(default=None, alias="orderId")
    amount: int | None = Field(default=None, ge=0)
    items: list[TransactionItemSchema] = Field(default_factory=list)
    customer: TransactionCustomerSchema = Field(default_factory=TransactionCustomerSchema)

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "orderId": "ORDER-1718000000000-9f1c2b3a",
                    "amount": 30000,
                    "items": [{"id": "prod-1", "price": 10000, "quantity": 3, "name": "Kopi Susu"}],
                    "customer": {"name": "Sari", "email": "sari@example.com"},
                }
            ]
        },
    )


class TransactionResponse(BaseModel):
    token: str
    redirect_url: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CancelOrderRequest(_Request):
    order_id: str | None = Field(default=None, alias="orderId")


class OrderStatusNotificationRequest(_Request):
    order_id: str | None = Field(default=None, alias="orderId")
    status: str | None = None


class ChangeStatusRequest(_Request):
    status: str | None = None


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class AddProductRequest(_Request):
    name: str
    price: int = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    category: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")


class UpdateProductRequest(_Request):
    name: str | None = None
    price: int | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    category: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")


class ProductResponse(BaseModel):
    id: str
    name: str
    price: int
    stock: int
    category: str | None = None
    image_url: str | None = None


class ProductIdResponse(BaseModel):
    product_id: str


class StatusResponse(BaseModel):
    success: bool = True
