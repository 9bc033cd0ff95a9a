"""FastAPI routes for the Storefront — payment sessions, orders, notifications and products."""

from fastapi import APIRouter
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddProductRequest,
    CancelOrderRequest,
    ChangeStatusRequest,
    CreateTransactionRequest,
    OrderStatusNotificationRequest,
    ProductIdResponse,
    ProductResponse,
    StatusResponse,
    TransactionResponse,
    UpdateProductRequest,
)
from storefront.cancellation.workflow import CancellationWorkflow
from storefront.catalogue.management import AddProduct, RemoveProduct, UpdateProduct
from storefront.catalogue.product import Product
from storefront.catalogue.queries import list_products
from storefront.gateway import get_gateway
from storefront.notifications.mailer import send_status_update
from storefront.order.lifecycle import OrderLifecycleController
from storefront.order.order import parse_status
from storefront.order.queries import order_views


def _require(value, message, field):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError({field: [message]})
    return value


def _product_response(product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        price=product.price,
        stock=product.stock,
        category=product.category,
        image_url=product.image_url,
    )


# ---------------------------------------------------------------------------
# Payment session Router
# ---------------------------------------------------------------------------
transaction_router = APIRouter(prefix="/transactions", tags=["transactions"])


@transaction_router.post("", response_model=TransactionResponse)
async def create_transaction(body: CreateTransactionRequest) -> TransactionResponse:
    order_id = _require(body.order_id, "Missing orderId", "order_id")
    amount = _require(body.amount, "Missing amount", "amount")

    session = get_gateway().create_session(
        order_reference=order_id,
        amount=amount,
        items=[item.model_dump() for item in body.items],
        customer={"first_name": body.customer.name, "email": body.customer.email},
    )
    return TransactionResponse(token=session.token, redirect_url=session.redirect_url)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("")
async def list_orders(owner_id: str | None = None, status: str | None = None) -> dict:
    return {"orders": order_views(owner_id=owner_id, status=status)}


@order_router.post("/cancel")
async def cancel_order(body: CancelOrderRequest) -> dict:
    order_id = _require(body.order_id, "Missing orderId", "order_id")
    report = CancellationWorkflow().run(order_id)
    return {"success": True, **report.to_dict()}


@order_router.put("/{order_id}/status")
async def change_order_status(order_id: str, body: ChangeStatusRequest) -> dict:
    status = _require(body.status, "Missing status", "status")
    result = OrderLifecycleController().transition(order_id, status)
    return {"success": True, **result.to_dict()}


# ---------------------------------------------------------------------------
# Notification Router
# ---------------------------------------------------------------------------
notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notification_router.post("/order-status")
async def notify_order_status(body: OrderStatusNotificationRequest) -> dict:
    order_id = _require(body.order_id, "Missing orderId", "order_id")
    status = parse_status(_require(body.status, "Missing status", "status"))
    sent = send_status_update(order_id, status.value)
    return {"success": True, "email_sent": sent}


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
async def get_products(search: str | None = None, category: str | None = None) -> list[ProductResponse]:
    return [_product_response(p) for p in list_products(search=search, category=category)]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return _product_response(current_domain.repository_for(Product).get(product_id))


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest) -> ProductIdResponse:
    command = AddProduct(
        name=body.name,
        price=body.price,
        stock=body.stock,
        category=body.category,
        image_url=body.image_url,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}", response_model=StatusResponse)
async def update_product(product_id: str, body: UpdateProductRequest) -> StatusResponse:
    command = UpdateProduct(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def remove_product(product_id: str) -> StatusResponse:
    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()
