"""HTTP surface for the checkout.

Usage:
    uvicorn api:app --host 0.0.0.0 --port 8000
"""
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from temporalio.client import Client

from config import Settings
from errors import CheckoutError, UnexpectedError, ValidationError
from gateway import OrderGateway, TemporalOrderGateway
from models import Address, ConfirmationRequest, Customer, LineItem, OrderRequest

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST BODIES
# =============================================================================

class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AddressIn(_Body):
    street: str = ""
    zip: str = ""
    city: str = ""


class CustomerIn(_Body):
    full_name: str = Field("", alias="fullName")
    email: str = ""
    address: Optional[AddressIn] = None

    def to_customer(self) -> Customer:
        address = Address(**self.address.model_dump()) if self.address else None
        return Customer(full_name=self.full_name.strip(), email=self.email.strip(), address=address)


class LineItemIn(_Body):
    name: str
    price: float
    quantity: int = 1
    selected_size: Optional[str] = Field(None, alias="selectedSize")
    selected_color: Optional[str] = Field(None, alias="selectedColor")

    def to_line_item(self) -> LineItem:
        return LineItem(
            name=self.name,
            price=float(self.price),
            quantity=self.quantity,
            selected_size=self.selected_size,
            selected_color=self.selected_color,
        )


class CreateOrderIn(_Body):
    customer: Optional[CustomerIn] = None
    items: Optional[List[LineItemIn]] = None


class PaymentDetailsIn(_Body):
    id: Optional[str] = None


class ConfirmOrderIn(_Body):
    payment_details: Optional[PaymentDetailsIn] = Field(None, alias="paymentDetails")
    customer: Optional[CustomerIn] = None


# =============================================================================
# ERROR MAPPING
# =============================================================================

def _error_response(error: CheckoutError) -> JSONResponse:
    if error.status_code >= 500:
        message = error.public_message
    else:
        message = error.message
    return JSONResponse(
        status_code=error.status_code,
        content={"error": type(error).__name__, "message": message},
    )


async def _checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    return _error_response(exc)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return _error_response(ValidationError(problems or "Malformed request body"))


async def _run(call, *args) -> dict:
    try:
        return await call(*args)
    except CheckoutError:
        raise
    except Exception as e:
        logger.exception("Unhandled error while processing request")
        raise UnexpectedError() from e


# =============================================================================
# APP
# =============================================================================

def create_app(gateway: Optional[OrderGateway] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.gateway is None:
            client = await Client.connect(settings.temporal_address, namespace=settings.temporal_namespace)
            app.state.gateway = TemporalOrderGateway(
                client,
                settings.task_queue,
                execution_timeout=timedelta(seconds=settings.workflow_timeout_seconds),
            )
            logger.info("Connected to Temporal at %s (queue %s)", settings.temporal_address, settings.task_queue)
        yield

    app = FastAPI(title="Storefront Checkout", lifespan=lifespan)
    app.state.gateway = gateway
    app.state.settings = settings
    app.add_exception_handler(CheckoutError, _checkout_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/orders", status_code=201)
    async def create_order(body: CreateOrderIn, request: Request):
        order_request = OrderRequest(
            customer=body.customer.to_customer() if body.customer else None,
            items=[item.to_line_item() for item in body.items or []],
            shipping=settings.shipping_policy,
        )
        result = await _run(request.app.state.gateway.create_order, order_request)
        logger.info("Order %s created, total %s", result["order_id"], result["total"])
        return {"success": True, "orderId": result["order_id"], "total": result["total"]}

    @app.post("/orders/{order_id}/confirm")
    async def confirm_order(order_id: str, body: ConfirmOrderIn, request: Request):
        payment_id = body.payment_details.id if body.payment_details else None
        if not payment_id or not payment_id.strip():
            raise ValidationError("Payment details are required")

        confirmation_request = ConfirmationRequest(
            order_id=order_id,
            payment_id=payment_id.strip(),
            customer=body.customer.to_customer() if body.customer else None,
        )
        result = await _run(request.app.state.gateway.confirm_order, confirmation_request)
        logger.info("Order %s paid (transaction %s)", result["order_id"], result["transaction_id"])
        return {"success": True, "orderId": result["order_id"], "transactionId": result["transaction_id"]}

    return app


app = create_app()


def main():
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("api:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
