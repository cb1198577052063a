"""
Payment API endpoints

Order creation, payment verification and the seasonal offer.
"""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from primoboost.api.dependencies import get_payment_service
from primoboost.core.payment_service import PaymentError
from primoboost.models.payment import CreateOrderRequest, OfferStatus, OrderResponse

router = APIRouter()


class CreateOrderBody(CreateOrderRequest):
    user_id: str


class VerifyPaymentRequest(BaseModel):
    order_id: str
    payment_id: str
    signature: str


def client_ip(request: Request) -> str:
    """Caller address as reported by the proxy in front of the service."""
    return (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
        or "0.0.0.0"
    )


@router.post("/orders", response_model=OrderResponse)
async def create_order(body: CreateOrderBody, request: Request) -> OrderResponse:
    try:
        return await get_payment_service().create_order(
            body.user_id,
            CreateOrderRequest(**body.model_dump(exclude={"user_id"})),
            client_ip(request),
        )
    except PaymentError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/verify")
async def verify_payment(request: VerifyPaymentRequest) -> dict:
    try:
        return await get_payment_service().verify_payment(
            request.order_id, request.payment_id, request.signature
        )
    except PaymentError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/offer", response_model=OfferStatus)
async def get_offer() -> OfferStatus:
    return get_payment_service().get_offer()
