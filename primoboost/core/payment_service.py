"""
Payment Service for PrimoBoost

Checkout flow for subscription plans and add-ons:
- coupon validation (per account, and per network for the seasonal offer)
- order creation on the payment gateway
- pending transaction records and signature verification
- the seasonal offer countdown
"""

import hashlib
import hmac
import logging
import time
from datetime import datetime, timezone
from typing import Any

import httpx

from primoboost.config.settings import get_settings
from primoboost.models.payment import (
    ADDON_ONLY_PLAN_ID,
    CreateOrderRequest,
    OfferStatus,
    OrderResponse,
    PurchaseType,
    TransactionStatus,
)
from primoboost.storage.database import Database

logger = logging.getLogger(__name__)

TRANSACTIONS_TABLE = "payment_transactions"
IP_USAGE_TABLE = "ip_coupon_usage"


class PaymentError(Exception):
    """Checkout failure with a message that can be shown to the user."""
    pass


class PaymentGatewayError(PaymentError):
    """The payment gateway rejected or failed the request."""
    pass


class RazorpayGateway:
    """Minimal Razorpay Orders API client."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        api_url: str = "https://api.razorpay.com",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.client = httpx.AsyncClient(
            base_url=api_url,
            auth=(key_id, key_secret),
            timeout=30.0,
            transport=transport,
        )

    async def create_order(self, amount: int, currency: str, receipt: str) -> dict[str, Any]:
        try:
            response = await self.client.post(
                "/v1/orders",
                json={"amount": amount, "currency": currency, "receipt": receipt},
            )
        except httpx.HTTPError as e:
            logger.error(f"Razorpay request failed: {e}")
            raise PaymentGatewayError(f"Payment gateway unavailable: {e}") from e

        if not response.is_success:
            logger.error(f"Razorpay order creation failed: {response.status_code} {response.text}")
            raise PaymentGatewayError(f"Payment gateway error {response.status_code}")
        return response.json()

    async def close(self):
        await self.client.aclose()


def offer_discount(amount: int, discount_percent: int) -> int:
    """
    Discount granted by the offer coupon, in paise.

    ``amount`` is already discounted, so the original price is
    amount / (1 - pct/100) and the discount is floor(original * pct/100).
    """
    if discount_percent >= 100:
        return 0
    return (amount * discount_percent) // (100 - discount_percent)


class PaymentService:
    """Coupon rules, order creation and transaction bookkeeping."""

    def __init__(self, database: Database, gateway: RazorpayGateway | None = None):
        self.database = database
        self.gateway = gateway
        self.settings = get_settings()

    @property
    def offer_code(self) -> str:
        return self.settings.offer_coupon_code.lower()

    # =========================================================================
    # ORDERS
    # =========================================================================

    async def _validate_coupon(self, user_id: str, coupon_code: str, client_ip: str) -> None:
        try:
            used = await self.database.count(
                TRANSACTIONS_TABLE,
                filters={"user_id": user_id, "coupon_code": coupon_code},
                in_filters={"status": [TransactionStatus.SUCCESS.value, TransactionStatus.PENDING.value]},
            )
        except Exception as e:
            logger.error(f"Error checking coupon usage: {e}")
            raise PaymentError("Failed to verify coupon usage.") from e

        if used > 0:
            if coupon_code == self.offer_code:
                raise PaymentError(
                    f"You have already redeemed your Diwali {self.settings.offer_discount_percent}% OFF coupon. "
                    "Each user can use this offer only once."
                )
            raise PaymentError(f'Coupon "{coupon_code}" has already been used by this account.')

        if coupon_code == self.offer_code:
            logger.info(f"Checking IP restriction for {coupon_code} coupon. IP: {client_ip}")
            try:
                ip_count = await self.database.count(
                    IP_USAGE_TABLE,
                    filters={"ip_address": client_ip, "coupon_code": coupon_code},
                )
            except Exception as e:
                logger.error(f"Error checking IP coupon usage: {e}")
                return
            if ip_count > 0:
                raise PaymentError(
                    "This Diwali offer has already been claimed from your network. "
                    "Each household/IP can use it only once."
                )

    async def create_order(
        self,
        user_id: str,
        request: CreateOrderRequest,
        client_ip: str = "0.0.0.0",
    ) -> OrderResponse:
        """
        Validate the coupon, create a gateway order and a pending transaction.

        Raises:
            PaymentError: With a user-facing message
        """
        if not request.plan_id or request.amount is None:
            raise PaymentError("Missing required fields: planId and amount")

        coupon_code = request.coupon_code.lower() if request.coupon_code else None
        if coupon_code:
            await self._validate_coupon(user_id, coupon_code, client_ip)
            logger.info(f"Coupon validation passed for: {coupon_code}")

        if not self.gateway:
            raise PaymentError("Razorpay credentials are not configured.")

        currency = self.settings.payment_currency
        order = await self.gateway.create_order(
            amount=request.amount,
            currency=currency,
            receipt=f"receipt_{int(time.time() * 1000)}",
        )
        logger.info(f"Razorpay order created: {order.get('id')}")

        if request.plan_id == ADDON_ONLY_PLAN_ID:
            purchase_type = PurchaseType.ADDON_ONLY
        elif request.selected_add_ons:
            purchase_type = PurchaseType.PLAN_WITH_ADDONS
        else:
            purchase_type = PurchaseType.PLAN

        discount_amount = 0
        if coupon_code == self.offer_code:
            discount_amount = offer_discount(request.amount, self.settings.offer_discount_percent)
            logger.info(f"Offer coupon discount: {discount_amount}, final: {request.amount}")

        try:
            transaction = await self.database.insert(TRANSACTIONS_TABLE, {
                "user_id": user_id,
                "plan_id": None if request.plan_id == ADDON_ONLY_PLAN_ID else request.plan_id,
                "status": TransactionStatus.PENDING.value,
                "amount": request.amount + discount_amount + request.wallet_deduction,
                "currency": currency,
                "order_id": order["id"],
                "coupon_code": coupon_code,
                "discount_amount": discount_amount,
                "final_amount": request.amount,
                "purchase_type": purchase_type.value,
                "wallet_deduction_amount": request.wallet_deduction,
            })
        except Exception as e:
            logger.error(f"Error inserting payment transaction: {e}")
            raise PaymentError("Failed to create payment transaction record.") from e

        if coupon_code == self.offer_code:
            try:
                await self.database.insert(IP_USAGE_TABLE, {
                    "ip_address": client_ip,
                    "coupon_code": coupon_code,
                    "user_id": user_id,
                })
            except Exception as e:
                logger.error(f"Error recording IP coupon usage: {e}")

        return OrderResponse(
            order_id=order["id"],
            amount=order.get("amount", request.amount),
            currency=order.get("currency", currency),
            key_id=self.gateway.key_id,
            transaction_id=transaction["id"],
        )

    # =========================================================================
    # VERIFICATION
    # =========================================================================

    def _expected_signature(self, order_id: str, payment_id: str) -> str:
        return hmac.new(
            self.settings.razorpay_key_secret.encode(),
            f"{order_id}|{payment_id}".encode(),
            hashlib.sha256,
        ).hexdigest()

    async def verify_payment(self, order_id: str, payment_id: str, signature: str) -> dict[str, Any]:
        """Check the gateway signature and settle the transaction."""
        if not self.settings.razorpay_key_secret:
            raise PaymentError("Razorpay credentials are not configured.")

        valid = hmac.compare_digest(self._expected_signature(order_id, payment_id), signature)
        status = TransactionStatus.SUCCESS if valid else TransactionStatus.FAILED

        values: dict[str, Any] = {"status": status.value}
        if valid:
            values["payment_id"] = payment_id
        rows = await self.database.update(TRANSACTIONS_TABLE, values, {"order_id": order_id})

        if not valid:
            logger.warning(f"Invalid payment signature for order {order_id}")
            raise PaymentError("Invalid payment signature.")

        logger.info(f"Payment {payment_id} verified for order {order_id}")
        return {
            "success": True,
            "order_id": order_id,
            "payment_id": payment_id,
            "transaction_id": rows[0]["id"] if rows else None,
        }

    # =========================================================================
    # OFFER
    # =========================================================================

    def get_offer(self, now: datetime | None = None) -> OfferStatus:
        """Seasonal offer with the time left until it ends."""
        now = now or datetime.now(timezone.utc)
        ends_at = datetime.fromisoformat(self.settings.offer_end_at)
        if ends_at.tzinfo is None:
            # Offer end times without an offset are read as UTC
            ends_at = ends_at.replace(tzinfo=timezone.utc)
        remaining = max(0, int((ends_at - now).total_seconds()))

        days, rest = divmod(remaining, 86400)
        hours, rest = divmod(rest, 3600)
        minutes, seconds = divmod(rest, 60)

        return OfferStatus(
            coupon_code=self.offer_code,
            discount_percent=self.settings.offer_discount_percent,
            ends_at=ends_at,
            active=remaining > 0,
            days=days,
            hours=hours,
            minutes=minutes,
            seconds=seconds,
        )
