"""
Payment models for PrimoBoost
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class TransactionStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class PurchaseType(str, Enum):
    PLAN = "plan"
    PLAN_WITH_ADDONS = "plan_with_addons"
    ADDON_ONLY = "addon_only"


ADDON_ONLY_PLAN_ID = "addon_only_purchase"


class CreateOrderRequest(BaseModel):
    """Checkout request. Amounts are in paise."""

    plan_id: str | None = None
    amount: int | None = Field(default=None, ge=0)
    coupon_code: str | None = None
    wallet_deduction: int = Field(default=0, ge=0)
    selected_add_ons: dict[str, int] = Field(default_factory=dict)


class OrderResponse(BaseModel):
    order_id: str
    amount: int
    currency: str
    key_id: str
    transaction_id: str


class OfferStatus(BaseModel):
    """Seasonal offer with a live countdown."""

    coupon_code: str
    discount_percent: int
    ends_at: datetime
    active: bool
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
