"""
Pydantic schemas for billing endpoints.

Field names follow the Razorpay checkout widget (camelCase request keys and
razorpay_* callback keys) so the frontend can pass them through unchanged.
"""
from typing import Optional, List, Dict
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


class PlanResponse(BaseModel):
    """A pricing tier."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Razorpay plan id, or a local id for one-time plans")
    name: str
    price: int = Field(..., description="Price in paise")
    interval: str = Field(..., description="daily | monthly | yearly")
    type: str = Field("recurring", description="recurring | one_time")
    features: List[str] = Field(default_factory=list)


class PlanInitResult(BaseModel):
    name: str
    status: str = Field(..., description="success | failed")
    id: Optional[str] = None
    error: Optional[str] = None


class PlanInitResponse(BaseModel):
    results: List[PlanInitResult]


class CreateSubscriptionRequest(BaseModel):
    """Request schema for starting a checkout."""
    planId: Optional[str] = Field(None, description="Plan id to subscribe to")

    model_config = ConfigDict(json_schema_extra={"example": {"planId": "plan_mock_monthly"}})


class VerifyPaymentRequest(BaseModel):
    """Payload the Razorpay widget hands to its success handler."""
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    razorpay_subscription_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "razorpay_payment_id": "pay_29QQoUBi66xm2f",
                "razorpay_order_id": "order_9A33XWu170gUtm",
                "razorpay_signature": "9ef4dffbfd84f1318f6739a3ce19f9d85851857ae648f114332d8401e0949a3d",
            }
        }
    )


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    razorpay_customer_id: Optional[str] = None
    razorpay_subscription_id: Optional[str] = None
    plan_id: Optional[str] = None
    status: str
    current_period_end: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None


class SubscriptionSummaryResponse(BaseModel):
    """Current subscription plus derived plan tier and feature access."""
    subscription: Optional[SubscriptionResponse] = None
    plan_tier: str = Field(..., description="free | one_day | starter | pro_monthly | pro_yearly")
    is_pro: bool
    features: Dict[str, bool]


class BillingErrorResponse(BaseModel):
    """Error response schema for billing operations."""
    error: str = Field(..., description="Error message")

    model_config = ConfigDict(json_schema_extra={"example": {"error": "planId is required"}})
