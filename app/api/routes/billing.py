"""
Billing endpoints: plan catalog, checkout, verification, cancellation.

Errors use the {"error": message} body the web client reads.
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user_obj, require_admin_key
from app.core.logging_config import sanitize_log_data
from app.db.models.user import User
from app.schemas.billing import (
    PlanResponse,
    PlanInitResponse,
    CreateSubscriptionRequest,
    VerifyPaymentRequest,
    SubscriptionSummaryResponse,
    BillingErrorResponse,
)
from app.services import billing_service, razorpay_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])

ERROR_RESPONSES = {
    400: {"model": BillingErrorResponse},
    401: {"description": "Not authenticated"},
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/plans", response_model=List[PlanResponse])
def list_plans(db: Session = Depends(get_db)):
    """All plans, cheapest first."""
    return billing_service.list_plans(db)


@router.post(
    "/plans/init",
    response_model=PlanInitResponse,
    dependencies=[Depends(require_admin_key)],
    responses={500: {"model": BillingErrorResponse}},
)
def init_plans(db: Session = Depends(get_db)):
    """
    Create the plan catalog on Razorpay and mirror it locally.

    Requires the X-Admin-Key header.
    """
    try:
        results = billing_service.init_plans(db)
    except razorpay_service.RazorpayNotConfigured as e:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    return {"results": results}


@router.post("/subscriptions", responses=ERROR_RESPONSES)
def create_subscription(
    payload: CreateSubscriptionRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """
    Start a checkout.

    Returns {orderId, amount, currency, keyId, type: "one_time"} for one-time
    plans and {subscriptionId, keyId, type: "recurring"} for recurring plans.
    """
    try:
        return billing_service.create_subscription(db, user, payload.planId)
    except ValueError as e:
        logger.warning(f"Checkout failed: user_id={user.id}, plan_id={payload.planId}, error={e}")
        return _error(status.HTTP_400_BAD_REQUEST, str(e))


@router.post("/verify", responses=ERROR_RESPONSES)
def verify_payment(
    payload: VerifyPaymentRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    logger.info(f"Verify payment request: user_id={user.id}, payload={sanitize_log_data(payload.model_dump())}")
    try:
        return billing_service.verify_payment(
            db,
            user,
            payment_id=payload.razorpay_payment_id,
            signature=payload.razorpay_signature,
            subscription_id=payload.razorpay_subscription_id,
            order_id=payload.razorpay_order_id,
        )
    except ValueError as e:
        logger.warning(f"Payment verification failed: user_id={user.id}, error={e}")
        return _error(status.HTTP_400_BAD_REQUEST, str(e))


@router.post(
    "/cancel",
    responses={404: {"model": BillingErrorResponse}, 500: {"model": BillingErrorResponse}},
)
def cancel_subscription(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    try:
        return billing_service.cancel_subscription(db, user)
    except billing_service.SubscriptionNotFound as e:
        return _error(status.HTTP_404_NOT_FOUND, str(e))
    except Exception as e:
        logger.error(f"Cancel subscription failed: user_id={user.id}, error={e}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, razorpay_service.error_message(e))


@router.get("/subscription", response_model=SubscriptionSummaryResponse)
def get_subscription(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """Current subscription with derived plan tier and feature access."""
    return billing_service.get_subscription_summary(db, user)
