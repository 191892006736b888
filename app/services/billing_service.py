"""
Billing service for Razorpay integration.

Handles plan catalog initialisation, subscription/order creation, checkout
verification, cancellation and webhook event processing.
"""
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session

from app.core import config
from app.core.gating import get_plan_tier, get_feature_access, as_naive_utc, utcnow
from app.db.init_db import DAY_PASS_PLAN_ID
from app.db.models.user import User
from app.db.models.plan import Plan
from app.db.models.subscription import Subscription
from app.services import razorpay_service

logger = logging.getLogger(__name__)

# Razorpay subscriptions must declare a billing cycle count
SUBSCRIPTION_TOTAL_COUNT = 120
FALLBACK_CONTACT = "9999999999"
DAY_PASS_HOURS = 24

# Catalog created by init_plans()
CATALOG_PLANS: List[Dict[str, Any]] = [
    {
        "name": "Starter Monthly",
        "amount": 19900,  # 199 INR
        "period": "monthly",
        "interval": 1,
        "description": "Unlimited AI Interviews, Priority Support",
        "type": "recurring",
        "features": [
            "Unlimited AI Interviews", "AI Voice Interviewer", "Voice-Based Responses",
            "Audio Recording", "Priority Support", "Detailed Analysis", "Valid for 1 Month",
        ],
    },
    {
        "name": "One Day Pass",
        "amount": 2000,  # 20 INR
        "period": "daily",
        "interval": 1,
        "description": "24-Hour Unlimited Access",
        "type": "one_time",
        "features": [
            "24-Hour Unlimited Access", "Instant Feedback", "No Subscription Commitment", "PDF Reports",
        ],
    },
]


class SubscriptionNotFound(ValueError):
    """The caller has no subscription row."""


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def _get_subscription(db: Session, user_id: str) -> Optional[Subscription]:
    return db.query(Subscription).filter(Subscription.user_id == user_id).first()


def list_plans(db: Session) -> List[Plan]:
    return db.query(Plan).order_by(Plan.price.asc()).all()


def get_plan(db: Session, plan_id: str) -> Plan:
    plan = db.query(Plan).filter(Plan.id == plan_id).first()
    if not plan:
        raise ValueError(f"Invalid Plan ID: {plan_id}")
    return plan


def _upsert_plan(db: Session, plan_id: str, data: Dict[str, Any]) -> Plan:
    plan = db.query(Plan).filter(Plan.id == plan_id).first()
    if plan is None:
        plan = Plan(id=plan_id)
        db.add(plan)
    plan.name = data["name"]
    plan.price = data["amount"]
    plan.interval = data["period"]
    plan.type = data["type"]
    plan.features = list(data["features"])
    db.commit()
    return plan


def init_plans(db: Session) -> List[Dict[str, Any]]:
    """
    Create the plan catalog.

    Recurring plans are created on Razorpay and stored under the returned id.
    One-time plans are paid through orders, so they get a local id instead.
    A failure on one plan is reported and does not stop the others.
    """
    client = razorpay_service.get_razorpay_client()
    results = []

    for data in CATALOG_PLANS:
        logger.info(f"Processing plan: {data['name']}")
        try:
            if data["type"] == "one_time":
                plan_id = f"plan_oneday_{_epoch_ms()}"
                logger.info(f"Generated local id for one-time plan: {plan_id}")
            else:
                rzp_plan = client.plan.create({
                    "period": data["period"],
                    "interval": data["interval"],
                    "item": {
                        "name": data["name"],
                        "amount": data["amount"],
                        "currency": config.RAZORPAY_CURRENCY,
                        "description": data["description"],
                    },
                })
                plan_id = rzp_plan["id"]
                logger.info(f"Created Razorpay plan: {plan_id}")

            _upsert_plan(db, plan_id, data)
            results.append({"name": data["name"], "status": "success", "id": plan_id})
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to create plan {data['name']}: {e}", exc_info=True)
            results.append({
                "name": data["name"],
                "status": "failed",
                "error": razorpay_service.error_message(e),
            })

    return results


def _create_order(client, user: User, plan: Plan) -> Dict[str, Any]:
    try:
        order = client.order.create({
            "amount": plan.price,
            "currency": config.RAZORPAY_CURRENCY,
            "receipt": f"rcpt_{str(user.id)[:8]}_{_epoch_ms()}",
            "notes": {
                "user_id": str(user.id),
                "plan_id": plan.id,
                "user_email": user.email,
            },
        })
    except Exception as e:
        logger.error(f"Order creation failed: user_id={user.id}, plan_id={plan.id}, error={e}")
        raise ValueError(f"Failed to create order: {razorpay_service.error_message(e)}")

    logger.info(f"Order created: order_id={order['id']}, user_id={user.id}, plan_id={plan.id}")
    return {
        "orderId": order["id"],
        "amount": plan.price,
        "currency": config.RAZORPAY_CURRENCY,
        "keyId": config.RAZORPAY_KEY_ID,
        "type": "one_time",
    }


def _get_or_create_customer(client, user: User, db: Session) -> str:
    subscription = _get_subscription(db, user.id)
    if subscription and subscription.razorpay_customer_id:
        return subscription.razorpay_customer_id

    email = user.email or f"user_{str(user.id)[:8]}@mockmate.app"
    name = user.full_name or (user.email.split("@")[0] if user.email else "User")
    contact = user.phone or FALLBACK_CONTACT

    try:
        customer = client.customer.create({
            "email": email,
            "name": name,
            "contact": contact,
            "fail_existing": "0",  # return the existing customer instead of failing
            "notes": {"user_id": str(user.id)},
        })
    except Exception as e:
        logger.error(f"Customer creation failed: user_id={user.id}, error={e}")
        raise ValueError(f"Failed to create customer: {razorpay_service.error_message(e)}")

    customer_id = customer["id"]
    if not subscription:
        subscription = Subscription(user_id=user.id, status="created")
        db.add(subscription)
    subscription.razorpay_customer_id = customer_id
    subscription.status = "created"
    db.commit()

    logger.info(f"Created Razorpay customer: customer_id={customer_id}, user_id={user.id}")
    return customer_id


def create_subscription(db: Session, user: User, plan_id: Optional[str]) -> Dict[str, Any]:
    """
    Start a checkout for a plan.

    One-time plans produce a Razorpay order; recurring plans produce a Razorpay
    subscription bound to the user's customer record.

    Returns:
        Checkout parameters for the Razorpay client widget
    """
    if not plan_id:
        raise ValueError("planId is required")

    client = razorpay_service.get_razorpay_client()
    plan = get_plan(db, plan_id)
    logger.info(f"Starting checkout: user_id={user.id}, plan={plan.name}, type={plan.type}")

    if plan.is_one_time:
        return _create_order(client, user, plan)

    customer_id = _get_or_create_customer(client, user, db)

    try:
        rzp_subscription = client.subscription.create({
            "plan_id": plan.id,
            "customer_id": customer_id,
            "total_count": SUBSCRIPTION_TOTAL_COUNT,
            "quantity": 1,
            "notes": {"user_id": str(user.id)},
        })
    except Exception as e:
        logger.error(f"Subscription creation failed: user_id={user.id}, plan_id={plan.id}, error={e}")
        raise ValueError(f"Failed to create subscription: {razorpay_service.error_message(e)}")

    subscription = _get_subscription(db, user.id)
    subscription.razorpay_subscription_id = rzp_subscription["id"]
    subscription.plan_id = plan.id
    db.commit()

    logger.info(f"Subscription created: subscription_id={rzp_subscription['id']}, user_id={user.id}")
    return {
        "subscriptionId": rzp_subscription["id"],
        "keyId": config.RAZORPAY_KEY_ID,
        "type": "recurring",
    }


def verify_payment(
    db: Session,
    user: User,
    payment_id: Optional[str],
    signature: Optional[str],
    subscription_id: Optional[str] = None,
    order_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Verify a checkout signature and activate the subscription.

    Subscription checkouts activate the row holding that Razorpay subscription
    id. Order checkouts (day pass) activate the caller's row for 24 hours.

    Raises:
        ValueError: Missing details or invalid signature
    """
    if not payment_id or not signature:
        raise ValueError("Missing required payment details")

    client = razorpay_service.get_razorpay_client()
    is_valid = False

    if subscription_id:
        is_valid = razorpay_service.verify_subscription_signature(client, payment_id, subscription_id, signature)
        if is_valid:
            subscription = db.query(Subscription).filter(
                Subscription.razorpay_subscription_id == subscription_id
            ).first()
            if subscription:
                subscription.status = "active"
                subscription.cancelled_at = None
                db.commit()
            else:
                logger.warning(f"Verified payment for unknown subscription_id={subscription_id}")
    elif order_id:
        is_valid = razorpay_service.verify_order_signature(client, order_id, payment_id, signature)
        if is_valid:
            subscription = _get_subscription(db, user.id)
            if not subscription:
                subscription = Subscription(user_id=user.id)
                db.add(subscription)
            subscription.status = "active"
            subscription.plan_id = DAY_PASS_PLAN_ID
            subscription.current_period_end = utcnow() + timedelta(hours=DAY_PASS_HOURS)
            subscription.cancelled_at = None
            db.commit()

    if not is_valid:
        raise ValueError("Invalid signature")

    logger.info(f"Payment verified: user_id={user.id}, payment_id={payment_id}")
    return {"success": True, "message": "Payment verified and activated."}


def _is_already_cancelled_error(error: Exception) -> bool:
    message = razorpay_service.error_message(error).lower()
    return "not cancellable" in message or "already cancelled" in message


def cancel_subscription(db: Session, user: User) -> Dict[str, Any]:
    """
    Cancel the caller's subscription on Razorpay (when there is one) and locally.

    Raises:
        SubscriptionNotFound: The caller has no subscription row
    """
    subscription = _get_subscription(db, user.id)
    if not subscription:
        raise SubscriptionNotFound("No active subscription found")

    logger.info(f"Cancelling subscription: user_id={user.id}, status={subscription.status}")

    if subscription.status == "cancelled":
        return {
            "success": True,
            "message": "Subscription is already cancelled",
            "alreadyCancelled": True,
        }

    rzp_subscription_id = subscription.razorpay_subscription_id
    if not rzp_subscription_id:
        # One-time purchases have nothing to cancel remotely
        subscription.status = "cancelled"
        subscription.cancelled_at = utcnow()
        db.commit()
        return {"success": True, "message": "Subscription cancelled"}

    client = razorpay_service.get_razorpay_client()
    try:
        client.subscription.cancel(rzp_subscription_id, {"cancel_at_cycle_end": 0})
    except Exception as e:
        if not _is_already_cancelled_error(e):
            raise
        logger.info(f"Subscription already cancelled on Razorpay: subscription_id={rzp_subscription_id}")

    subscription.status = "cancelled"
    subscription.cancelled_at = utcnow()
    db.commit()
    db.refresh(subscription)

    logger.info(f"Subscription cancelled: user_id={user.id}, subscription_id={rzp_subscription_id}")
    ends_at = subscription.current_period_end
    return {
        "success": True,
        "message": "Subscription cancelled successfully",
        "endsAt": ends_at.isoformat() if ends_at else None,
    }


def handle_subscription_event(event: Dict[str, Any], db: Session) -> int:
    """
    Apply a subscription.* webhook payload.

    The row is located by Razorpay customer id; status, period end, subscription
    id and plan id are copied from the entity.

    Returns:
        Number of rows updated
    """
    entity = (((event.get("payload") or {}).get("subscription") or {}).get("entity"))
    if not entity:
        logger.debug(f"Webhook event without subscription entity: {event.get('event')}")
        return 0

    customer_id = entity.get("customer_id")
    status = entity.get("status")
    current_end = entity.get("current_end")

    rows = db.query(Subscription).filter(Subscription.razorpay_customer_id == customer_id).all()
    if not rows:
        logger.warning(f"Webhook: no subscription for customer_id={customer_id}")
        return 0

    for row in rows:
        if status:
            row.status = status
        row.current_period_end = as_naive_utc(datetime.fromtimestamp(current_end, timezone.utc)) if current_end else None
        row.razorpay_subscription_id = entity.get("id")
        row.plan_id = entity.get("plan_id")
        if status == "cancelled" and row.cancelled_at is None:
            row.cancelled_at = utcnow()

    db.commit()
    logger.info(
        f"Webhook applied: event={event.get('event')}, customer_id={customer_id}, "
        f"status={status}, rows={len(rows)}"
    )
    return len(rows)


def get_subscription_summary(db: Session, user: User) -> Dict[str, Any]:
    """Subscription row (if any) with the derived tier and feature access map."""
    subscription = _get_subscription(db, user.id)
    tier = get_plan_tier(subscription)
    return {
        "subscription": subscription,
        "plan_tier": tier,
        "is_pro": tier != "free",
        "features": get_feature_access(tier),
    }
