"""
Razorpay client construction and signature verification.
"""
import logging
from typing import Optional
import razorpay
from razorpay.errors import SignatureVerificationError

from app.core import config

logger = logging.getLogger(__name__)


class RazorpayNotConfigured(ValueError):
    """Raised when an operation needs API credentials that are not set."""


def get_razorpay_client(require_credentials: bool = True) -> razorpay.Client:
    """
    Build a Razorpay client from the configured key pair.

    Args:
        require_credentials: Raise instead of building an unauthenticated client
            when RAZORPAY_KEY_ID / RAZORPAY_KEY_SECRET are missing.
    """
    key_id = config.RAZORPAY_KEY_ID
    key_secret = config.RAZORPAY_KEY_SECRET
    logger.debug(f"Razorpay key id present: {bool(key_id)}, key secret present: {bool(key_secret)}")

    if require_credentials and (not key_id or not key_secret):
        raise RazorpayNotConfigured("Razorpay credentials not configured")

    client = razorpay.Client(auth=(key_id or "", key_secret or ""))
    client.set_app_details({"title": "MockMate", "version": "1.0.0"})
    return client


def error_message(error: Exception) -> str:
    """Human-readable message for an SDK error (the description Razorpay returned)."""
    message = str(error).strip()
    return message or type(error).__name__


def verify_subscription_signature(
    client: razorpay.Client,
    payment_id: str,
    subscription_id: str,
    signature: str,
) -> bool:
    """Checkout signature for subscriptions: HMAC of "payment_id|subscription_id"."""
    try:
        client.utility.verify_subscription_payment_signature({
            "razorpay_subscription_id": subscription_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        })
        return True
    except SignatureVerificationError as e:
        logger.warning(f"Subscription signature mismatch: subscription_id={subscription_id}, error={e}")
        return False


def verify_order_signature(
    client: razorpay.Client,
    order_id: str,
    payment_id: str,
    signature: str,
) -> bool:
    """Checkout signature for orders: HMAC of "order_id|payment_id"."""
    try:
        client.utility.verify_payment_signature({
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        })
        return True
    except SignatureVerificationError as e:
        logger.warning(f"Order signature mismatch: order_id={order_id}, error={e}")
        return False


def verify_webhook(body: bytes, signature: Optional[str]) -> None:
    """
    Verify a webhook body against the X-Razorpay-Signature header.

    Raises:
        ValueError: If the signature or secret is missing, or the signature is invalid
    """
    secret = config.RAZORPAY_WEBHOOK_SECRET
    if not signature or not secret:
        raise ValueError("Missing signature or secret")

    client = get_razorpay_client(require_credentials=False)
    try:
        client.utility.verify_webhook_signature(body.decode("utf-8"), signature, secret)
    except (SignatureVerificationError, UnicodeDecodeError) as e:
        logger.error(f"Webhook signature verification failed: {e}")
        raise ValueError("Invalid signature")
