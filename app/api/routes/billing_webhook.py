import json
import logging
from typing import Optional
from fastapi import APIRouter, Request, Header, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db
from app.services import billing_service, razorpay_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing Webhook"])


@router.post("/webhook")
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    payload = await request.body()

    try:
        razorpay_service.verify_webhook(payload, x_razorpay_signature)
        event = json.loads(payload)
        if not isinstance(event, dict):
            raise ValueError("Invalid webhook payload")
    except ValueError as e:
        logger.warning(f"Webhook rejected: {e}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(e)})

    logger.info(f"Webhook received: event={event.get('event')}")
    billing_service.handle_subscription_event(event, db)

    return {"received": True}
