"""
Seed the default plan catalog and optionally activate a plan for an account.

Run: python -m scripts.seed_plans [--grant EMAIL PLAN_ID]
"""
import argparse
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session

from app.db.init_db import seed_default_plans
from app.db.session import SessionLocal
from app.db.models.user import User
from app.db.models.plan import Plan
from app.db.models.subscription import Subscription

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def grant_plan(db: Session, email: str, plan_id: str) -> bool:
    """Mark an existing account's subscription active on a plan (manual upgrades, QA)."""
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user:
        logger.error(f"User {email} not found")
        return False

    if not db.query(Plan).filter(Plan.id == plan_id).first():
        logger.error(f"Plan {plan_id} not found")
        return False

    subscription = db.query(Subscription).filter(Subscription.user_id == user.id).first()
    if subscription:
        logger.info(f"Updating existing subscription for user {user.id}")
    else:
        logger.info(f"Creating subscription for user {user.id}")
        subscription = Subscription(user_id=user.id)
        db.add(subscription)

    subscription.plan_id = plan_id
    subscription.status = "active"
    subscription.cancelled_at = None
    db.commit()
    logger.info(f"User {email} is now active on {plan_id}")
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--grant", nargs=2, metavar=("EMAIL", "PLAN_ID"), help="Activate a plan for an account")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        count = seed_default_plans(db)
        print(f"[SUCCESS] Seeded {count} plans")
        if args.grant and not grant_plan(db, *args.grant):
            print(f"[ERROR] Could not grant {args.grant[1]} to {args.grant[0]}")
            return 1
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
