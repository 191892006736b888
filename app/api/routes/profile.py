"""
Profile endpoints: name, avatar, study details and resume reference.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user_obj
from app.core.gating import utcnow
from app.db.models.user import User
from app.schemas.profile import ProfileResponse, ProfileUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse)
def get_profile(user: User = Depends(get_current_user_obj)):
    return user


@router.patch("", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """Apply only the fields present in the request body."""
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(user, field, value)
    user.updated_at = utcnow()

    db.commit()
    db.refresh(user)

    logger.info(f"Profile updated: user_id={user.id}, fields={sorted(changes)}")
    return user
