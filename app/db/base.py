from datetime import datetime, timezone
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# All models must import Base from this module; app.db.models registers them


def utcnow() -> datetime:
    """Naive UTC now; all timestamps are stored as UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
