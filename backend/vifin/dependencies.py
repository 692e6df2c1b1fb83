"""
FastAPI dependencies.
"""

from typing import Generator, Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from vifin.database import SessionLocal
from vifin.errors import AuthenticationError
from vifin.models.user import User


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database sessions.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    x_user_id: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> str:
    """
    Resolve the calling user from the X-User-Id header.

    Authentication itself happens upstream; this only checks the user exists.
    """
    if not x_user_id:
        raise AuthenticationError("Missing X-User-Id header")

    user = db.query(User).filter(User.id == x_user_id).first()
    if not user:
        raise AuthenticationError("Unknown user")
    return user.id
