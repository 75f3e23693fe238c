"""
Caller resolution for organization-scoped endpoints.

Credentials are verified upstream; requests reach this service with the
user id in a header, which is resolved to an active user that belongs to
an organization.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.database_models import User

logger = logging.getLogger(__name__)


async def get_current_active_user(
    x_user_id: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> User:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario no identificado"
        )

    user = db.query(User).filter(User.id == x_user_id).first()
    if not user:
        logger.info(f"Unknown user id in request header: {x_user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario no identificado"
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Usuario inactivo"
        )
    if not user.organization_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No se encontró una organización para el usuario"
        )
    return user
