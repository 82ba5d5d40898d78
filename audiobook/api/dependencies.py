"""FastAPI dependencies for authentication and services."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from audiobook.database import get_db
from audiobook.models.user import User
from audiobook.services.auth import AuthService, decode_access_token, require_admin
from audiobook.services.catalog import CatalogService
from audiobook.services.progress import ProgressService
from audiobook.services.recommendations import RecommendationService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from the bearer access token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token, authorization denied",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    if payload is None or not str(payload.get("sub", "")).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == int(payload["sub"])).first()
    if user is None:
        logger.warning(f"Token for unknown user {payload['sub']}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_admin_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get the current user, requiring the admin role."""
    require_admin(current_user)
    return current_user


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
) -> AuthService:
    """Get auth service with dependencies."""
    return AuthService(db)


def get_catalog_service(
    db: Annotated[Session, Depends(get_db)],
) -> CatalogService:
    """Get catalog service with dependencies."""
    return CatalogService(db)


def get_progress_service(
    db: Annotated[Session, Depends(get_db)],
) -> ProgressService:
    """Get progress service with dependencies."""
    return ProgressService(db)


def get_recommendation_service(
    db: Annotated[Session, Depends(get_db)],
) -> RecommendationService:
    """Get recommendation service with dependencies."""
    return RecommendationService(db)
