"""Authentication dependencies for FastAPI routes."""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from todo_api.config import get_settings
from todo_api.database import get_db
from todo_api.services.auth import get_auth_service
from todo_api.services.jwt import get_jwt_service

REFRESH_COOKIE_NAME = "refreshToken"


@dataclass
class CurrentUser:
    """Authenticated user context."""

    user_id: int
    name: str
    email: str


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Validate the Bearer access token and load a live, active user. Raises 401 otherwise."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Access token required")

    payload = get_jwt_service().decode_token(token.strip())
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = get_auth_service().get_user(db, payload["sub"])
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid token or user not found")

    return CurrentUser(user_id=user.id, name=user.name, email=user.email)


def set_refresh_cookie(response: Response, token: str) -> None:
    """Set the http-only refresh token cookie."""
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="strict",
        secure=get_settings().is_production,
        max_age=get_jwt_service().refresh_max_age,
    )


def clear_refresh_cookie(response: Response) -> None:
    """Clear the refresh token cookie."""
    response.delete_cookie(
        key=REFRESH_COOKIE_NAME,
        httponly=True,
        samesite="strict",
        secure=get_settings().is_production,
    )
