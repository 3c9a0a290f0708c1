"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from todo_api.config import get_settings
from todo_api.database import get_db
from todo_api.dependencies import (
    REFRESH_COOKIE_NAME,
    CurrentUser,
    clear_refresh_cookie,
    get_current_user,
    set_refresh_cookie,
)
from todo_api.rate_limit import api_limit, limiter
from todo_api.schemas.auth import AuthResponse, LoginRequest, ProfileResponse, SignupRequest, UserResponse
from todo_api.services.auth import AuthResult, get_auth_service

logger = logging.getLogger("todo_api")

settings = get_settings()

router = APIRouter(tags=["Authentication"])


def _auth_payload(response: Response, result: AuthResult) -> dict:
    set_refresh_cookie(response, result.refresh_token)  # type: ignore[arg-type]
    return AuthResponse(
        user=UserResponse.model_validate(result.user),
        access_token=result.access_token,  # type: ignore[arg-type]
    ).to_json()


@router.post("/signup", status_code=201)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def signup(request: Request, response: Response, body: SignupRequest, db: Session = Depends(get_db)) -> dict:
    """Register a new user account."""
    result = get_auth_service().signup(db, body.name, body.email, body.password)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    logger.info("User %d signed up", result.user.id)  # type: ignore[union-attr]
    return {"success": True, "message": "User created successfully", "data": _auth_payload(response, result)}


@router.post("/login")
@limiter.limit(settings.AUTH_RATE_LIMIT)
def login(request: Request, response: Response, body: LoginRequest, db: Session = Depends(get_db)) -> dict:
    """Authenticate and receive an access token plus refresh cookie."""
    result = get_auth_service().login(db, body.email, body.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.error)

    return {"success": True, "message": "Login successful", "data": _auth_payload(response, result)}


@router.post("/refresh")
@limiter.limit(settings.AUTH_RATE_LIMIT)
def refresh(request: Request, response: Response, db: Session = Depends(get_db)) -> dict:
    """Rotate the refresh cookie and issue a new access token."""
    token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Refresh token not found")

    result = get_auth_service().refresh(db, token)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.error)

    set_refresh_cookie(response, result.refresh_token)  # type: ignore[arg-type]
    return {
        "success": True,
        "message": "Token refreshed successfully",
        "data": {"accessToken": result.access_token},
    }


@router.post("/logout")
def logout(response: Response) -> dict:
    """Clear the refresh cookie."""
    clear_refresh_cookie(response)
    return {"success": True, "message": "Logout successful"}


@router.get("/profile")
@api_limit
def profile(request: Request, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    """Return the caller's own user record."""
    record = get_auth_service().get_user(db, user.user_id)
    if not record:
        raise HTTPException(status_code=404, detail="User not found")

    data = ProfileResponse(
        id=record.id,
        name=record.name,
        email=record.email,
        created_at=record.created_at,
        last_login=record.last_login_at,
    )
    return {"success": True, "data": {"user": data.to_json()}}
