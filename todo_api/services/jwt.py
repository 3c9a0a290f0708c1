"""JWT Token Service."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from todo_api.config import get_settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass
class TokenPair:
    """Access token for the bearer header plus refresh token for the cookie."""

    access_token: str
    refresh_token: str


class JWTService:
    """Handles JWT token creation and validation."""

    def __init__(self) -> None:
        settings = get_settings()
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.access_expire = timedelta(days=settings.JWT_ACCESS_EXPIRE_DAYS)
        self.refresh_expire = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)

    def create_token(self, user_id: int, token_type: str = ACCESS_TOKEN_TYPE) -> str:
        """Create a signed token of the given type for the user."""
        lifetime = self.refresh_expire if token_type == REFRESH_TOKEN_TYPE else self.access_expire
        payload = {
            "sub": str(user_id),
            "type": token_type,
            "exp": datetime.utcnow() + lifetime,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def create_token_pair(self, user_id: int) -> TokenPair:
        """Create a fresh access/refresh pair for the user."""
        return TokenPair(
            access_token=self.create_token(user_id, ACCESS_TOKEN_TYPE),
            refresh_token=self.create_token(user_id, REFRESH_TOKEN_TYPE),
        )

    def decode_token(self, token: str, token_type: str = ACCESS_TOKEN_TYPE) -> dict[str, Any] | None:
        """Decode and validate a JWT token of the expected type. Returns None if invalid."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
        if payload.get("type") != token_type:
            return None
        try:
            payload["sub"] = int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        return payload

    @property
    def refresh_max_age(self) -> int:
        """Refresh token lifetime in seconds, for the cookie max-age."""
        return int(self.refresh_expire.total_seconds())


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
