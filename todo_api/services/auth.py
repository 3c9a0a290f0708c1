"""Authentication service."""

from dataclasses import dataclass
from datetime import datetime

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from todo_api.models.user import User
from todo_api.services.jwt import REFRESH_TOKEN_TYPE, get_jwt_service


@dataclass
class AuthResult:
    """Result of an authentication attempt."""

    success: bool
    error: str | None = None
    user: User | None = None
    access_token: str | None = None
    refresh_token: str | None = None


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class AuthService:
    """Handles user signup, login, and token refresh."""

    def _issue(self, user: User) -> AuthResult:
        tokens = get_jwt_service().create_token_pair(user.id)
        return AuthResult(
            success=True,
            user=user,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    def get_user_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == email.strip().lower()).first()

    def get_user(self, db: Session, user_id: int) -> User | None:
        return db.query(User).filter(User.id == user_id).first()

    def signup(self, db: Session, name: str, email: str, password: str) -> AuthResult:
        """Create a user account and issue tokens. Rejects duplicate emails."""
        if self.get_user_by_email(db, email):
            return AuthResult(success=False, error="User with this email already exists")

        user = User(
            name=name.strip(),
            email=email.strip().lower(),
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            db.rollback()
            return AuthResult(success=False, error="User with this email already exists")
        db.refresh(user)

        return self._issue(user)

    def login(self, db: Session, email: str, password: str) -> AuthResult:
        """Authenticate a user by email and password."""
        user = self.get_user_by_email(db, email)
        if not user:
            return AuthResult(success=False, error="Invalid credentials")

        if not verify_password(password, user.password_hash):
            return AuthResult(success=False, error="Invalid credentials")

        if not user.is_active:
            return AuthResult(success=False, error="Account is deactivated")

        user.last_login_at = datetime.utcnow()
        db.commit()
        db.refresh(user)

        return self._issue(user)

    def refresh(self, db: Session, refresh_token: str) -> AuthResult:
        """Exchange a valid refresh token for a new token pair."""
        payload = get_jwt_service().decode_token(refresh_token, REFRESH_TOKEN_TYPE)
        if not payload:
            return AuthResult(success=False, error="Invalid refresh token")

        user = self.get_user(db, payload["sub"])
        if not user or not user.is_active:
            return AuthResult(success=False, error="Invalid refresh token")

        return self._issue(user)

    def deactivate(self, db: Session, user_id: int) -> bool:
        """Mark a user inactive. Returns False if the user does not exist."""
        user = self.get_user(db, user_id)
        if not user:
            return False
        user.is_active = False
        db.commit()
        return True


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
