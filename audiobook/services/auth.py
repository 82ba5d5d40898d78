"""Authentication service: passwords, JWTs and the account lifecycle."""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from audiobook.config import get_settings
from audiobook.exceptions import (
    AuthenticationError,
    ConflictError,
    PermissionDeniedError,
    ValidationError,
)
from audiobook.models.user import User
from audiobook.services.email import EmailService

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"  # noqa: S105
REFRESH_TOKEN_TYPE = "refresh"  # noqa: S105


@dataclass
class AuthResult:
    """A user together with a freshly issued token pair."""

    user: User
    access_token: str
    refresh_token: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def _create_token(user_id: int, email: str, token_type: str, expires: timedelta, secret: str) -> str:
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "type": token_type,
        "jti": secrets.token_hex(8),
        "exp": datetime.now(UTC) + expires,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, email: str) -> str:
    """Create a short-lived JWT access token."""
    return _create_token(
        user_id,
        email,
        ACCESS_TOKEN_TYPE,
        timedelta(minutes=settings.access_token_expire_minutes),
        settings.jwt_secret,
    )


def create_refresh_token(user_id: int, email: str) -> str:
    """Create a long-lived JWT refresh token."""
    return _create_token(
        user_id,
        email,
        REFRESH_TOKEN_TYPE,
        timedelta(days=settings.refresh_token_expire_days),
        settings.refresh_secret,
    )


def decode_access_token(token: str) -> dict | None:
    """Decode and validate an access token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        return None
    return payload


def decode_refresh_token(token: str) -> dict | None:
    """Decode and validate a refresh token."""
    try:
        payload = jwt.decode(token, settings.refresh_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        return None
    return payload


def hash_reset_token(token: str) -> str:
    """Digest stored in place of the emailed reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def require_admin(user: User) -> None:
    """Raise unless the user has the admin role."""
    if not user.is_admin:
        raise PermissionDeniedError("Admin access required")


class AuthService:
    """Signup, login, token refresh and password reset."""

    def __init__(self, db: Session, email_service: EmailService | None = None):
        self.db = db
        self.email_service = email_service or EmailService()

    def _issue_tokens(self, user: User) -> AuthResult:
        """Issue a token pair, replacing the user's stored refresh token."""
        access_token = create_access_token(user.id, user.email)
        refresh_token = create_refresh_token(user.id, user.email)
        user.refresh_token = refresh_token
        user.last_login = datetime.now(UTC)
        self.db.commit()
        self.db.refresh(user)
        return AuthResult(user=user, access_token=access_token, refresh_token=refresh_token)

    def signup(self, name: str, email: str, password: str) -> AuthResult:
        """Create an account and sign it in."""
        if get_user_by_email(self.db, email):
            raise ConflictError("Email already in use")

        user = User(name=name, email=email, password_hash=get_password_hash(password))
        self.db.add(user)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Email already in use") from None
        result = self._issue_tokens(user)
        logger.info(f"User {user.id} signed up")

        # Not critical: EmailService logs and swallows delivery failures
        self.email_service.send_welcome_email(email, name)
        return result

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate a user by email and password."""
        user = get_user_by_email(self.db, email)
        if not user or not user.password_hash:
            logger.warning(f"Failed login for {email}")
            raise AuthenticationError("Invalid credentials")
        if not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for {email}")
            raise AuthenticationError("Invalid credentials")
        return self._issue_tokens(user)

    def login_with_google(self, profile: dict) -> AuthResult:
        """Sign in from a verified Google profile, creating the account on first use."""
        email = profile.get("email")
        if not email:
            raise ValidationError("No email found in Google profile")

        user = get_user_by_email(self.db, email)
        if user is None:
            user = User(
                name=profile.get("name") or email.split("@")[0],
                email=email,
                password_hash=None,
                profile_picture=profile.get("picture") or None,
            )
            self.db.add(user)
            self.db.flush()
            logger.info(f"Created user {user.id} from Google sign-in")
        return self._issue_tokens(user)

    def refresh(self, token: str | None) -> AuthResult:
        """Exchange the stored refresh token for a new pair."""
        if not token:
            raise AuthenticationError("Refresh token required")

        user = self.db.query(User).filter(User.refresh_token == token).first()
        if user is None:
            raise PermissionDeniedError("Invalid refresh token")

        if decode_refresh_token(token) is None:
            user.refresh_token = None
            self.db.commit()
            raise PermissionDeniedError("Invalid refresh token")

        return self._issue_tokens(user)

    def logout(self, user: User) -> None:
        """Invalidate the user's refresh token."""
        user.refresh_token = None
        self.db.commit()

    def forgot_password(self, email: str) -> None:
        """Start a password reset. Silent when the email is unknown."""
        user = get_user_by_email(self.db, email)
        if user is None:
            return

        reset_token = secrets.token_hex(32)
        user.reset_password_token = hash_reset_token(reset_token)
        user.reset_password_expires = datetime.now(UTC) + timedelta(
            minutes=settings.reset_token_expire_minutes
        )
        self.db.commit()

        self.email_service.send_password_reset_email(email, reset_token)

    def reset_password(self, token: str, new_password: str) -> AuthResult:
        """Complete a password reset and sign the user in."""
        user = (
            self.db.query(User)
            .filter(User.reset_password_token == hash_reset_token(token))
            .first()
        )
        if user is None or not _is_future(user.reset_password_expires):
            raise ValidationError("Invalid or expired reset token")

        user.password_hash = get_password_hash(new_password)
        user.reset_password_token = None
        user.reset_password_expires = None
        logger.info(f"Password reset for user {user.id}")
        return self._issue_tokens(user)


def _is_future(moment: datetime | None) -> bool:
    if moment is None:
        return False
    # SQLite returns naive datetimes
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment > datetime.now(UTC)
