"""Local authentication service (email/password) for campaign owners."""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError

from prizejet.auth.models import SubscriptionTier, UserAccount
from prizejet.errors import AuthRequiredError, NotFoundError, ValidationError
from prizejet.logging_config import get_logger
from prizejet.settings import settings
from prizejet.storage.db import Database

logger = get_logger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_ALGORITHM = "HS256"
MIN_PASSWORD_LENGTH = 8


class LocalAuthService:
    """Authentication service for local (email/password) users."""

    def __init__(self, db: Database):
        """Initialize auth service.

        Args:
            db: Database handle
        """
        self.db = db
        self.logger = get_logger(__name__)

    # ==================== PASSWORD ====================

    def _truncate_password(self, password: str) -> str:
        """Truncate password to 72 bytes (bcrypt limit)."""
        return password.encode("utf-8")[:72].decode("utf-8", errors="ignore")

    def hash_password(self, password: str) -> str:
        return pwd_context.hash(self._truncate_password(password))

    def verify_password(self, password: str, hashed: str) -> bool:
        return pwd_context.verify(self._truncate_password(password), hashed)

    # ==================== USER MANAGEMENT ====================

    def create_user(self, email: str, password: str, name: str | None = None) -> UserAccount:
        """Create a new local user.

        Args:
            email: User email
            password: Plain password
            name: Optional name

        Returns:
            Created user account

        Raises:
            ValidationError: If the email is taken or the password too short
        """
        email = email.strip().lower()
        if not email or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Email is required and passwords need at least {MIN_PASSWORD_LENGTH} characters."
            )

        with self.db.session() as session:
            existing = session.query(UserAccount).filter(UserAccount.email == email).first()
            if existing:
                raise ValidationError("Email already registered")

            user = UserAccount(
                email=email,
                name=name,
                password_hash=self.hash_password(password),
                subscription_tier=SubscriptionTier.FREE,
            )
            session.add(user)
            try:
                session.flush()
            except IntegrityError as exc:
                session.rollback()
                raise ValidationError("Email already registered") from exc

            self.logger.info("user_created", user_id=user.id)
            return user

    def authenticate(self, email: str, password: str) -> UserAccount:
        """Check credentials.

        Raises:
            AuthRequiredError: Unknown email, wrong password or inactive account
        """
        with self.db.session() as session:
            user = session.query(UserAccount).filter(
                UserAccount.email == email.strip().lower()
            ).first()

        if not user or not user.is_active or not self.verify_password(password, user.password_hash):
            self.logger.info("login_failed")
            raise AuthRequiredError("Invalid email or password")

        return user

    def set_subscription_tier(self, email: str, tier: SubscriptionTier) -> UserAccount:
        """Change an account's subscription tier (operator action)."""
        with self.db.session() as session:
            user = session.query(UserAccount).filter(
                UserAccount.email == email.strip().lower()
            ).first()
            if user is None:
                raise NotFoundError(f"No user with email {email}")
            user.subscription_tier = tier
            session.flush()
            self.logger.info("subscription_tier_changed", user_id=user.id, tier=tier.value)
            return user

    # ==================== TOKENS ====================

    def create_access_token(self, user: UserAccount) -> str:
        expires = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)
        payload: dict[str, Any] = {"sub": str(user.id), "email": user.email, "exp": expires}
        return jwt.encode(payload, settings.jwt_secret_key, algorithm=JWT_ALGORITHM)

    def get_user_from_token(self, token: str) -> UserAccount | None:
        """Resolve a bearer token to an active user, or None."""
        try:
            payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[JWT_ALGORITHM])
            user_id = int(payload.get("sub", ""))
        except (JWTError, ValueError):
            self.logger.debug("invalid_token")
            return None

        with self.db.session() as session:
            user = session.get(UserAccount, user_id)

        if user is None or not user.is_active:
            return None
        return user
