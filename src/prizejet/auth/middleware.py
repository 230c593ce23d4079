"""Authentication dependencies for FastAPI."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from prizejet.auth.local import LocalAuthService
from prizejet.auth.models import UserAccount
from prizejet.errors import AuthRequiredError
from prizejet.logging_config import get_logger
from prizejet.storage.db import Database

logger = get_logger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


def get_db(request: Request) -> Database:
    """Database created at startup (see ``create_app``)."""
    return request.app.state.db


def get_auth_service(db: Database = Depends(get_db)) -> LocalAuthService:
    return LocalAuthService(db)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    auth_service: LocalAuthService = Depends(get_auth_service),
) -> UserAccount | None:
    """Get current authenticated user, or None."""
    if not credentials:
        return None

    user = auth_service.get_user_from_token(credentials.credentials)
    if user:
        request.state.user = user
    return user


def require_auth(user: UserAccount | None = Depends(get_current_user)) -> UserAccount:
    """Require authentication.

    Raises:
        AuthRequiredError: 401 if not authenticated
    """
    if not user:
        raise AuthRequiredError()
    return user
