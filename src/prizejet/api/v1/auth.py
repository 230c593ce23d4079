"""Owner authentication endpoints."""

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from prizejet.api.rate_limit import limiter
from prizejet.auth.local import LocalAuthService
from prizejet.auth.middleware import get_auth_service, require_auth
from prizejet.auth.models import UserAccount
from prizejet.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# ==================== MODELS ====================


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=8)
    name: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: int
    email: str
    name: str | None = None
    subscription_tier: str
    is_pro: bool


def _user_response(user: UserAccount) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        subscription_tier=user.subscription_tier.value,
        is_pro=user.is_pro,
    )


# ==================== ENDPOINTS ====================


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def register(
    request: Request,
    body: RegisterRequest,
    auth_service: LocalAuthService = Depends(get_auth_service),
):
    """Create an owner account."""
    user = auth_service.create_user(body.email, body.password, name=body.name)
    return _user_response(user)


@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")
async def login(
    request: Request,
    body: LoginRequest,
    auth_service: LocalAuthService = Depends(get_auth_service),
):
    """Exchange email and password for a bearer token."""
    user = auth_service.authenticate(body.email, body.password)
    logger.info("user_logged_in", user_id=user.id)
    return TokenResponse(access_token=auth_service.create_access_token(user))


@router.get("/me", response_model=UserResponse)
async def me(user: UserAccount = Depends(require_auth)):
    return _user_response(user)
