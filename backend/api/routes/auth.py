"""Authentication endpoints: register, login, refresh, me."""

from fastapi import APIRouter, status, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    RefreshRequest,
    UserResponse,
)
from app.dependencies import RequestContext, get_db, get_request_context
from core.exceptions import UnauthorizedError
from services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """
    Register a new user profile.

    The user has no organization yet; organization setup is a separate call.
    Returns access and refresh tokens for the newly created user.
    """
    auth_svc = AuthService(db)
    user = await auth_svc.register(
        email=request.email,
        password=request.password,
        full_name=request.full_name,
    )

    logger.info(f"New user registered: {user.email}")
    return TokenResponse(**AuthService.issue_tokens(user))


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """
    Authenticate user with email and password.

    Returns access and refresh tokens on success.
    """
    auth_svc = AuthService(db)
    result = await auth_svc.login(email=request.email, password=request.password)
    return TokenResponse(**result)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: RefreshRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """
    Refresh access token using a valid refresh token.
    """
    auth_svc = AuthService(db)
    result = await auth_svc.refresh(request.refresh_token)
    return TokenResponse(**result)


@router.get("/me", response_model=UserResponse)
async def get_me(
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Get the current user's profile with organization and role.
    """
    user = await AuthService(db).get_user_by_id(context.user_id)
    if not user:
        raise UnauthorizedError("User not found")

    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name or "",
        is_active=user.is_active,
        organization_id=context.organization_id,
        role=context.role,
        department_ids=sorted(context.department_ids),
        created_at=user.created_at,
    )
