"""Account, token and favorite-source endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from techfeed.api.deps import get_current_user, get_db
from techfeed.models import User
from techfeed.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from techfeed.security import create_token, verify_token
from techfeed.services.auth_service import (
    AuthService,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
)
from techfeed.services.source_service import SourceNotFoundError, SourceService

router = APIRouter()


def _issue_tokens(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_token(user.id, "access"),
        refresh_token=create_token(user.id, "refresh"),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Create an account and sign in."""
    try:
        user = await AuthService(db).register(body.email, body.password, body.nickname)
    except EmailAlreadyRegisteredError:
        raise HTTPException(status_code=400, detail="Email is already registered")
    return _issue_tokens(user)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange email and password for a token pair."""
    try:
        user = await AuthService(db).authenticate(body.email, body.password)
    except InvalidCredentialsError:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _issue_tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange a refresh token for a new token pair."""
    user_id = verify_token(body.refresh_token, "refresh")
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = await AuthService(db).get_user(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return _issue_tokens(user)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    """Get the current user."""
    return UserResponse.model_validate(user)


@router.get("/favorites/sources", response_model=list[str])
async def list_favorite_sources(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)
) -> list[str]:
    """List the ids of the current user's favorite sources."""
    return await SourceService(db).list_favorite_source_ids(user.id)


@router.post("/favorites/sources/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_favorite_source(
    source_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    """Bookmark a source."""
    try:
        await SourceService(db).add_favorite(user.id, source_id)
    except SourceNotFoundError:
        raise HTTPException(status_code=404, detail=f"Source {source_id} not found")


@router.delete("/favorites/sources/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite_source(
    source_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    """Remove a bookmarked source."""
    await SourceService(db).remove_favorite(user.id, source_id)
