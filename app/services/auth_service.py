from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User
from app.repositories.user_repo import UserRepository
from app.schemas.auth import UserLogin, TokenResponse, TokenRefreshResponse, UserResponse
from app.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    verify_refresh_token,
    verify_token,
)
from app.core.config import settings
from app.utils.timeutils import utcnow


def _parse_subject(subject) -> UUID:
    try:
        return UUID(str(subject))
    except (TypeError, ValueError):
        raise ValueError("Invalid token subject")


class AuthService:
    """
    Service class for authentication operations.

    Accounts are provisioned by administrators, so there is no sign-up here.
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    # ============================================================
    # User Login
    # ============================================================
    async def login(self, login_data: UserLogin) -> TokenResponse:
        """
        Authenticate user and return tokens.

        Raises:
            ValueError: If credentials are invalid or the account is deactivated
        """
        user = await self.user_repo.get_by_email(login_data.email)

        if not user or not verify_password(login_data.password, user.password_hash):
            raise ValueError("Invalid email or password")

        if not user.is_active:
            raise ValueError("This account has been deactivated")

        user.last_login = utcnow()
        await self.db.commit()

        return self._create_token_response(user)

    # ============================================================
    # Token Refresh
    # ============================================================
    async def refresh_token(self, refresh_token: str) -> TokenRefreshResponse:
        """
        Create new access token from refresh token.

        Raises:
            ValueError: If refresh token is invalid or the user is gone
        """
        subject = verify_refresh_token(refresh_token)
        if not subject:
            raise ValueError("Invalid or expired refresh token")

        user = await self.user_repo.get_by_id(_parse_subject(subject))
        if not user or not user.is_active:
            raise ValueError("User not found or inactive")

        return TokenRefreshResponse(
            access_token=create_access_token(subject=str(user.id), role=user.role),
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    # ============================================================
    # Get Current User
    # ============================================================
    async def get_current_user(self, token: str) -> User:
        """
        Get user from access token.

        Raises:
            ValueError: If token is invalid or the user cannot sign in
        """
        payload = verify_token(token)
        if not payload:
            raise ValueError("Invalid or expired token")

        user = await self.user_repo.get_by_id(_parse_subject(payload.get("sub")))
        if not user:
            raise ValueError("User not found")
        if not user.is_active:
            raise ValueError("User account is deactivated")

        return user

    # ============================================================
    # Helper Methods
    # ============================================================
    def _create_token_response(self, user: User) -> TokenResponse:
        return TokenResponse(
            access_token=create_access_token(subject=str(user.id), role=user.role),
            refresh_token=create_refresh_token(subject=str(user.id)),
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserResponse.model_validate(user),
        )
