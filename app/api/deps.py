from fastapi import HTTPException, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging

from app.db.database import get_db
from app.models import User
from app.repositories.user_repo import UserRepository
from app.services.auth_service import AuthService
from app.services.context import RequesterContext

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI
security = HTTPBearer()

# =====================================================
# Get Current user
# =====================================================
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Dependency that validates JWT token and returns current user.

    Raises:
        HTTPException 401: If token is invalid or missing
    """
    auth_service = AuthService(db)

    try:
        return await auth_service.get_current_user(credentials.credentials)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"}
        )


# =====================================================
# Role guards
# =====================================================
async def require_student(
    current_user: User = Depends(get_current_user)
) -> User:
    if current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student access required"
        )
    return current_user


async def require_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


# =====================================================
# Requester context
# =====================================================
async def get_requester_context(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> RequesterContext:
    """Identity plus enrollment read fresh from the membership table."""
    class_ids = await UserRepository(db).get_class_ids(current_user.id)
    return RequesterContext.for_user(current_user, class_ids=class_ids)


async def get_student_context(
    current_user: User = Depends(require_student),
    ctx: RequesterContext = Depends(get_requester_context)
) -> RequesterContext:
    return ctx
