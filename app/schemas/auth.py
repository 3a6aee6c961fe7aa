from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID


# ============================================================
# Request Schemas (What client sends)
# ============================================================

class UserLogin(BaseModel):
    """Schema for user login request"""

    email: EmailStr
    password: str = Field(min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "student@school.edu",
                "password": "SecurePass123"
            }
        }


class RefreshTokenRequest(BaseModel):
    """Schema for token refresh request"""

    refresh_token: str


# ============================================================
# Response Schemas (What server sends back)
# ============================================================

class UserResponse(BaseModel):
    """Public user info"""

    id: UUID
    email: EmailStr
    name: str
    role: str
    admission_no: Optional[str] = None
    is_active: bool
    class_ids: List[UUID] = Field(default_factory=list)
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Schema for successful login"""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class TokenRefreshResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
