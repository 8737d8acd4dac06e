from pydantic import BaseModel, Field, validator
from typing import Optional
from enum import Enum
import re

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

# ==================== ENUMS ====================

class UserRole(str, Enum):
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"

# ==================== USER ====================

class User(BaseModel):
    """
    Session-scoped identity.
    is_verified only becomes True after a one-time code is confirmed.
    """
    id: str
    name: str
    email: str
    role: UserRole = UserRole.STUDENT
    avatar: str = ""
    is_verified: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

# ==================== REQUEST MODELS ====================

class SendCodeRequest(BaseModel):
    email: str
    is_registration: bool = False
    name: Optional[str] = None
    role: UserRole = UserRole.STUDENT

    @validator("email")
    def validate_email(cls, v):
        v = v.strip()
        if not EMAIL_PATTERN.fullmatch(v):
            raise ValueError("Please enter a valid email address")
        return v

    @validator("name", always=True)
    def validate_name(cls, v, values):
        if values.get("is_registration") and not (v or "").strip():
            raise ValueError("Please enter your full name")
        return v


class VerifyCodeRequest(BaseModel):
    email: str
    code: str = Field(..., min_length=6, max_length=6)
    name: Optional[str] = None
    role: Optional[UserRole] = None

    @validator("code")
    def validate_code(cls, v):
        if not v.isdigit():
            raise ValueError("Code must be 6 digits")
        return v

# ==================== RESPONSE MODELS ====================

class SendCodeResponse(BaseModel):
    success: bool
    expires_in_seconds: int
    delivered: bool = False
    # Demo only: the code, when it could not be mailed
    dev_code: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
