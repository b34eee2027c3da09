from datetime import datetime
import uuid
from pydantic import EmailStr
from sqlmodel import SQLModel, Field
from app.models.enums import AuthEvent, UserRole
from app.models.user import UserBase

class LoginRequest(SQLModel):
    """
    Schema for user login request.
    """
    email: EmailStr
    password: str

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "admin@kasmoni.app",
                "password": "securepassword123"
            }
        }
    }

class UserCreate(SQLModel):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str
    last_name: str
    role: UserRole = UserRole.MEMBER
    member_id: uuid.UUID | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "ana.pinas@example.com",
                "password": "securepassword123",
                "first_name": "Ana",
                "last_name": "Pinas",
                "role": "member",
                "member_id": None
            }
        }
    }

class UserRead(UserBase):
    id: uuid.UUID
    created_at: datetime
    last_login: datetime | None = None

class UserUpdate(SQLModel):
    """
    Admin update of an account.
    """
    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8)
    role: UserRole | None = None
    is_active: bool | None = None
    member_id: uuid.UUID | None = None

class UserUpdateMe(SQLModel):
    first_name: str | None = None
    last_name: str | None = None
    password: str | None = Field(default=None, min_length=8)

class AuthLogRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID | None
    email: str | None
    event: AuthEvent
    success: bool
    target_model: str | None
    target_id: str | None
    ip_address: str | None
    user_agent: str | None
    timestamp: datetime
