import uuid
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import EmailStr
from app.models.enums import UserRole

class UserBase(SQLModel):
    """
    Base User model containing shared attributes.
    """
    email: EmailStr = Field(unique=True, index=True, description="User's email address")
    first_name: str = Field(description="User's first name")
    last_name: str = Field(description="User's last name")
    role: UserRole = Field(default=UserRole.MEMBER, description="User role ('admin' or 'member')")
    is_active: bool = Field(default=True, description="Whether the user account is active")
    member_id: uuid.UUID | None = Field(default=None, foreign_key="member.id", description="Member record linked to this account")

class User(UserBase, table=True):
    """
    Back-office user account.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, description="Unique identifier for the user")
    hashed_password: str = Field(description="Hashed version of the user's password")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Timestamp when the user was created")
    last_login: datetime | None = Field(default=None, description="Timestamp of the last successful login")
