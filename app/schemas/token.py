from sqlmodel import SQLModel
from app.models.enums import UserRole

class Token(SQLModel):
    """
    Schema for JWT access token.
    """
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    role: UserRole

class TokenPayload(SQLModel):
    """
    Schema for decoding JWT payload.
    """
    sub: str | None = None
