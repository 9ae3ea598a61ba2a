"""
Pydantic models for the user endpoints.
"""
from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator


class UserRegister(BaseModel):
    """
    Registration payload.

    POST /api/user
    {
        "email": "user@example.com",
        "password": "secret"
    }
    """
    email: str = Field(..., description="User email, stored exactly as sent")
    password: str = Field(..., min_length=1, description="Password (stored as is)")

    @field_validator("email")
    @classmethod
    def check_email_format(cls, v: str) -> str:
        # Format check only: the normalized address is discarded
        try:
            validate_email(v, check_deliverability=False, globally_deliverable=False, test_environment=True)
        except EmailNotValidError as e:
            raise ValueError(str(e)) from e
        return v


class UserResponse(BaseModel):
    """
    One row of GET /api/users.

    NOTE: includes the plaintext password, exactly as stored.
    """
    id: int
    email: str
    password: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True  # build straight from the SQLAlchemy User


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
