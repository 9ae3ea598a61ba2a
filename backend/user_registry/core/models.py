# Registered user, as stored by POST /api/user

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from user_registry.core.database import Base


class User(Base):
    """SQLAlchemy model for the users table (schema owned by migrations)"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False)
    # Stored as plain text, no hashing
    password = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(
        DateTime,
        nullable=False,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
    )
