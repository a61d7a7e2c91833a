from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import List
from uuid import uuid4

from .task import utcnow


class User(SQLModel, table=True):
    """User model for authentication and user management.

    ``email`` is always stored trimmed and lowercased, so the unique index
    enforces case-insensitive uniqueness.
    """
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Owned tasks go with the user
    tasks: List["Task"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
