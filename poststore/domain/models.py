"""
Domain models for poststore.

Defines the `users` and `posts` row schemas. The models are used for validation
and type hints across the repositories; the matching table layouts live in
`poststore.store.schema`.
"""
from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """
    Representation of a single row in the `users` table.
    """

    table_name: ClassVar[str] = "users"

    id: Optional[int] = Field(None, description="Primary key (BIGSERIAL).")
    username: str = Field(..., min_length=1, max_length=255, description="Unique login name.")
    password: str = Field(..., max_length=255, description="Password hash.")
    nickname: str = Field("", max_length=30)
    email: str = Field("", max_length=256)
    phone: str = Field("", max_length=16)
    created_at: Optional[datetime] = Field(None, description="Row creation timestamp.")
    updated_at: Optional[datetime] = Field(None, description="Row update timestamp.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }


class Post(BaseModel):
    """
    Representation of a single row in the `posts` table.
    """

    table_name: ClassVar[str] = "posts"

    id: Optional[int] = Field(None, description="Primary key (BIGSERIAL).")
    post_id: str = Field("", max_length=32, description="External short id.")
    username: str = Field(..., min_length=1, max_length=255, description="Author username.")
    title: str = Field(..., min_length=1, max_length=256)
    content: str = Field("")
    created_at: Optional[datetime] = Field(None, description="Row creation timestamp.")
    updated_at: Optional[datetime] = Field(None, description="Row update timestamp.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }


__all__ = ["Post", "User"]
