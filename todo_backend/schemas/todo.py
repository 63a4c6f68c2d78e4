"""
Todo Backend — Todo Request/Response Schemas
==============================================

What:  Pydantic models for GET /todos and POST /todos.
How:   TodoResponse is built from ORM rows. Timestamps are stored in UTC, but
       SQLite hands them back naive, so created_at is re-tagged as UTC before
       serialization; a todo renders the same way whichever endpoint returns it.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


class TodoCreate(BaseModel):
    """Body of POST /todos. Blank titles are rejected by TodoService."""

    title: str = Field(description="Todo title; surrounding whitespace is trimmed")


class TodoResponse(BaseModel):
    id: int = Field(description="Todo ID")
    user_id: int = Field(description="Owning user's ID")
    title: str = Field(description="Todo title")
    completed: bool = Field(description="Completion flag (always false on creation)")
    created_at: datetime = Field(description="Creation timestamp (UTC)")

    model_config = {"from_attributes": True}

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
