from pydantic import BaseModel, Field
from typing import Literal

CommentType = Literal["technical", "feedback", "appreciation", "general"]


class CommentBase(BaseModel):
    """Base comment model with common fields"""
    content: str = Field(..., min_length=1, max_length=2000)
    timestamp: float | None = Field(None, ge=0, description="Playback position in seconds")
    type: CommentType = "general"


class CommentCreate(CommentBase):
    """Model for creating a new comment"""
    track_id: str
    user_id: str
    user_name: str
    user_avatar: str | None = None
