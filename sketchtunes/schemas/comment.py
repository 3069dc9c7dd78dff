"""
Comment-related request and response schemas for API endpoints.
"""
from pydantic import BaseModel
from sketchtunes.models.comment import CommentBase, CommentType


# ==================== REQUEST SCHEMAS ====================

class CreateCommentRequest(CommentBase):
    """
    Request schema for commenting on a track.
    ``timestamp`` is the player's position when the user opted in; omit it
    for a plain comment.
    """
    pass


# ==================== RESPONSE SCHEMAS ====================

class CommentResponse(BaseModel):
    """Response schema for a comment"""
    id: str
    track_id: str
    user_id: str
    user_name: str
    user_avatar: str | None = None
    content: str
    timestamp: float | None = None
    timestamp_label: str | None = None
    type: CommentType
    likes: int = 0
    created_at: str | None = None
    created_at_relative: str | None = None


class CommentListResponse(BaseModel):
    """Response schema for a track's comments"""
    comments: list[CommentResponse]
    total: int
