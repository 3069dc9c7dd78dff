"""
Database models for SketchTunes.
These Pydantic models map to the Supabase database schema.
"""

from .user import (
    UserBase,
    UserCreate,
)
from .track import (
    TrackBase,
    TrackCreate,
)
from .comment import (
    CommentBase,
    CommentCreate,
    CommentType,
)

__all__ = [
    # User models
    "UserBase",
    "UserCreate",
    # Track models
    "TrackBase",
    "TrackCreate",
    # Comment models
    "CommentBase",
    "CommentCreate",
    "CommentType",
]
