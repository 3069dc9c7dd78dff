"""
API request and response schemas (DTOs).
Separate from database models - these are for API endpoints.
"""

from .auth import (
    LoginRequest,
    TokenResponse,
    LogoutResponse,
)
from .user import (
    SignupRequest,
    SignupResponse,
    UserResponse,
    UserLookupResponse,
)
from .track import (
    CreateTrackRequest,
    ArtistResponse,
    TrackResponse,
    TrackListResponse,
    TrackDetailResponse,
)
from .comment import (
    CreateCommentRequest,
    CommentResponse,
    CommentListResponse,
)
from .websocket import (
    ClientMessage,
    MountData,
    UnmountData,
    MediaEventData,
    CommandData,
    NowPlayingData,
)

__all__ = [
    # Auth schemas
    "LoginRequest",
    "TokenResponse",
    "LogoutResponse",
    # User schemas
    "SignupRequest",
    "SignupResponse",
    "UserResponse",
    "UserLookupResponse",
    # Track schemas
    "CreateTrackRequest",
    "ArtistResponse",
    "TrackResponse",
    "TrackListResponse",
    "TrackDetailResponse",
    # Comment schemas
    "CreateCommentRequest",
    "CommentResponse",
    "CommentListResponse",
    # WebSocket schemas
    "ClientMessage",
    "MountData",
    "UnmountData",
    "MediaEventData",
    "CommandData",
    "NowPlayingData",
]
