"""
Track-related request and response schemas for API endpoints.
"""
from pydantic import BaseModel
from sketchtunes.models.track import TrackBase


# ==================== REQUEST SCHEMAS ====================

class CreateTrackRequest(TrackBase):
    """Request schema for registering a track hosted at an external URL"""
    pass


# ==================== RESPONSE SCHEMAS ====================

class ArtistResponse(BaseModel):
    """Artist embedded in a track"""
    id: str
    name: str
    avatar: str | None = None


class TrackResponse(BaseModel):
    """Response schema for a track"""
    id: str
    title: str
    artist: ArtistResponse | None = None
    url: str
    cover_image: str | None = None
    genre: str | None = None
    daw: str | None = None
    production_stage: str | None = None
    duration: float
    duration_label: str
    waveform_data: list[float] | None = None
    plays: int = 0
    likes: int = 0
    comments: int = 0
    created_at: str | None = None
    created_at_relative: str | None = None


class TrackListResponse(BaseModel):
    """Response schema for the track feed"""
    tracks: list[TrackResponse]
    total: int
    page: int
    limit: int


class TrackDetailResponse(BaseModel):
    """Response schema for a single track"""
    track: TrackResponse
