"""
Player WebSocket message schemas.
"""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Literal


# ==================== CLIENT -> SERVER ====================

class ClientMessage(BaseModel):
    """Envelope of every message a player page sends"""
    type: Literal["mount", "unmount", "media_event", "command", "now_playing", "ping"]
    data: dict = Field(default_factory=dict)


class TrackPayload(BaseModel):
    """Track supplied inline by the hosting page"""
    id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    title: str
    artist_name: str


class MountData(BaseModel):
    """Mount a player for a track, either by id lookup or with inline track data"""
    player_id: str | None = None
    track_id: str | None = None
    track: TrackPayload | None = None
    waveform_data: list[float] | None = None

    @model_validator(mode="after")
    def check_track_source(self):
        if not self.track_id and not self.track:
            raise ValueError("Either track_id or track is required")
        return self

    @property
    def resolved_track_id(self) -> str:
        return self.track.id if self.track else self.track_id

    @property
    def resolved_player_id(self) -> str:
        return self.player_id or self.resolved_track_id


class UnmountData(BaseModel):
    player_id: str


class MediaEventData(BaseModel):
    """Event reported by the browser's audio element"""
    player_id: str
    event: Literal["loadedmetadata", "timeupdate", "ended", "error"]
    duration: float | None = None
    current_time: float | None = None
    message: str | None = None


class CommandData(BaseModel):
    """User interaction with a player's controls"""
    model_config = ConfigDict(allow_inf_nan=False)

    player_id: str
    action: Literal[
        "toggle",
        "seek",
        "skip",
        "skip_forward",
        "skip_back",
        "volume",
        "mute",
        "waveform_click",
        "reload",
        "regenerate_waveform",
    ]
    value: float | None = None
    x: float | None = None
    width: float | None = None


class NowPlayingData(BaseModel):
    """Remote play/pause for a track, e.g. from a compact list view"""
    track_id: str | None = None
    is_playing: bool = False
