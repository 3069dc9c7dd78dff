from pydantic import BaseModel, Field, field_validator
from sketchtunes.utils.waveform import validate_waveform


class TrackBase(BaseModel):
    """Base track model with common fields"""
    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1)
    duration: float = Field(0, ge=0, description="Length in seconds")
    genre: str | None = Field(None, max_length=100)
    daw: str | None = Field(None, max_length=100, description="DAW the track was produced in")
    production_stage: str | None = Field(None, max_length=100, description="e.g. Sketch, Demo, Work in Progress")
    cover_image: str | None = None
    waveform_data: list[float] | None = None

    @field_validator("waveform_data")
    @classmethod
    def check_waveform(cls, value: list[float] | None) -> list[float] | None:
        return validate_waveform(value) if value is not None else None


class TrackCreate(TrackBase):
    """Model for creating a new track"""
    artist_id: str
