"""
Error types raised by the playback subsystem and its collaborators.
"""


class SketchTunesError(Exception):
    """Base class for SketchTunes errors"""


class MediaLoadError(SketchTunesError):
    """The media resource behind a track could not be loaded (unreachable or unsupported format)"""

    def __init__(self, track_id: str | None, message: str):
        super().__init__(message)
        self.track_id = track_id
        self.message = message

    def __str__(self) -> str:
        if self.track_id:
            return f"Track {self.track_id}: {self.message}"
        return self.message


class InvalidTimestamp(SketchTunesError, ValueError):
    """A timestamp string did not parse as a date"""

    def __init__(self, value: object):
        super().__init__(f"Invalid timestamp: {value!r}")
        self.value = value
