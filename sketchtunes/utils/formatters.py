import math
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any

from sketchtunes.core.errors import InvalidTimestamp

# Relative-time ladder, in seconds
MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR

# fromisoformat only takes 3 or 6 fractional digits before Python 3.11
FRACTION_PATTERN = re.compile(r"\.(\d+)")


# ==================== TIME ====================

def format_duration(seconds: float) -> str:
    """
    Format a number of seconds as ``M:SS``.

    Minutes are unbounded and seconds are truncated, never rounded:
    ``format_duration(65) == "1:05"``, ``format_duration(3661) == "61:01"``.

    Raises:
        ValueError: If ``seconds`` is negative or not finite
    """
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"Duration must be a non-negative number, got {seconds!r}")

    minutes = math.floor(seconds / 60)
    secs = math.floor(seconds % 60)
    return f"{minutes}:{secs:02d}"


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp into an aware datetime.

    A trailing ``Z`` is accepted, fractional seconds of any precision are
    cut or padded to microseconds, and naive values are taken as UTC.

    Raises:
        InvalidTimestamp: If the value does not parse
    """
    if not isinstance(value, str):
        raise InvalidTimestamp(value)
    try:
        text = value.strip().replace("Z", "+00:00")
        text = FRACTION_PATTERN.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise InvalidTimestamp(value) from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _ago(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_relative(iso_timestamp: str, now: Optional[datetime] = None) -> str:
    """
    Describe how long ago ``iso_timestamp`` was, in the coarsest whole unit.

    Args:
        iso_timestamp: ISO 8601 timestamp
        now: Reference instant (defaults to the current UTC time)

    Returns:
        "just now", "N minute(s) ago", ... "N year(s) ago"

    Raises:
        InvalidTimestamp: If the timestamp does not parse
    """
    then = parse_timestamp(iso_timestamp)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = math.floor((now - then).total_seconds())

    if seconds < MINUTE:
        return "just now"

    minutes = seconds // MINUTE
    if minutes < 60:
        return _ago(minutes, "minute")

    hours = minutes // 60
    if hours < 24:
        return _ago(hours, "hour")

    days = hours // 24
    if days < 7:
        return _ago(days, "day")

    weeks = days // 7
    if weeks < 4:
        return _ago(weeks, "week")

    months = days // 30
    if months < 12:
        return _ago(months, "month")

    return _ago(days // 365, "year")


def _relative_or_none(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        return format_relative(value)
    except InvalidTimestamp:
        return None


# ==================== API RESPONSES ====================

def format_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Format a user row for API responses. Never includes the password hash.

    Args:
        user: User dictionary from database

    Returns:
        Formatted user dictionary
    """
    return {
        "id": user["id"],
        "name": user["name"],
        "email": user.get("email"),
        "image": user.get("image"),
    }


def format_artist(artist: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Format the artist embedded in a track row"""
    if not artist:
        return None
    return {
        "id": artist["id"],
        "name": artist["name"],
        "avatar": artist.get("image"),
    }


def format_track(track: Dict[str, Any]) -> Dict[str, Any]:
    """
    Format a track row (with its embedded ``artist``) for API responses.

    Args:
        track: Track dictionary from database

    Returns:
        Formatted track dictionary
    """
    duration = track.get("duration") or 0
    return {
        "id": track["id"],
        "title": track["title"],
        "artist": format_artist(track.get("artist")),
        "url": track["url"],
        "cover_image": track.get("cover_image"),
        "genre": track.get("genre"),
        "daw": track.get("daw"),
        "production_stage": track.get("production_stage"),
        "duration": duration,
        "duration_label": format_duration(max(duration, 0)),
        "waveform_data": track.get("waveform_data"),
        "plays": track.get("plays", 0),
        "likes": track.get("likes", 0),
        "comments": track.get("comments", 0),
        "created_at": track.get("created_at"),
        "created_at_relative": _relative_or_none(track.get("created_at")),
    }


def format_track_list(
    tracks: List[Dict[str, Any]],
    total: int,
    page: int,
    limit: int
) -> Dict[str, Any]:
    """Format a page of the track feed"""
    return {
        "tracks": [format_track(t) for t in tracks],
        "total": total,
        "page": page,
        "limit": limit,
    }


def format_comment(comment: Dict[str, Any]) -> Dict[str, Any]:
    """
    Format a comment row for API responses.

    Timestamp comments also carry ``timestamp_label`` (the playback
    position formatted as ``M:SS``).
    """
    timestamp = comment.get("timestamp")
    return {
        "id": comment["id"],
        "track_id": comment["track_id"],
        "user_id": comment["user_id"],
        "user_name": comment["user_name"],
        "user_avatar": comment.get("user_avatar"),
        "content": comment["content"],
        "timestamp": timestamp,
        "timestamp_label": format_duration(timestamp) if timestamp is not None else None,
        "type": comment.get("type", "general"),
        "likes": comment.get("likes", 0),
        "created_at": comment.get("created_at"),
        "created_at_relative": _relative_or_none(comment.get("created_at")),
    }


def format_playback_state(
    player_id: str,
    track_id: str,
    status: str,
    is_playing: bool,
    current_time: float,
    duration: float,
    volume: float,
    is_muted: bool,
    error: Optional[str] = None
) -> Dict[str, Any]:
    """
    Format a player's playback state for WebSocket messages.

    Returns:
        Playback state dictionary, including ``M:SS`` labels for the
        current position and the duration
    """
    return {
        "player_id": player_id,
        "track_id": track_id,
        "status": status,
        "is_playing": is_playing,
        "current_time": current_time,
        "duration": duration,
        "current_time_label": format_duration(current_time),
        "duration_label": format_duration(duration),
        "volume": volume,
        "is_muted": is_muted,
        "error": error,
    }
