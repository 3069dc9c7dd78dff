import re
from datetime import datetime, timedelta, timezone

import pytest

from sketchtunes.core.errors import InvalidTimestamp
from sketchtunes.utils.formatters import (
    format_comment,
    format_duration,
    format_playback_state,
    format_relative,
    format_track,
)

NOW = datetime(2024, 6, 20, 12, 0, 0, tzinfo=timezone.utc)


def _ago(**delta):
    return (NOW - timedelta(**delta)).isoformat()


@pytest.mark.parametrize("seconds, expected", [
    (0, "0:00"),
    (59, "0:59"),
    (60, "1:00"),
    (65, "1:05"),
    (3661, "61:01"),
    (59.99, "0:59"),
    (185.4, "3:05"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_duration_shape_for_many_inputs():
    pattern = re.compile(r"^[0-9]+:[0-5][0-9]$")
    for seconds in range(0, 20000, 7):
        assert pattern.match(format_duration(seconds)), seconds


@pytest.mark.parametrize("bad", [-1, -0.5, float("nan"), float("inf")])
def test_format_duration_rejects_invalid_input(bad):
    with pytest.raises(ValueError):
        format_duration(bad)


@pytest.mark.parametrize("delta, expected", [
    (timedelta(seconds=0), "just now"),
    (timedelta(seconds=30), "just now"),
    (timedelta(seconds=59), "just now"),
    (timedelta(seconds=60), "1 minute ago"),
    (timedelta(seconds=90), "1 minute ago"),
    (timedelta(minutes=59, seconds=59), "59 minutes ago"),
    (timedelta(hours=1), "1 hour ago"),
    (timedelta(hours=23), "23 hours ago"),
    (timedelta(hours=25), "1 day ago"),
    (timedelta(days=6), "6 days ago"),
    (timedelta(days=7), "1 week ago"),
    (timedelta(days=27), "3 weeks ago"),
    (timedelta(days=28), "0 months ago"),
    (timedelta(days=30), "1 month ago"),
    (timedelta(days=359), "11 months ago"),
    (timedelta(days=360), "0 years ago"),
    (timedelta(days=365), "1 year ago"),
    (timedelta(days=800), "2 years ago"),
])
def test_format_relative_ladder(delta, expected):
    assert format_relative((NOW - delta).isoformat(), now=NOW) == expected


def test_format_relative_accepts_zulu_and_naive_timestamps():
    assert format_relative("2024-06-20T10:00:00Z", now=NOW) == "2 hours ago"
    assert format_relative("2024-06-20T10:00:00", now=NOW) == "2 hours ago"


@pytest.mark.parametrize("value", [
    "2024-06-20T10:00:00.5+00:00",
    "2024-06-20T10:00:00.12+00:00",
    "2024-06-20T10:00:00.1234+00:00",
    "2024-06-20T10:00:00.12345Z",
    "2024-06-20T10:00:00.1234567Z",
])
def test_format_relative_accepts_any_fraction_precision(value):
    assert format_relative(value, now=NOW) == "2 hours ago"


def test_format_relative_future_is_just_now():
    assert format_relative((NOW + timedelta(hours=3)).isoformat(), now=NOW) == "just now"


@pytest.mark.parametrize("bad", ["", "yesterday", "2024-13-45", None])
def test_format_relative_rejects_unparseable_timestamps(bad):
    with pytest.raises(InvalidTimestamp):
        format_relative(bad, now=NOW)


def test_invalid_timestamp_is_a_value_error():
    with pytest.raises(ValueError):
        format_relative("not a date")


def test_format_track_adds_labels_and_artist():
    track = {
        "id": "track1",
        "title": "Sunset Chillwave",
        "artist": {"id": "user2", "name": "LoFi Producer", "image": "https://img.example.com/a.jpg"},
        "url": "https://cdn.example.com/sunset.mp3",
        "duration": 147,
        "created_at": "not-a-date",
    }

    formatted = format_track(track)

    assert formatted["duration_label"] == "2:27"
    assert formatted["artist"] == {"id": "user2", "name": "LoFi Producer", "avatar": "https://img.example.com/a.jpg"}
    assert formatted["created_at_relative"] is None
    assert formatted["plays"] == 0


def test_format_comment_labels_timestamp():
    comment = {
        "id": "c1",
        "track_id": "track1",
        "user_id": "user1",
        "user_name": "Demo User",
        "content": "Love the drop here",
        "timestamp": 72.5,
        "type": "feedback",
        "created_at": datetime.now(timezone.utc).isoformat(),
    }

    formatted = format_comment(comment)

    assert formatted["timestamp_label"] == "1:12"
    assert formatted["created_at_relative"] == "just now"

    formatted = format_comment({**comment, "timestamp": None})
    assert formatted["timestamp_label"] is None


def test_format_playback_state_labels():
    state = format_playback_state(
        player_id="p1",
        track_id="t1",
        status="playing",
        is_playing=True,
        current_time=61.9,
        duration=200,
        volume=0.7,
        is_muted=False,
    )
    assert state["current_time_label"] == "1:01"
    assert state["duration_label"] == "3:20"
    assert state["error"] is None
