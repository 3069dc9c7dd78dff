import asyncio

import pytest

from sketchtunes.services.player_page import PlayerPage


def _types(messages):
    return [m["type"] for m in messages]


def _of_type(messages, message_type):
    return [m["data"] for m in messages if m["type"] == message_type]


@pytest.fixture
def page(supabase):
    page = PlayerPage("page-1", supabase)
    yield page
    page.close()


def handle(page, message_type, **data):
    return asyncio.run(page.handle({"type": message_type, "data": data}))


def _inline_track(track_id):
    return {
        "id": track_id,
        "url": f"https://cdn.example.com/{track_id}.mp3",
        "title": track_id.title(),
        "artist_name": "Demo User",
    }


def _mount_ready(page, track_id, duration=120):
    handle(page, "mount", track=_inline_track(track_id))
    return handle(page, "media_event", player_id=track_id, event="loadedmetadata", duration=duration)


def test_ping(page):
    assert handle(page, "ping") == [{"type": "pong", "data": {}}]


def test_mount_by_track_id_uses_stored_track(page, track):
    messages = handle(page, "mount", track_id=track["id"])

    mounted = _of_type(messages, "player_mounted")[0]
    assert mounted["player_id"] == track["id"]
    assert mounted["track"]["artist_name"] == "Demo User"
    assert mounted["state"]["status"] == "idle"
    assert len(mounted["waveform"]) == 100

    commands = _of_type(messages, "media_command")
    assert commands[-1] == {"player_id": track["id"], "action": "load", "url": track["url"]}


def test_mount_unknown_track_reports_error(page):
    messages = handle(page, "mount", track_id="missing")
    assert _types(messages) == ["error"]
    assert "Track not found" in messages[0]["data"]["message"]
    assert page.players == {}


def test_mount_with_inline_track_and_waveform(page):
    messages = handle(page, "mount", player_id="card-1", track=_inline_track("t1"), waveform_data=[0.1, 0.5])
    mounted = _of_type(messages, "player_mounted")[0]
    assert mounted["player_id"] == "card-1"
    assert mounted["waveform"] == [0.1, 0.5]


def test_mount_with_invalid_waveform_is_rejected(page):
    messages = handle(page, "mount", track=_inline_track("t1"), waveform_data=[2.0])
    assert _types(messages) == ["error"]
    assert page.players == {}


def test_invalid_messages_are_reported(page):
    assert _types(asyncio.run(page.handle({"type": "dance"}))) == ["error"]
    assert _types(handle(page, "mount")) == ["error"]
    assert _types(handle(page, "command", player_id="nope", action="toggle")) == ["error"]


def test_media_events_produce_state(page):
    messages = _mount_ready(page, "t1", duration=185)
    state = _of_type(messages, "player_state")[0]
    assert state["status"] == "ready"
    assert state["duration_label"] == "3:05"


def test_toggle_and_time_updates(page):
    _mount_ready(page, "t1")

    messages = handle(page, "command", player_id="t1", action="toggle")
    assert _of_type(messages, "now_playing") == [{"track_id": "t1", "is_playing": True}]
    assert _of_type(messages, "media_command") == [{"player_id": "t1", "action": "play"}]
    assert _of_type(messages, "player_state")[0]["is_playing"] is True

    messages = handle(page, "media_event", player_id="t1", event="timeupdate", current_time=33.2)
    assert _of_type(messages, "time_update") == [{"player_id": "t1", "current_time": 33.2}]


def test_second_player_stops_the_first(page):
    _mount_ready(page, "t1")
    _mount_ready(page, "t2")
    handle(page, "command", player_id="t1", action="toggle")

    messages = handle(page, "command", player_id="t2", action="toggle")

    commands = _of_type(messages, "media_command")
    assert {"player_id": "t1", "action": "pause"} in commands
    assert {"player_id": "t2", "action": "play"} in commands
    states = {s["player_id"]: s for s in _of_type(messages, "player_state")}
    assert states["t1"]["is_playing"] is False
    assert states["t2"]["is_playing"] is True


def test_now_playing_message_controls_players_remotely(page):
    _mount_ready(page, "t1")

    messages = handle(page, "now_playing", track_id="t1", is_playing=True)

    assert _of_type(messages, "media_command") == [{"player_id": "t1", "action": "play"}]
    assert page.players["t1"].is_playing


def test_skip_and_waveform_click(page):
    _mount_ready(page, "t1", duration=200)

    handle(page, "command", player_id="t1", action="skip_forward")
    assert page.players["t1"].current_time == 10

    handle(page, "command", player_id="t1", action="skip_back")
    handle(page, "command", player_id="t1", action="skip_back")
    assert page.players["t1"].current_time == 0

    messages = handle(page, "command", player_id="t1", action="waveform_click", x=150, width=600)
    assert page.players["t1"].current_time == 50
    assert {"player_id": "t1", "action": "seek", "position": 50} in _of_type(messages, "media_command")


def test_command_missing_value(page):
    _mount_ready(page, "t1")
    messages = handle(page, "command", player_id="t1", action="seek")
    assert _types(messages) == ["error"]


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
@pytest.mark.parametrize("command", [
    {"action": "seek", "value": "bad"},
    {"action": "skip", "value": "bad"},
    {"action": "volume", "value": "bad"},
    {"action": "regenerate_waveform", "value": "bad"},
    {"action": "waveform_click", "x": "bad", "width": 600},
    {"action": "waveform_click", "x": 150, "width": "bad"},
])
def test_non_finite_command_values_are_rejected(page, command, bad):
    _mount_ready(page, "t1", duration=200)
    handle(page, "command", player_id="t1", action="seek", value=42)
    data = {key: bad if value == "bad" else value for key, value in command.items()}

    messages = handle(page, "command", player_id="t1", **data)

    assert _types(messages) == ["error"]
    assert page.players["t1"].current_time == 42
    assert page.players["t1"].volume == 0.7
    # The page keeps working afterwards
    assert _of_type(handle(page, "command", player_id="t1", action="seek", value=50), "player_state")[0]["current_time"] == 50


def test_volume_and_mute(page):
    _mount_ready(page, "t1")
    messages = handle(page, "command", player_id="t1", action="volume", value=0)
    state = _of_type(messages, "player_state")[0]
    assert (state["volume"], state["is_muted"]) == (0, True)


def test_media_error_is_forwarded(page):
    handle(page, "mount", track=_inline_track("t1"))

    messages = handle(page, "media_event", player_id="t1", event="error", message="Unsupported format")

    assert _of_type(messages, "player_error") == [
        {"player_id": "t1", "track_id": "t1", "message": "Unsupported format"}
    ]
    assert _of_type(messages, "player_state")[0]["status"] == "idle"


def test_regenerate_waveform(page):
    _mount_ready(page, "t1")
    messages = handle(page, "command", player_id="t1", action="regenerate_waveform", value=12)
    assert len(_of_type(messages, "waveform")[0]["waveform"]) == 12


@pytest.mark.parametrize("count", [1001, 2_000_000, -3])
def test_regenerate_waveform_count_is_bounded(page, count):
    _mount_ready(page, "t1")
    before = page.players["t1"].waveform

    messages = handle(page, "command", player_id="t1", action="regenerate_waveform", value=count)

    assert _types(messages) == ["error"]
    assert "between 1 and 1000" in messages[0]["data"]["message"]
    assert page.players["t1"].waveform == before


def test_unmount_stops_playback(page):
    _mount_ready(page, "t1")
    handle(page, "command", player_id="t1", action="toggle")

    messages = handle(page, "unmount", player_id="t1")

    assert {"player_id": "t1", "action": "pause"} in _of_type(messages, "media_command")
    assert _of_type(messages, "player_unmounted") == [{"player_id": "t1"}]
    assert page.players == {}
    assert page.signal.is_playing is False


def test_close_unmounts_everything(supabase):
    page = PlayerPage("page-2", supabase)
    _mount_ready(page, "t1")
    _mount_ready(page, "t2")
    media = [page.players["t1"].media, page.players["t2"].media]

    page.close()

    assert page.players == {}
    assert all(m.listener_count() == 0 for m in media)
    assert page.signal.listener_count == 0
