from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from sketchtunes.config import get_settings
from sketchtunes.core.errors import MediaLoadError
from sketchtunes.core.logging import get_logger
from sketchtunes.schemas.websocket import (
    ClientMessage,
    CommandData,
    MediaEventData,
    MountData,
    NowPlayingData,
    UnmountData,
)
from sketchtunes.services.playback_controller import PlaybackController, PlaybackState, TrackRef
from sketchtunes.services.playback_signal import NowPlaying, SharedPlaybackSignal
from sketchtunes.services.remote_media import RemoteMediaElement
from sketchtunes.services.waveform_renderer import map_click_to_fraction
from sketchtunes.utils.formatters import format_playback_state

logger = get_logger("PlayerPage")


def _message(message_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": message_type, "data": data}


class PlayerPage:
    """
    One connected browser page and the players mounted on it.

    Owns the page's SharedPlaybackSignal and one PlaybackController per
    mounted player. ``handle`` processes a single inbound message to
    completion and returns the messages to send back, so every state
    transition happens on the event loop one message at a time.
    """

    def __init__(self, page_id: str, supabase_service):
        self.page_id = page_id
        self.supabase_service = supabase_service
        self.settings = get_settings()
        self.signal = SharedPlaybackSignal()
        self.players: Dict[str, PlaybackController] = {}
        self._media: Dict[str, RemoteMediaElement] = {}
        self._pending: List[Dict[str, Any]] = []
        self._dirty: List[str] = []
        self._unsubscribe_signal = self.signal.subscribe(self._on_signal)

    async def handle(self, raw: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Process one message from the page.

        Returns:
            Outbound messages, in order: callback notifications, media
            commands, then the state of every player that changed
        """
        try:
            message = ClientMessage.model_validate(raw)
            if message.type == "ping":
                return [_message("pong", {})]
            if message.type == "mount":
                await self._mount(MountData.model_validate(message.data))
            elif message.type == "unmount":
                self._unmount(UnmountData.model_validate(message.data).player_id)
            elif message.type == "media_event":
                self._media_event(MediaEventData.model_validate(message.data))
            elif message.type == "command":
                self._command(CommandData.model_validate(message.data))
            elif message.type == "now_playing":
                data = NowPlayingData.model_validate(message.data)
                self.signal.publish(data.track_id, data.is_playing)
        except ValidationError as e:
            logger.warning(f"Page {self.page_id} sent an invalid message: {e.errors()}")
            details = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]
            self._pending.append(_message("error", {"message": "Invalid message", "details": details}))
        except (LookupError, ValueError) as e:
            self._pending.append(_message("error", {"message": str(e)}))

        return self._flush()

    def close(self) -> None:
        """Unmount every player and detach from the signal"""
        for player_id in list(self.players):
            self._unmount(player_id)
        self._unsubscribe_signal()
        self._pending.clear()
        self._dirty.clear()
        logger.debug(f"Closed player page {self.page_id}")

    def player_state(self, player_id: str) -> Dict[str, Any]:
        controller = self._get(player_id)
        return self._format_state(player_id, controller.state)

    # ==================== HANDLERS ====================

    async def _mount(self, data: MountData) -> None:
        player_id = data.resolved_player_id
        if player_id in self.players:
            self._unmount(player_id)

        track, stored_waveform = await self._resolve_track(data)
        media = RemoteMediaElement(player_id, track.url)
        controller = PlaybackController(
            track=track,
            media=media,
            signal=self.signal,
            waveform_data=data.waveform_data or stored_waveform,
            on_time_update=lambda seconds: self._pending.append(
                _message("time_update", {"player_id": player_id, "current_time": seconds})
            ),
            on_error=lambda error: self._on_media_error(player_id, error),
            on_state_change=lambda state: self._mark_dirty(player_id),
            volume=self.settings.default_volume,
            waveform_bars=self.settings.waveform_bar_count,
        )
        self.players[player_id] = controller
        self._media[player_id] = media
        controller.mount()

        logger.info(f"Page {self.page_id} mounted player {player_id} for track {track.id}")
        self._pending.append(_message("player_mounted", {
            "player_id": player_id,
            "track": {
                "id": track.id,
                "url": track.url,
                "title": track.title,
                "artist_name": track.artist_name,
            },
            "waveform": controller.waveform,
            "state": self._format_state(player_id, controller.state),
        }))

    def _unmount(self, player_id: str) -> None:
        controller = self._get(player_id)
        try:
            controller.unmount()
        finally:
            del self.players[player_id]
            media = self._media.pop(player_id)
            # Commands issued during unmount still reach the browser
            self._pending.extend(media.drain())
            if player_id in self._dirty:
                self._dirty.remove(player_id)
        self._pending.append(_message("player_unmounted", {"player_id": player_id}))

    def _media_event(self, data: MediaEventData) -> None:
        self._get(data.player_id)
        payload = data.model_dump(exclude={"player_id", "event"}, exclude_none=True)
        self._media[data.player_id].dispatch(data.event, payload)

    def _command(self, data: CommandData) -> None:
        controller = self._get(data.player_id)
        action = data.action

        if action == "toggle":
            controller.toggle_play_pause()
        elif action == "seek":
            controller.seek(self._require(data.value, action))
        elif action == "skip":
            controller.skip(self._require(data.value, action))
        elif action == "skip_forward":
            controller.skip(self.settings.skip_seconds)
        elif action == "skip_back":
            controller.skip(-self.settings.skip_seconds)
        elif action == "volume":
            controller.set_volume(self._require(data.value, action))
        elif action == "mute":
            controller.toggle_mute()
        elif action == "waveform_click":
            fraction = map_click_to_fraction(self._require(data.x, action), self._require(data.width, action))
            controller.seek_to_fraction(fraction)
        elif action == "reload":
            controller.reload()
        elif action == "regenerate_waveform":
            count = int(data.value) if data.value else None
            if count is not None and not 1 <= count <= self.settings.max_waveform_bars:
                raise ValueError(f"Waveform bar count must be between 1 and {self.settings.max_waveform_bars}")
            waveform = controller.regenerate_waveform(count)
            self._pending.append(_message("waveform", {"player_id": data.player_id, "waveform": waveform}))

    # ==================== PRIVATE METHODS ====================

    async def _resolve_track(self, data: MountData) -> tuple[TrackRef, Optional[list]]:
        if data.track:
            return TrackRef(
                id=data.track.id,
                url=data.track.url,
                title=data.track.title,
                artist_name=data.track.artist_name,
            ), None

        result = await self.supabase_service.get_track_by_id(data.track_id)
        if not result.data:
            raise LookupError(f"Track not found: {data.track_id}")

        row = result.data[0]
        artist = row.get("artist") or {}
        return TrackRef(
            id=row["id"],
            url=row["url"],
            title=row["title"],
            artist_name=artist.get("name", "Unknown artist"),
        ), row.get("waveform_data")

    def _get(self, player_id: str) -> PlaybackController:
        controller = self.players.get(player_id)
        if controller is None:
            raise LookupError(f"Player not mounted: {player_id}")
        return controller

    @staticmethod
    def _require(value: Optional[float], action: str) -> float:
        if value is None:
            raise ValueError(f"Command '{action}' is missing its value")
        return value

    def _mark_dirty(self, player_id: str) -> None:
        if player_id not in self._dirty:
            self._dirty.append(player_id)

    def _on_media_error(self, player_id: str, error: MediaLoadError) -> None:
        self._pending.append(_message("player_error", {
            "player_id": player_id,
            "track_id": error.track_id,
            "message": error.message,
        }))

    def _on_signal(self, now_playing: NowPlaying) -> None:
        self._pending.append(_message("now_playing", {
            "track_id": now_playing.active_track_id,
            "is_playing": now_playing.is_playing,
        }))

    def _format_state(self, player_id: str, state: PlaybackState) -> Dict[str, Any]:
        return format_playback_state(
            player_id=player_id,
            track_id=self.players[player_id].track_id,
            status=state.status.value,
            is_playing=state.is_playing,
            current_time=state.current_time,
            duration=state.duration,
            volume=state.volume,
            is_muted=state.is_muted,
            error=state.error,
        )

    def _flush(self) -> List[Dict[str, Any]]:
        messages, self._pending = self._pending, []
        for media in self._media.values():
            messages.extend(media.drain())
        for player_id in self._dirty:
            if player_id in self.players:
                messages.append(_message("player_state", self.player_state(player_id)))
        self._dirty = []
        return messages
