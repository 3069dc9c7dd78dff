import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol, Sequence

from sketchtunes.core.errors import MediaLoadError
from sketchtunes.core.logging import get_logger
from sketchtunes.services.playback_signal import NowPlaying, SharedPlaybackSignal
from sketchtunes.utils.waveform import generate_waveform, validate_waveform

logger = get_logger("PlaybackController")

DEFAULT_VOLUME = 0.7
DEFAULT_WAVEFORM_BARS = 100

# Media element events
LOADED_METADATA = "loadedmetadata"
TIME_UPDATE = "timeupdate"
ENDED = "ended"
ERROR = "error"
MEDIA_EVENTS = (LOADED_METADATA, TIME_UPDATE, ENDED, ERROR)

MediaListener = Callable[[Dict[str, Any]], None]


class MediaElement(Protocol):
    """
    The underlying media resource a controller drives.

    Commands are fire-and-forget; their outcome arrives later as events
    (see ``MEDIA_EVENTS``) delivered to registered listeners.
    """

    def load(self) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def seek(self, seconds: float) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def set_muted(self, muted: bool) -> None: ...

    def add_listener(self, event: str, listener: MediaListener) -> None: ...

    def remove_listener(self, event: str, listener: MediaListener) -> None: ...


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    READY = "ready"
    PLAYING = "playing"
    ENDED = "ended"


@dataclass(frozen=True)
class TrackRef:
    """Track a controller plays; fixed for the controller's lifetime"""
    id: str
    url: str
    title: str
    artist_name: str


@dataclass(frozen=True)
class PlaybackState:
    status: PlaybackStatus = PlaybackStatus.IDLE
    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0
    volume: float = DEFAULT_VOLUME
    is_muted: bool = False
    error: Optional[str] = None


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


class PlaybackController:
    """
    Play/pause/seek/volume state for one track's media element.

    Coordinates with the other controllers on the page through the
    SharedPlaybackSignal so that only one track plays at a time. Listeners
    on the media element and the signal exist only between ``mount()`` and
    ``unmount()``; the controller is also a context manager for that span.

    Host callbacks:
        on_time_update(seconds): each time-update event; exceptions are logged
        on_error(MediaLoadError): media failed to load
        on_state_change(PlaybackState): after every state transition
    """

    def __init__(
        self,
        track: TrackRef,
        media: MediaElement,
        signal: SharedPlaybackSignal,
        waveform_data: Optional[Sequence[float]] = None,
        on_time_update: Optional[Callable[[float], None]] = None,
        on_error: Optional[Callable[[MediaLoadError], None]] = None,
        on_state_change: Optional[Callable[[PlaybackState], None]] = None,
        volume: float = DEFAULT_VOLUME,
        waveform_bars: int = DEFAULT_WAVEFORM_BARS
    ):
        self.track = track
        self.media = media
        self.signal = signal
        self.on_time_update = on_time_update
        self.on_error = on_error
        self.on_state_change = on_state_change
        self.waveform_bars = waveform_bars

        self._state = PlaybackState(volume=_clamp(volume, 0.0, 1.0))
        self._waveform = (
            validate_waveform(waveform_data) if waveform_data else generate_waveform(waveform_bars)
        )
        self._listeners: Dict[str, MediaListener] = {
            LOADED_METADATA: self._handle_loaded_metadata,
            TIME_UPDATE: self._handle_time_update,
            ENDED: self._handle_ended,
            ERROR: self._handle_error,
        }
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ==================== PROPERTIES ====================

    @property
    def track_id(self) -> str:
        return self.track.id

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def status(self) -> PlaybackStatus:
        return self._state.status

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def current_time(self) -> float:
        return self._state.current_time

    @property
    def duration(self) -> float:
        return self._state.duration

    @property
    def volume(self) -> float:
        return self._state.volume

    @property
    def is_muted(self) -> bool:
        return self._state.is_muted

    @property
    def waveform(self) -> list[float]:
        return list(self._waveform)

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    # ==================== LIFECYCLE ====================

    def mount(self) -> "PlaybackController":
        """Attach media listeners, subscribe to the signal and request the media load"""
        if self.mounted:
            return self

        for event, listener in self._listeners.items():
            self.media.add_listener(event, listener)
        self._unsubscribe = self.signal.subscribe(self._handle_signal)

        self.media.set_volume(self._state.volume)
        self.media.set_muted(self._state.is_muted)
        self.media.load()
        logger.debug(f"Mounted player for track {self.track_id}")
        return self

    def unmount(self) -> None:
        """
        Detach every listener and stop playback.

        Safe to call more than once. If the signal still names this track
        it is released so the page does not report a phantom player.
        """
        if not self.mounted:
            return

        try:
            if self._state.is_playing:
                self.media.pause()
                self._state = replace(
                    self._state,
                    is_playing=False,
                    status=PlaybackStatus.READY if self._state.duration > 0 else PlaybackStatus.IDLE
                )
        finally:
            for event, listener in self._listeners.items():
                self.media.remove_listener(event, listener)
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

        if self.signal.active_track_id == self.track_id and self.signal.is_playing:
            self.signal.publish(self.track_id, False)
        logger.debug(f"Unmounted player for track {self.track_id}")

    def __enter__(self) -> "PlaybackController":
        return self.mount()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unmount()

    # ==================== CONTROLS ====================

    def toggle_play_pause(self) -> PlaybackState:
        """
        Ready -> Playing or Playing -> Ready, then publish to the signal.

        Ignored while idle (no metadata yet, or the last load failed).
        """
        if self._state.status == PlaybackStatus.IDLE:
            logger.debug(f"Ignoring play/pause for track {self.track_id}: media not ready")
            return self._state

        if self._state.is_playing:
            self._pause()
            self.signal.publish(self.track_id, False)
        else:
            self._play()
            self.signal.publish(self.track_id, True)
        return self._state

    def seek(self, target_seconds: float) -> PlaybackState:
        """Jump to ``target_seconds``, clamped to [0, duration]. Non-finite targets are ignored."""
        if not math.isfinite(target_seconds):
            logger.warning(f"Ignoring seek to {target_seconds!r} for track {self.track_id}")
            return self._state

        target = _clamp(float(target_seconds), 0.0, self._state.duration)
        self._update(current_time=target)
        self.media.seek(target)
        return self._state

    def skip(self, delta_seconds: float) -> PlaybackState:
        """Relative seek, clamped to [0, duration]"""
        return self.seek(self._state.current_time + delta_seconds)

    def seek_to_fraction(self, fraction: float) -> PlaybackState:
        """Seek to a progress fraction, e.g. one mapped from a waveform click"""
        if not math.isfinite(fraction):
            logger.warning(f"Ignoring seek to fraction {fraction!r} for track {self.track_id}")
            return self._state
        return self.seek(_clamp(fraction, 0.0, 1.0) * self._state.duration)

    def set_volume(self, volume: float) -> PlaybackState:
        """Set the volume; zero mutes and anything above zero unmutes. Non-finite values are ignored."""
        if not math.isfinite(volume):
            logger.warning(f"Ignoring volume {volume!r} for track {self.track_id}")
            return self._state

        volume = _clamp(float(volume), 0.0, 1.0)
        self._update(volume=volume, is_muted=volume == 0)
        self.media.set_volume(volume)
        self.media.set_muted(self._state.is_muted)
        return self._state

    def toggle_mute(self) -> PlaybackState:
        self._update(is_muted=not self._state.is_muted)
        self.media.set_muted(self._state.is_muted)
        return self._state

    def reload(self) -> None:
        """Re-issue the media load request after a failure"""
        self._update(error=None)
        self.media.load()

    def set_waveform(self, data: Sequence[float]) -> list[float]:
        self._waveform = validate_waveform(data)
        return self.waveform

    def regenerate_waveform(self, count: Optional[int] = None) -> list[float]:
        self._waveform = generate_waveform(count or self.waveform_bars)
        return self.waveform

    # ==================== MEDIA EVENTS ====================

    def _handle_loaded_metadata(self, payload: Dict[str, Any]) -> None:
        duration = payload.get("duration")
        if not isinstance(duration, (int, float)) or not math.isfinite(duration) or duration < 0:
            self._fail(f"Media reported an invalid duration: {duration!r}")
            return

        status = self._state.status
        if status == PlaybackStatus.IDLE:
            status = PlaybackStatus.READY
        self._update(
            status=status,
            duration=float(duration),
            current_time=min(self._state.current_time, float(duration)),
            error=None
        )

    def _handle_time_update(self, payload: Dict[str, Any]) -> None:
        current_time = payload.get("current_time")
        if not isinstance(current_time, (int, float)) or not math.isfinite(current_time):
            logger.warning(f"Ignoring malformed time update for track {self.track_id}: {current_time!r}")
            return

        current_time = max(float(current_time), 0.0)
        if self._state.duration > 0:
            current_time = min(current_time, self._state.duration)
        self._update(current_time=current_time)

        if self.on_time_update:
            try:
                self.on_time_update(current_time)
            except Exception as e:
                logger.error(f"Time update callback failed for track {self.track_id}: {e}", exc_info=True)

    def _handle_ended(self, payload: Dict[str, Any]) -> None:
        self._update(status=PlaybackStatus.ENDED, is_playing=False, current_time=0.0)
        self._update(status=PlaybackStatus.READY)
        if self.signal.active_track_id == self.track_id and self.signal.is_playing:
            self.signal.publish(self.track_id, False)

    def _handle_error(self, payload: Dict[str, Any]) -> None:
        self._fail(payload.get("message") or "Media failed to load")

    # ==================== SIGNAL ====================

    def _handle_signal(self, now_playing: NowPlaying) -> None:
        if now_playing.active_track_id != self.track_id:
            if self._state.is_playing:
                logger.debug(f"Track {now_playing.active_track_id} became active, stopping {self.track_id}")
                self._pause()
            return

        if now_playing.is_playing == self._state.is_playing:
            return
        if self._state.status == PlaybackStatus.IDLE:
            return

        if now_playing.is_playing:
            self._play()
        else:
            self._pause()

    # ==================== PRIVATE METHODS ====================

    def _play(self) -> None:
        self._update(status=PlaybackStatus.PLAYING, is_playing=True)
        self.media.play()

    def _pause(self) -> None:
        self._update(status=PlaybackStatus.READY, is_playing=False)
        self.media.pause()

    def _fail(self, message: str) -> None:
        was_playing = self._state.is_playing
        self._update(status=PlaybackStatus.IDLE, is_playing=False, error=message)
        if was_playing and self.signal.active_track_id == self.track_id:
            self.signal.publish(self.track_id, False)

        error = MediaLoadError(self.track_id, message)
        logger.warning(f"Media error: {error}")
        if self.on_error:
            try:
                self.on_error(error)
            except Exception as e:
                logger.error(f"Error callback failed for track {self.track_id}: {e}", exc_info=True)

    def _update(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        if self.on_state_change:
            try:
                self.on_state_change(self._state)
            except Exception as e:
                logger.error(f"State change callback failed for track {self.track_id}: {e}", exc_info=True)
