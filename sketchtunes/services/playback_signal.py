from dataclasses import dataclass
from typing import Callable, List, Optional

from sketchtunes.core.logging import get_logger

logger = get_logger("PlaybackSignal")


@dataclass(frozen=True)
class NowPlaying:
    """Which track is active on a page and whether it is playing"""
    active_track_id: Optional[str] = None
    is_playing: bool = False


SignalListener = Callable[[NowPlaying], None]


class SharedPlaybackSignal:
    """
    Page-wide "now playing" record shared by every PlaybackController on a page.

    Publishing notifies all subscribers synchronously, in subscription
    order. Only one track can be active at a time; controllers that see a
    different active track stop themselves.
    """

    def __init__(self):
        self._state = NowPlaying()
        self._listeners: List[SignalListener] = []

    @property
    def snapshot(self) -> NowPlaying:
        return self._state

    @property
    def active_track_id(self) -> Optional[str]:
        return self._state.active_track_id

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    def publish(self, track_id: Optional[str], is_playing: bool) -> None:
        """
        Set the active track and notify every subscriber.

        Args:
            track_id: Track that is now active (None clears the signal)
            is_playing: Whether that track is playing
        """
        self._state = NowPlaying(active_track_id=track_id, is_playing=bool(is_playing and track_id))
        logger.debug(f"Signal -> track={self._state.active_track_id} playing={self._state.is_playing}")
        self._notify()

    def clear(self) -> None:
        self.publish(None, False)

    def subscribe(self, listener: SignalListener) -> Callable[[], None]:
        """
        Register a listener for signal changes.

        Returns:
            A callable that removes the listener (safe to call twice)
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        state = self._state
        # Listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Playback signal listener failed: {e}", exc_info=True)
