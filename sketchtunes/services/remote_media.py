from typing import Any, Dict, List

from sketchtunes.core.logging import get_logger
from sketchtunes.services.playback_controller import MEDIA_EVENTS, MediaListener

logger = get_logger("RemoteMedia")


class RemoteMediaElement:
    """
    Media element living in the browser, driven over the player WebSocket.

    Commands are queued as ``media_command`` messages until the page
    drains the outbox; events reported by the browser are fed back in
    through ``dispatch``.
    """

    def __init__(self, player_id: str, url: str):
        self.player_id = player_id
        self.url = url
        self._outbox: List[Dict[str, Any]] = []
        self._listeners: Dict[str, List[MediaListener]] = {event: [] for event in MEDIA_EVENTS}

    # ==================== COMMANDS ====================

    def load(self) -> None:
        self._command("load", url=self.url)

    def play(self) -> None:
        self._command("play")

    def pause(self) -> None:
        self._command("pause")

    def seek(self, seconds: float) -> None:
        self._command("seek", position=seconds)

    def set_volume(self, volume: float) -> None:
        self._command("volume", volume=volume)

    def set_muted(self, muted: bool) -> None:
        self._command("muted", muted=muted)

    def drain(self) -> List[Dict[str, Any]]:
        """Return and clear the queued commands"""
        messages, self._outbox = self._outbox, []
        return messages

    # ==================== EVENTS ====================

    def add_listener(self, event: str, listener: MediaListener) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown media event: {event}")
        self._listeners[event].append(listener)

    def remove_listener(self, event: str, listener: MediaListener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: str | None = None) -> int:
        if event is not None:
            return len(self._listeners.get(event, []))
        return sum(len(listeners) for listeners in self._listeners.values())

    def dispatch(self, event: str, payload: Dict[str, Any] | None = None) -> int:
        """
        Deliver a browser event to the registered listeners.

        Returns:
            Number of listeners called (0 once the controller unmounted)

        Raises:
            ValueError: For an unknown event name
        """
        if event not in self._listeners:
            raise ValueError(f"Unknown media event: {event}")

        listeners = list(self._listeners[event])
        for listener in listeners:
            listener(payload or {})
        return len(listeners)

    def _command(self, action: str, **data: Any) -> None:
        self._outbox.append({
            "type": "media_command",
            "data": {"player_id": self.player_id, "action": action, **data}
        })
