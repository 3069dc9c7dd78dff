from typing import Any, Dict, List
from fastapi import WebSocket
from sketchtunes.core.logging import get_logger
from sketchtunes.services.player_page import PlayerPage
import json
import secrets

logger = get_logger("WebSocketManager")


class WebSocketManager:
    """
    Manages player page WebSocket connections.
    Each connection gets its own PlayerPage, torn down on disconnect.
    """

    def __init__(self):
        # page_id -> (websocket, page)
        self.active_pages: Dict[str, tuple[WebSocket, PlayerPage]] = {}

    async def connect(self, websocket: WebSocket, supabase_service) -> PlayerPage:
        """
        Accept a connection and create its player page.

        Args:
            websocket: WebSocket connection
            supabase_service: Track lookup for players mounted by id

        Returns:
            The new PlayerPage
        """
        await websocket.accept()

        page = PlayerPage(secrets.token_urlsafe(8), supabase_service)
        self.active_pages[page.page_id] = (websocket, page)
        return page

    def disconnect(self, page_id: str) -> None:
        """
        Tear down a page: unmount all of its players and forget the connection.

        Args:
            page_id: Page to remove
        """
        entry = self.active_pages.pop(page_id, None)
        if entry is None:
            return
        _, page = entry
        page.close()

    async def send_messages(self, websocket: WebSocket, messages: List[Dict[str, Any]]) -> None:
        """
        Send a batch of messages to one page, in order.

        Args:
            websocket: WebSocket connection
            messages: Message dicts (JSON serialized one by one)
        """
        for message in messages:
            await websocket.send_text(json.dumps(message))

    async def send_personal_message(self, websocket: WebSocket, message: Dict[str, Any]) -> None:
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.error(f"Failed to send {message.get('type')} message: {e}", exc_info=True)

    def get_page_count(self) -> int:
        return len(self.active_pages)

    def close_all(self) -> None:
        for page_id in list(self.active_pages):
            self.disconnect(page_id)


# Global WebSocket manager instance
websocket_manager = WebSocketManager()
