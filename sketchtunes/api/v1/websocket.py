import json
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sketchtunes.core.logging import get_logger
from sketchtunes.dependencies import get_supabase_service
from sketchtunes.services.supabase_service import SupabaseService
from sketchtunes.services.websocket_manager import websocket_manager

logger = get_logger("api.websocket")
router = APIRouter()


@router.websocket("/ws/player")
async def player_websocket(
    websocket: WebSocket,
    supabase_service: SupabaseService = Depends(get_supabase_service)
):
    """
    WebSocket endpoint for a page's audio players.

    The page mounts players, forwards its audio elements' events
    (loadedmetadata, timeupdate, ended, error) and user controls; the
    server answers with media commands for the audio elements, player
    state, time updates, errors and "now playing" changes. A
    ``now_playing`` message from the page plays or pauses a track
    remotely. Only one player per page plays at a time.
    """
    page = await websocket_manager.connect(websocket, supabase_service)
    logger.info(f"Player page {page.page_id} connected - {websocket_manager.get_page_count()} total")

    try:
        await websocket_manager.send_personal_message(
            websocket,
            {"type": "connected", "data": {"page_id": page.page_id}}
        )

        while True:
            text = await websocket.receive_text()

            # Plain-text heartbeat
            if text == "ping":
                await websocket_manager.send_personal_message(websocket, {"type": "pong", "data": {}})
                continue

            try:
                raw = json.loads(text)
            except json.JSONDecodeError:
                await websocket_manager.send_personal_message(
                    websocket,
                    {"type": "error", "data": {"message": "Messages must be JSON"}}
                )
                continue
            if not isinstance(raw, dict):
                await websocket_manager.send_personal_message(
                    websocket,
                    {"type": "error", "data": {"message": "Messages must be JSON objects"}}
                )
                continue

            messages = await page.handle(raw)
            await websocket_manager.send_messages(websocket, messages)

    except WebSocketDisconnect:
        logger.info(f"Player page {page.page_id} disconnected")

    except Exception as e:
        logger.error(f"WebSocket error for player page {page.page_id}: {e}", exc_info=True)
        try:
            await websocket.close(code=1011, reason=str(e))
        except RuntimeError:
            # Already closed
            pass

    finally:
        websocket_manager.disconnect(page.page_id)
        logger.debug(f"Player page {page.page_id} cleaned up - {websocket_manager.get_page_count()} remaining")
