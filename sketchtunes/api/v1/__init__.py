"""
API v1 routes for SketchTunes.
"""
from sketchtunes.api.v1 import auth, users, tracks, websocket

__all__ = ["auth", "users", "tracks", "websocket"]
