import uuid
from supabase import create_client, Client
from sketchtunes.config import get_settings

# Track rows embed their artist
TRACK_SELECT = "*, artist:user(id, name, image)"


def get_supabase_client() -> Client:
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_key)


class SupabaseService:
    def __init__(self, client: Client | None = None):
        self.client = client or get_supabase_client()
        self.settings = get_settings()

    # ==================== USER OPERATIONS ====================

    async def create_user(self, name: str, email: str, hashed_password: str, image: str | None = None):
        data = {
            "name": name,
            "email": email,
            "hashed_password": hashed_password,
            "image": image
        }
        return self.client.table("user").insert(data).execute()

    async def get_user_by_email(self, email: str):
        return self.client.table("user").select("*").eq("email", email).limit(1).execute()

    async def get_user_by_id(self, user_id: str):
        return self.client.table("user").select("*").eq("id", user_id).limit(1).execute()

    # ==================== TRACK OPERATIONS ====================

    async def get_tracks(self, page: int = 1, limit: int = 10):
        """
        Get one page of the feed, newest first.

        Args:
            page: 1-based page number
            limit: Page size

        Returns:
            Response with ``data`` (track rows) and ``count`` (total tracks)
        """
        start = (page - 1) * limit
        return (
            self.client.table("track")
            .select(TRACK_SELECT, count="exact")
            .order("created_at", desc=True)
            .range(start, start + limit - 1)
            .execute()
        )

    async def get_track_by_id(self, track_id: str):
        return self.client.table("track").select(TRACK_SELECT).eq("id", track_id).limit(1).execute()

    async def create_track(
        self,
        title: str,
        artist_id: str,
        url: str,
        duration: float = 0,
        genre: str | None = None,
        daw: str | None = None,
        production_stage: str | None = None,
        cover_image: str | None = None,
        waveform_data: list[float] | None = None
    ):
        data = {
            "title": title,
            "artist_id": artist_id,
            "url": url,
            "duration": duration,
            "genre": genre,
            "daw": daw,
            "production_stage": production_stage,
            "cover_image": cover_image,
            "waveform_data": waveform_data,
            "plays": 0,
            "likes": 0,
            "comments": 0
        }
        return self.client.table("track").insert(data).execute()

    async def update_track_comment_count(self, track_id: str, count: int):
        return self.client.table("track").update({"comments": count}).eq("id", track_id).execute()

    # ==================== COMMENT OPERATIONS ====================

    async def get_track_comments(self, track_id: str):
        return (
            self.client.table("comment")
            .select("*")
            .eq("track_id", track_id)
            .order("created_at", desc=True)
            .execute()
        )

    async def create_comment(
        self,
        track_id: str,
        user_id: str,
        user_name: str,
        content: str,
        comment_type: str = "general",
        timestamp: float | None = None,
        user_avatar: str | None = None
    ):
        data = {
            "track_id": track_id,
            "user_id": user_id,
            "user_name": user_name,
            "user_avatar": user_avatar,
            "content": content,
            "timestamp": timestamp,
            "type": comment_type,
            "likes": 0
        }
        return self.client.table("comment").insert(data).execute()

    # ==================== STORAGE ====================

    async def upload_track_audio(self, file_data: bytes, file_name: str, content_type: str) -> str:
        """
        Upload an audio file to Supabase Storage.

        Args:
            file_data: File bytes
            file_name: Original file name (only its extension is kept)
            content_type: MIME type

        Returns:
            Public URL of the uploaded file
        """
        bucket_name = self.settings.tracks_bucket
        file_extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else "mp3"
        unique_filename = f"{uuid.uuid4()}.{file_extension}"

        self.client.storage.from_(bucket_name).upload(
            path=unique_filename,
            file=file_data,
            file_options={"content-type": content_type}
        )

        return self.client.storage.from_(bucket_name).get_public_url(unique_filename)
