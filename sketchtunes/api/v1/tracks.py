from fastapi import APIRouter, HTTPException, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import Response
from sketchtunes.config import get_settings
from sketchtunes.core.errors import MediaLoadError
from sketchtunes.core.logging import get_logger
from sketchtunes.dependencies import get_current_user, get_media_probe, get_supabase_service
from sketchtunes.models.comment import CommentCreate
from sketchtunes.models.track import TrackCreate
from sketchtunes.schemas.comment import CommentListResponse, CommentResponse, CreateCommentRequest
from sketchtunes.schemas.track import CreateTrackRequest, TrackDetailResponse, TrackListResponse, TrackResponse
from sketchtunes.services.media_probe import MediaProbe
from sketchtunes.services.supabase_service import SupabaseService
from sketchtunes.services.waveform_renderer import SvgSurface, WaveformRenderer
from sketchtunes.utils.formatters import format_comment, format_track, format_track_list
from sketchtunes.utils.waveform import waveform_for_track

logger = get_logger("api.tracks")
router = APIRouter()
settings = get_settings()
renderer = WaveformRenderer()

ALLOWED_AUDIO_TYPES = [
    "audio/mpeg",
    "audio/wav",
    "audio/x-wav",
    "audio/ogg",
    "audio/flac",
    "audio/aac",
    "audio/mp4",
    "audio/x-m4a",
]


async def _get_track_or_404(supabase_service: SupabaseService, track_id: str) -> dict:
    result = await supabase_service.get_track_by_id(track_id)
    if not result.data:
        logger.warning(f"Track not found: {track_id}")
        raise HTTPException(status_code=404, detail="Track not found")
    return result.data[0]


# ==================== FEED ====================

@router.get("", response_model=TrackListResponse)
async def get_tracks(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    supabase_service: SupabaseService = Depends(get_supabase_service)
):
    """Get one page of the track feed, newest first"""
    logger.debug(f"Fetching tracks page={page} limit={limit}")
    try:
        result = await supabase_service.get_tracks(page=page, limit=limit)
        tracks = result.data or []
        total = result.count if result.count is not None else len(tracks)
        return format_track_list(tracks, total=total, page=page, limit=limit)
    except Exception as e:
        logger.error(f"Error fetching tracks: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch tracks")


@router.get("/{track_id}", response_model=TrackDetailResponse)
async def get_track(
    track_id: str,
    supabase_service: SupabaseService = Depends(get_supabase_service)
):
    """Get a single track"""
    try:
        track = await _get_track_or_404(supabase_service, track_id)
        return {"track": format_track(track)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching track: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch track")


@router.get("/{track_id}/waveform.svg")
async def get_track_waveform(
    track_id: str,
    current_time: float = Query(0, ge=0),
    duration: float | None = Query(None, ge=0),
    width: int = Query(600, gt=0, le=4000),
    height: int = Query(96, gt=0, le=1000),
    supabase_service: SupabaseService = Depends(get_supabase_service)
):
    """
    Render the track's waveform as SVG, with bars up to ``current_time``
    drawn as played. ``duration`` defaults to the stored track duration.
    """
    try:
        track = await _get_track_or_404(supabase_service, track_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching track for waveform: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch track")

    samples = track.get("waveform_data") or waveform_for_track(track["id"], settings.waveform_bar_count)
    surface = SvgSurface(width, height)
    renderer.render(
        surface,
        samples,
        current_time=current_time,
        duration=duration if duration is not None else (track.get("duration") or 0)
    )
    return Response(content=surface.to_svg(), media_type="image/svg+xml")


# ==================== CREATE ====================

@router.post("", response_model=TrackDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_track(
    request: CreateTrackRequest,
    current_user: dict = Depends(get_current_user),
    supabase_service: SupabaseService = Depends(get_supabase_service),
    media_probe: MediaProbe = Depends(get_media_probe)
):
    """Register a track hosted at an external URL (the URL must serve audio)"""
    logger.info(f"Registering track '{request.title}' for user {current_user['id']}")
    try:
        await media_probe.probe(request.url)
    except MediaLoadError as e:
        logger.warning(f"Rejected track URL {request.url}: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    track = TrackCreate(**request.model_dump(), artist_id=str(current_user["id"]))
    return await _insert_track(supabase_service, track, current_user)


@router.post("/upload", response_model=TrackDetailResponse, status_code=status.HTTP_201_CREATED)
async def upload_track(
    file: UploadFile = File(...),
    title: str = Form(..., min_length=1, max_length=200),
    duration: float = Form(0, ge=0),
    genre: str | None = Form(None),
    daw: str | None = Form(None),
    production_stage: str | None = Form(None),
    current_user: dict = Depends(get_current_user),
    supabase_service: SupabaseService = Depends(get_supabase_service)
):
    """
    Upload an audio file and create a track for it.
    Accepts: MP3, WAV, OGG, FLAC, AAC, M4A
    """
    logger.info(f"Attempting to upload track: {file.filename}")

    if file.content_type not in ALLOWED_AUDIO_TYPES:
        logger.warning(f"Invalid file type attempted: {file.content_type}")
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Allowed types: {', '.join(ALLOWED_AUDIO_TYPES)}"
        )

    file_data = await file.read()
    if len(file_data) > settings.max_upload_bytes:
        logger.warning(f"File too large: {len(file_data)} bytes")
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {settings.max_upload_mb}MB"
        )

    try:
        public_url = await supabase_service.upload_track_audio(
            file_data=file_data,
            file_name=file.filename or "track.mp3",
            content_type=file.content_type
        )
    except Exception as e:
        logger.error(f"Failed to upload track audio: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}")

    track = TrackCreate(
        title=title,
        url=public_url,
        duration=duration,
        genre=genre,
        daw=daw,
        production_stage=production_stage,
        artist_id=str(current_user["id"])
    )
    return await _insert_track(supabase_service, track, current_user)


async def _insert_track(supabase_service: SupabaseService, track: TrackCreate, artist: dict) -> dict:
    try:
        result = await supabase_service.create_track(**track.model_dump())
    except Exception as e:
        logger.error(f"Failed to create track: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    row = {**result.data[0], "artist": artist}
    logger.info(f"Track created: {row['id']}")
    return {"track": format_track(row)}


# ==================== COMMENTS ====================

@router.get("/{track_id}/comments", response_model=CommentListResponse)
async def get_track_comments(
    track_id: str,
    supabase_service: SupabaseService = Depends(get_supabase_service)
):
    """Get a track's comments, newest first"""
    try:
        await _get_track_or_404(supabase_service, track_id)
        result = await supabase_service.get_track_comments(track_id)
        comments = [format_comment(c) for c in result.data or []]
        return {"comments": comments, "total": len(comments)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching comments: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch comments")


@router.post("/{track_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_track_comment(
    track_id: str,
    request: CreateCommentRequest,
    current_user: dict = Depends(get_current_user),
    supabase_service: SupabaseService = Depends(get_supabase_service)
):
    """
    Comment on a track as the current user.
    Timestamp comments carry the player's position in seconds.
    """
    logger.info(f"User {current_user['id']} commenting on track {track_id}")
    try:
        await _get_track_or_404(supabase_service, track_id)

        comment = CommentCreate(
            **request.model_dump(),
            track_id=track_id,
            user_id=str(current_user["id"]),
            user_name=current_user["name"],
            user_avatar=current_user.get("image")
        )
        result = await supabase_service.create_comment(
            track_id=comment.track_id,
            user_id=comment.user_id,
            user_name=comment.user_name,
            user_avatar=comment.user_avatar,
            content=comment.content,
            comment_type=comment.type,
            timestamp=comment.timestamp
        )

        all_comments = await supabase_service.get_track_comments(track_id)
        await supabase_service.update_track_comment_count(track_id, len(all_comments.data or []))

        return format_comment(result.data[0])
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to add comment: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
