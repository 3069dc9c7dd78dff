import httpx
from sketchtunes.core.errors import MediaLoadError
from sketchtunes.core.logging import get_logger
from sketchtunes.config import get_settings

logger = get_logger("MediaProbe")

AUDIO_CONTENT_TYPES = {
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/x-wav",
    "audio/wave",
    "audio/ogg",
    "audio/flac",
    "audio/x-flac",
    "audio/aac",
    "audio/mp4",
    "audio/x-m4a",
}


class MediaProbe:
    """
    Checks that an external track URL is reachable and serves audio
    before it is registered as a track.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.transport = transport
        self.timeout = get_settings().media_probe_timeout

    async def probe(self, url: str) -> str:
        """
        Issue a HEAD request (falling back to a one-byte ranged GET when
        HEAD is not allowed) and check the response.

        Returns:
            The audio content type

        Raises:
            MediaLoadError: Unreachable URL, error status or non-audio content
        """
        if not url.startswith(("http://", "https://")):
            raise MediaLoadError(None, f"Unsupported URL scheme: {url}")

        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=self.timeout,
            follow_redirects=True
        ) as client:
            try:
                response = await client.head(url)
                if response.status_code == 405:
                    response = await client.get(url, headers={"Range": "bytes=0-0"})
            except httpx.HTTPError as e:
                logger.warning(f"Media probe failed for {url}: {e}")
                raise MediaLoadError(None, f"Media unreachable: {url}") from e

        if response.status_code >= 400:
            raise MediaLoadError(None, f"Media request failed with status {response.status_code}")

        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if content_type not in AUDIO_CONTENT_TYPES:
            raise MediaLoadError(None, f"Unsupported media type: {content_type or 'unknown'}")

        logger.debug(f"Media probe ok for {url} ({content_type})")
        return content_type
