"""
X (Twitter) media upload through tweepy.

tweepy is synchronous; uploads run in a worker thread so the event loop keeps
serving other work.
"""

import asyncio
import io
import logging
from typing import Any, Dict

import tweepy

from ..exceptions import XUploadError

logger = logging.getLogger(__name__)

MEDIA_CATEGORIES = {
    "mp4": "tweet_video",
    "gif": "tweet_gif",
    "png": "tweet_image",
    "jpg": "tweet_image",
    "jpeg": "tweet_image",
    "webp": "tweet_image",
}


class XMediaClient:
    """Uploads media to X with an OAuth2 user access token."""

    def __init__(self, access_token: str):
        self.api = tweepy.API(tweepy.OAuth2BearerHandler(access_token))

    def _upload_sync(self, buffer: bytes, media_type: str) -> Any:
        return self.api.media_upload(
            filename=f"upload.{media_type}",
            file=io.BytesIO(buffer),
            chunked=True,
            media_category=MEDIA_CATEGORIES.get(media_type, "tweet_video")
        )

    async def upload_media(self, buffer: bytes, media_type: str = "mp4") -> Dict[str, Any]:
        """
        Upload a media buffer.

        Args:
            buffer: Media bytes
            media_type: File extension that selects the media category

        Returns:
            Mapping with the media id string and the processing info, if any

        Raises:
            XUploadError: If the upload is rejected
        """
        logger.info(f"Uploading {len(buffer)} bytes to X as {media_type}")
        try:
            media = await asyncio.to_thread(self._upload_sync, buffer, media_type)
        except tweepy.TweepyException as e:
            raise XUploadError(f"X media upload failed: {e}", cause=e) from e

        media_id = getattr(media, "media_id_string", None) or str(getattr(media, "media_id", ""))
        logger.info(f"X media uploaded with id {media_id}")
        return {
            "media_id": media_id,
            "processing_info": getattr(media, "processing_info", None),
        }
