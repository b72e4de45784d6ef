"""Output media extraction and classification for completed jobs."""

import logging
from typing import List, Optional, Tuple

from .client.comfyui_client import build_view_url
from .exceptions import NoOutputsError, NoVideoOutputsError
from .models import JobResult, MediaCategory, MediaOutput

logger = logging.getLogger(__name__)

VIDEO_SUFFIXES = (".mp4", ".gif", ".webp")
IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg")
DOWNLOADABLE_TYPES = ("output", "temp")


def classify_media(filename: str) -> Optional[MediaCategory]:
    """Classify a filename as video or image by its exact suffix."""
    for suffix in VIDEO_SUFFIXES:
        if filename.endswith(suffix):
            return MediaCategory.VIDEO
    for suffix in IMAGE_SUFFIXES:
        if filename.endswith(suffix):
            return MediaCategory.IMAGE
    return None


def extract_media_outputs(result: JobResult, base_url: str) -> List[MediaOutput]:
    """
    Collect the downloadable outputs of a completed job.

    Args:
        result: Completed job history entry
        base_url: ComfyUI base URL for /view links

    Returns:
        Outputs in node order, images before gifs within a node

    Raises:
        NoOutputsError: If no output or temp files were produced
    """
    media: List[MediaOutput] = []
    for node_output in result.outputs.values():
        for item in node_output.media_files():
            if item.type not in DOWNLOADABLE_TYPES:
                continue
            media.append(MediaOutput(
                filename=item.filename,
                subfolder=item.subfolder or "",
                type=item.type,
                url=build_view_url(base_url, item.filename, item.subfolder, item.type),
                category=classify_media(item.filename)
            ))

    if not media:
        raise NoOutputsError("[ComfyUI] No media outputs found in results")

    logger.info(f"Found {len(media)} media outputs: {[m.filename for m in media]}")
    return media


def partition_media_outputs(media: List[MediaOutput]) -> Tuple[List[MediaOutput], List[MediaOutput]]:
    """Split outputs into (videos, images); unsupported suffixes are dropped."""
    videos = [m for m in media if m.category is MediaCategory.VIDEO]
    images = [m for m in media if m.category is MediaCategory.IMAGE]
    return videos, images


def require_video_outputs(media: List[MediaOutput]) -> List[MediaOutput]:
    """Return the video outputs, raising NoVideoOutputsError if there are none."""
    videos, _ = partition_media_outputs(media)
    if not videos:
        raise NoVideoOutputsError(
            "[ComfyUI] No video outputs found in results",
            details={"outputs": [m.filename for m in media]}
        )
    return videos
