"""
Media downloader with bounded retry.

403 and 404 responses abort immediately; any other failure is retried with a
fixed delay until the attempts are exhausted.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .client.comfyui_client import ComfyUIClient
from .client.http_gateway import RetryConfig
from .exceptions import DownloadError, FetchError
from .models import DownloadedMedia, MediaCategory, MediaOutput

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "mp4": "video/mp4",
    "gif": "image/gif",
    "webp": "image/webp",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
}


def mime_type_for(filename: str) -> str:
    """MIME type from the filename suffix, application/octet-stream otherwise."""
    for extension, mime_type in MIME_TYPES.items():
        if filename.endswith(f".{extension}"):
            return mime_type
    return "application/octet-stream"


def format_file_size(size_bytes: int) -> str:
    """Human-readable size: kB with one decimal, MB with two at 1 MB and above."""
    size_mb = round(size_bytes / (1024 * 1024), 2)
    if size_mb >= 1:
        return f"{size_mb:g} MB"
    return f"{round(size_bytes / 1024, 1):g} kB"


class MediaDownloader:
    """Downloads job outputs one at a time."""

    def __init__(
        self,
        client: ComfyUIClient,
        retry_config: Optional[RetryConfig] = None,
        timeout_seconds: float = 300.0,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        self.client = client
        self.retry_config = retry_config or RetryConfig()
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep or asyncio.sleep

    async def fetch_with_retry(self, url: str) -> bytes:
        """
        GET a URL, retrying transient failures.

        Raises:
            DownloadError: On 403/404, or when every attempt failed
        """
        max_attempts = self.retry_config.max_attempts
        last_error: Optional[FetchError] = None

        for attempt in range(1, max_attempts + 1):
            try:
                logger.debug(f"Download attempt {attempt}/{max_attempts}: {url}")
                return await self.client.fetch_output(url, timeout=self.timeout_seconds)

            except FetchError as e:
                last_error = e
                logger.warning(f"Download attempt {attempt} failed: {e.message}")

                if not self.retry_config.is_retryable(e.status_code):
                    raise DownloadError(
                        f"File not accessible at {url} (HTTP {e.status_code})",
                        url=url,
                        status_code=e.status_code,
                        cause=e
                    ) from e

                if attempt < max_attempts:
                    logger.info(f"Retrying in {self.retry_config.delay_seconds}s...")
                    await self._sleep(self.retry_config.delay_seconds)

        raise DownloadError(
            f"Failed to download after {max_attempts} attempts: {last_error.message}",
            url=url,
            status_code=last_error.status_code,
            cause=last_error
        )

    async def download(self, output: MediaOutput, status: Optional[Dict[str, Any]] = None) -> DownloadedMedia:
        """Download one output and attach its metadata."""
        data = await self.fetch_with_retry(output.url)
        file_size = format_file_size(len(data))
        category = output.category or MediaCategory.IMAGE

        logger.info(f"Downloaded {output.filename} ({file_size})")

        return DownloadedMedia(
            data=data,
            file_name=output.filename,
            mime_type=mime_type_for(output.filename),
            file_extension=output.extension,
            file_size=file_size,
            file_type=category.value,
            download_url=output.url,
            status=status or {}
        )

    async def download_all(
        self,
        videos: List[MediaOutput],
        images: List[MediaOutput],
        status: Optional[Dict[str, Any]] = None
    ) -> List[DownloadedMedia]:
        """Download videos, then images, strictly in sequence."""
        results = []
        for output in list(videos) + list(images):
            results.append(await self.download(output, status))
        return results
