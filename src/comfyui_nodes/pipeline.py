"""
Job pipeline: submit -> poll -> extract -> download.
"""

import json
import logging
from typing import Callable, List, Optional

from .client.comfyui_client import ComfyUIClient
from .downloader import MediaDownloader
from .extractor import extract_media_outputs, partition_media_outputs, require_video_outputs
from .models import DownloadedMedia, OutputPolicy
from .poller import CompletionPoller
from .workflow import Workflow, submit_job

logger = logging.getLogger(__name__)


class JobPipeline:
    """Runs one workflow to completion and downloads its media."""

    def __init__(
        self,
        client: ComfyUIClient,
        downloader: MediaDownloader,
        poller_factory: Callable[[], CompletionPoller]
    ):
        self.client = client
        self.downloader = downloader
        self.poller_factory = poller_factory

    async def run(
        self,
        workflow: Workflow,
        timeout_minutes: float,
        policy: OutputPolicy = OutputPolicy.ALL_MEDIA,
        image_name: Optional[str] = None
    ) -> List[DownloadedMedia]:
        """
        Execute a workflow and return its downloaded outputs.

        Args:
            workflow: Parsed workflow
            timeout_minutes: Poll budget
            policy: ALL_MEDIA downloads every video then every image;
                VIDEO_ONLY requires a video and downloads the first one
            image_name: Uploaded image to inject into the LoadImage node

        Returns:
            Downloaded media in delivery order
        """
        prompt_id = await submit_job(self.client, workflow, image_name=image_name)

        poller = self.poller_factory()
        result = await poller.wait_for_completion(prompt_id, timeout_minutes)
        status = result.status.model_dump()

        logger.debug(f"Raw outputs structure: {json.dumps(result.model_dump()['outputs'], indent=2)}")

        media = extract_media_outputs(result, self.client.base_url)

        if policy is OutputPolicy.VIDEO_ONLY:
            videos = require_video_outputs(media)
            logger.info(f"Found video outputs: {[v.filename for v in videos]}")
            return [await self.downloader.download(videos[0], status)]

        videos, images = partition_media_outputs(media)
        return await self.downloader.download_all(videos, images, status)
