"""
ComfyUI image-to-video and video-to-video nodes.

Both upload the input media, point the workflow's LoadImage node at it and
return the first video the job produced.
"""

import logging
from datetime import datetime, timezone
from typing import List

from ..config import ComfyUISettings
from ..models import DownloadedMedia, NodeExecutionItem, OutputPolicy
from ..workflow import parse_workflow
from .base import COMFYUI_CREDENTIAL, BaseNode, NodeDescription, NodeExecutionContext
from .parameters import INPUT_PARAMETERS, TIMEOUT, WORKFLOW

logger = logging.getLogger(__name__)

UPLOAD_FILENAME = "input.png"


class MediaToVideoNode(BaseNode):
    """Shared body of the video generation nodes."""

    # Probe /system_stats before uploading
    check_system_stats = False
    # Used when COMFYUI_INITIAL_POLL_DELAY_SECONDS is unset
    default_initial_poll_delay_seconds = 0.0

    def initial_poll_delay(self, settings: ComfyUISettings) -> float:
        if settings.initial_poll_delay_seconds is not None:
            return settings.initial_poll_delay_seconds
        return self.default_initial_poll_delay_seconds

    def to_item(self, media: DownloadedMedia) -> NodeExecutionItem:
        return media.to_execution_item()

    async def execute(self, context: NodeExecutionContext) -> List[NodeExecutionItem]:
        workflow = parse_workflow(self.get_parameter(context, "workflow"))
        timeout = self.get_timeout(context)
        initial_delay = self.initial_poll_delay(context.get_settings())

        async with self.create_client(context) as client:
            if self.check_system_stats:
                logger.info("Checking API connection...")
                await client.system_stats()

            provider = self.create_input_provider(client.gateway, context)
            buffer = await provider.get_buffer()

            logger.info("Uploading input media...")
            uploaded = await client.upload_image(buffer, filename=UPLOAD_FILENAME)

            pipeline = self.create_pipeline(client, context, initial_delay_seconds=initial_delay)
            downloads = await pipeline.run(
                workflow,
                timeout,
                policy=OutputPolicy.VIDEO_ONLY,
                image_name=uploaded.name
            )

        return [self.to_item(media) for media in downloads]


class ComfyUIImageToVideoNode(MediaToVideoNode):
    """Converts an image to a video with a ComfyUI workflow."""

    description = NodeDescription(
        display_name="ComfyUI Image to Video",
        name="comfyuiImageToVideo",
        description="Convert images to videos using ComfyUI workflow",
        credential=COMFYUI_CREDENTIAL,
        parameters=[WORKFLOW, *INPUT_PARAMETERS, TIMEOUT],
    )

    check_system_stats = True
    default_initial_poll_delay_seconds = 5.0


class ComfyUIVideoToVideoNode(MediaToVideoNode):
    """Converts input media to a video with a ComfyUI workflow."""

    description = NodeDescription(
        display_name="ComfyUI Video to Video",
        name="comfyuiVideoToVideo",
        description="Convert video to videos using ComfyUI workflow",
        credential=COMFYUI_CREDENTIAL,
        parameters=[WORKFLOW, *INPUT_PARAMETERS, TIMEOUT],
    )

    def to_item(self, media: DownloadedMedia) -> NodeExecutionItem:
        """Deliver the video under the "video" binary property."""
        return media.to_execution_item(
            binary_property="video",
            extra_json={
                "success": True,
                "contentType": media.mime_type,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )
