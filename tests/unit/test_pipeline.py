"""
Unit tests for the submit -> poll -> extract -> download pipeline.
"""

import pytest
from unittest.mock import AsyncMock

from comfyui_nodes.downloader import MediaDownloader
from comfyui_nodes.exceptions import JobTimeoutError, NoOutputsError, NoVideoOutputsError
from comfyui_nodes.models import OutputPolicy
from comfyui_nodes.pipeline import JobPipeline
from comfyui_nodes.poller import CompletionPoller


@pytest.fixture
def pipeline(mock_client, no_sleep):
    downloader = MediaDownloader(mock_client, sleep=no_sleep)
    return JobPipeline(
        mock_client,
        downloader,
        poller_factory=lambda: CompletionPoller(mock_client, interval_seconds=1, sleep=no_sleep)
    )


class TestJobPipeline:
    """Test cases for JobPipeline.run."""

    @pytest.mark.asyncio
    async def test_all_media(self, pipeline, mock_client, sample_workflow, history_factory, mixed_outputs):
        mock_client.get_history = AsyncMock(return_value=history_factory("job-1", outputs=mixed_outputs))

        downloads = await pipeline.run(sample_workflow, 1, policy=OutputPolicy.ALL_MEDIA)

        assert [d.file_name for d in downloads] == ["clip_00001.mp4", "frame_00001.png", "preview.jpg"]
        assert downloads[0].status["completed"] is True
        mock_client.get_history.assert_awaited_with("job-1")

    @pytest.mark.asyncio
    async def test_video_only_downloads_first_video(self, pipeline, mock_client, sample_workflow, history_factory):
        outputs = {"12": {"gifs": [
            {"filename": "a.mp4", "subfolder": "", "type": "output"},
            {"filename": "b.mp4", "subfolder": "", "type": "output"},
        ]}}
        mock_client.get_history = AsyncMock(return_value=history_factory("job-1", outputs=outputs))

        downloads = await pipeline.run(
            sample_workflow, 1, policy=OutputPolicy.VIDEO_ONLY, image_name="input.png"
        )

        assert [d.file_name for d in downloads] == ["a.mp4"]
        assert mock_client.fetch_output.await_count == 1
        queued = mock_client.queue_prompt.await_args.args[0]
        assert queued["10"]["inputs"]["image"] == "input.png"

    @pytest.mark.asyncio
    async def test_video_only_without_video(self, pipeline, mock_client, sample_workflow, history_factory):
        outputs = {"9": {"images": [{"filename": "a.png", "subfolder": "", "type": "output"}]}}
        mock_client.get_history = AsyncMock(return_value=history_factory("job-1", outputs=outputs))

        with pytest.raises(NoVideoOutputsError):
            await pipeline.run(sample_workflow, 1, policy=OutputPolicy.VIDEO_ONLY)
        mock_client.fetch_output.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_outputs(self, pipeline, mock_client, sample_workflow, history_factory):
        mock_client.get_history = AsyncMock(return_value=history_factory("job-1"))

        with pytest.raises(NoOutputsError):
            await pipeline.run(sample_workflow, 1)

    @pytest.mark.asyncio
    async def test_timeout_skips_download(self, pipeline, mock_client, sample_workflow):
        mock_client.get_history = AsyncMock(return_value={})

        with pytest.raises(JobTimeoutError):
            await pipeline.run(sample_workflow, 0.05)
        mock_client.fetch_output.assert_not_awaited()
