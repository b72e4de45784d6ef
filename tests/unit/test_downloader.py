"""
Unit tests for the media downloader.
"""

import pytest
from unittest.mock import AsyncMock, call

from comfyui_nodes.client.http_gateway import RetryConfig
from comfyui_nodes.downloader import MediaDownloader, format_file_size, mime_type_for
from comfyui_nodes.exceptions import DownloadError, FetchError
from comfyui_nodes.models import MediaCategory, MediaOutput


URL = "http://comfy.test/view?filename=clip.mp4&subfolder=&type=output"


@pytest.fixture
def video_output():
    return MediaOutput(filename="clip.mp4", subfolder="", type="output", url=URL, category=MediaCategory.VIDEO)


@pytest.fixture
def image_output():
    return MediaOutput(
        filename="frame.png",
        subfolder="",
        type="output",
        url="http://comfy.test/view?filename=frame.png&subfolder=&type=output",
        category=MediaCategory.IMAGE,
    )


class TestFetchWithRetry:
    """Test cases for the retry loop."""

    @pytest.mark.asyncio
    async def test_retries_server_errors(self, mock_client, no_sleep):
        mock_client.fetch_output = AsyncMock(side_effect=[
            FetchError("HTTP 500", status_code=500),
            FetchError("HTTP 500", status_code=500),
            b"video",
        ])
        downloader = MediaDownloader(mock_client, sleep=no_sleep)

        assert await downloader.fetch_with_retry(URL) == b"video"
        assert mock_client.fetch_output.await_count == 3
        assert no_sleep.await_args_list == [call(2.0), call(2.0)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [403, 404])
    async def test_not_accessible_is_fatal(self, mock_client, no_sleep, status_code):
        mock_client.fetch_output = AsyncMock(side_effect=FetchError("denied", status_code=status_code))
        downloader = MediaDownloader(mock_client, sleep=no_sleep)

        with pytest.raises(DownloadError) as exc_info:
            await downloader.fetch_with_retry(URL)

        assert exc_info.value.status_code == status_code
        assert mock_client.fetch_output.await_count == 1
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exhausted_attempts(self, mock_client, no_sleep):
        last = FetchError("Request failed: TimeoutError")
        mock_client.fetch_output = AsyncMock(side_effect=[FetchError("reset"), FetchError("reset"), last])
        downloader = MediaDownloader(mock_client, sleep=no_sleep)

        with pytest.raises(DownloadError) as exc_info:
            await downloader.fetch_with_retry(URL)

        assert exc_info.value.message.startswith("Failed to download after 3 attempts")
        assert exc_info.value.cause is last
        assert no_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_custom_retry_config(self, mock_client, no_sleep):
        mock_client.fetch_output = AsyncMock(side_effect=FetchError("HTTP 503", status_code=503))
        downloader = MediaDownloader(
            mock_client,
            retry_config=RetryConfig(max_attempts=1, delay_seconds=0.5),
            sleep=no_sleep
        )

        with pytest.raises(DownloadError):
            await downloader.fetch_with_retry(URL)
        assert mock_client.fetch_output.await_count == 1
        no_sleep.assert_not_awaited()


class TestDownload:
    """Test cases for download metadata and ordering."""

    @pytest.mark.asyncio
    async def test_metadata(self, mock_client, no_sleep, video_output):
        mock_client.fetch_output = AsyncMock(return_value=b"x" * 2048)
        downloader = MediaDownloader(mock_client, timeout_seconds=120, sleep=no_sleep)

        media = await downloader.download(video_output, {"completed": True})

        assert media.file_name == "clip.mp4"
        assert media.mime_type == "video/mp4"
        assert media.file_extension == "mp4"
        assert media.file_size == "2 kB"
        assert media.file_type == "video"
        assert media.download_url == URL
        assert media.status == {"completed": True}
        mock_client.fetch_output.assert_awaited_once_with(URL, timeout=120)

    @pytest.mark.asyncio
    async def test_download_all_videos_first(self, mock_client, no_sleep, video_output, image_output):
        downloader = MediaDownloader(mock_client, sleep=no_sleep)

        results = await downloader.download_all([video_output], [image_output])

        assert [m.file_name for m in results] == ["clip.mp4", "frame.png"]
        assert [c.args[0] for c in mock_client.fetch_output.await_args_list] == [video_output.url, image_output.url]

    @pytest.mark.asyncio
    async def test_download_all_stops_on_error(self, mock_client, no_sleep, video_output, image_output):
        mock_client.fetch_output = AsyncMock(side_effect=FetchError("missing", status_code=404))
        downloader = MediaDownloader(mock_client, sleep=no_sleep)

        with pytest.raises(DownloadError):
            await downloader.download_all([video_output], [image_output])
        assert mock_client.fetch_output.await_count == 1


class TestHelpers:
    """Test cases for MIME lookup and size formatting."""

    @pytest.mark.parametrize("filename,expected", [
        ("a.mp4", "video/mp4"),
        ("a.gif", "image/gif"),
        ("a.webp", "image/webp"),
        ("a.png", "image/png"),
        ("a.jpg", "image/jpeg"),
        ("a.jpeg", "image/jpeg"),
        ("a.mov", "application/octet-stream"),
        ("a.MP4", "application/octet-stream"),
    ])
    def test_mime_type_for(self, filename, expected):
        assert mime_type_for(filename) == expected

    @pytest.mark.parametrize("size,expected", [
        (0, "0 kB"),
        (1536, "1.5 kB"),
        (1024 * 1024, "1 MB"),
        (int(5.5 * 1024 * 1024), "5.5 MB"),
        (1234567, "1.18 MB"),
    ])
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected
