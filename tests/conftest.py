"""
Pytest configuration and shared fixtures for the ComfyUI media node tests.
"""

import pytest
import os
import sys
from unittest.mock import AsyncMock, MagicMock, patch
from pathlib import Path

# Add src directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from comfyui_nodes.config import ComfyUICredentials, ComfyUISettings  # noqa: E402


BASE_URL = "http://comfy.test"


@pytest.fixture(autouse=True)
def mock_environment():
    """Keep developer COMFYUI_* variables out of the tests."""
    cleaned = {key: value for key, value in os.environ.items() if not key.startswith("COMFYUI_")}
    with patch.dict(os.environ, cleaned, clear=True):
        yield


@pytest.fixture
def settings():
    """Fast settings: tiny poll interval, no retry delay."""
    return ComfyUISettings(
        _env_file=None,
        poll_interval_seconds=0.01,
        initial_poll_delay_seconds=0.0,
        default_timeout_minutes=1.0,
        download_retry_delay_seconds=0.0,
    )


@pytest.fixture
def credentials():
    return ComfyUICredentials(api_url=f"{BASE_URL}/", api_key="test-key")


@pytest.fixture
def raw_credentials():
    """Credential mapping as supplied by the host."""
    return {"comfyUIApi": {"apiUrl": BASE_URL, "apiKey": "test-key"}}


@pytest.fixture
def no_sleep():
    """Awaitable sleep replacement that records its calls."""
    return AsyncMock(return_value=None)


@pytest.fixture
def sample_workflow():
    """Minimal image-to-video workflow in API format."""
    return {
        "3": {
            "class_type": "KSampler",
            "inputs": {"seed": 42, "steps": 20, "model": ["4", 0]},
        },
        "4": {
            "class_type": "CheckpointLoaderSimple",
            "inputs": {"ckpt_name": "model.safetensors"},
        },
        "10": {
            "class_type": "LoadImage",
            "inputs": {"image": "placeholder.png"},
        },
        "12": {
            "class_type": "VHS_VideoCombine",
            "inputs": {"images": ["3", 0], "frame_rate": 8},
        },
    }


def make_history(prompt_id, outputs=None, completed=True, status_str="success"):
    """Build a /history response for one job."""
    return {
        prompt_id: {
            "prompt": [0, prompt_id, {}],
            "outputs": outputs or {},
            "status": {"completed": completed, "status_str": status_str, "messages": []},
        }
    }


@pytest.fixture
def history_factory():
    return make_history


@pytest.fixture
def mixed_outputs():
    """Outputs with a video, two images and an input-folder file."""
    return {
        "9": {
            "images": [
                {"filename": "frame_00001.png", "subfolder": "", "type": "output"},
                {"filename": "preview.jpg", "subfolder": "previews", "type": "temp"},
                {"filename": "source.png", "subfolder": "", "type": "input"},
            ]
        },
        "12": {
            "gifs": [
                {"filename": "clip_00001.mp4", "subfolder": "video", "type": "output", "format": "video/h264-mp4"},
            ]
        },
    }


@pytest.fixture
def mock_client(credentials):
    """ComfyUI client double with async endpoint methods."""
    client = MagicMock()
    client.base_url = credentials.api_url
    client.credentials = credentials
    client.gateway = MagicMock()
    client.gateway.get_bytes = AsyncMock()
    client.ping = AsyncMock(return_value={})
    client.system_stats = AsyncMock(return_value={"system": {"os": "posix"}})
    client.queue_prompt = AsyncMock(return_value={"prompt_id": "job-1", "number": 1, "node_errors": {}})
    client.get_history = AsyncMock(return_value={})
    client.upload_image = AsyncMock()
    client.fetch_output = AsyncMock(return_value=b"media-bytes")
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    return client
