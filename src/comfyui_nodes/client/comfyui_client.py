"""
ComfyUI endpoint client built on the HTTP gateway.
"""

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from ..config import ComfyUICredentials
from ..exceptions import InvalidResponseError
from ..models import UploadedImage
from .http_gateway import HTTPGateway


logger = logging.getLogger(__name__)


class ComfyUIClient:
    """
    Client for the ComfyUI queue, history, view and upload endpoints.

    Usage:
        async with ComfyUIClient(credentials) as client:
            prompt_id = await client.queue_prompt(workflow)
    """

    def __init__(
        self,
        credentials: ComfyUICredentials,
        gateway: Optional[HTTPGateway] = None,
        timeout: float = 60.0
    ):
        self.credentials = credentials
        self.base_url = credentials.api_url
        self.gateway = gateway or HTTPGateway(timeout=timeout)

    async def __aenter__(self):
        await self.gateway.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.gateway.close()

    @property
    def headers(self) -> Dict[str, str]:
        return self.credentials.auth_headers()

    async def ping(self) -> Any:
        """Readiness probe against the server root; the root may serve HTML."""
        body = await self.gateway.get_bytes(self.base_url, headers=self.headers)
        try:
            return json.loads(body) if body else {}
        except ValueError:
            return body.decode("utf-8", errors="replace")

    async def system_stats(self) -> Dict[str, Any]:
        """Liveness probe via /system_stats."""
        return await self.gateway.get_json(f"{self.base_url}/system_stats", headers=self.headers)

    async def queue_prompt(self, workflow: Dict[str, Any]) -> Dict[str, Any]:
        """POST a job description to /prompt and return the raw response."""
        return await self.gateway.post_json(
            f"{self.base_url}/prompt",
            {"prompt": workflow},
            headers=self.headers
        )

    async def get_history(self, prompt_id: str) -> Dict[str, Any]:
        """Fetch the history mapping for a job."""
        history = await self.gateway.get_json(
            f"{self.base_url}/history/{prompt_id}",
            headers=self.headers
        )
        if not isinstance(history, dict):
            raise InvalidResponseError(f"Unexpected history payload for {prompt_id}")
        return history

    async def upload_image(
        self,
        data: bytes,
        filename: str = "input.png",
        subfolder: str = "",
        overwrite: bool = True
    ) -> UploadedImage:
        """
        Upload a file through /upload/image.

        Args:
            data: File contents
            filename: Name to store the file under
            subfolder: Target subfolder on the server
            overwrite: Replace an existing file with the same name

        Returns:
            The server's reference to the stored file
        """
        form = aiohttp.FormData()
        form.add_field("image", data, filename=filename, content_type="application/octet-stream")
        form.add_field("subfolder", subfolder)
        form.add_field("overwrite", "true" if overwrite else "false")

        response = await self.gateway.post_form(
            f"{self.base_url}/upload/image",
            form,
            headers=self.headers
        )

        try:
            uploaded = UploadedImage.model_validate(response)
        except ValidationError as e:
            raise InvalidResponseError("Upload response is missing the file name", cause=e) from e

        logger.info(f"Uploaded {filename} as {uploaded.name}")
        return uploaded

    async def fetch_output(self, url: str, timeout: Optional[float] = None) -> bytes:
        """Download an output file as raw bytes."""
        return await self.gateway.get_bytes(url, headers=self.headers, timeout=timeout)


def build_view_url(base_url: str, filename: str, subfolder: str, file_type: str) -> str:
    """Substitute an output reference into the /view query string."""
    return (
        f"{base_url}/view?filename={quote(filename, safe='')}"
        f"&subfolder={quote(subfolder or '', safe='')}"
        f"&type={quote(file_type, safe='')}"
    )
