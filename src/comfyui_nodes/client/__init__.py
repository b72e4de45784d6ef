"""
HTTP client package for the ComfyUI server.
"""

from .http_gateway import HTTPGateway, RetryConfig
from .comfyui_client import ComfyUIClient, build_view_url

__all__ = ["HTTPGateway", "RetryConfig", "ComfyUIClient", "build_view_url"]
