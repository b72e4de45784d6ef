"""ComfyUI readiness check node."""

import logging
from typing import List

from ..exceptions import FetchError
from ..models import NodeExecutionItem
from .base import COMFYUI_CREDENTIAL, BaseNode, NodeDescription, NodeExecutionContext

logger = logging.getLogger(__name__)


class ComfyUIStatusNode(BaseNode):
    """Reports whether a ComfyUI server answers on its base URL."""

    description = NodeDescription(
        display_name="ComfyUI Status",
        name="comfyuiStatus",
        description="Check if a ComfyUI server is ready",
        credential=COMFYUI_CREDENTIAL,
    )

    async def execute(self, context: NodeExecutionContext) -> List[NodeExecutionItem]:
        async with self.create_client(context) as client:
            try:
                response = await client.ping()
            except FetchError as e:
                logger.warning(f"ComfyUI server at {client.base_url} is not ready: {e.message}")
                return [NodeExecutionItem(json={"ready": False, "error": e.message})]

        return [NodeExecutionItem(json={"ready": True, "data": response})]
