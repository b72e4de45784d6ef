"""ComfyUI media upload node."""

from typing import List

from ..models import NodeExecutionItem
from .base import COMFYUI_CREDENTIAL, BaseNode, NodeDescription, NodeExecutionContext, NodeParameter
from .parameters import INPUT_PARAMETERS


class ComfyUIMediaUploadNode(BaseNode):
    """Uploads input media to the ComfyUI server's input folder."""

    description = NodeDescription(
        display_name="ComfyUI Media Upload",
        name="comfyuiMediaUpload",
        description="Media Upload to ComfyUI server",
        credential=COMFYUI_CREDENTIAL,
        parameters=[
            NodeParameter(
                name="filename",
                display_name="Filename",
                required=True,
                description="Name to store the uploaded file under",
            ),
            *INPUT_PARAMETERS,
        ],
    )

    async def execute(self, context: NodeExecutionContext) -> List[NodeExecutionItem]:
        filename = self.get_parameter(context, "filename")

        async with self.create_client(context) as client:
            buffer = await self.create_input_provider(client.gateway, context).get_buffer()
            uploaded = await client.upload_image(buffer, filename=filename)

        return [NodeExecutionItem(json={"fileName": uploaded.name})]
