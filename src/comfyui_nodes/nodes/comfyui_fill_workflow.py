"""ComfyUI workflow-to-media node."""

from typing import List

from ..models import NodeExecutionItem, OutputPolicy
from ..workflow import parse_workflow
from .base import COMFYUI_CREDENTIAL, BaseNode, NodeDescription, NodeExecutionContext
from .parameters import TIMEOUT, WORKFLOW


class ComfyUIFillWorkflowNode(BaseNode):
    """Runs a workflow as-is and returns every video and image it produced."""

    description = NodeDescription(
        display_name="ComfyUI Wf to Media",
        name="comfyuiFillWorkflow",
        description="Convert a workflow to media using ComfyUI",
        credential=COMFYUI_CREDENTIAL,
        parameters=[WORKFLOW, TIMEOUT],
    )

    async def execute(self, context: NodeExecutionContext) -> List[NodeExecutionItem]:
        workflow = parse_workflow(self.get_parameter(context, "workflow"))
        timeout = self.get_timeout(context)

        async with self.create_client(context) as client:
            pipeline = self.create_pipeline(client, context)
            downloads = await pipeline.run(workflow, timeout, policy=OutputPolicy.ALL_MEDIA)

        return [media.to_execution_item() for media in downloads]
