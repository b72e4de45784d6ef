"""
Host nodes for ComfyUI media generation and X media upload.

Each node exposes a static NodeDescription and an async run(context) that the
host calls once per execution.
"""

from .base import BaseNode, NodeDescription, NodeExecutionContext, NodeParameter
from .comfyui_status import ComfyUIStatusNode
from .comfyui_fill_workflow import ComfyUIFillWorkflowNode
from .comfyui_video import ComfyUIImageToVideoNode, ComfyUIVideoToVideoNode
from .comfyui_media_upload import ComfyUIMediaUploadNode
from .x_media_upload import XMediaUploadNode

NODE_TYPES = {
    node.description.name: node
    for node in (
        ComfyUIStatusNode,
        ComfyUIFillWorkflowNode,
        ComfyUIImageToVideoNode,
        ComfyUIVideoToVideoNode,
        ComfyUIMediaUploadNode,
        XMediaUploadNode,
    )
}


def get_node(name: str) -> BaseNode:
    """Instantiate a node by its type name."""
    try:
        return NODE_TYPES[name]()
    except KeyError:
        raise KeyError(f"Unknown node type: {name}") from None


__all__ = [
    'BaseNode',
    'NodeDescription',
    'NodeExecutionContext',
    'NodeParameter',
    'ComfyUIStatusNode',
    'ComfyUIFillWorkflowNode',
    'ComfyUIImageToVideoNode',
    'ComfyUIVideoToVideoNode',
    'ComfyUIMediaUploadNode',
    'XMediaUploadNode',
    'NODE_TYPES',
    'get_node',
]
