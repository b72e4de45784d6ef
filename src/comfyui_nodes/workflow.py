"""
Workflow parsing, image injection and job submission.
"""

import json
import logging
from typing import Any, Dict, Optional

from .client.comfyui_client import ComfyUIClient
from .exceptions import InvalidWorkflowError, NoLoadImageNodeError, SubmissionError

logger = logging.getLogger(__name__)

LOAD_IMAGE_CLASS = "LoadImage"

Workflow = Dict[str, Any]


def parse_workflow(workflow_json: str) -> Workflow:
    """
    Parse the user's workflow JSON text.

    Args:
        workflow_json: Workflow in ComfyUI API format

    Returns:
        Mapping of node id to node descriptor

    Raises:
        InvalidWorkflowError: On malformed JSON or a non-object document
    """
    try:
        workflow = json.loads(workflow_json)
    except (TypeError, json.JSONDecodeError) as e:
        raise InvalidWorkflowError(f"Invalid workflow JSON: {e}", cause=e) from e

    validate_workflow(workflow)
    return workflow


def validate_workflow(workflow: Any) -> None:
    """Raise InvalidWorkflowError unless workflow is a mapping."""
    if not isinstance(workflow, dict):
        raise InvalidWorkflowError(
            "Invalid workflow structure. The workflow must be a valid JSON object.",
            details={"type": type(workflow).__name__}
        )


def find_load_image_node(workflow: Workflow) -> Optional[Dict[str, Any]]:
    """Return the first LoadImage node, or None."""
    for node in workflow.values():
        if isinstance(node, dict) and node.get("class_type") == LOAD_IMAGE_CLASS:
            return node
    return None


def inject_image(workflow: Workflow, image_name: str) -> Workflow:
    """
    Point the workflow's LoadImage node at an uploaded image.

    Args:
        workflow: Parsed workflow, modified in place
        image_name: Server-side name returned by the upload endpoint

    Returns:
        The same workflow

    Raises:
        NoLoadImageNodeError: If the workflow has no LoadImage node
    """
    node = find_load_image_node(workflow)
    if node is None:
        raise NoLoadImageNodeError(
            "No LoadImage node found in the workflow. "
            "The workflow must contain a LoadImage node with an image input."
        )

    inputs = node.get("inputs")
    if not isinstance(inputs, dict):
        inputs = node["inputs"] = {}
    inputs["image"] = image_name
    return workflow


async def submit_job(
    client: ComfyUIClient,
    workflow: Any,
    image_name: Optional[str] = None
) -> str:
    """
    Queue a workflow and return its job identifier.

    Args:
        client: ComfyUI client
        workflow: Parsed workflow
        image_name: Uploaded image to inject into the LoadImage node

    Returns:
        The prompt_id assigned by the server

    Raises:
        InvalidWorkflowError: If workflow is not a mapping
        NoLoadImageNodeError: If image_name is given and no LoadImage node exists
        SubmissionError: If the response carries no prompt_id
    """
    validate_workflow(workflow)
    if image_name is not None:
        inject_image(workflow, image_name)

    response = await client.queue_prompt(workflow)
    prompt_id = response.get("prompt_id") if isinstance(response, dict) else None
    if not prompt_id:
        raise SubmissionError(
            "Failed to get prompt ID from ComfyUI",
            details={"node_errors": response.get("node_errors")} if isinstance(response, dict) else {}
        )

    logger.info(f"Workflow queued with ID: {prompt_id}")
    return str(prompt_id)
