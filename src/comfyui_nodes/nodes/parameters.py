"""Parameter definitions shared by several nodes."""

from ..inputs import INPUT_TYPES
from .base import NodeParameter

WORKFLOW = NodeParameter(
    name="workflow",
    display_name="Workflow JSON",
    required=True,
    description="The ComfyUI workflow in JSON format",
)

TIMEOUT = NodeParameter(
    name="timeout",
    display_name="Timeout",
    type="number",
    default=30,
    description="Maximum time in minutes to wait for generation",
)

INPUT_TYPE = NodeParameter(
    name="inputType",
    display_name="Input Type",
    type="options",
    default="url",
    options=list(INPUT_TYPES),
)

INPUT_IMAGE = NodeParameter(
    name="inputImage",
    display_name="Input Image",
    default="",
    description="URL or base64 data of the input media",
)

BINARY_PROPERTY = NodeParameter(
    name="binaryPropertyName",
    display_name="Binary Property",
    default="data",
    description="Name of the binary property containing the input media",
)

INPUT_PARAMETERS = [INPUT_TYPE, INPUT_IMAGE, BINARY_PROPERTY]
