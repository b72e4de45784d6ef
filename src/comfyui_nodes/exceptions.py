"""
Exception classes for the ComfyUI media nodes.

Every error raised by the nodes derives from ComfyUINodeError so the host
boundary can report failures uniformly.
"""

from typing import Any, Dict, Optional
from datetime import datetime, timezone


class ComfyUINodeError(Exception):
    """Base exception with error code, details and cause."""

    default_error_code = "COMFYUI_NODE_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        base_msg = f"[{self.error_code}] {self.message}"
        if self.details:
            base_msg += f" | Details: {self.details}"
        if self.cause:
            base_msg += f" | Caused by: {self.cause}"
        return base_msg


class InvalidWorkflowError(ComfyUINodeError):
    """Workflow JSON is malformed or not an object."""

    default_error_code = "INVALID_WORKFLOW"


class InvalidParameterError(ComfyUINodeError):
    """A node parameter has an unsupported value."""

    default_error_code = "INVALID_PARAMETER"

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if parameter:
            details['parameter'] = parameter
        if value is not None:
            details['value'] = str(value)

        super().__init__(message=message, details=details, **kwargs)


class CredentialsError(ComfyUINodeError):
    """Credentials are missing or incomplete."""

    default_error_code = "CREDENTIALS_ERROR"


class SubmissionError(ComfyUINodeError):
    """The queue endpoint did not return a job identifier."""

    default_error_code = "SUBMISSION_ERROR"


class InvalidResponseError(ComfyUINodeError):
    """The service returned a body that could not be parsed."""

    default_error_code = "INVALID_RESPONSE"


class JobTimeoutError(ComfyUINodeError):
    """The job did not complete within the poll budget."""

    default_error_code = "JOB_TIMEOUT"

    def __init__(
        self,
        message: str,
        prompt_id: Optional[str] = None,
        attempts: Optional[int] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if prompt_id:
            details['prompt_id'] = prompt_id
        if attempts is not None:
            details['attempts'] = attempts

        super().__init__(message=message, details=details, **kwargs)


class JobFailedError(ComfyUINodeError):
    """The remote service reported an error status for the job."""

    default_error_code = "JOB_FAILED"

    def __init__(
        self,
        message: str,
        prompt_id: Optional[str] = None,
        status: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if prompt_id:
            details['prompt_id'] = prompt_id
        if status:
            details['status'] = status

        super().__init__(message=message, details=details, **kwargs)


class NoOutputsError(ComfyUINodeError):
    """A completed job produced no downloadable media."""

    default_error_code = "NO_OUTPUTS"


class NoVideoOutputsError(NoOutputsError):
    """A completed job produced media, but no video."""

    default_error_code = "NO_VIDEO_OUTPUTS"


class FetchError(ComfyUINodeError):
    """An HTTP request failed in transport or returned a non-2xx status."""

    default_error_code = "FETCH_ERROR"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if url:
            details['url'] = url
        if status_code:
            details['status_code'] = status_code
        if response_body:
            details['response_body'] = response_body

        super().__init__(message=message, details=details, **kwargs)
        self.url = url
        self.status_code = status_code


class DownloadError(FetchError):
    """A media download failed permanently."""

    default_error_code = "DOWNLOAD_ERROR"


class NotFoundError(ComfyUINodeError):
    """A required input could not be located."""

    default_error_code = "NOT_FOUND"


class NoLoadImageNodeError(NotFoundError):
    """The workflow has no LoadImage node to receive the uploaded image."""

    default_error_code = "NO_LOAD_IMAGE_NODE"


class DecodeError(ComfyUINodeError):
    """Inline base64 input could not be decoded."""

    default_error_code = "DECODE_ERROR"


class XUploadError(ComfyUINodeError):
    """The X media upload call failed."""

    default_error_code = "X_UPLOAD_ERROR"


class NodeExecutionError(ComfyUINodeError):
    """Single failure reported to the host for a node execution."""

    default_error_code = "NODE_EXECUTION_ERROR"

    def __init__(
        self,
        message: str,
        node_type: Optional[str] = None,
        description: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if node_type:
            details['node_type'] = node_type
        if description:
            details['description'] = description

        super().__init__(message=message, details=details, **kwargs)
