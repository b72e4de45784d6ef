"""
ComfyUI Media Nodes

Workflow automation nodes that queue ComfyUI jobs, poll them to completion,
download the generated media and upload media to X.
"""

from .config import ComfyUISettings, ComfyUICredentials, XCredentials, get_settings
from .exceptions import (
    ComfyUINodeError,
    InvalidWorkflowError,
    SubmissionError,
    JobTimeoutError,
    JobFailedError,
    NoOutputsError,
    NoVideoOutputsError,
    FetchError,
    DownloadError,
    NotFoundError,
    NoLoadImageNodeError,
    DecodeError,
    NodeExecutionError,
)
from .logging_config import setup_logging
from .models import MediaCategory, OutputPolicy
from .pipeline import JobPipeline
from .poller import CompletionPoller, PollState

__version__ = "0.1.0"

__all__ = [
    'ComfyUISettings',
    'ComfyUICredentials',
    'XCredentials',
    'get_settings',
    'ComfyUINodeError',
    'InvalidWorkflowError',
    'SubmissionError',
    'JobTimeoutError',
    'JobFailedError',
    'NoOutputsError',
    'NoVideoOutputsError',
    'FetchError',
    'DownloadError',
    'NotFoundError',
    'NoLoadImageNodeError',
    'DecodeError',
    'NodeExecutionError',
    'setup_logging',
    'MediaCategory',
    'OutputPolicy',
    'JobPipeline',
    'CompletionPoller',
    'PollState',
]
