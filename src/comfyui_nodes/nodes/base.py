"""
Host node abstraction.

A node receives everything it needs through NodeExecutionContext: parameters,
credentials, incoming items and runtime settings. Node.run() reports every
failure to the host as a single NodeExecutionError.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..client.comfyui_client import ComfyUIClient
from ..client.http_gateway import HTTPGateway, RetryConfig
from ..config import ComfyUICredentials, ComfyUISettings, get_settings, load_comfyui_credentials
from ..downloader import MediaDownloader
from ..exceptions import ComfyUINodeError, InvalidParameterError, NodeExecutionError
from ..inputs import InputProvider, create_input_provider
from ..logging_config import NodeOperationLogger
from ..models import NodeExecutionItem
from ..pipeline import JobPipeline
from ..poller import CompletionPoller

logger = logging.getLogger(__name__)

COMFYUI_CREDENTIAL = "comfyUIApi"

_MISSING = object()


@dataclass
class NodeParameter:
    """A configurable node parameter."""
    name: str
    display_name: str
    type: str = "string"
    default: Any = None
    required: bool = False
    description: str = ""
    options: List[str] = field(default_factory=list)


@dataclass
class NodeDescription:
    """Static description of a node type."""
    display_name: str
    name: str
    description: str
    credential: Optional[str] = None
    parameters: List[NodeParameter] = field(default_factory=list)

    def parameter(self, name: str) -> Optional[NodeParameter]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None


@dataclass
class NodeExecutionContext:
    """Inputs supplied by the host for one node execution."""
    parameters: Dict[str, Any] = field(default_factory=dict)
    credentials: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    items: List[NodeExecutionItem] = field(default_factory=list)
    settings: Optional[ComfyUISettings] = None

    def get_settings(self) -> ComfyUISettings:
        return self.settings or get_settings()


class BaseNode(ABC):
    """Base class for host nodes."""

    description: NodeDescription

    def get_parameter(self, context: NodeExecutionContext, name: str, default: Any = _MISSING) -> Any:
        """
        Read a parameter, falling back to the declared default.

        Raises:
            InvalidParameterError: If a required parameter is missing
        """
        if name in context.parameters:
            return context.parameters[name]
        if default is not _MISSING:
            return default

        param = self.description.parameter(name)
        if param is None or param.required:
            raise InvalidParameterError(f"Parameter '{name}' is required", parameter=name)
        return param.default

    def get_comfyui_credentials(self, context: NodeExecutionContext) -> ComfyUICredentials:
        return load_comfyui_credentials(context.credentials.get(COMFYUI_CREDENTIAL))

    def create_client(self, context: NodeExecutionContext) -> ComfyUIClient:
        settings = context.get_settings()
        return ComfyUIClient(
            self.get_comfyui_credentials(context),
            timeout=settings.request_timeout_seconds
        )

    def create_pipeline(
        self,
        client: ComfyUIClient,
        context: NodeExecutionContext,
        initial_delay_seconds: float = 0.0
    ) -> JobPipeline:
        """Wire downloader and poller from settings."""
        settings = context.get_settings()
        downloader = MediaDownloader(
            client,
            retry_config=RetryConfig(
                max_attempts=settings.download_attempts,
                delay_seconds=settings.download_retry_delay_seconds
            ),
            timeout_seconds=settings.download_timeout_seconds
        )
        return JobPipeline(
            client,
            downloader,
            poller_factory=lambda: CompletionPoller(
                client,
                interval_seconds=settings.poll_interval_seconds,
                initial_delay_seconds=initial_delay_seconds
            )
        )

    def create_input_provider(self, gateway: HTTPGateway, context: NodeExecutionContext) -> InputProvider:
        """Input provider for nodes with inputType/inputImage/binaryPropertyName parameters."""
        input_type = self.get_parameter(context, "inputType")
        if input_type == "binary":
            return create_input_provider(
                "binary",
                gateway,
                items=context.items,
                binary_property=self.get_parameter(context, "binaryPropertyName")
            )
        return create_input_provider(
            input_type,
            gateway,
            input_value=self.get_parameter(context, "inputImage")
        )

    def get_timeout(self, context: NodeExecutionContext) -> float:
        timeout = self.get_parameter(context, "timeout", context.get_settings().default_timeout_minutes)
        try:
            timeout = float(timeout)
        except (TypeError, ValueError) as e:
            raise InvalidParameterError("Timeout must be a number", parameter="timeout", value=timeout) from e
        if timeout <= 0:
            raise InvalidParameterError("Timeout must be positive", parameter="timeout", value=timeout)
        return timeout

    @abstractmethod
    async def execute(self, context: NodeExecutionContext) -> List[NodeExecutionItem]:
        """Node body; raises ComfyUINodeError subclasses on failure."""
        pass

    async def run(self, context: NodeExecutionContext) -> List[NodeExecutionItem]:
        """
        Execute the node for the host.

        Returns:
            The full list of output items

        Raises:
            NodeExecutionError: For any failure, carrying the original message
        """
        with NodeOperationLogger(self.description.name, parameters=_loggable(context.parameters)):
            try:
                return await self.execute(context)
            except NodeExecutionError:
                raise
            except ComfyUINodeError as e:
                raise NodeExecutionError(
                    e.message,
                    node_type=self.description.name,
                    description=e.error_code,
                    cause=e
                ) from e
            except Exception as e:
                logger.exception(f"Unexpected error in {self.description.name}")
                raise NodeExecutionError(str(e), node_type=self.description.name, cause=e) from e


def _loggable(parameters: Dict[str, Any]) -> Dict[str, Any]:
    """Shorten long parameter values (workflow JSON, base64) for logging."""
    return {
        key: (f"{value[:80]}... ({len(value)} chars)" if isinstance(value, str) and len(value) > 80 else value)
        for key, value in parameters.items()
    }
