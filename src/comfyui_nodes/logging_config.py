"""
Logging configuration for the ComfyUI media nodes.

Sets up console and rotating file handlers for the package logger and provides
helpers that attach job context and strip credentials from log records.
"""

import logging
import logging.handlers
import sys
import time
from typing import Any, Dict, Optional

from .config import ComfyUISettings

PACKAGE_LOGGER = 'comfyui_nodes'


def setup_logging(settings: ComfyUISettings, log_file: Optional[str] = None) -> logging.Logger:
    """
    Set up logging for the package.

    Args:
        settings: Runtime settings (log level and default log file)
        log_file: Optional log file path, overrides settings.log_file

    Returns:
        Configured package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, settings.log_level.upper()))

    # Clear any existing handlers
    package_logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    simple_formatter = logging.Formatter(
        fmt='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, settings.log_level.upper()))
    console_handler.setFormatter(simple_formatter)
    package_logger.addHandler(console_handler)

    log_file = log_file or settings.log_file
    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        package_logger.addHandler(file_handler)

    # aiohttp access/client logs are noisy at DEBUG
    logging.getLogger('aiohttp').setLevel(logging.WARNING)

    package_logger.debug(f"Logging configured - Level: {settings.log_level}")
    return package_logger


def create_job_logger(operation: str, prompt_id: Optional[str] = None, **context) -> logging.LoggerAdapter:
    """
    Create a logger adapter carrying job context.

    Args:
        operation: Name of the operation (node type or pipeline step)
        prompt_id: ComfyUI job identifier, if known
        **context: Additional context to include in records

    Returns:
        Logger adapter with job context
    """
    logger = logging.getLogger(f'{PACKAGE_LOGGER}.jobs')

    job_context: Dict[str, Any] = {'operation': operation}
    if prompt_id:
        job_context['prompt_id'] = prompt_id
    job_context.update(_filter_sensitive_data(context))

    return logging.LoggerAdapter(logger, job_context)


def _filter_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Replace credential-like values with a placeholder."""
    sensitive_keys = {'password', 'secret', 'key', 'token', 'credential', 'authorization'}

    filtered = {}
    for key, value in data.items():
        if any(sensitive in key.lower() for sensitive in sensitive_keys):
            filtered[key] = '[REDACTED]'
        elif isinstance(value, dict):
            filtered[key] = _filter_sensitive_data(value)
        else:
            filtered[key] = value

    return filtered


class NodeOperationLogger:
    """Context manager that logs a node execution with timing."""

    def __init__(self, node_type: str, **context):
        self.node_type = node_type
        self.context = _filter_sensitive_data(context)
        self.start_time: Optional[float] = None
        self.logger = logging.getLogger(f'{PACKAGE_LOGGER}.nodes')

    def __enter__(self):
        self.start_time = time.monotonic()
        self.logger.info(f"Executing node {self.node_type}", extra={'node_context': self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = round(time.monotonic() - self.start_time, 3)

        if exc_type is None:
            self.logger.info(f"Node {self.node_type} finished in {duration}s")
        else:
            self.logger.error(
                f"Node {self.node_type} failed after {duration}s: {exc_val}",
                extra={'node_context': self.context}
            )

        return False
