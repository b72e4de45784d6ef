"""Input buffer providers for URL, base64 and attached binary inputs."""

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from .client.http_gateway import HTTPGateway
from .exceptions import DecodeError, InvalidParameterError, NotFoundError
from .models import NodeExecutionItem

logger = logging.getLogger(__name__)

INPUT_TYPES = ("url", "base64", "binary")


class InputProvider(ABC):
    """Produces the byte buffer of a node's input media."""

    @abstractmethod
    async def get_buffer(self) -> bytes:
        pass


class UrlInputProvider(InputProvider):
    """Downloads the input from a remote URL."""

    def __init__(self, gateway: HTTPGateway, url: str):
        self.gateway = gateway
        self.url = url

    async def get_buffer(self) -> bytes:
        logger.info(f"Fetching input media from {self.url}")
        return await self.gateway.get_bytes(self.url)


class Base64InputProvider(InputProvider):
    """Decodes inline base64 text."""

    def __init__(self, encoded: str):
        self.encoded = encoded

    async def get_buffer(self) -> bytes:
        compact = "".join((self.encoded or "").split())
        if not compact:
            raise DecodeError("Base64 input is empty")
        try:
            return base64.b64decode(compact, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Invalid base64 input: {e}", cause=e) from e


class BinaryInputProvider(InputProvider):
    """Reads a binary attachment of the first incoming item."""

    def __init__(self, items: List[NodeExecutionItem], property_name: str = "data"):
        self.items = items
        self.property_name = property_name

    async def get_buffer(self) -> bytes:
        binary = self.items[0].binary if self.items else {}

        if self.property_name in binary:
            return binary[self.property_name].data

        # Fall back to the first image attachment
        for name, attachment in binary.items():
            if (attachment.mime_type or "").startswith("image/"):
                logger.info(f"Binary property '{self.property_name}' missing, using '{name}'")
                return attachment.data

        raise NotFoundError(
            "No valid binary property found",
            details={"property": self.property_name, "available": list(binary)}
        )


def create_input_provider(
    input_type: str,
    gateway: HTTPGateway,
    input_value: Optional[str] = None,
    items: Optional[List[NodeExecutionItem]] = None,
    binary_property: str = "data"
) -> InputProvider:
    """
    Select the input provider for a node's inputType parameter.

    Args:
        input_type: One of "url", "base64" or "binary"
        gateway: Gateway used by the URL provider
        input_value: URL or base64 text for the url/base64 modes
        items: Incoming host items for the binary mode
        binary_property: Attachment name for the binary mode

    Returns:
        The matching provider

    Raises:
        InvalidParameterError: If input_type is unknown
    """
    if input_type == "url":
        if not input_value:
            raise InvalidParameterError("Input URL is required", parameter="inputImage")
        return UrlInputProvider(gateway, input_value)
    if input_type == "base64":
        return Base64InputProvider(input_value or "")
    if input_type == "binary":
        return BinaryInputProvider(items or [], binary_property)

    raise InvalidParameterError(
        f"Unsupported input type: {input_type}",
        parameter="inputType",
        value=input_type
    )
