"""
Data models for ComfyUI payloads and host execution records.

Wire payloads are parsed with pydantic models that name only the fields the
nodes read; every other key is kept as pass-through data.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaCategory(str, Enum):
    """Media categories derived from the output filename suffix."""
    VIDEO = "video"
    IMAGE = "image"


class OutputPolicy(str, Enum):
    """Which outputs of a completed job a node delivers."""
    ALL_MEDIA = "all_media"
    VIDEO_ONLY = "video_only"


class JobStatus(BaseModel):
    """Status block of a history entry."""

    completed: bool = False
    status_str: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class OutputFile(BaseModel):
    """One file reference inside a node's output lists."""

    filename: str
    subfolder: str = ""
    type: str = ""

    model_config = ConfigDict(extra="allow")


class NodeOutput(BaseModel):
    """Outputs of a single workflow node."""

    images: Optional[List[OutputFile]] = None
    gifs: Optional[List[OutputFile]] = None

    model_config = ConfigDict(extra="allow")

    def media_files(self) -> List[OutputFile]:
        return list(self.images or []) + list(self.gifs or [])


class JobResult(BaseModel):
    """History entry for a finished job."""

    status: JobStatus
    outputs: Dict[str, NodeOutput] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")


class UploadedImage(BaseModel):
    """Response of the /upload/image endpoint."""

    name: str
    subfolder: str = ""
    type: str = "input"

    model_config = ConfigDict(extra="allow")


@dataclass
class MediaOutput:
    """A downloadable output file with its retrieval URL."""
    filename: str
    subfolder: str
    type: str
    url: str
    category: Optional[MediaCategory] = None

    @property
    def extension(self) -> str:
        return self.filename.rsplit('.', 1)[-1] if '.' in self.filename else ''


@dataclass
class BinaryData:
    """Binary payload exchanged with the host."""
    data: bytes
    mime_type: str = "application/octet-stream"
    file_name: Optional[str] = None
    file_extension: Optional[str] = None
    file_size: Optional[str] = None
    file_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Host representation with base64-encoded data."""
        return {
            "data": base64.b64encode(self.data).decode("ascii"),
            "mimeType": self.mime_type,
            "fileName": self.file_name,
            "fileExtension": self.file_extension,
            "fileSize": self.file_size,
            "fileType": self.file_type,
        }


@dataclass
class NodeExecutionItem:
    """One record passed between host nodes."""
    json: Dict[str, Any] = field(default_factory=dict)
    binary: Dict[str, BinaryData] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"json": self.json}
        if self.binary:
            result["binary"] = {name: data.to_dict() for name, data in self.binary.items()}
        return result


@dataclass
class DownloadedMedia:
    """A downloaded output file with its descriptive metadata."""
    data: bytes
    file_name: str
    mime_type: str
    file_extension: str
    file_size: str
    file_type: str
    download_url: str
    status: Dict[str, Any] = field(default_factory=dict)

    @property
    def file_size_bytes(self) -> int:
        return len(self.data)

    def to_execution_item(
        self,
        binary_property: str = "data",
        extra_json: Optional[Dict[str, Any]] = None
    ) -> NodeExecutionItem:
        """Package the download for delivery to the host."""
        json_data = {
            "mimeType": self.mime_type,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "fileSizeBytes": self.file_size_bytes,
            "downloadUrl": self.download_url,
            "status": self.status,
        }
        json_data.update(extra_json or {})
        return NodeExecutionItem(
            json=json_data,
            binary={
                binary_property: BinaryData(
                    data=self.data,
                    mime_type=self.mime_type,
                    file_name=self.file_name,
                    file_extension=self.file_extension,
                    file_size=self.file_size,
                    file_type=self.file_type,
                )
            },
        )
