"""
ComfyUI Nodes CLI

Runs the nodes outside a workflow host, using credentials from the
COMFYUI_API_URL / COMFYUI_API_KEY settings or command-line flags.
"""

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles

from .config import ComfyUISettings, get_settings
from .exceptions import ComfyUINodeError
from .logging_config import setup_logging
from .models import BinaryData, NodeExecutionItem
from .nodes import NODE_TYPES, NodeExecutionContext, get_node
from .nodes.base import COMFYUI_CREDENTIAL


def _credentials(args, settings: ComfyUISettings) -> Dict[str, Dict[str, Any]]:
    api_url = args.api_url or settings.api_url
    if not api_url:
        return {}
    return {COMFYUI_CREDENTIAL: {"apiUrl": api_url, "apiKey": args.api_key or settings.api_key}}


def _file_item(path: Path) -> NodeExecutionItem:
    """Wrap a local file as an incoming binary item."""
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return NodeExecutionItem(binary={
        "data": BinaryData(
            data=path.read_bytes(),
            mime_type=mime_type,
            file_name=path.name,
            file_extension=path.suffix.lstrip("."),
        )
    })


async def _save_outputs(items: List[NodeExecutionItem], output_dir: Path) -> List[str]:
    """Write binary outputs to disk and return their paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    saved = []
    for index, item in enumerate(items):
        for name, binary in item.binary.items():
            file_name = binary.file_name or f"output_{index}_{name}"
            target = output_dir / Path(file_name).name
            async with aiofiles.open(target, "wb") as f:
                await f.write(binary.data)
            saved.append(str(target))
    return saved


async def _run_node(node_type: str, context: NodeExecutionContext) -> List[NodeExecutionItem]:
    return await get_node(node_type).run(context)


def _print_items(items: List[NodeExecutionItem], saved: Optional[List[str]] = None) -> None:
    payload: Dict[str, Any] = {"items": [item.json for item in items]}
    if saved is not None:
        payload["saved"] = saved
    print(json.dumps(payload, indent=2, default=str))


def status_command(args) -> int:
    """Check whether the ComfyUI server is ready"""
    settings = get_settings()
    context = NodeExecutionContext(credentials=_credentials(args, settings), settings=settings)
    try:
        items = asyncio.run(_run_node("comfyuiStatus", context))
    except ComfyUINodeError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1

    _print_items(items)
    return 0 if items[0].json.get("ready") else 1


def run_command(args) -> int:
    """Run a workflow and save its media"""
    settings = get_settings()
    workflow_path = Path(args.workflow_file)
    if not workflow_path.exists():
        print(f"❌ Workflow file not found: {workflow_path}", file=sys.stderr)
        return 1

    parameters: Dict[str, Any] = {
        "workflow": workflow_path.read_text(encoding="utf-8"),
        "timeout": args.timeout or settings.default_timeout_minutes,
    }
    items: List[NodeExecutionItem] = []

    if args.input:
        node_type = "comfyuiImageToVideo" if args.image_to_video else "comfyuiVideoToVideo"
        if args.input_type == "file":
            items = [_file_item(Path(args.input))]
            parameters["inputType"] = "binary"
        else:
            parameters["inputType"] = args.input_type
            parameters["inputImage"] = args.input
    else:
        node_type = "comfyuiFillWorkflow"

    context = NodeExecutionContext(
        parameters=parameters,
        credentials=_credentials(args, settings),
        items=items,
        settings=settings
    )

    async def _run() -> int:
        try:
            outputs = await _run_node(node_type, context)
        except ComfyUINodeError as e:
            print(f"❌ {e.message}", file=sys.stderr)
            return 1
        saved = await _save_outputs(outputs, Path(args.output_dir))
        _print_items(outputs, saved)
        return 0

    return asyncio.run(_run())


def upload_command(args) -> int:
    """Upload a local file to the ComfyUI input folder"""
    settings = get_settings()
    path = Path(args.file)
    if not path.exists():
        print(f"❌ File not found: {path}", file=sys.stderr)
        return 1

    context = NodeExecutionContext(
        parameters={"filename": args.filename or path.name, "inputType": "binary"},
        credentials=_credentials(args, settings),
        items=[_file_item(path)],
        settings=settings
    )
    try:
        items = asyncio.run(_run_node("comfyuiMediaUpload", context))
    except ComfyUINodeError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1

    _print_items(items)
    return 0


def list_nodes_command(args) -> int:
    """List the available node types"""
    for name, node in NODE_TYPES.items():
        print(f"{name:24} {node.description.display_name}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="comfyui-nodes",
        description="Run ComfyUI media nodes from the command line"
    )
    parser.add_argument("--api-url", help="ComfyUI base URL (default: COMFYUI_API_URL)")
    parser.add_argument("--api-key", help="ComfyUI API key (default: COMFYUI_API_KEY)")
    parser.add_argument("--log-file", help="Write detailed logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    status_parser = subparsers.add_parser("status", help="Check server readiness")
    status_parser.set_defaults(func=status_command)

    run_parser = subparsers.add_parser("run", help="Run a workflow and download its media")
    run_parser.add_argument("workflow_file", help="Workflow JSON in API format")
    run_parser.add_argument("--timeout", type=float, help="Timeout in minutes")
    run_parser.add_argument("--input", help="Input media: URL, base64 text or local file path")
    run_parser.add_argument(
        "--input-type",
        choices=["url", "base64", "file"],
        default="url",
        help="How to interpret --input"
    )
    run_parser.add_argument(
        "--image-to-video",
        action="store_true",
        help="Use the image-to-video node (probes /system_stats first)"
    )
    run_parser.add_argument("--output-dir", default="outputs", help="Directory for downloaded media")
    run_parser.set_defaults(func=run_command)

    upload_parser = subparsers.add_parser("upload", help="Upload a file to the ComfyUI input folder")
    upload_parser.add_argument("file", help="Local file to upload")
    upload_parser.add_argument("--filename", help="Name to store the file under")
    upload_parser.set_defaults(func=upload_command)

    list_parser = subparsers.add_parser("list-nodes", help="List available node types")
    list_parser.set_defaults(func=list_nodes_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(get_settings(), log_file=args.log_file)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
