"""
Unit tests for the command-line interface.
"""

import json

import pytest
from unittest.mock import AsyncMock, patch

from comfyui_nodes import cli
from comfyui_nodes.models import BinaryData, NodeExecutionItem


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI runs from replacing the package log handlers."""
    with patch.object(cli, "setup_logging") as setup:
        yield setup


class TestParser:
    """Test cases for argument parsing."""

    def test_run_arguments(self):
        args = cli.create_parser().parse_args([
            "--api-url", "http://gpu:8188",
            "run", "wf.json", "--timeout", "5", "--input", "cat.png", "--input-type", "file", "--image-to-video",
        ])

        assert args.api_url == "http://gpu:8188"
        assert args.workflow_file == "wf.json"
        assert args.timeout == 5.0
        assert args.input_type == "file"
        assert args.image_to_video is True
        assert args.func is cli.run_command

    def test_no_command(self):
        assert cli.main([]) == 1


class TestCommands:
    """Test cases for CLI commands."""

    def test_list_nodes(self, capsys):
        assert cli.main(["list-nodes"]) == 0
        out = capsys.readouterr().out
        assert "comfyuiImageToVideo" in out
        assert "xMediaUpload" in out

    def test_run_missing_workflow(self, tmp_path, capsys):
        assert cli.main(["run", str(tmp_path / "missing.json")]) == 1
        assert "Workflow file not found" in capsys.readouterr().err

    def test_run_saves_outputs(self, tmp_path, capsys):
        workflow_file = tmp_path / "wf.json"
        workflow_file.write_text('{"1": {"class_type": "SaveImage", "inputs": {}}}')
        output = NodeExecutionItem(
            json={"fileName": "frame.png"},
            binary={"data": BinaryData(data=b"png", mime_type="image/png", file_name="frame.png")}
        )

        with patch.object(cli, "_run_node", AsyncMock(return_value=[output])) as run_node:
            code = cli.main([
                "--api-url", "http://gpu:8188",
                "run", str(workflow_file), "--output-dir", str(tmp_path / "out"),
            ])

        assert code == 0
        node_type, context = run_node.await_args.args
        assert node_type == "comfyuiFillWorkflow"
        assert context.credentials["comfyUIApi"]["apiUrl"] == "http://gpu:8188"
        assert (tmp_path / "out" / "frame.png").read_bytes() == b"png"
        assert json.loads(capsys.readouterr().out)["items"] == [{"fileName": "frame.png"}]

    def test_run_with_local_file_input(self, tmp_path):
        workflow_file = tmp_path / "wf.json"
        workflow_file.write_text('{"1": {"class_type": "LoadImage", "inputs": {}}}')
        image = tmp_path / "cat.png"
        image.write_bytes(b"cat")

        with patch.object(cli, "_run_node", AsyncMock(return_value=[])) as run_node:
            cli.main(["run", str(workflow_file), "--input", str(image), "--input-type", "file", "--image-to-video"])

        node_type, context = run_node.await_args.args
        assert node_type == "comfyuiImageToVideo"
        assert context.parameters["inputType"] == "binary"
        assert context.items[0].binary["data"].data == b"cat"
        assert context.items[0].binary["data"].mime_type == "image/png"
