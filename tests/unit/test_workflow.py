"""Unit tests for workflow.py — runner inputs, outputs, masking and log rendering."""

import io
import logging
import os
import sys
from pathlib import Path
from unittest.mock import patch

from drive_upload.workflow import (
    SecretMasker,
    WorkflowCommandHandler,
    add_mask,
    configure_logging,
    get_input,
    set_output,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _render(level: int, message: str) -> str:
    """Emit one record through a fresh WorkflowCommandHandler and return the output."""
    stream = io.StringIO()
    handler = WorkflowCommandHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    record = logging.LogRecord("test", level, __file__, 1, message, (), None)
    handler.handle(record)
    return stream.getvalue()


# ---------------------------------------------------------------------------
# get_input tests
# ---------------------------------------------------------------------------


class TestGetInput:
    def test_reads_upper_cased_env_name(self) -> None:
        with patch.dict(os.environ, {"INPUT_FOLDERID": "abc"}, clear=True):
            assert get_input("folderId") == "abc"

    def test_spaces_become_underscores(self) -> None:
        with patch.dict(os.environ, {"INPUT_NAME_PREFIX": "x-"}, clear=True):
            assert get_input("name prefix") == "x-"

    def test_missing_input_is_empty(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert get_input("folderId") == ""

    def test_value_is_stripped(self) -> None:
        with patch.dict(os.environ, {"INPUT_NAME": "  report.pdf\n"}, clear=True):
            assert get_input("name") == "report.pdf"


# ---------------------------------------------------------------------------
# SecretMasker / add_mask tests
# ---------------------------------------------------------------------------


class TestSecretMasker:
    def test_redacts_registered_value(self) -> None:
        masker = SecretMasker()
        masker.register("hunter2")
        assert masker.redact("password is hunter2") == "password is ***"

    def test_longest_secret_replaced_first(self) -> None:
        masker = SecretMasker()
        masker.register("abc")
        masker.register("abcdef")
        assert masker.redact("xabcdefx") == "x***x"

    def test_filter_redacts_formatted_args(self) -> None:
        masker = SecretMasker()
        masker.register("s3cr3t")
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "value:%s", ("s3cr3t",), None)
        assert masker.filter(record) is True
        assert record.getMessage() == "value:***"

    def test_filter_redacts_exception_text(self) -> None:
        masker = SecretMasker()
        masker.register("t0ken")
        try:
            raise RuntimeError("bad t0ken")
        except RuntimeError:
            record = logging.LogRecord(
                "t", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )
        masker.filter(record)
        assert record.exc_text is not None
        assert "t0ken" not in record.exc_text


class TestAddMask:
    def test_emits_add_mask_command(self) -> None:
        out = io.StringIO()
        add_mask("mask-me-1", stream=out)
        assert out.getvalue() == "::add-mask::mask-me-1\n"

    def test_multi_line_value_masked_per_line(self) -> None:
        out = io.StringIO()
        add_mask("line-one-x\nline-two-x", stream=out)
        lines = out.getvalue().splitlines()
        assert "::add-mask::line-one-x" in lines
        assert "::add-mask::line-two-x" in lines

    def test_empty_value_is_ignored(self) -> None:
        out = io.StringIO()
        add_mask("", stream=out)
        assert out.getvalue() == ""

    def test_masked_value_redacted_in_handler_output(self) -> None:
        add_mask("handler-secret-42", stream=io.StringIO())
        assert "handler-secret-42" not in _render(logging.INFO, "token handler-secret-42")

    def test_json_punctuation_lines_not_masked(self) -> None:
        out = io.StringIO()
        add_mask('{\n  "client_secret": "json-secret-7"\n},', stream=out)

        masked = out.getvalue().splitlines()
        assert "::add-mask::{" not in masked
        assert "::add-mask::}," not in masked
        assert '::add-mask::"client_secret": "json-secret-7"' in masked
        assert _render(logging.INFO, "files: {'a': 1}") == "files: {'a': 1}\n"


# ---------------------------------------------------------------------------
# WorkflowCommandHandler tests
# ---------------------------------------------------------------------------


class TestWorkflowCommandHandler:
    def test_info_is_plain_line(self) -> None:
        assert _render(logging.INFO, "Processing file a.txt") == "Processing file a.txt\n"

    def test_debug_becomes_debug_command(self) -> None:
        assert _render(logging.DEBUG, "details") == "::debug::details\n"

    def test_warning_becomes_warning_command(self) -> None:
        assert _render(logging.WARNING, "careful") == "::warning::careful\n"

    def test_error_becomes_error_command(self) -> None:
        assert _render(logging.ERROR, "broken") == "::error::broken\n"

    def test_command_data_is_escaped(self) -> None:
        assert _render(logging.ERROR, "50%\nnext") == "::error::50%25%0Anext\n"


class TestConfigureLogging:
    def test_installs_single_handler(self) -> None:
        root = logging.getLogger()
        original_level = root.level
        try:
            configure_logging(stream=io.StringIO())
            configure_logging(stream=io.StringIO())
            handlers = [h for h in root.handlers if isinstance(h, WorkflowCommandHandler)]
            assert len(handlers) == 1
            assert root.level == logging.INFO
        finally:
            for h in [h for h in root.handlers if isinstance(h, WorkflowCommandHandler)]:
                root.removeHandler(h)
            root.setLevel(original_level)

    def test_debug_sets_debug_level(self) -> None:
        root = logging.getLogger()
        original_level = root.level
        try:
            configure_logging(debug=True, stream=io.StringIO())
            assert root.level == logging.DEBUG
        finally:
            for h in [h for h in root.handlers if isinstance(h, WorkflowCommandHandler)]:
                root.removeHandler(h)
            root.setLevel(original_level)


# ---------------------------------------------------------------------------
# set_output tests
# ---------------------------------------------------------------------------


class TestSetOutput:
    def test_appends_single_line_output(self, tmp_path: Path) -> None:
        output_file = tmp_path / "output"
        with patch.dict(os.environ, {"GITHUB_OUTPUT": str(output_file)}):
            set_output("uploaded", "3")
        assert output_file.read_text() == "uploaded=3\n"

    def test_multi_line_output_uses_delimiter(self, tmp_path: Path) -> None:
        output_file = tmp_path / "output"
        with patch.dict(os.environ, {"GITHUB_OUTPUT": str(output_file)}):
            set_output("file_ids", "id-1\nid-2")
        lines = output_file.read_text().splitlines()
        assert lines[0].startswith("file_ids<<ghadelimiter_")
        assert lines[1:3] == ["id-1", "id-2"]
        assert lines[3] == lines[0].split("<<", 1)[1]

    def test_no_output_file_is_noop(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {}, clear=True):
            set_output("uploaded", "1")
        assert list(tmp_path.iterdir()) == []

