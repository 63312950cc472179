"""GitHub Actions runner integration: inputs, outputs, masking and logging."""

from __future__ import annotations

import logging
import os
import sys
import uuid
from typing import TextIO

logger = logging.getLogger(__name__)

INPUT_ENV_PREFIX = "INPUT_"
OUTPUT_FILE_ENV = "GITHUB_OUTPUT"
RUNNER_DEBUG_ENV = "RUNNER_DEBUG"
MASK_REPLACEMENT = "***"


def get_input(name: str) -> str:
    """Return the value of an action input, or "" when it is not set.

    The runner exposes each input as ``INPUT_<NAME>`` with the name
    upper-cased and spaces replaced by underscores.

    Args:
        name: Input name as declared in action.yml (e.g. "folderId").

    Returns:
        The stripped input value.
    """
    env_name = INPUT_ENV_PREFIX + name.replace(" ", "_").upper()
    return os.environ.get(env_name, "").strip()


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class SecretMasker(logging.Filter):
    """Logging filter that redacts registered secret values from records."""

    def __init__(self) -> None:
        super().__init__()
        self._secrets: set[str] = set()

    def register(self, value: str) -> None:
        if value:
            self._secrets.add(value)

    def redact(self, text: str) -> str:
        # Longest first so a secret containing another is replaced whole.
        for secret in sorted(self._secrets, key=len, reverse=True):
            text = text.replace(secret, MASK_REPLACEMENT)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        record.msg = self.redact(record.getMessage())
        record.args = ()
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self.redact(record.exc_text)
        return True


_masker = SecretMasker()


def add_mask(value: str, stream: TextIO | None = None) -> None:
    """Register a secret so it never appears in log output.

    The value is redacted locally by the logging filter and also announced to
    the runner with ``::add-mask::``. The runner masks line by line, so each
    line of a multi-line secret is announced separately.

    Args:
        value: Secret value to mask. Empty values are ignored.
        stream: Stream the workflow command is written to (default: stdout).
    """
    if not value:
        return
    out = stream or sys.stdout
    lines = dict.fromkeys(line.strip() for line in [value, *value.splitlines()])
    for line in lines:
        # Lines of pure punctuation, such as the braces of a JSON document, are not secrets.
        if not any(char.isalnum() for char in line):
            continue
        _masker.register(line)
        out.write(f"::add-mask::{_escape_data(line)}\n")
    out.flush()


class WorkflowCommandHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Stream handler that renders log records as workflow commands.

    DEBUG records become ``::debug::``, WARNING ``::warning::`` and ERROR or
    above ``::error::``. INFO records are written as plain lines.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__(stream or sys.stdout)
        self.addFilter(_masker)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            return f"::error::{_escape_data(message)}"
        if record.levelno >= logging.WARNING:
            return f"::warning::{_escape_data(message)}"
        if record.levelno <= logging.DEBUG:
            return f"::debug::{_escape_data(message)}"
        return message


def configure_logging(debug: bool = False, stream: TextIO | None = None) -> None:
    """Route the root logger through a WorkflowCommandHandler.

    Args:
        debug: Emit DEBUG records (the runner shows them when step debug
            logging is enabled).
        stream: Output stream (default: stdout, where the runner reads commands).
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, WorkflowCommandHandler):
            root.removeHandler(existing)
    handler = WorkflowCommandHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)


def set_output(name: str, value: str) -> None:
    """Publish a step output through the file named by GITHUB_OUTPUT.

    Outside a runner (variable unset) the output is only logged.

    Args:
        name: Output name as declared in action.yml.
        value: Output value; multi-line values use the heredoc form.
    """
    path = os.environ.get(OUTPUT_FILE_ENV)
    if not path:
        logger.debug("[set_output] %s not set; name:%s", OUTPUT_FILE_ENV, name)
        return
    with open(path, "a", encoding="utf-8") as fh:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            fh.write(f"{name}={value}\n")
