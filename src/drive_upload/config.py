"""Action configuration loaded from the runner's input environment."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass

from drive_upload.exceptions import ConfigError
from drive_upload.workflow import add_mask, get_input

logger = logging.getLogger(__name__)

# Action input names, as declared in action.yml
INPUT_FILENAME = "filename"
INPUT_NAME = "name"
INPUT_FOLDER_ID = "folderId"
INPUT_DRIVE_ID = "driveId"
INPUT_CREDENTIALS = "credentials"
INPUT_OVERWRITE = "overwrite"
INPUT_MIME_TYPE = "mimeType"
INPUT_USE_COMPLETE_SOURCE_NAME = "useCompleteSourceFilenameAsName"
INPUT_MIRROR_DIRECTORY_STRUCTURE = "mirrorDirectoryStructure"
INPUT_NAME_PREFIX = "namePrefix"

# Keys of the decoded credentials document
CREDENTIAL_KEYS = ("client_id", "client_secret", "tenant_id")

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


@dataclass(frozen=True)
class GraphCredentials:
    """Client-credentials triple for the Microsoft identity platform."""

    client_id: str
    client_secret: str
    tenant_id: str

    def __repr__(self) -> str:
        return f"GraphCredentials(client_id={self.client_id!r}, tenant_id={self.tenant_id!r})"


@dataclass(frozen=True)
class ActionConfig:
    """Centralized action configuration.

    Required fields have no defaults; load_config() raises ConfigError when
    the corresponding input is missing. Flags default to disabled.
    """

    # Required
    filename_pattern: str
    folder_id: str
    drive_id: str
    credentials: GraphCredentials

    # Optional
    name: str = ""
    mime_type: str = ""
    name_prefix: str = ""
    overwrite: bool = False
    use_complete_source_name: bool = False
    mirror_directory_structure: bool = False


def parse_bool(input_name: str, value: str) -> bool:
    """Parse a boolean-ish input value.

    Accepts 1/t/T/TRUE/true/True and 0/f/F/FALSE/false/False. An empty value
    means the flag is disabled; any other value is treated as disabled with a
    warning.

    Args:
        input_name: Input name, used in log messages.
        value: Raw input value.

    Returns:
        Parsed flag.
    """
    if value == "":
        logger.info("%s is disabled.", input_name)
        return False
    if value in _TRUE_VALUES:
        return True
    if value not in _FALSE_VALUES:
        logger.warning(
            "[parse_bool] unrecognised boolean value, treating as false; input:%s;value:%s",
            input_name,
            value,
        )
    return False


def decode_credentials(encoded: str) -> GraphCredentials:
    """Decode base64 credentials and register every secret for masking.

    The encoded value, the decoded document and the client secret are all
    masked before they are parsed or used.

    Args:
        encoded: Base64 encoding of a JSON object with client_id,
            client_secret and tenant_id.

    Returns:
        Parsed GraphCredentials.

    Raises:
        ConfigError: If decoding or parsing fails, or a key is missing.
    """
    add_mask(encoded)
    try:
        raw = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ConfigError(f"base64 decoding of '{INPUT_CREDENTIALS}' failed: {exc}") from None

    document = raw.rstrip("\n")
    add_mask(document)

    try:
        data = json.loads(document)
    except json.JSONDecodeError:
        raise ConfigError(f"'{INPUT_CREDENTIALS}' is not a JSON document") from None
    if not isinstance(data, dict):
        raise ConfigError(f"'{INPUT_CREDENTIALS}' must decode to a JSON object")

    add_mask(str(data.get("client_secret", "")))
    missing = [key for key in CREDENTIAL_KEYS if not data.get(key)]
    if missing:
        raise ConfigError(f"'{INPUT_CREDENTIALS}' is missing key(s): {', '.join(missing)}")

    return GraphCredentials(
        client_id=str(data["client_id"]),
        client_secret=str(data["client_secret"]),
        tenant_id=str(data["tenant_id"]),
    )


def _require(input_name: str) -> str:
    value = get_input(input_name)
    if not value:
        raise ConfigError(f"missing input '{input_name}'")
    return value


def load_config() -> ActionConfig:
    """Construct an ActionConfig from the action inputs.

    Required inputs:
        filename: Glob pattern of the local files to upload.
        folderId: Item ID of the root remote folder.
        driveId: ID of the drive holding folderId.
        credentials: Base64-encoded JSON client credentials.

    Optional inputs:
        name: Target name when exactly one file matches.
        mimeType: MIME type sent with every upload.
        namePrefix: Prefix prepended to every target name.
        overwrite: Update a same-named file in the target folder (default: false).
        useCompleteSourceFilenameAsName: Use the matched path as name (default: false).
        mirrorDirectoryStructure: Recreate local directories remotely (default: false).

    Returns:
        Configured ActionConfig instance.

    Raises:
        ConfigError: If a required input is missing or credentials are invalid.
    """
    filename_pattern = _require(INPUT_FILENAME)
    folder_id = _require(INPUT_FOLDER_ID)
    drive_id = _require(INPUT_DRIVE_ID)
    credentials = decode_credentials(_require(INPUT_CREDENTIALS))

    return ActionConfig(
        filename_pattern=filename_pattern,
        folder_id=folder_id,
        drive_id=drive_id,
        credentials=credentials,
        name=get_input(INPUT_NAME),
        mime_type=get_input(INPUT_MIME_TYPE),
        name_prefix=get_input(INPUT_NAME_PREFIX),
        overwrite=parse_bool(INPUT_OVERWRITE, get_input(INPUT_OVERWRITE)),
        use_complete_source_name=parse_bool(
            INPUT_USE_COMPLETE_SOURCE_NAME, get_input(INPUT_USE_COMPLETE_SOURCE_NAME)
        ),
        mirror_directory_structure=parse_bool(
            INPUT_MIRROR_DIRECTORY_STRUCTURE, get_input(INPUT_MIRROR_DIRECTORY_STRUCTURE)
        ),
    )
