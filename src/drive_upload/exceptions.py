"""Exception hierarchy for drive-upload.

Every fatal condition of a run is raised as a ``DriveUploadError`` subclass.
The CLI turns any of them into a non-zero exit status; nothing below the CLI
catches them.
"""


class DriveUploadError(Exception):
    """Base class for all fatal drive-upload errors."""


class ConfigError(DriveUploadError):
    """Raised when a required input is missing or an input cannot be parsed."""


class PatternError(DriveUploadError):
    """Raised when the filename glob pattern is malformed."""


class NoFilesMatchedError(DriveUploadError):
    """Raised when the filename pattern matches no local paths."""


class TargetNameError(DriveUploadError):
    """Raised when no non-empty target name can be derived for a file."""


class LocalFileError(DriveUploadError):
    """Raised when a matched local path cannot be stat-ed or opened."""


class RemoteStoreError(DriveUploadError):
    """Base class for failures reported by a remote store backend."""
