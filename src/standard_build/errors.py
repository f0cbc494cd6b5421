from __future__ import annotations


class StandardBuildError(Exception):
    """Base class for every error raised by standard_build."""


class ArchiveError(StandardBuildError):
    """Enumerating or compressing the source directory failed."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class FileSystemError(ArchiveError):
    """The archive sink could not be opened or written (missing parent, permissions, disk full)."""


class ConfigError(StandardBuildError):
    """A config file did not hold a mapping of options."""
