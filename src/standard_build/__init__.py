# standard_build package

try:
    from importlib.metadata import PackageNotFoundError, version
except Exception:  # pragma: no cover
    version = None
    PackageNotFoundError = Exception  # type: ignore

from .archiver import ArchiveResult, archive, zip_folder
from .config import BuildPluginConfig, load_plugin_config
from .errors import ArchiveError, ConfigError, FileSystemError, StandardBuildError
from .plugin import ArchiveJob, BuildPlugin, StandardBuildPlugin
from .timestamp import format_timestamp, now

__all__ = [
    "__version__",
    # archiving
    "ArchiveResult",
    "archive",
    "zip_folder",
    # plugin
    "ArchiveJob",
    "BuildPlugin",
    "BuildPluginConfig",
    "StandardBuildPlugin",
    "load_plugin_config",
    # errors
    "ArchiveError",
    "ConfigError",
    "FileSystemError",
    "StandardBuildError",
    # timestamps
    "format_timestamp",
    "now",
]

try:
    __version__ = version("standard-build")
except Exception:
    __version__ = "0.0.0+local"
