"""
Build-completion plugin: zip the build output into a timestamped archive.

The host calls `configure()` while it sets up the build and
`on_build_complete()` once every build has finished writing its artifacts.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from . import archiver, timestamp
from .config import BuildPluginConfig

logger = logging.getLogger(__name__)

# Fixed build-output directory the host writes into (declared via configure()).
OUTPUT_DIR = "dist"
DEFAULT_BUILD_DIR = "build"


class BuildPlugin(abc.ABC):
    """Lifecycle hooks a host build tool calls on its plugins."""

    name: str = ""
    enforce: str | None = None

    @abc.abstractmethod
    def configure(self) -> dict[str, Any]:
        """Return the build settings this plugin requires."""

    @abc.abstractmethod
    def on_build_complete(self, cwd: Path | None = None) -> Future:
        """Run once after the build artifacts are finalized."""


@dataclass(frozen=True)
class ArchiveJob:
    source_dir: Path
    destination_path: str


class StandardBuildPlugin(BuildPlugin):
    name = "tta-plugin"
    enforce = "pre"

    def __init__(
        self,
        options: BuildPluginConfig | Mapping[str, Any] | None = None,
        *,
        executor: ThreadPoolExecutor | None = None,
    ):
        if isinstance(options, BuildPluginConfig):
            self.config = options
        else:
            self.config = BuildPluginConfig.from_options(options)
        # one worker: a second archive never starts before the previous one resolves
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="standard-build"
        )
        self._owns_executor = executor is None

    # ----------------------------- Host hooks ----------------------------- #
    def configure(self) -> dict[str, Any]:
        return {"build": {"outDir": OUTPUT_DIR}}

    def on_build_complete(self, cwd: Path | None = None) -> Future[archiver.ArchiveResult]:
        """
        Zip `<cwd>/dist` into the build directory and return the pending job.

        Returns without waiting for the archive. Callers that need the file
        must wait on the returned future; `.result()` raises the
        ArchiveError/FileSystemError if packaging failed.
        """
        job = self.prepare_job(cwd)
        fut = archiver.archive(job.source_dir, job.destination_path, executor=self._executor)
        fut.add_done_callback(lambda f: self._report(f, job))
        return fut

    def close(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    # ----------------------------- Job setup ----------------------------- #
    def resolve_build_dir(self, cwd: Path) -> Path:
        return (Path(cwd) / (self.config.build_dir or DEFAULT_BUILD_DIR)).absolute()

    def destination_for(self, build_dir: Path, cwd: Path, stamp: str | None = None) -> str:
        """
        `zip_name` verbatim when set (its parent is the caller's problem);
        otherwise `<build_dir>/<cwd name>-<YYYYMMDD-HHMMSS>.zip`.
        """
        if self.config.zip_name:
            return self.config.zip_name
        stamp = stamp or timestamp.now()
        # a relative cwd such as "." has no name of its own
        return f"{Path(build_dir).as_posix()}/{Path(cwd).absolute().name}-{stamp}.zip"

    def prepare_job(self, cwd: Path | None = None) -> ArchiveJob:
        cwd = Path(cwd).absolute() if cwd is not None else Path.cwd()
        build_dir = self.resolve_build_dir(cwd)
        build_dir.mkdir(parents=True, exist_ok=True)
        return ArchiveJob(
            source_dir=cwd / OUTPUT_DIR,
            destination_path=self.destination_for(build_dir, cwd),
        )

    @staticmethod
    def _report(fut: Future, job: ArchiveJob) -> None:
        # failures are already logged by zip_folder and raised by fut.result()
        if not fut.cancelled() and fut.exception() is None:
            logger.info("Packaging complete: %s", job.destination_path)
