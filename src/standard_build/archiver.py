"""
Folder -> ZIP archiving.

`zip_folder` does the work synchronously and only returns once the ZIP
central directory has been written and the output file is closed.
`archive` runs the same job on an executor and hands back the future, so a
caller can fire-and-forget or wait on `.result()`.

A failed run may leave a partially written file at the destination; it is
not removed.
"""

from __future__ import annotations

import io
import logging
import os
import zipfile
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from .errors import ArchiveError, FileSystemError, StandardBuildError

logger = logging.getLogger(__name__)

COMPRESSION = zipfile.ZIP_DEFLATED
COMPRESS_LEVEL = 9


@dataclass(frozen=True)
class ArchiveResult:
    path: str
    bytes_written: int
    entries: int


class _Sink(io.BufferedWriter):
    """Buffered output file that reports write failures as FileSystemError."""

    def write(self, data):
        try:
            return super().write(data)
        except OSError as exc:
            raise FileSystemError(f"Cannot write {self.name}: {exc}", exc) from exc

    def flush(self):
        try:
            return super().flush()
        except OSError as exc:
            raise FileSystemError(f"Cannot write {self.name}: {exc}", exc) from exc


def _open_sink(path: Path) -> _Sink:
    try:
        raw = io.FileIO(path, "w")
    except OSError as exc:
        raise FileSystemError(f"Cannot open {path} for writing: {exc}", exc) from exc
    return _Sink(raw)


def _walk_error(exc: OSError) -> None:
    raise ArchiveError(f"Cannot read {exc.filename}: {exc}", exc) from exc


def _collect_entries(source: Path) -> list[tuple[Path, str]]:
    """(path, arcname) for everything under `source`, arcnames relative to it."""
    if not source.is_dir():
        cause = FileNotFoundError(f"No such directory: {source}")
        raise ArchiveError(f"Source directory does not exist: {source}", cause) from cause
    found = []
    # rglob skips unreadable sub-directories; os.walk hands them to onerror
    for root, dirs, files in os.walk(source, onerror=_walk_error):
        found.extend(Path(root) / name for name in dirs + files)
    return [(p, p.relative_to(source).as_posix()) for p in sorted(found)]


def _write_archive(source: Path, dest: Path) -> ArchiveResult:
    entries = _collect_entries(source)
    try:
        with _open_sink(dest) as sink:
            with zipfile.ZipFile(
                sink, "w", compression=COMPRESSION, compresslevel=COMPRESS_LEVEL
            ) as zf:
                for path, arcname in entries:
                    try:
                        zf.write(path, arcname)
                    except StandardBuildError:
                        raise
                    except Exception as exc:
                        raise ArchiveError(f"Cannot add {path}: {exc}", exc) from exc
            # zipfile leaves a caller-supplied file open; push the tail out ourselves
            sink.flush()
            written = sink.tell()
    except OSError as exc:
        raise FileSystemError(f"Cannot finish {dest}: {exc}", exc) from exc
    return ArchiveResult(path=str(dest), bytes_written=written, entries=len(entries))


def zip_folder(source_dir: str | Path, output_zip_path: str | Path) -> ArchiveResult:
    """
    Pack the contents of `source_dir` into `output_zip_path`.

    Entries are stored relative to `source_dir` (its own name is not a prefix),
    DEFLATE at level 9. The parent of `output_zip_path` must already exist.

    Raises:
        ArchiveError: the source could not be enumerated or compressed.
        FileSystemError: the output file could not be opened or written.
    """
    source = Path(source_dir)
    dest = Path(output_zip_path)
    try:
        result = _write_archive(source, dest)
    except ArchiveError as exc:
        logger.error("Packaging failed: %s", exc)
        raise
    logger.info("ZIP created: %s (%d bytes)", result.path, result.bytes_written)
    return result


def archive(
    source_dir: str | Path,
    output_zip_path: str | Path,
    executor: Executor | None = None,
) -> Future[ArchiveResult]:
    """
    Run `zip_folder` in the background. The future resolves once the output
    file is closed and raises the ArchiveError/FileSystemError on failure.
    """
    if executor is not None:
        return executor.submit(zip_folder, source_dir, output_zip_path)
    own = ThreadPoolExecutor(max_workers=1, thread_name_prefix="standard-build")
    try:
        return own.submit(zip_folder, source_dir, output_zip_path)
    finally:
        # the submitted job still runs to completion
        own.shutdown(wait=False)
