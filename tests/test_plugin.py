from __future__ import annotations

import logging
import re
import threading
import zipfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from standard_build import plugin as plugin_mod
from standard_build.errors import ArchiveError
from standard_build.plugin import BuildPlugin, StandardBuildPlugin


@pytest.fixture
def project(tmp_path: Path) -> Path:
    cwd = tmp_path / "my-app"
    (cwd / "dist" / "assets").mkdir(parents=True)
    (cwd / "dist" / "index.html").write_text("<html></html>", encoding="utf-8")
    (cwd / "dist" / "assets" / "main.js").write_text("export {}\n", encoding="utf-8")
    return cwd


@pytest.fixture
def plugin():
    p = StandardBuildPlugin()
    yield p
    p.close()


def test_is_a_build_plugin(plugin):
    assert isinstance(plugin, BuildPlugin)
    assert plugin.name == "tta-plugin"
    assert plugin.enforce == "pre"
    with pytest.raises(TypeError):
        BuildPlugin()


def test_configure_declares_output_dir(plugin):
    assert plugin.configure() == {"build": {"outDir": "dist"}}


def test_default_destination(plugin, project: Path, monkeypatch):
    monkeypatch.setattr(plugin_mod.timestamp, "now", lambda: "20240102-030405")
    build_dir = plugin.resolve_build_dir(project)
    dest = plugin.destination_for(build_dir, project)
    assert dest == f"{build_dir.as_posix()}/my-app-20240102-030405.zip"


def test_zip_name_used_verbatim(project: Path):
    p = StandardBuildPlugin({"build_dir": "elsewhere", "zip_name": "release.zip"})
    try:
        job = p.prepare_job(project)
        assert job.destination_path == "release.zip"
        # build_dir is still created even though zip_name bypasses it
        assert (project / "elsewhere").is_dir()
    finally:
        p.close()


def test_empty_build_dir_falls_back_to_build(project: Path):
    p = StandardBuildPlugin({"build_dir": ""})
    try:
        assert p.resolve_build_dir(project) == (project / "build").absolute()
    finally:
        p.close()


def test_build_dir_created_and_idempotent(project: Path):
    nested = StandardBuildPlugin({"build_dir": "out/zips"})
    try:
        job = nested.prepare_job(project)
        assert (project / "out" / "zips").is_dir()
        nested.prepare_job(project)  # already exists: no error
        assert job.source_dir == project / "dist"
    finally:
        nested.close()


def test_build_complete_writes_archive(plugin, project: Path, caplog):
    caplog.set_level(logging.INFO, logger="standard_build")

    fut = plugin.on_build_complete(project)
    res = fut.result(timeout=30)

    out = Path(res.path)
    assert out.parent == project / "build"
    assert re.fullmatch(r"my-app-\d{8}-\d{6}\.zip", out.name)
    with zipfile.ZipFile(out) as zf:
        assert set(zf.namelist()) == {"assets/", "assets/main.js", "index.html"}
    plugin.close()
    assert "Packaging complete" in caplog.text


def test_build_complete_missing_output_fails(plugin, tmp_path: Path, caplog):
    cwd = tmp_path / "no-dist"
    cwd.mkdir()

    fut = plugin.on_build_complete(cwd)

    with pytest.raises(ArchiveError):
        fut.result(timeout=30)
    plugin.close()
    assert "failed" in caplog.text
    assert list((cwd / "build").iterdir()) == []


def test_jobs_run_one_at_a_time(plugin, project: Path, monkeypatch):
    stamps = iter(["20240101-000001", "20240101-000002"])
    monkeypatch.setattr(plugin_mod.timestamp, "now", lambda: next(stamps))

    first = plugin.on_build_complete(project)
    second = plugin.on_build_complete(project)

    assert second.result(timeout=30).path != first.result(timeout=30).path
    assert len(list((project / "build").glob("*.zip"))) == 2


def test_relative_cwd_keeps_project_name(plugin, project: Path, monkeypatch):
    monkeypatch.chdir(project)
    monkeypatch.setattr(plugin_mod.timestamp, "now", lambda: "20240102-030405")

    job = plugin.prepare_job(Path("."))

    assert job.destination_path.endswith("/build/my-app-20240102-030405.zip")
    assert job.source_dir.resolve() == (project / "dist").resolve()


def test_build_complete_returns_before_archive_written(project: Path):
    gate = threading.Event()
    pool = ThreadPoolExecutor(max_workers=1)
    p = StandardBuildPlugin(executor=pool)
    try:
        blocker = pool.submit(gate.wait, 30)

        fut = p.on_build_complete(project)

        assert fut.done() is False
        assert list((project / "build").glob("*.zip")) == []
        gate.set()
        res = fut.result(timeout=30)
        assert blocker.result() is True
        assert Path(res.path).is_file()
    finally:
        gate.set()
        pool.shutdown(wait=True)


def test_failure_logged_once(plugin, tmp_path: Path, caplog):
    cwd = tmp_path / "no-dist"
    cwd.mkdir()

    fut = plugin.on_build_complete(cwd)
    with pytest.raises(ArchiveError):
        fut.result(timeout=30)
    plugin.close()

    errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert len(errors) == 1
