"""Shared test fixtures for Ricci Analyzer tests."""

import os
from pathlib import Path
from typing import Union

import pytest


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def make_tree(tmp_path):
    """Build a project tree from {relative_path: text_or_bytes}.

    Text is written as UTF-8 without newline translation.
    """

    def _make(files: dict[str, Union[str, bytes]], root: Union[Path, None] = None) -> Path:
        base = root or tmp_path / "project"
        base.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            target = base / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            data = content if isinstance(content, bytes) else content.encode("utf-8")
            target.write_bytes(data)
        return base

    return _make


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Keep load_config away from the real home directory, cwd and RICCI_* vars."""
    home = tmp_path / "home"
    home.mkdir()
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(workdir)
    for key in list(os.environ):
        if key.startswith("RICCI_"):
            monkeypatch.delenv(key, raising=False)
    return workdir
