"""Test configuration and common fixtures."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest

from cmddict import core

__all__ = (
    'config_home',
    'make_app',
    'project_dir',
)


@pytest.fixture(autouse=True)
def config_home(tmp_path: Path, monkeypatch) -> Path:
    """Provide an empty, private, user configuration directory.

    This prevents the user's real global settings affecting any test.
    """
    path = tmp_path / 'config-home'
    path.mkdir()
    monkeypatch.setenv('CMDDICT_CONFIG_HOME', str(path))
    return path


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Provide an empty project directory."""
    path = tmp_path / 'project'
    path.mkdir()
    return path


@pytest.fixture
def make_app(project_dir: Path):
    """Provide a way to create the application for a test project.

    The returned function accepts additional command line arguments.
    """
    def make(*args: str) -> core.CommandDictionary:
        argv = [
            '--project-dir', str(project_dir), '--poll-interval', '0.02',
            *args]
        return core.CommandDictionary(core.parse_args(argv))

    return make


@pytest.fixture(autouse=True)
def quiet_logging(caplog):
    """Capture all cmddict logging."""
    caplog.set_level(logging.DEBUG, logger='cmddict')
