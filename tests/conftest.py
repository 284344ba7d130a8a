"""
Shared fakes and fixtures for the manager tests.
"""

import subprocess
from typing import Dict, List, Optional, Tuple

import pytest

from brewherd.core.config import Settings
from brewherd.managers.brew_manager import BrewManager
from brewherd.managers.php_fpm_manager import PhpFpmManager


class FakeCommandLine:
    """Records every command instead of running it."""

    def __init__(self, user: str):
        self.user = user
        self.calls: List[Tuple[str, List[str]]] = []
        self.run_results: Dict[Tuple[str, ...], Tuple[int, str, str]] = {}
        self.user_results: Dict[Tuple[str, ...], Tuple[int, str, str]] = {}
        self.failing_passthru = set()

    def run(self, command):
        self.calls.append(("run", list(command)))
        return self.run_results.get(tuple(command), (0, "", ""))

    def run_as_user(self, command, on_error=None):
        self.calls.append(("run_as_user", list(command)))
        code, stdout, stderr = self.user_results.get(tuple(command), (0, "", ""))
        if code != 0 and on_error is not None:
            on_error(code, stderr)
        return stdout

    def quietly(self, command):
        self.calls.append(("quietly", list(command)))
        return 0

    def passthru(self, command):
        self.calls.append(("passthru", list(command)))
        if tuple(command) in self.failing_passthru:
            raise subprocess.CalledProcessError(1, list(command))
        return 0

    def commands(self, mode: str) -> List[List[str]]:
        return [command for call_mode, command in self.calls if call_mode == mode]

    def set_brew_list(self, *formulae: str, code: int = 0) -> None:
        self.run_results[("brew", "list")] = (code, "\n".join(formulae), "")


class FakeFilesystem:
    """In-memory stand-in for brewherd.core.filesystem.Filesystem."""

    def __init__(self):
        self.links: Dict[str, str] = {}
        self.files: Dict[str, str] = {}
        self.dirs: Dict[str, Optional[str]] = {}
        self.writes: List[str] = []

    def is_link(self, path) -> bool:
        return str(path) in self.links

    def read_link(self, path) -> str:
        return self.links[str(path)]

    def get(self, path) -> str:
        return self.files[str(path)]

    def put(self, path, contents: str) -> None:
        self.writes.append(str(path))
        self.files[str(path)] = contents

    def ensure_dir_exists(self, path, owner=None, mode=0o755) -> None:
        self.dirs.setdefault(str(path), owner)


@pytest.fixture
def settings() -> Settings:
    return Settings(user="taylor")


@pytest.fixture
def fake_cli(settings) -> FakeCommandLine:
    return FakeCommandLine(settings.user)


@pytest.fixture
def fake_files() -> FakeFilesystem:
    return FakeFilesystem()


@pytest.fixture
def brew(fake_cli, fake_files, settings) -> BrewManager:
    return BrewManager(fake_cli, fake_files, settings)


@pytest.fixture
def php_fpm(brew, fake_cli, fake_files, settings) -> PhpFpmManager:
    return PhpFpmManager(brew, fake_cli, fake_files, settings)


@pytest.fixture
def link_php(fake_files, settings):
    """Points the PHP symlink at the given target."""
    def _link(target: str) -> None:
        fake_files.links[settings.php_symlink_path] = target
    return _link
