# brewherd/managers/brew_manager.py

import logging
from typing import Iterable, List, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

# --- Import Core Modules ---
from ..core import console
from ..core.config import Settings
from ..core.errors import InstallationFailed, UnresolvedVersion
from ..core.filesystem import Filesystem
from ..core.system_utils import CommandLine
# --- End Imports ---

NameArgs = Tuple[Union[str, Sequence[str]], ...]


def _normalize_names(names: NameArgs) -> List[str]:
    """
    Accepts tap("a"), tap("a", "b") or tap(["a", "b"]) and returns ["a", ...].
    """
    if len(names) == 1 and isinstance(names[0], (list, tuple)):
        names = tuple(names[0])
    normalized = [str(name) for name in names]
    if not normalized:
        raise ValueError("At least one name is required.")
    return normalized


class BrewManager:
    """Wraps the Homebrew CLI: formula state, taps, services and the linked PHP."""

    def __init__(self, cli: CommandLine, files: Filesystem, settings: Settings):
        self.cli = cli
        self.files = files
        self.settings = settings

    # --- Formulae ---
    def installed(self, formula: str) -> bool:
        """Determine if the given formula is installed."""
        code, stdout, _ = self.cli.run([self.settings.brew_command, "list"])
        if code != 0:
            logger.debug(f"BREW_MANAGER: 'brew list' failed (code {code}); treating '{formula}' as not installed.")
            return False
        return formula in stdout.splitlines()

    def has_installed_php(self) -> bool:
        """Determine if any supported PHP version is Homebrewed."""
        for version in self.settings.php_versions:
            if self.installed(version):
                logger.debug(f"BREW_MANAGER: Found installed PHP formula '{version}'.")
                return True
        return False

    def ensure_installed(self, formula: str, taps: Iterable[str] = ()) -> None:
        if not self.installed(formula):
            self.install_or_fail(formula, taps)
        else:
            logger.debug(f"BREW_MANAGER: '{formula}' already installed.")

    def install_or_fail(self, formula: str, taps: Iterable[str] = ()) -> None:
        """Install the given formula, raising InstallationFailed on a nonzero exit."""
        taps = list(taps)
        if taps:
            self.tap(taps)

        console.info(f"[{formula}] is not installed, installing it now via Brew...")
        logger.info(f"BREW_MANAGER: Installing formula '{formula}'.")

        def _on_error(exit_code: int, error_output: str) -> None:
            console.error(error_output)
            logger.error(f"BREW_MANAGER: 'brew install {formula}' failed with code {exit_code}.")
            raise InstallationFailed(formula, error_output)

        self.cli.run_as_user([self.settings.brew_command, "install", formula], _on_error)

    def tap(self, *formulas: Union[str, Sequence[str]]) -> None:
        for formula in _normalize_names(formulas):
            logger.info(f"BREW_MANAGER: Tapping '{formula}'.")
            self.cli.passthru(["sudo", "-u", self.settings.user, self.settings.brew_command, "tap", formula])

    # --- Services ---
    def restart_service(self, *services: Union[str, Sequence[str]]) -> None:
        for service in _normalize_names(services):
            logger.info(f"BREW_MANAGER: Restarting service '{service}'.")
            self.cli.quietly(["sudo", self.settings.brew_command, "services", "restart", service])

    def stop_service(self, *services: Union[str, Sequence[str]]) -> None:
        for service in _normalize_names(services):
            logger.info(f"BREW_MANAGER: Stopping service '{service}'.")
            self.cli.quietly(["sudo", self.settings.brew_command, "services", "stop", service])

    # --- Linked PHP ---
    def linked_php(self) -> str:
        """
        Determine which version of PHP is linked in Homebrew.

        The first candidate (in settings order) found anywhere in the symlink
        target wins.
        """
        symlink_path = self.settings.php_symlink_path
        if not self.files.is_link(symlink_path):
            logger.error(f"BREW_MANAGER: {symlink_path} is not a symlink.")
            raise UnresolvedVersion(symlink_path)

        resolved_path = self.files.read_link(symlink_path)
        for version in self.settings.php_versions:
            if version in resolved_path:
                logger.debug(f"BREW_MANAGER: {symlink_path} -> {resolved_path} resolves to '{version}'.")
                return version

        logger.error(f"BREW_MANAGER: No supported PHP version in link target '{resolved_path}'.")
        raise UnresolvedVersion(symlink_path)

    def restart_linked_php(self) -> None:
        self.restart_service(self.linked_php())

    def stop_php(self) -> None:
        # All candidates, not just the linked one: this must work even when the link is broken.
        self.stop_service(self.settings.php_versions)

    # --- Sudoers ---
    def create_sudoers_entry(self) -> None:
        """Create the sudoers.d entry that lets admins run brew without a password."""
        self.files.ensure_dir_exists(self.settings.sudoers_dir)
        self.files.put(self.settings.sudoers_file, self.settings.sudoers_content)
        logger.info(f"BREW_MANAGER: Wrote sudoers entry {self.settings.sudoers_file}.")
