# brewherd/managers/php_fpm_manager.py

import re
import logging

logger = logging.getLogger(__name__)

# --- Import Core Modules ---
from ..core.config import Settings
from ..core.errors import ConfigNotFound
from ..core.filesystem import Filesystem
from ..core.system_utils import CommandLine
from .brew_manager import BrewManager
# --- End Imports ---

USER_DIRECTIVE_RE = re.compile(r'^user = [^\r\n]+', re.MULTILINE)
GROUP_DIRECTIVE_RE = re.compile(r'^group = [^\r\n]+', re.MULTILINE)


class PhpFpmManager:
    """Installs PHP-FPM through Brew and keeps its pool running as the current user."""

    def __init__(self, brew: BrewManager, cli: CommandLine, files: Filesystem, settings: Settings):
        self.brew = brew
        self.cli = cli
        self.files = files
        self.settings = settings

    def install(self) -> None:
        # The primary formula is only ensured when some supported PHP is already
        # present; with no PHP at all nothing gets installed here.
        if self.brew.has_installed_php():
            self.brew.ensure_installed(self.settings.primary_php_formula, self.settings.php_taps)
        else:
            logger.warning("PHP_FPM_MANAGER: No supported PHP formula installed; skipping formula install.")

        self.files.ensure_dir_exists(self.settings.log_dir, owner=self.settings.user)

        self.update_configuration()

        self.restart()

    def update_configuration(self) -> None:
        """Rewrite the user/group directives of the linked version's FPM config."""
        config_path = self.fpm_config_path()
        contents = self.files.get(config_path)

        user_line = f"user = {self.settings.user}"
        group_line = f"group = {self.settings.fpm_group}"
        # Callables instead of replacement strings: names must not be read as regex escapes
        contents = USER_DIRECTIVE_RE.sub(lambda _m: user_line, contents)
        contents = GROUP_DIRECTIVE_RE.sub(lambda _m: group_line, contents)

        self.files.put(config_path, contents)
        logger.info(f"PHP_FPM_MANAGER: Updated {config_path} ({user_line}, {group_line}).")

    def restart(self) -> None:
        self.stop()
        self.brew.restart_linked_php()

    def stop(self) -> None:
        self.brew.stop_php()

    def fpm_config_path(self) -> str:
        linked_php = self.brew.linked_php()
        config_path = self.settings.fpm_config_locations.get(linked_php)
        if config_path is None:
            logger.error(f"PHP_FPM_MANAGER: No php-fpm config location known for '{linked_php}'.")
            raise ConfigNotFound(linked_php)
        return config_path
