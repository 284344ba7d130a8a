import os
import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# --- Homebrew ---
BREW_COMMAND = "brew"
BREW_BINARY_PATH = "/usr/local/bin/brew" # Path allowed by the sudoers entry

# --- PHP Versions ---
# Checked in order, first match wins. Keep the most preferred version first.
PHP_VERSIONS: Tuple[str, ...] = ("php70", "php56", "php55")
PRIMARY_PHP_FORMULA = "php70"
PHP_SYMLINK_PATH = "/usr/local/bin/php"

PHP_TAPS: Tuple[str, ...] = (
    "homebrew/dupes",
    "homebrew/versions",
    "homebrew/homebrew-php",
)

# --- PHP-FPM Configuration ---
PHP_FPM_CONFIG_LOCATIONS: Dict[str, str] = {
    "php70": "/usr/local/etc/php/7.0/php-fpm.d/www.conf",
    "php56": "/usr/local/etc/php/5.6/php-fpm.conf",
    "php55": "/usr/local/etc/php/5.6/php-fpm.conf",
}
PHP_FPM_GROUP = "staff"

# --- Logs ---
LOG_DIR = Path("/usr/local/var/log")
APP_LOG_FILENAME = "brewherd.log"

# --- Sudoers ---
SUDOERS_DIR = Path("/etc/sudoers.d")
SUDOERS_BREW_FILE_NAME = "brew"
SUDOERS_BREW_CONTENT = (
    f"Cmnd_Alias BREW = {BREW_BINARY_PATH} *\n"
    "%admin ALL=(root) NOPASSWD: BREW\n"
)

# --- Misc ---
APP_NAME = "brewherd"
ENV_PREFIX = "BREWHERD_"


def current_user(environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Returns the user brewherd acts on behalf of.

    Under sudo the invoking user (SUDO_USER) wins over root, so that files and
    services end up owned by the developer rather than root.
    """
    env = os.environ if environ is None else environ
    for env_name in (f"{ENV_PREFIX}USER", "SUDO_USER"):
        value = env.get(env_name)
        if value:
            return value
    try:
        return os.getlogin()
    except OSError:
        return env.get("USER", "nobody")


class Settings:
    """Ambient state handed to every manager at construction time."""

    def __init__(self, user: str,
                 fpm_group: str = PHP_FPM_GROUP,
                 brew_command: str = BREW_COMMAND,
                 php_versions: Sequence[str] = PHP_VERSIONS,
                 primary_php_formula: str = PRIMARY_PHP_FORMULA,
                 php_symlink_path: str = PHP_SYMLINK_PATH,
                 php_taps: Sequence[str] = PHP_TAPS,
                 fpm_config_locations: Optional[Dict[str, str]] = None,
                 log_dir: Path = LOG_DIR,
                 sudoers_dir: Path = SUDOERS_DIR,
                 sudoers_content: str = SUDOERS_BREW_CONTENT):
        self.user = user
        self.fpm_group = fpm_group
        self.brew_command = brew_command
        self.php_versions = tuple(php_versions)
        self.primary_php_formula = primary_php_formula
        self.php_symlink_path = str(php_symlink_path)
        self.php_taps = tuple(php_taps)
        # Copy so callers can't mutate the module-level table through a Settings instance
        self.fpm_config_locations = dict(PHP_FPM_CONFIG_LOCATIONS if fpm_config_locations is None else fpm_config_locations)
        self.log_dir = Path(log_dir)
        self.sudoers_dir = Path(sudoers_dir)
        self.sudoers_content = sudoers_content

    @property
    def sudoers_file(self) -> Path:
        return self.sudoers_dir / SUDOERS_BREW_FILE_NAME

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Builds settings from the defaults above plus BREWHERD_* overrides."""
        env = os.environ if environ is None else environ

        def _get(name: str, default):
            value = env.get(f"{ENV_PREFIX}{name}")
            if value:
                logger.debug(f"CONFIG: Using {ENV_PREFIX}{name}={value}")
                return value
            return default

        user = current_user(env)
        return cls(
            user=user,
            fpm_group=_get("FPM_GROUP", PHP_FPM_GROUP),
            brew_command=_get("BREW", BREW_COMMAND),
            php_symlink_path=_get("PHP_SYMLINK", PHP_SYMLINK_PATH),
            log_dir=Path(_get("LOG_DIR", LOG_DIR)),
            sudoers_dir=Path(_get("SUDOERS_DIR", SUDOERS_DIR)),
        )

    def __repr__(self):
        return (f"Settings(user={self.user!r}, php_versions={self.php_versions!r}, "
                f"php_symlink_path={self.php_symlink_path!r})")
