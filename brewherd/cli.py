import sys
import argparse
import subprocess
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from brewherd.core import config, console
from brewherd.core.config import Settings
from brewherd.core.errors import OperationResult, run_operation
from brewherd.core.filesystem import Filesystem
from brewherd.core.system_utils import CommandLine
from brewherd.managers.brew_manager import BrewManager
from brewherd.managers.php_fpm_manager import PhpFpmManager

logger = logging.getLogger(__name__)


def build_managers(settings: Settings) -> Tuple[BrewManager, PhpFpmManager]:
    """Wires the managers to the real command line and filesystem."""
    cli = CommandLine(settings.user)
    files = Filesystem()
    brew = BrewManager(cli, files, settings)
    php_fpm = PhpFpmManager(brew, cli, files, settings)
    return brew, php_fpm


# --- Command Handlers ---
# Each handler returns an OperationResult; a printable value goes in .value
def _install(brew: BrewManager, php_fpm: PhpFpmManager) -> OperationResult:
    result = run_operation(php_fpm.install)
    if result.ok:
        console.info("PHP-FPM installed and configured.")
    return result


def _restart(brew: BrewManager, php_fpm: PhpFpmManager) -> OperationResult:
    result = run_operation(php_fpm.restart)
    if result.ok:
        console.info("PHP-FPM restarted.")
    return result


def _stop(brew: BrewManager, php_fpm: PhpFpmManager) -> OperationResult:
    result = run_operation(php_fpm.stop)
    if result.ok:
        console.info("PHP-FPM stopped.")
    return result


def _trust(brew: BrewManager, php_fpm: PhpFpmManager) -> OperationResult:
    result = run_operation(brew.create_sudoers_entry)
    if result.ok:
        console.info("Sudoers entry for Brew has been added.")
    return result


def _which_php(brew: BrewManager, php_fpm: PhpFpmManager) -> OperationResult:
    return run_operation(brew.linked_php)


def _fpm_config(brew: BrewManager, php_fpm: PhpFpmManager) -> OperationResult:
    return run_operation(php_fpm.fpm_config_path)


COMMANDS: Dict[str, Tuple[Callable[[BrewManager, PhpFpmManager], OperationResult], str]] = {
    "install": (_install, "Install PHP-FPM via Brew, configure it for the current user and restart it."),
    "restart": (_restart, "Restart the PHP-FPM service of the linked PHP version."),
    "stop": (_stop, "Stop the PHP-FPM services of all supported PHP versions."),
    "trust": (_trust, "Add a sudoers entry so Brew can run without a password."),
    "which-php": (_which_php, "Print the PHP version linked at the PHP symlink."),
    "fpm-config": (_fpm_config, "Print the php-fpm config path for the linked PHP version."),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=config.APP_NAME,
                                     description="Provision and supervise Homebrew PHP-FPM.")
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug logging on stderr.')
    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    for name, (_handler, help_text) in COMMANDS.items():
        subparsers.add_parser(name, help=help_text, description=help_text)
    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if settings is None:
        settings = Settings.from_environment()
    brew, php_fpm = build_managers(settings)

    # Must exist, owned by the user, before configure_logging opens the log file
    log_file: Optional[Path] = settings.log_dir / config.APP_LOG_FILENAME
    try:
        brew.files.ensure_dir_exists(settings.log_dir, owner=settings.user)
    except OSError as e:
        log_file = None
        console.warning(f"Could not create log directory {settings.log_dir}: {e}")
    console.configure_logging(verbose=args.verbose, log_file=log_file)
    logger.debug(f"CLI: Running '{args.command}' with {settings!r}")

    handler, _help = COMMANDS[args.command]
    try:
        result = handler(brew, php_fpm)
    except subprocess.CalledProcessError as e:
        logger.error(f"CLI: Command failed with code {e.returncode}: {e.cmd}")
        console.error(f"Command failed with exit code {e.returncode}.")
        return e.returncode or 1
    except OSError as e:
        logger.error(f"CLI: '{args.command}' failed: {e}", exc_info=True)
        console.error(str(e))
        return 1

    if not result.ok:
        console.error(result.message)
        return 1
    if result.value is not None:
        console.output(str(result.value))
    return 0


if __name__ == "__main__":
    sys.exit(main())
