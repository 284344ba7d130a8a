import subprocess
import shlex
import logging
from typing import Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


def run_command(command_list: Sequence[str]) -> Tuple[int, str, str]:
    """Runs a system command and captures output/return code."""
    # shlex.join keeps logged commands copy-pasteable even with spaces in args
    joined_command = shlex.join(command_list)
    logger.debug(f"SYSTEM_UTILS: Running command: {joined_command}")
    try:
        result = subprocess.run(
            list(command_list),
            capture_output=True,
            text=True,
            check=False,
            encoding='utf-8',
            errors='replace'
        )
        if result.returncode != 0:
            log_message = (
                f"SYSTEM_UTILS: Command failed (Code: {result.returncode}): {joined_command}\n"
                f"  Stdout: {result.stdout.strip()}\n"
                f"  Stderr: {result.stderr.strip()}"
            )
            logger.warning(log_message)

        return result.returncode, result.stdout.strip(), result.stderr.strip()
    except FileNotFoundError:
        msg = f"SYSTEM_UTILS: Command not found: {command_list[0]}"
        logger.error(msg)
        return -1, "", msg
    except OSError as e:
        msg = f"SYSTEM_UTILS: Error running command '{joined_command}': {e}"
        logger.error(msg, exc_info=True)
        return -2, "", msg


class CommandLine:
    """
    Process execution for the managers.

    Four invocation modes are offered:
      - run: capture stdout/stderr, report the exit status.
      - run_as_user: run through `sudo -u <user>`, call on_error when it fails.
      - quietly: discard all output, report the exit status.
      - passthru: inherit the terminal, raise CalledProcessError on failure.
    """

    def __init__(self, user: str):
        self.user = user

    def run(self, command: Sequence[str]) -> Tuple[int, str, str]:
        return run_command(command)

    def run_as_user(self, command: Sequence[str],
                    on_error: Optional[Callable[[int, str], None]] = None) -> str:
        """
        Runs the command as the configured (unprivileged) user.

        Returns stdout. On a nonzero exit, on_error(exit_code, stderr) is called
        if given; whatever it raises propagates.
        """
        full_command: List[str] = ["sudo", "-u", self.user, *command]
        code, stdout, stderr = run_command(full_command)
        if code != 0 and on_error is not None:
            on_error(code, stderr)
        return stdout

    def quietly(self, command: Sequence[str]) -> int:
        joined_command = shlex.join(command)
        logger.debug(f"SYSTEM_UTILS: Running command quietly: {joined_command}")
        try:
            result = subprocess.run(list(command), stdout=subprocess.DEVNULL,
                                    stderr=subprocess.DEVNULL, check=False)
        except FileNotFoundError:
            logger.error(f"SYSTEM_UTILS: Command not found: {command[0]}")
            return -1
        if result.returncode != 0:
            logger.info(f"SYSTEM_UTILS: Quiet command exited with code {result.returncode}: {joined_command}")
        return result.returncode

    def passthru(self, command: Sequence[str]) -> int:
        joined_command = shlex.join(command)
        logger.debug(f"SYSTEM_UTILS: Running command (passthru): {joined_command}")
        try:
            result = subprocess.run(list(command), check=True)
        except FileNotFoundError:
            logger.error(f"SYSTEM_UTILS: Command not found: {command[0]}")
            raise
        except subprocess.CalledProcessError as e:
            logger.warning(f"SYSTEM_UTILS: Command failed (Code: {e.returncode}): {joined_command}")
            raise
        return result.returncode
