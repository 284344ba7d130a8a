import enum
import logging
from typing import Any, Callable, NamedTuple

logger = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    OK = "ok"
    INSTALLATION_FAILED = "installation_failed"
    UNRESOLVED_VERSION = "unresolved_version"
    CONFIG_NOT_FOUND = "config_not_found"


class ProvisioningError(Exception):
    """Base class for fatal provisioning errors. These are never retried."""
    kind: ErrorKind  # Set by each subclass

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InstallationFailed(ProvisioningError):
    kind = ErrorKind.INSTALLATION_FAILED

    def __init__(self, formula: str, error_output: str = ""):
        super().__init__(f"Brew was unable to install [{formula}].")
        self.formula = formula
        self.error_output = error_output


class UnresolvedVersion(ProvisioningError):
    kind = ErrorKind.UNRESOLVED_VERSION

    def __init__(self, path: str):
        super().__init__("Unable to determine linked PHP.")
        self.path = path


class ConfigNotFound(ProvisioningError):
    kind = ErrorKind.CONFIG_NOT_FOUND

    def __init__(self, version: str):
        super().__init__("Unable to find php-fpm config.")
        self.version = version


class OperationResult(NamedTuple):
    kind: ErrorKind
    message: str = ""
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.kind is ErrorKind.OK


def run_operation(func: Callable[..., Any], *args: Any, **kwargs: Any) -> OperationResult:
    """
    Runs one workflow step and reports its outcome as an OperationResult.

    Only ProvisioningError is converted; anything else (e.g. a failed
    `brew tap`) propagates to the caller unchanged.
    """
    try:
        value = func(*args, **kwargs)
    except ProvisioningError as e:
        logger.error(f"ERRORS: {getattr(func, '__qualname__', func)} failed ({e.kind.value}): {e.message}")
        return OperationResult(e.kind, e.message)
    return OperationResult(ErrorKind.OK, "", value)
