import os
import shutil
import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

class Filesystem:
    """Thin wrapper over the few filesystem calls the managers need."""

    def is_link(self, path: PathLike) -> bool:
        return Path(path).is_symlink()

    def read_link(self, path: PathLike) -> str:
        # Target as stored in the link, not fully resolved
        return os.readlink(path)

    def get(self, path: PathLike) -> str:
        # newline='' keeps \r\n; surrogateescape round-trips bytes that aren't UTF-8
        with open(path, 'r', encoding='utf-8', errors='surrogateescape', newline='') as f:
            return f.read()

    def put(self, path: PathLike, contents: str) -> None:
        with open(path, 'w', encoding='utf-8', errors='surrogateescape', newline='') as f:
            f.write(contents)
        logger.debug(f"FILESYSTEM: Wrote {len(contents)} characters to {path}")

    def ensure_dir_exists(self, path: PathLike, owner: Optional[str] = None, mode: int = 0o755) -> None:
        """
        Creates the directory (and parents) if missing.

        The owner is only applied to a directory this call created; an existing
        directory keeps whatever ownership it has.
        """
        dir_path = Path(path)
        if dir_path.is_dir():
            return
        dir_path.mkdir(mode=mode, parents=True, exist_ok=True)
        logger.info(f"FILESYSTEM: Created directory {dir_path}")
        if owner:
            shutil.chown(dir_path, user=owner)
            logger.debug(f"FILESYSTEM: Set owner of {dir_path} to {owner}")
