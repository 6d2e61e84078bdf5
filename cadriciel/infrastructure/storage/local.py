"""
Local Storage Service
Storage service backed by the local file system
"""

import os
import uuid
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import BinaryIO, Optional, Union

import aiofiles
import aiofiles.os

from .base import AbstractStorageService

# Chunk size used when copying file-like objects
COPY_CHUNK_SIZE = 64 * 1024


def safe_filename(name: str) -> str:
    """
    Reduce a client supplied file name to its last path component

    Raises:
        ValueError: nothing usable is left
    """
    base = PurePosixPath(PureWindowsPath(name).name).name
    if base in ("", ".", ".."):
        raise ValueError(f"Invalid file name: {name!r}")
    return base


class LocalStorageService(AbstractStorageService):
    """
    Local file system storage service

    Writes go to a temporary file next to the target and are moved into
    place with an atomic rename: concurrent writes of the same name leave
    one complete file, the last one renamed.
    """

    def __init__(self, base_path: Union[str, Path], base_url: str = ""):
        """
        Args:
            base_path: local directory holding the files
            base_url: URL prefix the directory is served under
        """
        self.base_path = Path(base_path)
        self.base_url = base_url.rstrip("/")

        os.makedirs(self.base_path, exist_ok=True)

    def full_path(self, path: str) -> Path:
        return self.base_path / safe_filename(path)

    async def save(
        self,
        file_data: Union[bytes, BinaryIO],
        path: str,
        content_type: Optional[str] = None,
    ) -> str:
        """Save a file"""
        target = self.full_path(path)
        tmp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex}.part")

        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                if isinstance(file_data, bytes):
                    await f.write(file_data)
                else:
                    # file-like object
                    while True:
                        chunk = file_data.read(COPY_CHUNK_SIZE)
                        if not chunk:
                            break
                        if isinstance(chunk, str):
                            chunk = chunk.encode("utf-8")
                        await f.write(chunk)
            await aiofiles.os.replace(tmp_path, target)
        except BaseException:
            if tmp_path.exists():
                os.remove(tmp_path)
            raise

        return self.get_url(target.name)

    def get_url(self, path: str) -> str:
        """
        URL of a stored file

        Args:
            path: file name

        Returns:
            str: `{base_url}/{name}`
        """
        return f"{self.base_url}/{path.lstrip('/')}"
