"""
Storage Service Interface
File storage abstraction layer
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, Optional, Union


class AbstractStorageService(ABC):
    """
    Storage service abstract class

    Uploaded files are addressed by name inside a single flat directory.
    """

    @abstractmethod
    async def save(
        self,
        file_data: Union[bytes, BinaryIO],
        path: str,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Save a file

        Args:
            file_data: file content (bytes or file-like object)
            path: file name
            content_type: MIME type (optional)

        Returns:
            str: URL under which the file is served
        """

    @abstractmethod
    def get_url(self, path: str) -> str:
        """URL under which the file is served"""
