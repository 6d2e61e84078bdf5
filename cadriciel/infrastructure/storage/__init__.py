"""
Storage Module
"""

from .base import AbstractStorageService
from .local import LocalStorageService, safe_filename

__all__ = ["AbstractStorageService", "LocalStorageService", "safe_filename"]
