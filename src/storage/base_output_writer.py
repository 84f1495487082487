# src/storage/base_output_writer.py — v2
"""Abstract output writer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseOutputWriter(ABC):
    """Unified interface for build output backends.

    Paths are relative to the backend's root and use forward slashes.
    """

    @abstractmethod
    async def write(self, path: str, content: bytes | str) -> None:
        """Write content to the given path, creating parent directories."""

    @abstractmethod
    async def read(self, path: str) -> bytes:
        """Read content from the given path."""

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if path exists."""

    @abstractmethod
    async def remove(self, path: str) -> bool:
        """Delete a file. Returns True if something was removed."""

    @abstractmethod
    async def remove_tree(self, path: str) -> bool:
        """Delete a directory tree. Returns True if something was removed."""

    @abstractmethod
    async def list_dir(self, path: str) -> list[str]:
        """List directory contents."""
