# src/storage/local_writer.py — v3
"""Local filesystem output writer (default backend)."""

from __future__ import annotations

import shutil
from pathlib import Path

from quotecards.storage.base_output_writer import BaseOutputWriter


class LocalWriter(BaseOutputWriter):
    """Write build outputs under a root directory on the local filesystem."""

    def __init__(self, base_path: str | Path) -> None:
        self._base = Path(base_path).expanduser()

    @property
    def base_path(self) -> Path:
        return self._base

    def _resolve(self, path: str) -> Path:
        """Resolve a relative path, refusing anything that escapes the root."""
        resolved = (self._base / path).resolve()
        root = self._base.resolve()
        if resolved != root and root not in resolved.parents:
            raise ValueError(f"Path escapes output root: {path!r}")
        return resolved

    async def write(self, path: str, content: bytes | str) -> None:
        p = self._resolve(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            p.write_bytes(content)
        else:
            p.write_text(content, encoding="utf-8")

    async def read(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    async def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    async def remove(self, path: str) -> bool:
        p = self._resolve(path)
        if not p.is_file() and not p.is_symlink():
            return False
        p.unlink()
        return True

    async def remove_tree(self, path: str) -> bool:
        p = self._resolve(path)
        if p == self._base.resolve():
            raise ValueError("Refusing to remove the output root")
        if not p.is_dir():
            return False
        shutil.rmtree(p)
        return True

    async def list_dir(self, path: str) -> list[str]:
        p = self._resolve(path)
        if not p.is_dir():
            return []
        return [entry.name for entry in sorted(p.iterdir())]
