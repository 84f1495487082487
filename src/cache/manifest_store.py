# src/cache/manifest_store.py — v1
"""JSON file-backed manifest store.

The manifest is the only memory a build has of previous runs, so it is
treated strictly:
  - a missing file loads as a blank manifest (full rebuild);
  - an undecodable file is fatal, never ignored;
  - saves go through a temp file and os.replace, so readers see either the
    previous manifest or the new one in full.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from quotecards.cache.models import MANIFEST_SCHEMA_VERSION, Manifest
from quotecards.core.errors import ManifestError

logger = logging.getLogger(__name__)


class ManifestStore:
    """Load, save and delete the build manifest at a fixed path."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> Manifest:
        """Read the manifest; a missing file gives a blank Manifest.

        Raises:
            ManifestError: If the file cannot be read, decoded or validated.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No manifest at %s; every artifact will be rebuilt", self._path)
            return Manifest()
        except OSError as exc:
            raise ManifestError(f"Cannot read manifest {self._path}: {exc}") from exc

        try:
            data = json.loads(raw)
            manifest = Manifest.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ManifestError(f"Corrupt manifest {self._path}: {exc}") from exc

        if manifest.version > MANIFEST_SCHEMA_VERSION:
            raise ManifestError(
                f"Manifest {self._path} has schema version {manifest.version}; "
                f"this build understands up to {MANIFEST_SCHEMA_VERSION}"
            )

        logger.debug(
            "Loaded manifest %s with %d entries", self._path, len(manifest.entries)
        )
        return manifest

    def save(self, manifest: Manifest) -> Manifest:
        """Stamp generated_at and write the manifest atomically.

        Returns:
            The stamped manifest that was written.

        Raises:
            ManifestError: If the manifest cannot be written.
        """
        stamped = manifest.model_copy(
            update={"generated_at": datetime.now(timezone.utc).replace(microsecond=0)}
        )
        payload = serialize_manifest(stamped)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise ManifestError(f"Cannot write manifest {self._path}: {exc}") from exc

        logger.debug("Saved manifest %s (%d entries)", self._path, len(stamped.entries))
        return stamped

    def delete(self) -> bool:
        """Remove the manifest file. Returns True if a file was removed."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise ManifestError(f"Cannot delete manifest {self._path}: {exc}") from exc
        logger.info("Deleted manifest %s", self._path)
        return True


def serialize_manifest(manifest: Manifest) -> str:
    """Deterministic JSON: sorted keys at every level, two-space indent."""
    data = manifest.model_dump(mode="json")
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def load_manifest(path: Path) -> Manifest:
    return ManifestStore(path).load()


def save_manifest(path: Path, manifest: Manifest) -> Manifest:
    return ManifestStore(path).save(manifest)


def delete_manifest(path: Path) -> bool:
    return ManifestStore(path).delete()
