"""
Manifest repository - checkpoint storage for manifests.

The pipeline only needs a write-behind "save the current manifest" hook; the
repository's bound ``save`` method is that hook. ``FileBasedManifestRepository``
stores one JSON document per project under ``MANIFEST_DIR``.

Classes:
    ManifestRepository: Abstract interface for manifest persistence
    FileBasedManifestRepository: JSON-file implementation
"""

import json
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from shortmaker.config import MANIFEST_DIR
from shortmaker.core import get_logger
from shortmaker.models.manifest import Manifest

logger = get_logger(__name__, component="manifest_repository")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def manifest_key(manifest: Manifest) -> str:
    """Storage key for a manifest: project id, else seed, else a fixed name."""
    raw = manifest.project_id or manifest.seed or "current"
    return _UNSAFE_CHARS.sub("_", raw)[:120] or "current"


class ManifestRepository(ABC):
    """
    Abstract repository for manifest persistence.
    """

    @abstractmethod
    def save(self, manifest: Manifest) -> None:
        """
        Persist a manifest snapshot, replacing any previous one for the same key.

        Args:
            manifest: Manifest to store
        """
        pass

    @abstractmethod
    def load(self, key: str) -> Optional[Manifest]:
        """
        Load a manifest by key.

        Returns:
            The manifest if found, None otherwise
        """
        pass

    @abstractmethod
    def list_keys(self) -> List[str]:
        pass


class FileBasedManifestRepository(ManifestRepository):
    """Stores manifests as ``<key>.json`` files."""

    def __init__(self, storage_dir: Optional[Path] = None):
        self._storage_dir = Path(storage_dir) if storage_dir else MANIFEST_DIR
        self._storage_dir.mkdir(parents=True, exist_ok=True)

    def _manifest_file(self, key: str) -> Path:
        return self._storage_dir / f"{key}.json"

    def save(self, manifest: Manifest) -> None:
        key = manifest_key(manifest)
        target = self._manifest_file(key)
        tmp_path = target.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(manifest.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, target)
        logger.debug(f"Saved manifest {key}", extra={"scene_count": len(manifest.scenes)})

    def load(self, key: str) -> Optional[Manifest]:
        manifest_file = self._manifest_file(key)
        if not manifest_file.exists():
            return None
        try:
            with open(manifest_file, "r", encoding="utf-8") as f:
                return Manifest.model_validate(json.load(f))
        except (OSError, ValueError):
            logger.error(f"Failed to load manifest {key}", exc_info=True)
            return None

    def list_keys(self) -> List[str]:
        return sorted(path.stem for path in self._storage_dir.glob("*.json"))


__all__ = ["ManifestRepository", "FileBasedManifestRepository", "manifest_key"]
