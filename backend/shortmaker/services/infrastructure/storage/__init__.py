"""Storage layer - manifest persistence."""

from .manifest_repository import ManifestRepository, FileBasedManifestRepository, manifest_key

__all__ = ["ManifestRepository", "FileBasedManifestRepository", "manifest_key"]
