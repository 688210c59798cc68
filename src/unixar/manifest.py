"""Describe an archive's index as JSON."""
from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic import RootModel

from .archive import Archive, IndexedEntry


class ArchiveManifest(RootModel[List[IndexedEntry]]):
    @classmethod
    def from_archive(cls, archive: Archive) -> ArchiveManifest:
        return cls(list(archive.entries))

    def names(self) -> List[str]:
        return [entry.name for entry in self.root]


def manifest_dump(path: Path, manifest: ArchiveManifest) -> None:
    path.write_text(manifest.model_dump_json(indent=2), encoding="utf-8")


def manifest_load(path: Path) -> ArchiveManifest:
    return ArchiveManifest.model_validate_json(path.read_text(encoding="utf-8"))
