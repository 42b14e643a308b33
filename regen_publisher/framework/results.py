from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class FileRole(str, Enum):
    BASE = "base"
    EXTENSION = "extension"
    PLAIN = "plain"


@dataclass(frozen=True)
class PublishedFile:
    path: Path
    role: FileRole
    logical_name: str
    disposition: str


@dataclass
class PublishResult:
    write_files: bool
    files: list[PublishedFile] = field(default_factory=list)
    skipped_extensions: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    projects: list[str] = field(default_factory=list)
    cancelled: bool = False

    def paths(self, role: FileRole | None = None) -> list[Path]:
        return [item.path for item in self.files if role is None or item.role is role]

    def to_dict(self) -> dict[str, object]:
        return {
            "write_files": self.write_files,
            "cancelled": self.cancelled,
            "files": [
                {
                    "path": str(item.path),
                    "role": item.role.value,
                    "logical_name": item.logical_name,
                    "disposition": item.disposition,
                }
                for item in self.files
            ],
            "skipped_extensions": [str(path) for path in self.skipped_extensions],
            "warnings": list(self.warnings),
            "projects": list(self.projects),
        }
