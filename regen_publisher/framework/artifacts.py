from __future__ import annotations

import locale
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

# Markers the generator places on elements it owns; a merge keeps everything else.
GENERATED_ELEMENT_TAGS: frozenset[str] = frozenset(
    {"@ibatorgenerated", "@abatorgenerated", "@mbggenerated", "@mbg.generated"}
)

MAPPER_SUFFIX = "Mapper"
EXAMPLE_SUFFIX = "Example"
DEFAULT_DESCRIPTOR_ENCODING = "UTF-8"


class ArtifactKind(str, Enum):
    SOURCE_BASE = "SourceBase"
    SOURCE_EXTENSION_CANDIDATE = "SourceExtensionCandidate"
    SOURCE_EXAMPLE = "SourceExample"
    DESCRIPTOR = "Descriptor"


def strip_format_suffix(file_name: str) -> str:
    stem, _ext = os.path.splitext(file_name)
    return stem


def platform_encoding() -> str:
    return locale.getpreferredencoding(False)


@dataclass(frozen=True)
class Artifact(ABC):
    target_project: str
    target_namespace: str
    file_name: str
    formatted_content: str
    encoding: str | None = None

    def __post_init__(self) -> None:
        for name in ("target_project", "target_namespace", "file_name"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise TypeError(
                    f"Artifact {name} must be a string (type={type(value).__name__})"
                )
            stripped = value.strip()
            if not stripped:
                raise ValueError(f"Artifact {name} cannot be empty")
            object.__setattr__(self, name, stripped)
        if os.path.basename(self.file_name) != self.file_name:
            raise ValueError(f"Artifact file_name must not contain directories: {self.file_name}")
        if not isinstance(self.formatted_content, str):
            raise TypeError(
                f"Artifact {self.file_name} content must be a string "
                f"(type={type(self.formatted_content).__name__})"
            )

    @property
    def logical_name(self) -> str:
        return strip_format_suffix(self.file_name)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.file_name)[1]

    @property
    @abstractmethod
    def kind(self) -> ArtifactKind: ...

    @property
    def mergeable(self) -> bool:
        return False

    @property
    def preserve_tags(self) -> frozenset[str]:
        return frozenset()

    @property
    def resolved_encoding(self) -> str:
        return self.encoding or platform_encoding()

    def describe(self) -> str:
        return f"{self.target_project}:{self.target_namespace}/{self.file_name}"


@dataclass(frozen=True)
class GeneratedSourceArtifact(Artifact):
    @property
    def kind(self) -> ArtifactKind:
        stem = self.logical_name
        if stem.endswith(EXAMPLE_SUFFIX):
            return ArtifactKind.SOURCE_EXAMPLE
        if stem.endswith(MAPPER_SUFFIX):
            return ArtifactKind.SOURCE_EXTENSION_CANDIDATE
        return ArtifactKind.SOURCE_BASE

    @property
    def mergeable(self) -> bool:
        return True

    @property
    def preserve_tags(self) -> frozenset[str]:
        return GENERATED_ELEMENT_TAGS


@dataclass(frozen=True)
class GeneratedDescriptorArtifact(Artifact):
    is_mergeable: bool = True
    tags: frozenset[str] = field(default_factory=lambda: GENERATED_ELEMENT_TAGS)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "tags", frozenset(str(tag) for tag in self.tags))

    @property
    def kind(self) -> ArtifactKind:
        return ArtifactKind.DESCRIPTOR

    @property
    def mergeable(self) -> bool:
        return self.is_mergeable

    @property
    def preserve_tags(self) -> frozenset[str]:
        return self.tags

    @property
    def resolved_encoding(self) -> str:
        return self.encoding or DEFAULT_DESCRIPTOR_ENCODING
