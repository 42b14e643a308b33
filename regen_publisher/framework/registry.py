from __future__ import annotations

from typing import Iterable

from regen_publisher.framework.artifacts import Artifact, ArtifactKind


class ArtifactRegistry:
    """Artifacts produced in the current pass, indexed by logical name.

    Sources and descriptors are kept apart: a mapper interface and its
    descriptor share a logical name (``OrderMapper.java`` / ``OrderMapper.xml``)
    and lookups are almost always after the source.
    """

    def __init__(self, artifacts: Iterable[Artifact] = ()):
        self._sources: list[Artifact] = []
        self._descriptors: list[Artifact] = []
        for artifact in artifacts:
            self.register(artifact)

    def __len__(self) -> int:
        return len(self._sources) + len(self._descriptors)

    def clear(self) -> None:
        self._sources.clear()
        self._descriptors.clear()

    def register(self, artifact: Artifact) -> None:
        bucket = self._descriptors if artifact.kind is ArtifactKind.DESCRIPTOR else self._sources
        name = artifact.logical_name
        for existing in bucket:
            if existing.logical_name == name:
                raise ValueError(
                    f"Duplicate artifact logical name: {name} "
                    f"({existing.describe()} and {artifact.describe()})"
                )
        bucket.append(artifact)

    def find_by_logical_name(self, name: str, *, descriptors: bool = False) -> Artifact | None:
        bucket = self._descriptors if descriptors else self._sources
        for artifact in bucket:
            if artifact.logical_name == name:
                return artifact
        return None

    def sources(self) -> tuple[Artifact, ...]:
        return tuple(self._sources)

    def descriptors(self) -> tuple[Artifact, ...]:
        return tuple(self._descriptors)

    def publish_order(self) -> tuple[Artifact, ...]:
        # Descriptors go last so their model/mapper sources are already placed.
        return (*self._sources, *self._descriptors)
