from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from regen_publisher.framework.artifacts import Artifact, ArtifactKind
from regen_publisher.framework.errors import MergeError
from regen_publisher.framework.paths import unique_name
from regen_publisher.framework.shell import DescriptorMerger, FileSystem, ShellCallback

logger = logging.getLogger(__name__)


class DispositionKind(str, Enum):
    FRESH = "fresh"
    MERGED = "merged"
    OVERWRITE = "overwrite"
    RENAMED = "renamed"


@dataclass(frozen=True)
class MergeInput:
    existing_path: Path
    preserve_tags: frozenset[str]


@dataclass(frozen=True)
class DispositionDecision:
    kind: DispositionKind
    path: Path
    content: str
    merge_input: MergeInput | None = None
    warning: str | None = None


class ConflictResolver:
    """Decide how one generated file lands on disk.

    Precedence for an existing target: merge, then overwrite (with a warning),
    then a unique alternate name (with a warning). Nothing is written here.
    """

    def __init__(
        self,
        shell: ShellCallback,
        fs: FileSystem,
        *,
        descriptor_merger: DescriptorMerger | None = None,
    ):
        self.shell = shell
        self.fs = fs
        self.descriptor_merger = descriptor_merger

    def can_merge(self, artifact: Artifact) -> bool:
        if not artifact.mergeable:
            return False
        if artifact.kind is ArtifactKind.DESCRIPTOR:
            return self.descriptor_merger is not None
        return self.shell.is_merge_supported()

    def resolve(self, artifact: Artifact, path: Path, content: str | None = None) -> DispositionDecision:
        text = artifact.formatted_content if content is None else content
        target = Path(path)

        if not self.fs.exists(target):
            return DispositionDecision(DispositionKind.FRESH, target, text)

        if self.can_merge(artifact):
            merge_input = MergeInput(existing_path=target, preserve_tags=artifact.preserve_tags)
            merged = self._merge(artifact, text, merge_input)
            logger.info("Merged generated content into existing file %s", target.absolute())
            return DispositionDecision(DispositionKind.MERGED, target, merged, merge_input=merge_input)

        if self.shell.is_overwrite_enabled():
            warning = f"Existing file {target.absolute()} was overwritten"
            return DispositionDecision(DispositionKind.OVERWRITE, target, text, warning=warning)

        renamed = unique_name(target.parent, target.name, exists=self.fs.exists)
        warning = (
            f"Existing file {target.absolute()} was not overwritten; "
            f"generated file was saved as {renamed.absolute()}"
        )
        return DispositionDecision(DispositionKind.RENAMED, renamed, text, warning=warning)

    def resolve_machine_owned(self, path: Path, content: str) -> DispositionDecision:
        """Base-role files are rewritten every run, silently."""
        target = Path(path)
        if self.fs.exists(target):
            return DispositionDecision(DispositionKind.OVERWRITE, target, content)
        return DispositionDecision(DispositionKind.FRESH, target, content)

    def _merge(self, artifact: Artifact, content: str, merge_input: MergeInput) -> str:
        try:
            if artifact.kind is ArtifactKind.DESCRIPTOR:
                assert self.descriptor_merger is not None
                return self.descriptor_merger.merged_source(artifact, merge_input.existing_path)
            return self.shell.merge_source(
                content,
                merge_input.existing_path,
                merge_input.preserve_tags,
                artifact.resolved_encoding,
            )
        except MergeError:
            raise
        except (OSError, ValueError, UnicodeError) as exc:
            raise MergeError(
                f"Merge of {merge_input.existing_path.absolute()} failed: {exc}"
            ) from exc
