from __future__ import annotations

import logging
from typing import Iterable

from regen_publisher.framework.artifacts import Artifact
from regen_publisher.framework.config import PublishConfig
from regen_publisher.framework.conflicts import ConflictResolver
from regen_publisher.framework.errors import PublishCancelled, ShellError
from regen_publisher.framework.progress import NullProgressCallback, ProgressCallback
from regen_publisher.framework.registry import ArtifactRegistry
from regen_publisher.framework.results import PublishResult
from regen_publisher.framework.shell import (
    DefaultShellCallback,
    DescriptorMerger,
    FileSystem,
    LocalFileSystem,
    ShellCallback,
)
from regen_publisher.framework.split import SplitPublisher

logger = logging.getLogger(__name__)


class RunOrchestrator:
    """Drive one publishing pass over a batch of generated artifacts.

    The registry, warning list and touched-project set belong to this instance
    and are reset at the start of every pass; overlapping passes on the same
    instance are not supported. ``warnings`` holds the latest pass's warnings;
    each returned ``PublishResult`` keeps its own list.
    """

    def __init__(
        self,
        config: PublishConfig,
        shell: ShellCallback | None = None,
        warnings: list[str] | None = None,
        *,
        descriptor_merger: DescriptorMerger | None = None,
        fs: FileSystem | None = None,
    ):
        if config is None:
            raise ValueError("RunOrchestrator requires a PublishConfig")
        self.config = config
        self.shell = shell or DefaultShellCallback(
            config.output_root,
            overwrite=config.overwrite,
            create_projects=config.create_projects,
        )
        self.warnings = warnings if warnings is not None else []
        self.fs = fs or LocalFileSystem()
        self.registry = ArtifactRegistry()
        self.resolver = ConflictResolver(self.shell, self.fs, descriptor_merger=descriptor_merger)
        self._projects: list[str] = []

    def publish(
        self,
        batch: Iterable[Artifact],
        progress: ProgressCallback | None = None,
    ) -> PublishResult:
        callback = progress or NullProgressCallback()

        self.registry.clear()
        self.warnings.clear()
        self._projects = []
        for artifact in batch:
            self.registry.register(artifact)

        result = PublishResult(write_files=self.config.write_files)
        publisher = SplitPublisher(
            shell=self.shell,
            fs=self.fs,
            resolver=self.resolver,
            registry=self.registry,
            layout=self.config.layout,
            write_files=self.config.write_files,
            progress=callback,
        )

        ordered = self.registry.publish_order()
        logger.info(
            "Publishing %d artifact(s) (%d source, %d descriptor)%s",
            len(ordered),
            len(self.registry.sources()),
            len(self.registry.descriptors()),
            "" if self.config.write_files else " [dry run]",
        )
        callback.save_started(len(ordered))

        try:
            for artifact in ordered:
                callback.check_cancel()
                callback.start_task(f"Saving file {artifact.file_name}")
                if artifact.target_project not in self._projects:
                    self._projects.append(artifact.target_project)

                try:
                    if self.config.split_extensions:
                        publisher.publish(artifact, result)
                    else:
                        publisher.publish_plain(artifact, result)
                except ShellError as exc:
                    result.warnings.append(str(exc))
                    logger.warning("Skipped %s: %s", artifact.describe(), exc)
        except PublishCancelled as exc:
            result.cancelled = True
            result.projects = list(self._projects)
            self.warnings.extend(result.warnings)
            exc.result = result
            logger.warning(
                "Publish pass cancelled; %d file(s) already written remain", len(result.files)
            )
            raise

        result.projects = list(self._projects)
        self.warnings.extend(result.warnings)
        if self.config.write_files:
            for project in self._projects:
                self.shell.refresh_project(project)

        callback.done()
        logger.info(
            "Publish pass complete: %d file(s), %d existing extension(s) kept, %d warning(s)",
            len(result.files),
            len(result.skipped_extensions),
            len(result.warnings),
        )
        return result
