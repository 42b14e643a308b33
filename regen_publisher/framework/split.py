"""Generate-once extension split.

Each split-capable artifact produces a *base* file that is rewritten on every
run, plus *extension* files that are created once and then belong to the user:

- model ``Order``            -> ``OrderBase`` (base) + ``<parent>.model.Order`` (extension)
- mapper ``OrderMapper``     -> ``OrderMapperBase`` (base)
                                + ``<parent>.persistence.OrderMapper`` (extension)
                                + ``<parent>.service.OrderService`` (extension)
- descriptor ``OrderMapper`` -> ``OrderMapperBase`` (base)
                                + ``OrderMapper`` at the persistence sibling (extension)
- example ``OrderExample``   -> written as generated, every run

Extension files are created with an exclusive open; an existing one is never
read, rewritten or removed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from regen_publisher.framework import scaffolds
from regen_publisher.framework.artifacts import MAPPER_SUFFIX, Artifact, ArtifactKind
from regen_publisher.framework.config import LayoutConfig
from regen_publisher.framework.conflicts import ConflictResolver
from regen_publisher.framework.paths import (
    model_name_for,
    parent_namespace,
    qualified_name,
    sibling_namespace,
)
from regen_publisher.framework.progress import NullProgressCallback, ProgressCallback
from regen_publisher.framework.registry import ArtifactRegistry
from regen_publisher.framework.results import FileRole, PublishedFile, PublishResult
from regen_publisher.framework.rewrite import (
    ModelMove,
    ReferenceRewriter,
    descriptor_rules,
    mapper_rules,
    model_rules,
)
from regen_publisher.framework.shell import FileSystem, ShellCallback

logger = logging.getLogger(__name__)


class SplitPublisher:
    def __init__(
        self,
        *,
        shell: ShellCallback,
        fs: FileSystem,
        resolver: ConflictResolver,
        registry: ArtifactRegistry,
        layout: LayoutConfig,
        write_files: bool = True,
        progress: ProgressCallback | None = None,
    ):
        self.shell = shell
        self.fs = fs
        self.resolver = resolver
        self.registry = registry
        self.layout = layout
        self.write_files = write_files
        self.progress = progress or NullProgressCallback()

    def publish(self, artifact: Artifact, result: PublishResult) -> None:
        kind = artifact.kind
        if kind is ArtifactKind.SOURCE_BASE:
            self._publish_model(artifact, result)
        elif kind is ArtifactKind.SOURCE_EXTENSION_CANDIDATE:
            self._publish_mapper(artifact, result)
        elif kind is ArtifactKind.SOURCE_EXAMPLE:
            directory = self.shell.get_directory(artifact.target_project, artifact.target_namespace)
            self._write_base(
                directory / artifact.file_name,
                artifact.formatted_content,
                artifact,
                result,
            )
        elif artifact.logical_name.endswith(MAPPER_SUFFIX):
            self._publish_descriptor(artifact, result)
        else:
            self.publish_plain(artifact, result)

    def publish_plain(self, artifact: Artifact, result: PublishResult) -> None:
        """Write the artifact under its generated name, resolving any conflict."""

        self.progress.check_cancel()

        directory = self.shell.get_directory(artifact.target_project, artifact.target_namespace)
        decision = self.resolver.resolve(artifact, directory / artifact.file_name)
        if decision.warning:
            result.warnings.append(decision.warning)
            logger.warning("%s", decision.warning)
        if self.write_files:
            self.fs.write(decision.path, decision.content, artifact.resolved_encoding)
        result.files.append(
            PublishedFile(decision.path, FileRole.PLAIN, artifact.logical_name, decision.kind.value)
        )

    def _publish_model(self, artifact: Artifact, result: PublishResult) -> None:
        layout = self.layout
        model_name = model_name_for(artifact.file_name)
        base_name = model_name + layout.base_suffix
        parent = parent_namespace(artifact.target_namespace, layout.namespace_depth)
        extension_namespace = sibling_namespace(parent, layout.model_leaf)

        content = ReferenceRewriter(model_rules(model_name, base_name)).apply(artifact.formatted_content)
        directory = self.shell.get_directory(artifact.target_project, artifact.target_namespace)
        self._write_base(directory / f"{base_name}{artifact.extension}", content, artifact, result)

        scaffold = scaffolds.model_extension(
            package=extension_namespace,
            model_name=model_name,
            base_name=base_name,
            base_qualified=qualified_name(artifact.target_namespace, base_name),
        )
        extension_dir = self.shell.get_directory(artifact.target_project, extension_namespace)
        self._write_extension(
            extension_dir / f"{model_name}{artifact.extension}", scaffold, artifact, result
        )

    def _publish_mapper(self, artifact: Artifact, result: PublishResult) -> None:
        layout = self.layout
        model_name = model_name_for(artifact.file_name)
        mapper_name = artifact.logical_name
        mapper_base_name = mapper_name + layout.base_suffix
        parent = parent_namespace(artifact.target_namespace, layout.namespace_depth)
        persistence_namespace = sibling_namespace(parent, layout.persistence_leaf)
        service_namespace = sibling_namespace(parent, layout.service_leaf)

        if self.registry.find_by_logical_name(model_name) is None:
            self._missing_reference(model_name, artifact, result)

        rewriter = ReferenceRewriter(
            mapper_rules(
                mapper_name=mapper_name,
                mapper_base_name=mapper_base_name,
                mapper_namespace=artifact.target_namespace,
                models=self._model_moves(),
            )
        )
        directory = self.shell.get_directory(artifact.target_project, artifact.target_namespace)
        self._write_base(
            directory / f"{mapper_base_name}{artifact.extension}",
            rewriter.apply(artifact.formatted_content),
            artifact,
            result,
        )

        service = scaffolds.service_facade(
            package=service_namespace,
            model_name=model_name,
            mapper_name=mapper_name,
            mapper_qualified=qualified_name(persistence_namespace, mapper_name),
        )
        service_dir = self.shell.get_directory(artifact.target_project, service_namespace)
        self._write_extension(
            service_dir / f"{model_name}Service{artifact.extension}", service, artifact, result
        )

        extension = scaffolds.mapper_extension(
            package=persistence_namespace,
            mapper_name=mapper_name,
            base_name=mapper_base_name,
            base_qualified=qualified_name(artifact.target_namespace, mapper_base_name),
            model_name=model_name,
        )
        extension_dir = self.shell.get_directory(artifact.target_project, persistence_namespace)
        self._write_extension(
            extension_dir / f"{mapper_name}{artifact.extension}", extension, artifact, result
        )

    def _publish_descriptor(self, artifact: Artifact, result: PublishResult) -> None:
        layout = self.layout
        mapper_name = artifact.logical_name
        mapper = self.registry.find_by_logical_name(mapper_name)
        if mapper is None:
            self._missing_reference(mapper_name, artifact, result)
            self.publish_plain(artifact, result)
            return

        model_name = model_name_for(artifact.file_name)
        if self.registry.find_by_logical_name(model_name) is None:
            self._missing_reference(model_name, artifact, result)

        parent = parent_namespace(mapper.target_namespace, layout.namespace_depth)
        persistence_namespace = sibling_namespace(parent, layout.persistence_leaf)
        rewriter = ReferenceRewriter(
            descriptor_rules(
                mapper_name=mapper_name,
                mapper_namespace=mapper.target_namespace,
                mapper_target_namespace=persistence_namespace,
                models=self._model_moves(),
            )
        )
        directory = self.shell.get_directory(artifact.target_project, artifact.target_namespace)
        self._write_base(
            directory / f"{mapper_name}{layout.base_suffix}{artifact.extension}",
            rewriter.apply(artifact.formatted_content),
            artifact,
            result,
        )

        descriptor_parent = parent_namespace(artifact.target_namespace, layout.namespace_depth)
        extension_dir = self.shell.get_directory(
            artifact.target_project,
            sibling_namespace(descriptor_parent, layout.persistence_leaf),
        )
        scaffold = scaffolds.descriptor_root(
            namespace=qualified_name(persistence_namespace, mapper_name),
            encoding=artifact.resolved_encoding,
        )
        self._write_extension(
            extension_dir / f"{mapper_name}{artifact.extension}", scaffold, artifact, result
        )

    def _model_moves(self) -> list[ModelMove]:
        """Every model in the batch, with the namespace its extension class lands in."""

        layout = self.layout
        moves: list[ModelMove] = []
        for source in self.registry.sources():
            if source.kind is not ArtifactKind.SOURCE_BASE:
                continue
            parent = parent_namespace(source.target_namespace, layout.namespace_depth)
            moves.append(
                ModelMove(
                    namespace=source.target_namespace,
                    name=model_name_for(source.file_name),
                    target_namespace=sibling_namespace(parent, layout.model_leaf),
                )
            )
        return moves

    def _missing_reference(self, name: str, artifact: Artifact, result: PublishResult) -> None:
        warning = (
            f"{name} is referenced by {artifact.file_name} but is not part of this batch; "
            "its references were left unchanged"
        )
        result.warnings.append(warning)
        logger.warning("%s", warning)

    def _write_base(self, path: Path, content: str, artifact: Artifact, result: PublishResult) -> None:
        self.progress.check_cancel()
        decision = self.resolver.resolve_machine_owned(path, content)
        if self.write_files:
            self.fs.write(decision.path, decision.content, artifact.resolved_encoding)
        logger.debug("Base file %s (%s)", decision.path, decision.kind.value)
        result.files.append(
            PublishedFile(decision.path, FileRole.BASE, artifact.logical_name, decision.kind.value)
        )

    def _write_extension(self, path: Path, content: str, artifact: Artifact, result: PublishResult) -> None:
        self.progress.check_cancel()
        if self.write_files:
            created = self.fs.write_once(path, content, artifact.resolved_encoding)
        else:
            created = not self.fs.exists(path)

        if not created:
            logger.info("%s exists; leaving it untouched", Path(path).absolute())
            result.skipped_extensions.append(Path(path))
            return

        logger.info("Created extension scaffold %s", path)
        result.files.append(
            PublishedFile(Path(path), FileRole.EXTENSION, artifact.logical_name, "created")
        )
