"""Collaborators at the filesystem / host-environment boundary.

Everything the publisher knows about disk state goes through `FileSystem`, so
tests can simulate "already exists" without touching real files. The
`ShellCallback` is the host environment (a build tool, an IDE) that owns
directory layout, source merging, and refresh notifications.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from regen_publisher.framework.artifacts import Artifact
from regen_publisher.framework.errors import MergeError, ShellError
from regen_publisher.framework.paths import split_namespace

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    def exists(self, path: Path) -> bool: ...

    def write(self, path: Path, content: str, encoding: str) -> None: ...

    def write_once(self, path: Path, content: str, encoding: str) -> bool:
        """Create ``path`` only if absent; return False when it already existed."""
        ...


class LocalFileSystem:
    """Content is encoded before the file is opened."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    @staticmethod
    def _encode(target: Path, content: str, encoding: str) -> bytes:
        try:
            return content.encode(encoding)
        except (LookupError, UnicodeError) as exc:
            raise ShellError(f"Cannot encode {target.absolute()} as {encoding}: {exc}") from exc

    def write(self, path: Path, content: str, encoding: str) -> None:
        target = Path(path)
        data = self._encode(target, content, encoding)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as handle:
                handle.write(data)
        except OSError as exc:
            raise ShellError(f"Failed to write {target.absolute()}: {exc}") from exc

    def write_once(self, path: Path, content: str, encoding: str) -> bool:
        target = Path(path)
        data = self._encode(target, content, encoding)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            handle = open(target, "xb")
        except FileExistsError:
            return False
        except OSError as exc:
            raise ShellError(f"Failed to create {target.absolute()}: {exc}") from exc

        try:
            with handle:
                handle.write(data)
        except OSError as exc:
            # No partial scaffold may survive.
            target.unlink(missing_ok=True)
            raise ShellError(f"Failed to create {target.absolute()}: {exc}") from exc
        return True


class ShellCallback(Protocol):
    def get_directory(self, target_project: str, target_namespace: str) -> Path: ...

    def is_merge_supported(self) -> bool: ...

    def merge_source(
        self,
        new_content: str,
        existing_path: Path,
        preserve_tags: frozenset[str],
        encoding: str,
    ) -> str: ...

    def is_overwrite_enabled(self) -> bool: ...

    def refresh_project(self, target_project: str) -> None: ...


class DescriptorMerger(Protocol):
    def merged_source(self, artifact: Artifact, existing_path: Path) -> str: ...


class DefaultShellCallback:
    """Resolve projects beneath ``output_root``; no merge support."""

    def __init__(
        self,
        output_root: str | os.PathLike[str] = ".",
        *,
        overwrite: bool = False,
        create_projects: bool = False,
    ):
        self.output_root = Path(output_root)
        self.overwrite = overwrite
        self.create_projects = create_projects
        self.refreshed: list[str] = []

    def get_directory(self, target_project: str, target_namespace: str) -> Path:
        project_dir = self.output_root / target_project
        if not project_dir.is_dir():
            if project_dir.exists() or not self.create_projects:
                raise ShellError(
                    f"The specified target project directory {project_dir.absolute()} does not exist"
                )
            try:
                project_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ShellError(
                    f"Cannot create project directory {project_dir.absolute()}: {exc}"
                ) from exc

        directory = project_dir.joinpath(*split_namespace(target_namespace)[0])
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ShellError(f"Cannot create directory {directory.absolute()}: {exc}") from exc
        return directory

    def is_merge_supported(self) -> bool:
        return False

    def merge_source(
        self,
        new_content: str,
        existing_path: Path,
        preserve_tags: frozenset[str],
        encoding: str,
    ) -> str:
        raise MergeError("DefaultShellCallback does not merge source files")

    def is_overwrite_enabled(self) -> bool:
        return self.overwrite

    def refresh_project(self, target_project: str) -> None:
        self.refreshed.append(target_project)
        logger.info("Project %s changed; refresh requested", target_project)
