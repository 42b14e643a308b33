"""Namespace arithmetic and target file naming.

Source namespaces are dotted (``com.acme.gen.model``); descriptor target folders
may be slash separated (``mappers/gen``). Both are handled as a list of segments
plus the separator to rejoin them with.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from regen_publisher.framework.artifacts import EXAMPLE_SUFFIX, MAPPER_SUFFIX, strip_format_suffix
from regen_publisher.framework.errors import MalformedNamespace, NameSpaceExhausted

UNIQUE_NAME_ATTEMPTS = 1000

MODEL_LEAF = "model"
PERSISTENCE_LEAF = "persistence"
SERVICE_LEAF = "service"


def split_namespace(namespace: str) -> tuple[list[str], str]:
    if "/" in namespace or "\\" in namespace:
        separator = "/"
        raw = namespace.replace("\\", "/").split("/")
    else:
        separator = "."
        raw = namespace.split(".")
    return [part for part in raw if part], separator


def parent_namespace(namespace: str, levels: int) -> str:
    if levels < 0:
        raise MalformedNamespace(namespace, levels)
    parts, separator = split_namespace(namespace)
    if len(parts) <= levels:
        raise MalformedNamespace(namespace, levels)
    return separator.join(parts[: len(parts) - levels])


def sibling_namespace(parent: str, leaf: str) -> str:
    if not leaf or not leaf.strip():
        raise ValueError("Sibling namespace leaf cannot be empty")
    parts, separator = split_namespace(parent)
    return separator.join([*parts, leaf.strip()])


def qualified_name(namespace: str, name: str) -> str:
    """Dotted type reference; descriptor folders never appear in type names."""
    parts, _separator = split_namespace(namespace)
    return ".".join([*parts, name])


def unique_name(
    directory: Path,
    file_name: str,
    *,
    exists: Callable[[Path], bool] | None = None,
) -> Path:
    taken = exists or (lambda path: path.exists())
    for index in range(1, UNIQUE_NAME_ATTEMPTS):
        candidate = Path(directory) / f"{file_name}.{index}"
        if not taken(candidate):
            return candidate
    raise NameSpaceExhausted(str(Path(directory).absolute()), file_name, UNIQUE_NAME_ATTEMPTS)


def model_name_for(file_name: str) -> str:
    """``OrderMapper.java`` -> ``Order``; ``OrderExample.java`` -> ``Order``."""
    stem = strip_format_suffix(file_name)
    for suffix in (MAPPER_SUFFIX, EXAMPLE_SUFFIX):
        if stem.endswith(suffix) and len(stem) > len(suffix):
            return stem[: -len(suffix)]
    return stem


def lower_camel(name: str) -> str:
    if not name:
        return name
    return name[0].lower() + name[1:]
