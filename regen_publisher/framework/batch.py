"""Load a batch of generated artifacts from a YAML manifest.

The upstream generator writes formatted artifact bodies and a manifest:

    artifacts:
      - kind: source
        target_project: src/main/java
        target_namespace: com.acme.gen.model
        file_name: Order.java
        content_path: out/Order.java      # relative to the manifest, or `content:` inline
        encoding: UTF-8                   # optional
      - kind: descriptor
        target_project: src/main/resources
        target_namespace: com/acme/gen/persistence
        file_name: OrderMapper.xml
        content_path: out/OrderMapper.xml
        mergeable: true                   # optional, descriptors only
        preserve_tags: ["@mbg.generated"] # optional, descriptors only
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from regen_publisher.foundation.config_io import load_yaml_mapping
from regen_publisher.framework.artifacts import (
    GENERATED_ELEMENT_TAGS,
    Artifact,
    GeneratedDescriptorArtifact,
    GeneratedSourceArtifact,
)
from regen_publisher.framework.config import parse_bool

ARTIFACT_KINDS: tuple[str, ...] = ("source", "descriptor")

_COMMON_KEYS = frozenset(
    {"kind", "target_project", "target_namespace", "file_name", "content", "content_path", "encoding"}
)
_DESCRIPTOR_KEYS = frozenset({"mergeable", "preserve_tags"})


def _read_content(entry: Mapping[str, Any], *, base_dir: str, label: str) -> str:
    has_inline = "content" in entry
    has_path = "content_path" in entry
    if has_inline == has_path:
        raise ValueError(f"{label}: exactly one of 'content' or 'content_path' is required")

    encoding = entry.get("encoding") or "utf-8"
    if has_inline:
        content = entry.get("content")
        if not isinstance(content, str):
            raise ValueError(f"{label}: 'content' must be a string")
        return content

    raw_path = entry.get("content_path")
    if not isinstance(raw_path, str) or not raw_path.strip():
        raise ValueError(f"{label}: 'content_path' must be a non-empty string")
    path = raw_path.strip()
    if not os.path.isabs(path):
        path = os.path.join(base_dir, path)
    try:
        with open(path, "r", encoding=encoding, newline="") as handle:
            return handle.read()
    except FileNotFoundError as exc:
        raise ValueError(f"{label}: content file not found: {path}") from exc


def artifact_from_entry(entry: Any, *, base_dir: str, label: str) -> Artifact:
    if not isinstance(entry, Mapping):
        raise ValueError(f"{label}: artifact entry must be a mapping")

    kind = str(entry.get("kind", "")).strip().lower()
    if kind not in ARTIFACT_KINDS:
        raise ValueError(f"{label}: unknown artifact kind {entry.get('kind')!r} (expected one of {ARTIFACT_KINDS})")

    allowed = _COMMON_KEYS | (_DESCRIPTOR_KEYS if kind == "descriptor" else frozenset())
    unknown = sorted(str(key) for key in entry.keys() if key not in allowed)
    if unknown:
        raise ValueError(f"{label}: unknown keys for {kind} artifact: {', '.join(unknown)}")

    for key in ("target_project", "target_namespace", "file_name"):
        value = entry.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{label}: '{key}' must be a non-empty string")

    encoding = entry.get("encoding")
    if encoding is not None and (not isinstance(encoding, str) or not encoding.strip()):
        raise ValueError(f"{label}: 'encoding' must be a non-empty string when set")

    common = {
        "target_project": entry["target_project"],
        "target_namespace": entry["target_namespace"],
        "file_name": entry["file_name"],
        "formatted_content": _read_content(entry, base_dir=base_dir, label=label),
        "encoding": encoding,
    }
    if kind == "source":
        return GeneratedSourceArtifact(**common)

    tags_raw = entry.get("preserve_tags")
    if tags_raw is None:
        tags = GENERATED_ELEMENT_TAGS
    elif isinstance(tags_raw, (list, tuple)) and all(isinstance(tag, str) for tag in tags_raw):
        tags = frozenset(tags_raw)
    else:
        raise ValueError(f"{label}: 'preserve_tags' must be a list of strings")

    return GeneratedDescriptorArtifact(
        **common,
        is_mergeable=parse_bool(entry.get("mergeable", True), f"{label}.mergeable"),
        tags=tags,
    )


def load_batch(manifest_path: str) -> list[Artifact]:
    """Read every artifact listed in ``manifest_path``; content is loaded eagerly."""

    path = os.path.abspath(manifest_path)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Batch manifest not found: {path}")

    payload = load_yaml_mapping(path)
    entries = payload.get("artifacts")
    if not isinstance(entries, list):
        raise ValueError(f"Batch manifest {path} must contain an 'artifacts' list")

    base_dir = os.path.dirname(path)
    return [
        artifact_from_entry(entry, base_dir=base_dir, label=f"{os.path.basename(path)}: artifacts[{index}]")
        for index, entry in enumerate(entries)
    ]
