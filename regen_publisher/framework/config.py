from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from regen_publisher.framework.paths import MODEL_LEAF, PERSISTENCE_LEAF, SERVICE_LEAF


def parse_bool(value: Any, path: str) -> bool:
    """
    Strict boolean parsing to avoid bool('false') footguns.

    Accepts True/False, 0/1, and the strings true/false/1/0/yes/no
    (case-insensitive, surrounding whitespace ignored).
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"Invalid boolean for {path}: {value!r}")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes"}:
            return True
        if normalized in {"false", "0", "no"}:
            return False
    raise ValueError(f"Invalid boolean for {path}: {value!r}")


def parse_int(value: Any, path: str) -> int:
    if value is None:
        raise ValueError(f"Invalid config value for {path}: None")
    if isinstance(value, bool):
        raise ValueError(f"Invalid config type for {path}: expected int, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        if not value.strip():
            raise ValueError(f"Invalid config value for {path}: must be an int")
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ValueError(f"Invalid config value for {path}: must be an int") from exc
    raise ValueError(f"Invalid config type for {path}: expected int")


def parse_name(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"Invalid config type for {path}: expected string")
    name = value.strip()
    if not name:
        raise ValueError(f"Invalid config value for {path}: must be a non-empty string")
    if not name.replace("_", "a").isalnum():
        raise ValueError(f"Invalid config value for {path}: {value!r} is not an identifier")
    return name


_SCHEMA: Mapping[str, Any] = {
    "strict": None,
    "publish": {
        "output_root": None,
        "create_projects": None,
        "overwrite": None,
        "split_extensions": None,
        "write_files": None,
    },
    "layout": {
        "namespace_depth": None,
        "model_leaf": None,
        "persistence_leaf": None,
        "service_leaf": None,
        "base_suffix": None,
    },
    "logging": {"log_dir": None},
    "report": {"enabled": None},
}


def _collect_unknown_keys(mapping: Any, schema: Mapping[str, Any], *, prefix: str) -> list[str]:
    if not isinstance(mapping, Mapping):
        return []
    unknown: list[str] = []
    for key, value in mapping.items():
        if not isinstance(key, str):
            continue
        full = f"{prefix}.{key}" if prefix else key
        if key not in schema:
            unknown.append(full)
            continue
        subschema = schema.get(key)
        if isinstance(subschema, Mapping):
            unknown.extend(_collect_unknown_keys(value, subschema, prefix=full))
    return unknown


@dataclass(frozen=True)
class LayoutConfig:
    namespace_depth: int = 2
    model_leaf: str = MODEL_LEAF
    persistence_leaf: str = PERSISTENCE_LEAF
    service_leaf: str = SERVICE_LEAF
    base_suffix: str = "Base"


@dataclass(frozen=True)
class PublishConfig:
    output_root: str
    create_projects: bool = False
    overwrite: bool = False
    split_extensions: bool = True
    write_files: bool = True
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    log_dir: str = "logs"
    report_enabled: bool = True

    @staticmethod
    def from_dict(
        cfg: Mapping[str, Any],
        *,
        base_dir: str | None = None,
    ) -> tuple["PublishConfig", list[str]]:
        """
        Parse and validate configuration, returning (PublishConfig, warnings).

        Relative paths resolve against ``base_dir`` (default: the working
        directory). Unknown keys are warnings, or errors under ``strict: true``.

        Raises:
            ValueError: if a value is invalid.
        """

        if not isinstance(cfg, Mapping):
            raise ValueError("Config must be a mapping")

        warnings: list[str] = []
        strict_unknown_keys = False
        if "strict" in cfg:
            strict_unknown_keys = parse_bool(cfg.get("strict"), "strict")

        unknown_keys = sorted(set(_collect_unknown_keys(cfg, _SCHEMA, prefix="")))
        if unknown_keys:
            if strict_unknown_keys:
                raise ValueError("Unknown config keys: " + ", ".join(unknown_keys))
            warnings.extend(f"Unknown config key: {key}" for key in unknown_keys)

        root_dir = base_dir or os.getcwd()

        def normalize_path(value: Any, path: str) -> str:
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Invalid config value for {path}: must be a non-empty path")
            expanded = os.path.expandvars(os.path.expanduser(value.strip()))
            if not os.path.isabs(expanded):
                expanded = os.path.join(root_dir, expanded)
            return os.path.abspath(expanded)

        def get_mapping(key: str) -> Mapping[str, Any]:
            value = cfg.get(key)
            if value is None:
                return {}
            if not isinstance(value, Mapping):
                raise ValueError(f"Invalid config type for {key}: expected mapping")
            return value

        publish = get_mapping("publish")
        layout_raw = get_mapping("layout")
        logging_raw = get_mapping("logging")
        report_raw = get_mapping("report")

        defaults = LayoutConfig()
        depth = parse_int(
            layout_raw.get("namespace_depth", defaults.namespace_depth), "layout.namespace_depth"
        )
        if depth < 0:
            raise ValueError("Invalid config value for layout.namespace_depth: must be >= 0")

        layout = LayoutConfig(
            namespace_depth=depth,
            model_leaf=parse_name(layout_raw.get("model_leaf", defaults.model_leaf), "layout.model_leaf"),
            persistence_leaf=parse_name(
                layout_raw.get("persistence_leaf", defaults.persistence_leaf), "layout.persistence_leaf"
            ),
            service_leaf=parse_name(
                layout_raw.get("service_leaf", defaults.service_leaf), "layout.service_leaf"
            ),
            base_suffix=parse_name(
                layout_raw.get("base_suffix", defaults.base_suffix), "layout.base_suffix"
            ),
        )
        leaves = (layout.model_leaf, layout.persistence_leaf, layout.service_leaf)
        if len(set(leaves)) != len(leaves):
            raise ValueError(f"layout leaves must be distinct (got {list(leaves)})")

        write_files = parse_bool(publish.get("write_files", True), "publish.write_files")
        split_extensions = parse_bool(publish.get("split_extensions", True), "publish.split_extensions")
        if not split_extensions:
            warnings.append(
                "publish.split_extensions is disabled: generated files are written whole "
                "and extension scaffolds are not created"
            )

        log_dir = normalize_path(logging_raw.get("log_dir", "logs"), "logging.log_dir")

        return (
            PublishConfig(
                output_root=normalize_path(publish.get("output_root", "."), "publish.output_root"),
                create_projects=parse_bool(publish.get("create_projects", False), "publish.create_projects"),
                overwrite=parse_bool(publish.get("overwrite", False), "publish.overwrite"),
                split_extensions=split_extensions,
                write_files=write_files,
                layout=layout,
                log_dir=log_dir,
                report_enabled=parse_bool(report_raw.get("enabled", True), "report.enabled"),
            ),
            warnings,
        )
