from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

import yaml

DEFAULT_CONFIG_ENV_VAR = "REGEN_PUBLISHER_CONFIG"
LOCAL_OVERLAY_NAME = "config.local.yaml"
ROOT_MARKERS = ("pyproject.toml", ".git")


def find_repo_root(
    start: str | os.PathLike[str] | None = None,
    *,
    markers: tuple[str, ...] = ROOT_MARKERS,
) -> str:
    """Nearest directory at or above ``start`` that holds one of ``markers``."""

    origin = os.fspath(start) if start is not None else os.getcwd()
    current = os.path.realpath(origin)
    if os.path.isfile(current):
        current = os.path.dirname(current)

    while not any(os.path.exists(os.path.join(current, marker)) for marker in markers):
        parent = os.path.dirname(current)
        if parent == current:
            raise FileNotFoundError(
                f"No project root above {origin}: none of {', '.join(markers)} found"
            )
        current = parent
    return current


def load_yaml_mapping(path: str) -> dict[str, Any]:
    """Read a YAML file that must hold a mapping (an empty file reads as {})."""

    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"YAML file must contain a mapping: {path}")
    return dict(payload)


def _shape(value: Any) -> str:
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, (list, tuple)):
        return "list"
    return "scalar"


def deep_merge(base: Any, overlay: Any, *, path: str = "") -> Any:
    """Apply a local overlay on top of base settings.

    Mappings merge key by key; lists and scalars are replaced wholesale, and an
    explicit ``None`` clears the base value. Replacing one shape with another is
    a ``ValueError`` naming the dotted key.
    """

    if overlay is None or base is None:
        return overlay

    base_shape = _shape(base)
    overlay_shape = _shape(overlay)
    if base_shape != overlay_shape:
        raise ValueError(
            f"Invalid config overlay merge at {path or '<root>'}: "
            f"cannot replace a {base_shape} with a {overlay_shape}"
        )
    if base_shape == "list":
        return list(overlay)
    if base_shape == "scalar":
        return overlay

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        child = f"{path}.{key}" if path else str(key)
        merged[key] = deep_merge(base[key], value, path=child) if key in base else value
    return merged


def load_config(
    *,
    config_path: str | os.PathLike[str] | None = None,
    env_var: str | None = DEFAULT_CONFIG_ENV_VAR,
    config_dir: str | os.PathLike[str] = "config",
    config_name: str = "config.yaml",
    start_dir: str | os.PathLike[str] | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Load publisher settings from YAML.

    Resolution order:
      1. ``config_path`` (single file, no overlay)
      2. the ``env_var`` environment variable (single file, no overlay)
      3. ``<config_dir>/<config_name>`` plus an optional ``config.local.yaml``
         overlay; a relative ``config_dir`` is resolved against the repo root.

    Returns ``(cfg, meta)`` where ``meta`` records which files were read.
    """

    explicit_path = None
    if config_path is not None:
        explicit_path = str(config_path).strip() or None
    elif env_var:
        explicit_path = os.environ.get(env_var, "").strip() or None

    if explicit_path:
        expanded = os.path.abspath(os.path.expandvars(os.path.expanduser(explicit_path)))
        cfg = load_yaml_mapping(expanded)
        meta = {
            "mode": "explicit" if config_path is not None else "env",
            "paths": [expanded],
            "env_var": env_var,
            "repo_root": None,
        }
        return cfg, meta

    if os.path.isabs(str(config_dir)):
        directory = str(config_dir)
        repo_root = None
    else:
        repo_root = find_repo_root(start_dir)
        directory = os.path.join(repo_root, str(config_dir))

    base_path = os.path.join(directory, config_name)
    overlay_path = os.path.join(directory, LOCAL_OVERLAY_NAME)

    if not os.path.exists(base_path):
        raise FileNotFoundError(f"Missing base config file: {base_path}")

    cfg = load_yaml_mapping(base_path)
    loaded_paths = [os.path.abspath(base_path)]
    mode = "base"

    if os.path.exists(overlay_path):
        cfg = deep_merge(cfg, load_yaml_mapping(overlay_path))
        loaded_paths.append(os.path.abspath(overlay_path))
        mode = "base+local"

    meta = {"mode": mode, "paths": loaded_paths, "env_var": env_var, "repo_root": repo_root}
    return cfg, meta
