"""Load MewsConfig from mews.yaml / mews.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path

import yaml

from mews._errors import ConfigError
from mews.config import CollectionConfig, MewsConfig

_TOP_LEVEL_KEYS = frozenset({
    "output", "content_dir", "templates_dir", "plugins_dir", "plugins",
    "encoding", "report_timings", "site",
})


def load_config(root: Path, **overrides: object) -> MewsConfig:
    """Load MewsConfig from root, optionally merging mews.yaml.

    Looks for mews.yaml, mews.yml, or mews.toml in root. If found, loads
    and merges with overrides. Overrides take precedence; ``None`` overrides
    are ignored so unset CLI flags do not mask file values.

    Raises:
        ConfigError: If a config file exists but cannot be parsed.

    """
    file_config, collections = _read_mews_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    if "plugins" in merged:
        merged["plugins"] = tuple(merged["plugins"])  # type: ignore[arg-type]
    return MewsConfig(root=root, collections=collections, **merged)  # type: ignore[arg-type]


def _read_mews_config(root: Path) -> tuple[dict[str, object], tuple[CollectionConfig, ...]]:
    """Read mews config from yaml/toml if present. Returns empty values otherwise."""
    for name in ("mews.yaml", "mews.yml"):
        path = root / name
        if path.is_file():
            return _split_sections(_parse_yaml(path), path)
    toml_path = root / "mews.toml"
    if toml_path.is_file():
        return _split_sections(_parse_toml(toml_path), toml_path)
    return {}, ()


def _parse_yaml(path: Path) -> object:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc


def _parse_toml(path: Path) -> object:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc


def _split_sections(
    data: object, path: Path,
) -> tuple[dict[str, object], tuple[CollectionConfig, ...]]:
    """Separate top-level settings from the ``collections`` section."""
    if not isinstance(data, Mapping):
        msg = f"{path}: top level must be a mapping"
        raise ConfigError(msg)

    settings = {k: v for k, v in data.items() if k in _TOP_LEVEL_KEYS}

    raw_collections = data.get("collections") or {}
    if not isinstance(raw_collections, Mapping):
        msg = f"{path}: 'collections' must be a mapping of name -> settings"
        raise ConfigError(msg)

    collections = tuple(
        CollectionConfig.from_mapping(name, {} if section is None else section)
        for name, section in raw_collections.items()
    )
    return settings, collections
