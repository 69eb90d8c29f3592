"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Mapping

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import TooldirConfig

ENV_PREFIX = "TOOLDIR__"


def resolve_with_precedence(
    *,
    defaults: TooldirConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> TooldirConfig:
    """Merge settings layers: defaults, then file, then environment, then CLI.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the YAML configuration file.
        env_overrides: Nested values extracted from ``TOOLDIR__`` variables.
        cli_overrides: Values supplied on the command line; keys may be dotted.

    Returns:
        TooldirConfig: Validated configuration.

    Raises:
        ConfigError: If an override layer is malformed or the merged values are invalid.
    """
    merged = deepcopy(defaults.model_dump(mode="python"))
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is None:
            continue
        merged = _deep_merge(merged, _normalize_mapping(source, source_name=name))

    try:
        return TooldirConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def _normalize_mapping(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in dict(source).items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        _assign(result, key.split("."), value, source_name=source_name)
    return result


def _assign(target: dict[str, Any], path: list[str], value: Any, *, source_name: str) -> None:
    node = target
    for segment in path[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise ConfigError(
                f"{source_name.capitalize()} override for {'.'.join(path)} "
                "conflicts with existing value."
            )
        node = existing
    leaf = path[-1]
    if isinstance(value, MappingABC):
        nested = _normalize_mapping(value, source_name=source_name)
        existing_leaf = node.get(leaf)
        if not isinstance(existing_leaf, MappingABC):
            existing_leaf = {}
        node[leaf] = _deep_merge(existing_leaf, nested)
    else:
        node[leaf] = value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ENV_PREFIX", "resolve_with_precedence"]
