"""Manifest contract for the parse/merge/generate pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.startup_config import get_section

DEFAULT_INCLUSION = "exclude"


@dataclass(frozen=True)
class FilterSpec:
    """Raw ``filter`` section; names are resolved by ``FilterConfig``."""

    allowed_kinds: list[str] = field(default_factory=list)
    grab_tags: list[str] = field(default_factory=list)
    avoid_tags: list[str] = field(default_factory=list)
    child_node_inclusion: str = DEFAULT_INCLUSION
    parent_node_inclusion: str = DEFAULT_INCLUSION

    def to_mapping(self) -> dict[str, Any]:
        return {
            "allowed_kinds": list(self.allowed_kinds),
            "grab_tags": list(self.grab_tags),
            "avoid_tags": list(self.avoid_tags),
            "child_node_inclusion": self.child_node_inclusion,
            "parent_node_inclusion": self.parent_node_inclusion,
        }


@dataclass(frozen=True)
class GenerationManifest:
    """Top-level manifest payload."""

    name: str
    inputs: list[str]
    output: str = "output/generated.hpp"
    base_dir: str = "."
    continue_on_error: bool = True
    filter: FilterSpec = field(default_factory=FilterSpec)


def _expect_dict(payload: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"{ctx} must be an object")
    return payload


def _expect_string_list(payload: Any, ctx: str) -> list[str]:
    if payload is None:
        return []
    if isinstance(payload, str):
        payload = [payload]
    if not isinstance(payload, list):
        raise ValueError(f"{ctx} must be a list of strings")
    values = [str(item).strip() for item in payload]
    if any(not value for value in values):
        raise ValueError(f"{ctx} contains an empty entry")
    return values


def _load_manifest_payload(path: str) -> dict[str, Any]:
    manifest_path = Path(path)
    if not manifest_path.is_file():
        raise FileNotFoundError(f"Manifest file not found: {manifest_path}")

    text = manifest_path.read_text(encoding="utf-8")
    suffix = manifest_path.suffix.lower()
    if suffix == ".json":
        payload = json.loads(text)
    else:
        payload = yaml.safe_load(text)
    return _expect_dict(payload, "manifest")


def _parse_filter_spec(payload: dict[str, Any]) -> FilterSpec:
    return FilterSpec(
        allowed_kinds=_expect_string_list(payload.get("allowed_kinds"), "filter.allowed_kinds"),
        grab_tags=_expect_string_list(payload.get("grab_tags"), "filter.grab_tags"),
        avoid_tags=_expect_string_list(payload.get("avoid_tags"), "filter.avoid_tags"),
        child_node_inclusion=str(
            payload.get("child_node_inclusion", DEFAULT_INCLUSION)
        ).strip(),
        parent_node_inclusion=str(
            payload.get("parent_node_inclusion", DEFAULT_INCLUSION)
        ).strip(),
    )


def load_generation_manifest(path: str, strict: bool = False) -> GenerationManifest:
    """Load and validate a generation manifest from a YAML/JSON file.

    A ``filter`` section of the wrong type is ignored with a warning unless
    ``strict`` is set.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required fields are missing or malformed.
        ConfigValidationError: In strict mode, if ``filter`` is not a mapping.
    """
    payload = _load_manifest_payload(path)
    name = str(payload.get("name", "")).strip()
    if not name:
        raise ValueError("name is required")

    inputs = _expect_string_list(payload.get("inputs"), "inputs")
    if not inputs:
        raise ValueError("inputs must be a non-empty list")

    output = str(payload.get("output", "output/generated.hpp")).strip()
    if not output:
        raise ValueError("output must not be empty")

    filter_payload = get_section(payload, "filter", strict=strict)

    return GenerationManifest(
        name=name,
        inputs=inputs,
        output=output,
        base_dir=str(Path(path).resolve().parent),
        continue_on_error=bool(payload.get("continue_on_error", True)),
        filter=_parse_filter_spec(filter_payload),
    )


def resolve_manifest_path(manifest: GenerationManifest, raw_path: str) -> str:
    """Resolve an input/output path relative to the manifest's directory."""
    raw = Path(raw_path)
    if raw.is_absolute():
        return str(raw)
    return str(Path(manifest.base_dir) / raw)
