"""Core shared contracts and utilities."""

from core.usr_contract import (
    USR_PREFIX,
    make_callable_usr,
    make_member_usr,
    make_usr,
    normalize_cpp_entity_name,
    normalize_type_spelling,
    parse_usr,
)
from core.structured_logging import (
    configure_structured_logging,
    get_current_stage,
    get_current_unit,
    get_run_id,
    set_run_id,
    stage_scope,
    unit_scope,
)
from core.startup_config import (
    ConfigValidationError,
    get_section,
    resolve_log_level,
    resolve_strict_config_validation,
)
from core.generation_manifest import (
    FilterSpec,
    GenerationManifest,
    load_generation_manifest,
    resolve_manifest_path,
)

__all__ = [
    "USR_PREFIX",
    "make_callable_usr",
    "make_member_usr",
    "make_usr",
    "normalize_cpp_entity_name",
    "normalize_type_spelling",
    "parse_usr",
    "configure_structured_logging",
    "get_current_stage",
    "get_current_unit",
    "get_run_id",
    "set_run_id",
    "stage_scope",
    "unit_scope",
    "ConfigValidationError",
    "get_section",
    "resolve_log_level",
    "resolve_strict_config_validation",
    "FilterSpec",
    "GenerationManifest",
    "load_generation_manifest",
    "resolve_manifest_path",
]
