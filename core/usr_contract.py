"""Declaration identity (USR) contract shared by the front-end and merge.

USRs follow the clang shape ``c:@N@ns@S@Widget@F@resize#int,int#`` closely
enough to stay readable, but are only ever compared for equality. Two
declarations parsed from semantically identical source must produce the
same USR; the merge engine deduplicates on nothing else.
"""

from __future__ import annotations

import re
from typing import Iterable, TypedDict

USR_PREFIX = "c:"
USR_SEPARATOR = "@"

USR_NAMESPACE = "N"
USR_ANONYMOUS_NAMESPACE = "aN"
USR_RECORD = "S"
USR_UNION = "U"
USR_ENUM = "E"
USR_CLASS_TEMPLATE = "ST"
USR_TYPEDEF = "T"
USR_TYPE_ALIAS = "TA"
USR_FUNCTION = "F"
USR_FUNCTION_TEMPLATE = "FT"
USR_FIELD = "FI"
USR_VARIABLE = "V"
USR_USING_DECLARATION = "UD"
USR_NAMESPACE_ALIAS = "NA"

_KNOWN_MARKERS = frozenset({
    USR_NAMESPACE,
    USR_ANONYMOUS_NAMESPACE,
    USR_RECORD,
    USR_UNION,
    USR_ENUM,
    USR_CLASS_TEMPLATE,
    USR_TYPEDEF,
    USR_TYPE_ALIAS,
    USR_FUNCTION,
    USR_FUNCTION_TEMPLATE,
    USR_FIELD,
    USR_VARIABLE,
    USR_USING_DECLARATION,
    USR_NAMESPACE_ALIAS,
})


class UsrComponent(TypedDict):
    """One scope step of a parsed USR."""

    marker: str
    name: str


_WHITESPACE_RE = re.compile(r"\s+")
_SCOPE_SEPARATOR_RE = re.compile(r"\s*::\s*")
_DESTRUCTOR_SPACING_RE = re.compile(r"::\s*~")
_PUNCTUATION_SPACING_RE = re.compile(r"\s*([*&,<>()\[\]])\s*")


def normalize_cpp_entity_name(entity_name: str) -> str:
    """Normalize C++ entity names into a canonical form.

    The goal is deterministic identity across parses when trivial
    whitespace variations occur.

    Args:
        entity_name: Raw entity name from parser output.

    Returns:
        Canonicalized entity name.
    """
    normalized = entity_name.strip()
    normalized = _SCOPE_SEPARATOR_RE.sub("::", normalized)
    normalized = _DESTRUCTOR_SPACING_RE.sub("::~", normalized)
    normalized = _WHITESPACE_RE.sub(" ", normalized)
    return normalized.strip()


def normalize_type_spelling(spelling: str) -> str:
    """Collapse a type spelling so ``const int &`` and ``const int&`` agree."""
    normalized = normalize_cpp_entity_name(spelling)
    normalized = _PUNCTUATION_SPACING_RE.sub(r"\1", normalized)
    return normalized


def make_usr(scope_usr: str, marker: str, name: str = "") -> str:
    """Append one ``@marker@name`` step to an enclosing scope USR.

    Args:
        scope_usr: USR of the enclosing scope; empty means global scope.
        marker: One of the ``USR_*`` markers.
        name: Declaration name; omitted for markers that carry none
            (anonymous namespaces).

    Example:
        >>> make_usr(make_usr("", USR_NAMESPACE, "app"), USR_RECORD, "Widget")
        'c:@N@app@S@Widget'
    """
    base = scope_usr or USR_PREFIX
    step = f"{USR_SEPARATOR}{marker}"
    canonical_name = normalize_cpp_entity_name(name)
    if canonical_name:
        step = f"{step}{USR_SEPARATOR}{canonical_name}"
    return f"{base}{step}"


def make_callable_usr(
    scope_usr: str,
    name: str,
    parameter_types: Iterable[str],
    is_const: bool = False,
    is_template: bool = False,
) -> str:
    """USR for a function or method, discriminated by its parameter types.

    Overloads differ in the ``#param,types#`` suffix; const member functions
    get an extra ``const`` token.
    """
    marker = USR_FUNCTION_TEMPLATE if is_template else USR_FUNCTION
    params = ",".join(normalize_type_spelling(p) for p in parameter_types)
    usr = f"{make_usr(scope_usr, marker, name)}#{params}#"
    if is_const:
        usr = f"{usr}const"
    return usr


def make_member_usr(owner_usr: str, name: str) -> str:
    """USR for entities identified through their owner (enumerators, params).

    Returns an empty USR when either side is missing, since such
    entities cannot be identified across translation units.
    """
    canonical_name = normalize_cpp_entity_name(name)
    if not owner_usr or not canonical_name:
        return ""
    return f"{owner_usr}{USR_SEPARATOR}{canonical_name}"


def parse_usr(usr: str) -> list[UsrComponent]:
    """Split a USR produced by ``make_usr`` into its scope steps.

    Callable suffixes (``#...#``) stay attached to the final name.

    Raises:
        ValueError: If ``usr`` does not carry the ``c:`` prefix.
    """
    if not usr.startswith(USR_PREFIX):
        raise ValueError(f"Malformed USR: {usr}")

    tokens = usr[len(USR_PREFIX):].split(USR_SEPARATOR)
    components: list[UsrComponent] = []
    index = 1
    while index < len(tokens):
        marker = tokens[index]
        if marker not in _KNOWN_MARKERS:
            # Member step appended by make_member_usr.
            components.append(UsrComponent(marker="", name=marker))
            index += 1
            continue
        if marker == USR_ANONYMOUS_NAMESPACE:
            components.append(UsrComponent(marker=marker, name=""))
            index += 1
            continue
        name = tokens[index + 1] if index + 1 < len(tokens) else ""
        components.append(UsrComponent(marker=marker, name=name))
        index += 2
    return components
