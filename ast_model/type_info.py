"""Type descriptors attached to declarations."""

from __future__ import annotations

import re
from dataclasses import dataclass

_WHITESPACE_RE = re.compile(r"\s+")
_ARRAY_RE = re.compile(
    r"^(?P<element>[^\[]*?)\s*\[\s*(?P<size>[^\]]*?)\s*\](?P<inner>(?:\s*\[[^\]]*\])*)$"
)
_FUNCTION_POINTER_RE = re.compile(r"\(\s*[\w:]*\s*\*\s*\w*\s*\)\s*\(")
_QUALIFIER_WORDS = ("const", "volatile", "restrict", "__restrict")

INTEGRAL_TYPES = frozenset({
    "bool",
    "char",
    "signed char",
    "unsigned char",
    "char8_t",
    "char16_t",
    "char32_t",
    "wchar_t",
    "short",
    "short int",
    "signed short",
    "signed short int",
    "unsigned short",
    "unsigned short int",
    "int",
    "signed",
    "signed int",
    "unsigned",
    "unsigned int",
    "long",
    "long int",
    "signed long",
    "signed long int",
    "unsigned long",
    "unsigned long int",
    "long long",
    "long long int",
    "signed long long",
    "signed long long int",
    "unsigned long long",
    "unsigned long long int",
    "int8_t",
    "int16_t",
    "int32_t",
    "int64_t",
    "uint8_t",
    "uint16_t",
    "uint32_t",
    "uint64_t",
    "size_t",
    "ptrdiff_t",
    "intptr_t",
    "uintptr_t",
})

FLOATING_POINT_TYPES = frozenset({"float", "double", "long double"})


def _normalize_spelling(spelling: str) -> str:
    return _WHITESPACE_RE.sub(" ", spelling).strip()


def _split_trailing_qualifiers(spelling: str) -> tuple[str, set[str]]:
    """Peel qualifier words off the end of ``spelling``."""
    words = spelling.split(" ")
    qualifiers: set[str] = set()
    while len(words) > 1 and words[-1] in _QUALIFIER_WORDS:
        qualifiers.add(words.pop())
    return " ".join(words), qualifiers


@dataclass(frozen=True)
class TypeInfo:
    """Describes the type of a declaration.

    Flags refer to the top-level type: ``const char *`` is a non-const
    pointer whose pointee is ``const char``. Sizes are -1 when unknown.
    """

    spelling: str = ""
    canonical: str = ""
    is_const: bool = False
    is_volatile: bool = False
    is_restrict: bool = False
    is_pointer: bool = False
    is_reference: bool = False
    is_lvalue_reference: bool = False
    is_rvalue_reference: bool = False
    is_array: bool = False
    is_function_pointer: bool = False
    pointee_type: str = ""
    array_element_type: str = ""
    array_size: int = -1
    size_bytes: int = -1
    alignment: int = -1

    @classmethod
    def from_spelling(cls, spelling: str, canonical: str = "") -> TypeInfo:
        """Derive a descriptor from a type spelling.

        Only syntactic facts are recovered: qualifiers, pointer, reference,
        array and function-pointer shape. Sizes stay unknown.

        Example:
            >>> info = TypeInfo.from_spelling("const std::string &")
            >>> info.is_lvalue_reference, info.pointee_type
            (True, 'const std::string')
        """
        text = _normalize_spelling(spelling)
        canonical_text = _normalize_spelling(canonical)
        if not text:
            return cls()

        if _FUNCTION_POINTER_RE.search(text):
            return cls(
                spelling=text,
                canonical=canonical_text,
                is_pointer=True,
                is_function_pointer=True,
            )

        if text.endswith("&"):
            rvalue = text.endswith("&&")
            pointee = text[:-2] if rvalue else text[:-1]
            return cls(
                spelling=text,
                canonical=canonical_text,
                is_reference=True,
                is_lvalue_reference=not rvalue,
                is_rvalue_reference=rvalue,
                pointee_type=pointee.strip(),
            )

        array_match = _ARRAY_RE.match(text)
        if array_match:
            size_text = array_match.group("size")
            return cls(
                spelling=text,
                canonical=canonical_text,
                is_array=True,
                array_element_type=(
                    array_match.group("element").strip() + array_match.group("inner").strip()
                ),
                array_size=int(size_text) if size_text.isdigit() else -1,
            )

        base, qualifiers = _split_trailing_qualifiers(text)
        if base.endswith("*"):
            return cls(
                spelling=text,
                canonical=canonical_text,
                is_pointer=True,
                is_const="const" in qualifiers,
                is_volatile="volatile" in qualifiers,
                is_restrict=bool(qualifiers & {"restrict", "__restrict"}),
                pointee_type=base[:-1].strip(),
            )

        words = set(text.split(" "))
        return cls(
            spelling=text,
            canonical=canonical_text,
            is_const="const" in words,
            is_volatile="volatile" in words,
            is_restrict=bool(words & {"restrict", "__restrict"}),
        )

    def _classification_spelling(self) -> str:
        return self.canonical or self.spelling

    def is_valid(self) -> bool:
        return bool(self.spelling)

    def is_void(self) -> bool:
        return self._classification_spelling() == "void"

    def is_integral(self) -> bool:
        return self._classification_spelling() in INTEGRAL_TYPES

    def is_floating_point(self) -> bool:
        return self._classification_spelling() in FLOATING_POINT_TYPES

    def is_arithmetic(self) -> bool:
        return self.is_integral() or self.is_floating_point()

    def is_signed(self) -> bool:
        return self.is_arithmetic() and not self.is_unsigned()

    def is_unsigned(self) -> bool:
        spelling = self._classification_spelling()
        if "unsigned" in spelling:
            return True
        if spelling in {"bool", "char8_t", "char16_t", "char32_t", "wchar_t"}:
            return True
        return spelling.startswith("uint") or spelling == "size_t"

    def is_builtin(self) -> bool:
        return self.is_void() or self.is_arithmetic()

    def has_qualifiers(self) -> bool:
        return self.is_const or self.is_volatile or self.is_restrict

    def unqualified_spelling(self) -> str:
        """Spelling with every cv/restrict qualifier word removed."""
        words = [w for w in self.spelling.split(" ") if w not in _QUALIFIER_WORDS]
        return " ".join(words).strip()

    def describe(self) -> str:
        parts = [f'spelling="{self.spelling}"']
        if self.canonical and self.canonical != self.spelling:
            parts.append(f'canonical="{self.canonical}"')
        if self.is_const:
            parts.append("const")
        if self.is_volatile:
            parts.append("volatile")
        if self.is_restrict:
            parts.append("restrict")
        if self.is_pointer:
            text = "pointer"
            if self.pointee_type:
                text += f' to "{self.pointee_type}"'
            parts.append(text)
        if self.is_reference:
            text = ("lvalue" if self.is_lvalue_reference else "rvalue") + " reference"
            if self.pointee_type:
                text += f' to "{self.pointee_type}"'
            parts.append(text)
        if self.is_array:
            text = "array"
            if self.array_size >= 0:
                text += f"[{self.array_size}]"
            if self.array_element_type:
                text += f' of "{self.array_element_type}"'
            parts.append(text)
        if self.is_function_pointer:
            parts.append("function_pointer")
        if self.size_bytes >= 0:
            parts.append(f"size={self.size_bytes}")
        if self.alignment >= 0:
            parts.append(f"align={self.alignment}")
        return "type_info{" + ", ".join(parts) + "}"

    def __str__(self) -> str:
        return self.spelling
