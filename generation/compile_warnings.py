"""Compile-time warning blocks for generated C/C++ files."""

from __future__ import annotations


class CompileWarnings:
    """Collects messages and renders them as preprocessor warnings.

    The rendered block uses ``#pragma message`` under MSVC and ``#warning``
    elsewhere, so the generated file reports each message when compiled.
    Messages are emitted verbatim.
    """

    def __init__(self) -> None:
        self._messages: list[str] = []

    @property
    def messages(self) -> list[str]:
        return list(self._messages)

    def push(self, message: str) -> CompileWarnings:
        self._messages.append(message)
        return self

    def clear(self) -> CompileWarnings:
        self._messages.clear()
        return self

    def __len__(self) -> int:
        return len(self._messages)

    def build(self) -> str:
        if not self._messages:
            return ""

        lines = ["#ifdef _MSC_VER"]
        lines.extend(f'#pragma message("Warning: {msg}")' for msg in self._messages)
        lines.append("#else")
        lines.extend(f'#warning "{msg}"' for msg in self._messages)
        lines.append("#endif")
        return "\n".join(lines) + "\n"
