"""Tag grammar: ``name`` or ``name(arg, "quoted, arg", ...)``.

Tags are the metadata channel between annotated C++ source and code
generators. The front-end hands over raw annotation strings (already
stripped of the surrounding ``@`` or attribute syntax); this module turns
them into structured ``Tag`` values.
"""

from __future__ import annotations

from dataclasses import dataclass

_QUOTE_CHARS = ('"', "'")


@dataclass(frozen=True)
class Tag:
    """A named annotation with ordered string arguments."""

    name: str
    args: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> Tag:
        return parse_tag(text)

    def get_args_combined(self) -> str:
        return ", ".join(self.args)

    def get_full(self) -> str:
        return f"{self.name}({self.get_args_combined()})"

    def __str__(self) -> str:
        return self.get_full()


def _is_escaped(text: str, index: int) -> bool:
    """Whether the character at ``index`` follows an odd run of backslashes."""
    backslashes = 0
    position = index - 1
    while position >= 0 and text[position] == "\\":
        backslashes += 1
        position -= 1
    return backslashes % 2 == 1


def split_tag_arguments(body: str) -> list[str]:
    """Split an argument body on commas that sit outside quoted regions.

    Quotes are kept verbatim in the resulting slices. A region opened with
    one quote character only closes on the same character, and an
    unterminated region swallows the rest of the body.

    Args:
        body: Text between the opening and closing parentheses.

    Returns:
        Trimmed argument slices. An empty trailing slice is dropped, so an
        empty body yields no arguments, while empty middle slices remain.
    """
    args: list[str] = []
    open_quote: str | None = None
    start = 0
    for index, char in enumerate(body):
        if char in _QUOTE_CHARS and not _is_escaped(body, index):
            if open_quote is None:
                open_quote = char
            elif open_quote == char:
                open_quote = None
        elif char == "," and open_quote is None:
            args.append(body[start:index].strip())
            start = index + 1

    last = body[start:].strip()
    if last:
        args.append(last)
    return args


def parse_tag(text: str) -> Tag:
    """Parse one raw annotation string into a ``Tag``.

    Never raises: malformed input degrades to the best-effort reading
    (missing ``)`` takes the rest of the text as the argument body).

    Example:
        >>> parse_tag('range(0, 100)').args
        ('0', '100')
        >>> parse_tag('serialize').args
        ()
    """
    open_paren = text.find("(")
    if open_paren < 0:
        return Tag(name=text.strip())

    name = text[:open_paren].strip()
    close_paren = text.rfind(")")
    if close_paren <= open_paren:
        body = text[open_paren + 1:]
    else:
        body = text[open_paren + 1:close_paren]
    return Tag(name=name, args=tuple(split_tag_arguments(body)))


def parse_tags(texts: list[str]) -> list[Tag]:
    """Parse several annotation strings, skipping blank ones."""
    return [parse_tag(text) for text in texts if text.strip()]
