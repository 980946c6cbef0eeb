"""Source location value types."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class SourceLocation:
    """A point in a source file.

    Lines and columns are 1-based; ``offset`` is the 0-based byte offset
    from the start of the file. Ordering is lexicographic over
    (file, line, column, offset).
    """

    file: str = ""
    line: int = 0
    column: int = 0
    offset: int = 0

    def is_valid(self) -> bool:
        return bool(self.file) and self.line > 0

    def same_file(self, other: SourceLocation) -> bool:
        return self.file == other.file

    def to_string(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    def to_string_short(self) -> str:
        return f"{self.file}:{self.line}"

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class SourceRange:
    """A half-open span between two locations in the same file."""

    start: SourceLocation = field(default_factory=SourceLocation)
    end: SourceLocation = field(default_factory=SourceLocation)

    @classmethod
    def from_locations(
        cls,
        start: SourceLocation,
        end: SourceLocation | None = None,
    ) -> SourceRange:
        """Build a range; a single location yields an empty range at that point."""
        return cls(start=start, end=end if end is not None else start)

    @staticmethod
    def merge(a: SourceRange, b: SourceRange) -> SourceRange:
        """Return the smallest range spanning both ``a`` and ``b``.

        An invalid side is ignored. Ranges in different files cannot be
        combined, so ``a`` is returned unchanged.
        """
        if not a.is_valid():
            return b
        if not b.is_valid():
            return a
        if not a.start.same_file(b.start):
            return a
        return SourceRange(start=min(a.start, b.start), end=max(a.end, b.end))

    def is_valid(self) -> bool:
        return self.start.is_valid() and self.end.is_valid()

    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, item: SourceLocation | SourceRange) -> bool:
        """Whether a location or a whole range falls inside this range."""
        if isinstance(item, SourceRange):
            return self.contains(item.start) and self.contains(item.end)
        if not self.is_valid() or not item.is_valid():
            return False
        if not self.start.same_file(item):
            return False
        return self.start <= item <= self.end

    def overlaps(self, other: SourceRange) -> bool:
        if not self.is_valid() or not other.is_valid():
            return False
        if not self.start.same_file(other.start):
            return False
        return self.start < other.end and other.start < self.end

    def length(self) -> int:
        """Byte length from the offsets, 0 when invalid or inverted."""
        if not self.is_valid() or self.end.offset < self.start.offset:
            return 0
        return self.end.offset - self.start.offset

    def to_string(self) -> str:
        return (
            f"{self.start.file}:{self.start.line}:{self.start.column}"
            f"-{self.end.line}:{self.end.column}"
        )

    def __str__(self) -> str:
        return self.to_string()
