"""Line-oriented writer for generated source files."""

from __future__ import annotations

import logging
from typing import Optional, TextIO, Union

from ast_model.node import Node
from ast_model.source import SourceLocation
from generation.compile_warnings import CompileWarnings

logger = logging.getLogger(__name__)

SEPARATOR = "// " + "=" * 76


class Generator:
    """Writes generated text and a trailing compile-warnings section.

    The output file is opened on construction. If that fails the error is
    logged and every write becomes a no-op, while ``done()`` reports the
    failure. Usable as a context manager.

    Example:
        >>> with Generator("out/reflection.hpp") as gen:
        ...     gen.named_separator("Person").out("struct PersonInfo {};")
    """

    def __init__(self, output_path: str):
        self.output_path = output_path
        self.warnings = CompileWarnings()
        self._closed = False
        self._success = False
        self._stream: Optional[TextIO]
        try:
            self._stream = open(output_path, "w", encoding="utf-8")
        except OSError as e:
            logger.error("Could not open output file %s: %s", output_path, e)
            self._stream = None

    @property
    def is_open(self) -> bool:
        return self._stream is not None and not self._closed

    def out(self, data: str) -> Generator:
        if self.is_open:
            self._stream.write(data + "\n")
        return self

    def separator(self) -> Generator:
        return self.out(SEPARATOR)

    def named_separator(self, name: str) -> Generator:
        self.separator()
        self.out(f"// === {name}")
        return self.separator()

    def warn(
        self,
        message: str,
        location_or_node: Union[SourceLocation, Node, None] = None,
    ) -> Generator:
        """Queue a compile warning, prefixed with ``file:line`` when known."""
        location = (
            location_or_node.location
            if isinstance(location_or_node, Node)
            else location_or_node
        )
        if location is not None and location.is_valid():
            message = f"{location.to_string_short()}: {message}"
        logger.warning("Generation warning: %s", message)
        self.warnings.push(message)
        return self

    def done(self) -> bool:
        """Flush pending warnings and close the file.

        Returns:
            True when the output was written successfully.
        """
        if self._closed:
            return self._success
        if len(self.warnings):
            self.named_separator("Warnings")
            self.out(self.warnings.build())

        self._closed = True
        if self._stream is None:
            return False
        try:
            self._stream.close()
        except OSError as e:
            logger.error("Failed to close output file %s: %s", self.output_path, e)
            return False
        self._success = True
        logger.info("Wrote generated output to %s", self.output_path)
        return True

    def __enter__(self) -> Generator:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.done()
