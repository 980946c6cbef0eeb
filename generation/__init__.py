"""Output generation: text writer, compile warnings and record reports."""

from generation.compile_warnings import CompileWarnings
from generation.generator import SEPARATOR, Generator
from generation.record_report import describe_enum, describe_record, describe_type

__all__ = [
    "CompileWarnings",
    "Generator",
    "SEPARATOR",
    "describe_enum",
    "describe_record",
    "describe_type",
]
