"""Core Jiminy functionality: IR, declaration extraction and parsing, aggregation."""

from . import ir
from .aggregator import build_program, discover_sources
from .error_parser import parse_error_table
from .errors import (
    ErrorContext,
    GeneratorError,
    JiminyError,
    LinkError,
    ParseError,
    UnknownTypeError,
)
from .extractor import DeclarationSpan, extract_span, iter_spans
from .instruction_parser import parse_instruction
from .manifest import ProgramManifest, load_manifest
from .record_parser import parse_records

__all__ = [
    "ir",
    "JiminyError",
    "ParseError",
    "LinkError",
    "GeneratorError",
    "UnknownTypeError",
    "ErrorContext",
    "DeclarationSpan",
    "extract_span",
    "iter_spans",
    "parse_instruction",
    "parse_error_table",
    "parse_records",
    "ProgramManifest",
    "load_manifest",
    "build_program",
    "discover_sources",
]
