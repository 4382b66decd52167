"""Jiminy code generation: program modules and interface metadata."""

from .generator import ProgramGenerator, generate_program, write_program
from .metadata import build_metadata, metadata_to_json, metadata_to_yaml

__all__ = [
    "ProgramGenerator",
    "generate_program",
    "write_program",
    "build_metadata",
    "metadata_to_json",
    "metadata_to_yaml",
]
