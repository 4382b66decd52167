"""
Jiminy - declarative instructions, errors and state for on-chain programs.

Declarations are written once inside program modules and read two ways:
the build pipeline (``jiminy.core`` + ``jiminy.codegen``) turns them into a
generated dispatch module, and the runtime (``jiminy.runtime``) turns them
into validated handlers, error enums and zero-copy record layouts.
"""

from __future__ import annotations

from ._version import __version__
from .core import ir
from .core.errors import GeneratorError, JiminyError, LinkError, ParseError

__all__ = [
    "__version__",
    "ir",
    "JiminyError",
    "ParseError",
    "LinkError",
    "GeneratorError",
]
