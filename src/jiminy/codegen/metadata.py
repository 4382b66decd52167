"""
Interface metadata generation from ProgramSpec.

Produces a Shank-style catalog (instructions with their account slots and
arguments, record layouts, error codes) that client generators consume.
"""

from __future__ import annotations

import json
import re
from typing import Any

import yaml

from jiminy.core.ir import InstructionSpec, ProgramSpec, RecordSpec
from jiminy.core.type_tokens import PRIMITIVES, is_known_token, layout_of, normalize_token

_ARRAY_RE = re.compile(r"^\[(?P<inner>.+);\s*(?P<count>\d+)\]$")
_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def build_metadata(program: ProgramSpec, version: str = "0.1.0") -> dict[str, Any]:
    """
    Build the interface catalog for a program.

    Args:
        program: Aggregated program declarations
        version: Program version recorded in the catalog

    Returns:
        Catalog as a JSON-compatible dictionary
    """
    errors: list[dict[str, Any]] = []
    for domain in program.errors:
        for variant in domain.with_reserved_variant().variants:
            errors.append({"code": variant.code, "name": variant.name, "msg": _message(variant.name)})

    return {
        "version": version,
        "name": program.name,
        "instructions": [_instruction(instruction) for instruction in program.instructions],
        "accounts": [_record(record) for record in program.records],
        "errors": errors,
        "metadata": {"origin": "jiminy", "address": program.program_id},
    }


def _instruction(instruction: InstructionSpec) -> dict[str, Any]:
    return {
        "name": instruction.name,
        "accounts": [
            {
                "name": slot.name,
                "isMut": slot.writable,
                "isSigner": slot.signer,
                "desc": slot.description,
            }
            for slot in instruction.accounts
        ],
        "args": [
            {"name": field.name, "type": _idl_type(field.type_token)}
            for field in instruction.fields
        ],
        "discriminant": {"type": "u8", "value": instruction.discriminator},
    }


def _record(record: RecordSpec) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "name": record.name,
        "type": {
            "kind": "struct",
            "fields": [
                {"name": field.name, "type": _idl_type(field.type_token)}
                for field in record.fields
            ],
        },
    }
    if all(is_known_token(field.type_token) for field in record.fields):
        entry["size"] = sum(layout_of(field.type_token).size for field in record.fields)
    return entry


def _idl_type(token: str) -> Any:
    """Map a type token to its catalog form; unknown tokens pass through verbatim."""
    token = normalize_token(token)
    if token == "Pubkey":
        return "publicKey"
    if token in PRIMITIVES:
        return token
    match = _ARRAY_RE.match(token)
    if match:
        return {"array": [_idl_type(match.group("inner")), int(match.group("count"))]}
    return token


def _message(name: str) -> str:
    """``InvalidDiscriminator`` -> ``Invalid Discriminator``."""
    return " ".join(_WORD_RE.findall(name)) or name


def metadata_to_json(metadata: dict[str, Any]) -> str:
    """Convert a catalog to a JSON string."""
    return json.dumps(metadata, indent=2) + "\n"


def metadata_to_yaml(metadata: dict[str, Any]) -> str:
    """Convert a catalog to a YAML string."""
    return yaml.dump(metadata, default_flow_style=False, sort_keys=False)
