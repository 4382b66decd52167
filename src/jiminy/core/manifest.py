import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from solders.pubkey import Pubkey

MANIFEST_NAME = "jiminy.toml"
STRICT_ENV_VAR = "JIMINY_STRICT"


@dataclass
class SourcesConfig:
    """Where declarations live, relative to the project root."""

    instructions: str
    errors: list[str] = field(default_factory=list)
    state: str | None = None


@dataclass
class BuildConfig:
    """Generated output configuration."""

    output: str
    metadata: str | None = None  # Optional interface metadata file (.json or .yaml)
    strict: bool = False  # Fail on malformed declarations instead of dropping them


@dataclass
class ProgramManifest:
    """
    Parsed ``jiminy.toml``.

    Example:

        [program]
        name = "counter"
        id = "61Zq8M...GGwy"   # base58 program address
        version = "0.1.0"
        package = "counter"

        [sources]
        instructions = "counter/instructions"
        errors = ["counter/error.py"]
        state = "counter/state"

        [build]
        output = "counter/generated.py"
        metadata = "counter/idl.json"
        strict = false
    """

    name: str
    program_id: str
    package: str
    sources: SourcesConfig
    build: BuildConfig
    version: str = "0.1.0"

    @property
    def strict(self) -> bool:
        env = os.environ.get(STRICT_ENV_VAR, "").strip().lower()
        if env in ("1", "true", "yes"):
            return True
        return self.build.strict


def load_manifest(path: Path) -> ProgramManifest:
    data = tomllib.loads(path.read_text(encoding="utf-8"))

    program = data.get("program", {})
    sources = data.get("sources", {})
    build = data.get("build", {})

    name = program.get("name", "")
    if not name:
        raise ValueError(f"{path}: [program].name is required")

    raw_id = str(program.get("id", "")).strip()
    try:
        program_id = str(Pubkey.from_string(raw_id))
    except ValueError as e:
        raise ValueError(f"{path}: [program].id must be a base58 32-byte address") from e

    package = program.get("package", name)
    package_dir = package.replace(".", "/")

    errors = sources.get("errors", [f"{package_dir}/error.py"])
    if isinstance(errors, str):
        errors = [errors]

    sources_config = SourcesConfig(
        instructions=sources.get("instructions", f"{package_dir}/instructions"),
        errors=list(errors),
        state=sources.get("state", f"{package_dir}/state"),
    )

    build_config = BuildConfig(
        output=build.get("output", f"{package_dir}/generated.py"),
        metadata=build.get("metadata"),
        strict=bool(build.get("strict", False)),
    )

    return ProgramManifest(
        name=name,
        program_id=program_id,
        package=package,
        sources=sources_config,
        build=build_config,
        version=str(program.get("version", "0.1.0")),
    )
