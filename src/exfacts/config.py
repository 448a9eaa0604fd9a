from __future__ import annotations

from pathlib import Path

import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError

CONFIG_FILENAME = "exfacts.toml"

DEFAULT_MAX_DEPTH = 100


class ExtractionOptions(BaseModel):
    """Options accepted by every public extraction entry point."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    include_location: bool = Field(
        default=True,
        description="Attach source locations to records when metadata has them",
    )
    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=0,
        description=(
            "Maximum nesting depth visited by call-site extraction; "
            "deeper calls are dropped"
        ),
    )


DEFAULT_OPTIONS = ExtractionOptions()


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_options(options: ExtractionOptions | None) -> ExtractionOptions:
    return DEFAULT_OPTIONS if options is None else options


def load_options(root: Path) -> ExtractionOptions:
    """Load extraction options from exfacts.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return ExtractionOptions()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return ExtractionOptions.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_OPTIONS",
    "ConfigError",
    "ExtractionOptions",
    "load_options",
    "resolve_options",
]
