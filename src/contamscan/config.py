from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Mapping, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, model_validator

from contamscan.exceptions import ContamScanUsageError
from contamscan.paths import MATRIX_FILENAME


class SketchConfig(BaseModel):
    """MinHash sketch parameters shared by every genome in a run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kmer_size: PositiveInt = Field(default=21, le=32)
    sketch_size: PositiveInt = 1000
    kmers_to_sketch: PositiveInt | None = None
    seed: int = Field(default=0, ge=0, lt=2**64)

    @model_validator(mode="after")
    def _validate_candidate_count(self) -> "SketchConfig":
        if self.kmers_to_sketch is not None and self.kmers_to_sketch < self.sketch_size:
            raise ValueError("`kmers_to_sketch` must be >= `sketch_size`.")
        return self

    @property
    def candidate_count(self) -> int:
        return self.kmers_to_sketch or self.sketch_size


class FilterConfig(BaseModel):
    """K-mer abundance filter applied before a sketch is finalised."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    min_abundance: PositiveInt | None = None
    max_abundance: PositiveInt | None = None

    @model_validator(mode="after")
    def _validate_bounds(self) -> "FilterConfig":
        if (
            self.min_abundance is not None
            and self.max_abundance is not None
            and self.max_abundance < self.min_abundance
        ):
            raise ValueError("`max_abundance` must be >= `min_abundance`.")
        return self

    @property
    def enabled(self) -> bool:
        return self.min_abundance is not None or self.max_abundance is not None


class CommonConfig(BaseModel):
    """Shared command options across contamscan subcommands."""

    model_config = ConfigDict(extra="forbid")

    metadata_file: Path | None = None
    data_path: Path | None = None
    log_file: Path | None = None
    verbose: bool = False
    quiet: bool = False

    @model_validator(mode="after")
    def _validate_verbosity(self) -> "CommonConfig":
        if self.verbose and self.quiet:
            raise ValueError("`verbose` and `quiet` cannot both be true.")
        return self


class ListingConfig(CommonConfig):
    output: Path | None = None


class CompareConfig(CommonConfig):
    output: Path = Path(MATRIX_FILENAME)
    engine: Literal["minhash", "mash"] = "minhash"
    mash_executable: str = "mash"
    skip_invalid: bool = False
    dry_run: bool = False
    sketch: SketchConfig = Field(default_factory=SketchConfig)
    filter: FilterConfig = Field(default_factory=FilterConfig)


class ContamScanConfig(BaseModel):
    """Top-level YAML config model."""

    model_config = ConfigDict(extra="forbid")

    ncbi_to_cactus: ListingConfig | None = None
    ncbi_assembly_compare: CompareConfig | None = None


def load_config(config_path: Path | None) -> ContamScanConfig:
    """Load and validate a YAML config file."""

    if config_path is None:
        return ContamScanConfig()

    if not config_path.exists():
        raise ContamScanUsageError(f"Config file does not exist: {config_path}")

    if not config_path.is_file():
        raise ContamScanUsageError(f"Config path is not a file: {config_path}")

    try:
        payload_raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ContamScanUsageError(f"Config file is not valid YAML: {config_path}\n{exc}") from exc
    if payload_raw is None:
        payload_raw = {}

    if not isinstance(payload_raw, dict):
        raise ContamScanUsageError("Config YAML must be a key/value mapping at the top level.")

    try:
        return ContamScanConfig.model_validate(payload_raw)
    except ValidationError as exc:
        raise ContamScanUsageError(f"Invalid config file: {config_path}\n{exc}") from exc


T = TypeVar("T", bound=CommonConfig)


def merge_command_config(
    *,
    config_path: Path | None,
    section: str,
    model_cls: type[T],
    cli_overrides: Mapping[str, Any],
) -> T:
    """Merge YAML config values with explicit CLI overrides and validate."""

    root = load_config(config_path)
    section_model = getattr(root, section)

    merged: dict[str, Any] = {}
    if section_model is not None:
        merged.update(section_model.model_dump(exclude_none=True))

    for key, value in cli_overrides.items():
        if value is not None:
            merged[key] = value

    try:
        return model_cls.model_validate(merged)
    except ValidationError as exc:
        raise ContamScanUsageError(f"Invalid merged config for `{section}`:\n{exc}") from exc
