"""Configuration loading for schemagen (.schemagen.yml and run parameters)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

CONFIG_FILE_NAME = ".schemagen.yml"
CONFIG_ENV_VAR = "SCHEMAGEN_CONFIG"

DEFAULT_SPECS_REPO_URI = "https://github.com/Azure/azure-rest-api-specs"
DEFAULT_SPECS_REPO_COMMIT = "main"
DEFAULT_GENERATOR_COMMAND = (
    "autorest",
    "--use=@autorest/azureresourceschema",
    "--azureresourceschema",
)


class ConfigError(RuntimeError):
    """Raised when configuration or run parameters cannot be parsed."""


class InvalidShardSpec(ConfigError):
    """Raised when batch count and batch index do not describe a valid shard."""


@dataclass
class GeneratorConfig:
    """External schema generator invocation settings."""

    command: List[str] = field(default_factory=lambda: list(DEFAULT_GENERATOR_COMMAND))
    timeout: Optional[float] = None


@dataclass
class SchemaGenConfig:
    """Represents the settings defined in .schemagen.yml."""

    root: Path
    specs_repo_uri: str = DEFAULT_SPECS_REPO_URI
    specs_repo_commit: str = DEFAULT_SPECS_REPO_COMMIT
    specs_repo_path: Optional[Path] = None
    schemas_dir: Optional[Path] = None
    registry_path: Optional[Path] = None
    autogen_list_path: Optional[Path] = None
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)

    def __post_init__(self) -> None:
        if self.specs_repo_path is None:
            self.specs_repo_path = self.root / ".schemagen" / "azure-rest-api-specs"
        if self.schemas_dir is None:
            self.schemas_dir = self.root / "schemas"
        if self.registry_path is None:
            self.registry_path = self.schemas_dir / "common" / "autogeneratedResources.json"
        if self.autogen_list_path is None:
            self.autogen_list_path = self.root / "autogenlist.yml"


class RunParams(BaseModel):
    """Validated process input for a generate-all run."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    batch_count: Optional[int] = Field(default=None, alias="batchCount", ge=1)
    batch_index: Optional[int] = Field(default=None, alias="batchIndex", ge=0)
    local_path: Optional[str] = Field(default=None, alias="localPath")
    readme_files: Optional[List[str]] = Field(default=None, alias="readmeFiles")
    output_path: Optional[str] = Field(default=None, alias="outputPath")

    @model_validator(mode="after")
    def _check_shard_pair(self) -> "RunParams":
        if (self.batch_count is None) != (self.batch_index is None):
            raise ValueError("batchCount and batchIndex must be provided together")
        if self.batch_count is not None and self.batch_index is not None:
            if self.batch_index >= self.batch_count:
                raise ValueError(
                    f"batchIndex {self.batch_index} is out of range for batchCount {self.batch_count}"
                )
        return self

    @property
    def sharded(self) -> bool:
        return self.batch_count is not None


def parse_run_params(raw: str | None) -> RunParams:
    """Parse and validate the optional JSON run parameters."""
    if raw is None or not raw.strip():
        return RunParams()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Run parameters are not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Run parameters must be a JSON object")
    return run_params_from_mapping(data)


def run_params_from_mapping(data: Dict[str, Any]) -> RunParams:
    try:
        return RunParams.model_validate(data)
    except ValidationError as exc:
        message = "; ".join(_format_error(error) for error in exc.errors())
        if any(_is_shard_error(error) for error in exc.errors()):
            raise InvalidShardSpec(f"Invalid shard specification: {message}") from exc
        raise ConfigError(f"Invalid run parameters: {message}") from exc


def load_config(config_path: Path | None = None) -> SchemaGenConfig:
    """Load settings from disk, falling back to defaults when the file is missing."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SchemaGenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    specs_data = _as_dict(data.get("specs"))
    generator_data = _as_dict(data.get("generator"))

    generator = GeneratorConfig()
    command = generator_data.get("command")
    if isinstance(command, str):
        generator.command = command.split()
    elif isinstance(command, list):
        generator.command = [str(token) for token in command]
    elif command is not None:
        raise ConfigError("generator.command must be a string or a list of strings")
    timeout = generator_data.get("timeout")
    if timeout is not None:
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool):
            raise ConfigError("generator.timeout must be a number of seconds")
        generator.timeout = float(timeout)

    return SchemaGenConfig(
        root=root,
        specs_repo_uri=_as_str(specs_data.get("repo_uri")) or DEFAULT_SPECS_REPO_URI,
        specs_repo_commit=_as_str(specs_data.get("commit")) or DEFAULT_SPECS_REPO_COMMIT,
        specs_repo_path=_as_path(root, specs_data.get("local_path")),
        schemas_dir=_as_path(root, data.get("schemas_dir")),
        registry_path=_as_path(root, data.get("registry_path")),
        autogen_list_path=_as_path(root, data.get("autogen_list")),
        generator=generator,
    )


def _resolve_config_path(config_path: Path | None) -> Path:
    if config_path is None:
        env_value = os.getenv(CONFIG_ENV_VAR)
        config_path = Path(env_value) if env_value else Path.cwd()
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILE_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _format_error(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = str(error.get("msg", "invalid value"))
    return f"{location}: {message}" if location else message


def _is_shard_error(error: Dict[str, Any]) -> bool:
    location = error.get("loc", ())
    if any(part in {"batchCount", "batchIndex", "batch_count", "batch_index"} for part in location):
        return True
    return not location and "batch" in str(error.get("msg", ""))


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_path(root: Path, value: Any) -> Optional[Path]:
    text = _as_str(value)
    if not text:
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else (root / path).resolve()


__all__ = [
    "ConfigError",
    "GeneratorConfig",
    "InvalidShardSpec",
    "RunParams",
    "SchemaGenConfig",
    "load_config",
    "parse_run_params",
    "run_params_from_mapping",
]
