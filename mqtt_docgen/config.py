"""Generator configuration.

Precedence (last wins): defaults → YAML file → environment → explicit
overrides (command-line flags).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from yaml import YAMLError

from .errors import ConfigError

__all__ = [
    "DEFAULT_ENTITIES",
    "DEFAULT_EXCLUDED_DOCUMENTS",
    "DEFAULT_IGNORED_ATTRIBUTES",
    "GeneratorConfig",
    "load_config",
]

DEFAULT_ENTITIES: tuple[str, ...] = (
    "alarm_control_panel",
    "binary_sensor",
    "button",
    "camera",
    "climate",
    "cover",
    "device_tracker",
    "device_trigger",
    "event",
    "fan",
    "humidifier",
    "image",
    "lawn_mower",
    "lock",
    "number",
    "scene",
    "select",
    "sensor",
    "siren",
    "switch",
    "tag",
    "text",
    "update",
    "vacuum",
    "valve",
    "water_heater",
)

# Schema shapes the normalizer does not support yet.
DEFAULT_EXCLUDED_DOCUMENTS: tuple[str, ...] = (
    "climate.mqtt.markdown",
    "number.mqtt.markdown",
    "water_heater.mqtt.markdown",
)

# Modelled once in the shared common module, never per entity.
DEFAULT_IGNORED_ATTRIBUTES: tuple[str, ...] = (
    "availability",
    "availability_mode",
    "availability_template",
    "availability_topic",
    "payload_available",
    "payload_not_available",
    "expire_after",
    "device",
    "entity_category",
)

ENV_VARS: dict[str, str] = {
    "docs_root": "HOME_ASSISTANT_DOCS",
    "output_root": "DEVENV_ROOT",
}


class GeneratorConfig(BaseModel):
    """Immutable configuration passed explicitly into each pipeline run."""

    docs_root: Path | None = None
    output_root: Path = Field(default_factory=Path.cwd)
    entities: tuple[str, ...] = DEFAULT_ENTITIES
    excluded_documents: tuple[str, ...] = DEFAULT_EXCLUDED_DOCUMENTS
    reference_integration: str = "sensor"
    ignored_attributes: tuple[str, ...] = DEFAULT_IGNORED_ATTRIBUTES

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("reference_integration")
    @classmethod
    def _reference_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reference_integration cannot be empty")
        return v

    @property
    def integrations_dir(self) -> Path:
        if self.docs_root is None:
            raise ConfigError("docs_root is not set (use --docs or HOME_ASSISTANT_DOCS)")
        return self.docs_root / "source" / "_integrations"

    @property
    def fragments_dir(self) -> Path:
        return self.output_root / "specs" / "fragments"

    @property
    def input_dir(self) -> Path:
        return self.output_root / "generator" / "input"

    @property
    def device_classes_dir(self) -> Path:
        return self.input_dir / "device_classes"

    @property
    def models_dir(self) -> Path:
        return self.output_root / "src" / "mqtt"


def _load_yaml_if_exists(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except YAMLError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _env_values(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for field_name, env_key in ENV_VARS.items():
        value = environ.get(env_key)
        if value:
            values[field_name] = value
    return values


def load_config(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> GeneratorConfig:
    """Build a :class:`GeneratorConfig` from file, environment and overrides.

    Overrides whose value is ``None`` are ignored so unset CLI flags do not
    mask the environment.
    """

    raw = _load_yaml_if_exists(Path(path) if path is not None else None)
    raw.update(_env_values(os.environ if environ is None else environ))
    raw.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return GeneratorConfig(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid generator configuration: {e}") from e
