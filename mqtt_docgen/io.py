"""Schema extraction from integration markdown documents."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError
from yaml import YAMLError

from .errors import ExtractionError, MissingCompanionDocumentError
from .schema import RAW_SCHEMA_ADAPTER, ObjectProperty, RawSchema, normalize_schema

__all__ = [
    "OPEN_SENTINEL",
    "CLOSE_SENTINEL",
    "MQTT_SUFFIX",
    "IntegrationDocument",
    "extract_configuration_block",
    "decode_configuration",
    "integration_name",
    "companion_path",
    "parse_description",
    "read_companion_description",
    "load_integration_document",
]

LOGGER = logging.getLogger(__name__)

OPEN_SENTINEL = "{% configuration %}"
CLOSE_SENTINEL = "{% endconfiguration %}"
MQTT_SUFFIX = ".mqtt.markdown"
MARKDOWN_SUFFIX = ".markdown"
FRONT_MATTER_SEPARATOR = "\n---\n"

_BLOCK_PATTERN = re.compile(
    re.escape(OPEN_SENTINEL) + r"(.*?)" + re.escape(CLOSE_SENTINEL),
    re.DOTALL,
)


class IntegrationDocument(BaseModel):
    """One MQTT integration document and its captured configuration block."""

    name: str
    path: Path
    text: str
    source: str
    description: str | None = None

    model_config = ConfigDict(frozen=True)

    def raw_schema(self) -> RawSchema:
        return decode_configuration(self.source, document=self.name)

    def normalized(self) -> ObjectProperty:
        return normalize_schema(self.raw_schema(), description=self.description)


def extract_configuration_block(text: str, *, document: str | None = None) -> str:
    """Return the text strictly between the first sentinel pair."""

    match = _BLOCK_PATTERN.search(text)
    if match is None:
        raise ExtractionError(
            f"No '{OPEN_SENTINEL}' ... '{CLOSE_SENTINEL}' block found",
            document=document,
            stage="extract",
        )
    return match.group(1)


def _safe_load(raw_text: str, document: str | None) -> Any:
    try:
        return yaml.safe_load(raw_text)
    except YAMLError:
        if "\t" not in raw_text:
            raise
        LOGGER.warning("Re-parsing configuration block tabs->spaces: %s", document or "<text>")
        return yaml.safe_load(raw_text.replace("\t", "  "))


def decode_configuration(raw_text: str, *, document: str | None = None) -> RawSchema:
    """Decode a captured configuration block into attribute records.

    Any failure surfaces the captured text both in the log and on the
    raised :class:`ExtractionError`.
    """

    try:
        data = _safe_load(raw_text, document)
    except YAMLError as e:
        LOGGER.error("Cannot decode configuration block of %s:\n%s", document or "<text>", raw_text)
        raise ExtractionError(
            f"Configuration block is not valid YAML: {e}",
            raw_text=raw_text,
            document=document,
            stage="extract",
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        LOGGER.error("Configuration block of %s is not a mapping:\n%s", document or "<text>", raw_text)
        raise ExtractionError(
            f"Configuration block must decode to a mapping, got {type(data).__name__}",
            raw_text=raw_text,
            document=document,
            stage="extract",
        )
    try:
        return RAW_SCHEMA_ADAPTER.validate_python(data)
    except ValidationError as e:
        LOGGER.error("Unexpected attribute record shape in %s:\n%s", document or "<text>", raw_text)
        raise ExtractionError(
            f"Configuration block has invalid attribute records: {e}",
            raw_text=raw_text,
            document=document,
            stage="extract",
        ) from e


def integration_name(path: str | Path) -> str:
    """``sensor.mqtt.markdown`` → ``sensor``."""

    name = Path(path).name
    for suffix in (MQTT_SUFFIX, MARKDOWN_SUFFIX):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def companion_path(path: str | Path) -> Path:
    path = Path(path)
    return path.with_name(path.name.replace(MQTT_SUFFIX, MARKDOWN_SUFFIX))


def parse_description(text: str) -> str | None:
    """First non-blank line after the last front-matter separator."""

    _, _, body = text.rpartition(FRONT_MATTER_SEPARATOR)
    for line in body.split("\n"):
        if line.strip():
            return line
    return None


def read_companion_description(path: str | Path) -> str | None:
    candidate = companion_path(path)
    if candidate == Path(path) or not candidate.is_file():
        raise MissingCompanionDocumentError(
            f"Companion document not found: {candidate}",
            document=integration_name(path),
        )
    return parse_description(candidate.read_text(encoding="utf-8"))


def load_integration_document(path: str | Path, *, with_description: bool = True) -> IntegrationDocument:
    """Read an MQTT integration document and capture its configuration block."""

    path = Path(path)
    name = integration_name(path)
    text = path.read_text(encoding="utf-8")
    source = extract_configuration_block(text, document=name)

    description = None
    if with_description:
        try:
            description = read_companion_description(path)
        except MissingCompanionDocumentError as e:
            LOGGER.debug("%s; description left unset", e.message)

    return IntegrationDocument(
        name=name,
        path=path,
        text=text,
        source=source,
        description=description,
    )
