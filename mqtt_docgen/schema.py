"""Attribute records, type classification and the normalized property tree.

The configuration block of an MQTT integration document decodes to a
mapping of property name to :class:`AttributeRecord`. Each record is
classified into exactly one structural kind (object, list or scalar) and
lowered depth-first into the tagged union :data:`NormalizedProperty`,
which both output paths consume.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, ClassVar, Mapping, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter, field_validator

from .errors import ClassificationError

__all__ = [
    "AttributeRecord",
    "RawSchema",
    "RAW_SCHEMA_ADAPTER",
    "PropertyKind",
    "ScalarKind",
    "ObjectProperty",
    "ListProperty",
    "ScalarProperty",
    "NormalizedProperty",
    "type_tags",
    "classify",
    "scalar_kind",
    "describe",
    "normalize_property",
    "normalize_schema",
]

LOGGER = logging.getLogger(__name__)


class AttributeRecord(BaseModel):
    """One property declaration as written in the documentation."""

    description: str | None = None
    required: bool = False
    type: str | list[str] | None = None
    default: Any = None
    keys: dict[str, AttributeRecord] | None = None

    model_config = ConfigDict(extra="allow", frozen=True)

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("required", mode="before")
    @classmethod
    def _coerce_required(cls, value: Any) -> Any:
        return False if value is None else value


AttributeRecord.model_rebuild()

RawSchema = dict[str, AttributeRecord]
RAW_SCHEMA_ADAPTER: TypeAdapter[RawSchema] = TypeAdapter(RawSchema)


class PropertyKind(str, Enum):
    OBJECT = "object"
    LIST = "list"
    SCALAR = "scalar"


class ScalarKind(str, Enum):
    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    TEMPLATE = "template"
    ICON = "icon"
    DEVICE_CLASS = "device_class"


MAP_TAG = "map"
LIST_TAG = "list"
SCALAR_TAGS: dict[str, ScalarKind] = {kind.value: kind for kind in ScalarKind}


@dataclass(slots=True, frozen=True)
class ObjectProperty:
    """Object node; ``properties`` keeps the source declaration order."""

    kind: ClassVar[PropertyKind] = PropertyKind.OBJECT

    description: str
    required: bool
    properties: dict[str, NormalizedProperty]

    @property
    def required_names(self) -> list[str]:
        return [name for name, prop in self.properties.items() if prop.required]


@dataclass(slots=True, frozen=True)
class ListProperty:
    """List node; ``items`` is ``None`` for a bare list of scalars."""

    kind: ClassVar[PropertyKind] = PropertyKind.LIST

    description: str
    required: bool
    items: dict[str, NormalizedProperty] | None


@dataclass(slots=True, frozen=True)
class ScalarProperty:
    kind: ClassVar[PropertyKind] = PropertyKind.SCALAR

    description: str
    required: bool
    scalar: ScalarKind


NormalizedProperty = Union[ObjectProperty, ListProperty, ScalarProperty]


def type_tags(record: AttributeRecord) -> tuple[str, ...]:
    """Return the record's type tag(s) as a tuple (empty when untyped)."""

    if record.type is None:
        return ()
    if isinstance(record.type, str):
        return (record.type,)
    return tuple(record.type)


def _unresolved(record: AttributeRecord, path: str) -> ClassificationError:
    return ClassificationError(
        f"Unknown type tag {record.type!r} for property '{path}'",
        path=path,
        tag=record.type,
    )


def classify(record: AttributeRecord, *, path: str = "") -> PropertyKind:
    """Resolve the structural kind of a single attribute record.

    A compound tag such as ``[string, list]`` resolves to a list when any
    variant is ``list`` and to a scalar when every variant is scalar.
    """

    tag = record.type
    if tag is None or tag == MAP_TAG:
        return PropertyKind.OBJECT
    if tag == LIST_TAG:
        return PropertyKind.LIST
    if isinstance(tag, str):
        if tag in SCALAR_TAGS:
            return PropertyKind.SCALAR
        raise _unresolved(record, path)

    tags = type_tags(record)
    if not tags or any(t != LIST_TAG and t not in SCALAR_TAGS for t in tags):
        raise _unresolved(record, path)
    if LIST_TAG in tags:
        return PropertyKind.LIST
    return PropertyKind.SCALAR


def scalar_kind(record: AttributeRecord, *, path: str = "") -> ScalarKind:
    for tag in type_tags(record):
        if tag in SCALAR_TAGS:
            return SCALAR_TAGS[tag]
    raise _unresolved(record, path)


def _format_default(value: Any) -> str:
    """Render a default the way the published fragments spell it.

    Lists are comma-joined without spaces (nested lists flatten), ``None``
    items render empty, mappings render as ``[object Object]`` and
    integral floats drop their fractional part.
    """

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_format_default(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def describe(description: str | None, default: Any = None) -> str:
    """Join the description with a ``(Default: …)`` note when the default is truthy."""

    parts = [description]
    if default:
        parts.append(f"(Default: {_format_default(default)})")
    return " ".join(part for part in parts if part)


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _normalize_children(children: Mapping[str, AttributeRecord] | None, path: str) -> dict[str, NormalizedProperty]:
    return {
        name: normalize_property(child, path=_join(path, name))
        for name, child in (children or {}).items()
    }


def normalize_property(record: AttributeRecord, *, path: str = "") -> NormalizedProperty:
    """Depth-first lowering of one record into the normalized tree."""

    kind = classify(record, path=path)
    description = describe(record.description, record.default)
    if kind is PropertyKind.OBJECT:
        return ObjectProperty(
            description=description,
            required=record.required,
            properties=_normalize_children(record.keys, path),
        )
    if kind is PropertyKind.LIST:
        items = _normalize_children(record.keys, path) if record.keys else None
        return ListProperty(description=description, required=record.required, items=items)
    if kind is PropertyKind.SCALAR:
        return ScalarProperty(
            description=description,
            required=record.required,
            scalar=scalar_kind(record, path=path),
        )
    raise _unresolved(record, path)  # pragma: no cover - every kind handled above


def normalize_schema(schema: Mapping[str, AttributeRecord], *, description: str | None = None) -> ObjectProperty:
    """Wrap a document's top-level records into a required root object."""

    root = ObjectProperty(
        description=describe(description),
        required=True,
        properties=_normalize_children(schema, ""),
    )
    LOGGER.debug("Normalized %d top-level properties", len(root.properties))
    return root
