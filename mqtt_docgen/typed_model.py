"""Typed-model lowering: flat attribute records → typed fields for code generation.

Resolution order per field (first match wins, overrides replace it):

1. base mapping by the raw type tag (``BASE_TYPES``; bare lists and
   compound tags with a ``list`` variant become iterable strings);
2. name-driven override table (``device_class``, ``unit_of_measurement``,
   ``state_class``, ``qos`` and, in the default policy, ``temperature_unit``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
from pathlib import Path
from typing import Callable, Mapping

from .config import DEFAULT_IGNORED_ATTRIBUTES, GeneratorConfig
from .errors import ClassificationError
from .io import decode_configuration, extract_configuration_block
from .schema import MAP_TAG, LIST_TAG, AttributeRecord, RawSchema, type_tags
from .strings import to_pascal_case

__all__ = [
    "BaseType",
    "TypeOverride",
    "TypedField",
    "EntityModel",
    "TypedModelPolicy",
    "BASE_TYPES",
    "BASE_OVERRIDES",
    "DEFAULT_OVERRIDES",
    "RUST_KEYWORDS",
    "fixed_override",
    "device_class_override",
    "resolve_base_type",
    "lower_field",
    "lower_entity",
    "generate_entity_model",
]

LOGGER = logging.getLogger(__name__)

RUST_KEYWORDS: frozenset[str] = frozenset(
    {
        "as", "async", "await", "break", "const", "continue", "crate", "dyn",
        "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
        "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
        "self", "static", "struct", "super", "trait", "true", "type", "unsafe",
        "use", "where", "while", "abstract", "become", "box", "do", "final",
        "macro", "override", "priv", "try", "typeof", "unsized", "virtual",
        "yield",
    }
)
RAW_IDENTIFIER_PREFIX = "r#"

DEVICE_CLASS_ANCHOR = re.compile(r"/integrations/(?P<name>[^/]*)/#device-class")


@dataclass(slots=True, frozen=True)
class BaseType:
    type_name: str
    import_line: str | None = None
    use_into: bool = False
    iterable: bool = False


@dataclass(slots=True, frozen=True)
class TypeOverride:
    type_name: str
    import_line: str


OverrideRule = Callable[[str, AttributeRecord], "TypeOverride | None"]


BASE_TYPES: dict[str, BaseType] = {
    "template": BaseType("String", use_into=True),
    "string": BaseType("String", use_into=True),
    "icon": BaseType("String", use_into=True),
    "float": BaseType("Decimal", import_line="pub use rust_decimal::Decimal"),
    "integer": BaseType("i32"),
    "boolean": BaseType("bool"),
}
ITERABLE_STRING = BaseType("String", use_into=True, iterable=True)


def fixed_override(type_name: str, import_line: str) -> OverrideRule:
    def _rule(name: str, record: AttributeRecord) -> TypeOverride:
        return TypeOverride(type_name, import_line)

    return _rule


def device_class_override(name: str, record: AttributeRecord) -> TypeOverride | None:
    """``…/integrations/sensor/#device-class`` → ``SensorDeviceClass``."""

    match = DEVICE_CLASS_ANCHOR.search(record.description or "")
    if match is None:
        return None
    type_name = f"{to_pascal_case(match.group('name'))}DeviceClass"
    return TypeOverride(type_name, f"use super::device_classes::{type_name}")


BASE_OVERRIDES: dict[str, OverrideRule] = {
    "device_class": device_class_override,
    "unit_of_measurement": fixed_override("Unit", "use super::units::Unit"),
    "state_class": fixed_override("SensorStateClass", "use super::common::SensorStateClass"),
    "qos": fixed_override("Qos", "use super::common::Qos"),
}
DEFAULT_OVERRIDES: dict[str, OverrideRule] = {
    **BASE_OVERRIDES,
    "temperature_unit": fixed_override("TemperatureUnit", "use super::common::TemperatureUnit"),
}


@dataclass(slots=True, frozen=True)
class TypedField:
    name: str
    description: str | None
    required: bool
    type_name: str
    safe_name: str
    import_line: str | None = None
    use_into: bool = False
    iterable: bool = False


@dataclass(slots=True)
class EntityModel:
    """Everything the entity template consumes for one integration."""

    entity_name: str
    entity_doc: str
    imports: list[str]
    properties: dict[str, TypedField]


@dataclass(frozen=True)
class TypedModelPolicy:
    """Filtering, type mapping and identifier rules for one lowering run."""

    ignored_attributes: frozenset[str] = frozenset(DEFAULT_IGNORED_ATTRIBUTES)
    dropped_type_tags: frozenset[str] = frozenset({LIST_TAG, MAP_TAG})
    base_types: Mapping[str, BaseType] = field(default_factory=lambda: dict(BASE_TYPES))
    overrides: Mapping[str, OverrideRule] = field(default_factory=lambda: dict(DEFAULT_OVERRIDES))
    reserved_words: frozenset[str] = RUST_KEYWORDS
    escape_prefix: str = RAW_IDENTIFIER_PREFIX

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> TypedModelPolicy:
        return cls(ignored_attributes=frozenset(config.ignored_attributes))

    def keeps(self, name: str, record: AttributeRecord) -> bool:
        """Only flat fields survive; untyped (object) records are dropped too."""

        if name in self.ignored_attributes:
            return False
        if record.type is None:
            return False
        return not (isinstance(record.type, str) and record.type in self.dropped_type_tags)

    def safe_name(self, name: str) -> str:
        if name in self.reserved_words:
            return f"{self.escape_prefix}{name}"
        return name


def resolve_base_type(record: AttributeRecord, table: Mapping[str, BaseType]) -> BaseType | None:
    tag = record.type
    if tag == LIST_TAG:
        return None if record.keys else ITERABLE_STRING
    if isinstance(tag, str):
        return table.get(tag)
    if LIST_TAG in type_tags(record):
        return ITERABLE_STRING
    return None


def lower_field(name: str, record: AttributeRecord, policy: TypedModelPolicy) -> TypedField:
    base = resolve_base_type(record, policy.base_types)
    rule = policy.overrides.get(name)
    override = rule(name, record) if rule is not None else None

    if override is None and base is None:
        raise ClassificationError(
            f"Cannot resolve a field type for '{name}' (type {record.type!r})",
            path=name,
            tag=record.type,
        )
    if override is not None:
        return TypedField(
            name=name,
            description=record.description,
            required=record.required,
            type_name=override.type_name,
            safe_name=policy.safe_name(name),
            import_line=override.import_line,
        )
    return TypedField(
        name=name,
        description=record.description,
        required=record.required,
        type_name=base.type_name,
        safe_name=policy.safe_name(name),
        import_line=base.import_line,
        use_into=base.use_into,
        iterable=base.iterable,
    )


def lower_entity(
    entity_name: str,
    schema: RawSchema,
    entity_doc: str,
    policy: TypedModelPolicy | None = None,
) -> EntityModel:
    policy = policy or TypedModelPolicy()
    properties = {
        name: lower_field(name, record, policy)
        for name, record in schema.items()
        if policy.keeps(name, record)
    }
    imports: list[str] = []
    for typed in properties.values():
        if typed.import_line and typed.import_line not in imports:
            imports.append(typed.import_line)
    return EntityModel(
        entity_name=entity_name,
        entity_doc=entity_doc,
        imports=imports,
        properties=properties,
    )


def generate_entity_model(
    entity_name: str,
    doc_file: str | Path,
    policy: TypedModelPolicy | None = None,
) -> EntityModel:
    """Read ``doc_file`` and lower its configuration block for ``entity_name``."""

    LOGGER.info("%s %s", entity_name, doc_file)
    doc_content = Path(doc_file).read_text(encoding="utf-8")
    raw_text = extract_configuration_block(doc_content, document=entity_name)
    schema = decode_configuration(raw_text, document=entity_name)
    return lower_entity(entity_name, schema, doc_content, policy)
