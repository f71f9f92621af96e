"""OpenAPI lowering of the normalized property tree.

List items with nested keys are emitted as a bare ``properties``-style
mapping rather than a wrapped object schema. Consumers of the published
fragments depend on that exact shape.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import yaml

from .errors import GeneratorError
from .io import IntegrationDocument
from .schema import ListProperty, NormalizedProperty, ObjectProperty, ScalarProperty

__all__ = [
    "AVAILABILITY_PROPERTIES",
    "FRAGMENT_HEADER",
    "to_openapi",
    "document_schema",
    "availability_model",
    "device_model",
    "common_fragments",
    "comment_block",
    "dump_yaml",
    "format_fragment",
]

LOGGER = logging.getLogger(__name__)

# Legacy single-topic availability options.
AVAILABILITY_PROPERTIES: tuple[str, ...] = (
    "availability_topic",
    "payload_available",
    "payload_not_available",
    "availability_template",
)

FRAGMENT_HEADER = "# Auto-generated Openapi model from the following content:"

STRING_ITEMS: dict[str, str] = {"type": "string"}


def _properties(properties: Mapping[str, NormalizedProperty]) -> dict[str, Any]:
    return {name: to_openapi(prop) for name, prop in properties.items()}


def to_openapi(prop: NormalizedProperty) -> dict[str, Any]:
    if isinstance(prop, ObjectProperty):
        return {
            "type": "object",
            "description": prop.description,
            "required": prop.required_names,
            "properties": _properties(prop.properties),
        }
    if isinstance(prop, ListProperty):
        return {
            "description": prop.description,
            "type": "array",
            "items": _properties(prop.items) if prop.items else dict(STRING_ITEMS),
        }
    if isinstance(prop, ScalarProperty):
        return {
            "description": prop.description,
            "type": "string",
        }
    raise TypeError(f"Unsupported property node: {type(prop).__name__}")


def document_schema(document: IntegrationDocument) -> dict[str, Any]:
    """OpenAPI object schema for a whole integration document."""

    return to_openapi(document.normalized())


def _top_level(schema: Mapping[str, Any], name: str) -> Any:
    properties = schema.get("properties") or {}
    if name not in properties:
        raise GeneratorError(f"Reference schema has no '{name}' property", stage="lower")
    return properties[name]


def availability_model(schema: Mapping[str, Any]) -> dict[str, Any]:
    """One-of: the list-based availability or the legacy single-topic options."""

    properties = schema.get("properties") or {}
    return {
        "oneOf": [
            {
                "allOf": [
                    _top_level(schema, "availability"),
                    _top_level(schema, "availability_mode"),
                ],
            },
            {name: prop for name, prop in properties.items() if name in AVAILABILITY_PROPERTIES},
        ],
    }


def device_model(schema: Mapping[str, Any]) -> Any:
    return _top_level(schema, "device")


def common_fragments(schema: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "Availability": availability_model(schema),
        "Device": device_model(schema),
    }


class _NoAliasDumper(yaml.SafeDumper):
    def ignore_aliases(self, data: Any) -> bool:
        return True


def dump_yaml(data: Any) -> str:
    return yaml.dump(
        data,
        Dumper=_NoAliasDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def comment_block(source: str) -> str:
    """Prefix every source line (blank lines included) with ``# ``."""

    return "\n".join(f"# {line}" for line in source.split("\n"))


def format_fragment(source: str, schema: Mapping[str, Any]) -> str:
    return f"{FRAGMENT_HEADER}\n{comment_block(source)}\n\n{dump_yaml(dict(schema))}"
