"""Jinja2 rendering of typed entity models into Rust source."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from .device_class import DeviceClassEnum
from .errors import GeneratorError
from .strings import abbreviate, to_pascal_case
from .typed_model import EntityModel, TypedField

__all__ = ["TEMPLATE_DIR", "TemplateRenderer", "comment", "rust_type"]

LOGGER = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

ENTITY_TEMPLATE = "rust_model.rs.j2"
DEVICE_CLASSES_TEMPLATE = "rust_device_classes.rs.j2"
MOD_TEMPLATE = "rust_mod.rs.j2"


def comment(text: str | None, indent: int = 0) -> str:
    """Continue a ``///`` doc comment across the lines of ``text``."""

    if not text:
        return ""
    return text.rstrip("\n").replace("\n", "\n" + " " * indent + "/// ")


def rust_type(field: TypedField) -> str:
    if field.iterable:
        return f"Vec<{field.type_name}>"
    return field.type_name


class TemplateRenderer:
    """Owns the Jinja2 environment and the three source templates."""

    def __init__(self, template_dir: str | Path | None = None):
        self.template_dir = Path(template_dir) if template_dir is not None else TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.env.filters["abbreviation"] = abbreviate
        self.env.filters["comment"] = comment
        self.env.filters["pascal_case"] = to_pascal_case
        self.env.filters["rust_type"] = rust_type

    def _render(self, template_name: str, **context) -> str:
        try:
            return self.env.get_template(template_name).render(**context)
        except TemplateError as e:
            raise GeneratorError(f"Cannot render {template_name}: {e}", stage="render") from e

    def render_entity(self, model: EntityModel) -> str:
        return self._render(
            ENTITY_TEMPLATE,
            entity_name=model.entity_name,
            entity_doc=model.entity_doc,
            imports=model.imports,
            properties=model.properties,
        )

    def render_device_classes(self, enums: Sequence[DeviceClassEnum]) -> str:
        return self._render(DEVICE_CLASSES_TEMPLATE, enums=list(enums))

    def render_mod(self, entities: Iterable[str]) -> str:
        return self._render(MOD_TEMPLATE, entities=list(entities))
