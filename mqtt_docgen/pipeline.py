"""Batch drivers for the two generator outputs.

A failure on any document aborts the whole run: the fragments and models
cross-reference each other, so a partial output set is never useful.
Every output of a run is computed before the first file is written.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
from pathlib import Path
from typing import Iterator

from hadocs.corpus import DocsCorpus, curated_device_class_documents

from .config import GeneratorConfig
from .device_class import extract_device_classes_enums
from .errors import GeneratorError
from .io import MQTT_SUFFIX, load_integration_document
from .openapi import common_fragments, document_schema, dump_yaml, format_fragment
from .render import TemplateRenderer
from .typed_model import TypedModelPolicy, generate_entity_model

__all__ = [
    "COMMON_FRAGMENT",
    "stage",
    "generate_openapi_fragments",
    "generate_typed_models",
]

LOGGER = logging.getLogger(__name__)

COMMON_FRAGMENT = "common.yml"


@contextmanager
def stage(document: str, name: str) -> Iterator[None]:
    """Tag any failure inside the block with the document and stage."""

    try:
        yield
    except GeneratorError as e:
        if e.document is None:
            e.document = document
        if e.stage is None:
            e.stage = name
        raise
    except OSError as e:
        raise GeneratorError(f"{type(e).__name__}: {e}", document=document, stage=name) from e


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _write_all(outputs: list[tuple[str, Path, str]]) -> list[Path]:
    """Write a fully computed batch; nothing is written before this point."""

    written = []
    for name, path, content in outputs:
        with stage(name, "write"):
            written.append(_write(path, content))
    return written


def generate_openapi_fragments(config: GeneratorConfig, corpus: DocsCorpus | None = None) -> list[Path]:
    """Write ``common.yml`` plus one OpenAPI fragment per MQTT document."""

    corpus = corpus or DocsCorpus.from_config(config)
    outputs: list[tuple[str, Path, str]] = []

    reference = config.reference_integration
    with stage(reference, "extract"):
        document = load_integration_document(corpus.document_path(reference))
    with stage(reference, "lower"):
        common = dump_yaml(common_fragments(document_schema(document)))
    outputs.append((reference, config.fragments_dir / COMMON_FRAGMENT, common))

    with stage("<corpus>", "extract"):
        documents = corpus.mqtt_documents()
    for path in documents:
        LOGGER.info("converting %s", path)
        name = path.name[: -len(MQTT_SUFFIX)]
        with stage(name, "extract"):
            document = load_integration_document(path)
        with stage(name, "normalize"):
            schema = document_schema(document)
        with stage(name, "lower"):
            content = format_fragment(document.source, schema)
        outputs.append((name, config.fragments_dir / f"{document.name}.yml", content))

    written = _write_all(outputs)
    LOGGER.info("Wrote %d OpenAPI fragments to %s", len(written), config.fragments_dir)
    return written


def generate_typed_models(
    config: GeneratorConfig,
    *,
    renderer: TemplateRenderer | None = None,
    policy: TypedModelPolicy | None = None,
) -> list[Path]:
    """Render entity sources, the device-class enums and the module file."""

    renderer = renderer or TemplateRenderer()
    policy = policy or TypedModelPolicy.from_config(config)
    outputs: list[tuple[str, Path, str]] = []

    for entity in config.entities:
        doc_file = config.input_dir / f"{entity}{MQTT_SUFFIX}"
        with stage(entity, "extract"):
            model = generate_entity_model(entity, doc_file, policy)
        with stage(entity, "render"):
            output = renderer.render_entity(model)
        outputs.append((entity, config.models_dir / f"{entity}.rs", output))

    with stage("device_classes", "extract"):
        enums = [
            extract_device_classes_enums(name, path)
            for name, path in curated_device_class_documents(config.device_classes_dir)
        ]
    with stage("device_classes", "render"):
        output = renderer.render_device_classes(enums)
    outputs.append(("device_classes", config.models_dir / "device_classes.rs", output))

    with stage("mod", "render"):
        output = renderer.render_mod(config.entities)
    outputs.append(("mod", config.models_dir / "mod.rs", output))

    written = _write_all(outputs)
    LOGGER.info("Wrote %d model sources to %s", len(written), config.models_dir)
    return written
