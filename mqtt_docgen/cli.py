"""Command-line interface entry points for mqtt_docgen."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from hadocs.corpus import DocsCorpus

from .config import GeneratorConfig, load_config
from .errors import ExtractionError, GeneratorError
from .io import load_integration_document
from .openapi import document_schema, dump_yaml
from .pipeline import generate_openapi_fragments, generate_typed_models, stage

__all__ = ["main"]

LOGGER = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else getattr(logging, args.log_level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(levelname)s:%(name)s:%(message)s")

    try:
        config = load_config(args.config, docs_root=args.docs, output_root=args.output)
        if args.command == "openapi":
            return _cmd_openapi(config)
        if args.command == "models":
            return _cmd_models(config)
        if args.command == "dump-schema":
            return _cmd_dump_schema(config, args.document)
        if args.command == "sync-docs":
            return _cmd_sync_docs(config)
    except GeneratorError as e:
        LOGGER.error("Generation failed: %s", e)
        if isinstance(e, ExtractionError) and e.raw_text is not None:
            LOGGER.error("Offending configuration block:\n%s", e.raw_text)
        return 1
    parser.error("Unknown command")
    return 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mqtt_docgen",
        description="Generate OpenAPI fragments and typed models from Home Assistant MQTT documentation.",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        help="Set logging level (debug, info, warning, error, critical).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging.",
    )
    parser.add_argument("--config", type=Path, help="YAML file with generator settings")
    parser.add_argument("--docs", type=Path, help="Home Assistant docs checkout (default: $HOME_ASSISTANT_DOCS)")
    parser.add_argument("--output", type=Path, help="Project root for generated files (default: $DEVENV_ROOT)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "openapi",
        help="Write specs/fragments/*.yml from the MQTT integration documents",
    )
    subparsers.add_parser(
        "models",
        help="Render src/mqtt/*.rs from generator/input documents",
    )
    dump = subparsers.add_parser(
        "dump-schema",
        help="Print one document's OpenAPI object schema",
    )
    dump.add_argument("document", help="Integration name (e.g. sensor) or path to a .mqtt.markdown file")
    subparsers.add_parser(
        "sync-docs",
        help="Copy MQTT and device-class documents into generator/input",
    )

    return parser


def _cmd_openapi(config: GeneratorConfig) -> int:
    written = generate_openapi_fragments(config)
    print(f"OpenAPI fragments written: {len(written)}")
    return 0


def _cmd_models(config: GeneratorConfig) -> int:
    written = generate_typed_models(config)
    print(f"Model sources written: {len(written)}")
    return 0


def _cmd_dump_schema(config: GeneratorConfig, document: str) -> int:
    path = Path(document)
    if not path.is_file():
        with stage(document, "extract"):
            path = DocsCorpus.from_config(config).document_path(document)
    with stage(document, "extract"):
        doc = load_integration_document(path)
    with stage(doc.name, "normalize"):
        schema = document_schema(doc)
    sys.stdout.write(dump_yaml(schema))
    return 0


def _cmd_sync_docs(config: GeneratorConfig) -> int:
    mqtt_count, device_count = DocsCorpus.from_config(config).sync_to(config.input_dir)
    print(f"Synced {mqtt_count} MQTT documents and {device_count} device-class documents")
    return 0
