"""Integration tests for the documentation corpus and the batch pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from hadocs.corpus import DocsCorpus, curated_device_class_documents
from mqtt_docgen.config import GeneratorConfig
from mqtt_docgen.errors import ExtractionError, GeneratorError
from mqtt_docgen.io import load_integration_document
from mqtt_docgen.pipeline import COMMON_FRAGMENT, generate_openapi_fragments, generate_typed_models, stage
from tools import extract_configuration_blocks

from conftest import SENSOR_CONFIGURATION


def _config(integrations_dir: Path, tmp_path: Path, **overrides) -> GeneratorConfig:
    return GeneratorConfig(docs_root=integrations_dir.parents[1], output_root=tmp_path / "out", **overrides)


def test_corpus_listing(integrations_dir):
    corpus = DocsCorpus(integrations_dir, excluded=["climate.mqtt.markdown"])

    assert [p.name for p in corpus.mqtt_documents()] == ["device_trigger.mqtt.markdown", "sensor.mqtt.markdown"]
    assert [p.name for p in DocsCorpus(integrations_dir).mqtt_documents()] == [
        "climate.mqtt.markdown",
        "device_trigger.mqtt.markdown",
        "sensor.mqtt.markdown",
    ]
    assert corpus.document_path("sensor") == integrations_dir / "sensor.mqtt.markdown"
    assert [p.name for p in corpus.device_class_documents()] == ["sensor.markdown"]


def test_level_one_device_class_heading_is_not_discovered(integrations_dir):
    (integrations_dir / "light.markdown").write_text("# Device Class\n- `x`: X.\n", encoding="utf-8")

    assert [p.name for p in DocsCorpus(integrations_dir).device_class_documents()] == ["sensor.markdown"]


def test_corpus_documents_carry_companion_description(integrations_dir):
    corpus = DocsCorpus(integrations_dir)

    sensor = load_integration_document(corpus.document_path("sensor"))
    trigger = load_integration_document(corpus.document_path("device_trigger"))

    assert sensor.description == "Sensors are a basic integration in Home Assistant."
    assert trigger.description is None


def test_corpus_missing_documents(integrations_dir, tmp_path):
    corpus = DocsCorpus(integrations_dir)

    with pytest.raises(FileNotFoundError):
        corpus.document_path("lock")
    with pytest.raises(FileNotFoundError):
        DocsCorpus(tmp_path / "nowhere").mqtt_documents()


def test_sync_replaces_input_dir(integrations_dir, tmp_path):
    input_dir = tmp_path / "input"
    (input_dir / "device_classes").mkdir(parents=True)
    (input_dir / "stale.mqtt.markdown").write_text("old", encoding="utf-8")

    counts = DocsCorpus(integrations_dir).sync_to(input_dir)

    assert counts == (3, 1)
    assert not (input_dir / "stale.mqtt.markdown").exists()
    assert (input_dir / "sensor.mqtt.markdown").is_file()
    assert curated_device_class_documents(input_dir / "device_classes") == [
        ("sensor", input_dir / "device_classes" / "sensor.markdown"),
    ]


def test_extract_configuration_blocks(integrations_dir, tmp_path, monkeypatch):
    (integrations_dir / "climate.mqtt.markdown").unlink()
    output = tmp_path / "specs"
    monkeypatch.setattr(extract_configuration_blocks, "DOC_ROOT", integrations_dir)
    monkeypatch.setattr(extract_configuration_blocks, "OUTPUT_PATH", output)

    blocks = extract_configuration_blocks.extract_blocks()
    assert list(blocks) == ["device_trigger.mqtt", "sensor.mqtt"]
    assert blocks["sensor.mqtt"] == SENSOR_CONFIGURATION.strip("\n") + "\n"

    extract_configuration_blocks.main()
    assert (output / "sensor.mqtt.yml").read_text(encoding="utf-8") == blocks["sensor.mqtt"]


def test_extract_configuration_blocks_propagates_errors(integrations_dir, monkeypatch):
    monkeypatch.setattr(extract_configuration_blocks, "DOC_ROOT", integrations_dir)

    with pytest.raises(ExtractionError):
        extract_configuration_blocks.extract_blocks()


def test_generate_openapi_fragments(integrations_dir, tmp_path):
    config = _config(integrations_dir, tmp_path)

    written = generate_openapi_fragments(config)

    assert [p.name for p in written] == [COMMON_FRAGMENT, "device_trigger.yml", "sensor.yml"]
    fragment = (config.fragments_dir / "device_trigger.yml").read_text(encoding="utf-8")
    _, _, body = fragment.partition("\n\n")
    schema = yaml.safe_load(body)
    assert schema["description"] == ""
    assert schema["required"] == ["automation_type", "topic", "type"]


def test_generate_openapi_stops_at_failing_document(integrations_dir, tmp_path):
    config = _config(integrations_dir, tmp_path, excluded_documents=())

    with pytest.raises(ExtractionError) as excinfo:
        generate_openapi_fragments(config)

    assert excinfo.value.document == "climate"
    assert excinfo.value.stage == "extract"
    assert not (config.fragments_dir / "climate.yml").exists()
    assert not config.fragments_dir.exists()


def test_late_failure_leaves_no_fragments(integrations_dir, tmp_path):
    (integrations_dir / "zzz_lock.mqtt.markdown").write_text("# Lock\n\nNo block.\n", encoding="utf-8")
    config = _config(integrations_dir, tmp_path)

    with pytest.raises(ExtractionError) as excinfo:
        generate_openapi_fragments(config)

    assert excinfo.value.document == "zzz_lock"
    assert not config.fragments_dir.exists()


def test_generate_typed_models(integrations_dir, tmp_path):
    config = _config(integrations_dir, tmp_path, entities=("sensor", "device_trigger"))
    DocsCorpus.from_config(config).sync_to(config.input_dir)

    written = generate_typed_models(config)

    assert [p.name for p in written] == ["sensor.rs", "device_trigger.rs", "device_classes.rs", "mod.rs"]
    mod = (config.models_dir / "mod.rs").read_text(encoding="utf-8")
    assert mod.endswith("pub mod sensor;\npub mod device_trigger;\n")


def test_generate_typed_models_missing_entity(integrations_dir, tmp_path):
    config = _config(integrations_dir, tmp_path, entities=("lock",))
    DocsCorpus.from_config(config).sync_to(config.input_dir)

    with pytest.raises(GeneratorError) as excinfo:
        generate_typed_models(config)

    assert excinfo.value.document == "lock"
    assert excinfo.value.stage == "extract"
    assert "FileNotFoundError" in str(excinfo.value)


def test_late_model_failure_leaves_no_sources(integrations_dir, tmp_path):
    config = _config(integrations_dir, tmp_path, entities=("sensor", "device_trigger", "lock"))
    DocsCorpus.from_config(config).sync_to(config.input_dir)

    with pytest.raises(GeneratorError) as excinfo:
        generate_typed_models(config)

    assert excinfo.value.document == "lock"
    assert not config.models_dir.exists()


def test_stage_keeps_existing_tags():
    with pytest.raises(GeneratorError) as excinfo:
        with stage("sensor", "lower"):
            raise GeneratorError("boom", stage="render")

    assert excinfo.value.document == "sensor"
    assert excinfo.value.stage == "render"
