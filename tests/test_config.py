"""Generator configuration precedence and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mqtt_docgen.config import DEFAULT_ENTITIES, GeneratorConfig, load_config
from mqtt_docgen.errors import ConfigError


def test_defaults():
    config = load_config(environ={})

    assert config.docs_root is None
    assert config.entities == DEFAULT_ENTITIES
    assert "light" not in config.entities
    assert config.reference_integration == "sensor"
    assert "device" in config.ignored_attributes
    assert config.excluded_documents == (
        "climate.mqtt.markdown",
        "number.mqtt.markdown",
        "water_heater.mqtt.markdown",
    )


def test_derived_directories(tmp_path):
    config = GeneratorConfig(docs_root=tmp_path / "docs", output_root=tmp_path / "out")

    assert config.integrations_dir == tmp_path / "docs" / "source" / "_integrations"
    assert config.fragments_dir == tmp_path / "out" / "specs" / "fragments"
    assert config.input_dir == tmp_path / "out" / "generator" / "input"
    assert config.device_classes_dir == tmp_path / "out" / "generator" / "input" / "device_classes"
    assert config.models_dir == tmp_path / "out" / "src" / "mqtt"


def test_integrations_dir_requires_docs_root():
    with pytest.raises(ConfigError):
        GeneratorConfig().integrations_dir


def test_file_then_env_then_overrides(tmp_path):
    path = tmp_path / "generator.yml"
    path.write_text(
        "docs_root: /from/file\noutput_root: /from/file/out\nentities: [sensor, lock]\n",
        encoding="utf-8",
    )

    from_file = load_config(path, environ={})
    assert from_file.docs_root == Path("/from/file")
    assert from_file.entities == ("sensor", "lock")

    from_env = load_config(path, environ={"HOME_ASSISTANT_DOCS": "/from/env"})
    assert from_env.docs_root == Path("/from/env")
    assert from_env.output_root == Path("/from/file/out")

    overridden = load_config(
        path,
        environ={"HOME_ASSISTANT_DOCS": "/from/env", "DEVENV_ROOT": "/env/out"},
        docs_root=Path("/from/flag"),
        output_root=None,
    )
    assert overridden.docs_root == Path("/from/flag")
    assert overridden.output_root == Path("/env/out")


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.yml", environ={})


def test_non_mapping_file_raises(tmp_path):
    path = tmp_path / "generator.yml"
    path.write_text("- sensor\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(path, environ={})


def test_unknown_key_raises(tmp_path):
    path = tmp_path / "generator.yml"
    path.write_text("entitys: [sensor]\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid generator configuration"):
        load_config(path, environ={})


def test_blank_reference_integration_is_rejected():
    with pytest.raises(ConfigError):
        load_config(environ={}, reference_integration="  ")


def test_config_is_frozen():
    config = GeneratorConfig()

    with pytest.raises(ValidationError):
        config.reference_integration = "lock"
