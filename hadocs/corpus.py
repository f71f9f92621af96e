"""Home Assistant documentation corpus utilities.

This module is the filesystem side of the generator: it locates the MQTT
integration documents inside a Home Assistant documentation checkout
(``source/_integrations``) or a generator input directory and finds the
documents that carry a *Device Class* section. Companion descriptions are
read by :mod:`mqtt_docgen.io` next to each document.
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Iterable

from mqtt_docgen.config import GeneratorConfig
from mqtt_docgen.io import MARKDOWN_SUFFIX, MQTT_SUFFIX, integration_name

LOGGER = logging.getLogger(__name__)

_DEVICE_CLASS_HEADING = re.compile(r"^#{2,6} *Device Class", re.IGNORECASE | re.MULTILINE)


class DocsCorpus:
    """Read-only view over a directory of integration markdown documents.

    Parameters
    ----------
    integrations_dir:
        Directory holding ``*.markdown`` documents, either
        ``<docs checkout>/source/_integrations`` or the generator's own
        ``generator/input`` copy.
    excluded:
        Document file names (``climate.mqtt.markdown``, …) left out of
        :meth:`mqtt_documents`.

    Notes
    -----
    Nothing here caches; every call re-lists the directory so a corpus can
    be synced and read in the same run.
    """

    def __init__(self, integrations_dir: str | Path, *, excluded: Iterable[str] = ()):
        self.integrations_dir = Path(integrations_dir)
        self.excluded = frozenset(excluded)

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> DocsCorpus:
        return cls(config.integrations_dir, excluded=config.excluded_documents)

    # --------------------------------------------------------------------- API
    def mqtt_documents(self) -> list[Path]:
        """Sorted MQTT integration documents minus the exclusion list."""

        self._require_dir()
        documents = [
            path
            for path in sorted(self.integrations_dir.glob(f"*{MQTT_SUFFIX}"))
            if path.is_file() and path.name not in self.excluded
        ]
        LOGGER.debug(
            "MQTT documents in %s: %d (excluded=%s)",
            self.integrations_dir,
            len(documents),
            sorted(self.excluded),
        )
        return documents

    def document_path(self, name: str) -> Path:
        path = self.integrations_dir / f"{name}{MQTT_SUFFIX}"
        if not path.is_file():
            raise FileNotFoundError(f"Integration document not found: {path}")
        return path

    def device_class_documents(self) -> list[Path]:
        """Documents with a ``## Device Class`` (or deeper) heading."""

        self._require_dir()
        found = []
        for path in sorted(self.integrations_dir.glob(f"*{MARKDOWN_SUFFIX}")):
            text = path.read_text(encoding="utf-8", errors="ignore")
            if _DEVICE_CLASS_HEADING.search(text):
                found.append(path)
        return found

    def sync_to(self, input_dir: str | Path) -> tuple[int, int]:
        """Replace ``input_dir`` with fresh copies of the MQTT and device-class documents.

        Returns the number of ``(mqtt, device_class)`` documents copied.
        """

        input_dir = Path(input_dir)
        device_dir = input_dir / "device_classes"
        if input_dir.exists():
            shutil.rmtree(input_dir)
        device_dir.mkdir(parents=True)

        mqtt_docs = sorted(self.integrations_dir.glob(f"*{MQTT_SUFFIX}"))
        for path in mqtt_docs:
            shutil.copyfile(path, input_dir / path.name)
        device_docs = self.device_class_documents()
        for path in device_docs:
            shutil.copyfile(path, device_dir / path.name)

        LOGGER.info(
            "Synced %d MQTT and %d device-class documents into %s",
            len(mqtt_docs),
            len(device_docs),
            input_dir,
        )
        return len(mqtt_docs), len(device_docs)

    # ----------------------------------------------------------------- helpers
    def _require_dir(self) -> None:
        if not self.integrations_dir.is_dir():
            raise FileNotFoundError(f"Documentation directory not found: {self.integrations_dir}")


def curated_device_class_documents(directory: str | Path) -> list[tuple[str, Path]]:
    """``(enum name, path)`` for each curated device-class document, sorted by name."""

    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Device-class directory not found: {directory}")
    return [
        (integration_name(path), path)
        for path in sorted(directory.glob(f"*{MARKDOWN_SUFFIX}"))
        if path.is_file()
    ]
