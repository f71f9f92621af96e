#!/usr/bin/env python3
"""Dump the raw configuration block of every MQTT integration document to specs/<name>.yml."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable

from mqtt_docgen.io import MQTT_SUFFIX, extract_configuration_block, integration_name

DOC_ROOT = Path(os.environ.get("HOME_ASSISTANT_DOCS", ".")) / "source" / "_integrations"
OUTPUT_PATH = Path(__file__).resolve().parents[1] / "specs"


def _iter_doc_files(root: Path) -> Iterable[Path]:
    yield from sorted(root.glob(f"*{MQTT_SUFFIX}"))


def extract_blocks() -> Dict[str, str]:
    if not DOC_ROOT.exists():
        raise FileNotFoundError(f"Documentation directory not found: {DOC_ROOT}")

    blocks: Dict[str, str] = {}
    for doc_path in _iter_doc_files(DOC_ROOT):
        name = integration_name(doc_path)
        text = doc_path.read_text(encoding="utf-8", errors="ignore")
        block = extract_configuration_block(text, document=name)
        # Sentinels sit on their own lines; keep the YAML body only.
        blocks[f"{name}.mqtt"] = block.strip("\n") + "\n"
    return blocks


def main() -> None:
    blocks = extract_blocks()
    OUTPUT_PATH.mkdir(parents=True, exist_ok=True)
    for name, block in blocks.items():
        (OUTPUT_PATH / f"{name}.yml").write_text(block, encoding="utf-8")
    print(f"Configuration blocks extracted to {OUTPUT_PATH} ({len(blocks)} files)")


if __name__ == "__main__":
    main()
