"""Device-class enumeration extraction from integration documents."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
from pathlib import Path

from .strings import to_pascal_case

__all__ = [
    "EnumValue",
    "DeviceClassEnum",
    "device_class_section",
    "parse_enum_values",
    "extract_device_class_enum",
    "extract_device_classes_enums",
]

LOGGER = logging.getLogger(__name__)

_SECTION_HEADING = re.compile(
    r"^(?P<level>#{2,6})[ \t]*Device Class(?:es)?\b.*$",
    re.IGNORECASE | re.MULTILINE,
)
_ANY_HEADING = re.compile(r"^(?P<level>#{2,6})(?:[ \t]|$)", re.MULTILINE)
_ENUM_LINE = re.compile(r"- (?P<name>.*?): (?P<description>.*)")
_NON_WORD = re.compile(r"\W", re.ASCII)


@dataclass(slots=True, frozen=True)
class EnumValue:
    value: str
    description: str

    @property
    def variant(self) -> str:
        return to_pascal_case(self.value) or self.value


@dataclass(slots=True)
class DeviceClassEnum:
    name: str
    values: list[EnumValue] = field(default_factory=list)

    @property
    def type_name(self) -> str:
        return f"{to_pascal_case(self.name)}DeviceClass"


def device_class_section(text: str) -> str | None:
    """Body under the Device Class heading, up to the next heading of equal or higher level."""

    heading = _SECTION_HEADING.search(text)
    if heading is None:
        return None
    level = len(heading.group("level"))
    start = heading.end()
    for candidate in _ANY_HEADING.finditer(text, start):
        if len(candidate.group("level")) <= level:
            return text[start : candidate.start()]
    return text[start:]


def parse_enum_values(section: str) -> list[EnumValue]:
    """``- token: description`` lines; anything else is skipped."""

    values = []
    for line in section.split("\n"):
        match = _ENUM_LINE.search(line)
        if match is None:
            continue
        values.append(
            EnumValue(
                value=_NON_WORD.sub("", match.group("name")),
                description=match.group("description"),
            )
        )
    return values


def extract_device_class_enum(name: str, text: str) -> DeviceClassEnum:
    section = device_class_section(text)
    if section is None:
        LOGGER.debug("No Device Class section in %s", name)
        return DeviceClassEnum(name=name)
    return DeviceClassEnum(name=name, values=parse_enum_values(section))


def extract_device_classes_enums(name: str, doc_file: str | Path) -> DeviceClassEnum:
    LOGGER.debug("Device class %s %s", name, doc_file)
    return extract_device_class_enum(name, Path(doc_file).read_text(encoding="utf-8"))
