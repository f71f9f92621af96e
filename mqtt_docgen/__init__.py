"""Public interface for the mqtt_docgen package."""

from .device_class import extract_device_classes_enums
from .io import load_integration_document
from .openapi import document_schema
from .typed_model import generate_entity_model

__all__ = [
    "document_schema",
    "extract_device_classes_enums",
    "generate_entity_model",
    "load_integration_document",
]
__version__ = "0.1.0"
