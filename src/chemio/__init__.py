"""Conversores entre el grafo del editor y formatos de texto."""

from chemio.document import MIME_TYPE, NativeConverter, graph_from_document, graph_to_document
from chemio.errors import ConversionError, DocumentFormatError

__all__ = [
    "MIME_TYPE",
    "NativeConverter",
    "graph_from_document",
    "graph_to_document",
    "ConversionError",
    "DocumentFormatError",
]
