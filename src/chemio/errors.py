"""Errores de los conversores de entrada/salida."""


class DocumentFormatError(ValueError):
    """El documento de intercambio está mal formado o no es de este editor."""


class ConversionError(ValueError):
    """RDKit no pudo interpretar la cadena de entrada."""
