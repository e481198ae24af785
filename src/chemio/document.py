"""Documento de intercambio del grafo molecular.

El documento es un diccionario serializable en JSON con la forma::

    {"mime": "application/x-molgraph",
     "metadata": {...},
     "objects": [{"type": "Graph", "vertices": [...], "edges": [...]}]}

Cada arista referencia sus extremos por índice en la lista de vértices.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from chemio.errors import DocumentFormatError
from molgraph.model import EdgeOrientation, EdgeShape, LabelType, MolecularGraph, Vertex

logger = logging.getLogger(__name__)

MIME_TYPE = "application/x-molgraph"
VERSION = "0.1.0"


def graph_to_document(graph: MolecularGraph) -> Dict[str, Any]:
    """Serializa un grafo en el diccionario `{vertices, edges}`.

    Args:
        graph: Grafo a serializar.

    Returns:
        Diccionario con vértices (coordenadas, etiqueta, carga, isótopo e
        hidrógenos implícitos) y aristas (índices, forma y orientación).
    """
    index = {id(v): i for i, v in enumerate(graph.vertices)}
    vertices: List[Dict[str, Any]] = []
    for vertex in graph.vertices:
        data: Dict[str, Any] = {
            "x": vertex.x,
            "y": vertex.y,
            "label": vertex.label,
            "label_type": vertex.label_type.value,
            "charge": vertex.charge,
        }
        if vertex.isotope:
            data["isotope"] = vertex.isotope
        if vertex.h_count:
            data["h_count"] = vertex.h_count
        vertices.append(data)
    edges = [
        {
            "vertices": [index[id(edge.v1)], index[id(edge.v2)]],
            "shape": edge.shape.value,
            "orientation": edge.orientation.value,
        }
        for edge in graph.edges
    ]
    return {"type": "Graph", "vertices": vertices, "edges": edges}


def graph_from_document(data: Dict[str, Any]) -> MolecularGraph:
    """Reconstruye un grafo desde su diccionario de intercambio.

    Las orientaciones se recalculan con la topología del grafo y después se
    aplican las que el documento declara explícitamente.

    Raises:
        DocumentFormatError: Si faltan campos, un valor de enumeración no
            existe o una arista referencia vértices inválidos.
    """
    try:
        vertex_items = data["vertices"]
        edge_items = data.get("edges", [])
    except (KeyError, TypeError, AttributeError) as exc:
        raise DocumentFormatError("Graph document without vertices") from exc

    graph = MolecularGraph()
    try:
        for item in vertex_items:
            label_type = LabelType(item.get("label_type", LabelType.ATOM.value))
            vertex = Vertex(
                (float(item["x"]), float(item["y"])),
                item.get("label", ""),
                charge=int(item.get("charge", 0)),
                label_type=label_type,
            )
            vertex.isotope = int(item.get("isotope", 0))
            graph.vertices.append(vertex)
    except (KeyError, TypeError, ValueError) as exc:
        raise DocumentFormatError(f"Invalid vertex in graph document: {exc}") from exc

    orientations = []
    for item in edge_items:
        try:
            i, j = item["vertices"]
            shape = EdgeShape(item.get("shape", EdgeShape.SINGLE.value))
            orientation = item.get("orientation")
            orientation = EdgeOrientation(orientation) if orientation is not None else None
        except (KeyError, TypeError, ValueError) as exc:
            raise DocumentFormatError(f"Invalid edge in graph document: {exc}") from exc
        if not (0 <= i < len(graph.vertices) and 0 <= j < len(graph.vertices)) or i == j:
            raise DocumentFormatError(f"Edge references invalid vertices {i}, {j}")
        v1 = graph.vertices[i]
        v2 = graph.vertices[j]
        if graph.vertices_are_connected(v1, v2):
            raise DocumentFormatError(f"Duplicate edge between vertices {i} and {j}")
        orientations.append((graph.bind_vertices(v1, v2, shape), orientation))

    graph.update_topology()
    for edge, orientation in orientations:
        if orientation is not None:
            edge.orientation = orientation
    return graph


class NativeConverter:
    """Conversor entre cadenas JSON y documentos/grafos del editor."""

    def __init__(self, indent: Optional[int] = None) -> None:
        self.indent = indent

    def document_to_string(self, document: Dict[str, Any]) -> str:
        return json.dumps(document, indent=self.indent)

    def document_from_string(self, text: str) -> Dict[str, Any]:
        """Lee un documento y comprueba su tipo MIME.

        Raises:
            DocumentFormatError: Si el JSON es inválido o el `mime` no
                corresponde a este editor.
        """
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DocumentFormatError(f"Invalid JSON: {exc}") from exc
        if not isinstance(document, dict) or document.get("mime") != MIME_TYPE:
            raise DocumentFormatError("Wrong file format")
        return document

    def graph_to_string(self, graph: MolecularGraph, metadata: Optional[Dict[str, Any]] = None) -> str:
        document = {
            "mime": MIME_TYPE,
            "version": VERSION,
            "metadata": metadata or {},
            "objects": [graph_to_document(graph)],
        }
        return self.document_to_string(document)

    def graph_from_string(self, text: str) -> MolecularGraph:
        """Devuelve el primer grafo del documento (vacío si no hay ninguno)."""
        document = self.document_from_string(text)
        graphs = [o for o in document.get("objects", []) if isinstance(o, dict) and o.get("type") == "Graph"]
        if not graphs:
            logger.debug("Documento sin objetos de tipo Graph")
            return MolecularGraph()
        return graph_from_document(graphs[0])
