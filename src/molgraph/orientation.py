"""Orientación de dibujo de los dobles enlaces (izquierda, derecha o centrado)."""

from __future__ import annotations

from typing import List

from molgraph.geom import cross, to_point
from molgraph.model import Edge, EdgeOrientation, EdgeShape, MolecularGraph, Topology, Vertex

# Formas que cuentan como "insaturación vecina" al desempatar.
_UNSATURATED_SHAPES = (EdgeShape.DOUBLE, EdgeShape.AROMATIC)


class OrientationResolver:
    """Decide hacia qué lado se dibuja la segunda línea de un doble enlace.

    Depende de `graph.ring_systems`, por lo que debe usarse después de
    `TopologyAnalyzer.update_topology`.
    """

    def __init__(self, graph: MolecularGraph) -> None:
        self.graph = graph

    @staticmethod
    def is_to_left(edge: Edge, coords) -> bool:
        """Indica si un punto queda a la izquierda de la recta v1 -> v2."""
        return cross(to_point(edge.v1.coords), to_point(edge.v2.coords), to_point(coords)) < 0

    def _left_count(self, edge: Edge, vertices: List[Vertex]) -> int:
        return sum(1 for v in vertices if self.is_to_left(edge, v.coords))

    def _has_unsaturation(self, vertex: Vertex, edge: Edge) -> bool:
        return any(
            e is not edge and e.shape in _UNSATURATED_SHAPES
            for e in self.graph.find_edges_by_vertex(vertex)
        )

    def update_edge_orientation(self, edge: Edge) -> None:
        """Recalcula `edge.orientation`; ignora las aristas simétricas.

        Dentro de un sistema de anillos la segunda línea va hacia el lado
        con más vecinos del sistema; en caso de empate se cuentan solo los
        vecinos con otra insaturación y, si vuelve a empatar, se elige la
        derecha. Fuera de anillos se centra si algún extremo tiene texto
        visible o pertenece a un anillo (doble enlace exocíclico).
        """
        if not edge.is_asymmetric:
            return
        for ring_system in self.graph.ring_systems:
            if edge not in ring_system:
                continue
            v1_neighbors = [v for v in ring_system.neighboring_vertices(edge.v1) if v is not edge.v2]
            v2_neighbors = [v for v in ring_system.neighboring_vertices(edge.v2) if v is not edge.v1]
            neighbors = v1_neighbors + v2_neighbors
            left = self._left_count(edge, neighbors)
            right = len(neighbors) - left
            if left > right:
                edge.orientation = EdgeOrientation.LEFT
            elif right > left:
                edge.orientation = EdgeOrientation.RIGHT
            else:
                neighbors = [v for v in neighbors if self._has_unsaturation(v, edge)]
                left = self._left_count(edge, neighbors)
                if left > len(neighbors) - left:
                    edge.orientation = EdgeOrientation.LEFT
                else:
                    edge.orientation = EdgeOrientation.RIGHT
            return
        if edge.v1.visible_text or edge.v2.visible_text:
            edge.orientation = EdgeOrientation.CENTER
        elif edge.v1.topology == Topology.RING or edge.v2.topology == Topology.RING:
            edge.orientation = EdgeOrientation.CENTER
        else:
            edge.orientation = EdgeOrientation.LEFT

    def update_all(self) -> None:
        """Reorienta todos los dobles enlaces del grafo."""
        for edge in self.graph.edges:
            self.update_edge_orientation(edge)
