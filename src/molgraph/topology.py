"""Clasificación de enlaces en anillo/cadena y extracción de sistemas de anillos."""

from __future__ import annotations

from typing import Dict, List

from molgraph.model import Edge, MolecularGraph, Topology, Vertex


class TopologyAnalyzer:
    """Calcula la topología de un grafo vivo.

    Un enlace pertenece a un anillo si al quitarlo no aumenta el número de
    componentes conexas. Los sistemas de anillos son las componentes que
    quedan al eliminar todos los enlaces de cadena.
    """

    def __init__(self, graph: MolecularGraph) -> None:
        self.graph = graph

    def edge_topology(self, edge: Edge) -> Topology:
        """Clasifica una arista como `RING` o `CHAIN`.

        Args:
            edge: Arista perteneciente al grafo.

        Returns:
            `Topology.CHAIN` si algún extremo es una hoja o si la arista es un
            puente; `Topology.RING` en otro caso.
        """
        if len(edge.v1.neighbors) == 1 or len(edge.v2.neighbors) == 1:
            return Topology.CHAIN
        index = next((i for i, e in enumerate(self.graph.edges) if e is edge), None)
        if index is None:
            return Topology.CHAIN
        graph_copy = self.graph.copy()
        before = len(graph_copy.subgraphs())
        graph_copy.delete_edge(graph_copy.edges[index], drop_dangling_vertices=False)
        after = len(graph_copy.subgraphs())
        return Topology.RING if before == after else Topology.CHAIN

    def update_topology(self) -> List[MolecularGraph]:
        """Reclasifica todo el grafo y reconstruye `graph.ring_systems`.

        Returns:
            Lista de sistemas de anillos; cada uno referencia vértices y
            aristas del grafo vivo.

        Side Effects:
            Actualiza `topology` en todos los vértices y aristas.
        """
        graph = self.graph
        for vertex in graph.vertices:
            vertex.topology = Topology.CHAIN
        for edge in graph.edges:
            edge.topology = self.edge_topology(edge)
            if edge.topology == Topology.RING:
                edge.v1.topology = Topology.RING
                edge.v2.topology = Topology.RING

        graph_copy = graph.copy()
        for edge in [e for e in graph_copy.edges if e.topology == Topology.CHAIN]:
            graph_copy.delete_edge(edge)
        # Vértices aislados desde el principio no forman anillos.
        graph_copy.vertices = [v for v in graph_copy.vertices if v.neighbors]

        # Los handles se conservan en la copia y permiten volver al grafo vivo.
        live_vertices: Dict[int, Vertex] = {v.handle: v for v in graph.vertices}
        live_edges: Dict[int, Edge] = {e.handle: e for e in graph.edges}
        ring_systems: List[MolecularGraph] = []
        for component in graph_copy.subgraphs():
            ring_systems.append(MolecularGraph(
                [live_vertices[v.handle] for v in component.vertices if v.handle in live_vertices],
                [live_edges[e.handle] for e in component.edges if e.handle in live_edges],
            ))
        graph.ring_systems = ring_systems
        return ring_systems
