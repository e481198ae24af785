"""Operaciones de edición que hacen crecer o reducen el dibujo molecular.

Todas las operaciones devuelven el sub-grafo con lo añadido (o eliminado),
que es exactamente lo que una acción de historial necesita para deshacer y
rehacer sin recalcular. Las peticiones que no cumplen sus precondiciones
devuelven un sub-grafo vacío en lugar de lanzar excepciones.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from chemcalc.elements import CHEMICAL_ELEMENTS
from chemcalc.linear import AbbreviatedFragment, AtomicFragment, CompositeFragment, LinearFragment
from molgraph import geom
from molgraph.model import Coords, Edge, EdgeShape, LabelType, MolecularGraph, Vertex
from molgraph.settings import EditorSettings

logger = logging.getLogger(__name__)


class StructureEditor:
    """Operaciones de crecimiento sobre un `MolecularGraph` vivo.

    Args:
        graph: Grafo que se modifica en el lugar.
        settings: Parámetros de colocación; por defecto `EditorSettings()`.
    """

    def __init__(self, graph: MolecularGraph, settings: Optional[EditorSettings] = None) -> None:
        self.graph = graph
        self.settings = settings or EditorSettings()

    # -- potencial de aglomeración ----------------------------------------

    def crowding_potential(self, point: Coords) -> float:
        """Suma de 1/d² a los vértices cercanos a `point`.

        Solo cuentan los vértices dentro de una caja de
        `crowding_filter_factor` enlaces promedio alrededor del punto, y se
        descartan los que están a menos de `crowding_coalescence_factor`
        enlaces (coincidentes con el punto).
        """
        avg = self.graph.get_average_bond_distance(self.settings.fallback_bond_distance)
        window = self.settings.crowding_filter_factor * avg
        threshold = self.settings.crowding_coalescence_factor * avg
        x, y = point
        potential = 0.0
        for vertex in self.graph.vertices:
            if window and (abs(vertex.x - x) >= window or abs(vertex.y - y) >= window):
                continue
            d = math.hypot(vertex.x - x, vertex.y - y)
            if d > threshold:
                potential += 1.0 / (d * d)
        return potential

    def least_crowded_point(self, points: Sequence[Coords]) -> Coords:
        """Punto de `points` con menor potencial; el primero gana en empates."""
        if not points:
            return (0.0, 0.0)
        best_point = points[0]
        best_potential = None
        for point in points:
            potential = self.crowding_potential(point)
            if best_potential is None or potential < best_potential:
                best_potential = potential
                best_point = point
        return best_point

    # -- operaciones elementales ------------------------------------------

    def add_vertex(self, coords: Coords, label: Optional[str] = None) -> MolecularGraph:
        return self.graph.add_vertex(coords, label if label is not None else self.settings.default_label)

    def bind_vertices(self, v1: Vertex, v2: Vertex, shape: EdgeShape = EdgeShape.SINGLE) -> MolecularGraph:
        """Une dos vértices existentes.

        Returns:
            Sub-grafo con la arista nueva; vacío si los vértices son el
            mismo, ya estaban unidos o no pertenecen al grafo.
        """
        if v1 is v2 or v1 not in self.graph or v2 not in self.graph or self.graph.vertices_are_connected(v1, v2):
            logger.debug("bind_vertices ignorado para %r y %r", v1, v2)
            return MolecularGraph()
        return MolecularGraph([], [self.graph.bind_vertices(v1, v2, shape)])

    def delete_vertex(self, vertex: Vertex) -> MolecularGraph:
        return self.graph.delete_vertex(vertex)

    def delete_edge(self, edge: Edge) -> MolecularGraph:
        return self.graph.delete_edge(edge)

    def add_bound_vertex_to(self, vertex: Vertex) -> MolecularGraph:
        """Añade un vértice unido a `vertex` en una posición poco congestionada.

        Sin vecinos, el enlace nuevo sube 30° hacia la derecha. Con un
        vecino, se elige el menos congestionado de los dos puntos a ±120°
        (o la prolongación recta si el enlace existente es triple). Con dos
        o más, el vértice nuevo se coloca en el mayor hueco angular y los
        vecinos terminales que se pueden mover se redistribuyen con él.

        Args:
            vertex: Vértice del grafo al que se une el nuevo.

        Returns:
            Sub-grafo con el vértice y la arista nuevos.

        Side Effects:
            Puede mover vecinos terminales de `vertex`.
        """
        if vertex not in self.graph:
            logger.debug("add_bound_vertex_to sobre un vértice ajeno al grafo")
            return MolecularGraph()
        bond_len = self.settings.bond_length
        origin = geom.to_point(vertex.coords)
        neighbors = self.graph.neighboring_vertices(vertex)

        if not neighbors:
            point = geom.point_at(origin, -math.pi / 6, bond_len)
            return self._bind_new_vertex(vertex, (point.x(), point.y()))

        if len(neighbors) == 1:
            neighbor = geom.to_point(neighbors[0].coords)
            alfa = geom.direction_angle(origin, neighbor)
            length = geom.distance(origin, neighbor)
            if self.graph.find_edges_by_vertex(vertex)[0].bond_order == 3:
                point = geom.point_at(origin, alfa + math.pi, length)
                coords = (point.x(), point.y())
            else:
                candidates = [geom.point_at(origin, alfa + sign * 2 * math.pi / 3, length) for sign in (1, -1)]
                coords = self.least_crowded_point([(p.x(), p.y()) for p in candidates])
            return self._bind_new_vertex(vertex, coords)

        movable = [n for n in neighbors if len(n.neighbors) == 1 and n.label_type == LabelType.ATOM]
        fixed = [n for n in neighbors if n not in movable]
        if not fixed:
            fixed.append(movable.pop(0))
        if len(fixed) > 2 or (len(fixed) == 2 and len(movable) > 1):
            fixed = neighbors
            movable = []
        angle1, gap = geom.largest_gap(geom.direction_angle(origin, geom.to_point(n.coords)) for n in fixed)

        added = self._bind_new_vertex(vertex, (vertex.x + bond_len, vertex.y))
        movable.append(added.vertices[0])
        for i, neighbor in enumerate(movable):
            alfa = geom.snap_angle(angle1 + gap * (i + 1) / (len(movable) + 1), self.settings.angle_snap_deg)
            point = geom.point_at(origin, alfa, bond_len)
            neighbor.coords = (point.x(), point.y())
        return added

    def _bind_new_vertex(self, vertex: Vertex, coords: Coords) -> MolecularGraph:
        new_vertex = self.graph._add_vertex(coords, self.settings.default_label)
        edge = self.graph.bind_vertices(vertex, new_vertex)
        return MolecularGraph([new_vertex], [edge])

    def add_default_fragment(self, coords: Coords) -> MolecularGraph:
        """Fragmento inicial: un vértice en `coords` y otro unido a él."""
        vertex = self.graph._add_vertex(coords, self.settings.default_label)
        result = MolecularGraph([vertex])
        return result.merge(self.add_bound_vertex_to(vertex))

    def add_chain(self, vertex: Vertex, n_vertices: int) -> MolecularGraph:
        """Prolonga una cadena de `n_vertices` átomos desde `vertex`."""
        result = MolecularGraph()
        if vertex not in self.graph:
            return result
        last = vertex
        for _ in range(n_vertices):
            fragment = self.add_bound_vertex_to(last)
            result.merge(fragment)
            last = fragment.vertices[0]
        return result

    # -- anillos -------------------------------------------------------------

    def fuse_ring(self, edge: Edge, n_vertices: int, desaturate: bool = False) -> MolecularGraph:
        """Fusiona un anillo regular de `n_vertices` sobre una arista existente.

        Se comparan los dos polígonos posibles (uno a cada lado de la
        arista) y se usa el de menor potencial de aglomeración total.

        Args:
            edge: Arista compartida por el anillo nuevo.
            n_vertices: Tamaño del anillo resultante (>= 3).
            desaturate: Si se alternan enlaces simples y dobles cuando la
                arista semilla es simple y su primer extremo tiene H.

        Returns:
            Sub-grafo con los `n_vertices - 2` vértices y las
            `n_vertices - 1` aristas nuevas.
        """
        if edge not in self.graph or n_vertices < 3:
            logger.debug("fuse_ring ignorado: arista ajena o tamaño %d", n_vertices)
            return MolecularGraph()
        side1, side2 = geom.regular_polygon_sides(
            geom.to_point(edge.v1.coords), geom.to_point(edge.v2.coords), n_vertices)
        crowding1 = sum(self.crowding_potential((p.x(), p.y())) for p in side1)
        crowding2 = sum(self.crowding_potential((p.x(), p.y())) for p in side2)
        if crowding1 < crowding2:
            points, first, last = side1, edge.v1, edge.v2
        else:
            points, first, last = side2, edge.v2, edge.v1

        saturated = not (desaturate and edge.shape == EdgeShape.SINGLE and edge.v1.h_count > 1)
        result = MolecularGraph()
        previous = first
        for point in points:
            vertex = self.graph._add_vertex((point.x(), point.y()), "C")
            result.vertices.append(vertex)
            shape = EdgeShape.SINGLE if saturated else EdgeShape.DOUBLE
            result.edges.append(self.graph.bind_vertices(vertex, previous, shape))
            if desaturate:
                saturated = not saturated
            previous = vertex
        shape = EdgeShape.SINGLE if saturated else EdgeShape.DOUBLE
        result.edges.append(self.graph.bind_vertices(previous, last, shape))
        return result

    def attach_ring(self, vertex: Vertex, n_vertices: int, desaturate: bool = False) -> MolecularGraph:
        """Añade un anillo del que `vertex` pasa a formar parte."""
        if vertex not in self.graph or n_vertices < 3:
            return MolecularGraph()
        if len(vertex.neighbors) < 2:
            result = self.add_bound_vertex_to(vertex)
            return result.merge(self.fuse_ring(result.edges[0], n_vertices, desaturate))
        internal_angle = math.pi * (n_vertices - 2) / n_vertices
        alfa = vertex.least_crowded_angle() + internal_angle / 2
        point = geom.point_at(geom.to_point(vertex.coords), alfa, self.settings.bond_length)
        result = self._bind_new_vertex(vertex, (point.x(), point.y()))
        return result.merge(self.fuse_ring(result.edges[0], n_vertices, desaturate))

    # -- simetrización ---------------------------------------------------

    def symmetrize_along_edge(self, edge: Edge) -> MolecularGraph:
        """Completa la molécula con su imagen invertida respecto al centro de `edge`.

        Solo aplica si exactamente uno de los extremos es terminal: la parte
        unida al otro extremo se copia, se invierte por el punto medio y se
        engancha al extremo terminal (estireno -> trans-estilbeno).
        """
        if edge not in self.graph or (len(edge.v1.neighbors) == 1) == (len(edge.v2.neighbors) == 1):
            logger.debug("symmetrize_along_edge sin extremo terminal único")
            return MolecularGraph()
        center = geom.to_point(((edge.v1.x + edge.v2.x) / 2, (edge.v1.y + edge.v2.y) / 2))
        free_vertex = edge.v1 if len(edge.v1.neighbors) == 1 else edge.v2
        bound_vertex = edge.other(free_vertex)
        endpoints = {edge.v1.handle, edge.v2.handle}

        result = self.graph.subgraph_with(edge.v1).copy()
        result.edges = [e for e in result.edges if e.handle != edge.handle]
        for copied in result.edges:
            if copied.v1.handle == bound_vertex.handle:
                copied.v2.remove_neighbor(copied.v1)
                copied.v1 = free_vertex
            elif copied.v2.handle == bound_vertex.handle:
                copied.v1.remove_neighbor(copied.v2)
                copied.v2 = free_vertex
        result.vertices = [v for v in result.vertices if v.handle not in endpoints]
        for vertex in result.vertices:
            point = geom.reflect_point(geom.to_point(vertex.coords), center)
            vertex.coords = (point.x(), point.y())
        result.renew_handles()
        self.graph.add(result)
        self.graph.update_topology()
        return result

    def symmetrize_at_vertex(self, vertex: Vertex, order: int) -> MolecularGraph:
        """Añade `order - 1` copias giradas de la rama que cuelga de `vertex`.

        Con `order == 2` el giro es de 120° y no de 180°, para no duplicar la
        rama sobre la misma recta.
        """
        if vertex not in self.graph or len(vertex.neighbors) != 1 or order < 2:
            logger.debug("symmetrize_at_vertex requiere un vértice con un único vecino y orden >= 2")
            return MolecularGraph()
        increment = 2 * math.pi / 3 if order == 2 else 2 * math.pi / order
        neighbor = next(iter(vertex.neighbors))

        branch = self.graph.subgraph_with(vertex).copy()
        vertex_copy = next(v for v in branch.vertices if v.handle == vertex.handle)
        branch.vertices = [v for v in branch.vertices if v is not vertex_copy]
        branch.edges = [e for e in branch.edges if e.v1 is not vertex_copy and e.v2 is not vertex_copy]
        for v in branch.vertices:
            v.remove_neighbor(vertex_copy)

        result = MolecularGraph()
        for i in range(1, order):
            rotated = branch.copy()
            rotated.apply_rotation(vertex.coords, increment * i)
            to_bind = next(v for v in rotated.vertices if v.handle == neighbor.handle)
            rotated.renew_handles()
            self.graph.add(rotated)
            result.merge(rotated)
            result.edges.append(self.graph.bind_vertices(to_bind, vertex))
        self.graph.update_topology()
        return result

    # -- hidrógenos y fórmulas lineales ----------------------------------

    def strip_hydrogens(self) -> MolecularGraph:
        """Quita todos los hidrógenos explícitos y sus enlaces."""
        hydrogens = [v for v in self.graph.vertices if v.element is not None and v.element.symbol == "H"]
        edges: List[Edge] = []
        for vertex in hydrogens:
            edges.extend(e for e in self.graph.find_edges_by_vertex(vertex) if all(e is not x for x in edges))
        removed = MolecularGraph(hydrogens, edges)
        self.graph.remove(removed)
        return removed

    def combine(self, fragment: MolecularGraph, our_vertex: Vertex, their_vertex: Vertex) -> Edge:
        """Incorpora un fragmento suelto y lo une por `their_vertex` a `our_vertex`.

        El fragmento se escala a la longitud de enlace del grafo y se gira y
        traslada para que `their_vertex` quede donde se colocaría un
        sustituyente nuevo de `our_vertex`.

        Returns:
            La arista que une ambos vértices.
        """
        fragment_editor = StructureEditor(fragment, replace(
            self.settings, bond_length=fragment.get_average_bond_distance(self.settings.bond_length)))
        our_added = self.add_bound_vertex_to(our_vertex)
        their_added = fragment_editor.add_bound_vertex_to(their_vertex)
        fragment.apply_scaling(
            self.graph.get_average_bond_distance(self.settings.bond_length)
            / fragment.get_average_bond_distance(self.settings.bond_length))

        our_target = our_added.vertices[0]
        pivot = their_added.vertices[0]
        alfa = (math.atan2(their_vertex.y - pivot.y, their_vertex.x - pivot.x)
                - math.atan2(our_target.y - our_vertex.y, our_target.x - our_vertex.x))
        fragment.apply_rotation(pivot.coords, alfa)
        fragment.apply_translation((our_vertex.x - pivot.x, our_vertex.y - pivot.y))

        self.graph.remove(our_added)
        fragment.remove(their_added)
        self.graph.add(fragment)
        return self.graph.bind_vertices(our_vertex, their_vertex)

    def expand_linear(self, vertex: Vertex) -> Tuple[MolecularGraph, MolecularGraph]:
        """Sustituye una fórmula lineal terminal por su estructura explícita.

        Returns:
            Tupla `(añadido, eliminado)`: la estructura incorporada (con la
            arista de unión) y el vértice original con su arista. Ambos
            vacíos si el vértice no es una fórmula lineal con un solo vecino.
        """
        formula = vertex.linear_formula
        if vertex not in self.graph or formula is None or len(vertex.neighbors) != 1:
            logger.debug("expand_linear ignorado para %r", vertex)
            return MolecularGraph(), MolecularGraph()
        expansion = fragment_to_graph(formula, self.settings)
        if not expansion.vertices:
            return MolecularGraph(), MolecularGraph()
        neighbor = next(iter(vertex.neighbors))
        removed = self.graph.delete_vertex(vertex, drop_dangling_vertices=False)
        head = expansion.vertices[0]
        edge = self.combine(expansion, neighbor, head)
        added = MolecularGraph(expansion.vertices, expansion.edges + [edge])
        return added, removed


def next_element_label(label: str, key: str, reverse: bool = False) -> str:
    """Siguiente símbolo de elemento que empieza por la tecla pulsada.

    Los candidatos se ordenan por frecuencia de uso y luego alfabéticamente;
    al llegar al final se vuelve al primero.

    Returns:
        El símbolo siguiente (o el anterior con `reverse`); cadena vacía
        si ningún elemento empieza por `key`.
    """
    candidates = sorted(
        (e for e in CHEMICAL_ELEMENTS.values() if e.symbol[0].lower() == key[:1].lower()),
        key=lambda e: (e.abundance, e.symbol),
    )
    symbols = [e.symbol for e in candidates]
    if not symbols:
        return ""
    if label not in symbols:
        return symbols[-1] if reverse else symbols[0]
    step = -1 if reverse else 1
    return symbols[(symbols.index(label) + step) % len(symbols)]


def fragment_to_graph(fragment: LinearFragment, settings: Optional[EditorSettings] = None) -> MolecularGraph:
    """Construye la estructura explícita de un fragmento de fórmula lineal.

    El primer vértice del grafo devuelto es el átomo de unión del fragmento.
    Las abreviaturas se construyen a partir de su SMILES con RDKit.
    """
    settings = settings or EditorSettings()
    if isinstance(fragment, AtomicFragment):
        graph = MolecularGraph()
        vertex = graph._add_vertex((0.0, 0.0), fragment.element.symbol)
        vertex.charge = fragment.charge
        return graph
    if isinstance(fragment, AbbreviatedFragment):
        from chemio.rdkit_io import smiles_to_graph

        return smiles_to_graph(fragment.abbreviation.smiles, bond_length=settings.bond_length)
    if not isinstance(fragment, CompositeFragment):
        return MolecularGraph()

    components = iter(fragment.components)
    graph = MolecularGraph()
    for component in components:
        graph = fragment_to_graph(component, settings)
        if graph.vertices:
            break
    if not graph.vertices:
        return graph
    editor = StructureEditor(graph, settings)
    last_vertex = graph.vertices[0]
    for component in components:
        component_graph = fragment_to_graph(component, settings)
        if not component_graph.vertices:
            continue
        copies = [component_graph] + [component_graph.copy() for _ in range(component.count - 1)]
        for copy in copies:
            copy.renew_handles()
            head = copy.vertices[0]
            edge = editor.combine(copy, last_vertex, head)
            if component.bond_order == 2:
                edge.shape = EdgeShape.DOUBLE
                last_vertex.set_neighbor(head, 2)
                head.set_neighbor(last_vertex, 2)
        if component.count == 1:
            last_vertex = copies[0].vertices[0]
    return graph
