"""Modelo de datos del grafo molecular editable.

Este módulo concentra las estructuras que representan el dibujo: vértices
(átomos, fórmulas lineales o textos libres), aristas (enlaces con su forma
de dibujo) y el contenedor `MolecularGraph`. Las operaciones que eliminan
elementos devuelven sub-grafos que referencian los mismos objetos, de modo
que una acción de historial puede volver a insertarlos tal cual.
"""

from __future__ import annotations

import itertools
import math
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from chemcalc.elements import ChemicalElement, get_element
from chemcalc.linear import LinearFormula, LinearFormulaError

Coords = Tuple[float, float]

# Contador de generación para los handles estables de vértices y aristas.
_handle_counter = itertools.count(1)


def next_handle() -> int:
    return next(_handle_counter)


class LabelType(str, Enum):
    """Variantes de etiqueta de un vértice."""
    ATOM = "Atom"
    LINEAR = "Linear"
    CUSTOM = "Custom"


class EdgeShape(str, Enum):
    """Formas de dibujo de una arista."""
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    SINGLE_UP = "single_up"
    SINGLE_DOWN = "single_down"
    SINGLE_EITHER = "single_either"
    DOUBLE_EITHER = "double_either"
    AROMATIC = "aromatic"


# Formas cuyo sentido v1 -> v2 importa al dibujarlas (cuñas).
DIRECTIONAL_SHAPES = frozenset({EdgeShape.SINGLE_UP, EdgeShape.SINGLE_DOWN, EdgeShape.SINGLE_EITHER})


class EdgeOrientation(str, Enum):
    """Lado en que se dibuja la segunda línea de un doble enlace."""
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


class Topology(str, Enum):
    """Pertenencia de un vértice o arista a un anillo."""
    UNDEFINED = "undefined"
    CHAIN = "chain"
    RING = "ring"


def bond_order(shape: EdgeShape) -> int:
    """Orden de enlace asociado a una forma de arista."""
    if shape in (EdgeShape.DOUBLE, EdgeShape.DOUBLE_EITHER):
        return 2
    if shape == EdgeShape.TRIPLE:
        return 3
    return 1


def format_charge(charge: int) -> str:
    """Texto de carga tal como se dibuja junto a la etiqueta ("+", "2-")."""
    if charge == 0:
        return ""
    sign = "+" if charge > 0 else "-"
    if abs(charge) == 1:
        return sign
    return f"{abs(charge)}{sign}"


class Vertex:
    """Vértice del grafo: un átomo, una fórmula lineal o un texto libre.

    El mapa `neighbors` (vértice vecino -> orden de enlace) lo mantiene el
    grafo al crear o eliminar aristas; cada cambio en él o en la carga
    recalcula los hidrógenos implícitos.
    """

    def __init__(
        self,
        coords: Coords = (0.0, 0.0),
        label: str = "C",
        charge: int = 0,
        isotope: int = 0,
        label_type: Optional[LabelType] = None,
    ) -> None:
        self.handle = next_handle()
        self.x = float(coords[0])
        self.y = float(coords[1])
        self.topology = Topology.UNDEFINED
        self._neighbors: Dict[Vertex, int] = {}
        self._label_type = LabelType.ATOM
        self._element: Optional[ChemicalElement] = get_element("C")
        self._linear: Optional[LinearFormula] = None
        self._custom_label = ""
        self._charge = charge
        self._isotope = 0
        self._h_count = 0
        self.set_label(label, label_type)
        self._isotope = isotope

    def __repr__(self) -> str:
        return f"Vertex({self.label!r}, {self.x:.2f}, {self.y:.2f})"

    def copy(self) -> "Vertex":
        """Copia desvinculada (sin vecinos) que conserva el handle."""
        vertex = Vertex.__new__(Vertex)
        vertex.handle = self.handle
        vertex.x = self.x
        vertex.y = self.y
        vertex.topology = self.topology
        vertex._neighbors = {}
        vertex._label_type = self._label_type
        vertex._element = self._element
        vertex._linear = self._linear
        vertex._custom_label = self._custom_label
        vertex._charge = self._charge
        vertex._isotope = self._isotope
        vertex._h_count = self._h_count
        return vertex

    @property
    def coords(self) -> Coords:
        return (self.x, self.y)

    @coords.setter
    def coords(self, coords: Coords) -> None:
        self.x = float(coords[0])
        self.y = float(coords[1])

    @property
    def label_type(self) -> LabelType:
        return self._label_type

    @property
    def label(self) -> str:
        if self._label_type == LabelType.ATOM:
            return self._element.symbol
        if self._label_type == LabelType.LINEAR:
            return self._linear.as_string
        return self._custom_label

    @label.setter
    def label(self, label: str) -> None:
        self.set_label(label)

    def set_label(self, label: str, label_type: Optional[LabelType] = None) -> None:
        """Cambia la etiqueta y deduce su variante.

        Una etiqueta vacía equivale a carbono; un símbolo de elemento crea
        una etiqueta atómica; una fórmula legible, una etiqueta lineal; el
        resto queda como texto libre. Forzar `LabelType.CUSTOM` conserva el
        texto sin interpretarlo. Siempre se descarta el isótopo.

        Args:
            label: Texto de la etiqueta.
            label_type: Variante forzada, si el llamador ya la conoce.
        """
        self._isotope = 0
        element = get_element(label or "C")
        if label_type == LabelType.CUSTOM:
            self._label_type = LabelType.CUSTOM
            self._custom_label = label
        elif element is not None and label_type in (None, LabelType.ATOM):
            self._label_type = LabelType.ATOM
            self._element = element
        else:
            try:
                self._linear = LinearFormula.parse(label)
                self._label_type = LabelType.LINEAR
            except LinearFormulaError:
                self._label_type = LabelType.CUSTOM
                self._custom_label = label
        self._compute_h_count()

    @property
    def element(self) -> Optional[ChemicalElement]:
        return self._element if self._label_type == LabelType.ATOM else None

    @property
    def linear_formula(self) -> Optional[LinearFormula]:
        return self._linear if self._label_type == LabelType.LINEAR else None

    @property
    def charge(self) -> int:
        return self._charge

    @charge.setter
    def charge(self, charge: int) -> None:
        self._charge = charge
        self._compute_h_count()

    @property
    def isotope(self) -> int:
        return self._isotope

    @isotope.setter
    def isotope(self, isotope: int) -> None:
        self._isotope = isotope

    @property
    def h_count(self) -> int:
        return self._h_count

    @property
    def neighbors(self) -> Dict["Vertex", int]:
        return self._neighbors

    def set_neighbor(self, vertex: "Vertex", order: int) -> None:
        self._neighbors[vertex] = order
        self._compute_h_count()

    def remove_neighbor(self, vertex: "Vertex") -> None:
        self._neighbors.pop(vertex, None)
        self._compute_h_count()

    def _compute_h_count(self) -> None:
        if self._label_type == LabelType.ATOM:
            self._h_count = self._element.get_h_count(sum(self._neighbors.values()), self._charge)
        else:
            self._h_count = 0

    @property
    def visible_text(self) -> str:
        """Texto que se dibujaría para el vértice (vacío para un carbono de esqueleto)."""
        if self._label_type == LabelType.LINEAR:
            return self._linear.as_string
        if self._label_type == LabelType.CUSTOM:
            return self._custom_label
        symbol = self._element.symbol
        if symbol == "C" and self._neighbors and not self._isotope and not self._charge:
            return ""
        text = symbol
        if self._h_count:
            text += "H" if self._h_count == 1 else f"H{self._h_count}"
        return text + format_charge(self._charge)

    def least_crowded_angle(self) -> float:
        """Bisectriz del mayor hueco angular entre vecinos, en [0, 2π).

        Sin vecinos devuelve 0.
        """
        angles = [math.atan2(n.y - self.y, n.x - self.x) for n in self._neighbors]
        if not angles:
            return 0.0
        ordered = sorted(angles)
        start = 0.0
        widest = 0.0
        for i, angle in enumerate(ordered):
            gap = angle - ordered[i - 1] + 2 * math.pi if i == 0 else angle - ordered[i - 1]
            if gap > widest:
                widest = gap
                start = ordered[i - 1]
        return (start + widest / 2.0 + 2 * math.pi) % (2 * math.pi)


class Edge:
    """Arista entre dos vértices.

    El orden (v1, v2) importa para las formas direccionales: una cuña se
    dibuja desde v1 (punta) hacia v2 (base).
    """

    def __init__(self, v1: Vertex, v2: Vertex, shape: EdgeShape = EdgeShape.SINGLE) -> None:
        self.handle = next_handle()
        self.v1 = v1
        self.v2 = v2
        self.shape = shape
        self.orientation = EdgeOrientation.LEFT
        self.topology = Topology.UNDEFINED

    def __repr__(self) -> str:
        return f"Edge({self.v1!r}, {self.v2!r}, {self.shape.value})"

    def copy(self) -> "Edge":
        """Copia que conserva handle y extremos; el llamador la reconecta."""
        edge = Edge.__new__(Edge)
        edge.handle = self.handle
        edge.v1 = self.v1
        edge.v2 = self.v2
        edge.shape = self.shape
        edge.orientation = self.orientation
        edge.topology = self.topology
        return edge

    @property
    def bond_order(self) -> int:
        return bond_order(self.shape)

    @property
    def is_asymmetric(self) -> bool:
        """Solo un doble enlace normal admite orientación izquierda/derecha."""
        return self.shape == EdgeShape.DOUBLE

    @property
    def is_directional(self) -> bool:
        return self.shape in DIRECTIONAL_SHAPES

    def swap_vertices(self) -> None:
        self.v1, self.v2 = self.v2, self.v1

    def other(self, vertex: Vertex) -> Vertex:
        return self.v2 if vertex is self.v1 else self.v1

    @property
    def length(self) -> float:
        return math.hypot(self.v2.x - self.v1.x, self.v2.y - self.v1.y)


class MolecularGraph:
    """Grafo molecular no dirigido y posiblemente desconexo.

    Un `MolecularGraph` puede ser el dibujo vivo o un sub-grafo desvinculado
    que referencia los mismos vértices y aristas (resultado de añadir o
    quitar material). Las eliminaciones recuerdan la posición que ocupaba
    cada elemento para que `add` la restaure.
    """

    def __init__(
        self,
        vertices: Optional[Iterable[Vertex]] = None,
        edges: Optional[Iterable[Edge]] = None,
    ) -> None:
        self.vertices: List[Vertex] = list(vertices or [])
        self.edges: List[Edge] = list(edges or [])
        # Sistemas de anillos; válidos solo tras `update_topology`.
        self.ring_systems: List[MolecularGraph] = []
        # handle -> índice que ocupaba el elemento en el grafo del que se quitó
        self._vertex_positions: Dict[int, int] = {}
        self._edge_positions: Dict[int, int] = {}

    def __repr__(self) -> str:
        return f"MolecularGraph({len(self.vertices)} vertices, {len(self.edges)} edges)"

    def __contains__(self, item) -> bool:
        if isinstance(item, Vertex):
            return any(v is item for v in self.vertices)
        if isinstance(item, Edge):
            return any(e is item for e in self.edges)
        return False

    def is_empty(self) -> bool:
        return not self.vertices and not self.edges

    def merge(self, other: "MolecularGraph") -> "MolecularGraph":
        """Agrega al sub-grafo los elementos de otro (sin tocar vecinos)."""
        self.vertices.extend(other.vertices)
        self.edges.extend(other.edges)
        return self

    # -- construcción -----------------------------------------------------

    def add_vertex(self, coords: Coords, label: str = "C") -> "MolecularGraph":
        """Añade un vértice suelto.

        Returns:
            Sub-grafo con el vértice creado.
        """
        return MolecularGraph([self._add_vertex(coords, label)])

    def _add_vertex(self, coords: Coords, label: str = "C") -> Vertex:
        vertex = Vertex(coords, label)
        self.vertices.append(vertex)
        return vertex

    def bind_vertices(self, v1: Vertex, v2: Vertex, shape: EdgeShape = EdgeShape.SINGLE) -> Edge:
        """Crea una arista entre dos vértices y actualiza sus vecinos.

        Args:
            v1: Primer vértice (punta de una cuña).
            v2: Segundo vértice.
            shape: Forma de la arista.

        Returns:
            La arista creada.

        Side Effects:
            La clasificación de anillos queda obsoleta.
        """
        edge = Edge(v1, v2, shape)
        v1.set_neighbor(v2, edge.bond_order)
        v2.set_neighbor(v1, edge.bond_order)
        self.edges.append(edge)
        return edge

    # -- consultas --------------------------------------------------------

    def find_edges_by_vertex(self, vertex: Vertex) -> List[Edge]:
        return [e for e in self.edges if e.v1 is vertex or e.v2 is vertex]

    def find_edge_between(self, v1: Vertex, v2: Vertex) -> Optional[Edge]:
        for edge in self.edges:
            if (edge.v1 is v1 and edge.v2 is v2) or (edge.v1 is v2 and edge.v2 is v1):
                return edge
        return None

    def vertices_are_connected(self, v1: Vertex, v2: Vertex) -> bool:
        return self.find_edge_between(v1, v2) is not None

    def neighboring_vertices(self, vertex: Vertex) -> List[Vertex]:
        """Vértices unidos a `vertex` por aristas de este grafo."""
        result = [e.v2 for e in self.edges if e.v1 is vertex]
        result.extend(e.v1 for e in self.edges if e.v2 is vertex)
        return result

    def get_average_bond_distance(self, default: float = 1.54) -> float:
        """Longitud promedio de las aristas; `default` si no hay ninguna."""
        if not self.edges:
            return default
        return sum(e.length for e in self.edges) / len(self.edges)

    # -- eliminación e inserción en bloque -------------------------------

    def delete_vertex(self, vertex: Vertex, drop_dangling_vertices: bool = True) -> "MolecularGraph":
        """Elimina un vértice y todas sus aristas.

        Args:
            vertex: Vértice a eliminar.
            drop_dangling_vertices: Si se eliminan también los vecinos que
                quedan sin ninguna arista.

        Returns:
            Sub-grafo con todo lo eliminado; vacío si el vértice no
            pertenece al grafo.
        """
        if vertex not in self:
            return MolecularGraph()
        edges = self.find_edges_by_vertex(vertex)
        removed = MolecularGraph([vertex], edges)
        if drop_dangling_vertices:
            for edge in edges:
                other = edge.other(vertex)
                if len(other.neighbors) == 1:
                    removed.vertices.append(other)
        self.remove(removed)
        return removed

    def delete_edge(
        self,
        edge: Edge,
        drop_dangling_vertices: bool = True,
        skip_topology_update: bool = True,
    ) -> "MolecularGraph":
        """Elimina una arista y, opcionalmente, los extremos que quedan sueltos.

        Args:
            edge: Arista a eliminar.
            drop_dangling_vertices: Si se eliminan los extremos sin vecinos.
            skip_topology_update: Si es `False`, recalcula anillos al final.

        Returns:
            Sub-grafo con la arista y los vértices eliminados; vacío si la
            arista no pertenece al grafo.
        """
        if edge not in self:
            return MolecularGraph()
        removed = MolecularGraph([], [edge])
        if drop_dangling_vertices:
            for vertex in (edge.v1, edge.v2):
                if len(vertex.neighbors) == 1:
                    removed.vertices.append(vertex)
        self.remove(removed)
        if not skip_topology_update:
            self.update_topology()
        return removed

    def remove(self, graph: "MolecularGraph") -> None:
        """Quita del grafo los elementos de un sub-grafo.

        Los elementos que no pertenecen al grafo se ignoran. Cada elemento
        eliminado deja anotada en `graph` la posición que ocupaba.
        """
        vertex_ids = {id(v) for v in graph.vertices}
        edge_ids = {id(e) for e in graph.edges}
        graph._vertex_positions.update(
            (v.handle, idx) for idx, v in enumerate(self.vertices) if id(v) in vertex_ids)
        graph._edge_positions.update(
            (e.handle, idx) for idx, e in enumerate(self.edges) if id(e) in edge_ids)
        detached = [e for e in self.edges if id(e) in edge_ids]
        self.vertices = [v for v in self.vertices if id(v) not in vertex_ids]
        self.edges = [e for e in self.edges if id(e) not in edge_ids]
        for edge in detached:
            edge.v1.remove_neighbor(edge.v2)
            edge.v2.remove_neighbor(edge.v1)

    def add(self, graph: "MolecularGraph") -> None:
        """Incorpora un sub-grafo, descartando los elementos ya presentes.

        Los elementos que fueron quitados de este grafo vuelven a su
        posición original; los nuevos se agregan al final.
        """
        present_vertices = {id(v) for v in self.vertices}
        present_edges = {id(e) for e in self.edges}
        _insert_at_positions(
            self.vertices, [v for v in graph.vertices if id(v) not in present_vertices], graph._vertex_positions)
        _insert_at_positions(
            self.edges, [e for e in graph.edges if id(e) not in present_edges], graph._edge_positions)
        for edge in graph.edges:
            edge.v1.set_neighbor(edge.v2, edge.bond_order)
            edge.v2.set_neighbor(edge.v1, edge.bond_order)

    def clear(self) -> None:
        """Elimina todos los vértices y aristas."""
        self.vertices = []
        self.edges = []
        self.ring_systems = []

    # -- copias y componentes --------------------------------------------

    def copy(self) -> "MolecularGraph":
        """Copia desvinculada que conserva orden, conectividad y handles."""
        vertex_map = {id(v): v.copy() for v in self.vertices}
        result = MolecularGraph([vertex_map[id(v)] for v in self.vertices])
        for edge in self.edges:
            v1 = vertex_map[id(edge.v1)]
            v2 = vertex_map[id(edge.v2)]
            v1.set_neighbor(v2, edge.bond_order)
            v2.set_neighbor(v1, edge.bond_order)
            new_edge = edge.copy()
            new_edge.v1 = v1
            new_edge.v2 = v2
            result.edges.append(new_edge)
        return result

    def renew_handles(self) -> None:
        """Asigna handles nuevos (para material copiado que se añadirá)."""
        for vertex in self.vertices:
            vertex.handle = next_handle()
        for edge in self.edges:
            edge.handle = next_handle()

    def subgraphs(self) -> List["MolecularGraph"]:
        """Componentes conexas del grafo, recorriendo el mapa de vecinos."""
        members = {id(v) for v in self.vertices}
        visited: set = set()
        result: List[MolecularGraph] = []
        for start in self.vertices:
            if id(start) in visited:
                continue
            component_ids = {id(start)}
            to_visit = [start]
            while to_visit:
                vertex = to_visit.pop()
                for neighbor in vertex.neighbors:
                    if id(neighbor) in members and id(neighbor) not in component_ids:
                        component_ids.add(id(neighbor))
                        to_visit.append(neighbor)
            visited |= component_ids
            result.append(MolecularGraph(
                [v for v in self.vertices if id(v) in component_ids],
                [e for e in self.edges if id(e.v1) in component_ids],
            ))
        return result

    def subgraph_with(self, vertex: Vertex) -> "MolecularGraph":
        """Componente conexa que contiene a `vertex` (vacía si no está)."""
        for subgraph in self.subgraphs():
            if vertex in subgraph:
                return subgraph
        return MolecularGraph()

    # -- transformaciones -------------------------------------------------

    def apply_rotation(self, origin: Coords, angle: float) -> None:
        """Rota los vértices alrededor de `origin` (rad, antihorario en pantalla)."""
        ox, oy = origin
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        for vertex in self.vertices:
            dx = vertex.x - ox
            dy = vertex.y - oy
            vertex.coords = (ox + dx * cos_a + dy * sin_a, oy - dx * sin_a + dy * cos_a)

    def apply_translation(self, delta: Coords) -> None:
        for vertex in self.vertices:
            vertex.coords = (vertex.x + delta[0], vertex.y + delta[1])

    def apply_scaling(self, factor: float) -> None:
        for vertex in self.vertices:
            vertex.coords = (vertex.x * factor, vertex.y * factor)

    # -- topología ---------------------------------------------------------

    def update_topology(self) -> None:
        """Reclasifica anillos/cadenas y reorienta todos los dobles enlaces.

        La pertenencia a un anillo también decide la orientación de los
        dobles enlaces acíclicos (centrados si tocan un anillo).
        """
        from molgraph.orientation import OrientationResolver
        from molgraph.topology import TopologyAnalyzer

        TopologyAnalyzer(self).update_topology()
        OrientationResolver(self).update_all()


def _insert_at_positions(sequence: List, items: Sequence, positions: Dict[int, int]) -> None:
    placed = sorted((positions[item.handle], n, item) for n, item in enumerate(items) if item.handle in positions)
    for index, _n, item in placed:
        sequence.insert(min(index, len(sequence)), item)
    sequence.extend(item for item in items if item.handle not in positions)
