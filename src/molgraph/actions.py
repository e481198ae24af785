"""Historial de deshacer/rehacer del editor.

Cada acción es un `QUndoCommand` que guarda solo lo imprescindible para
repetirse o deshacerse: los valores escalares anteriores y nuevos, o el
sub-grafo añadido/eliminado. La primera ejecución llama a la operación del
editor; las siguientes vuelven a insertar exactamente los mismos objetos.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtGui import QUndoCommand, QUndoStack

from molgraph.editor import StructureEditor
from molgraph.model import (
    Coords,
    Edge,
    EdgeOrientation,
    EdgeShape,
    LabelType,
    MolecularGraph,
    Vertex,
)
from molgraph.orientation import OrientationResolver
from molgraph.settings import EditorSettings

logger = logging.getLogger(__name__)

# Identificadores de fusión de QUndoStack; el resto de variantes usa -1.
_MERGE_IDS = {
    "change_vertex_label": 1,
    "change_vertex_isotope": 2,
    "move_vertex": 3,
    "increment_atom_charge": 4,
}


class ActionDirection(Enum):
    DO = "do"
    UPDATE = "update"
    UNDO = "undo"
    REDO = "redo"


class Action(QUndoCommand):
    """Entrada del historial.

    `kind` identifica la variante: `QUndoStack` solo intenta fusionar una
    acción con la anterior si ambas tienen el mismo `id()`, derivado del
    `kind`. `changes_topology` indica al historial que debe recalcular
    anillos y orientaciones tras ejecutarla o deshacerla.
    """

    kind = "action"
    changes_topology = False

    def __init__(self, text: str) -> None:
        super().__init__(text)

    def commit(self) -> None:
        raise NotImplementedError

    def rollback(self) -> None:
        raise NotImplementedError

    def redo(self) -> None:
        self.commit()

    def undo(self) -> None:
        self.rollback()

    def id(self) -> int:
        return _MERGE_IDS.get(self.kind, -1)

    def mergeWith(self, other: QUndoCommand) -> bool:
        return self.try_merge(other)

    def try_merge(self, other: "Action") -> bool:
        """Absorbe el estado final de `other`, que ya se ha ejecutado.

        Returns:
            `False` si `other` no es fusionable con esta acción.
        """
        return False


def _reorient_edges_of(graph: MolecularGraph, vertex: Vertex) -> None:
    resolver = OrientationResolver(graph)
    for edge in graph.find_edges_by_vertex(vertex):
        resolver.update_edge_orientation(edge)


class _GraphEditAction(Action):
    """Acción que añade un sub-grafo mediante una operación del editor.

    Las operaciones de colocación pueden mover los vecinos terminales de un
    vértice ancla; sus coordenadas se guardan antes y después para
    restaurarlas al deshacer y rehacer.
    """

    changes_topology = True

    def __init__(self, graph: MolecularGraph, text: str, settings: Optional[EditorSettings] = None) -> None:
        super().__init__(text)
        self._graph = graph
        self._editor = StructureEditor(graph, settings)
        self._added: Optional[MolecularGraph] = None
        self._coords_before: Dict[Vertex, Coords] = {}
        self._coords_after: Dict[Vertex, Coords] = {}

    @property
    def added(self) -> MolecularGraph:
        return self._added if self._added is not None else MolecularGraph()

    def _anchor(self) -> Optional[Vertex]:
        return None

    def _grow(self) -> MolecularGraph:
        raise NotImplementedError

    def _neighbor_coords(self) -> Dict[Vertex, Coords]:
        anchor = self._anchor()
        if anchor is None:
            return {}
        return {v: v.coords for v in anchor.neighbors}

    @staticmethod
    def _restore(coords: Dict[Vertex, Coords]) -> None:
        for vertex, value in coords.items():
            vertex.coords = value

    def commit(self) -> None:
        if self._added is None:
            self._coords_before = self._neighbor_coords()
            self._added = self._grow()
            self._coords_after = self._neighbor_coords()
        else:
            self._graph.add(self._added)
            self._restore(self._coords_after)

    def rollback(self) -> None:
        if self._added is None:
            return
        self._graph.remove(self._added)
        self._restore(self._coords_before)


class AddSingleVertex(_GraphEditAction):
    kind = "add_single_vertex"

    def __init__(self, graph: MolecularGraph, coords: Coords, label: Optional[str] = None,
                 settings: Optional[EditorSettings] = None) -> None:
        super().__init__(graph, "Add vertex", settings)
        self._coords = coords
        self._label = label

    def _grow(self) -> MolecularGraph:
        return self._editor.add_vertex(self._coords, self._label)


class AddDefaultFragment(_GraphEditAction):
    kind = "add_default_fragment"

    def __init__(self, graph: MolecularGraph, coords: Coords, settings: Optional[EditorSettings] = None) -> None:
        super().__init__(graph, "Add fragment", settings)
        self._coords = coords

    def _grow(self) -> MolecularGraph:
        return self._editor.add_default_fragment(self._coords)


class AddBoundVertex(_GraphEditAction):
    kind = "add_bound_vertex"

    def __init__(self, graph: MolecularGraph, vertex: Vertex, settings: Optional[EditorSettings] = None) -> None:
        super().__init__(graph, "Add bound vertex", settings)
        self._vertex = vertex

    def _anchor(self) -> Optional[Vertex]:
        return self._vertex

    def _grow(self) -> MolecularGraph:
        return self._editor.add_bound_vertex_to(self._vertex)


class BindVertices(_GraphEditAction):
    kind = "bind_vertices"

    def __init__(self, graph: MolecularGraph, v1: Vertex, v2: Vertex, shape: EdgeShape = EdgeShape.SINGLE,
                 settings: Optional[EditorSettings] = None) -> None:
        super().__init__(graph, "Bind vertices", settings)
        self._v1 = v1
        self._v2 = v2
        self._shape = shape

    def _grow(self) -> MolecularGraph:
        return self._editor.bind_vertices(self._v1, self._v2, self._shape)


class AddChain(_GraphEditAction):
    kind = "add_chain"

    def __init__(self, graph: MolecularGraph, vertex: Vertex, n_vertices: int,
                 settings: Optional[EditorSettings] = None) -> None:
        super().__init__(graph, "Add chain", settings)
        self._vertex = vertex
        self._n_vertices = n_vertices

    def _anchor(self) -> Optional[Vertex]:
        return self._vertex

    def _grow(self) -> MolecularGraph:
        return self._editor.add_chain(self._vertex, self._n_vertices)


class AttachRing(_GraphEditAction):
    kind = "attach_ring"

    def __init__(self, graph: MolecularGraph, vertex: Vertex, n_vertices: int, desaturate: bool = False,
                 settings: Optional[EditorSettings] = None) -> None:
        super().__init__(graph, "Attach ring", settings)
        self._vertex = vertex
        self._n_vertices = n_vertices
        self._desaturate = desaturate

    def _anchor(self) -> Optional[Vertex]:
        return self._vertex

    def _grow(self) -> MolecularGraph:
        return self._editor.attach_ring(self._vertex, self._n_vertices, self._desaturate)


class FuseRing(_GraphEditAction):
    kind = "fuse_ring"

    def __init__(self, graph: MolecularGraph, edge: Edge, n_vertices: int, desaturate: bool = False,
                 settings: Optional[EditorSettings] = None) -> None:
        super().__init__(graph, "Fuse ring", settings)
        self._edge = edge
        self._n_vertices = n_vertices
        self._desaturate = desaturate

    def _grow(self) -> MolecularGraph:
        return self._editor.fuse_ring(self._edge, self._n_vertices, self._desaturate)


class SymmetrizeAlongEdge(_GraphEditAction):
    kind = "symmetrize_along_edge"

    def __init__(self, graph: MolecularGraph, edge: Edge, settings: Optional[EditorSettings] = None) -> None:
        super().__init__(graph, "Symmetrize along edge", settings)
        self._edge = edge

    def _grow(self) -> MolecularGraph:
        return self._editor.symmetrize_along_edge(self._edge)


class SymmetrizeAtVertex(_GraphEditAction):
    kind = "symmetrize_at_vertex"

    def __init__(self, graph: MolecularGraph, vertex: Vertex, order: int,
                 settings: Optional[EditorSettings] = None) -> None:
        super().__init__(graph, "Symmetrize at vertex", settings)
        self._vertex = vertex
        self._order = order

    def _grow(self) -> MolecularGraph:
        return self._editor.symmetrize_at_vertex(self._vertex, self._order)


class ExpandLinear(_GraphEditAction):
    """Sustituye una fórmula lineal por su estructura; guarda también lo eliminado."""

    kind = "expand_linear"

    def __init__(self, graph: MolecularGraph, vertex: Vertex, settings: Optional[EditorSettings] = None) -> None:
        super().__init__(graph, "Expand formula", settings)
        self._vertex = vertex
        self._neighbor = next(iter(vertex.neighbors), None)
        self._removed = MolecularGraph()

    def _anchor(self) -> Optional[Vertex]:
        return self._neighbor

    def _grow(self) -> MolecularGraph:
        added, self._removed = self._editor.expand_linear(self._vertex)
        return added

    def commit(self) -> None:
        if self._added is not None:
            self._graph.remove(self._removed)
        super().commit()

    def rollback(self) -> None:
        super().rollback()
        self._graph.add(self._removed)


class _RemovalAction(Action):
    """Acción que separa un sub-grafo del dibujo y lo reinserta al deshacer."""

    changes_topology = True

    def __init__(self, graph: MolecularGraph, text: str) -> None:
        super().__init__(text)
        self._graph = graph
        self._editor = StructureEditor(graph)
        self._removed: Optional[MolecularGraph] = None

    @property
    def removed(self) -> MolecularGraph:
        return self._removed if self._removed is not None else MolecularGraph()

    def _detach(self) -> MolecularGraph:
        raise NotImplementedError

    def commit(self) -> None:
        if self._removed is None:
            self._removed = self._detach()
        else:
            self._graph.remove(self._removed)

    def rollback(self) -> None:
        if self._removed is not None:
            self._graph.add(self._removed)


class DeleteVertex(_RemovalAction):
    kind = "delete_vertex"

    def __init__(self, graph: MolecularGraph, vertex: Vertex) -> None:
        super().__init__(graph, "Delete vertex")
        self._vertex = vertex

    def _detach(self) -> MolecularGraph:
        return self._editor.delete_vertex(self._vertex)


class DeleteEdge(_RemovalAction):
    kind = "delete_edge"

    def __init__(self, graph: MolecularGraph, edge: Edge) -> None:
        super().__init__(graph, "Delete edge")
        self._edge = edge

    def _detach(self) -> MolecularGraph:
        return self._editor.delete_edge(self._edge)


class ClearGraph(_RemovalAction):
    kind = "clear_graph"

    def __init__(self, graph: MolecularGraph) -> None:
        super().__init__(graph, "Clear")

    def _detach(self) -> MolecularGraph:
        removed = MolecularGraph(self._graph.vertices, self._graph.edges)
        self._graph.remove(removed)
        self._graph.ring_systems = []
        return removed


class StripHydrogens(_RemovalAction):
    kind = "strip_hydrogens"

    def __init__(self, graph: MolecularGraph) -> None:
        super().__init__(graph, "Strip hydrogens")

    def _detach(self) -> MolecularGraph:
        return self._editor.strip_hydrogens()


class UpdateEdgeShape(Action):
    """Cambia la forma de una arista.

    Volver a aplicar la misma forma direccional (cuña) invierte el sentido
    de la arista. Sin orientación explícita se calcula la que corresponda.
    """

    kind = "update_edge_shape"

    def __init__(self, graph: MolecularGraph, edge: Edge, shape: EdgeShape,
                 orientation: Optional[EdgeOrientation] = None) -> None:
        super().__init__("Change bond")
        self._graph = graph
        self._edge = edge
        self._old_shape = edge.shape
        self._new_shape = shape
        self._old_orientation = edge.orientation
        self._new_orientation = orientation
        self._swap = shape == edge.shape and edge.is_directional

    def _sync_neighbors(self) -> None:
        edge = self._edge
        edge.v1.set_neighbor(edge.v2, edge.bond_order)
        edge.v2.set_neighbor(edge.v1, edge.bond_order)

    def commit(self) -> None:
        if self._swap:
            self._edge.swap_vertices()
        self._edge.shape = self._new_shape
        if self._new_orientation is None:
            OrientationResolver(self._graph).update_edge_orientation(self._edge)
            self._new_orientation = self._edge.orientation
        else:
            self._edge.orientation = self._new_orientation
        self._sync_neighbors()

    def rollback(self) -> None:
        if self._swap:
            self._edge.swap_vertices()
        self._edge.shape = self._old_shape
        self._edge.orientation = self._old_orientation
        self._sync_neighbors()


class ChangeVertexLabel(Action):
    kind = "change_vertex_label"

    def __init__(self, graph: MolecularGraph, vertex: Vertex, label: str) -> None:
        super().__init__("Change label")
        self._graph = graph
        self._vertex = vertex
        self._old_label = vertex.label
        self._old_label_type = vertex.label_type
        self._old_isotope = vertex.isotope
        self._new_label = label

    def commit(self) -> None:
        self._vertex.set_label(self._new_label)
        _reorient_edges_of(self._graph, self._vertex)

    def rollback(self) -> None:
        # Las etiquetas libres se restauran sin reinterpretar el texto.
        label_type = LabelType.CUSTOM if self._old_label_type == LabelType.CUSTOM else None
        self._vertex.set_label(self._old_label, label_type)
        self._vertex.isotope = self._old_isotope
        _reorient_edges_of(self._graph, self._vertex)

    def try_merge(self, other: Action) -> bool:
        if not isinstance(other, ChangeVertexLabel) or other._vertex is not self._vertex:
            return False
        self._new_label = other._new_label
        return True


class ChangeVertexIsotope(Action):
    kind = "change_vertex_isotope"

    def __init__(self, graph: MolecularGraph, vertex: Vertex, isotope: int) -> None:
        super().__init__("Change isotope")
        self._graph = graph
        self._vertex = vertex
        self._old_isotope = vertex.isotope
        self._new_isotope = isotope

    def _set_isotope(self, isotope: int) -> None:
        self._vertex.isotope = isotope
        _reorient_edges_of(self._graph, self._vertex)

    def commit(self) -> None:
        self._set_isotope(self._new_isotope)

    def rollback(self) -> None:
        self._set_isotope(self._old_isotope)

    def try_merge(self, other: Action) -> bool:
        if not isinstance(other, ChangeVertexIsotope) or other._vertex is not self._vertex:
            return False
        self._new_isotope = other._new_isotope
        return True


class MoveVertex(Action):
    """Desplaza un vértice; los arrastres sucesivos del mismo vértice se fusionan."""

    kind = "move_vertex"

    def __init__(self, graph: MolecularGraph, vertex: Vertex, coords: Coords) -> None:
        super().__init__("Move vertex")
        self._graph = graph
        self._vertex = vertex
        self._old_coords = vertex.coords
        self._new_coords = coords

    def commit(self) -> None:
        self._vertex.coords = self._new_coords

    def rollback(self) -> None:
        self._vertex.coords = self._old_coords

    def try_merge(self, other: Action) -> bool:
        if not isinstance(other, MoveVertex) or other._vertex is not self._vertex:
            return False
        self._new_coords = other._new_coords
        return True


class IncrementAtomCharge(Action):
    kind = "increment_atom_charge"

    def __init__(self, graph: MolecularGraph, vertex: Vertex, increment: int) -> None:
        super().__init__("Change charge")
        self._graph = graph
        self._vertex = vertex
        self._old_charge = vertex.charge
        self._increment = increment

    def _set_charge(self, charge: int) -> None:
        self._vertex.charge = charge
        _reorient_edges_of(self._graph, self._vertex)

    def commit(self) -> None:
        self._set_charge(self._old_charge + self._increment)

    def rollback(self) -> None:
        self._set_charge(self._old_charge)

    def try_merge(self, other: Action) -> bool:
        if not isinstance(other, IncrementAtomCharge) or other._vertex is not self._vertex:
            return False
        self._increment += other._increment
        return True


class ActionStack(QObject):
    """Historial de acciones sobre un `QUndoStack`.

    Las acciones por debajo del índice de la pila están ejecutadas; las de
    encima, deshechas. Ejecutar una acción nueva descarta las deshechas.
    Cada cambio de índice recalcula la topología si alguna de las acciones
    recorridas la altera.

    Signals:
        changed: Se emite con la `ActionDirection` tras cada ejecución,
            fusión, deshacer o rehacer.
        emptiness_changed: Se emite cuando el dibujo pasa de vacío a no
            vacío o viceversa.
    """

    changed = pyqtSignal(object)
    emptiness_changed = pyqtSignal(bool)

    def __init__(self, graph: MolecularGraph, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._graph = graph
        self._pushing = False
        self._was_empty = self.is_empty()
        self.undo_stack = QUndoStack(self)
        self._index = self.undo_stack.index()
        self.undo_stack.indexChanged.connect(self._on_index_changed)

    @property
    def graph(self) -> MolecularGraph:
        return self._graph

    def __len__(self) -> int:
        return self.undo_stack.count()

    def is_empty(self) -> bool:
        """Indica si el dibujo no tiene vértices."""
        return not self._graph.vertices

    def can_rollback(self) -> bool:
        return self.undo_stack.canUndo()

    def can_recommit(self) -> bool:
        return self.undo_stack.canRedo()

    def commit_action(self, action: Action) -> None:
        """Ejecuta una acción y la registra, fusionándola con la anterior si procede.

        Args:
            action: Acción aún no ejecutada.

        Side Effects:
            Descarta las acciones deshechas, recalcula la topología si la
            acción la altera y emite `changed`.
        """
        self._was_empty = self.is_empty()
        self._pushing = True
        try:
            self.undo_stack.push(action)
        finally:
            self._pushing = False

    def rollback_actions(self, count: int = 1) -> None:
        """Deshace hasta `count` acciones; no hace nada al inicio de la pila."""
        if not self.can_rollback():
            logger.debug("No hay acciones que deshacer")
            return
        self._was_empty = self.is_empty()
        self.undo_stack.setIndex(max(0, self.undo_stack.index() - count))

    def recommit_actions(self, count: int = 1) -> None:
        """Rehace hasta `count` acciones; no hace nada al final de la pila."""
        if not self.can_recommit():
            logger.debug("No hay acciones que rehacer")
            return
        self._was_empty = self.is_empty()
        self.undo_stack.setIndex(min(self.undo_stack.count(), self.undo_stack.index() + count))

    def clear_actions(self) -> None:
        """Vacía el historial sin tocar el dibujo."""
        self._index = 0
        self.undo_stack.clear()

    def _commands(self, start: int, stop: int) -> List[Action]:
        return [self.undo_stack.command(i) for i in range(start, stop)]

    def _on_index_changed(self, index: int) -> None:
        previous, self._index = self._index, index
        if index > previous:
            direction = ActionDirection.DO if self._pushing else ActionDirection.REDO
            actions = self._commands(previous, index)
        elif index < previous:
            direction = ActionDirection.UNDO
            actions = self._commands(index, previous)
        elif self._pushing and index > 0:
            logger.debug("Acción fusionada con la anterior")
            direction = ActionDirection.UPDATE
            actions = self._commands(index - 1, index)
        else:
            return
        if any(action.changes_topology for action in actions):
            self._graph.update_topology()
        for action in actions:
            logger.debug("%s: %s", direction.name, action.text())
        self.changed.emit(direction)
        if self._was_empty != self.is_empty():
            self._was_empty = self.is_empty()
            self.emptiness_changed.emit(self._was_empty)
