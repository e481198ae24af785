"""Pruebas del historial de acciones (hacer, deshacer, rehacer y fusión)."""

import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from molgraph.actions import (
    ActionDirection,
    ActionStack,
    AddBoundVertex,
    AddChain,
    AddDefaultFragment,
    AddSingleVertex,
    AttachRing,
    BindVertices,
    ChangeVertexIsotope,
    ChangeVertexLabel,
    ClearGraph,
    DeleteEdge,
    DeleteVertex,
    ExpandLinear,
    FuseRing,
    IncrementAtomCharge,
    MoveVertex,
    StripHydrogens,
    SymmetrizeAlongEdge,
    SymmetrizeAtVertex,
    UpdateEdgeShape,
)
from molgraph.model import EdgeOrientation, EdgeShape, LabelType, MolecularGraph, Topology


def snapshot(graph):
    vertices = [
        (v.handle, v.label, round(v.x, 6), round(v.y, 6), v.charge, v.isotope, v.h_count)
        for v in graph.vertices
    ]
    edges = [(e.handle, e.v1.handle, e.v2.handle, e.shape, e.orientation) for e in graph.edges]
    return vertices, edges


def build_path(graph, n, step=40.0):
    vertices = [graph.add_vertex((i * step, 0.0)).vertices[0] for i in range(n)]
    for v1, v2 in zip(vertices, vertices[1:]):
        graph.bind_vertices(v1, v2)
    graph.update_topology()
    return vertices


class ActionRoundTripTest(unittest.TestCase):
    """Verifica que deshacer y rehacer reproducen exactamente el estado."""

    def setUp(self):
        self.graph = MolecularGraph()
        self.stack = ActionStack(self.graph)

    def assert_round_trip(self, action):
        before = snapshot(self.graph)
        self.stack.commit_action(action)
        after = snapshot(self.graph)
        self.assertNotEqual(before, after)
        self.stack.rollback_actions()
        self.assertEqual(snapshot(self.graph), before)
        self.stack.recommit_actions()
        self.assertEqual(snapshot(self.graph), after)

    def test_default_fragment(self):
        """Verifica el caso básico de un fragmento nuevo.

        Returns:
            None.

        """
        self.stack.commit_action(AddDefaultFragment(self.graph, (100.0, 100.0)))
        self.assertEqual((len(self.graph.vertices), len(self.graph.edges)), (2, 1))
        self.stack.rollback_actions()
        self.assertEqual((len(self.graph.vertices), len(self.graph.edges)), (0, 0))
        self.stack.recommit_actions()
        self.assertEqual((len(self.graph.vertices), len(self.graph.edges)), (2, 1))

    def test_add_single_vertex(self):
        self.assert_round_trip(AddSingleVertex(self.graph, (10.0, 10.0), "N"))

    def test_add_bound_vertex_restores_moved_neighbors(self):
        """Verifica que los vecinos redistribuidos vuelven a su sitio."""
        center = self.graph.add_vertex((0.0, 0.0)).vertices[0]
        for coords in ((40.0, 0.0), (0.0, 40.0)):
            self.graph.bind_vertices(center, self.graph.add_vertex(coords).vertices[0])
        moved = self.graph.vertices[2]
        self.assert_round_trip(AddBoundVertex(self.graph, center))
        self.stack.rollback_actions()
        self.assertEqual(moved.coords, (0.0, 40.0))

    def test_bind_vertices(self):
        a, b, c = build_path(self.graph, 3)
        far = self.graph.add_vertex((0.0, 80.0)).vertices[0]
        self.assert_round_trip(BindVertices(self.graph, c, far, EdgeShape.DOUBLE))

    def test_add_chain(self):
        start = self.graph.add_vertex((0.0, 0.0)).vertices[0]
        self.assert_round_trip(AddChain(self.graph, start, 3))

    def test_attach_ring_updates_topology(self):
        start = self.graph.add_vertex((0.0, 0.0)).vertices[0]
        self.assert_round_trip(AttachRing(self.graph, start, 6, desaturate=True))
        self.assertEqual(len(self.graph.ring_systems), 1)
        self.stack.rollback_actions()
        self.assertEqual(self.graph.ring_systems, [])

    def test_fuse_ring(self):
        build_path(self.graph, 2)
        self.assert_round_trip(FuseRing(self.graph, self.graph.edges[0], 6, desaturate=True))

    def test_symmetrize_along_edge(self):
        build_path(self.graph, 3)
        self.assert_round_trip(SymmetrizeAlongEdge(self.graph, self.graph.edges[1]))

    def test_symmetrize_at_vertex(self):
        vertices = build_path(self.graph, 3)
        self.assert_round_trip(SymmetrizeAtVertex(self.graph, vertices[0], 3))

    def test_expand_linear(self):
        """Verifica que la fórmula expandida se puede deshacer y rehacer."""
        a = self.graph.add_vertex((0.0, 0.0)).vertices[0]
        ethyl = self.graph.add_vertex((40.0, 0.0), "CH2CH3").vertices[0]
        self.graph.bind_vertices(a, ethyl)
        self.assert_round_trip(ExpandLinear(self.graph, ethyl))
        self.assertEqual(len(self.graph.vertices), 3)
        self.stack.rollback_actions()
        self.assertEqual(self.graph.vertices, [a, ethyl])

    def test_delete_vertex_restores_order(self):
        build_path(self.graph, 3)
        self.assert_round_trip(DeleteVertex(self.graph, self.graph.vertices[1]))

    def test_delete_edge(self):
        build_path(self.graph, 4)
        self.assert_round_trip(DeleteEdge(self.graph, self.graph.edges[0]))

    def test_clear_graph(self):
        build_path(self.graph, 4)
        self.assert_round_trip(ClearGraph(self.graph))
        self.assertTrue(self.graph.is_empty())

    def test_strip_hydrogens(self):
        c = self.graph.add_vertex((0.0, 0.0)).vertices[0]
        self.graph.bind_vertices(c, self.graph.add_vertex((40.0, 0.0), "H").vertices[0])
        self.assert_round_trip(StripHydrogens(self.graph))

    def test_update_edge_shape(self):
        build_path(self.graph, 3)
        self.assert_round_trip(UpdateEdgeShape(self.graph, self.graph.edges[0], EdgeShape.DOUBLE))
        self.assertEqual(self.graph.vertices[0].h_count, 2)

    def test_same_wedge_swaps_direction(self):
        """Verifica que repetir la misma cuña invierte la arista."""
        a, b = build_path(self.graph, 2)
        edge = self.graph.edges[0]
        edge.shape = EdgeShape.SINGLE_UP
        self.stack.commit_action(UpdateEdgeShape(self.graph, edge, EdgeShape.SINGLE_UP))
        self.assertIs(edge.v1, b)
        self.stack.rollback_actions()
        self.assertIs(edge.v1, a)

    def test_label_charge_isotope(self):
        vertex = self.graph.add_vertex((0.0, 0.0)).vertices[0]
        self.assert_round_trip(ChangeVertexLabel(self.graph, vertex, "N"))
        self.assert_round_trip(IncrementAtomCharge(self.graph, vertex, 1))
        self.assert_round_trip(ChangeVertexIsotope(self.graph, vertex, 15))

    def test_custom_label_restored_verbatim(self):
        vertex = self.graph.add_vertex((0.0, 0.0), "Foo").vertices[0]
        self.stack.commit_action(ChangeVertexLabel(self.graph, vertex, "N"))
        self.assertEqual(vertex.label_type, LabelType.ATOM)
        self.stack.rollback_actions()
        self.assertEqual(vertex.label, "Foo")
        self.assertEqual(vertex.label_type, LabelType.CUSTOM)

    def test_move_vertex(self):
        vertex = self.graph.add_vertex((0.0, 0.0)).vertices[0]
        self.assert_round_trip(MoveVertex(self.graph, vertex, (5.0, 5.0)))


class MergeTest(unittest.TestCase):
    """Casos de prueba para la fusión de acciones consecutivas."""

    def setUp(self):
        self.graph = MolecularGraph()
        self.stack = ActionStack(self.graph)
        self.vertex = self.graph.add_vertex((0.0, 0.0)).vertices[0]
        self.directions = []
        self.stack.changed.connect(self.directions.append)

    def test_moves_of_same_vertex_merge(self):
        """Verifica que un arrastre continuo es una sola entrada."""
        self.stack.commit_action(MoveVertex(self.graph, self.vertex, (10.0, 0.0)))
        self.stack.commit_action(MoveVertex(self.graph, self.vertex, (20.0, 0.0)))
        self.assertEqual(len(self.stack), 1)
        self.assertEqual(self.vertex.coords, (20.0, 0.0))
        self.assertEqual(self.directions, [ActionDirection.DO, ActionDirection.UPDATE])
        self.stack.rollback_actions()
        self.assertEqual(self.vertex.coords, (0.0, 0.0))

    def test_moves_of_different_vertices_do_not_merge(self):
        other = self.graph.add_vertex((40.0, 0.0)).vertices[0]
        self.stack.commit_action(MoveVertex(self.graph, self.vertex, (10.0, 0.0)))
        self.stack.commit_action(MoveVertex(self.graph, other, (50.0, 0.0)))
        self.assertEqual(len(self.stack), 2)

    def test_charge_increments_accumulate(self):
        self.stack.commit_action(IncrementAtomCharge(self.graph, self.vertex, 1))
        self.stack.commit_action(IncrementAtomCharge(self.graph, self.vertex, 1))
        self.assertEqual(len(self.stack), 1)
        self.assertEqual(self.vertex.charge, 2)
        self.stack.rollback_actions()
        self.assertEqual(self.vertex.charge, 0)

    def test_label_and_isotope_merge(self):
        self.stack.commit_action(ChangeVertexLabel(self.graph, self.vertex, "N"))
        self.stack.commit_action(ChangeVertexLabel(self.graph, self.vertex, "O"))
        self.assertEqual(len(self.stack), 1)
        self.assertEqual(self.vertex.label, "O")
        self.stack.commit_action(ChangeVertexIsotope(self.graph, self.vertex, 17))
        self.stack.commit_action(ChangeVertexIsotope(self.graph, self.vertex, 18))
        self.assertEqual(len(self.stack), 2)
        self.stack.rollback_actions(2)
        self.assertEqual(self.vertex.label, "C")
        self.assertEqual(self.vertex.isotope, 0)

    def test_different_kinds_do_not_merge(self):
        self.stack.commit_action(MoveVertex(self.graph, self.vertex, (10.0, 0.0)))
        self.stack.commit_action(IncrementAtomCharge(self.graph, self.vertex, 1))
        self.assertEqual(len(self.stack), 2)


class ActionStackTest(unittest.TestCase):
    """Casos de prueba para el cursor y las señales del historial."""

    def setUp(self):
        self.graph = MolecularGraph()
        self.stack = ActionStack(self.graph)

    def test_new_action_discards_undone_tail(self):
        self.stack.commit_action(AddSingleVertex(self.graph, (0.0, 0.0)))
        self.stack.commit_action(AddSingleVertex(self.graph, (40.0, 0.0)))
        self.stack.rollback_actions()
        self.assertTrue(self.stack.can_recommit())
        self.stack.commit_action(AddSingleVertex(self.graph, (0.0, 40.0)))
        self.assertEqual(len(self.stack), 2)
        self.assertFalse(self.stack.can_recommit())
        self.assertEqual([v.coords for v in self.graph.vertices], [(0.0, 0.0), (0.0, 40.0)])

    def test_noop_at_either_end(self):
        """Verifica que deshacer o rehacer sin acciones no emite nada."""
        directions = []
        self.stack.changed.connect(directions.append)
        self.stack.rollback_actions()
        self.stack.recommit_actions()
        self.assertEqual(directions, [])
        self.assertFalse(self.stack.can_rollback())

    def test_rollback_several(self):
        for x in (0.0, 40.0, 80.0):
            self.stack.commit_action(AddSingleVertex(self.graph, (x, 0.0)))
        self.stack.rollback_actions(5)
        self.assertTrue(self.graph.is_empty())
        self.stack.recommit_actions(2)
        self.assertEqual(len(self.graph.vertices), 2)

    def test_signals(self):
        directions = []
        emptiness = []
        self.stack.changed.connect(directions.append)
        self.stack.emptiness_changed.connect(emptiness.append)
        self.stack.commit_action(AddDefaultFragment(self.graph, (0.0, 0.0)))
        self.stack.rollback_actions()
        self.stack.recommit_actions()
        self.assertEqual(directions, [ActionDirection.DO, ActionDirection.UNDO, ActionDirection.REDO])
        self.assertEqual(emptiness, [False, True, False])

    def test_clear_actions_keeps_drawing(self):
        self.stack.commit_action(AddSingleVertex(self.graph, (0.0, 0.0)))
        self.stack.clear_actions()
        self.assertEqual(len(self.stack), 0)
        self.assertFalse(self.stack.can_rollback())
        self.assertFalse(self.stack.is_empty())

    def test_ineffective_actions_leave_drawing_untouched(self):
        """Verifica que las acciones sin efecto no alteran el dibujo al deshacer ni al rehacer.

        Returns:
            None.

        """
        a, b, c = build_path(self.graph, 3)
        elsewhere = MolecularGraph()
        x = elsewhere.add_vertex((0.0, 200.0)).vertices[0]
        y = elsewhere.add_vertex((40.0, 200.0)).vertices[0]
        detached_edge = elsewhere.bind_vertices(x, y)
        stray = elsewhere.add_vertex((80.0, 200.0)).vertices[0]
        before = snapshot(self.graph)

        self.stack.commit_action(FuseRing(self.graph, detached_edge, 6))
        self.stack.commit_action(SymmetrizeAtVertex(self.graph, b, 3))
        self.stack.commit_action(DeleteVertex(self.graph, stray))
        self.assertEqual(snapshot(self.graph), before)
        self.stack.rollback_actions(3)
        self.assertEqual(snapshot(self.graph), before)
        self.stack.recommit_actions(3)
        self.assertEqual(snapshot(self.graph), before)
        self.stack.rollback_actions(3)
        self.assertEqual(snapshot(self.graph), before)
        self.assertEqual(len(elsewhere.vertices), 3)

    def test_chain_double_bond_is_centered_when_ring_is_attached(self):
        """Verifica que un doble enlace acíclico se centra al unir un anillo a su extremo."""
        self.stack.commit_action(AddDefaultFragment(self.graph, (0.0, 0.0)))
        edge = self.graph.edges[0]
        b = edge.v2
        self.stack.commit_action(UpdateEdgeShape(self.graph, edge, EdgeShape.DOUBLE))
        self.assertEqual(edge.orientation, EdgeOrientation.LEFT)

        self.stack.commit_action(AttachRing(self.graph, b, 6))
        self.assertEqual(b.topology, Topology.RING)
        self.assertFalse(any(edge in ring_system for ring_system in self.graph.ring_systems))
        self.assertEqual(edge.orientation, EdgeOrientation.CENTER)

        self.stack.rollback_actions()
        self.assertEqual(b.topology, Topology.CHAIN)
        self.assertEqual(edge.orientation, EdgeOrientation.LEFT)


if __name__ == "__main__":
    unittest.main()
