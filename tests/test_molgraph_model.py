"""Pruebas unitarias para el modelo del grafo molecular."""

import math
import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from molgraph.model import EdgeShape, LabelType, MolecularGraph, Vertex, bond_order


def build_path(n, step=40.0):
    graph = MolecularGraph()
    vertices = [graph.add_vertex((i * step, 0.0)).vertices[0] for i in range(n)]
    for v1, v2 in zip(vertices, vertices[1:]):
        graph.bind_vertices(v1, v2)
    return graph, vertices


def assert_consistent(test, graph):
    for edge in graph.edges:
        test.assertEqual(edge.v1.neighbors[edge.v2], bond_order(edge.shape))
        test.assertEqual(edge.v2.neighbors[edge.v1], bond_order(edge.shape))
    for vertex in graph.vertices:
        if vertex.element is not None:
            expected = vertex.element.get_h_count(sum(vertex.neighbors.values()), vertex.charge)
            test.assertEqual(vertex.h_count, expected)


class BondOrderTest(unittest.TestCase):
    def test_bond_order_by_shape(self):
        """Verifica el orden de enlace de cada forma."""
        self.assertEqual(bond_order(EdgeShape.SINGLE), 1)
        self.assertEqual(bond_order(EdgeShape.SINGLE_UP), 1)
        self.assertEqual(bond_order(EdgeShape.SINGLE_EITHER), 1)
        self.assertEqual(bond_order(EdgeShape.AROMATIC), 1)
        self.assertEqual(bond_order(EdgeShape.DOUBLE), 2)
        self.assertEqual(bond_order(EdgeShape.DOUBLE_EITHER), 2)
        self.assertEqual(bond_order(EdgeShape.TRIPLE), 3)


class VertexTest(unittest.TestCase):
    """Casos de prueba para etiquetas e hidrógenos implícitos."""

    def test_label_variants(self):
        """Verifica la deducción del tipo de etiqueta.

        Returns:
            None.

        """
        self.assertEqual(Vertex(label="").label, "C")
        self.assertEqual(Vertex(label="N").label_type, LabelType.ATOM)
        self.assertEqual(Vertex(label="OMe").label_type, LabelType.LINEAR)
        self.assertEqual(Vertex(label="CH2CH3").label_type, LabelType.LINEAR)
        self.assertEqual(Vertex(label="Foo").label_type, LabelType.CUSTOM)
        self.assertEqual(Vertex(label="Foo").label, "Foo")

    def test_label_change_resets_isotope(self):
        vertex = Vertex(label="C")
        vertex.isotope = 13
        vertex.label = "N"
        self.assertEqual(vertex.isotope, 0)

    def test_h_count_follows_charge(self):
        """Verifica el recálculo de H al cambiar la carga."""
        vertex = Vertex(label="N")
        self.assertEqual(vertex.h_count, 3)
        vertex.charge = 1
        self.assertEqual(vertex.h_count, 4)
        vertex.charge = -1
        self.assertEqual(vertex.h_count, 2)

    def test_non_atom_labels_have_no_hydrogens(self):
        self.assertEqual(Vertex(label="OMe").h_count, 0)
        self.assertEqual(Vertex(label="Foo").h_count, 0)

    def test_visible_text(self):
        """Verifica el texto que se dibujaría para cada vértice."""
        graph = MolecularGraph()
        c = graph.add_vertex((0.0, 0.0)).vertices[0]
        o = graph.add_vertex((40.0, 0.0), "O").vertices[0]
        self.assertEqual(c.visible_text, "CH4")
        graph.bind_vertices(c, o)
        self.assertEqual(c.visible_text, "")
        self.assertEqual(o.visible_text, "OH")
        o.charge = -1
        self.assertEqual(o.visible_text, "O-")

    def test_least_crowded_angle(self):
        graph = MolecularGraph()
        center = graph.add_vertex((0.0, 0.0)).vertices[0]
        right = graph.add_vertex((40.0, 0.0)).vertices[0]
        graph.bind_vertices(center, right)
        self.assertAlmostEqual(center.least_crowded_angle(), math.pi)
        self.assertEqual(Vertex().least_crowded_angle(), 0.0)


class MolecularGraphTest(unittest.TestCase):
    """Casos de prueba para MolecularGraph."""

    def test_bind_sets_reciprocal_neighbors(self):
        """Verifica la consistencia vecino/arista.

        Returns:
            None.

        """
        graph, (a, b) = build_path(2)
        self.assertEqual(a.h_count, 3)
        graph.edges[0].shape = EdgeShape.DOUBLE
        a.set_neighbor(b, 2)
        b.set_neighbor(a, 2)
        self.assertEqual(a.h_count, 2)
        assert_consistent(self, graph)

    def test_delete_vertex_cascades_and_drops_dangling(self):
        graph, (a, b, c) = build_path(3)
        removed = graph.delete_vertex(b)
        self.assertEqual(len(removed.edges), 2)
        self.assertEqual(len(removed.vertices), 3)
        self.assertTrue(graph.is_empty())
        self.assertEqual(a.neighbors, {})

    def test_delete_vertex_keeps_dangling_on_request(self):
        graph, (a, b, c) = build_path(3)
        removed = graph.delete_vertex(b, drop_dangling_vertices=False)
        self.assertEqual(removed.vertices, [b])
        self.assertEqual(graph.vertices, [a, c])
        self.assertEqual(graph.edges, [])

    def test_delete_edge(self):
        """Verifica que solo se elimina el extremo que queda suelto."""
        graph, (a, b, c) = build_path(3)
        removed = graph.delete_edge(graph.edges[0])
        self.assertEqual(removed.vertices, [a])
        self.assertEqual(graph.vertices, [b, c])
        self.assertEqual(len(graph.edges), 1)
        assert_consistent(self, graph)

    def test_removal_of_non_member_is_noop(self):
        graph, (a, b, c) = build_path(3)
        removed = graph.delete_vertex(a)
        self.assertFalse(graph.delete_vertex(a).vertices)
        self.assertFalse(graph.delete_edge(removed.edges[0]).edges)
        graph.remove(removed)
        self.assertEqual(len(graph.vertices), 2)

    def test_add_restores_original_positions(self):
        """Verifica que reinsertar lo eliminado recupera el orden."""
        graph, vertices = build_path(4)
        edges = list(graph.edges)
        removed = graph.delete_vertex(vertices[1], drop_dangling_vertices=False)
        graph.add(removed)
        self.assertEqual(graph.vertices, vertices)
        self.assertEqual(graph.edges, edges)
        assert_consistent(self, graph)

    def test_add_ignores_present_elements(self):
        graph, vertices = build_path(3)
        graph.add(MolecularGraph(vertices, graph.edges))
        self.assertEqual(len(graph.vertices), 3)
        self.assertEqual(len(graph.edges), 2)

    def test_copy_preserves_connectivity_and_handles(self):
        graph, vertices = build_path(3)
        copy = graph.copy()
        self.assertEqual([v.handle for v in copy.vertices], [v.handle for v in vertices])
        for original, copied in zip(vertices, copy.vertices):
            self.assertIsNot(original, copied)
        self.assertIs(copy.edges[0].v1, copy.vertices[0])
        self.assertEqual(len(copy.vertices[1].neighbors), 2)
        copy.delete_vertex(copy.vertices[0])
        self.assertEqual(len(graph.vertices), 3)

    def test_renew_handles(self):
        graph, vertices = build_path(2)
        copy = graph.copy()
        copy.renew_handles()
        self.assertNotIn(copy.vertices[0].handle, [v.handle for v in vertices])

    def test_subgraphs(self):
        """Verifica la descomposición en componentes conexas."""
        graph, _ = build_path(3)
        lone = graph.add_vertex((0.0, 100.0)).vertices[0]
        components = graph.subgraphs()
        self.assertEqual(len(components), 2)
        self.assertEqual(sorted(len(c.vertices) for c in components), [1, 3])
        self.assertEqual(graph.subgraph_with(lone).vertices, [lone])

    def test_average_bond_distance(self):
        graph, _ = build_path(3, step=30.0)
        self.assertAlmostEqual(graph.get_average_bond_distance(), 30.0)
        self.assertAlmostEqual(MolecularGraph().get_average_bond_distance(), 1.54)

    def test_rotation_about_origin(self):
        graph, (a, b) = build_path(2)
        graph.apply_rotation(a.coords, math.pi / 2)
        self.assertAlmostEqual(b.x, 0.0)
        self.assertAlmostEqual(b.y, -40.0)

    def test_clear(self):
        graph, _ = build_path(3)
        graph.clear()
        self.assertTrue(graph.is_empty())


if __name__ == "__main__":
    unittest.main()
