import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from chemcalc import (
    LinearFormula,
    LinearFormulaError,
    format_formula,
    implicit_h_count,
    is_element_symbol,
    molecular_formula,
    molecular_weight,
    valence_errors,
)
from chemcalc.linear import AbbreviatedFragment, AtomicFragment, CompositeFragment, tokenize
from molgraph.model import EdgeShape, MolecularGraph


def build_ethanol():
    graph = MolecularGraph()
    c1 = graph.add_vertex((0.0, 0.0)).vertices[0]
    c2 = graph.add_vertex((40.0, 0.0)).vertices[0]
    o = graph.add_vertex((80.0, 0.0), "O").vertices[0]
    graph.bind_vertices(c1, c2)
    graph.bind_vertices(c2, o)
    return graph


class FormulaTest(unittest.TestCase):
    """Casos de prueba para fórmula y masa molecular."""

    def test_ethanol_formula(self):
        """Verifica la fórmula de Hill del etanol.

        Returns:
            None.

        """
        formula = molecular_formula(build_ethanol())
        self.assertEqual(formula, {"C": 2, "H": 6, "O": 1})
        self.assertEqual(format_formula(formula), "C2H6O")

    def test_hill_order_without_carbon(self):
        self.assertEqual(format_formula({"O": 1, "H": 2}), "H2O")
        self.assertEqual(format_formula({"Cl": 4, "C": 1}), "CCl4")
        self.assertEqual(format_formula({}), "")

    def test_formula_ignores_non_atom_labels(self):
        graph = MolecularGraph()
        c = graph.add_vertex((0.0, 0.0)).vertices[0]
        ph = graph.add_vertex((40.0, 0.0), "Ph").vertices[0]
        graph.bind_vertices(c, ph)
        self.assertEqual(molecular_formula(graph), {"C": 1, "H": 3})

    def test_molecular_weight(self):
        self.assertAlmostEqual(molecular_weight({"C": 2, "H": 6, "O": 1}), 46.07, places=1)
        with self.assertRaises(ValueError):
            molecular_weight({"Xx": 1})


class ValenceTest(unittest.TestCase):
    def test_implicit_hydrogens(self):
        self.assertEqual(implicit_h_count("N", 1, 0), 2)
        self.assertEqual(implicit_h_count("O", 2, 0), 0)
        self.assertEqual(implicit_h_count("Xx", 0, 0), 0)
        self.assertTrue(is_element_symbol("Cl"))
        self.assertFalse(is_element_symbol("Qq"))

    def test_pentavalent_carbon_is_reported(self):
        """Verifica que se detecta un carbono con cinco enlaces."""
        graph = MolecularGraph()
        center = graph.add_vertex((0.0, 0.0)).vertices[0]
        for i in range(5):
            graph.bind_vertices(center, graph.add_vertex((40.0 * i, 40.0)).vertices[0])
        self.assertEqual(valence_errors(graph), [center])
        self.assertEqual(center.h_count, 0)

    def test_double_bonded_oxygen_is_valid(self):
        graph = MolecularGraph()
        c = graph.add_vertex((0.0, 0.0)).vertices[0]
        o = graph.add_vertex((40.0, 0.0), "O").vertices[0]
        graph.bind_vertices(c, o, EdgeShape.DOUBLE)
        self.assertEqual(valence_errors(graph), [])


class LinearFormulaTest(unittest.TestCase):
    """Casos de prueba para la lectura de fórmulas lineales."""

    def test_ethyl(self):
        fragments = tokenize("CH2CH3")
        self.assertEqual(len(fragments), 2)
        self.assertTrue(all(isinstance(f, AtomicFragment) for f in fragments))
        self.assertEqual([f.n_hydrogens for f in fragments], [2, 3])

    def test_carboxyl_is_oxo_plus_hydroxyl(self):
        """Verifica que COOH se lee como C(=O) seguido de OH."""
        first, second = tokenize("COOH")
        self.assertIsInstance(first, CompositeFragment)
        oxo = first.components[1]
        self.assertEqual(oxo.element.symbol, "O")
        self.assertEqual(oxo.bond_order, 2)
        self.assertEqual(second.element.symbol, "O")
        self.assertEqual(second.n_hydrogens, 1)

    def test_sulfonyl_chloride(self):
        (fragment,) = tokenize("SO2Cl")
        self.assertIsInstance(fragment, CompositeFragment)
        symbols = [(c.element.symbol, c.count) for c in fragment.components]
        self.assertEqual(symbols, [("S", 1), ("O", 2), ("Cl", 1)])

    def test_trifluoromethyl(self):
        (fragment,) = tokenize("CF3")
        self.assertEqual(fragment.components[1].element.symbol, "F")
        self.assertEqual(fragment.components[1].count, 3)

    def test_abbreviation(self):
        oxygen, methyl = tokenize("OMe")
        self.assertEqual(oxygen.element.symbol, "O")
        self.assertIsInstance(methyl, AbbreviatedFragment)
        self.assertEqual(methyl.abbreviation.smiles, "C")

    def test_charge_and_count(self):
        (ammonium,) = tokenize("NH3+")
        self.assertEqual(ammonium.charge, 1)
        self.assertEqual(ammonium.n_hydrogens, 3)
        (carbon, hydrogen) = tokenize("C2H5")
        self.assertEqual(carbon.count, 2)

    def test_invalid_text(self):
        with self.assertRaises(LinearFormulaError):
            LinearFormula.parse("Foo")
        with self.assertRaises(LinearFormulaError):
            LinearFormula.parse("")

    def test_as_string(self):
        self.assertEqual(LinearFormula.parse("CH2OH").as_string, "CH2OH")


if __name__ == "__main__":
    unittest.main()
