"""API pública de cálculos químicos auxiliares."""

from .elements import CHEMICAL_ELEMENTS, ChemicalElement, get_element, is_element_symbol
from .formula import molecular_formula, format_formula
from .linear import ABBREVIATIONS, LinearFormula, LinearFormulaError
from .mass import molecular_weight
from .valence import MAX_VALENCE_MAP, implicit_h_count, valence_errors

__all__ = [
    "ABBREVIATIONS",
    "CHEMICAL_ELEMENTS",
    "ChemicalElement",
    "LinearFormula",
    "LinearFormulaError",
    "MAX_VALENCE_MAP",
    "get_element",
    "is_element_symbol",
    "molecular_formula",
    "format_formula",
    "molecular_weight",
    "implicit_h_count",
    "valence_errors",
]
