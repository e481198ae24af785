"""Cálculo de masas moleculares a partir de fórmulas."""

from __future__ import annotations

from typing import Dict

from .elements import get_element


def molecular_weight(formula_dict: Dict[str, int]) -> float:
    """Calcula el peso molecular a partir de una fórmula.

    Args:
        formula_dict: Diccionario de elemento -> conteo.

    Returns:
        Masa molecular aproximada en unidades atómicas (u).

    Raises:
        ValueError: Si el peso atómico de un elemento no está disponible.

    Side Effects:
        No tiene efectos laterales.
    """
    total = 0.0
    for symbol, count in formula_dict.items():
        element = get_element(symbol)
        if element is None:
            raise ValueError(f"Atomic weight not available for {symbol}")
        total += element.atomic_mass * count
    return total
