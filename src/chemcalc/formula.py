"""Cálculo y formateo de fórmulas moleculares.

Este módulo agrega utilidades para contar elementos a partir de un grafo
molecular y formatear la fórmula siguiendo el orden de Hill.
"""

from __future__ import annotations

from typing import Dict


def molecular_formula(graph) -> Dict[str, int]:
    """Calcula la fórmula molecular como diccionario de elemento -> conteo.

    Solo se cuentan vértices con etiqueta atómica; los hidrógenos
    implícitos de cada átomo se suman a "H".

    Args:
        graph: Grafo con `vertices`; cada vértice expone `element` y
            `h_count`.

    Returns:
        Diccionario con símbolos atómicos y sus cantidades totales.

    Side Effects:
        No tiene efectos laterales; solo calcula y devuelve datos.
    """
    counts: Dict[str, int] = {}

    for vertex in graph.vertices:
        element = vertex.element
        if element is None:
            continue
        counts[element.symbol] = counts.get(element.symbol, 0) + 1
        if vertex.h_count:
            counts["H"] = counts.get("H", 0) + int(vertex.h_count)

    return {symbol: count for symbol, count in counts.items() if count > 0}


def format_formula(formula_dict: Dict[str, int]) -> str:
    """Formatea una fórmula usando el orden de Hill (C, H, luego alfabético).

    Args:
        formula_dict: Diccionario con símbolos de elementos y cantidades.

    Returns:
        Cadena con la fórmula formateada (p. ej., "C6H6O").

    Side Effects:
        No tiene efectos laterales.
    """
    if not formula_dict:
        return ""
    order = []
    if "C" in formula_dict:
        order.append("C")
        if "H" in formula_dict:
            order.append("H")
    for symbol in sorted(e for e in formula_dict.keys() if e not in order):
        order.append(symbol)

    parts = []
    for symbol in order:
        count = formula_dict.get(symbol, 0)
        if count <= 0:
            continue
        parts.append(symbol if count == 1 else f"{symbol}{count}")
    return "".join(parts)
