"""Cálculo de hidrógenos implícitos y validación de valencias."""

from __future__ import annotations

from typing import Dict, List

from .elements import get_element

# Valencias máximas (suma de órdenes de enlace) antes de marcar error.
# Se usa un umbral permisivo para patrones comunes hipervalentes:
# - P(V/VI): fosfatos, fosforanos, PF6-
# - S(IV/VI): sulfóxidos/sulfonas/sulfatos, SF6
# - Halógenos(III/V/VII): interhalógenos, oxoácidos (p. ej., IF7, ClO4-)
# - Xe(II/IV/VI/VIII): fluoruro de xenón y XeO4 en dibujos
MAX_VALENCE_MAP: Dict[str, int] = {
    "H": 1,
    "C": 4,
    "N": 4,
    "O": 3,
    "F": 1,
    "Cl": 7,
    "Br": 7,
    "I": 7,
    "P": 6,
    "S": 6,
    "Xe": 8,
    "Se": 6,
    "Te": 6,
    "As": 6,
    "Sb": 6,
    "Bi": 6,
    "Si": 6,
    "Ge": 6,
    "Sn": 6,
    "Pb": 6,
    "B": 4,
}


def implicit_h_count(symbol: str, bond_order_sum: int, charge: int) -> int:
    """Calcula los hidrógenos implícitos para un átomo.

    Args:
        symbol: Símbolo del elemento.
        bond_order_sum: Suma de órdenes de los enlaces del átomo.
        charge: Carga formal.

    Returns:
        Número de H implícitos estimados (>= 0); 0 para símbolos desconocidos.

    Side Effects:
        No tiene efectos laterales.
    """
    element = get_element(symbol)
    if element is None:
        return 0
    return element.get_h_count(bond_order_sum, charge)


def valence_errors(graph) -> List:
    """Valida valencias máximas según `MAX_VALENCE_MAP`.

    Args:
        graph: Grafo con `vertices`; cada vértice expone `element` y
            `neighbors` (vecino -> orden de enlace).

    Returns:
        Lista de vértices que exceden la valencia permitida, en el orden
        del grafo.
    """
    errors = []
    for vertex in graph.vertices:
        element = vertex.element
        if element is None:
            continue
        expected = MAX_VALENCE_MAP.get(element.symbol)
        if expected is None:
            continue
        if sum(vertex.neighbors.values()) > expected:
            errors.append(vertex)
    return errors
