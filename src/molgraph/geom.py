"""
Utilidades geométricas del motor de grafos.

Todas las funciones trabajan en coordenadas de pantalla (eje Y hacia abajo)
y ángulos en radianes medidos con `atan2(dy, dx)`, igual que las
coordenadas guardadas en los vértices.
"""
from __future__ import annotations

import math
from typing import Iterable, List, Tuple

from PyQt6.QtCore import QPointF

TWO_PI = 2.0 * math.pi


def to_point(coords: Tuple[float, float]) -> QPointF:
    return QPointF(float(coords[0]), float(coords[1]))


def distance(p0: QPointF, p1: QPointF) -> float:
    """Distancia euclídea entre dos puntos."""
    return math.hypot(p1.x() - p0.x(), p1.y() - p0.y())


def direction_angle(origin: QPointF, target: QPointF) -> float:
    """Ángulo de la dirección origen -> destino."""
    return math.atan2(target.y() - origin.y(), target.x() - origin.x())


def point_at(origin: QPointF, angle: float, length: float) -> QPointF:
    """Calcula el punto final desde un origen, ángulo y longitud."""
    return QPointF(origin.x() + length * math.cos(angle), origin.y() + length * math.sin(angle))


def snap_angle(angle: float, step_deg: float) -> float:
    """Ajusta un ángulo (rad) al múltiplo más cercano de `step_deg` grados."""
    if step_deg <= 0:
        return angle
    return math.radians(round(math.degrees(angle) / step_deg) * step_deg)


def largest_gap(angles: Iterable[float]) -> Tuple[float, float]:
    """Busca el mayor hueco angular entre direcciones vecinas.

    Args:
        angles: Direcciones (rad) en cualquier orden.

    Returns:
        Tupla `(inicio, amplitud)`: el hueco va desde `inicio` hasta
        `inicio + amplitud`, contando el cierre de la vuelta completa.
        Sin direcciones devuelve `(0, 0)`.
    """
    ordered = sorted(angles)
    best_start = 0.0
    best_gap = 0.0
    for i, angle in enumerate(ordered):
        previous = ordered[i - 1]
        gap = angle - previous + TWO_PI if i == 0 else angle - previous
        if gap > best_gap:
            best_gap = gap
            best_start = previous
    return best_start, best_gap


def cross(a: QPointF, b: QPointF, p: QPointF) -> float:
    """Producto cruzado 2D de (b - a) x (p - a)."""
    return (b.x() - a.x()) * (p.y() - a.y()) - (b.y() - a.y()) * (p.x() - a.x())


def reflect_point(point: QPointF, center: QPointF) -> QPointF:
    """Inversión de un punto respecto a un centro de simetría."""
    return QPointF(2.0 * center.x() - point.x(), 2.0 * center.y() - point.y())


def regular_polygon_sides(p1: QPointF, p2: QPointF, size: int) -> Tuple[List[QPointF], List[QPointF]]:
    """Vértices nuevos de los dos polígonos regulares que comparten el lado p1-p2.

    Args:
        p1: Primer extremo del lado compartido.
        p2: Segundo extremo del lado compartido.
        size: Número de vértices del polígono (>= 3).

    Returns:
        Dos listas de `size - 2` puntos, una por cada lado del segmento. La
        primera recorre el polígono desde p1 hasta p2; la segunda, su imagen
        especular, desde p2 hasta p1.
    """
    alfa = direction_angle(p1, p2)
    beta = (size - 2) * math.pi / size
    edge_len = distance(p1, p2)
    # apotema y radio circunscrito
    h = edge_len * math.tan(beta / 2.0) / 2.0
    radius = edge_len / (2.0 * math.cos(beta / 2.0))
    mid = QPointF((p1.x() + p2.x()) / 2.0, (p1.y() + p2.y()) / 2.0)
    center1 = QPointF(mid.x() + h * math.sin(alfa), mid.y() - h * math.cos(alfa))
    center2 = QPointF(mid.x() - h * math.sin(alfa), mid.y() + h * math.cos(alfa))
    side1: List[QPointF] = []
    side2: List[QPointF] = []
    for i in range(1, size - 1):
        angle = math.pi - beta / 2.0 + alfa + 2.0 * i * math.pi / size
        side1.append(QPointF(center1.x() + radius * math.cos(angle), center1.y() + radius * math.sin(angle)))
        side2.append(QPointF(center2.x() - radius * math.cos(angle), center2.y() - radius * math.sin(angle)))
    return side1, side2
