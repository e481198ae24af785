"""Parámetros de colocación usados por las operaciones de edición."""

from dataclasses import dataclass


@dataclass
class EditorSettings:
    """Preferencias geométricas del editor de estructuras."""
    # Longitud de enlace para átomos nuevos (px).
    bond_length: float = 40.0
    # Ventana de vecindad del potencial de aglomeración, en enlaces promedio.
    crowding_filter_factor: float = 3.0
    # Vértices más cercanos que esta fracción de enlace no cuentan (coalescencia).
    crowding_coalescence_factor: float = 0.1
    # Paso de ajuste angular al repartir sustituyentes.
    angle_snap_deg: float = 15.0
    default_label: str = "C"
    # Distancia promedio de un grafo sin enlaces (C-C en angstrom).
    fallback_bond_distance: float = 1.54
