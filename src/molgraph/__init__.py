"""API pública del motor de grafos moleculares.

Reexpone el modelo, el análisis de topología, el editor de estructuras y el
historial de acciones para facilitar importaciones.
"""

from molgraph.actions import Action, ActionDirection, ActionStack
from molgraph.editor import StructureEditor, next_element_label
from molgraph.model import (
    Edge,
    EdgeOrientation,
    EdgeShape,
    LabelType,
    MolecularGraph,
    Topology,
    Vertex,
    bond_order,
)
from molgraph.orientation import OrientationResolver
from molgraph.settings import EditorSettings
from molgraph.topology import TopologyAnalyzer

__all__ = [
    "Action",
    "ActionDirection",
    "ActionStack",
    "Edge",
    "EdgeOrientation",
    "EdgeShape",
    "EditorSettings",
    "LabelType",
    "MolecularGraph",
    "OrientationResolver",
    "StructureEditor",
    "Topology",
    "TopologyAnalyzer",
    "Vertex",
    "bond_order",
    "next_element_label",
]
