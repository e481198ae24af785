"""Conversión entre el grafo del editor y RDKit (SMILES y molfile MDL).

Las coordenadas del editor son de pantalla (Y hacia abajo) y en píxeles; las
de RDKit, cartesianas en angstrom. Al importar se invierte el eje Y y el
dibujo se reescala a la longitud de enlace del editor; al exportar se hace
lo contrario.
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

from rdkit import Chem
from rdkit.Chem import AllChem

from chemio.errors import ConversionError
from molgraph.model import EdgeShape, LabelType, MolecularGraph, Vertex

logger = logging.getLogger(__name__)

# Longitud de enlace estándar de los molfiles exportados (angstrom).
MOLFILE_BOND_LENGTH = 1.5

# Valores de `_MolFileBondStereo` en molfiles V2000.
_MOLFILE_WEDGE = 1
_MOLFILE_EITHER = 4
_MOLFILE_HASH = 6

_SHAPE_TO_BOND_TYPE = {
    EdgeShape.DOUBLE: Chem.BondType.DOUBLE,
    EdgeShape.DOUBLE_EITHER: Chem.BondType.DOUBLE,
    EdgeShape.TRIPLE: Chem.BondType.TRIPLE,
    EdgeShape.AROMATIC: Chem.BondType.AROMATIC,
}

_SHAPE_TO_BOND_DIR = {
    EdgeShape.SINGLE_UP: Chem.BondDir.BEGINWEDGE,
    EdgeShape.SINGLE_DOWN: Chem.BondDir.BEGINDASH,
    EdgeShape.SINGLE_EITHER: Chem.BondDir.UNKNOWN,
}


def graph_to_rdkit_with_map(graph: MolecularGraph) -> Tuple[Chem.Mol, Dict[int, int]]:
    """Construye una molécula RDKit con conformero 2D a partir del grafo.

    Las etiquetas que no son átomos (fórmulas lineales y textos libres) se
    exportan como átomos comodín con la etiqueta en `dummyLabel`. Los
    hidrógenos implícitos calculados por el editor se fijan como explícitos
    para que RDKit no los vuelva a estimar.

    Returns:
        Tupla `(mol, mapa)` donde `mapa` asocia el handle de cada vértice
        con su índice de átomo.
    """
    rw = Chem.RWMol()
    index_map: Dict[int, int] = {}
    for vertex in graph.vertices:
        if vertex.label_type == LabelType.ATOM:
            rd_atom = Chem.Atom(vertex.element.symbol)
            rd_atom.SetNoImplicit(True)
            rd_atom.SetNumExplicitHs(vertex.h_count)
        else:
            rd_atom = Chem.Atom(0)
            rd_atom.SetProp("dummyLabel", vertex.label)
        rd_atom.SetFormalCharge(vertex.charge)
        if vertex.isotope:
            rd_atom.SetIsotope(vertex.isotope)
        index_map[vertex.handle] = rw.AddAtom(rd_atom)

    for edge in graph.edges:
        i = index_map[edge.v1.handle]
        j = index_map[edge.v2.handle]
        bond_type = _SHAPE_TO_BOND_TYPE.get(edge.shape, Chem.BondType.SINGLE)
        if bond_type == Chem.BondType.AROMATIC:
            rw.GetAtomWithIdx(i).SetIsAromatic(True)
            rw.GetAtomWithIdx(j).SetIsAromatic(True)
        rw.AddBond(i, j, bond_type)
        bond = rw.GetBondBetweenAtoms(i, j)
        if bond_type == Chem.BondType.AROMATIC:
            bond.SetIsAromatic(True)
        if edge.shape in _SHAPE_TO_BOND_DIR:
            bond.SetBondDir(_SHAPE_TO_BOND_DIR[edge.shape])
        elif edge.shape == EdgeShape.DOUBLE_EITHER:
            bond.SetStereo(Chem.BondStereo.STEREOANY)

    mol = rw.GetMol()
    mol.UpdatePropertyCache(strict=False)
    Chem.FastFindRings(mol)
    scale = MOLFILE_BOND_LENGTH / graph.get_average_bond_distance(MOLFILE_BOND_LENGTH)
    conf = Chem.Conformer(mol.GetNumAtoms())
    for vertex in graph.vertices:
        conf.SetAtomPosition(index_map[vertex.handle], (vertex.x * scale, -vertex.y * scale, 0.0))
    mol.AddConformer(conf, assignId=True)
    return mol, index_map


def graph_to_rdkit(graph: MolecularGraph) -> Chem.Mol:
    mol, _ = graph_to_rdkit_with_map(graph)
    return mol


def graph_to_smiles(graph: MolecularGraph) -> str:
    mol = graph_to_rdkit(graph)
    return Chem.MolToSmiles(mol, canonical=True)


def graph_to_molfile(graph: MolecularGraph) -> str:
    mol = graph_to_rdkit(graph)
    return Chem.MolToMolBlock(mol, kekulize=False)


def smiles_to_graph(smiles: str, bond_length: float = 40.0) -> MolecularGraph:
    """Lee un SMILES y calcula coordenadas 2D.

    Raises:
        ConversionError: Si RDKit no puede interpretar la cadena.
    """
    mol = Chem.MolFromSmiles(smiles)
    if mol is None:
        raise ConversionError(f"Invalid SMILES: {smiles!r}")
    return rdkit_to_graph(mol, bond_length)


def molfile_to_graph(molfile: str, bond_length: float = 40.0) -> MolecularGraph:
    """Lee un molfile MDL conservando sus coordenadas.

    Raises:
        ConversionError: Si RDKit no puede interpretar el bloque.
    """
    mol = Chem.MolFromMolBlock(molfile, sanitize=True)
    if mol is None:
        raise ConversionError("Invalid molfile")
    return rdkit_to_graph(mol, bond_length)


def _edge_shape(bond: Chem.Bond) -> EdgeShape:
    bond_type = bond.GetBondType()
    if bond_type == Chem.BondType.TRIPLE:
        return EdgeShape.TRIPLE
    if bond_type == Chem.BondType.DOUBLE:
        if bond.GetStereo() == Chem.BondStereo.STEREOANY:
            return EdgeShape.DOUBLE_EITHER
        return EdgeShape.DOUBLE
    if bond_type == Chem.BondType.AROMATIC:
        return EdgeShape.AROMATIC
    stereo = bond.GetIntProp("_MolFileBondStereo") if bond.HasProp("_MolFileBondStereo") else 0
    direction = bond.GetBondDir()
    if stereo == _MOLFILE_WEDGE or direction == Chem.BondDir.BEGINWEDGE:
        return EdgeShape.SINGLE_UP
    if stereo == _MOLFILE_HASH or direction == Chem.BondDir.BEGINDASH:
        return EdgeShape.SINGLE_DOWN
    if stereo == _MOLFILE_EITHER or direction == Chem.BondDir.UNKNOWN:
        return EdgeShape.SINGLE_EITHER
    return EdgeShape.SINGLE


def rdkit_to_graph(mol: Chem.Mol, bond_length: float = 40.0) -> MolecularGraph:
    """Convierte una molécula RDKit en un grafo del editor.

    Los anillos aromáticos se kekulizan para dibujarlos con enlaces simples
    y dobles alternos. El resultado tiene la topología y las orientaciones
    ya calculadas.
    """
    if mol is None:
        raise ConversionError("Invalid molecule")
    mol = Chem.Mol(mol)
    try:
        Chem.Kekulize(mol, clearAromaticFlags=True)
    except Chem.KekulizeException:
        logger.debug("No se pudo kekulizar; se conservan los enlaces aromáticos")
    if mol.GetNumConformers() == 0:
        AllChem.Compute2DCoords(mol)
    conf = mol.GetConformer()

    graph = MolecularGraph()
    vertices: Dict[int, Vertex] = {}
    for atom in mol.GetAtoms():
        pos = conf.GetAtomPosition(atom.GetIdx())
        if atom.GetAtomicNum() == 0:
            label = atom.GetProp("dummyLabel") if atom.HasProp("dummyLabel") else "*"
            vertex = Vertex((pos.x, -pos.y), label)
        else:
            vertex = Vertex((pos.x, -pos.y), atom.GetSymbol(), label_type=LabelType.ATOM)
        vertex.charge = atom.GetFormalCharge()
        vertex.isotope = atom.GetIsotope()
        graph.vertices.append(vertex)
        vertices[atom.GetIdx()] = vertex

    for bond in mol.GetBonds():
        graph.bind_vertices(vertices[bond.GetBeginAtomIdx()], vertices[bond.GetEndAtomIdx()], _edge_shape(bond))

    _scale_to_default(graph, bond_length)
    graph.update_topology()
    return graph


def _scale_to_default(graph: MolecularGraph, target: float = 40.0) -> None:
    if not graph.edges:
        return
    avg = graph.get_average_bond_distance()
    if avg <= 0:
        return
    graph.apply_scaling(target / avg)
