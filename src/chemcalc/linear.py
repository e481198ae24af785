"""Fórmulas lineares usadas como etiquetas de vértices (CH2CH3, CF3, OMe...).

Una etiqueta que no es un símbolo atómico se intenta leer como fórmula
lineal: una secuencia de fragmentos atómicos (con sus H, sustituyentes
halógeno u oxo, multiplicador y carga) o abreviaturas conocidas (Ph, Boc,
Ts...). Si no se puede leer, el vértice queda con una etiqueta libre.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .elements import CHEMICAL_ELEMENTS, ChemicalElement


class LinearFormulaError(ValueError):
    """Se lanza cuando un texto no se puede interpretar como fórmula lineal."""


@dataclass(frozen=True)
class Abbreviation:
    """Grupo abreviado y su estructura en SMILES (el primer átomo es el de unión)."""
    symbol: str
    names: Tuple[str, ...]
    smiles: str


ABBREVIATIONS: Dict[str, Abbreviation] = {
    abbreviation.symbol: abbreviation
    for abbreviation in (
        # grupos alifáticos
        Abbreviation("Me", ("Methyl",), "C"),
        Abbreviation("Et", ("Ethyl",), "CC"),
        Abbreviation("Pr", ("Propyl",), "CCC"),
        Abbreviation("i-Pr", ("iso-Propyl",), "C(C)C"),
        Abbreviation("Bu", ("Butyl",), "CCCC"),
        Abbreviation("i-Bu", ("iso-Butyl",), "CC(C)C"),
        Abbreviation("s-Bu", ("sec-Butyl",), "C(C)CC"),
        Abbreviation("t-Bu", ("tert-Butyl",), "C(C)(C)C"),
        Abbreviation("Am", ("Amyl",), "CCCCC"),
        Abbreviation("i-Am", ("iso-Amyl",), "CCC(C)C"),
        Abbreviation("Hex", ("Hexyl",), "CCCCCC"),
        Abbreviation("All", ("Allyl",), "CC=C"),
        # grupos aromáticos
        Abbreviation("Ph", ("Phenyl",), "c1ccccc1"),
        Abbreviation("Tol", ("Tolyl",), "c1ccc(C)cc1"),
        Abbreviation("Bn", ("Benzyl",), "Cc1ccccc1"),
        # acilos
        Abbreviation("Ac", ("Acetyl",), "C(=O)C"),
        Abbreviation("Bz", ("Benzoyl",), "C(=O)c1ccccc1"),
        # organosilicio
        Abbreviation("TBDMS", ("tert-Butyldimethylsilyl",), "[Si](C)(C)C(C)(C)C"),
        Abbreviation("TMS", ("Trimethylsilyl",), "[Si](C)(C)C"),
        # grupos protectores
        Abbreviation("Boc", ("tert-Butoxycarbonyl",), "C(=O)OC(C)(C)C"),
        Abbreviation("THP", ("Tetrahydropyranyl",), "C1OCCCC1"),
        Abbreviation("Tr", ("Trityl",), "C(c1ccccc1)(c1ccccc1)(c1ccccc1)"),
        # sulfonilos
        Abbreviation("Ms", ("Mesyl",), "S(=O)(=O)C"),
        Abbreviation("Tf", ("Triflyl",), "S(=O)(=O)C(F)(F)F"),
        Abbreviation("Ts", ("Tosyl",), "S(=O)(=O)c1ccc(C)cc1"),
    )
}

# Una "H" seguida de minúscula es otro elemento (He, Hg, Hf, Ho).
_HYDROGENS_RE = re.compile(r"H(?![a-z])(\d*)")
_HALOGEN_RE = re.compile(r"(F|Cl|Br|I)(?![a-z])(\d*)")
# Un O seguido de H es un hidroxilo y no un oxo.
_OXO_RE = re.compile(r"O(?![a-zH])(\d*)")
_CHARGE_RE = re.compile(r"(\d*)([+-])")
_COUNT_RE = re.compile(r"\d+")


@dataclass
class LinearFragment:
    text: str = ""
    count: int = 1
    charge: int = 0
    # orden del enlace con el fragmento anterior
    bond_order: int = 1


@dataclass
class AtomicFragment(LinearFragment):
    """CH2, CH3+, Na+, O, etc."""
    element: Optional[ChemicalElement] = None
    n_hydrogens: int = 0


@dataclass
class AbbreviatedFragment(LinearFragment):
    """Boc, Tf, Ph, etc."""
    abbreviation: Optional[Abbreviation] = None


@dataclass
class CompositeFragment(LinearFragment):
    """Átomo central con sustituyentes (CF3, SO2) o una fórmula completa."""
    components: List[LinearFragment] = field(default_factory=list)


def _match_token(text: str, start: int, max_length: int) -> Optional[str]:
    for length in range(min(max_length, len(text) - start), 0, -1):
        chunk = text[start:start + length]
        if chunk in ABBREVIATIONS or chunk in CHEMICAL_ELEMENTS:
            return chunk
    return None


def tokenize(text: str) -> List[LinearFragment]:
    """Divide una fórmula lineal en fragmentos.

    Args:
        text: Fórmula a interpretar (p. ej., "CH2CH2OH", "SO2Cl", "OMe").

    Returns:
        Lista de fragmentos en el orden de la cadena.

    Raises:
        LinearFormulaError: Si hay texto que no corresponde a ningún
            elemento o abreviatura.
    """
    max_length = max(len(token) for token in list(CHEMICAL_ELEMENTS) + list(ABBREVIATIONS))
    fragments: List[LinearFragment] = []
    i = 0
    while i < len(text):
        chunk = _match_token(text, i, max_length)
        if chunk is None:
            raise LinearFormulaError(f"Unexpected {text[i:]!r} in linear formula {text!r}")
        i += len(chunk)
        fragment: LinearFragment
        if chunk in ABBREVIATIONS:
            fragment = AbbreviatedFragment(text=chunk, abbreviation=ABBREVIATIONS[chunk])
        else:
            atomic = AtomicFragment(text=chunk, element=CHEMICAL_ELEMENTS[chunk])
            match = _HYDROGENS_RE.match(text, i)
            if match:
                i = match.end()
                atomic.n_hydrogens = int(match.group(1)) if match.group(1) else 1
                atomic.text += match.group(0)
            fragment, i = _read_substituents(atomic, text, i, first=not fragments)

        match = _CHARGE_RE.match(text, i)
        if match:
            i = match.end()
            magnitude = int(match.group(1)) if match.group(1) else 1
            fragment.charge = magnitude if match.group(2) == "+" else -magnitude
            fragment.text += match.group(0)
        else:
            match = _COUNT_RE.match(text, i)
            if match:
                i = match.end()
                fragment.count = int(match.group(0))
                fragment.text += match.group(0)
        fragments.append(fragment)
    if not fragments:
        raise LinearFormulaError("Empty linear formula")
    return fragments


def _read_substituents(atomic: AtomicFragment, text: str, i: int, first: bool) -> Tuple[LinearFragment, int]:
    # Valencia libre: la máxima del elemento menos los H y el enlace con el fragmento previo.
    residual = atomic.element.max_valence - atomic.n_hydrogens - (0 if first else 1)
    substituents: List[LinearFragment] = []
    while True:
        match = _HALOGEN_RE.match(text, i)
        if match:
            count = int(match.group(2)) if match.group(2) else 1
            if residual < count:
                break
            i = match.end()
            substituents.append(AtomicFragment(
                text=match.group(0), count=count, element=CHEMICAL_ELEMENTS[match.group(1)]))
            residual -= count
            continue
        match = _OXO_RE.match(text, i)
        if match:
            count = int(match.group(1)) if match.group(1) else 1
            if residual < 2 * count:
                break
            i = match.end()
            substituents.append(AtomicFragment(
                text=match.group(0), count=count, bond_order=2, element=CHEMICAL_ELEMENTS["O"]))
            residual -= 2 * count
            continue
        break
    if not substituents:
        return atomic, i
    text_all = atomic.text + "".join(s.text for s in substituents)
    return CompositeFragment(text=text_all, components=[atomic, *substituents]), i


class LinearFormula(CompositeFragment):
    """Fórmula lineal completa asociada a la etiqueta de un vértice."""

    @classmethod
    def parse(cls, text: str) -> "LinearFormula":
        return cls(text=text, components=tokenize(text))

    @property
    def as_string(self) -> str:
        return self.text if self.text else "".join(c.text for c in self.components)
