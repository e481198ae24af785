"""Tabla periódica usada por el editor para valencias, masas e isótopos.

Cada elemento declara sus valencias habituales (en orden creciente), que se
usan para estimar los hidrógenos implícitos mientras se dibuja, y una
"abundancia" de uso en dibujos (1 = muy común, 5 = exótico) que ordena el
ciclo de etiquetas del teclado.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# Elementos del grupo 13 que aceptan un cuarto enlace como aniones (BH4-).
_TETRAVALENT_ANIONS = {"B", "Al", "Ga", "In"}
# Elementos del grupo 15 que aceptan un cuarto enlace como cationes (NH4+).
_TETRAVALENT_CATIONS = {"N", "P", "As"}


@dataclass(frozen=True)
class ChemicalElement:
    """Elemento químico con los datos que necesita el motor de dibujo."""
    symbol: str
    name: str
    number: int
    atomic_mass: float
    valences: Tuple[int, ...]
    abundance: int
    isotopes: Tuple[int, ...]

    def get_h_count(self, n_valent_bonds: int, charge: int) -> int:
        """Sugiere los hidrógenos implícitos para un átomo de este elemento.

        Args:
            n_valent_bonds: Suma de órdenes de enlace del átomo.
            charge: Carga formal del átomo.

        Returns:
            Número de H implícitos (>= 0). Se elige la menor valencia
            habitual capaz de acomodar los enlaces y la carga.
        """
        if self.symbol in _TETRAVALENT_ANIONS and charge == -1:
            return 4 - n_valent_bonds if n_valent_bonds <= 4 else 0
        if self.symbol in _TETRAVALENT_CATIONS and charge == 1:
            return 4 - n_valent_bonds if n_valent_bonds <= 4 else 0
        for valency in self.valences:
            if valency >= n_valent_bonds + abs(charge):
                return valency - n_valent_bonds - abs(charge)
        return 0

    @property
    def max_valence(self) -> int:
        return max(self.valences) if self.valences else 0


_ELEMENTS = (
    ChemicalElement("H", "Hydrogen", 1, 1.00794, (1,), 1, (1, 2, 3)),
    ChemicalElement("He", "Helium", 2, 4.002602, (), 4, (3, 4)),
    ChemicalElement("Li", "Lithium", 3, 6.941, (1,), 2, (6, 7)),
    ChemicalElement("Be", "Beryllium", 4, 9.012182, (2,), 4, ()),
    ChemicalElement("B", "Boron", 5, 10.811, (3,), 2, (10, 11)),
    ChemicalElement("C", "Carbon", 6, 12.011, (4,), 1, (12, 13, 14)),
    ChemicalElement("N", "Nitrogen", 7, 14.00674, (3,), 1, (14, 15)),
    ChemicalElement("O", "Oxygen", 8, 15.9994, (2,), 1, (16, 17, 18)),
    ChemicalElement("F", "Fluorine", 9, 18.9984032, (1,), 1, (18, 19)),
    ChemicalElement("Ne", "Neon", 10, 20.1797, (), 4, (20, 21, 22)),
    ChemicalElement("Na", "Sodium", 11, 22.989768, (1,), 2, ()),
    ChemicalElement("Mg", "Magnesium", 12, 24.305, (2,), 2, (24, 25, 26)),
    ChemicalElement("Al", "Aluminum", 13, 26.981539, (3,), 2, ()),
    ChemicalElement("Si", "Silicon", 14, 28.0855, (4,), 2, (28, 29, 30)),
    ChemicalElement("P", "Phosphorus", 15, 30.973762, (3, 5), 1, (31, 32)),
    ChemicalElement("S", "Sulfur", 16, 32.066, (2, 4, 6), 1, (32, 33, 34, 36)),
    ChemicalElement("Cl", "Chlorine", 17, 35.4527, (1, 3, 4, 5, 7), 1, (35, 37)),
    ChemicalElement("Ar", "Argon", 18, 39.948, (2,), 4, (36, 38, 40)),
    ChemicalElement("K", "Potassium", 19, 39.0983, (1,), 2, (39, 40, 41)),
    ChemicalElement("Ca", "Calcium", 20, 40.078, (2,), 2, (40, 42, 43, 44, 46, 48)),
    ChemicalElement("Sc", "Scandium", 21, 44.95591, (3,), 4, ()),
    ChemicalElement("Ti", "Titanium", 22, 47.88, (2, 3, 4), 3, (46, 47, 48, 49, 50)),
    ChemicalElement("V", "Vanadium", 23, 50.9415, (2, 3, 4, 5), 3, (50, 51)),
    ChemicalElement("Cr", "Chromium", 24, 51.9961, (2, 3, 6), 3, (50, 52, 53, 54)),
    ChemicalElement("Mn", "Manganese", 25, 54.93805, (1, 2, 3, 4, 6, 7), 3, ()),
    ChemicalElement("Fe", "Iron", 26, 55.847, (2, 3, 4, 6), 3, (54, 56, 57, 58)),
    ChemicalElement("Co", "Cobalt", 27, 58.9332, (2, 3), 3, ()),
    ChemicalElement("Ni", "Nickel", 28, 58.6934, (2, 3), 3, (58, 60, 61, 62, 64)),
    ChemicalElement("Cu", "Copper", 29, 63.546, (1, 2), 2, (63, 65)),
    ChemicalElement("Zn", "Zinc", 30, 65.39, (2,), 2, (64, 66, 67, 68, 70)),
    ChemicalElement("Ga", "Gallium", 31, 69.723, (3,), 4, (69, 71)),
    ChemicalElement("Ge", "Germanium", 32, 72.61, (2, 4), 4, (70, 72, 73, 74, 76)),
    ChemicalElement("As", "Arsenic", 33, 74.92159, (3, 5), 2, ()),
    ChemicalElement("Se", "Selenium", 34, 78.96, (2, 4, 6), 3, (74, 76, 77, 78, 80, 82)),
    ChemicalElement("Br", "Bromine", 35, 79.904, (1, 3, 5, 7), 1, (79, 81)),
    ChemicalElement("Kr", "Krypton", 36, 83.8, (2,), 4, (78, 80, 82, 83, 84, 86)),
    ChemicalElement("Rb", "Rubidium", 37, 85.4678, (1,), 4, (85, 87)),
    ChemicalElement("Sr", "Strontium", 38, 87.62, (2,), 4, (84, 86, 87, 88)),
    ChemicalElement("Y", "Yttrium", 39, 88.90585, (3,), 4, ()),
    ChemicalElement("Zr", "Zirconium", 40, 91.224, (2, 3, 4), 4, (90, 91, 92, 94, 96)),
    ChemicalElement("Nb", "Niobium", 41, 92.90638, (2, 3, 5), 4, ()),
    ChemicalElement("Mo", "Molybdenum", 42, 95.94, (2, 3, 4, 5, 6), 4, (92, 94, 95, 96, 97, 98, 100)),
    ChemicalElement("Tc", "Technetium", 43, 97.9072, (2, 4, 5, 6, 7), 5, (98, 99)),
    ChemicalElement("Ru", "Ruthenium", 44, 101.07, (1, 2, 3, 4, 5, 6, 7, 8), 3, (96, 98, 99, 100, 101, 102, 104)),
    ChemicalElement("Rh", "Rhodium", 45, 102.9055, (2, 3, 4, 5), 3, ()),
    ChemicalElement("Pd", "Palladium", 46, 106.42, (2, 4), 3, (102, 104, 105, 106, 108, 110)),
    ChemicalElement("Ag", "Silver", 47, 107.8682, (1, 2), 3, (107, 109)),
    ChemicalElement("Cd", "Cadmium", 48, 112.411, (2,), 3, (106, 108, 110, 111, 112, 113, 114, 116)),
    ChemicalElement("In", "Indium", 49, 114.818, (1, 3), 4, (113, 115)),
    ChemicalElement("Sn", "Tin", 50, 118.71, (2, 3), 3, (112, 114, 115, 116, 117, 118, 119, 120, 122, 124)),
    ChemicalElement("Sb", "Antimony", 51, 121.757, (3, 5), 4, (121, 123)),
    ChemicalElement("Te", "Tellurium", 52, 127.6, (2, 4, 6), 3, (120, 122, 123, 124, 125, 126, 128, 130)),
    ChemicalElement("I", "Iodine", 53, 126.90447, (1, 3, 5, 7), 1, ()),
    ChemicalElement("Xe", "Xenon", 54, 131.29, (2, 4, 6), 4, (124, 126, 128, 129, 130, 131, 132, 134, 136)),
    ChemicalElement("Cs", "Cesium", 55, 132.90543, (1,), 4, ()),
    ChemicalElement("Ba", "Barium", 56, 137.327, (2,), 4, (130, 132, 134, 135, 136, 137, 138)),
    ChemicalElement("La", "Lanthanum", 57, 138.9055, (3,), 4, (138, 139)),
    ChemicalElement("Ce", "Cerium", 58, 140.115, (3, 4), 3, (136, 138, 140, 142)),
    ChemicalElement("Pr", "Praseodymium", 59, 140.90765, (3, 4), 4, ()),
    ChemicalElement("Nd", "Neodymium", 60, 144.24, (3,), 4, (142, 143, 144, 145, 146, 148, 150)),
    ChemicalElement("Pm", "Promethium", 61, 144.9127, (3,), 5, ()),
    ChemicalElement("Sm", "Samarium", 62, 150.36, (2, 3), 4, (144, 147, 148, 149, 150, 152, 154)),
    ChemicalElement("Eu", "Europium", 63, 151.965, (2, 3), 3, (151, 153)),
    ChemicalElement("Gd", "Gadolinium", 64, 157.25, (3,), 4, (152, 154, 155, 156, 157, 158, 160)),
    ChemicalElement("Tb", "Terbium", 65, 158.92534, (3, 4), 4, ()),
    ChemicalElement("Dy", "Dysprosium", 66, 162.5, (3,), 4, (156, 158, 160, 161, 162, 163, 164)),
    ChemicalElement("Ho", "Holmium", 67, 164.93032, (3,), 4, ()),
    ChemicalElement("Er", "Erbium", 68, 167.26, (3,), 4, (162, 164, 166, 167, 168, 170)),
    ChemicalElement("Tm", "Thulium", 69, 168.93421, (3,), 4, ()),
    ChemicalElement("Yb", "Ytterbium", 70, 173.04, (2, 3), 4, (168, 170, 171, 172, 173, 174, 176)),
    ChemicalElement("Lu", "Lutetium", 71, 174.967, (3,), 4, (175, 176)),
    ChemicalElement("Hf", "Hafnium", 72, 178.49, (4,), 4, (174, 176, 177, 178, 179, 180)),
    ChemicalElement("Ta", "Tantalum", 73, 180.9479, (3, 5), 4, ()),
    ChemicalElement("W", "Tungsten", 74, 183.84, (2, 3, 4, 5, 6), 4, (180, 182, 183, 184, 186)),
    ChemicalElement("Re", "Rhenium", 75, 186.207, (1, 2, 3, 4, 5, 6, 7), 4, (185, 187)),
    ChemicalElement("Os", "Osmium", 76, 190.23, (3, 4, 6, 8), 3, (184, 186, 187, 188, 189, 190, 192)),
    ChemicalElement("Ir", "Iridium", 77, 192.22, (2, 3, 4, 5, 6, 7, 8), 3, (191, 193)),
    ChemicalElement("Pt", "Platinum", 78, 195.08, (2, 4), 3, (190, 192, 194, 195, 196, 198)),
    ChemicalElement("Au", "Gold", 79, 196.96654, (1, 3), 3, ()),
    ChemicalElement("Hg", "Mercury", 80, 200.59, (2,), 3, (196, 198, 199, 200, 201, 202, 204)),
    ChemicalElement("Tl", "Thallium", 81, 204.3833, (1, 3), 3, (203, 205)),
    ChemicalElement("Pb", "Lead", 82, 207.2, (2, 4), 3, (204, 206, 207, 208)),
    ChemicalElement("Bi", "Bismuth", 83, 208.98037, (3, 5), 4, ()),
    ChemicalElement("Po", "Polonium", 84, 208.9824, (2, 4, 6), 5, (208, 209, 210)),
    ChemicalElement("At", "Astatine", 85, 209.9871, (1, 3, 5, 7), 5, ()),
    ChemicalElement("Rn", "Radon", 86, 222.0176, (2, 4, 6), 5, (211, 220)),
    ChemicalElement("Fr", "Francium", 87, 223.0197, (1,), 5, ()),
    ChemicalElement("Ra", "Radium", 88, 226.0254, (2,), 5, (226, 228)),
    ChemicalElement("Ac", "Actinium", 89, 227.0278, (3,), 5, ()),
    ChemicalElement("Th", "Thorium", 90, 232.0381, (4,), 5, (230, 232)),
    ChemicalElement("Pa", "Protactinium", 91, 231.03588, (4, 5), 5, ()),
    ChemicalElement("U", "Uranium", 92, 238.0289, (2, 3, 4, 5, 6), 4, (234, 235, 238)),
    ChemicalElement("Np", "Neptunium", 93, 237.0482, (3, 4, 5, 6), 5, ()),
    ChemicalElement("Pu", "Plutonium", 94, 244.0642, (3, 4, 5, 6), 5, (238, 239, 240, 241, 242, 244)),
    ChemicalElement("Am", "Americium", 95, 243.0614, (2, 3, 4, 5, 6), 5, (241, 243)),
    ChemicalElement("Cm", "Curium", 96, 247.0703, (3, 4), 5, (243, 244, 245, 246, 247, 248)),
    ChemicalElement("Bk", "Berkelium", 97, 247.0703, (3, 4), 5, (247, 249)),
    ChemicalElement("Cf", "Californium", 98, 251.0796, (3,), 5, (249, 250, 251, 252)),
    ChemicalElement("Es", "Einsteinium", 99, 252.0829, (3,), 5, ()),
    ChemicalElement("Fm", "Fermium", 100, 257.0951, (3,), 5, ()),
    ChemicalElement("Md", "Mendelevium", 101, 258.0984, (3,), 5, ()),
    ChemicalElement("No", "Nobelium", 102, 259.101, (3,), 5, ()),
    ChemicalElement("Lr", "Lawrencium", 103, 262.1098, (3,), 5, ()),
)

CHEMICAL_ELEMENTS: Dict[str, ChemicalElement] = {element.symbol: element for element in _ELEMENTS}


def get_element(symbol: str) -> Optional[ChemicalElement]:
    """Devuelve el elemento para un símbolo, o `None` si no existe."""
    return CHEMICAL_ELEMENTS.get(symbol)


def is_element_symbol(symbol: str) -> bool:
    return symbol in CHEMICAL_ELEMENTS
