"""
Genetic code tables, codon numbering and synonymy model.

Codons are numbered 1-64 from their bases (T/U=1, C=2, A=3, G=4) as
``(b1 - 1) * 16 + b2 + (b3 - 1) * 4``; index 0 is reserved for codons that
contain an unrecognised base. Amino acids are numbered 0-21 in the order
``X F L I M V S P T A Y * H Q N K D E C W R G`` with 0 for unknown and 11
for stop.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple
import logging

import numpy as np
from Bio.Data import CodonTable
from Bio.Data.IUPACData import protein_letters_1to3
from Bio.SeqUtils.ProtParamData import kd

logger = logging.getLogger(__name__)

BASES = 'TCAG'
BASE_VALUES = {'T': 1, 'U': 1, 'C': 2, 'A': 3, 'G': 4}

STOP_ID = 11
UNKNOWN_ID = 0
AMINO_ACID_LETTERS = 'XFLIMVSPTAY*HQNKDECWRG'
AROMATIC_LETTERS = set('FWY')


@dataclass(frozen=True)
class AminoAcidProperties:
    """Static per-amino-acid reference data indexed by amino acid id."""
    one_letter: Tuple[str, ...]
    three_letter: Tuple[str, ...]
    hydropathicity: Tuple[float, ...]
    aromaticity: Tuple[float, ...]

    def index_of(self, letter: str) -> int:
        return self.one_letter.index(letter.upper())


def _build_amino_acid_properties() -> AminoAcidProperties:
    three_letter = []
    hydro = []
    aromo = []
    for letter in AMINO_ACID_LETTERS:
        if letter == 'X':
            three_letter.append('UNK')
        elif letter == '*':
            three_letter.append('TER')
        else:
            three_letter.append(protein_letters_1to3[letter])
        # Kyte & Doolittle (1982) scale
        hydro.append(kd.get(letter, 0.0))
        aromo.append(1.0 if letter in AROMATIC_LETTERS else 0.0)

    return AminoAcidProperties(
        one_letter=tuple(AMINO_ACID_LETTERS),
        three_letter=tuple(three_letter),
        hydropathicity=tuple(hydro),
        aromaticity=tuple(aromo),
    )


AMINO_ACIDS = _build_amino_acid_properties()


# Catalog of selectable genetic codes: (name, changes from universal, NCBI id)
GENETIC_CODE_CATALOG: List[Tuple[str, str, int]] = [
    ("Universal Genetic code", "TGA=* TAA=* TAG=*", 1),
    ("Vertebrate Mitochondrial code", "AGR=* ATA=M TGA=W", 2),
    ("Yeast Mitochondrial code", "CTN=T ATA=M TGA=W", 3),
    ("Filamentous fungi Mitochondrial code", "TGA=W", 4),
    ("Insects and Plathyhelminthes Mitochondrial code", "ATA=M TGA=W AGR=S", 5),
    ("Nuclear code of Cilitia", "TAA=Q TAG=Q", 6),
    ("Nuclear code of Euplotes", "TGA=C", 10),
    ("Mitochondrial code of Echinoderms", "TGA=W AGR=S AAA=N", 9),
]


def codon_index(codon: str) -> int:
    """
    Convert a codon into its numerical value.

    Args:
        codon: Codon string; only the first three characters are read

    Returns:
        Codon index in 1-64, or 0 if any base is unrecognised or missing
    """
    values = []
    for x in range(3):
        if x >= len(codon):
            return 0
        value = BASE_VALUES.get(codon[x].upper(), 0)
        if value == 0:
            return 0
        values.append(value)

    return (values[0] - 1) * 16 + values[1] + (values[2] - 1) * 4


def codon_name(index: int) -> str:
    """Return the DNA codon for an index in 1-64."""
    if not 1 <= index <= 64:
        raise ValueError(f"Codon index out of range: {index}")
    offset = index - 1
    return BASES[offset // 16] + BASES[offset % 4] + BASES[(offset // 4) % 4]


CODONS = tuple([''] + [codon_name(x) for x in range(1, 65)])


@dataclass(frozen=True)
class GeneticCode:
    """An immutable codon to amino acid translation table."""
    code_id: int
    name: str
    changes: str
    ncbi_id: int
    ca: Tuple[int, ...]

    def is_stop(self, index: int) -> bool:
        return self.ca[index] == STOP_ID

    def codons_for(self, aa_id: int) -> List[int]:
        """Codon indices encoding amino acid ``aa_id``."""
        return [x for x in range(1, 65) if self.ca[x] == aa_id]

    def as_dict(self) -> Dict[str, str]:
        """Return the table as codon -> one letter amino acid."""
        return {CODONS[x]: AMINO_ACID_LETTERS[self.ca[x]] for x in range(1, 65)}


def load_genetic_code(code_id: int = 0) -> GeneticCode:
    """
    Build a genetic code from the catalog.

    Args:
        code_id: Catalog position (0 = universal)

    Returns:
        GeneticCode for the selected variant
    """
    if not 0 <= code_id < len(GENETIC_CODE_CATALOG):
        raise ValueError(f"Unknown genetic code {code_id}, "
                         f"choose 0-{len(GENETIC_CODE_CATALOG) - 1}")

    name, changes, ncbi_id = GENETIC_CODE_CATALOG[code_id]
    table = CodonTable.unambiguous_dna_by_id[ncbi_id]

    ca = [UNKNOWN_ID]
    for x in range(1, 65):
        codon = CODONS[x]
        if codon in table.stop_codons:
            ca.append(STOP_ID)
        elif codon in table.forward_table:
            ca.append(AMINO_ACIDS.index_of(table.forward_table[codon]))
        else:
            logger.warning(f"Codon {codon} is unassigned in NCBI table {ncbi_id}")
            ca.append(UNKNOWN_ID)

    logger.debug(f"Loaded genetic code {code_id} from NCBI table {ncbi_id}")
    return GeneticCode(code_id=code_id, name=name, changes=changes,
                       ncbi_id=ncbi_id, ca=tuple(ca))


@dataclass(frozen=True)
class SynonymyInfo:
    """
    How synonymous each codon and amino acid is under one genetic code.

    ``ds[x]`` is the number of codons sharing codon x's amino acid and
    ``da[i]`` the number of codons encoding amino acid i.
    """
    ds: np.ndarray
    da: np.ndarray


def build_synonymy(code: GeneticCode) -> SynonymyInfo:
    """
    Derive codon and amino acid family sizes from a genetic code.

    Args:
        code: Genetic code to analyse

    Returns:
        SynonymyInfo with read-only arrays
    """
    ds = np.zeros(65, dtype=np.int64)
    da = np.zeros(22, dtype=np.int64)

    for x in range(1, 65):
        for i in range(1, 65):
            if code.ca[x] == code.ca[i]:
                ds[x] += 1

    for x in range(1, 65):
        da[code.ca[x]] += 1

    ds.setflags(write=False)
    da.setflags(write=False)
    return SynonymyInfo(ds=ds, da=da)
