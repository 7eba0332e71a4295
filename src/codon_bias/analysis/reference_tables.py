"""
Reference tables for the CAI, Fop and CBI indices.

Each table comes either from the built-in species set shipped in
``data/reference_tables.yaml`` or from a user supplied file. Tables are
resolved the first time an index needs them and are read-only afterwards.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Optional
import logging

import numpy as np
import yaml

from .genetic_code import CODONS
from ..parsers.reference_parser import (ReferenceTableError, OPTIMAL_CLASSES,
                                        load_cai_file, load_optimal_codon_file)

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)),
                                 'data', 'reference_tables.yaml')

# CAI values that are effectively zero would zero the geometric mean
CAI_ZERO_THRESHOLD = 0.0001
CAI_ZERO_REPLACEMENT = 0.01


@dataclass(frozen=True)
class CaiTable:
    description: str
    reference: str
    weights: np.ndarray


@dataclass(frozen=True)
class OptimalCodonTable:
    description: str
    reference: str
    classes: np.ndarray


def _clamp_weights(weights: np.ndarray) -> np.ndarray:
    clamped = np.array(weights, dtype=np.float64)
    clamped[1:][clamped[1:] < CAI_ZERO_THRESHOLD] = CAI_ZERO_REPLACEMENT
    clamped.setflags(write=False)
    return clamped


def _in_unit_range(values: np.ndarray) -> bool:
    # NaN fails both comparisons
    return bool(((values >= 0) & (values <= 1)).all())


def _freeze(classes: np.ndarray) -> np.ndarray:
    frozen = np.array(classes, dtype=np.int64)
    frozen.setflags(write=False)
    return frozen


def load_builtin_tables(data_path: Optional[str] = None) -> Dict:
    """
    Load the built-in reference tables.

    Args:
        data_path: Optional path to an alternative YAML file

    Returns:
        Dictionary with 'cai' and 'fop' sections keyed by species
    """
    path = data_path or DEFAULT_DATA_PATH
    if not os.path.exists(path):
        raise FileNotFoundError(f"Reference table file not found: {path}")

    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    for section in ('cai', 'fop'):
        if section not in data or not isinstance(data[section], dict):
            raise ReferenceTableError(f"Reference table file {path} has no '{section}' section")

    return data


def _codon_vector(entries: Dict[str, float], species: str, kind: str) -> List:
    missing = [codon for codon in CODONS[1:] if codon not in entries]
    if missing:
        raise ReferenceTableError(f"Built-in {kind} table '{species}' is missing "
                                  f"codons: {', '.join(missing)}")
    return [0] + [entries[codon] for codon in CODONS[1:]]


def builtin_cai_table(species: str, data: Dict) -> CaiTable:
    if species not in data['cai']:
        raise ReferenceTableError(f"No built-in CAI table for '{species}', "
                                  f"choose from {sorted(data['cai'])}")
    entry = data['cai'][species]
    weights = np.array(_codon_vector(entry['weights'], species, 'CAI'), dtype=np.float64)
    if not _in_unit_range(weights[1:]):
        raise ReferenceTableError(f"Built-in CAI table '{species}' has values out of range")
    return CaiTable(entry['description'], entry['reference'], _clamp_weights(weights))


def builtin_optimal_table(species: str, data: Dict) -> OptimalCodonTable:
    if species not in data['fop']:
        raise ReferenceTableError(f"No built-in optimal codon table for '{species}', "
                                  f"choose from {sorted(data['fop'])}")
    entry = data['fop'][species]
    classes = np.array(_codon_vector(entry['classes'], species, 'Fop'), dtype=np.int64)
    if not np.isin(classes[1:], OPTIMAL_CLASSES).all():
        raise ReferenceTableError(f"Built-in optimal codon table '{species}' has "
                                  f"values other than {OPTIMAL_CLASSES}")
    return OptimalCodonTable(entry['description'], entry['reference'], _freeze(classes))


class ReferenceWeightTables:
    """
    CAI weights and Fop/CBI optimal codon classes for one analysis session.

    A user file, when given, takes precedence over the built-in species
    table. Malformed data raises ReferenceTableError, which ends the session.
    """

    def __init__(self,
                 cai_species: str = 'ecoli',
                 fop_species: str = 'ecoli',
                 cai_file: Optional[str] = None,
                 fop_file: Optional[str] = None,
                 cbi_file: Optional[str] = None,
                 data_path: Optional[str] = None):
        self.cai_species = cai_species
        self.fop_species = fop_species
        self.cai_file = cai_file
        self.fop_file = fop_file
        self.cbi_file = cbi_file
        self.data_path = data_path

        self._builtin = None
        self._cai = None
        self._fop = None
        self._cbi = None

    def _builtin_data(self) -> Dict:
        if self._builtin is None:
            self._builtin = load_builtin_tables(self.data_path)
        return self._builtin

    @property
    def cai(self) -> CaiTable:
        """CAI adaptation values, resolved on first use."""
        if self._cai is None:
            if self.cai_file:
                table = CaiTable("User supplied CAI adaptation values", "No reference",
                                 _clamp_weights(load_cai_file(self.cai_file)))
            else:
                table = builtin_cai_table(self.cai_species, self._builtin_data())
            logger.info(f"Using {table.description} ({table.reference}) w values to calculate CAI")
            self._cai = table
        return self._cai

    @property
    def fop(self) -> OptimalCodonTable:
        """Optimal codons used for Fop, resolved on first use."""
        if self._fop is None:
            self._fop = self._resolve_optimal(self.fop_file, 'Fop')
        return self._fop

    @property
    def cbi(self) -> OptimalCodonTable:
        """Optimal codons used for CBI, resolved on first use."""
        if self._cbi is None:
            self._cbi = self._resolve_optimal(self.cbi_file, 'CBI')
        return self._cbi

    def _resolve_optimal(self, path: Optional[str], kind: str) -> OptimalCodonTable:
        if path:
            table = OptimalCodonTable("User supplied choice", "No reference",
                                      _freeze(load_optimal_codon_file(path, kind=kind)))
        else:
            table = builtin_optimal_table(self.fop_species, self._builtin_data())
        logger.info(f"Using {table.description} ({table.reference}) optimal codons to calculate {kind}")
        return table

    @classmethod
    def from_tables(cls,
                    cai_weights: Optional[np.ndarray] = None,
                    fop_classes: Optional[np.ndarray] = None,
                    cbi_classes: Optional[np.ndarray] = None) -> 'ReferenceWeightTables':
        """
        Build tables from already parsed arrays of 65 values (element 0 unused).
        Tables left as None fall back to the built-in E. coli data.
        """
        tables = cls()
        if cai_weights is not None:
            tables._cai = CaiTable("User supplied CAI adaptation values", "No reference",
                                   _clamp_weights(_check_length(cai_weights, 'CAI')))
        if fop_classes is not None:
            tables._fop = OptimalCodonTable("User supplied choice", "No reference",
                                            _freeze(_check_classes(fop_classes, 'Fop')))
        if cbi_classes is not None:
            tables._cbi = OptimalCodonTable("User supplied choice", "No reference",
                                            _freeze(_check_classes(cbi_classes, 'CBI')))
        return tables


def _check_length(values: np.ndarray, kind: str) -> np.ndarray:
    if len(values) != 65:
        raise ReferenceTableError(f"{kind} table must hold 65 entries (index 0 unused), "
                                  f"got {len(values)}")
    values = np.asarray(values, dtype=np.float64)
    if not _in_unit_range(values[1:]):
        raise ReferenceTableError(f"{kind} values must lie between 0 and 1")
    return values


def _check_classes(classes: np.ndarray, kind: str) -> np.ndarray:
    if len(classes) != 65:
        raise ReferenceTableError(f"{kind} table must hold 65 entries (index 0 unused), "
                                  f"got {len(classes)}")
    classes = np.asarray(classes, dtype=np.int64)
    if not np.isin(classes[1:], OPTIMAL_CLASSES).all():
        raise ReferenceTableError(f"{kind} classes must be one of {OPTIMAL_CLASSES}")
    return classes


def list_builtin_species(data_path: Optional[str] = None) -> Dict[str, List[str]]:
    """Return the species keys available for each built-in table type."""
    data = load_builtin_tables(data_path)
    return {section: sorted(data[section]) for section in ('cai', 'fop')}
