"""
Parsers for user supplied CAI weights and optimal codon classifications.

Both formats list one value per codon in codon index order (TTT, TCT, TAT,
TGT, TTC, TCC, ...), the same order used for codon usage output.
"""

import os
from typing import Union
import logging

import numpy as np

logger = logging.getLogger(__name__)

NUM_CODONS = 64
OPTIMAL_CLASSES = (1, 2, 3)
DIGITS = '0123456789'


class ReferenceTableError(ValueError):
    """Raised when CAI or optimal codon reference data is malformed."""


def parse_cai_values(text: str) -> np.ndarray:
    """
    Parse whitespace separated CAI adaptation values.

    Args:
        text: File contents holding exactly 64 values in [0, 1]

    Returns:
        Array of 65 weights, element 0 unused

    Raises:
        ReferenceTableError: On a non-numeric value, a value out of range or
            a count other than 64
    """
    values = [0.0]
    for token in text.split():
        try:
            value = float(token)
        except ValueError:
            raise ReferenceTableError(f"Error CAI value '{token}' is not a number")

        if not 0.0 <= value <= 1.0:
            raise ReferenceTableError(f"Error CAI {value:f} value out of range")
        values.append(value)

    if len(values) != NUM_CODONS + 1:
        raise ReferenceTableError(f"Error in CAI file, found {len(values) - 1} values "
                                  f"expected {NUM_CODONS} values")

    return np.array(values, dtype=np.float64)


def parse_optimal_codon_digits(text: str, kind: str = 'Fop') -> np.ndarray:
    """
    Parse an optimal codon classification.

    Every digit is one codon: 1 non-optimal, 2 common, 3 optimal. Characters
    that are not ASCII digits are ignored.

    Args:
        text: File contents
        kind: Index name used in error messages ('Fop' or 'CBI')

    Returns:
        Integer array of 65 classes, element 0 unused

    Raises:
        ReferenceTableError: On any other digit or a count other than 64
    """
    classes = [0]
    for position, char in enumerate(text):
        if char not in DIGITS:
            continue
        value = int(char)
        if value not in OPTIMAL_CLASSES:
            raise ReferenceTableError(
                f"Serious error in {kind} information found an illegal {kind} value "
                f"of {char} at character {position + 1}; permissible values are "
                f"1 for non-optimal codons, 2 for common codons, 3 for optimal codons")
        classes.append(value)

    if len(classes) != NUM_CODONS + 1:
        raise ReferenceTableError(f"Error in {kind} file {len(classes) - 1} digits found, "
                                  f"expected {NUM_CODONS}")

    return np.array(classes, dtype=np.int64)


def _read_text(path: Union[str, os.PathLike]) -> str:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Reference file not found: {path}")
    with open(path, 'r') as f:
        return f.read()


def load_cai_file(path: Union[str, os.PathLike]) -> np.ndarray:
    """Read CAI adaptation values from a file."""
    logger.info(f"Loading CAI adaptation values from {path}")
    return parse_cai_values(_read_text(path))


def load_optimal_codon_file(path: Union[str, os.PathLike], kind: str = 'Fop') -> np.ndarray:
    """Read an optimal codon classification from a file."""
    logger.info(f"Loading {kind} optimal codons from {path}")
    return parse_optimal_codon_digits(_read_text(path), kind=kind)
