"""
Parsers module for sequence input and reference table overrides.
"""

from .sequence_parser import load_sequences, load_sequence_dir, sequence_summary
from .reference_parser import (ReferenceTableError, parse_cai_values,
                               parse_optimal_codon_digits)
