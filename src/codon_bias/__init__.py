"""
Codon Bias Analysis

Codon usage indices (CAI, Fop, CBI, ENC, GC3s and friends) and usage tables
for protein coding sequences under any of the supported genetic codes.
"""

__version__ = "1.0.0"
__author__ = "Codon Bias Analysis"
__email__ = "codon-bias@example.com"

from .parsers import sequence_parser, reference_parser
from .analysis import genetic_code, codon_usage, indices, session
from .utils import config_loader, file_utils
