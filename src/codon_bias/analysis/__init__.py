"""
Analysis module for codon usage counting and index calculation.
"""

from .genetic_code import codon_index, codon_name, load_genetic_code, build_synonymy
from .codon_usage import UsageCounters, codon_usage_tot, dinuc_count, clean_up
from .reference_tables import ReferenceWeightTables
from .validation import ValidationLevel, ValidationReporter
from .session import AnalysisSession, initialize_point, session_from_config
