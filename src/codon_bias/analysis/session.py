"""
Analysis session: the genetic code, synonymy model and reference tables
chosen for a run, plus the usage counters of the sequence being processed.
"""

from typing import Any, Dict, Optional
import logging

from . import indices
from .codon_usage import UsageCounters, clean_up, count_sequence
from .genetic_code import (AMINO_ACIDS, AminoAcidProperties, GeneticCode,
                           SynonymyInfo, build_synonymy, load_genetic_code)
from .reference_tables import ReferenceWeightTables
from .validation import ValidationLevel, ValidationReporter

logger = logging.getLogger(__name__)


class AnalysisSession:
    """
    Shared read-only tables and per-sequence counters for one analysis run.

    Typical use::

        session = initialize_point(code=0)
        for title, seq in sequences:
            session.add_sequence(seq)
            session.check(title)
            value = session.enc(title)
            session.clean_up()
    """

    def __init__(self,
                 code: GeneticCode,
                 tables: Optional[ReferenceWeightTables] = None,
                 warn: bool = True,
                 totals: bool = False,
                 modified_fop: bool = False):
        self.code = code
        self.synonymy: SynonymyInfo = build_synonymy(code)
        self.amino_acids: AminoAcidProperties = AMINO_ACIDS
        self.tables = tables or ReferenceWeightTables()
        self.reporter = ValidationReporter(code, warn=warn, totals=totals)
        self.counters = UsageCounters()
        self.modified_fop = modified_fop
        self.last_codon = 0

    @property
    def totals(self) -> bool:
        return self.reporter.totals

    # --- counting -------------------------------------------------------

    def add_sequence(self, seq: str) -> int:
        """
        Count codon and dinucleotide usage of a sequence into the session
        counters. Returns the index of the last codon.
        """
        self.last_codon = count_sequence(seq, self.counters, self.code)
        return self.last_codon

    def check(self, title: str = '') -> int:
        """Run the internal stop and truncation checks for the current counts."""
        self.reporter.validate(self.counters, ValidationLevel.INTERNAL_STOPS, title,
                               last_codon=self.last_codon)
        return self.reporter.validate(self.counters, ValidationLevel.TRUNCATION, title,
                                      last_codon=self.last_codon)

    def codon_total(self) -> int:
        return self.reporter.validate(self.counters, ValidationLevel.SILENT)

    def clean_up(self) -> None:
        """Reset the counters before an unrelated sequence."""
        clean_up(self.counters)
        self.last_codon = 0

    # --- indices --------------------------------------------------------

    def rscu(self) -> Dict[str, float]:
        return indices.rscu(self.counters, self.code, self.synonymy)

    def raau(self) -> Dict[str, Optional[float]]:
        return indices.raau(self.counters)

    def aa_usage(self) -> Dict[str, int]:
        return indices.aa_usage(self.counters)

    def silent_base_composition(self) -> Dict[str, float]:
        return indices.silent_base_composition(self.counters, self.code, self.synonymy)

    def cai(self) -> float:
        return indices.cai(self.counters, self.code, self.synonymy, self.tables.cai)

    def cbi(self) -> float:
        return indices.cbi(self.counters, self.code, self.synonymy, self.tables.cbi)

    def fop(self) -> float:
        return indices.fop(self.counters, self.code, self.synonymy, self.tables.fop,
                           modified=self.modified_fop)

    def enc(self, title: str = '') -> Optional[float]:
        return indices.enc(self.counters, self.code, self.synonymy,
                           reporter=self.reporter, title=title)

    def gc_content(self, mode: int = indices.GcMode.FULL, title: str = ''):
        return indices.gc_content(self.counters, self.code, self.synonymy, mode=mode, title=title)

    def dinucleotide_frequencies(self) -> Dict[str, list]:
        return indices.dinucleotide_frequencies(self.counters)

    def hydropathicity(self, title: str = '') -> Optional[float]:
        return indices.hydropathicity(self.counters, title=title)

    def aromaticity(self, title: str = '') -> Optional[float]:
        return indices.aromaticity(self.counters, title=title)


def initialize_point(code: int = 0,
                     cai_species: str = 'ecoli',
                     fop_species: str = 'ecoli',
                     cai_file: Optional[str] = None,
                     fop_file: Optional[str] = None,
                     cbi_file: Optional[str] = None,
                     reference_data: Optional[str] = None,
                     warn: bool = True,
                     totals: bool = False,
                     modified_fop: bool = False) -> AnalysisSession:
    """
    Create an analysis session for the chosen genetic code and reference
    tables.

    Args:
        code: Genetic code catalog id (0 = universal)
        cai_species: Built-in CAI table, ignored when cai_file is given
        fop_species: Built-in optimal codon table used for Fop and CBI
        cai_file: User CAI adaptation values
        fop_file: User optimal codons for Fop
        cbi_file: User optimal codons for CBI
        reference_data: YAML file of species tables replacing the built-in set
        warn: Report sequence warnings
        totals: Sequences are concatenated into one batch
        modified_fop: Use Fop = (opt - rare) / total

    Returns:
        AnalysisSession ready to count sequences
    """
    genetic_code = load_genetic_code(code)
    tables = ReferenceWeightTables(cai_species=cai_species,
                                   fop_species=fop_species,
                                   cai_file=cai_file,
                                   fop_file=fop_file,
                                   cbi_file=cbi_file,
                                   data_path=reference_data)
    logger.info(f"Genetic code set to {genetic_code.name} {genetic_code.changes}")
    return AnalysisSession(genetic_code, tables, warn=warn, totals=totals,
                           modified_fop=modified_fop)


def session_from_config(config: Dict[str, Any]) -> AnalysisSession:
    """Create a session from a validated configuration dictionary."""
    return initialize_point(code=config.get('genetic_code', 0),
                            cai_species=config.get('cai_species', 'ecoli'),
                            fop_species=config.get('fop_species', 'ecoli'),
                            cai_file=config.get('cai_file'),
                            fop_file=config.get('fop_file'),
                            cbi_file=config.get('cbi_file'),
                            reference_data=config.get('reference_data'),
                            warn=config.get('warn', True),
                            totals=config.get('totals', False),
                            modified_fop=config.get('modified_fop', False))
