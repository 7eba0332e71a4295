"""
Data quality checks run after a sequence has been counted.
"""

from enum import IntEnum
from typing import Optional
import logging

from .codon_usage import UsageCounters
from .genetic_code import GeneticCode, STOP_ID

logger = logging.getLogger(__name__)


class ValidationLevel(IntEnum):
    INTERNAL_STOPS = 1
    TRUNCATION = 2
    ENC_DATA = 3
    SILENT = 4


class ValidationReporter:
    """
    Reports internal stop codons, untranslatable or partial codons and
    missing data for the effective number of codons.

    Warnings go to the module logger. In totals mode (sequences concatenated)
    the internal stop and untranslatable codon messages are worded for the
    whole batch.
    """

    def __init__(self, code: GeneticCode, warn: bool = True, totals: bool = False):
        self.code = code
        self.warn = warn
        self.totals = totals
        self.num_sequence = 0
        self.sequences_with_internal_stops = 0

    def next_sequence(self) -> int:
        """Advance the sequence number used in messages."""
        self.num_sequence += 1
        return self.num_sequence

    def validate(self,
                 counters: UsageCounters,
                 level: int,
                 title: str = '',
                 last_codon: int = 0,
                 degree: int = 0,
                 found: int = 0) -> int:
        """
        Check the counts at the given level.

        Args:
            counters: Counts for the current sequence
            level: A ValidationLevel value
            title: Sequence name used in messages
            last_codon: Index of the last codon read
            degree: Family size that lacked data (ENC_DATA only)
            found: Number of amino acids found with that family size

        Returns:
            Number of translatable codons counted

        Raises:
            ValueError: If ``level`` is not a ValidationLevel
        """
        level = ValidationLevel(level)
        ncod = counters.ncod
        ca = self.code.ca

        codon_total = int(ncod[1:].sum())
        stops = int(sum(ncod[x] for x in range(1, 65) if ca[x] == STOP_ID))
        name = f"{title[:20]:<20}"

        if level == ValidationLevel.INTERNAL_STOPS:
            internal = stops - counters.valid_stops
            if internal and self.warn:
                if self.totals:
                    logger.warning(f"some sequences had internal stop codons "
                                   f"(found {internal} such codons)")
                else:
                    logger.warning(f"Sequence {self.num_sequence:3d} \"{name}\" has "
                                   f"{internal} internal stop codon(s)")
                self.sequences_with_internal_stops += 1

        elif level == ValidationLevel.TRUNCATION:
            untranslatable = int(ncod[0])
            if untranslatable == 1 and ca[last_codon] != STOP_ID and self.warn:
                logger.warning(f"Sequence {self.num_sequence:3d} \"{name}\" last codon was partial")
            else:
                if untranslatable and self.warn:
                    if self.totals:
                        logger.warning(f"some sequences had non translatable codons "
                                       f"(found {untranslatable} such codons)")
                    else:
                        logger.warning(f"sequence {self.num_sequence:3d} \"{name}\" has "
                                       f"{untranslatable} non translatable codon(s)")
                if ca[last_codon] != STOP_ID and self.warn and not self.totals:
                    logger.warning(f"Sequence {self.num_sequence:3d} \"{name}\" is not "
                                   f"terminated by a stop codon")

        elif level == ValidationLevel.ENC_DATA:
            # a missing 3-fold family is reported against the 4-fold one
            if degree == 3:
                degree = 4
            if self.warn:
                amount = f"only {found}" if found else "no"
                logger.warning(f"Sequence {self.num_sequence} \"{name}\" contains {amount} "
                               f"amino acids with {degree} synonymous codons "
                               f"--Nc was not calculated")

        return codon_total

    def summary(self) -> Optional[str]:
        if self.sequences_with_internal_stops:
            return (f"{self.sequences_with_internal_stops} of {self.num_sequence} "
                    f"sequences had internal stop codons")
        return None
