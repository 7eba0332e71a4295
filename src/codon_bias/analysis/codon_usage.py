"""
Codon usage counting module.

Counts codon, amino acid and dinucleotide usage for a sequence into a
UsageCounters object which every index calculator reads from.
"""

import logging

import numpy as np

from .genetic_code import BASE_VALUES, GeneticCode, STOP_ID, codon_index

logger = logging.getLogger(__name__)


class UsageCounters:
    """
    Codon, amino acid and dinucleotide counts for one sequence.

    The counters are not cleared between calls, so several fragments (or
    several sequences in totals mode) can be accumulated before reset() is
    called.
    """

    def __init__(self):
        self.ncod = np.zeros(65, dtype=np.int64)
        self.naa = np.zeros(22, dtype=np.int64)
        self.din = np.zeros((3, 16), dtype=np.int64)
        self.valid_stops = 0
        self.codon_total = 0
        self.frame = 0
        self.last_base = 0

    def reset(self) -> None:
        """Zero all counts, the dinucleotide frame and the last base seen."""
        self.ncod[:] = 0
        self.naa[:] = 0
        self.din[:] = 0
        self.valid_stops = 0
        self.codon_total = 0
        self.frame = 0
        self.last_base = 0

    def is_empty(self) -> bool:
        return self.codon_total == 0 and not self.ncod.any() and not self.din.any()

    def __repr__(self) -> str:
        return (f"UsageCounters(codons={self.codon_total}, "
                f"untranslatable={int(self.ncod[0])}, valid_stops={self.valid_stops})")


def codon_usage_tot(seq: str, counters: UsageCounters, code: GeneticCode) -> int:
    """
    Count codon and amino acid usage of a sequence.

    Args:
        seq: Nucleotide sequence read in frame from its first base
        counters: Counters to increment
        code: Genetic code used to translate codons

    Returns:
        Index of the last codon read, 0 if it was partial or untranslatable
    """
    icode = 0
    seqlen = len(seq)

    for i in range(0, seqlen - 2, 3):
        icode = codon_index(seq[i:i + 3])
        counters.ncod[icode] += 1
        counters.naa[code.ca[icode]] += 1
        counters.codon_total += 1

    if seqlen % 3:
        # trailing partial codon
        icode = 0
        counters.ncod[0] += 1

    if code.ca[icode] == STOP_ID:
        counters.valid_stops += 1

    return icode


def dinuc_count(seq: str, counters: UsageCounters) -> None:
    """
    Count dinucleotides in all three reading frames.

    Works on the raw sequence rather than on codons. The last base and the
    current frame are kept in ``counters`` so a sequence may be fed in
    several pieces.

    Args:
        seq: Nucleotide sequence or fragment
        counters: Counters holding the dinucleotide table and frame cursor
    """
    for char in seq:
        last_base = counters.last_base
        counters.last_base = BASE_VALUES.get(char.upper(), 0)

        if not counters.last_base or not last_base:
            continue

        counters.din[counters.frame][(last_base - 1) * 4 + counters.last_base - 1] += 1
        counters.frame += 1
        if counters.frame == 3:
            counters.frame = 0


def clean_up(counters: UsageCounters) -> None:
    """
    Re-zero the counters after a sequence has been processed.

    Not called between sequences that are being concatenated.
    """
    counters.reset()
    logger.debug("Usage counters reset")


def count_sequence(seq: str, counters: UsageCounters, code: GeneticCode) -> int:
    """
    Run both the codon and the dinucleotide counts over one sequence.

    Returns:
        Index of the last codon read
    """
    last_codon = codon_usage_tot(seq, counters, code)
    dinuc_count(seq, counters)
    return last_codon
