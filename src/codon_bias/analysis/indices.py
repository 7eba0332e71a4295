"""
Codon usage indices.

Every function reads a completed UsageCounters together with the session's
genetic code, synonymy model and reference tables, and returns plain
numbers. Zero denominators give 0 unless noted; "too short" sequences give
None and a logged warning.
"""

import math
from enum import IntEnum
from typing import Dict, List, Optional, Union
import logging

from .codon_usage import UsageCounters
from .genetic_code import (AMINO_ACIDS, BASES, CODONS, GeneticCode, STOP_ID,
                           SynonymyInfo)
from .reference_tables import CaiTable, OptimalCodonTable
from .validation import ValidationLevel, ValidationReporter

logger = logging.getLogger(__name__)

DINUCLEOTIDES = [first + second for first in BASES for second in BASES]
DINUCLEOTIDE_FRAMES = ['1:2', '2:3', '3:1', 'all']
SILENT_BASE_LABELS = ['T3s', 'C3s', 'A3s', 'G3s']
GC_FIELDS = ['Len_aa', 'Len_sym', 'GC', 'GC3s', 'GCn3s', 'GC1', 'GC2', 'GC3',
             'T1', 'T2', 'T3', 'C1', 'C2', 'C3', 'A1', 'A2', 'A3', 'G1', 'G2', 'G3']

# largest amino acid family size the ENC calculation allows for
MAX_FAMILY_SIZE = 8
ENC_MAXIMUM = 61.0
HOMOZYGOSITY_THRESHOLD = 0.0000001


class GcMode(IntEnum):
    FULL = 1
    GC = 2
    GC3S = 3
    L_SYM = 4
    L_AA = 5


def _too_short(title: str) -> None:
    logger.warning(f"{title[:20]} appear to be too short, no output was written")


def _amino_acid_total(counters: UsageCounters) -> int:
    return int(sum(counters.naa[i] for i in range(1, 22) if i != STOP_ID))


def _codon_index(first: int, second: int, third: int) -> int:
    return (first - 1) * 16 + second + (third - 1) * 4


def rscu(counters: UsageCounters, code: GeneticCode, synonymy: SynonymyInfo) -> Dict[str, float]:
    """
    Relative synonymous codon usage of every codon.

    Returns:
        Dictionary codon -> RSCU in codon index order
    """
    values = {}
    for x in range(1, 65):
        aa_count = counters.naa[code.ca[x]]
        if aa_count != 0:
            values[CODONS[x]] = float(counters.ncod[x]) / float(aa_count) * float(synonymy.ds[x])
        else:
            values[CODONS[x]] = 0.0
    return values


def raau(counters: UsageCounters) -> Dict[str, Optional[float]]:
    """
    Relative amino acid usage, normalised for gene length.

    Stop is reported as 0. If no amino acids were counted every value is
    None.
    """
    aa_tot = _amino_acid_total(counters)
    values = {}
    for x in range(22):
        name = AMINO_ACIDS.three_letter[x]
        if x == STOP_ID:
            values[name] = 0.0
        elif aa_tot:
            values[name] = float(counters.naa[x]) / float(aa_tot)
        else:
            values[name] = None
    return values


def aa_usage(counters: UsageCounters) -> Dict[str, int]:
    """Raw amino acid counts keyed by three letter code."""
    return {AMINO_ACIDS.three_letter[x]: int(counters.naa[x]) for x in range(22)}


def silent_base_composition(counters: UsageCounters,
                            code: GeneticCode,
                            synonymy: SynonymyInfo) -> Dict[str, float]:
    """
    Base composition at silent third positions.

    Each base count is normalised by the number of codons that could have
    ended in that base without changing the amino acid.

    Returns:
        Dictionary with T3s, C3s, A3s and G3s
    """
    bases_s = [0, 0, 0, 0]
    could_be = [0, 0, 0, 0]

    for x in range(1, 5):
        for y in range(1, 5):
            for z in range(1, 5):
                idx = _codon_index(x, y, z)
                if synonymy.ds[idx] == 1 or code.ca[idx] == STOP_ID:
                    continue
                bases_s[z - 1] += int(counters.ncod[idx])

    for i in range(1, 22):
        if i == STOP_ID or synonymy.da[i] == 1:
            continue
        # six-fold families span two boxes; count each ending once
        done = [False, False, False, False]
        for x in range(1, 5):
            for y in range(1, 5):
                for z in range(1, 5):
                    idx = _codon_index(x, y, z)
                    if code.ca[idx] == i and not done[z - 1]:
                        could_be[z - 1] += int(counters.naa[i])
                        done[z - 1] = True

    values = {}
    for i, label in enumerate(SILENT_BASE_LABELS):
        values[label] = bases_s[i] / could_be[i] if could_be[i] > 0 else 0.0
    return values


def cai(counters: UsageCounters,
        code: GeneticCode,
        synonymy: SynonymyInfo,
        table: CaiTable) -> float:
    """
    Codon Adaptation Index (Sharp and Li 1987).

    Geometric mean of the relative adaptiveness of each synonymous codon,
    computed as a log sum. Stop codons and single codon amino acids are
    excluded.
    """
    sigma = 0.0
    totaa = 0

    for x in range(1, 65):
        if code.ca[x] == STOP_ID or synonymy.ds[x] == 1:
            continue
        count = int(counters.ncod[x])
        sigma += count * math.log(float(table.weights[x]))
        totaa += count

    if totaa:
        return math.exp(sigma / totaa)
    return 0.0


def _families_with_optimal(code: GeneticCode,
                           synonymy: SynonymyInfo,
                           classes,
                           include_non_optimal: bool = False) -> List[int]:
    has_opt_info = [0] * 22
    for x in range(1, 65):
        if code.ca[x] == STOP_ID or synonymy.ds[x] == 1:
            continue
        if classes[x] == 3:
            has_opt_info[code.ca[x]] += 1
        if include_non_optimal and classes[x] == 1:
            has_opt_info[code.ca[x]] += 1
    return has_opt_info


def cbi(counters: UsageCounters,
        code: GeneticCode,
        synonymy: SynonymyInfo,
        table: OptimalCodonTable) -> float:
    """
    Codon Bias Index (Bennetzen and Hall 1982).

    CBI = (Nopt - Nran) / (Ntot - Nran), where Nran is the number of optimal
    codons expected if codons were chosen at random. Only amino acids with at
    least one optimal codon take part. 1.0 means extreme bias, 0.0 random
    usage, and values can be negative.
    """
    has_opt_info = _families_with_optimal(code, synonymy, table.classes)

    tot_cod = 0
    opt = 0
    exp_cod = 0.0

    for x in range(1, 65):
        aa = code.ca[x]
        if not has_opt_info[aa]:
            continue
        count = int(counters.ncod[x])
        if table.classes[x] == 3:
            opt += count
            tot_cod += count
            exp_cod += float(counters.naa[aa]) / float(synonymy.da[aa])
        else:
            tot_cod += count

    if tot_cod - exp_cod:
        return (opt - exp_cod) / (tot_cod - exp_cod)
    return 0.0


def fop(counters: UsageCounters,
        code: GeneticCode,
        synonymy: SynonymyInfo,
        table: OptimalCodonTable,
        modified: bool = False) -> float:
    """
    Frequency of optimal codons (Ikemura 1981).

    Ratio of optimal codons to synonymous codons of amino acids with known
    optimal codons. With ``modified`` the non-optimal codons are subtracted,
    Fop = (opt - rare) / total, and amino acids that only have non-optimal
    codons identified also take part.
    """
    has_opt_info = _families_with_optimal(code, synonymy, table.classes,
                                          include_non_optimal=modified)

    nonopt = 0
    std = 0
    opt = 0

    for x in range(1, 65):
        if not has_opt_info[code.ca[x]]:
            continue
        count = int(counters.ncod[x])
        category = table.classes[x]
        if category == 3:
            opt += count
        elif category == 2:
            std += count
        else:
            nonopt += count

    total = opt + nonopt + std
    if modified and total:
        return (opt - nonopt) / total
    elif total:
        return opt / total
    return 0.0


def enc(counters: UsageCounters,
        code: GeneticCode,
        synonymy: SynonymyInfo,
        reporter: Optional[ValidationReporter] = None,
        title: str = '') -> Optional[float]:
    """
    Effective number of codons (Wright 1990).

    The homozygosity of every amino acid is estimated from its squared codon
    frequencies and averaged within each family size. Families of size 3
    with no data borrow the mean of the 2- and 4-fold averages when the code
    has a single 3-fold amino acid.

    Returns:
        ENC capped at 61, or None when a family size had no usable data
    """
    size = MAX_FAMILY_SIZE + 1
    numaa = [0] * size
    fold = [0] * size
    totb = [0.0] * size

    for i in range(1, 22):
        if i == STOP_ID:
            continue

        aa_count = int(counters.naa[i])
        if aa_count <= 1:
            bb = 0.0
        else:
            s2 = 0.0
            for x in range(1, 65):
                if code.ca[x] != i:
                    continue
                if counters.ncod[x]:
                    s2 += (float(counters.ncod[x]) / float(aa_count)) ** 2
            bb = (aa_count * s2 - 1.0) / (aa_count - 1.0)

        family = int(synonymy.da[i])
        if bb > HOMOZYGOSITY_THRESHOLD:
            totb[family] += bb
            numaa[family] += 1
        # amino acids absent from the gene still count towards fold
        fold[family] += 1

    enc_tot = float(fold[1])

    for z in range(2, MAX_FAMILY_SIZE + 1):
        if not fold[z]:
            continue
        if numaa[z] and totb[z] > 0:
            averb = totb[z] / numaa[z]
        elif z == 3 and numaa[2] and numaa[4] and fold[z] == 1:
            averb = (totb[2] / numaa[2] + totb[4] / numaa[4]) * 0.5
        else:
            if reporter is not None:
                reporter.validate(counters, ValidationLevel.ENC_DATA, title,
                                  degree=z, found=numaa[z])
            else:
                logger.warning(f"{title[:20]} has too few amino acids with {z} synonymous "
                               f"codons, Nc was not calculated")
            return None
        enc_tot += fold[z] / averb

    return min(enc_tot, ENC_MAXIMUM)


def gc_content(counters: UsageCounters,
               code: GeneticCode,
               synonymy: SynonymyInfo,
               mode: int = GcMode.FULL,
               title: str = '') -> Optional[Union[Dict[str, float], float, int]]:
    """
    Base composition of the translatable codons.

    Args:
        mode: GcMode selecting the full breakdown, GC, GC3s, the number of
            synonymous codons or the number of translatable codons

    Returns:
        A dictionary of GC_FIELDS for GcMode.FULL, otherwise a single value;
        None if the sequence has no translatable or no synonymous codons
    """
    mode = GcMode(mode)
    bases = [0] * 5
    base_tot = [0] * 5
    base_1 = [0] * 5
    base_2 = [0] * 5
    base_3 = [0] * 5
    tot_s = 0
    totalaa = 0

    for x in range(1, 5):
        for y in range(1, 5):
            for z in range(1, 5):
                idx = _codon_index(x, y, z)
                if code.ca[idx] == STOP_ID:
                    continue
                count = int(counters.ncod[idx])
                base_tot[x] += count
                base_1[x] += count
                base_tot[y] += count
                base_2[y] += count
                base_tot[z] += count
                base_3[z] += count
                totalaa += count

                if synonymy.ds[idx] == 1:
                    continue
                bases[z] += count
                tot_s += count

    if not tot_s or not totalaa:
        _too_short(title)
        return None

    if mode == GcMode.GC:
        return (base_tot[2] + base_tot[4]) / (totalaa * 3)
    if mode == GcMode.GC3S:
        return (bases[2] + bases[4]) / tot_s
    if mode == GcMode.L_SYM:
        return tot_s
    if mode == GcMode.L_AA:
        return totalaa

    values = {
        'Len_aa': totalaa,
        'Len_sym': tot_s,
        'GC': (base_tot[2] + base_tot[4]) / (totalaa * 3),
        'GC3s': (bases[2] + bases[4]) / tot_s,
        'GCn3s': (base_tot[2] + base_tot[4] - bases[2] - bases[4]) / (totalaa * 3 - tot_s),
        'GC1': (base_1[2] + base_1[4]) / totalaa,
        'GC2': (base_2[2] + base_2[4]) / totalaa,
        'GC3': (base_3[2] + base_3[4]) / totalaa,
    }
    for b, base in enumerate(BASES, start=1):
        values[f'{base}1'] = base_1[b] / totalaa
        values[f'{base}2'] = base_2[b] / totalaa
        values[f'{base}3'] = base_3[b] / totalaa

    return {field: values[field] for field in GC_FIELDS}


def dinucleotide_frequencies(counters: UsageCounters) -> Dict[str, List[float]]:
    """
    Dinucleotide frequencies in each reading frame and over all frames.

    Returns:
        Dictionary frame label ('1:2', '2:3', '3:1', 'all') -> 16 frequencies
        in DINUCLEOTIDES order
    """
    din = counters.din
    frames = {}
    for x, label in enumerate(DINUCLEOTIDE_FRAMES[:3]):
        total = int(din[x].sum())
        frames[label] = [float(din[x][i]) / total if total else 0.0 for i in range(16)]

    combined = din.sum(axis=0)
    total = int(combined.sum())
    frames['all'] = [float(combined[i]) / total if total else 0.0 for i in range(16)]
    return frames


def _weighted_property(counters: UsageCounters, scores, title: str) -> Optional[float]:
    aa_tot = _amino_acid_total(counters)
    if not aa_tot:
        _too_short(title)
        return None

    value = 0.0
    for i in range(1, 22):
        if i != STOP_ID:
            value += (float(counters.naa[i]) / float(aa_tot)) * scores[i]
    return value


def hydropathicity(counters: UsageCounters, title: str = '') -> Optional[float]:
    """
    General average hydropathicity (GRAVY) of the translated product, using
    the Kyte and Doolittle (1982) scale.
    """
    return _weighted_property(counters, AMINO_ACIDS.hydropathicity, title)


def aromaticity(counters: UsageCounters, title: str = '') -> Optional[float]:
    """Frequency of aromatic amino acids (Phe, Tyr, Trp) in the translated product."""
    return _weighted_property(counters, AMINO_ACIDS.aromaticity, title)
