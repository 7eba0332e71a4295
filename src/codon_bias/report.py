"""
Result tables for codon usage analyses.

Turns session results into pandas DataFrames with values formatted at the
precision each index is reported with.
"""

from typing import Dict, Iterable, List, Optional
import logging

import pandas as pd
from Bio.SeqRecord import SeqRecord

from .analysis.genetic_code import AMINO_ACIDS, CODONS
from .analysis.indices import (DINUCLEOTIDES, GC_FIELDS, GcMode,
                               SILENT_BASE_LABELS)
from .analysis.session import AnalysisSession

logger = logging.getLogger(__name__)

ENC_ERROR = '*****'
TOTALS_TITLE = 'Totals'

INDEX_COLUMNS = {
    'cai': 'CAI',
    'fop': 'Fop',
    'cbi': 'CBI',
    'enc': 'Nc',
    'gc3s': 'GC3s',
    'gc': 'GC',
    'l_sym': 'L_sym',
    'l_aa': 'L_aa',
    'hydropathy': 'Gravy',
    'aromaticity': 'Aromo',
}

# decimal places; None for integer counts
INDEX_PRECISION = {
    'cai': 3,
    'fop': 3,
    'cbi': 3,
    'enc': 2,
    'gc3s': 3,
    'gc': 3,
    'l_sym': None,
    'l_aa': None,
    'hydropathy': 6,
    'aromaticity': 6,
}


def format_value(value, decimals: Optional[int]) -> str:
    """Format a number at fixed precision; None becomes an empty field."""
    if value is None:
        return ''
    if decimals is None:
        return str(int(value))
    return f"{value:.{decimals}f}"


def compute_indices(session: AnalysisSession, selected: Iterable[str], title: str = '') -> Dict:
    """
    Compute the selected per-sequence indices from the session counters.

    Returns:
        Dictionary index name -> value (None where no value could be given)
    """
    values = {}
    for name in selected:
        if name == 'cai':
            values[name] = session.cai()
        elif name == 'fop':
            values[name] = session.fop()
        elif name == 'cbi':
            values[name] = session.cbi()
        elif name == 'enc':
            values[name] = session.enc(title)
        elif name == 'gc3s':
            values[name] = session.gc_content(GcMode.GC3S, title)
        elif name == 'gc':
            values[name] = session.gc_content(GcMode.GC, title)
        elif name == 'l_sym':
            values[name] = session.gc_content(GcMode.L_SYM, title)
        elif name == 'l_aa':
            values[name] = session.gc_content(GcMode.L_AA, title)
        elif name == 'hydropathy':
            values[name] = session.hydropathicity(title)
        elif name == 'aromaticity':
            values[name] = session.aromaticity(title)
        else:
            raise ValueError(f"Unknown index: {name}")
    return values


def format_indices(values: Dict) -> Dict[str, str]:
    """Format computed indices under their column names."""
    row = {}
    for name, value in values.items():
        if name == 'enc' and value is None:
            row[INDEX_COLUMNS[name]] = ENC_ERROR
        else:
            row[INDEX_COLUMNS[name]] = format_value(value, INDEX_PRECISION[name])
    return row


def codon_usage_rows(session: AnalysisSession, title: str) -> List[Dict]:
    """Codon, amino acid, count and RSCU for all 64 codons."""
    rscu = session.rscu()
    ncod = session.counters.ncod
    rows = []
    for x in range(1, 65):
        rows.append({
            'title': title,
            'AA': AMINO_ACIDS.three_letter[session.code.ca[x]],
            'codon': CODONS[x],
            'count': int(ncod[x]),
            'RSCU': format_value(rscu[CODONS[x]] if ncod[x] else 0.0, 2),
        })
    return rows


def rscu_row(session: AnalysisSession, title: str) -> Dict[str, str]:
    row = {'title': title}
    row.update({codon: format_value(value, 3) for codon, value in session.rscu().items()})
    return row


def raau_row(session: AnalysisSession, title: str) -> Dict[str, str]:
    row = {'Gene_name': title}
    row.update({aa: format_value(value, 4) for aa, value in session.raau().items()})
    return row


def aa_usage_row(session: AnalysisSession, title: str) -> Dict:
    row = {'Gene_name': title}
    row.update(session.aa_usage())
    return row


def silent_base_row(session: AnalysisSession, title: str) -> Dict[str, str]:
    row = {'title': title}
    values = session.silent_base_composition()
    row.update({label: format_value(values[label], 4) for label in SILENT_BASE_LABELS})
    return row


def dinucleotide_rows(session: AnalysisSession, title: str) -> List[Dict[str, str]]:
    rows = []
    for frame, frequencies in session.dinucleotide_frequencies().items():
        row = {'title': title, 'frame': frame}
        row.update({dinuc: format_value(value, 3)
                    for dinuc, value in zip(DINUCLEOTIDES, frequencies)})
        rows.append(row)
    return rows


def base_composition_row(session: AnalysisSession, title: str) -> Optional[Dict[str, str]]:
    values = session.gc_content(GcMode.FULL, title)
    if values is None:
        return None
    row = {'Gene_description': title}
    for field in GC_FIELDS:
        decimals = None if field in ('Len_aa', 'Len_sym') else 3
        row[field] = format_value(values[field], decimals)
    return row


def _collect(session: AnalysisSession,
             title: str,
             indices: List[str],
             tables: List[str],
             results: Dict[str, List]) -> None:
    results['indices'].append({'title': title, **format_indices(compute_indices(session, indices, title))})

    for table in tables:
        if table == 'codon_usage':
            results[table].extend(codon_usage_rows(session, title))
        elif table == 'rscu':
            results[table].append(rscu_row(session, title))
        elif table == 'raau':
            results[table].append(raau_row(session, title))
        elif table == 'aa_usage':
            results[table].append(aa_usage_row(session, title))
        elif table == 'silent_base':
            results[table].append(silent_base_row(session, title))
        elif table == 'dinucleotides':
            results[table].extend(dinucleotide_rows(session, title))
        elif table == 'base_composition':
            row = base_composition_row(session, title)
            if row is not None:
                results[table].append(row)
        else:
            raise ValueError(f"Unknown table: {table}")


def analyse_records(records: Dict[str, SeqRecord],
                    session: AnalysisSession,
                    indices: List[str],
                    tables: Optional[List[str]] = None) -> Dict[str, pd.DataFrame]:
    """
    Count every sequence and build the result tables.

    In totals mode the sequences are concatenated and a single row (titled
    'Totals') is reported for the whole set.

    Args:
        records: Dictionary of gene_id -> SeqRecord
        session: Analysis session to count with
        indices: Names from INDEX_COLUMNS for the index table
        tables: Additional tables to build

    Returns:
        Dictionary table name -> DataFrame; always includes 'indices'
    """
    tables = list(tables or [])
    results: Dict[str, List] = {'indices': []}
    for table in tables:
        results[table] = []

    logger.info(f"Analysing {len(records)} sequences "
                f"({'concatenated' if session.totals else 'individually'})")

    for gene_id, record in records.items():
        session.reporter.next_sequence()
        session.add_sequence(str(record.seq))

        if session.totals:
            continue

        session.check(gene_id)
        logger.debug(f"{gene_id}: {session.codon_total()} translatable codons")
        _collect(session, gene_id, indices, tables, results)
        session.clean_up()

    if session.totals and records:
        session.check(TOTALS_TITLE)
        _collect(session, TOTALS_TITLE, indices, tables, results)
        session.clean_up()

    summary = session.reporter.summary()
    if summary:
        logger.warning(summary)

    return {name: pd.DataFrame(rows) for name, rows in results.items()}


def codon_table(session: AnalysisSession) -> pd.DataFrame:
    """The selected genetic code as a table of codon, amino acid and family size."""
    rows = []
    for x in range(1, 65):
        aa = session.code.ca[x]
        rows.append({
            'index': x,
            'codon': CODONS[x],
            'AA': AMINO_ACIDS.three_letter[aa],
            'synonyms': int(session.synonymy.ds[x]),
        })
    return pd.DataFrame(rows)
