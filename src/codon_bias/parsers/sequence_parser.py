"""
Sequence parser module for loading coding sequences.

Reads FASTA files directly, and extracts CDS features from EMBL/GenBank
annotation files.
"""

import glob
import os
from typing import Dict, Optional
from Bio import SeqIO
from Bio.SeqRecord import SeqRecord
from Bio.SeqFeature import SeqFeature
import logging

logger = logging.getLogger(__name__)

FORMAT_BY_EXTENSION = {
    '.fasta': 'fasta',
    '.fa': 'fasta',
    '.fna': 'fasta',
    '.ffn': 'fasta',
    '.seq': 'fasta',
    '.embl': 'embl',
    '.gb': 'genbank',
    '.gbk': 'genbank',
    '.genbank': 'genbank',
}


def guess_format(file_path: str) -> str:
    """Guess a Bio.SeqIO format name from a file extension (default FASTA)."""
    extension = os.path.splitext(file_path)[1].lower()
    return FORMAT_BY_EXTENSION.get(extension, 'fasta')


def load_sequences(file_path: str, file_format: Optional[str] = None) -> Dict[str, SeqRecord]:
    """
    Load coding sequences from a file, keeping file order.

    FASTA records are used as they are; for EMBL/GenBank files the CDS
    features are extracted.

    Args:
        file_path: Path to the sequence file
        file_format: Bio.SeqIO format name, guessed from the extension if None

    Returns:
        Dictionary mapping sequence IDs to SeqRecord objects
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Sequence file not found: {file_path}")

    file_format = file_format or guess_format(file_path)
    logger.info(f"Reading {file_format} sequences from {file_path}")

    records = {}
    if file_format in ('embl', 'genbank'):
        for record in SeqIO.parse(file_path, file_format):
            records.update(_extract_cds_records(record, file_path))
    else:
        for record in SeqIO.parse(file_path, file_format):
            gene_id = record.id or f"sequence_{len(records) + 1}"
            if gene_id in records:
                gene_id = _unique_id(gene_id, records)
                logger.warning(f"Duplicate sequence ID {record.id}, renamed to {gene_id}")
            records[gene_id] = record

    logger.info(f"Loaded {len(records)} sequences")
    return records


def load_sequence_dir(directory: str) -> Dict[str, SeqRecord]:
    """
    Load every recognised sequence file in a directory.

    Args:
        directory: Directory containing FASTA/EMBL/GenBank files

    Returns:
        Dictionary mapping sequence IDs to SeqRecord objects
    """
    if not os.path.exists(directory):
        raise FileNotFoundError(f"Sequence directory not found: {directory}")

    files_found = []
    for extension in FORMAT_BY_EXTENSION:
        files_found.extend(glob.glob(os.path.join(directory, f"*{extension}")))

    if not files_found:
        logger.warning(f"No sequence files found in {directory}")
        return {}

    records = {}
    for file_path in sorted(files_found):
        for gene_id, record in load_sequences(file_path).items():
            if gene_id in records:
                new_id = _unique_id(gene_id, records)
                logger.warning(f"Duplicate sequence ID {gene_id} in {file_path}, renamed to {new_id}")
                gene_id = new_id
            records[gene_id] = record
    return records


def _unique_id(gene_id: str, records: Dict[str, SeqRecord]) -> str:
    """Number a repeated ID as gene_id_2, gene_id_3, ..."""
    n = 2
    while f"{gene_id}_{n}" in records:
        n += 1
    return f"{gene_id}_{n}"


def _extract_cds_records(record: SeqRecord, file_path: str) -> Dict[str, SeqRecord]:
    cds_records = {}
    for feature in record.features:
        if feature.type != 'CDS':
            continue
        gene_id = _extract_gene_id(feature)
        if not gene_id:
            continue
        cds_records[gene_id] = SeqRecord(
            feature.extract(record.seq),
            id=gene_id,
            description=f"CDS from {os.path.basename(file_path)}"
        )
    return cds_records


def _extract_gene_id(feature: SeqFeature) -> Optional[str]:
    """
    Extract a gene ID from a CDS feature, trying locus_tag, gene and
    protein_id in that order.
    """
    for field in ['locus_tag', 'gene', 'protein_id']:
        if field in feature.qualifiers:
            return feature.qualifiers[field][0]
    return None


def sequence_summary(records: Dict[str, SeqRecord]) -> Dict[str, float]:
    """
    Get basic statistics about a set of sequences.

    Args:
        records: Dictionary of gene_id -> SeqRecord

    Returns:
        Dictionary with sequence statistics
    """
    if not records:
        return {}

    lengths = [len(record.seq) for record in records.values()]

    return {
        'total_sequences': len(records),
        'total_bp': sum(lengths),
        'mean_length': sum(lengths) / len(lengths),
        'min_length': min(lengths),
        'max_length': max(lengths),
        'not_multiple_of_three': sum(1 for length in lengths if length % 3),
    }
