#!/usr/bin/env python3
"""
End to end tests for the codon bias analysis: configuration, sequence
input, result tables and the command line.
"""

import logging

import pytest
import yaml
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqFeature import FeatureLocation, SeqFeature
from Bio.SeqRecord import SeqRecord
from click.testing import CliRunner

from codon_bias.analysis.genetic_code import CODONS
from codon_bias.cli import cli
from codon_bias.parsers.sequence_parser import load_sequences, sequence_summary
from codon_bias.report import ENC_ERROR, TOTALS_TITLE, analyse_records
from codon_bias.analysis.session import initialize_point, session_from_config
from codon_bias.utils.config_loader import (create_example_config, get_default_config,
                                            load_config, merge_configs, validate_config)
from codon_bias.utils.file_utils import load_dataframe

# a short gene using a 2-, 3-, 4- and 6-fold amino acid, and one that is too
# short for Nc
TEST_FASTA = """>gene1 test gene one
ATGTTCTTCTTTATCATCGTTGTAGCTCTGCTGAGCAAAGAATGGTAA
>gene2 test gene two
ATGTGGTAA
>gene3 internal stop
ATGTTCTAGTTCTAA
"""


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI replaces the root handlers; put them back after each test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def fasta_file(tmp_path):
    path = tmp_path / 'genes.fasta'
    path.write_text(TEST_FASTA)
    return path


def test_default_config_is_valid():
    config = get_default_config()
    validate_config(config)
    assert config['genetic_code'] == 0
    assert config['separator'] == '\t'


def test_example_config_round_trip(tmp_path):
    config_path = tmp_path / 'config' / 'codon_bias.yaml'
    create_example_config(str(config_path))

    config = load_config(str(config_path))
    assert config == get_default_config()


def test_partial_config_is_filled_with_defaults(tmp_path):
    config_path = tmp_path / 'config.yaml'
    config_path.write_text(yaml.dump({'genetic_code': 1, 'indices': ['enc']}))

    config = load_config(str(config_path))
    assert config['genetic_code'] == 1
    assert config['indices'] == ['enc']
    assert config['cai_species'] == 'ecoli'


@pytest.mark.parametrize('override', [
    {'genetic_code': 8},
    {'genetic_code': True},
    {'indices': ['cai', 'nope']},
    {'tables': 'rscu'},
    {'separator': '::'},
    {'totals': 'yes'},
])
def test_invalid_config(override):
    with pytest.raises(ValueError):
        merge_configs(get_default_config(), override)


def test_merge_skips_unset_values():
    config = merge_configs(get_default_config(), {'genetic_code': None, 'warn': False})
    assert config['genetic_code'] == 0
    assert config['warn'] is False


def test_load_sequences(fasta_file):
    records = load_sequences(str(fasta_file))

    assert list(records) == ['gene1', 'gene2', 'gene3']
    summary = sequence_summary(records)
    assert summary['total_sequences'] == 3
    assert summary['min_length'] == 9
    assert summary['not_multiple_of_three'] == 0


def test_duplicate_sequence_ids(tmp_path, caplog):
    path = tmp_path / 'dup.fa'
    path.write_text('>a\nATGTAA\n>a\nATGTTTTAA\n>a_2\nATGAAATAA\n')

    with caplog.at_level(logging.WARNING):
        records = load_sequences(str(path))

    assert list(records) == ['a', 'a_2', 'a_2_2']
    assert str(records['a'].seq) == 'ATGTAA'
    assert str(records['a_2'].seq) == 'ATGTTTTAA'
    assert 'Duplicate sequence ID a, renamed to a_2' in caplog.text


def test_duplicate_ids_are_all_counted_in_totals_mode(tmp_path):
    path = tmp_path / 'dup.fa'
    path.write_text('>a\nATGTAA\n>a\nATGTTTTAA\n')

    records = load_sequences(str(path))
    results = analyse_records(records, initialize_point(code=0, totals=True),
                              indices=['l_aa'], tables=['aa_usage'])

    assert results['indices'].loc[0, 'L_aa'] == '3'
    assert results['aa_usage'].loc[0, 'TER'] == 2


def test_load_cds_from_genbank(tmp_path):
    record = SeqRecord(Seq('CCCATGTTCTAACCC'), id='CHR1', name='CHR1',
                       description='test chromosome')
    record.annotations['molecule_type'] = 'DNA'
    record.features.append(SeqFeature(FeatureLocation(3, 12, strand=1), type='CDS',
                                      qualifiers={'locus_tag': ['TEST_001']}))
    path = tmp_path / 'chr1.gb'
    SeqIO.write(record, str(path), 'genbank')

    records = load_sequences(str(path))
    assert list(records) == ['TEST_001']
    assert str(records['TEST_001'].seq) == 'ATGTTCTAA'


def test_missing_sequence_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_sequences(str(tmp_path / 'missing.fasta'))


def test_analyse_records(fasta_file, caplog):
    records = load_sequences(str(fasta_file))
    session = session_from_config(get_default_config())

    with caplog.at_level(logging.WARNING):
        results = analyse_records(records, session,
                                  indices=['cai', 'enc', 'gc3s', 'l_aa'],
                                  tables=['codon_usage', 'raau', 'dinucleotides'])

    index_table = results['indices']
    assert list(index_table['title']) == ['gene1', 'gene2', 'gene3']
    assert list(index_table.columns) == ['title', 'CAI', 'Nc', 'GC3s', 'L_aa']
    assert index_table.loc[1, 'Nc'] == ENC_ERROR
    assert index_table.loc[1, 'GC3s'] == ''
    assert index_table.loc[0, 'L_aa'] == '15'

    assert len(results['codon_usage']) == 64 * 3
    assert len(results['raau']) == 3
    assert len(results['dinucleotides']) == 4 * 3
    assert 'internal stop codon' in caplog.text
    assert '1 of 3 sequences had internal stop codons' in caplog.text


def test_analyse_records_in_totals_mode(fasta_file):
    records = load_sequences(str(fasta_file))
    session = initialize_point(code=0, totals=True)

    results = analyse_records(records, session, indices=['l_aa'], tables=['aa_usage'])

    assert list(results['indices']['title']) == [TOTALS_TITLE]
    assert results['indices'].loc[0, 'L_aa'] == '20'
    assert results['aa_usage'].loc[0, 'TER'] == 4


def test_cli_run(fasta_file, tmp_path):
    outdir = tmp_path / 'results'
    runner = CliRunner()
    result = runner.invoke(cli, ['run', str(fasta_file), '--outdir', str(outdir),
                                 '--table', 'codon_usage', '--table', 'rscu', '-q'])

    assert result.exit_code == 0, result.output
    indices = load_dataframe(str(outdir / 'genes_indices.tsv'))
    assert list(indices.columns) == ['title', 'CAI', 'Fop', 'CBI', 'Nc', 'GC3s', 'GC',
                                     'L_sym', 'L_aa']
    assert len(indices) == 3
    assert (outdir / 'genes_codon_usage.tsv').exists()
    assert (outdir / 'genes_rscu.tsv').exists()
    assert (outdir / 'codon_bias_analysis.log').exists()


def test_cli_run_with_config_and_separator(fasta_file, tmp_path):
    config_path = tmp_path / 'config.yaml'
    config_path.write_text(yaml.dump({'indices': ['fop', 'hydropathy'],
                                      'tables': [],
                                      'separator': ',',
                                      'output_dir': 'out'}))
    runner = CliRunner()
    result = runner.invoke(cli, ['run', str(fasta_file), '--config', str(config_path), '-q'])

    assert result.exit_code == 0, result.output
    indices = load_dataframe(str(tmp_path / 'out' / 'genes_indices.csv'))
    assert list(indices.columns) == ['title', 'Fop', 'Gravy']


def test_cli_bad_cai_file_exits_99(fasta_file, tmp_path):
    cai_path = tmp_path / 'cai.txt'
    cai_path.write_text(' '.join(['0.5'] * 60))
    outdir = tmp_path / 'results'

    runner = CliRunner()
    result = runner.invoke(cli, ['run', str(fasta_file), '--cai-file', str(cai_path),
                                 '--outdir', str(outdir), '-q'])

    assert result.exit_code == 99
    assert not (outdir / 'genes_indices.tsv').exists()


def test_cli_create_and_validate_config(tmp_path):
    config_path = tmp_path / 'codon_bias.yaml'
    runner = CliRunner()

    result = runner.invoke(cli, ['create-config', '--output', str(config_path)])
    assert result.exit_code == 0
    assert config_path.exists()

    result = runner.invoke(cli, ['validate-config', str(config_path)])
    assert result.exit_code == 0
    assert 'Configuration is valid' in result.output


def test_cli_validate_config_reports_missing_files(tmp_path):
    config_path = tmp_path / 'config.yaml'
    config_path.write_text(yaml.dump({'cai_file': 'nowhere.txt'}))

    result = CliRunner().invoke(cli, ['validate-config', str(config_path)])
    assert result.exit_code == 1
    assert 'Missing file paths' in result.output


def test_cli_show_codes():
    runner = CliRunner()

    result = runner.invoke(cli, ['show-codes'])
    assert result.exit_code == 0
    assert 'Vertebrate Mitochondrial code' in result.output
    assert 'scerevisiae' in result.output

    result = runner.invoke(cli, ['show-codes', '--code', '1'])
    assert result.exit_code == 0
    assert 'AGA' in result.output


def test_cli_run_with_reference_data(fasta_file, tmp_path):
    data_path = tmp_path / 'species.yaml'
    data_path.write_text(yaml.dump({
        'cai': {'custom': {'description': 'Custom organism', 'reference': 'In house',
                           'weights': {codon: 0.5 for codon in CODONS[1:]}}},
        'fop': {'custom': {'description': 'Custom organism', 'reference': 'In house',
                           'classes': {codon: 3 for codon in CODONS[1:]}}},
    }))
    outdir = tmp_path / 'results'

    result = CliRunner().invoke(cli, ['run', str(fasta_file), '--reference-data', str(data_path),
                                      '--cai-species', 'custom', '--fop-species', 'custom',
                                      '--index', 'cai', '--index', 'fop',
                                      '--outdir', str(outdir), '-q'])

    assert result.exit_code == 0, result.output
    indices = load_dataframe(str(outdir / 'genes_indices.tsv'))
    assert indices.loc[0, 'CAI'] == pytest.approx(0.5)
    assert indices.loc[0, 'Fop'] == pytest.approx(1.0)
