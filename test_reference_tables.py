"""
Tests for built-in and user supplied CAI/Fop/CBI reference tables.
"""

import logging

import numpy as np
import pytest
import yaml

from codon_bias.analysis.genetic_code import CODONS, codon_index
from codon_bias.analysis.reference_tables import (ReferenceWeightTables,
                                                  builtin_cai_table, builtin_optimal_table,
                                                  list_builtin_species, load_builtin_tables)
from codon_bias.analysis.session import initialize_point
from codon_bias.parsers.reference_parser import (ReferenceTableError, load_cai_file,
                                                 parse_cai_values, parse_optimal_codon_digits)


def test_parse_cai_values():
    weights = parse_cai_values(' '.join(['0.5'] * 63 + ['1']))
    assert len(weights) == 65
    assert weights[0] == 0.0
    assert weights[1] == 0.5
    assert weights[64] == 1.0


def test_parse_cai_values_across_lines():
    text = '\n'.join(' '.join(['1.0'] * 8) for _ in range(8))
    assert len(parse_cai_values(text)) == 65


def test_sixty_cai_values_are_fatal():
    with pytest.raises(ReferenceTableError, match='found 60 values'):
        parse_cai_values(' '.join(['0.5'] * 60))


def test_cai_value_out_of_range():
    with pytest.raises(ReferenceTableError, match='out of range'):
        parse_cai_values(' '.join(['0.5'] * 63 + ['1.5']))


def test_cai_value_not_a_number():
    with pytest.raises(ReferenceTableError):
        parse_cai_values(' '.join(['0.5'] * 63 + ['high']))


def test_reference_table_error_is_a_value_error():
    assert issubclass(ReferenceTableError, ValueError)


def test_parse_optimal_codon_digits_ignores_other_characters():
    text = '\n'.join(['3 2 1 2, 3 3 1 2'] * 8)
    classes = parse_optimal_codon_digits(text)

    assert len(classes) == 65
    assert list(classes[1:5]) == [3, 2, 1, 2]


@pytest.mark.parametrize('digit', ['0', '4', '9'])
def test_illegal_optimal_codon_digit(digit):
    with pytest.raises(ReferenceTableError, match='illegal CBI value'):
        parse_optimal_codon_digits('2' * 63 + digit, kind='CBI')


def test_wrong_number_of_optimal_codon_digits():
    with pytest.raises(ReferenceTableError, match='63 digits found'):
        parse_optimal_codon_digits('2' * 63)


def test_missing_reference_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_cai_file(tmp_path / 'missing.txt')


def test_builtin_tables_cover_every_codon():
    data = load_builtin_tables()

    cai = builtin_cai_table('ecoli', data)
    assert cai.weights.shape == (65,)
    assert cai.weights[codon_index('CTG')] == 1.0
    assert (cai.weights[1:] > 0).all()

    for species in ('ecoli', 'scerevisiae'):
        fop = builtin_optimal_table(species, data)
        assert set(fop.classes[1:]) <= {1, 2, 3}


def test_unknown_builtin_species():
    with pytest.raises(ReferenceTableError, match='No built-in CAI table'):
        builtin_cai_table('zebrafish', load_builtin_tables())


def test_list_builtin_species():
    species = list_builtin_species()
    assert 'ecoli' in species['cai']
    assert species['fop'] == ['ecoli', 'scerevisiae']


def test_tables_are_resolved_once(caplog):
    tables = ReferenceWeightTables()

    with caplog.at_level(logging.INFO):
        first = tables.cai
        second = tables.cai

    assert first is second
    assert caplog.text.count('to calculate CAI') == 1


def test_tables_are_read_only():
    tables = ReferenceWeightTables()
    with pytest.raises(ValueError):
        tables.cai.weights[1] = 0.5
    with pytest.raises(ValueError):
        tables.fop.classes[1] = 3


def test_user_file_takes_precedence(tmp_path):
    path = tmp_path / 'cai.txt'
    path.write_text(' '.join(['0.5'] * 64))

    tables = ReferenceWeightTables(cai_file=str(path))
    assert tables.cai.description == 'User supplied CAI adaptation values'
    assert np.all(tables.cai.weights[1:] == 0.5)


def test_fop_and_cbi_files_are_independent(tmp_path):
    fop_path = tmp_path / 'fop.txt'
    fop_path.write_text('3' * 64)
    cbi_path = tmp_path / 'cbi.txt'
    cbi_path.write_text('1' * 64)

    tables = ReferenceWeightTables(fop_file=str(fop_path), cbi_file=str(cbi_path))
    assert (tables.fop.classes[1:] == 3).all()
    assert (tables.cbi.classes[1:] == 1).all()


def test_sixty_value_cai_file_stops_the_session(tmp_path):
    path = tmp_path / 'cai.txt'
    path.write_text(' '.join(['0.5'] * 60))

    session = initialize_point(code=0, cai_file=str(path))
    session.add_sequence('ATGTTCTAA')

    with pytest.raises(ReferenceTableError):
        session.cai()


def test_from_tables_checks_length():
    with pytest.raises(ReferenceTableError):
        ReferenceWeightTables.from_tables(cai_weights=np.ones(64))
    with pytest.raises(ReferenceTableError):
        ReferenceWeightTables.from_tables(fop_classes=np.full(65, 4))


def test_nan_cai_value_is_fatal():
    with pytest.raises(ReferenceTableError, match='out of range'):
        parse_cai_values('nan ' + ' '.join(['1.0'] * 63))


def test_from_tables_rejects_nan_weight():
    weights = np.ones(65)
    weights[codon_index('TTT')] = np.nan
    with pytest.raises(ReferenceTableError):
        ReferenceWeightTables.from_tables(cai_weights=weights)


def test_non_ascii_digits_are_ignored():
    classes = parse_optimal_codon_digits('2' * 64 + '²')

    assert len(classes) == 65
    assert (classes[1:] == 2).all()


def _write_reference_data(path, cai_weight=0.5):
    data = {
        'cai': {'custom': {'description': 'Custom organism',
                           'reference': 'In house',
                           'weights': {codon: cai_weight for codon in CODONS[1:]}}},
        'fop': {'custom': {'description': 'Custom organism',
                           'reference': 'In house',
                           'classes': {codon: 3 for codon in CODONS[1:]}}},
    }
    path.write_text(yaml.dump(data))
    return path


def test_builtin_table_with_nan_weight(tmp_path):
    path = _write_reference_data(tmp_path / 'species.yaml', cai_weight=float('nan'))

    with pytest.raises(ReferenceTableError, match='out of range'):
        builtin_cai_table('custom', load_builtin_tables(str(path)))


def test_reference_data_replaces_builtin_species(tmp_path):
    path = str(_write_reference_data(tmp_path / 'species.yaml'))

    assert list_builtin_species(path) == {'cai': ['custom'], 'fop': ['custom']}

    tables = ReferenceWeightTables(cai_species='custom', fop_species='custom', data_path=path)
    assert tables.cai.description == 'Custom organism'
    assert np.all(tables.cai.weights[1:] == 0.5)
    assert (tables.cbi.classes[1:] == 3).all()

    with pytest.raises(ReferenceTableError, match='No built-in CAI table'):
        ReferenceWeightTables(data_path=path).cai


def test_session_uses_reference_data(tmp_path):
    path = _write_reference_data(tmp_path / 'species.yaml')

    session = initialize_point(code=0, cai_species='custom', fop_species='custom',
                               reference_data=str(path))
    session.add_sequence('TTTTTC')

    assert session.cai() == pytest.approx(0.5)
    assert session.fop() == pytest.approx(1.0)
