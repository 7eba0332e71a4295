"""
Shared fixtures for the codon bias test modules.
"""

import os
import sys

import pytest

# Add src directory to path so the tests run without installing the package
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from codon_bias.analysis.codon_usage import UsageCounters, count_sequence
from codon_bias.analysis.genetic_code import build_synonymy, load_genetic_code
from codon_bias.analysis.session import initialize_point


@pytest.fixture
def universal():
    return load_genetic_code(0)


@pytest.fixture
def synonymy(universal):
    return build_synonymy(universal)


@pytest.fixture
def counters():
    return UsageCounters()


@pytest.fixture
def count(universal):
    """Count a sequence under the universal code and return fresh counters."""
    def _count(seq):
        counters = UsageCounters()
        count_sequence(seq, counters, universal)
        return counters
    return _count


@pytest.fixture
def session():
    return initialize_point(code=0)
