"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from primertune.config import IonConcentrations, ScoringParameters
from primertune.sequence import Sequence, Topology


@pytest.fixture(scope="session")
def template_bases() -> str:
    """Start of a GFP coding sequence, 205 nt."""
    return (
        "ATGGCTAGCAAGGAGGAACTGTTCACCGGTGTGGTCCCAATCCTGGTCGAGCTGGACGGCGACGTAAACGGCC"
        "ACAAGTTCAGCGTGTCCGGCGAGGGCGAGGGCGATGCCACCTACGGCAAGCTGACCCTGAAGTTCATCTGCA"
        "CCACCGGCAAGCTGCCCGTGCCCTGGCCCACCCTCGTGACCACCCTGACCTACGGCGTGC"
    )


@pytest.fixture(scope="session")
def template(template_bases) -> Sequence:
    return Sequence(template_bases)


@pytest.fixture(scope="session")
def circular_template(template_bases) -> Sequence:
    return Sequence(template_bases, Topology.CIRCULAR)


@pytest.fixture
def ions() -> IonConcentrations:
    return IonConcentrations()


@pytest.fixture
def params() -> ScoringParameters:
    return ScoringParameters()
