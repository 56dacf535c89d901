# ================================================================================
# Tests for the nucleotide sequence primitive
# ================================================================================

import pytest

from primertune.errors import InvalidSequenceError
from primertune.sequence import Sequence, Topology, same_circular_sequence
from primertune.utils.utils import (
    count_3p_gc,
    distance_to_range,
    gc_content,
    map_linear,
    reverse_complement,
)


class TestConstruction:
    def test_lowercase_is_normalised(self):
        seq = Sequence("acgtAC")
        assert seq.bases == "ACGTAC"
        assert seq.topology is Topology.LINEAR

    def test_topology_from_string(self):
        seq = Sequence("ACGT", "circular")
        assert seq.is_circular

    @pytest.mark.parametrize("raw", ["", "ACGN", "AC GT", "ACGU"])
    def test_invalid_input_rejected(self, raw):
        with pytest.raises(InvalidSequenceError):
            Sequence(raw)

    def test_str_and_len(self):
        seq = Sequence("GATTACA")
        assert str(seq) == "GATTACA"
        assert len(seq) == 7


class TestComplement:
    def test_reverse_complement(self):
        assert Sequence("AACGTT").reverse_complement().bases == "AACGTT"
        assert Sequence("ATGC").reverse_complement().bases == "GCAT"

    def test_complement_keeps_topology(self):
        seq = Sequence.circular("ATGC").complement()
        assert seq.bases == "TACG"
        assert seq.is_circular

    def test_reverse_complement_invalid_base(self):
        with pytest.raises(InvalidSequenceError):
            reverse_complement("ACXT")


class TestGCContent:
    def test_all_at_is_zero(self):
        assert Sequence("ATTATAAT").gc_content() == 0.0

    def test_all_gc_is_hundred(self):
        assert Sequence("GCCGGC").gc_content() == 100.0

    def test_mixed(self):
        assert gc_content("ACGT") == 50.0

    def test_count_3p_gc(self):
        assert count_3p_gc("AAAAAGCGCA") == 4
        assert count_3p_gc("GC") == 2


class TestWindow:
    def test_linear_window(self):
        assert Sequence("ACGTACGT").window(2, 5) == "GTA"

    def test_linear_out_of_range(self):
        seq = Sequence("ACGTACGT")
        with pytest.raises(IndexError):
            seq.window(-1, 3)
        with pytest.raises(IndexError):
            seq.window(5, 9)

    def test_end_before_start(self):
        with pytest.raises(IndexError):
            Sequence("ACGT").window(3, 1)

    def test_circular_wraps_both_ways(self):
        seq = Sequence.circular("AACCGGTT")
        assert seq.window(6, 10) == "TTAA"
        assert seq.window(-2, 2) == "TTAA"
        assert seq.window(8, 10) == "AA"

    def test_circular_window_longer_than_sequence(self):
        with pytest.raises(IndexError):
            Sequence.circular("ACGT").window(0, 5)


class TestFind:
    def test_linear_matches(self):
        assert Sequence("ACGTACGT").find("CGT") == [1, 5]

    def test_circular_match_across_origin(self):
        seq = Sequence.circular("GTTTTTAC")
        assert seq.find("ACG") == [6]
        assert Sequence("GTTTTTAC").find("ACG") == []

    def test_query_longer_than_sequence(self):
        assert Sequence("ACG").find("ACGT") == []


class TestRotation:
    def test_rotate(self):
        assert Sequence.circular("AACCGGTT").rotate(2).bases == "CCGGTTAA"

    def test_rotate_linear_raises(self):
        with pytest.raises(ValueError):
            Sequence("ACGT").rotate(1)

    def test_same_circular_sequence(self):
        assert same_circular_sequence("AACCGGTT", "GGTTAACC")
        assert not same_circular_sequence("AACCGGTT", "GGTTAACA")
        assert not same_circular_sequence("AACC", "AACCA")


class TestNumericHelpers:
    def test_distance_to_range(self):
        assert distance_to_range(20, 18, 24) == 0
        assert distance_to_range(15, 18, 24) == 3
        assert distance_to_range(30, 18, 24) == 6

    def test_map_linear(self):
        assert map_linear(5, (0, 10), (0, 1)) == pytest.approx(0.5)
        assert map_linear(3, (3, 3), (7, 9)) == 7
