# ================================================================================
# Canonical nucleotide sequence representation
#
# A Sequence is an immutable ACGT string tagged with its topology. Circular
# sequences (plasmids) wrap around when a window reaches past either end.
# ================================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from primertune.utils.utils import (
    complement,
    gc_content,
    normalize_bases,
    reverse_complement,
)


class Topology(str, Enum):
    LINEAR = "linear"
    CIRCULAR = "circular"


@dataclass(frozen=True)
class Sequence:
    """
    Nucleotide sequence, 5' to 3', with topology.

    Raw input is upper-cased and validated on construction, so every analyzer
    downstream can assume a well-formed ACGT alphabet.
    """

    bases: str
    topology: Topology = Topology.LINEAR

    def __post_init__(self):
        object.__setattr__(self, "bases", normalize_bases(self.bases))
        object.__setattr__(self, "topology", Topology(self.topology))

    @classmethod
    def circular(cls, bases: str) -> Sequence:
        return cls(bases, Topology.CIRCULAR)

    @property
    def is_circular(self) -> bool:
        return self.topology is Topology.CIRCULAR

    def __len__(self) -> int:
        return len(self.bases)

    def __str__(self) -> str:
        return self.bases

    def complement(self) -> Sequence:
        return Sequence(complement(self.bases), self.topology)

    def reverse_complement(self) -> Sequence:
        return Sequence(reverse_complement(self.bases), self.topology)

    def gc_content(self) -> float:
        return gc_content(self.bases)

    def window(self, start: int, end: int) -> str:
        """
        Return the bases in the half-open range [start, end).

        Circular sequences accept indices outside [0, len) and wrap; the window
        may not be longer than the sequence itself. Linear sequences raise
        IndexError for out-of-range windows.
        """
        n = len(self.bases)
        if end < start:
            raise IndexError(f"Window end ({end}) precedes start ({start})")

        if not self.is_circular:
            if start < 0 or end > n:
                raise IndexError(
                    f"Window [{start}, {end}) outside linear sequence of length {n}"
                )
            return self.bases[start:end]

        if end - start > n:
            raise IndexError(
                f"Window of length {end - start} exceeds circular sequence of length {n}"
            )
        offset = start % n
        length = end - start
        doubled = self.bases + self.bases
        return doubled[offset : offset + length]

    def find(self, query: str) -> list[int]:
        """
        Return every start index of an exact forward-strand match of `query`.
        Matches on circular sequences may span the origin.
        """
        query = normalize_bases(query)
        n = len(self.bases)
        if len(query) > n:
            return []

        haystack = self.bases
        if self.is_circular:
            haystack = self.bases + self.bases[: len(query) - 1]

        hits = []
        pos = haystack.find(query)
        while pos != -1 and pos < n:
            hits.append(pos)
            pos = haystack.find(query, pos + 1)
        return hits

    def rotate(self, offset: int) -> Sequence:
        """Return a circular sequence re-based so that index `offset` becomes 0."""
        if not self.is_circular:
            raise ValueError("Only circular sequences can be rotated")
        offset %= len(self.bases)
        return Sequence(self.bases[offset:] + self.bases[:offset], self.topology)


def same_circular_sequence(a: str, b: str) -> bool:
    """True if `b` is a rotation of `a`."""
    return len(a) == len(b) and b in a + a
