# ================================================================================
# Repeat detection in primer sequences
#
# "Avoid runs of four or more of a single base (e.g., ACCCCC), or four or more
# dinucleotide repeats (e.g., ATATATATAT) as they will cause mispriming."
#
# Three kinds are reported: single-nucleotide runs, dinucleotide runs and
# k-mers (length >= 3) that occur more than once anywhere in the primer.
# Overlapping k-mer occurrences count, so a run such as AAAA also yields a
# repeated AAA.
# ================================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MIN_MONO_RUN = 4
MIN_DI_REPEATS = 4
MIN_KMER = 3


class RepeatKind(str, Enum):
    MONO_RUN = "mono_run"
    DI_RUN = "di_run"
    KMER = "kmer"


_KIND_ORDER = {RepeatKind.MONO_RUN: 0, RepeatKind.DI_RUN: 1, RepeatKind.KMER: 2}


@dataclass(frozen=True)
class RepeatOccurrence:
    """
    One detected repeat.

        kind: category of repeat
        start: offset of the first occurrence (0-based, from the 5' end)
        length: length of the run, or of the repeated k-mer
        unit: repeated base, dinucleotide, or k-mer
        positions: every start of the unit; runs hold only their own start
    """

    kind: RepeatKind
    start: int
    length: int
    unit: str
    positions: tuple[int, ...] = ()


def mono_runs(seq: str, min_run: int = MIN_MONO_RUN) -> list[RepeatOccurrence]:
    """Maximal runs of one nucleotide of at least `min_run` bases."""
    result = []
    n = len(seq)
    i = 0
    while i < n:
        j = i + 1
        while j < n and seq[j] == seq[i]:
            j += 1
        if j - i >= min_run:
            result.append(
                RepeatOccurrence(RepeatKind.MONO_RUN, i, j - i, seq[i], (i,))
            )
        i = j
    return result


def di_runs(seq: str, min_repeats: int = MIN_DI_REPEATS) -> list[RepeatOccurrence]:
    """Maximal runs of a two-base unit (distinct bases) repeated `min_repeats` times."""
    result = []
    n = len(seq)
    i = 0
    while i < n - 1:
        unit = seq[i : i + 2]
        if unit[0] == unit[1]:
            i += 1
            continue

        j = i
        while seq[j : j + 2] == unit:
            j += 2

        if (j - i) // 2 >= min_repeats:
            result.append(RepeatOccurrence(RepeatKind.DI_RUN, i, j - i, unit, (i,)))
            # The last base of a run may open the next one
            i = j - 1
        else:
            i += 1
    return result


def _all_positions(seq: str, unit: str) -> tuple[int, ...]:
    positions = []
    pos = seq.find(unit)
    while pos != -1:
        positions.append(pos)
        pos = seq.find(unit, pos + 1)
    return tuple(positions)


def kmer_repeats(seq: str, k_min: int = MIN_KMER) -> list[RepeatOccurrence]:
    """
    Substrings of at least `k_min` bases occurring more than once.

    Every matching pair of positions is extended to its maximal length. A
    repeated unit whose copies all fall inside copies of a longer reported
    unit is folded into it.
    """
    n = len(seq)
    units = set()
    for i in range(n - k_min + 1):
        for j in range(i + 1, n - k_min + 1):
            if seq[i : i + k_min] != seq[j : j + k_min]:
                continue
            # Already covered by the pair one base to the left
            if i > 0 and seq[i - 1] == seq[j - 1]:
                continue
            length = k_min
            while j + length < n and seq[i + length] == seq[j + length]:
                length += 1
            units.add(seq[i : i + length])

    kept: list[tuple[str, tuple[int, ...]]] = []
    for unit in sorted(units, key=lambda u: (-len(u), seq.find(u), u)):
        positions = _all_positions(seq, unit)
        covered = all(
            any(
                p <= pos and pos + len(unit) <= p + len(longer)
                for longer, longer_positions in kept
                for p in longer_positions
            )
            for pos in positions
        )
        if not covered:
            kept.append((unit, positions))

    return [
        RepeatOccurrence(RepeatKind.KMER, positions[0], len(unit), unit, positions)
        for unit, positions in kept
    ]


def find_repeats(sequence) -> list[RepeatOccurrence]:
    """
    Detect mononucleotide runs, dinucleotide runs and repeated k-mers.

    Args:
        sequence: Sequence or upper-case ACGT string, 5'->3'

    Returns:
        Occurrences ordered by start, then kind, then length.
    """
    seq = str(sequence)
    occurrences = mono_runs(seq) + di_runs(seq) + kmer_repeats(seq)
    return sorted(occurrences, key=lambda r: (r.start, _KIND_ORDER[r.kind], r.length))


def count_repeats(sequence) -> int:
    return len(find_repeats(sequence))
