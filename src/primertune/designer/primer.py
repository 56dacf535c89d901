# ================================================================================
# Primer descriptors and their resolution against a template
#
# A primer either covers an explicit range of a reference sequence
# (FixedRange) or carries its own bases and is located on whichever sequence
# it is queried against (FloatingMatch). Every analyzer works on the
# ResolvedPrimer returned by Primer.resolve, whatever the variant.
# ================================================================================

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from primertune.errors import (
    AnchorOutOfRangeError,
    InsufficientFlankingSequenceError,
    InvalidPrimerError,
)
from primertune.sequence import Sequence
from primertune.utils.utils import normalize_bases, reverse_complement


class Direction(str, Enum):
    FORWARD = "forward"
    REVERSE = "reverse"


@dataclass(frozen=True)
class FixedRange:
    """Half-open range [start, end) on the reference, forward-strand coordinates."""

    start: int
    end: int

    def __post_init__(self):
        if self.end <= self.start:
            raise InvalidPrimerError(
                f"Range end ({self.end}) must be greater than start ({self.start})"
            )


@dataclass(frozen=True)
class FloatingMatch:
    """Primer bases (5'->3') resolved against the active sequence on demand."""

    bases: str

    def __post_init__(self):
        object.__setattr__(self, "bases", normalize_bases(self.bases))


@dataclass(frozen=True)
class EndTuning:
    """
    Tunability of one primer end.

        tunable: whether the boundary may move outward over flanking sequence
        max_extension: bases available beyond the nominal boundary
        ideal_length: preferred length range for this end's side of a junction
            primer; None uses the scoring defaults
    """

    tunable: bool = False
    max_extension: int = 0
    ideal_length: tuple[int, int] | None = None

    def __post_init__(self):
        if self.max_extension < 0:
            raise InvalidPrimerError("max_extension must be non-negative")
        if self.ideal_length is not None and self.ideal_length[0] > self.ideal_length[1]:
            raise InvalidPrimerError(f"Invalid ideal length range: {self.ideal_length}")

    @property
    def active(self) -> bool:
        """A tunable end with no room to extend is treated as fixed."""
        return self.tunable and self.max_extension > 0

    @classmethod
    def up_to(cls, max_extension: int, ideal_length=None) -> EndTuning:
        return cls(tunable=True, max_extension=max_extension, ideal_length=ideal_length)


@dataclass(frozen=True)
class Primer:
    """
    Primer descriptor.

    For a FixedRange match the anchor is a reference index; for a FloatingMatch
    it is an offset into the primer bases counted from the 5' end. Either way
    it must fall strictly inside the primer. A primer whose two ends can both
    extend is a junction (glue) primer and must carry an anchor.
    """

    match: FixedRange | FloatingMatch
    name: str = ""
    direction: Direction = Direction.FORWARD
    five_prime: EndTuning = field(default_factory=EndTuning)
    three_prime: EndTuning = field(default_factory=EndTuning)
    min_length: int = 10
    max_length: int = 60
    anchor: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "direction", Direction(self.direction))
        if self.min_length < 1:
            raise InvalidPrimerError("min_length must be at least 1")
        if self.five_prime.active and self.three_prime.active and self.anchor is None:
            raise AnchorOutOfRangeError(
                "A primer with both ends tunable needs an anchor between them"
            )
        # A tuned junction primer may have used up an end, so it keeps its anchor
        if self.anchor is not None and not (self.five_prime.tunable and self.three_prime.tunable):
            raise AnchorOutOfRangeError(
                "An anchor is only meaningful when both ends are tunable"
            )

    @property
    def is_floating(self) -> bool:
        return isinstance(self.match, FloatingMatch)

    @property
    def is_junction(self) -> bool:
        return self.anchor is not None

    def resolve(self, sequence: Sequence) -> ResolvedPrimer:
        """Locate the primer on `sequence` and return its resolved range."""
        if isinstance(self.match, FixedRange):
            return self._resolve_fixed(sequence)
        return self._resolve_floating(sequence)

    def _resolve_fixed(self, sequence: Sequence) -> ResolvedPrimer:
        start, end = self.match.start, self.match.end
        try:
            window = sequence.window(start, end)
        except IndexError as e:
            raise InsufficientFlankingSequenceError(str(e)) from e

        bases = window if self.direction is Direction.FORWARD else reverse_complement(window)

        anchor = self.anchor
        if anchor is not None and not start < anchor < end:
            raise AnchorOutOfRangeError(
                f"Anchor {anchor} must lie strictly between {start} and {end}"
            )
        return ResolvedPrimer(start, end, self.direction, bases, anchor)

    def _resolve_floating(self, sequence: Sequence) -> ResolvedPrimer:
        bases = self.match.bases
        length = len(bases)
        if length > len(sequence):
            raise InsufficientFlankingSequenceError(
                f"Primer of length {length} is longer than the sequence ({len(sequence)})"
            )

        start, direction = best_match(bases, sequence, self.direction)
        end = start + length

        anchor = None
        if self.anchor is not None:
            if not 0 < self.anchor < length:
                raise AnchorOutOfRangeError(
                    f"Anchor offset {self.anchor} must lie strictly inside a primer of length {length}"
                )
            if direction is Direction.FORWARD:
                anchor = start + self.anchor
            else:
                anchor = end - self.anchor
        return ResolvedPrimer(start, end, direction, bases, anchor)

    def with_range(
        self,
        resolved: ResolvedPrimer,
        extension_5p: int,
        extension_3p: int,
        bases: str,
    ) -> Primer:
        """
        Return a copy moved by the given extensions, with the remaining
        extension budget of each end reduced by what was used.
        """
        five_prime = self.five_prime
        three_prime = self.three_prime
        if extension_5p:
            five_prime = replace(
                five_prime, max_extension=five_prime.max_extension - extension_5p
            )
        if extension_3p:
            three_prime = replace(
                three_prime, max_extension=three_prime.max_extension - extension_3p
            )

        if isinstance(self.match, FixedRange):
            start, end = resolved.extended_bounds(extension_5p, extension_3p)
            return replace(
                self,
                match=FixedRange(start, end),
                five_prime=five_prime,
                three_prime=three_prime,
            )

        anchor = self.anchor + extension_5p if self.anchor is not None else None
        return replace(
            self,
            match=FloatingMatch(bases),
            five_prime=five_prime,
            three_prime=three_prime,
            anchor=anchor,
        )


@dataclass(frozen=True)
class ResolvedPrimer:
    """
    A primer located on a template.

        start, end: half-open forward-strand range; may reach past either end
            of a circular template
        direction: strand the primer sequence reads along
        bases: primer sequence, 5'->3'
        anchor: junction index in template coordinates, or None
    """

    start: int
    end: int
    direction: Direction
    bases: str
    anchor: int | None = None

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def five_prime_side(self) -> int:
        """Bases from the 5' end to the anchor."""
        if self.direction is Direction.FORWARD:
            return self.anchor - self.start
        return self.end - self.anchor

    @property
    def three_prime_side(self) -> int:
        """Bases from the anchor to the 3' end."""
        return self.length - self.five_prime_side

    def available_flank(self, sequence: Sequence) -> tuple[int, int]:
        """Bases available beyond the 5' and 3' ends on `sequence`."""
        if sequence.is_circular:
            room = len(sequence) - self.length
            return room, room

        upstream = self.start
        downstream = len(sequence) - self.end
        if self.direction is Direction.FORWARD:
            return upstream, downstream
        return downstream, upstream

    def extended_bounds(self, extension_5p: int, extension_3p: int) -> tuple[int, int]:
        if self.direction is Direction.FORWARD:
            return self.start - extension_5p, self.end + extension_3p
        return self.start - extension_3p, self.end + extension_5p

    def extended_bases(
        self, sequence: Sequence, extension_5p: int, extension_3p: int
    ) -> str:
        """Primer bases with the requested flanks of `sequence` added to each end."""
        if self.direction is Direction.FORWARD:
            flank_5p = sequence.window(self.start - extension_5p, self.start)
            flank_3p = sequence.window(self.end, self.end + extension_3p)
            return flank_5p + self.bases + flank_3p

        flank_5p = reverse_complement(sequence.window(self.end, self.end + extension_5p))
        flank_3p = reverse_complement(sequence.window(self.start - extension_3p, self.start))
        return flank_5p + self.bases + flank_3p


def best_match(bases: str, sequence: Sequence, preferred: Direction) -> tuple:
    """
    Find where `bases` binds best on `sequence`.

    Exact matches win; otherwise the ungapped placement with the most identical
    bases. Ties go to the preferred strand, then the lowest start.

    Returns:
        (start, direction) in forward-strand coordinates
    """
    length = len(bases)
    strands = [preferred] + [d for d in Direction if d is not preferred]
    targets = {
        Direction.FORWARD: bases,
        Direction.REVERSE: reverse_complement(bases),
    }

    for direction in strands:
        hits = sequence.find(targets[direction])
        if hits:
            return hits[0], direction

    n = len(sequence)
    last_start = n if sequence.is_circular else n - length + 1
    best = None
    for rank, direction in enumerate(strands):
        target = targets[direction]
        for start in range(last_start):
            window = sequence.window(start, start + length)
            identity = sum(1 for a, b in zip(window, target) if a == b)
            key = (identity, -rank, -start)
            if best is None or key > best[0]:
                best = (key, start, direction)
    return best[1], best[2]
