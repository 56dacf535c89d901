# ================================================================================
# SLIC / FastCloning primer design
#
# The insert is amplified with primers whose 5' tails copy the vector on
# either side of the insertion point; the vector is amplified outward from
# the insertion point. The two linear amplicons share homologous ends and
# recombine (SLIC) or are joined in vivo (FastCloning) into the circular
# product
#
#     vector[:p] + insert + vector[p:]
#
# All four primers are laid out on that predicted product, which is circular,
# so every range can be tuned across the origin. The insert primers are
# junction primers anchored on the two seams: the 5' side is the homology arm
# and the 3' side binds the insert.
# ================================================================================

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from primertune.config import (
    CloningParameters,
    IonConcentrations,
    ScoringParameters,
    TuningParameters,
)
from primertune.designer.primer import Direction, EndTuning, FixedRange, Primer
from primertune.errors import (
    AnchorOutOfRangeError,
    InsufficientFlankingSequenceError,
    InvalidSequenceError,
)
from primertune.selector.tuner import TuningResult, tune
from primertune.sequence import Sequence, Topology, same_circular_sequence
from primertune.utils.utils import reverse_complement


@dataclass(frozen=True)
class CloningPrimers:
    """Tuned primers for one SLIC/FastCloning insertion and the expected product."""

    vector_forward: TuningResult
    vector_reverse: TuningResult
    insert_forward: TuningResult
    insert_reverse: TuningResult
    predicted_product: Sequence

    def primers(self) -> dict[str, TuningResult]:
        return {
            "vector_forward": self.vector_forward,
            "vector_reverse": self.vector_reverse,
            "insert_forward": self.insert_forward,
            "insert_reverse": self.insert_reverse,
        }

    def simulate_assembly(
        self, vector: Sequence, insert: Sequence, min_anneal: int = 12
    ) -> Sequence:
        """
        Amplify both templates with the emitted primers, join the amplicons
        through their shared ends and return the circular result in the
        coordinate frame of the predicted product.
        """
        insert_template = Sequence(insert.bases, Topology.LINEAR)
        insert_amplicon = simulate_pcr(
            insert_template,
            self.insert_forward.resolved.bases,
            self.insert_reverse.resolved.bases,
            min_anneal,
        )
        vector_amplicon = simulate_pcr(
            vector,
            self.vector_forward.resolved.bases,
            self.vector_reverse.resolved.bases,
            min_anneal,
        )
        assembled = assemble_overlaps([insert_amplicon, vector_amplicon])
        return match_rotation(assembled, self.predicted_product)

    def verify(self, vector: Sequence, insert: Sequence, min_anneal: int = 12) -> bool:
        """True if the simulated assembly reproduces the predicted product."""
        try:
            assembled = self.simulate_assembly(vector, insert, min_anneal)
        except ValueError as e:
            logger.warning(f"Assembly simulation failed: {e}")
            return False
        return assembled.bases == self.predicted_product.bases


# ================================================================================
# Primer layout
# ================================================================================


def _vector_primer(
    name: str,
    direction: Direction,
    seam: int,
    vector_length: int,
    cloning: CloningParameters,
) -> Primer:
    """Primer with its 5' end fixed on a seam, binding the vector outward."""
    binding_max = min(cloning.binding_max, vector_length)
    binding = cloning.binding_min
    if direction is Direction.FORWARD:
        match = FixedRange(seam, seam + binding)
    else:
        match = FixedRange(seam - binding, seam)

    return Primer(
        match=match,
        name=name,
        direction=direction,
        three_prime=EndTuning.up_to(binding_max - binding),
        min_length=binding,
        max_length=min(binding_max, cloning.primer_max_length),
    )


def _insert_primer(
    name: str,
    direction: Direction,
    seam: int,
    vector_length: int,
    insert_length: int,
    overlap_target: int,
    cloning: CloningParameters,
) -> Primer:
    """Junction primer: vector homology arm on the 5' side, insert binding on the 3' side."""
    arm = cloning.overlap_min
    binding = cloning.binding_min
    arm_extension = min(cloning.overlap_max, vector_length) - arm
    binding_extension = min(cloning.binding_max, insert_length) - binding

    if direction is Direction.FORWARD:
        match = FixedRange(seam - arm, seam + binding)
    else:
        match = FixedRange(seam - binding, seam + arm)

    return Primer(
        match=match,
        name=name,
        direction=direction,
        five_prime=EndTuning.up_to(
            arm_extension, ideal_length=(overlap_target, overlap_target)
        ),
        three_prime=EndTuning.up_to(
            binding_extension, ideal_length=(cloning.binding_min, cloning.binding_max)
        ),
        min_length=arm + binding,
        max_length=cloning.primer_max_length,
        anchor=seam,
    )


def predicted_product(vector: Sequence, insert: Sequence, insertion_point: int) -> Sequence:
    """Circular product of inserting `insert` into `vector` at `insertion_point`."""
    bases = vector.bases[:insertion_point] + insert.bases + vector.bases[insertion_point:]
    return Sequence(bases, Topology.CIRCULAR)


def generate_pair(
    vector: Sequence,
    insert: Sequence,
    insertion_point: int,
    overlap_target: int,
    ions: IonConcentrations,
    params: ScoringParameters,
    cloning: CloningParameters | None = None,
    tuning: TuningParameters | None = None,
) -> CloningPrimers:
    """
    Design vector and insert primers for SLIC/FastCloning.

    Args:
        vector: circular vector sequence
        insert: sequence to insert
        insertion_point: vector index the insert goes in front of
            (0 <= insertion_point <= len(vector))
        overlap_target: preferred homology arm length (nt)
        ions: reaction conditions for the Tm model
        params: scoring targets and weights
        cloning: arm and binding length ranges
        tuning: search caps and worker count

    Returns:
        CloningPrimers with all four primers tuned on the predicted product

    Raises:
        InvalidSequenceError: If the vector is not circular
        AnchorOutOfRangeError: If the insertion point is outside the vector
        InsufficientFlankingSequenceError: If the insert or vector is too short
    """
    cloning = cloning or CloningParameters()

    if not vector.is_circular:
        raise InvalidSequenceError("The vector must be a circular sequence")
    if not 0 <= insertion_point <= len(vector):
        raise AnchorOutOfRangeError(
            f"Insertion point {insertion_point} is outside the vector (0..{len(vector)})"
        )
    if len(insert) < cloning.binding_min:
        raise InsufficientFlankingSequenceError(
            f"Insert of {len(insert)} nt is shorter than the minimum binding length "
            f"of {cloning.binding_min} nt"
        )
    if len(vector) < max(cloning.binding_min, cloning.overlap_min):
        raise InsufficientFlankingSequenceError(
            f"Vector of {len(vector)} nt cannot hold a {cloning.binding_min} nt binding "
            f"region and a {cloning.overlap_min} nt homology arm"
        )
    if not cloning.overlap_min <= overlap_target <= cloning.overlap_max:
        logger.warning(
            f"Overlap target {overlap_target} lies outside "
            f"[{cloning.overlap_min}, {cloning.overlap_max}]; arms will be pulled to the nearest bound"
        )

    product = predicted_product(vector, insert, insertion_point)
    seam_5p = insertion_point
    seam_3p = insertion_point + len(insert)
    logger.info(
        f"Designing SLIC primers: vector {len(vector)} nt, insert {len(insert)} nt, "
        f"insertion point {insertion_point}, product {len(product)} nt"
    )

    layout = {
        "vector_forward": _vector_primer(
            "vector_forward", Direction.FORWARD, seam_3p % len(product), len(vector), cloning
        ),
        "vector_reverse": _vector_primer(
            "vector_reverse", Direction.REVERSE, seam_5p, len(vector), cloning
        ),
        "insert_forward": _insert_primer(
            "insert_forward",
            Direction.FORWARD,
            seam_5p,
            len(vector),
            len(insert),
            overlap_target,
            cloning,
        ),
        "insert_reverse": _insert_primer(
            "insert_reverse",
            Direction.REVERSE,
            seam_3p,
            len(vector),
            len(insert),
            overlap_target,
            cloning,
        ),
    }

    tuned = {
        name: tune(primer, product, ions, params, tuning)
        for name, primer in layout.items()
    }
    return CloningPrimers(predicted_product=product, **tuned)


def amplification_primers(
    sequence: Sequence,
    ions: IonConcentrations,
    params: ScoringParameters,
    cloning: CloningParameters | None = None,
    tuning: TuningParameters | None = None,
) -> tuple[TuningResult, TuningResult]:
    """
    Forward and reverse primers amplifying a whole linear sequence, 5' ends on
    the sequence termini and 3' ends tuned inward.
    """
    cloning = cloning or CloningParameters()
    if sequence.is_circular:
        raise InvalidSequenceError("Whole-sequence amplification needs a linear sequence")
    if len(sequence) < cloning.binding_min:
        raise InsufficientFlankingSequenceError(
            f"Sequence of {len(sequence)} nt is shorter than the minimum binding length "
            f"of {cloning.binding_min} nt"
        )

    forward = _vector_primer("forward", Direction.FORWARD, 0, len(sequence), cloning)
    reverse = _vector_primer("reverse", Direction.REVERSE, len(sequence), len(sequence), cloning)
    return (
        tune(forward, sequence, ions, params, tuning),
        tune(reverse, sequence, ions, params, tuning),
    )


# ================================================================================
# In-silico amplification and assembly
# ================================================================================


def _anneal(template: Sequence, site: str, min_anneal: int, from_end: bool) -> tuple[int, int]:
    """
    Longest exact match on `template` of a suffix (from_end) or prefix of
    `site`, at least `min_anneal` long.

    Returns:
        (template start, matched length)
    """
    for k in range(len(site), min_anneal - 1, -1):
        part = site[-k:] if from_end else site[:k]
        hits = template.find(part)
        if hits:
            return hits[0], k
    raise ValueError(f"No binding site of at least {min_anneal} nt for primer {site}")


def simulate_pcr(
    template: Sequence, forward: str, reverse: str, min_anneal: int = 12
) -> str:
    """
    Predict the amplicon of a primer pair on a template.

    Each primer anneals through its longest 3' region that matches the
    template exactly; 5' tails that do not match are carried into the product.

    Args:
        template: linear or circular template
        forward: forward primer, 5'->3'
        reverse: reverse primer, 5'->3'
        min_anneal: shortest 3' match accepted

    Returns:
        Linear amplicon, forward strand

    Raises:
        ValueError: If a primer does not anneal, or the primers face away from
            each other on a linear template
    """
    forward_start, forward_k = _anneal(template, forward, min_anneal, from_end=True)

    # The reverse primer's 3' end is the 5' end of its reverse complement
    reverse_site = reverse_complement(reverse)
    reverse_start, reverse_k = _anneal(template, reverse_site, min_anneal, from_end=False)
    reverse_end = reverse_start + reverse_k

    if reverse_end <= forward_start:
        if not template.is_circular:
            raise ValueError("Primers do not face each other on the linear template")
        reverse_end += len(template)

    body = template.window(forward_start, reverse_end)
    return forward[: len(forward) - forward_k] + body + reverse_site[reverse_k:]


def terminal_overlap(left: str, right: str, min_overlap: int = 10) -> int:
    """Length of the longest suffix of `left` that is a prefix of `right`, or 0."""
    longest = min(len(left), len(right)) - 1
    for k in range(longest, min_overlap - 1, -1):
        if left[-k:] == right[:k]:
            return k
    return 0


def assemble_overlaps(fragments: list[str], min_overlap: int = 10) -> Sequence:
    """
    Join linear fragments end to end through their terminal overlaps and close
    the last fragment back onto the first.

    Raises:
        ValueError: If two neighbouring fragments share no overlap
    """
    if not fragments:
        raise ValueError("Nothing to assemble")

    count = len(fragments)
    assembled = fragments[0]
    for i in range(1, count + 1):
        right = fragments[i % count]
        overlap = terminal_overlap(assembled, right, min_overlap)
        if overlap == 0:
            raise ValueError(f"Fragments {i - 1} and {i % count} do not overlap")
        if i < count:
            assembled += right[overlap:]
        else:
            assembled = assembled[: len(assembled) - overlap]
    return Sequence(assembled, Topology.CIRCULAR)


def match_rotation(sequence: Sequence, reference: Sequence) -> Sequence:
    """
    Rotate circular `sequence` into the frame of `reference`. Sequences that
    are not rotations of each other are returned unchanged.
    """
    if not same_circular_sequence(reference.bases, sequence.bases):
        return sequence
    offset = (sequence.bases + sequence.bases).find(reference.bases)
    return sequence.rotate(offset)
