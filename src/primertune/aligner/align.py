# Computes the self-dimer risk of a primer
#
# A primer self-dimer forms when two copies of the same primer anneal to each
# other. Complementarity at the 3' end is what matters most: a duplex whose
# 3'-terminal base is paired can be extended by the polymerase and produces
# primer-dimer artefacts.
#
# The primer is aligned against an antiparallel copy of itself, ungapped, at
# every offset (like the cross-dimer aligner of Johnston et al. (2019) Sci
# Reports: https://www.nature.com/articles/s41598-018-36612-9, restricted to a
# single primer). Within each offset, runs of consecutive complementary pairs
# near the 3' terminus are scored by their length, discounted by how far
# their 3'-most base sits from the terminus.

from dataclasses import dataclass, field

from primertune.utils.utils import COMPLEMENT

# Shortest complementary run considered
MIN_RUN = 2

# Runs must reach within this many bases of the 3' terminus
END_WINDOW = 4


# ================================================================================
# Define a self-dimer alignment
# ================================================================================


@dataclass(order=True)
class DimerAlignment:
    """
    Highest-risk antiparallel alignment of a primer with itself.

        score: risk score, higher is worse; 0 when no run qualifies
        run_length: complementary bases in the run
        distance_from_3p: bases between the run's 3'-most base and the terminus
        offset: antiparallel offset (i + j of every paired position)
        pairs: (i, j) index pairs of the run, i on the first copy
    """

    score: float = field(compare=True)
    run_length: int = field(default=0, compare=False)
    distance_from_3p: int = field(default=0, compare=False)
    offset: int = field(default=-1, compare=False)
    pairs: tuple = field(default=(), compare=False, repr=False)

    def render(self, seq: str) -> str:
        """Two-line text rendering of the dimer, second copy written 3'->5'."""
        if not self.pairs:
            return f"5'-{seq}-3'\n(no self-dimer near the 3' end)"
        n = len(seq)
        # Copy 2 index j sits under copy 1 index offset - j
        shift = self.offset - (n - 1)
        top_pad = max(0, -shift)
        bottom_pad = max(0, shift)
        paired = {i for i, _ in self.pairs}
        bars = "".join("|" if i in paired else " " for i in range(n))
        return "\n".join(
            [
                " " * top_pad + f"5'-{seq}-3'",
                " " * (top_pad + 3) + bars,
                " " * bottom_pad + f"3'-{seq[::-1]}-5'",
            ]
        )


# ================================================================================
# Self-dimer alignment
# ================================================================================


def _runs_on_offset(seq: str, offset: int):
    """
    Yield (run_length, top_index_of_3p_base, pairs) for each maximal run of
    complementary pairs on one antiparallel offset.
    """
    n = len(seq)
    i_lo = max(0, offset - (n - 1))
    i_hi = min(n - 1, offset)

    run = []
    for i in range(i_hi, i_lo - 1, -1):
        j = offset - i
        if COMPLEMENT[seq[i]] == seq[j]:
            run.append((i, j))
            continue
        if run:
            yield len(run), run[0][0], tuple(run)
            run = []
    if run:
        yield len(run), run[0][0], tuple(run)


def align_self_dimer(sequence) -> DimerAlignment:
    """
    Align a primer with an antiparallel copy of itself and return the run of
    complementary bases carrying the highest 3'-end risk.
    """
    seq = str(sequence)
    n = len(seq)
    best = DimerAlignment(score=0.0)

    for offset in range(2 * n - 1):
        for run_length, top_3p, pairs in _runs_on_offset(seq, offset):
            if run_length < MIN_RUN:
                continue
            distance = (n - 1) - top_3p
            if distance > END_WINDOW:
                continue

            score = run_length / (1 + distance)
            if score > best.score:
                best = DimerAlignment(
                    score=score,
                    run_length=run_length,
                    distance_from_3p=distance,
                    offset=offset,
                    pairs=pairs,
                )

    return best


def self_dimer_risk(sequence) -> float:
    """
    Self-dimer risk score of a primer (>= 0, higher is worse).

    A complementary run ending at the 3'-terminal base counts fully; runs
    ending d bases upstream count 1 / (1 + d) per base.
    """
    return align_self_dimer(sequence).score
