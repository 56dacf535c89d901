# ================================================================================
# Primer end tuning
#
# A tunable primer end may grow outward over flanking template sequence. The
# tuner enumerates every admissible combination of end extensions, scores each
# full candidate primer, and keeps the best one. Enumeration is exhaustive:
# extensions are capped at a few dozen bases per end, so even a junction
# primer with both ends tunable is a few thousand evaluations at most, and
# the optimum within the declared bounds is guaranteed.
#
# Selection never depends on evaluation order. All candidates are collected
# and reduced with a total ordering key:
#
#   single end:  (score, -distance to ideal length, -length)
#   junction:    (score, -5' side distance, -3' side distance,
#                 -5' side length, -3' side length)
#
# The returned primer has each end's remaining extension budget reduced by the
# extension it used, so tuning a tuned primer searches a subset of the
# original candidates that still contains the winner, and returns it again.
# ================================================================================

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from itertools import product

from loguru import logger

from primertune.config import IonConcentrations, ScoringParameters, TuningParameters
from primertune.designer.primer import Primer, ResolvedPrimer
from primertune.designer.quality import QualityMetrics, evaluate, geometry_for
from primertune.errors import (
    ExtensionLimitExceededError,
    InsufficientFlankingSequenceError,
    TunableRangeEmptyError,
)
from primertune.sequence import Sequence
from primertune.utils.utils import distance_to_range

# Scores are compared at this precision so that float noise cannot override
# the tie-break rules
SCORE_DECIMALS = 9


@dataclass(frozen=True)
class TuningResult:
    """
    Outcome of a tuning run.

        primer: tuned descriptor (the input itself when nothing was tunable)
        resolved: the tuned primer located on the template
        metrics: quality metrics of the tuned primer
        evaluated: number of candidates scored
    """

    primer: Primer
    resolved: ResolvedPrimer
    metrics: QualityMetrics
    evaluated: int

    @property
    def score(self) -> float:
        return self.metrics.score


@dataclass(frozen=True)
class _Candidate:
    extension_5p: int
    extension_3p: int
    resolved: ResolvedPrimer
    metrics: QualityMetrics


# ================================================================================
# Validation of the search bounds
# ================================================================================


def _check_extension_caps(primer: Primer, tuning: TuningParameters) -> None:
    for label, end in (("5'", primer.five_prime), ("3'", primer.three_prime)):
        if end.tunable and end.max_extension > tuning.max_extension:
            raise ExtensionLimitExceededError(
                f"{label} end of primer '{primer.name}' requests {end.max_extension} nt of "
                f"extension; the limit is {tuning.max_extension}"
            )


def _flank(primer: Primer, resolved: ResolvedPrimer, sequence: Sequence) -> tuple[int, int]:
    """Template flank usable by each active end, before the extension caps."""
    available_5p, available_3p = resolved.available_flank(sequence)
    flank_5p = available_5p if primer.five_prime.active else 0
    flank_3p = available_3p if primer.three_prime.active else 0
    return flank_5p, flank_3p


def _reach(primer: Primer, resolved: ResolvedPrimer, sequence: Sequence) -> tuple[int, int]:
    """Largest usable extension of each end."""
    flank_5p, flank_3p = _flank(primer, resolved, sequence)
    return (
        min(primer.five_prime.max_extension, flank_5p),
        min(primer.three_prime.max_extension, flank_3p),
    )


def candidate_extensions(
    primer: Primer, resolved: ResolvedPrimer, sequence: Sequence
) -> list[tuple[int, int]]:
    """
    Every (5' extension, 3' extension) pair inside the primer's length bounds.

    Raises:
        InsufficientFlankingSequenceError: If the template flank cannot supply min_length
        TunableRangeEmptyError: If the extension caps leave no length inside the bounds
    """
    nominal = resolved.length
    flank_5p, flank_3p = _flank(primer, resolved, sequence)
    reach_5p, reach_3p = _reach(primer, resolved, sequence)

    # A circular template can supply each base only once
    limit = len(sequence) if sequence.is_circular else None

    longest_on_template = nominal + flank_5p + flank_3p
    if limit is not None:
        longest_on_template = min(longest_on_template, limit)
    if primer.min_length > longest_on_template:
        raise InsufficientFlankingSequenceError(
            f"Primer '{primer.name}' cannot reach its minimum length of {primer.min_length} nt: "
            f"nominal {nominal} nt with {flank_5p} + {flank_3p} nt of template flank"
        )

    extensions = []
    for e5, e3 in product(range(reach_5p + 1), range(reach_3p + 1)):
        length = nominal + e5 + e3
        if not primer.min_length <= length <= primer.max_length:
            continue
        if limit is not None and length > limit:
            continue
        extensions.append((e5, e3))

    if not extensions:
        raise TunableRangeEmptyError(
            f"No length of primer '{primer.name}' between {nominal} and "
            f"{nominal + reach_5p + reach_3p} nt satisfies [{primer.min_length}, {primer.max_length}] "
            f"with extensions capped at {reach_5p} + {reach_3p} nt"
        )
    return extensions


# ================================================================================
# Candidate evaluation and selection
# ================================================================================


def _evaluate_candidate(
    primer: Primer,
    resolved: ResolvedPrimer,
    sequence: Sequence,
    extension: tuple[int, int],
    ions: IonConcentrations,
    params: ScoringParameters,
) -> _Candidate:
    e5, e3 = extension
    start, end = resolved.extended_bounds(e5, e3)
    candidate = ResolvedPrimer(
        start=start,
        end=end,
        direction=resolved.direction,
        bases=resolved.extended_bases(sequence, e5, e3),
        anchor=resolved.anchor,
    )
    metrics = evaluate(candidate.bases, ions, params, geometry_for(primer, candidate))
    return _Candidate(e5, e3, candidate, metrics)


def _single_end_key(params: ScoringParameters):
    def key(candidate: _Candidate):
        length = candidate.resolved.length
        return (
            round(candidate.metrics.score, SCORE_DECIMALS),
            -distance_to_range(length, params.length_min, params.length_max),
            -length,
        )

    return key


def _junction_key(primer: Primer, params: ScoringParameters):
    default_ideal = (params.length_min, params.length_max)
    ideal_5p = primer.five_prime.ideal_length or default_ideal
    ideal_3p = primer.three_prime.ideal_length or default_ideal

    def key(candidate: _Candidate):
        side_5p = candidate.resolved.five_prime_side
        side_3p = candidate.resolved.three_prime_side
        return (
            round(candidate.metrics.score, SCORE_DECIMALS),
            -distance_to_range(side_5p, *ideal_5p),
            -distance_to_range(side_3p, *ideal_3p),
            -side_5p,
            -side_3p,
        )

    return key


def _evaluate_all(
    primer, resolved, sequence, extensions, ions, params, workers: int
) -> list[_Candidate]:
    if workers <= 1 or len(extensions) <= 1:
        return [
            _evaluate_candidate(primer, resolved, sequence, ext, ions, params)
            for ext in extensions
        ]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(_evaluate_candidate, primer, resolved, sequence, ext, ions, params)
            for ext in extensions
        ]
        return [future.result() for future in futures]


def tune(
    primer: Primer,
    sequence: Sequence,
    ions: IonConcentrations,
    params: ScoringParameters,
    tuning: TuningParameters | None = None,
) -> TuningResult:
    """
    Move the tunable ends of `primer` to maximise its quality score.

    Args:
        primer: descriptor with zero, one or two tunable ends
        sequence: template the primer is resolved on and extended over
        ions: reaction conditions for the Tm model
        params: scoring targets and weights
        tuning: search caps and worker count

    Returns:
        TuningResult holding a new Primer; the input is never modified.

    Raises:
        ExtensionLimitExceededError: If an end asks for more than tuning.max_extension
        AnchorOutOfRangeError: If a junction anchor is not strictly inside the primer
        InsufficientFlankingSequenceError: If min_length is out of reach
        TunableRangeEmptyError: If no candidate length is admissible
    """
    tuning = tuning or TuningParameters()
    _check_extension_caps(primer, tuning)

    if primer.min_length > primer.max_length:
        raise TunableRangeEmptyError(
            f"Primer '{primer.name}': max_length {primer.max_length} < min_length {primer.min_length}"
        )

    resolved = primer.resolve(sequence)

    if not (primer.five_prime.active or primer.three_prime.active):
        metrics = evaluate(resolved.bases, ions, params, geometry_for(primer, resolved))
        logger.debug(f"Primer '{primer.name}' has no tunable end; score {metrics.score:.2f}")
        return TuningResult(primer, resolved, metrics, evaluated=1)

    extensions = candidate_extensions(primer, resolved, sequence)
    candidates = _evaluate_all(
        primer, resolved, sequence, extensions, ions, params, tuning.workers
    )

    if primer.is_junction:
        key = _junction_key(primer, params)
    else:
        key = _single_end_key(params)
    best = max(candidates, key=key)

    if best.extension_5p == 0 and best.extension_3p == 0:
        tuned = primer
    else:
        tuned = primer.with_range(
            resolved, best.extension_5p, best.extension_3p, best.resolved.bases
        )

    logger.info(
        f"Tuned primer '{primer.name}': {len(candidates)} candidates, "
        f"length {resolved.length} -> {best.resolved.length} "
        f"(+{best.extension_5p} 5', +{best.extension_3p} 3'), score {best.metrics.score:.2f}"
    )
    return TuningResult(tuned, best.resolved, best.metrics, evaluated=len(candidates))
