# ================================================================================
# Fuzzy primer quality score
#
# Six metric kinds are each normalised to [0, 1] and combined into a weighted
# average on a 0-100 scale. Weights and target ranges come from
# ScoringParameters, so every sub-score can be checked on its own and the
# aggregate formula stays a plain weighted mean.
# ================================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from primertune.aligner.align import self_dimer_risk
from primertune.config import IonConcentrations, ScoringParameters
from primertune.designer.repeats import count_repeats
from primertune.designer.thal import calc_tm, end_stability
from primertune.utils.utils import (
    clamp,
    count_3p_gc,
    distance_to_range,
    gc_content,
    normalize_bases,
)


class MetricKind(str, Enum):
    TM = "tm"
    GC = "gc"
    LENGTH = "length"
    END_STABILITY = "end_stability"
    REPEATS = "repeats"
    DIMER = "dimer"


@dataclass(frozen=True)
class JunctionGeometry:
    """
    Split of a junction primer at its anchor.

        five_prime_side: bases from the 5' end to the anchor
        three_prime_side: bases from the anchor to the 3' end
        five_prime_ideal, three_prime_ideal: preferred (min, max) length of
            each side; None falls back to the scoring length range
    """

    five_prime_side: int
    three_prime_side: int
    five_prime_ideal: tuple[int, int] | None = None
    three_prime_ideal: tuple[int, int] | None = None


@dataclass(frozen=True)
class QualityMetrics:
    """
    Metrics of one primer. Raw values first, then the normalised sub-scores
    and the aggregate.
    """

    bases: str
    tm: float
    gc_percent: float
    gc_3p_count: int
    end_stability: float
    repeat_count: int
    dimer_risk: float
    length: int

    tm_score: float
    gc_score: float
    length_score: float
    end_stability_score: float
    repeat_score: float
    dimer_score: float

    score: float

    def sub_scores(self) -> dict[MetricKind, float]:
        return {
            MetricKind.TM: self.tm_score,
            MetricKind.GC: self.gc_score,
            MetricKind.LENGTH: self.length_score,
            MetricKind.END_STABILITY: self.end_stability_score,
            MetricKind.REPEATS: self.repeat_score,
            MetricKind.DIMER: self.dimer_score,
        }

    def to_dict(self) -> dict:
        return {
            "bases": self.bases,
            "length": self.length,
            "tm": round(self.tm, 2),
            "gc_percent": round(self.gc_percent, 2),
            "gc_3p_count": self.gc_3p_count,
            "end_stability": round(self.end_stability, 2),
            "repeat_count": self.repeat_count,
            "dimer_risk": round(self.dimer_risk, 3),
            "score": round(self.score, 2),
        }


# ================================================================================
# Per-metric normalisation
# ================================================================================


def range_score(
    value: float, lo: float, hi: float, falloff_low: float, falloff_high: float
) -> float:
    """1 inside [lo, hi], falling linearly to 0 over `falloff_*` outside it."""
    if value < lo:
        return clamp(1.0 - (lo - value) / falloff_low)
    if value > hi:
        return clamp(1.0 - (value - hi) / falloff_high)
    return 1.0


def tm_score(tm: float, params: ScoringParameters) -> float:
    return range_score(tm, params.tm_min, params.tm_max, params.tm_falloff, params.tm_falloff)


def gc_score(gc_percent: float, params: ScoringParameters) -> float:
    return range_score(
        gc_percent, params.gc_min, params.gc_max, params.gc_falloff, params.gc_falloff
    )


def length_score(
    length: int, params: ScoringParameters, ideal: tuple[int, int] | None = None
) -> float:
    lo, hi = ideal if ideal is not None else (params.length_min, params.length_max)
    return range_score(
        length, lo, hi, params.length_falloff_short, params.length_falloff_long
    )


def junction_length_score(geometry: JunctionGeometry, params: ScoringParameters) -> float:
    """Mean of the two side scores, each against its own ideal range."""
    five = length_score(geometry.five_prime_side, params, geometry.five_prime_ideal)
    three = length_score(geometry.three_prime_side, params, geometry.three_prime_ideal)
    return (five + three) / 2


def end_stability_score(stability: float, params: ScoringParameters) -> float:
    return clamp(stability / params.end_stability_saturation)


def repeat_score(count: float, params: ScoringParameters) -> float:
    return clamp(1.0 - params.repeat_penalty * count)


def dimer_score(risk: float, params: ScoringParameters) -> float:
    return clamp(1.0 - risk / params.dimer_risk_cap)


def aggregate(sub_scores: dict[MetricKind, float], params: ScoringParameters) -> float:
    """Weighted mean of the sub-scores, scaled to [0, 100]."""
    weights = params.weights
    total = 0.0
    for kind, value in sub_scores.items():
        total += getattr(weights, kind.value) * value
    return clamp(100.0 * total / weights.total(), 0.0, 100.0)


# ================================================================================
# Primer evaluation
# ================================================================================


def evaluate(
    bases: str,
    ions: IonConcentrations,
    params: ScoringParameters,
    geometry: JunctionGeometry | None = None,
) -> QualityMetrics:
    """
    Compute every metric and the aggregate score of a primer sequence.

    Args:
        bases: primer sequence, 5'->3'
        ions: reaction conditions for the Tm model
        params: target ranges and weights
        geometry: anchor split for junction primers; None for plain primers

    Raises:
        SequenceTooShortError: If the primer has fewer than 2 bases
        InvalidSequenceError: If the primer contains characters other than ACGT
        InvalidIonConcentrationError: If a concentration is unusable
    """
    seq = normalize_bases(bases)

    tm = calc_tm(seq, ions).Tm
    gc_percent = gc_content(seq)
    stability = end_stability(seq, params.end_stability_window)
    repeats = count_repeats(seq)
    risk = self_dimer_risk(seq)

    if geometry is None:
        length_part = length_score(len(seq), params)
        repeat_part = repeat_score(repeats, params)
    else:
        length_part = junction_length_score(geometry, params)
        # Two fragments' worth of sequence: repeats per half
        repeat_part = repeat_score(repeats / 2, params)

    sub_scores = {
        MetricKind.TM: tm_score(tm, params),
        MetricKind.GC: gc_score(gc_percent, params),
        MetricKind.LENGTH: length_part,
        MetricKind.END_STABILITY: end_stability_score(stability, params),
        MetricKind.REPEATS: repeat_part,
        MetricKind.DIMER: dimer_score(risk, params),
    }

    return QualityMetrics(
        bases=seq,
        tm=tm,
        gc_percent=gc_percent,
        gc_3p_count=count_3p_gc(seq),
        end_stability=stability,
        repeat_count=repeats,
        dimer_risk=risk,
        length=len(seq),
        tm_score=sub_scores[MetricKind.TM],
        gc_score=sub_scores[MetricKind.GC],
        length_score=sub_scores[MetricKind.LENGTH],
        end_stability_score=sub_scores[MetricKind.END_STABILITY],
        repeat_score=sub_scores[MetricKind.REPEATS],
        dimer_score=sub_scores[MetricKind.DIMER],
        score=aggregate(sub_scores, params),
    )


def geometry_for(primer, resolved) -> JunctionGeometry | None:
    """Anchor split of a resolved junction primer, or None for a plain primer."""
    if resolved.anchor is None:
        return None
    return JunctionGeometry(
        five_prime_side=resolved.five_prime_side,
        three_prime_side=resolved.three_prime_side,
        five_prime_ideal=primer.five_prime.ideal_length,
        three_prime_ideal=primer.three_prime.ideal_length,
    )


def score_primer(primer, sequence, ions: IonConcentrations, params: ScoringParameters) -> QualityMetrics:
    """
    Score a primer descriptor against the sequence it is resolved on.

    Floating primers are scored on their own bases; fixed ranges on the
    template window they cover.
    """
    resolved = primer.resolve(sequence)
    return evaluate(resolved.bases, ions, params, geometry_for(primer, resolved))
