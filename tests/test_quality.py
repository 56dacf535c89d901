# ================================================================================
# Tests for the fuzzy quality scorer
# ================================================================================

import random

import pytest

from primertune.config import IonConcentrations, MetricWeights, ScoringParameters
from primertune.designer.primer import EndTuning, FixedRange, FloatingMatch, Primer
from primertune.designer.quality import (
    JunctionGeometry,
    MetricKind,
    aggregate,
    dimer_score,
    end_stability_score,
    evaluate,
    junction_length_score,
    length_score,
    range_score,
    repeat_score,
    score_primer,
)
from primertune.errors import InvalidSequenceError, SequenceTooShortError

GOOD_PRIMER = "CAGTGGCTCTATTGAATTTCTGTG"


class TestSubScores:
    def test_range_score_inside(self):
        assert range_score(50, 40, 60, 40, 40) == 1.0

    def test_range_score_falloff(self):
        assert range_score(20, 40, 60, 40, 40) == pytest.approx(0.5)
        assert range_score(70, 40, 60, 40, 20) == pytest.approx(0.5)
        assert range_score(0, 40, 60, 10, 10) == 0.0

    def test_length_score_asymmetric(self, params):
        assert length_score(20, params) == 1.0
        assert length_score(14, params) == pytest.approx(0.5)
        assert length_score(32, params) == pytest.approx(0.5)

    def test_length_score_custom_ideal(self, params):
        assert length_score(20, params, ideal=(20, 20)) == 1.0
        assert length_score(24, params, ideal=(20, 20)) == pytest.approx(0.75)

    def test_end_stability_saturates(self, params):
        assert end_stability_score(3.25, params) == pytest.approx(0.5)
        assert end_stability_score(6.5, params) == 1.0
        assert end_stability_score(12.0, params) == 1.0
        assert end_stability_score(-1.0, params) == 0.0

    @pytest.mark.parametrize("count", range(8))
    def test_repeat_score_monotone(self, params, count):
        assert repeat_score(count + 1, params) <= repeat_score(count, params)
        assert 0.0 <= repeat_score(count, params) <= 1.0

    def test_dimer_score(self, params):
        assert dimer_score(0.0, params) == 1.0
        assert dimer_score(3.0, params) == pytest.approx(0.5)
        assert dimer_score(20.0, params) == 0.0

    def test_junction_length_score_averages_sides(self, params):
        geometry = JunctionGeometry(20, 10, five_prime_ideal=(20, 20))
        expected = (1.0 + length_score(10, params)) / 2
        assert junction_length_score(geometry, params) == pytest.approx(expected)


class TestAggregate:
    def test_weighted_mean(self):
        params = ScoringParameters(
            weights=MetricWeights(tm=1, gc=1, length=0, end_stability=0, repeats=0, dimer=0)
        )
        sub_scores = {kind: 0.0 for kind in MetricKind}
        sub_scores[MetricKind.TM] = 1.0
        assert aggregate(sub_scores, params) == pytest.approx(50.0)

    def test_single_metric_weight(self, ions):
        params = ScoringParameters(
            weights=MetricWeights(tm=0, gc=1, length=0, end_stability=0, repeats=0, dimer=0)
        )
        metrics = evaluate(GOOD_PRIMER, ions, params)
        assert metrics.score == pytest.approx(100.0 * metrics.gc_score)

    def test_all_zero_weights_rejected(self):
        with pytest.raises(ValueError):
            MetricWeights(tm=0, gc=0, length=0, end_stability=0, repeats=0, dimer=0)


class TestEvaluate:
    def test_good_primer_scores_high(self, ions, params):
        metrics = evaluate(GOOD_PRIMER, ions, params)
        assert metrics.length == 24
        assert metrics.length_score == 1.0
        assert 40.0 <= metrics.gc_percent <= 60.0
        assert metrics.score > 75.0

    def test_poor_primer_scores_lower(self, ions, params):
        good = evaluate(GOOD_PRIMER, ions, params)
        poor = evaluate("ATATATATATAAAAAAAT", ions, params)
        assert poor.score < good.score
        assert poor.repeat_count > 0

    def test_sub_scores_exposed_by_kind(self, ions, params):
        metrics = evaluate(GOOD_PRIMER, ions, params)
        assert set(metrics.sub_scores()) == set(MetricKind)

    def test_to_dict(self, ions, params):
        record = evaluate(GOOD_PRIMER, ions, params).to_dict()
        assert record["bases"] == GOOD_PRIMER
        assert record["length"] == 24

    def test_junction_halves_repeat_count(self, ions, params):
        plain = evaluate("AAAAGCTAGCTAGGCTAGTCAAAA", ions, params)
        junction = evaluate(
            "AAAAGCTAGCTAGGCTAGTCAAAA", ions, params, JunctionGeometry(12, 12)
        )
        assert plain.repeat_count == junction.repeat_count
        assert junction.repeat_score == pytest.approx(
            max(0.0, 1 - params.repeat_penalty * plain.repeat_count / 2)
        )

    def test_too_short(self, ions, params):
        with pytest.raises(SequenceTooShortError):
            evaluate("A", ions, params)

    def test_invalid(self, ions, params):
        with pytest.raises(InvalidSequenceError):
            evaluate("ACGTRY", ions, params)


class TestScoreBounds:
    @pytest.mark.parametrize("seed", range(25))
    def test_score_between_0_and_100(self, seed):
        """Randomized valid sequences and conditions always score inside [0, 100]."""
        rng = random.Random(seed)
        length = rng.randint(2, 60)
        bases = "".join(rng.choice("ACGT") for _ in range(length))
        ions = IonConcentrations(
            potassium=rng.uniform(0, 200),
            sodium=rng.uniform(0, 200),
            magnesium=rng.uniform(0, 10),
            dntp=rng.uniform(0, 5),
            primer=rng.uniform(1, 2000),
        )
        params = ScoringParameters(
            weights=MetricWeights(
                tm=rng.uniform(0.1, 3),
                gc=rng.uniform(0, 3),
                length=rng.uniform(0, 3),
                end_stability=rng.uniform(0, 3),
                repeats=rng.uniform(0, 3),
                dimer=rng.uniform(0, 3),
            ),
            repeat_penalty=rng.uniform(0, 1),
        )
        geometry = None
        if length >= 4 and rng.random() < 0.5:
            split = rng.randint(1, length - 1)
            geometry = JunctionGeometry(split, length - split)

        metrics = evaluate(bases, ions, params, geometry)
        assert 0.0 <= metrics.score <= 100.0
        for value in metrics.sub_scores().values():
            assert 0.0 <= value <= 1.0


class TestScorePrimer:
    def test_fixed_range(self, template, ions, params):
        primer = Primer(match=FixedRange(10, 30))
        metrics = score_primer(primer, template, ions, params)
        assert metrics.bases == template.window(10, 30)

    def test_floating_scores_own_bases(self, template, ions, params):
        bases = template.window(40, 60)
        mismatched = ("T" if bases[0] != "T" else "A") + bases[1:]
        primer = Primer(match=FloatingMatch(mismatched))
        metrics = score_primer(primer, template, ions, params)
        assert metrics.bases == mismatched

    def test_junction_uses_anchor_geometry(self, template, ions, params):
        primer = Primer(
            match=FixedRange(50, 90),
            five_prime=EndTuning.up_to(4, ideal_length=(20, 20)),
            three_prime=EndTuning.up_to(4, ideal_length=(20, 20)),
            anchor=70,
        )
        metrics = score_primer(primer, template, ions, params)
        assert metrics.length == 40
        assert metrics.length_score == 1.0
