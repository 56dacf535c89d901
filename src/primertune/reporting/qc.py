"""Primer QC tables and summaries for display."""

from __future__ import annotations

import statistics

import pandas as pd

from primertune.designer.quality import QualityMetrics

METRIC_COLUMNS = [
    "name",
    "bases",
    "length",
    "tm",
    "gc_percent",
    "gc_3p_count",
    "end_stability",
    "repeat_count",
    "dimer_risk",
    "tm_score",
    "gc_score",
    "length_score",
    "end_stability_score",
    "repeat_score",
    "dimer_score",
    "score",
]


def metrics_table(named_metrics: dict[str, QualityMetrics]) -> pd.DataFrame:
    """One row per primer with raw metrics, sub-scores and the aggregate score."""
    rows = []
    for name, m in named_metrics.items():
        rows.append(
            {
                "name": name,
                "bases": m.bases,
                "length": m.length,
                "tm": round(m.tm, 2),
                "gc_percent": round(m.gc_percent, 1),
                "gc_3p_count": m.gc_3p_count,
                "end_stability": round(m.end_stability, 2),
                "repeat_count": m.repeat_count,
                "dimer_risk": round(m.dimer_risk, 3),
                "tm_score": round(m.tm_score, 3),
                "gc_score": round(m.gc_score, 3),
                "length_score": round(m.length_score, 3),
                "end_stability_score": round(m.end_stability_score, 3),
                "repeat_score": round(m.repeat_score, 3),
                "dimer_score": round(m.dimer_score, 3),
                "score": round(m.score, 2),
            }
        )
    return pd.DataFrame(rows, columns=METRIC_COLUMNS)


def generate_primer_qc(
    named_metrics: dict[str, QualityMetrics],
    *,
    gc_high_threshold: float = 60.0,
    gc_low_threshold: float = 40.0,
    max_repeats: int = 2,
    dimer_threshold: float = 2.0,
    min_end_stability: float = 5.0,
) -> dict:
    """Generate QC metrics for a set of scored primers."""
    # Tm distribution
    tms = [m.tm for m in named_metrics.values()]
    tm_distribution = {
        "mean": round(statistics.mean(tms), 2) if tms else None,
        "std": round(statistics.stdev(tms), 2) if len(tms) >= 2 else None,
        "min": round(min(tms), 2) if tms else None,
        "max": round(max(tms), 2) if tms else None,
        "spread": round(max(tms) - min(tms), 2) if tms else None,
    }

    # Sequence flags
    flagged_primers = []
    counts = {"high_gc": 0, "low_gc": 0, "repeats": 0, "dimer": 0, "weak_3p_end": 0}
    for name, m in named_metrics.items():
        flags = []
        if m.gc_percent > gc_high_threshold:
            flags.append("high_gc")
        if m.gc_percent < gc_low_threshold:
            flags.append("low_gc")
        if m.repeat_count > max_repeats:
            flags.append("repeats")
        if m.dimer_risk >= dimer_threshold:
            flags.append("dimer")
        if m.end_stability < min_end_stability:
            flags.append("weak_3p_end")

        for flag in flags:
            counts[flag] += 1
        if flags:
            flagged_primers.append(
                {
                    "name": name,
                    "sequence": m.bases,
                    "score": round(m.score, 2),
                    "flags": flags,
                }
            )

    scores = [m.score for m in named_metrics.values()]
    return {
        "primer_count": len(named_metrics),
        "tm_distribution": tm_distribution,
        "sequence_flags": {
            "gc_high_threshold": gc_high_threshold,
            "gc_low_threshold": gc_low_threshold,
            "max_repeats": max_repeats,
            "dimer_threshold": dimer_threshold,
            "min_end_stability": min_end_stability,
            **{f"{flag}_count": count for flag, count in counts.items()},
            "flagged_primers": flagged_primers,
        },
        "mean_score": round(statistics.mean(scores), 2) if scores else None,
        "lowest_scoring": min(named_metrics, key=lambda n: named_metrics[n].score)
        if named_metrics
        else None,
    }
