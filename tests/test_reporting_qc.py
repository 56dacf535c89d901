# ================================================================================
# Tests for primer QC tables and summaries
# ================================================================================

import pandas as pd
import pytest

from primertune.designer.quality import evaluate
from primertune.reporting.qc import METRIC_COLUMNS, generate_primer_qc, metrics_table

GOOD = "CAGTGGCTCTATTGAATTTCTGTG"
AT_RICH = "ATTATAATTATAATTATAAT"
PALINDROMIC = "AAAAAAAAAAGAATTC"


@pytest.fixture
def named_metrics(ions, params):
    return {
        "good": evaluate(GOOD, ions, params),
        "at_rich": evaluate(AT_RICH, ions, params),
        "palindromic": evaluate(PALINDROMIC, ions, params),
    }


# ---------------------------------------------------------------------------
# Metrics table
# ---------------------------------------------------------------------------


class TestMetricsTable:
    def test_one_row_per_primer(self, named_metrics):
        df = metrics_table(named_metrics)
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == METRIC_COLUMNS
        assert list(df["name"]) == ["good", "at_rich", "palindromic"]

    def test_values(self, named_metrics):
        df = metrics_table(named_metrics).set_index("name")
        assert df.loc["good", "bases"] == GOOD
        assert df.loc["good", "length"] == 24
        assert df.loc["at_rich", "gc_percent"] == 0.0
        assert df.loc["good", "score"] == round(named_metrics["good"].score, 2)

    def test_empty(self):
        df = metrics_table({})
        assert df.empty
        assert list(df.columns) == METRIC_COLUMNS


# ---------------------------------------------------------------------------
# QC summary
# ---------------------------------------------------------------------------


class TestGeneratePrimerQC:
    def test_tm_distribution(self, named_metrics):
        qc = generate_primer_qc(named_metrics)
        tms = [m.tm for m in named_metrics.values()]
        assert qc["primer_count"] == 3
        assert qc["tm_distribution"]["min"] == round(min(tms), 2)
        assert qc["tm_distribution"]["max"] == round(max(tms), 2)
        assert qc["tm_distribution"]["std"] is not None

    def test_flags(self, named_metrics):
        qc = generate_primer_qc(named_metrics)
        flagged = {p["name"]: p["flags"] for p in qc["sequence_flags"]["flagged_primers"]}
        assert "low_gc" in flagged["at_rich"]
        assert "dimer" in flagged["palindromic"]
        assert qc["sequence_flags"]["low_gc_count"] >= 1
        assert qc["sequence_flags"]["dimer_count"] >= 1

    def test_lowest_scoring(self, named_metrics):
        qc = generate_primer_qc(named_metrics)
        lowest = min(named_metrics, key=lambda n: named_metrics[n].score)
        assert qc["lowest_scoring"] == lowest

    def test_empty(self):
        qc = generate_primer_qc({})
        assert qc["primer_count"] == 0
        assert qc["tm_distribution"]["mean"] is None
        assert qc["mean_score"] is None
        assert qc["lowest_scoring"] is None
