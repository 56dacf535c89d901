from primertune.selector.tuner import TuningResult, candidate_extensions, tune

__all__ = ["TuningResult", "candidate_extensions", "tune"]
