from primertune.aligner.align import DimerAlignment, align_self_dimer, self_dimer_risk
from primertune.config import (
    CloningParameters,
    EngineConfig,
    IonConcentrations,
    MetricWeights,
    ScoringParameters,
    TuningParameters,
    load_config,
)
from primertune.designer.cloning import (
    CloningPrimers,
    amplification_primers,
    assemble_overlaps,
    generate_pair,
    simulate_pcr,
)
from primertune.designer.primer import (
    Direction,
    EndTuning,
    FixedRange,
    FloatingMatch,
    Primer,
    ResolvedPrimer,
)
from primertune.designer.quality import (
    JunctionGeometry,
    MetricKind,
    QualityMetrics,
    evaluate,
    score_primer,
)
from primertune.designer.repeats import (
    RepeatKind,
    RepeatOccurrence,
    count_repeats,
    find_repeats,
)
from primertune.designer.thal import calc_tm, end_stability, melting_temperature
from primertune.errors import (
    AnchorOutOfRangeError,
    ExtensionLimitExceededError,
    InsufficientFlankingSequenceError,
    InvalidIonConcentrationError,
    InvalidPrimerError,
    InvalidSequenceError,
    PrimerEngineError,
    SequenceTooShortError,
    TunableRangeEmptyError,
)
from primertune.selector.tuner import TuningResult, tune
from primertune.sequence import Sequence, Topology, same_circular_sequence
from primertune.version import __version__

__all__ = [
    "AnchorOutOfRangeError",
    "CloningParameters",
    "CloningPrimers",
    "DimerAlignment",
    "Direction",
    "EndTuning",
    "EngineConfig",
    "ExtensionLimitExceededError",
    "FixedRange",
    "FloatingMatch",
    "InsufficientFlankingSequenceError",
    "InvalidIonConcentrationError",
    "InvalidPrimerError",
    "InvalidSequenceError",
    "IonConcentrations",
    "JunctionGeometry",
    "MetricKind",
    "MetricWeights",
    "Primer",
    "PrimerEngineError",
    "QualityMetrics",
    "RepeatKind",
    "RepeatOccurrence",
    "ResolvedPrimer",
    "ScoringParameters",
    "Sequence",
    "SequenceTooShortError",
    "Topology",
    "TunableRangeEmptyError",
    "TuningParameters",
    "TuningResult",
    "__version__",
    "align_self_dimer",
    "amplification_primers",
    "assemble_overlaps",
    "calc_tm",
    "count_repeats",
    "end_stability",
    "evaluate",
    "find_repeats",
    "generate_pair",
    "load_config",
    "melting_temperature",
    "same_circular_sequence",
    "score_primer",
    "self_dimer_risk",
    "simulate_pcr",
    "tune",
]
