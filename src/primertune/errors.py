# ================================================================================
# Error kinds raised by the primer quality and tuning engine
#
# Every condition below is recoverable: callers catch PrimerEngineError (or a
# specific subclass) and report it, nothing here aborts the process.
# ================================================================================


class PrimerEngineError(Exception):
    """Base exception for primer engine errors."""

    pass


class InvalidSequenceError(PrimerEngineError):
    """Raised when a sequence is empty or contains characters other than ACGT."""

    pass


class SequenceTooShortError(PrimerEngineError):
    """Raised when a sequence has fewer nucleotides than a calculation needs."""

    pass


class InvalidIonConcentrationError(PrimerEngineError):
    """Raised when a negative (or unusable) concentration is supplied."""

    pass


class AnchorOutOfRangeError(PrimerEngineError):
    """Raised when a junction anchor does not lie strictly between the primer ends."""

    pass


class InsufficientFlankingSequenceError(PrimerEngineError):
    """Raised when the template cannot supply enough flank for the minimum length."""

    pass


class TunableRangeEmptyError(PrimerEngineError):
    """Raised when no candidate length fits between the minimum and maximum length."""

    pass


class ExtensionLimitExceededError(PrimerEngineError):
    """Raised when a requested extension exceeds the configured search cap."""

    pass


class InvalidPrimerError(PrimerEngineError):
    """Raised when a primer descriptor has an empty range or inconsistent end settings."""

    pass
