from primertune.errors import InvalidSequenceError

COMPLEMENT = {"A": "T", "T": "A", "G": "C", "C": "G"}

VALID_BASES = frozenset("ACGT")


def normalize_bases(sequence: str) -> str:
    """
    Upper-case a raw nucleotide string and check that it only holds A, C, G, T.

    Raises:
        InvalidSequenceError: If the string is empty or has any other character.
    """
    if not sequence:
        raise InvalidSequenceError("Sequence must contain at least one nucleotide")

    bases = sequence.upper()
    invalid = sorted(set(bases) - VALID_BASES)
    if invalid:
        raise InvalidSequenceError(
            f"Sequence contains invalid characters: {''.join(invalid)}. Only A, C, G, T allowed"
        )
    return bases


def gc_content(sequence: str) -> float:
    """
    Calculate the GC content of a DNA sequence.

    Parameters:
        sequence (str): DNA sequence consisting of A, T, G, C.

    Returns:
        float: GC content as a percentage.
    """
    if not sequence:
        return 0.0  # Handle empty string safely

    sequence = sequence.upper()  # Ensure case-insensitivity
    gc_count = sequence.count("G") + sequence.count("C")
    return (gc_count / len(sequence)) * 100


def complement(dna: str) -> str:
    """Return the base-wise complement of a DNA sequence (not reversed)."""
    dna = dna.upper()

    try:
        return "".join(COMPLEMENT[base] for base in dna)
    except KeyError as e:
        raise InvalidSequenceError(f"Invalid DNA base: {e.args[0]}") from e


def reverse_complement(dna: str) -> str:
    """
    Returns the reverse complement of a DNA sequence.

    Args:
        dna (str): DNA sequence string (A, T, G, C)

    Returns:
        str: Reverse complement of the input DNA sequence
    """
    dna = dna.upper()

    try:
        reverse_comp = "".join(COMPLEMENT[base] for base in reversed(dna))
        return reverse_comp
    except KeyError as e:
        raise InvalidSequenceError(f"Invalid DNA base: {e.args[0]}") from e


def count_3p_gc(sequence: str, window: int = 5) -> int:
    """Count G/C bases among the last `window` (3') bases of a primer."""
    three_prime = sequence[-window:] if len(sequence) >= window else sequence
    return sum(1 for b in three_prime.upper() if b in "GC")


def map_linear(value: float, range_in: tuple, range_out: tuple) -> float:
    """
    Map `value` linearly from `range_in` onto `range_out`. Values outside the
    input range extrapolate; callers clamp as needed.
    """
    (in_lo, in_hi), (out_lo, out_hi) = range_in, range_out
    if in_hi == in_lo:
        return out_lo
    portion = (value - in_lo) / (in_hi - in_lo)
    return out_lo + portion * (out_hi - out_lo)


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def distance_to_range(value: float, lo: float, hi: float) -> float:
    """Distance from `value` to the closed interval [lo, hi]; 0 inside it."""
    if value < lo:
        return lo - value
    if value > hi:
        return value - hi
    return 0.0
