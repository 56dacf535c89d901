# ================================================================================
# Oligonucleotide melting temperature and duplex stability.
#
# Nearest-neighbor model with SantaLucia & Hicks (2004) parameters and an
# entropy salt correction for monovalent cations, with Mg2+ converted to a
# monovalent equivalent after subtracting the fraction chelated by dNTPs.
# ================================================================================

import math
from dataclasses import dataclass

from primertune.config import IonConcentrations
from primertune.errors import InvalidIonConcentrationError, SequenceTooShortError
from primertune.utils.utils import COMPLEMENT, normalize_bases

# Kelvin to Celsius conversion factor
T_KELVIN = 273.15

# In cal/(K·mol)
GAS_CONSTANT = 1.987

MIN_TM_LENGTH = 2


@dataclass
class TmResult:
    """
    Result of Tm calculation.

        Tm: melting temperature (°C)
        delta_h: enthalpy (kcal/mol)
        delta_s: salt-corrected entropy (cal/(K·mol))
    """

    Tm: float
    delta_h: float
    delta_s: float


# SantaLucia & Hicks (2004), Table 1. Enthalpy in kcal/mol, entropy in
# cal/(K·mol), keyed by the top-strand dinucleotide read 5'->3'.
NN_PARAMS = {
    "AA": (-7.6, -21.3),
    "TT": (-7.6, -21.3),
    "AT": (-7.2, -20.4),
    "TA": (-7.2, -21.3),
    "CA": (-8.5, -22.7),
    "TG": (-8.5, -22.7),
    "GT": (-8.4, -22.4),
    "AC": (-8.4, -22.4),
    "CT": (-7.8, -21.0),
    "AG": (-7.8, -21.0),
    "GA": (-8.2, -22.2),
    "TC": (-8.2, -22.2),
    "CG": (-10.6, -27.2),
    "GC": (-9.8, -24.4),
    "GG": (-8.0, -19.9),
    "CC": (-8.0, -19.9),
}

# Duplex initiation
INIT_DH = 0.2
INIT_DS = -5.7

# Per terminal A·T pair
TERMINAL_AT_DH = 2.2
TERMINAL_AT_DS = 6.9

# Self-complementary duplexes
SYMMETRY_DS = -1.4


def _validated(seq: str) -> str:
    if len(seq) < MIN_TM_LENGTH:
        raise SequenceTooShortError(
            f"Sequence must be at least {MIN_TM_LENGTH} bases long"
        )
    return normalize_bases(seq)


def nn_thermodynamics(seq: str) -> tuple:
    """
    Sum nearest-neighbor enthalpy (kcal/mol) and entropy (cal/(K·mol)) of the
    stack, without initiation or terminal terms.
    """
    dh = 0.0
    ds = 0.0
    for i in range(len(seq) - 1):
        pair_dh, pair_ds = NN_PARAMS[seq[i : i + 2]]
        dh += pair_dh
        ds += pair_ds
    return dh, ds


def calc_thermodynamics(seq: str) -> tuple:
    """
    Calculate duplex enthalpy (dh) and entropy (ds) for a sequence, including
    initiation, terminal A·T and symmetry terms.

    Args:
        seq - Upper-case ACGT sequence, at least 2 bases
    """
    dh, ds = nn_thermodynamics(seq)

    dh += INIT_DH
    ds += INIT_DS

    # Terminal AT penalty
    at_terminals = sum(1 for base in (seq[0], seq[-1]) if base in "AT")
    dh += TERMINAL_AT_DH * at_terminals
    ds += TERMINAL_AT_DS * at_terminals

    # Symmetry correction
    if symmetry(seq):
        ds += SYMMETRY_DS

    return dh, ds


def symmetry(seq: str) -> bool:
    """Check if sequence is self-complementary/symmetrical."""
    seq_len = len(seq)
    if seq_len % 2 == 1:
        return False

    mid = seq_len // 2

    for i in range(mid):
        if seq[i] not in COMPLEMENT or seq[-(i + 1)] != COMPLEMENT[seq[i]]:
            return False

    return True


def divalent_to_monovalent(divalent: float, dntp: float) -> float:
    """
    Convert divalent salt concentration (mM) to a monovalent equivalent (mM).

    dNTPs chelate Mg2+ one-to-one; only the free remainder contributes.
    """
    if divalent < 0 or dntp < 0:
        raise InvalidIonConcentrationError(
            "Divalent and dNTP concentrations must be non-negative"
        )
    if divalent <= dntp:
        return 0.0
    return 120 * math.sqrt(divalent - dntp)


def monovalent_equivalent(ions: IonConcentrations) -> float:
    """Effective monovalent cation concentration (mM) for the salt correction."""
    if ions.potassium < 0 or ions.sodium < 0:
        raise InvalidIonConcentrationError(
            "Monovalent concentrations must be non-negative"
        )
    return ions.potassium + ions.sodium + divalent_to_monovalent(
        ions.magnesium, ions.dntp
    )


def salt_correction(seq_len: int, ions: IonConcentrations) -> float:
    """
    Entropy correction (cal/(K·mol)) for the cation concentration, SantaLucia
    (1998): 0.368 * (N - 1) * ln([Mon+]). Zero when no cations are present.
    """
    mon_molar = monovalent_equivalent(ions) / 1000.0
    if mon_molar <= 0.0:
        return 0.0
    return 0.368 * (seq_len - 1) * math.log(mon_molar)


def calc_tm(seq: str, ions: IonConcentrations) -> TmResult:
    """
    Calculate melting temperature using the SantaLucia nearest-neighbor method.

    Args:
        seq: DNA sequence, 5'->3'
        ions: Reaction ion and primer concentrations

    Returns:
        TmResult with Tm and the duplex enthalpy/entropy used

    Raises:
        SequenceTooShortError: If sequence has fewer than 2 bases
        InvalidSequenceError: If sequence contains characters other than ACGT
        InvalidIonConcentrationError: If concentration values are invalid
    """
    seq = _validated(seq)

    if ions.primer <= 0:
        raise InvalidIonConcentrationError("Primer concentration must be positive")

    delta_h, delta_s = calc_thermodynamics(seq)
    delta_s += salt_correction(len(seq), ions)

    primer_molar = ions.primer / 1e9
    if symmetry(seq):
        ct_term = primer_molar
    else:
        ct_term = primer_molar / 4

    tm = (1000.0 * delta_h) / (delta_s + GAS_CONSTANT * math.log(ct_term)) - T_KELVIN

    return TmResult(Tm=tm, delta_h=delta_h, delta_s=delta_s)


def melting_temperature(seq: str, ions: IonConcentrations) -> float:
    """Melting temperature (°C) of `seq` under `ions`. See calc_tm."""
    return calc_tm(seq, ions).Tm


def delta_g(seq: str, temp_c: float = 37.0) -> float:
    """
    Free energy (kcal/mol) of the nearest-neighbor stack of `seq` at `temp_c`,
    without initiation terms. More negative is more stable.

    Raises:
        SequenceTooShortError: If sequence is too short
    """
    seq = _validated(seq)
    dh, ds = nn_thermodynamics(seq)
    return dh - (temp_c + T_KELVIN) * ds / 1000.0


def end_stability(seq: str, length: int = 5) -> float:
    """
    3'-end stability: -dG37 (kcal/mol) of the last `length` bases of the
    primer, or of the whole primer when it is shorter. Bigger numbers mean
    more stable 3' ends.
    """
    if len(seq) > length:
        seq = seq[-length:]
    return -delta_g(seq)
