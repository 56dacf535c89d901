from primertune.aligner.align import DimerAlignment, align_self_dimer, self_dimer_risk

__all__ = ["DimerAlignment", "align_self_dimer", "self_dimer_risk"]
