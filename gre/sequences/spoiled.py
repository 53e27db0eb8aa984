"""
Spoiled Gradient Echo (FLASH / SPGR)

Residual transverse magnetization is destroyed after every TR, so the
steady state is purely longitudinal:

    Mz_ss = (1 - E1) / (1 - cos(a) E1)
    S     = PD * Mz_ss * sin(a) * exp(-TE/T2*)
"""

import numpy as np

from ..primitives import SequenceType, TissueParams
from ..sequence import SequenceFamily, safe_divide


def steady_state_fraction(e1: float, cos_alpha: float, tolerance: float = 1e-6,
                          fallback: float = 0.0) -> float:
    """Longitudinal steady state just before each pulse (fallback if singular)"""
    mz_ss = safe_divide(1 - e1, 1 - cos_alpha * e1, tolerance)
    return fallback if mz_ss is None else mz_ss


def spoiled_signal(tr: float, te: float, ti: float, sin_alpha: float, cos_alpha: float,
                   tissue: TissueParams, tolerance: float = 1e-6) -> float:
    e1 = np.exp(-tr / tissue.t1)
    e2star = np.exp(-te / tissue.t2star)
    mz_ss = safe_divide(1 - e1, 1 - cos_alpha * e1, tolerance)
    if mz_ss is None:
        return 0.0
    return tissue.pd * mz_ss * sin_alpha * e2star


SPOILED = SequenceFamily(
    kind=SequenceType.SPOILED,
    label='Spoiled GRE (FLASH/SPGR)',
    description='Transverse magnetization is destroyed (spoiled) after each TR. Pure T1/PD contrast.',
    equation='S = S₀ · ((1 - e^(-TR/T1)) / (1 - cos(α)e^(-TR/T1))) · sin(α) · e^(-TE/T2*)',
    signal=spoiled_signal,
    decay='t2star',
    has_spoiler=True,
)
