"""
Inversion Recovery Gradient Echo (IR-GRE)

A 180° preparation pulse inverts Mz; the excitation at TI reads the partly
recovered magnetization. The magnitude image nulls a tissue at
TI = T1 ln 2 (for TR >> T1).
"""

import numpy as np

from ..primitives import SequenceType, TissueParams
from ..sequence import SequenceFamily


def inversion_mz(tr: float, ti: float, t1: float) -> float:
    """Longitudinal magnetization at the moment of excitation"""
    return 1 - 2 * np.exp(-ti / t1) + np.exp(-tr / t1)


def inversion_signal(tr: float, te: float, ti: float, sin_alpha: float, cos_alpha: float,
                     tissue: TissueParams, tolerance: float = 1e-6) -> float:
    mz_ti = inversion_mz(tr, ti, tissue.t1)
    return tissue.pd * abs(mz_ti) * sin_alpha * np.exp(-te / tissue.t2star)


INVERSION = SequenceFamily(
    kind=SequenceType.INVERSION,
    label='Inversion Recovery (IR-GRE)',
    description='180° preparation pulse with TI-based nulling for selective suppression.',
    equation='S = S₀ · |1 - 2e^(-TI/T1) + e^(-TR/T1)| · sin(α) · e^(-TE/T2*)',
    signal=inversion_signal,
    decay='t2star',
)
