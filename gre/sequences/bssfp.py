"""
Balanced Steady-State Free Precession (TrueFISP)

All gradients are balanced, so transverse coherence is recycled and the
contrast follows T2/T1. Echo decay uses T2 rather than T2*.
"""

import numpy as np

from ..primitives import SequenceType, TissueParams
from ..sequence import SequenceFamily, safe_divide


def bssfp_signal(tr: float, te: float, ti: float, sin_alpha: float, cos_alpha: float,
                 tissue: TissueParams, tolerance: float = 1e-6) -> float:
    e1 = np.exp(-tr / tissue.t1)
    e2 = np.exp(-tr / tissue.t2)
    ratio = safe_divide((1 - e1) * sin_alpha,
                        1 - (e1 - e2) * cos_alpha - e1 * e2,
                        tolerance)
    if ratio is None:
        return 0.0
    return tissue.pd * ratio * np.exp(-te / tissue.t2)


BSSFP = SequenceFamily(
    kind=SequenceType.BSSFP,
    label='Balanced SSFP (TrueFISP)',
    description='Balanced gradients preserve coherence. High SNR with T2/T1 weighted contrast.',
    equation=('S = S₀ · (sin(α)(1 - e^(-TR/T1))) / (1 - (e^(-TR/T1)-e^(-TR/T2))cos(α) '
              '- e^(-TR/T1)e^(-TR/T2)) · e^(-TE/T2)'),
    signal=bssfp_signal,
    decay='t2',
    has_rewinder=True,
)
