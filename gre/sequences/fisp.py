"""
FISP (steady-state hybrid gradient echo)

Unbalanced steady state with mixed T1 and T2* weighting.
"""

import numpy as np

from ..primitives import SequenceType, TissueParams
from ..sequence import SequenceFamily, safe_divide


def fisp_signal(tr: float, te: float, ti: float, sin_alpha: float, cos_alpha: float,
                tissue: TissueParams, tolerance: float = 1e-6) -> float:
    e1 = np.exp(-tr / tissue.t1)
    e2 = np.exp(-tr / tissue.t2)
    ratio = safe_divide((1 - e1) * sin_alpha,
                        1 - e1 * cos_alpha - e2 * (e1 - cos_alpha),
                        tolerance)
    if ratio is None:
        return 0.0
    return tissue.pd * ratio * np.exp(-te / tissue.t2star)


FISP = SequenceFamily(
    kind=SequenceType.FISP,
    label='FISP (Steady-State GRE)',
    description='Hybrid steady-state behavior with mixed T1 and T2* weighting.',
    equation=('S = S₀ · ((1 - e^(-TR/T1))sin(α)) / (1 - e^(-TR/T1)cos(α) '
              '- e^(-TR/T2)(e^(-TR/T1)-cos(α))) · e^(-TE/T2*)'),
    signal=fisp_signal,
    decay='t2star',
)
