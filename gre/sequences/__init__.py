"""
Gradient Echo Sequence Families

Each module implements one steady-state signal equation and registers a
SequenceFamily record. FAMILIES maps every SequenceType to its family.

Available families:
    - spoiled: Spoiled GRE (FLASH/SPGR)
    - bssfp: Balanced SSFP (TrueFISP)
    - fisp: Steady-state hybrid GRE
    - inversion: Inversion recovery GRE
"""

from typing import Dict, Union

from ..primitives import SequenceType
from ..sequence import SequenceFamily
from .spoiled import SPOILED, spoiled_signal, steady_state_fraction
from .bssfp import BSSFP, bssfp_signal
from .fisp import FISP, fisp_signal
from .inversion import INVERSION, inversion_signal, inversion_mz

FAMILIES: Dict[SequenceType, SequenceFamily] = {
    family.kind: family for family in (SPOILED, BSSFP, FISP, INVERSION)
}

_missing = set(SequenceType) - set(FAMILIES)
if _missing:
    raise ImportError(f"No sequence family registered for: {sorted(m.value for m in _missing)}")


def get_family(kind: Union[SequenceType, str]) -> SequenceFamily:
    """Look up the family for a SequenceType or alias"""
    return FAMILIES[SequenceType.parse(kind)]


__all__ = [
    'FAMILIES',
    'get_family',
    'SPOILED',
    'BSSFP',
    'FISP',
    'INVERSION',
    'spoiled_signal',
    'steady_state_fraction',
    'bssfp_signal',
    'fisp_signal',
    'inversion_signal',
    'inversion_mz',
]
