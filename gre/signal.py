"""
Steady-State Signal Evaluation

Closed-form gradient echo signal equations and the Ernst angle.

Every function here is total: non-physical or numerically singular inputs
produce 0 instead of raising, so a caller can evaluate any slider position.

Usage:
    from gre import TISSUES, evaluate_signal, ernst_angle

    s = evaluate_signal(150, 5, 60, TISSUES['GM'], 'spoiled')
    alpha = ernst_angle(150, TISSUES['GM'].t1)
"""

import logging
from typing import Union

import numpy as np

from .primitives import SequenceType, SequenceParams, TissueParams, SimulationSettings, DEFAULT_SETTINGS
from .sequences import get_family, steady_state_fraction

logger = logging.getLogger(__name__)


def evaluate_signal(
    tr: float,
    te: float,
    flip_angle_deg: float,
    tissue: TissueParams,
    sequence_type: Union[SequenceType, str] = SequenceType.SPOILED,
    ti: float = 0,
    settings: SimulationSettings = None
) -> float:
    """
    Steady-state signal amplitude of one tissue

    Args:
        tr: Repetition time (ms)
        te: Echo time (ms)
        flip_angle_deg: Flip angle (degrees)
        tissue: Tissue relaxation profile
        sequence_type: Sequence family or alias
        ti: Inversion time (ms), inversion recovery only
        settings: Simulation settings (denominator tolerance)

    Returns:
        Signal as a fraction of fully relaxed magnetization, always >= 0
    """
    if tr <= 0:
        return 0.0
    if min(tissue.t1, tissue.t2, tissue.t2star) <= 0:
        logger.debug("Non-positive relaxation constant in %r", tissue)
        return 0.0

    settings = settings or DEFAULT_SETTINGS
    family = get_family(sequence_type)

    alpha = np.deg2rad(flip_angle_deg)
    sin_alpha = np.sin(alpha)
    cos_alpha = np.cos(alpha)

    signal = family.signal(tr, te, ti, sin_alpha, cos_alpha, tissue, settings.denominator_tolerance)
    if not np.isfinite(signal):
        logger.debug("Non-finite %s signal for TR=%s TE=%s", family.kind.value, tr, te)
        return 0.0
    return float(max(0.0, signal))


def signal_for(params: SequenceParams, tissue: TissueParams,
               settings: SimulationSettings = None) -> float:
    """Signal of one tissue for a sequence parameter snapshot"""
    return evaluate_signal(params.tr, params.te, params.flip_angle, tissue,
                           params.sequence_type, params.ti, settings)


def ernst_angle(tr: float, t1: float) -> float:
    """
    Flip angle maximizing the spoiled steady-state signal

    Args:
        tr: Repetition time (ms)
        t1: Longitudinal relaxation time (ms)

    Returns:
        Ernst angle in degrees, 0 for non-positive TR or T1
    """
    if tr <= 0 or t1 <= 0:
        return 0.0
    return float(np.degrees(np.arccos(np.exp(-tr / t1))))


def steady_state_mz(tr: float, t1: float, flip_angle_deg: float,
                    settings: SimulationSettings = None) -> float:
    """
    Spoiled longitudinal steady state before each excitation

    Falls back to full relaxation (1) where the expression is singular,
    which is its limit for vanishing flip angle.
    """
    if tr <= 0 or t1 <= 0:
        return 1.0
    settings = settings or DEFAULT_SETTINGS
    e1 = np.exp(-tr / t1)
    return float(steady_state_fraction(e1, np.cos(np.deg2rad(flip_angle_deg)),
                                       settings.denominator_tolerance, fallback=1.0))
