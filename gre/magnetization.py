"""
Magnetization Evolution Within One TR

Reconstructs the magnetization vector at any tick of the repetition for the
vector animation. The pulse instant uses the steady state from the signal
equations; between pulses Mz recovers with T1 and Mxy decays with T2
(balanced SSFP) or T2* (all other families).

The precession phase advances at SimulationSettings.precession_rate, a
visual rate chosen for readable animation, not a Larmor frequency.
"""

import logging
from typing import Dict

import numpy as np

from .primitives import (
    SequenceType, SequenceParams, TissueParams, MagnetizationState,
    SimulationSettings, DEFAULT_SETTINGS
)
from .sequences import get_family, inversion_mz
from .signal import steady_state_mz

logger = logging.getLogger(__name__)


def tick_interval_ms(tr: float, settings: SimulationSettings = None) -> float:
    """
    Wall-clock period of the TR clock

    One TR spans settings.tr_ticks ticks, but a tick never comes faster
    than settings.min_tick_ms.
    """
    settings = settings or DEFAULT_SETTINGS
    return max(tr / settings.tr_ticks, settings.min_tick_ms)


def available_magnetization(params: SequenceParams, tissue: TissueParams,
                            settings: SimulationSettings = None) -> float:
    """Longitudinal magnetization available to the excitation pulse"""
    if tissue.t1 <= 0:
        logger.debug("Non-positive T1 in %r, assuming full relaxation", tissue)
        return 1.0
    if params.sequence_type is SequenceType.INVERSION:
        return float(inversion_mz(params.tr, params.ti, tissue.t1))
    return steady_state_mz(params.tr, tissue.t1, params.flip_angle, settings)


def evolve_magnetization(
    params: SequenceParams,
    tissue: TissueParams,
    time_in_tr: float,
    settings: SimulationSettings = None
) -> MagnetizationState:
    """
    Magnetization at a tick of the current TR

    Args:
        params: Sequence parameter snapshot
        tissue: Tissue relaxation profile
        time_in_tr: Progress through the TR in ticks, 0..settings.tr_ticks
        settings: Simulation settings

    Returns:
        MagnetizationState with mz, mxy and phase
    """
    settings = settings or DEFAULT_SETTINGS

    mz_available = available_magnetization(params, tissue, settings)
    alpha = params.flip_angle_rad
    mz_start = mz_available * np.cos(alpha)
    mxy_start = abs(mz_available * np.sin(alpha))

    time_ms = (time_in_tr / settings.tr_ticks) * params.tr

    decay_const = get_family(params.sequence_type).transverse_decay(tissue)
    recovery = np.exp(-time_ms / tissue.t1) if tissue.t1 > 0 else 0.0
    decay = np.exp(-time_ms / decay_const) if decay_const > 0 else 0.0

    mz = 1 - (1 - mz_start) * recovery
    mxy = mxy_start * decay
    phase = time_ms * settings.precession_rate

    return MagnetizationState(mz=float(mz), mxy=float(mxy), phase=float(phase))


def magnetization_trajectory(
    params: SequenceParams,
    tissue: TissueParams,
    settings: SimulationSettings = None
) -> Dict[str, np.ndarray]:
    """
    Magnetization at every tick of one TR

    Returns:
        Dictionary with 'tick', 'time_ms', 'mz', 'mxy', 'phase', 'mx', 'my' arrays
    """
    settings = settings or DEFAULT_SETTINGS
    ticks = np.arange(settings.tr_ticks + 1)
    states = [evolve_magnetization(params, tissue, t, settings) for t in ticks]

    mxy = np.array([s.mxy for s in states])
    phase = np.array([s.phase for s in states])
    return {
        'tick': ticks,
        'time_ms': ticks / settings.tr_ticks * params.tr,
        'mz': np.array([s.mz for s in states]),
        'mxy': mxy,
        'phase': phase,
        'mx': mxy * np.cos(phase),
        'my': mxy * np.sin(phase),
    }
