"""
K-space Trajectory Model

Maps a tick of the TR and the current phase encode line to a normalized
k-space position, following the fixed timing template of the pulse
sequence diagram (see SequenceTiming):

    t < 20        (0, 0)                      before encoding
    20 <= t <= 35 ramp to (-1, ky_target)     phase encode + frequency prewind
    35 < t < 45   hold (-1, ky_target)
    45 <= t <= 75 kx sweeps -1 -> +1          readout
    t > 75        hold (+1, ky_target)

For the spoiled family the spoiler returns the trajectory to the origin
from t = 90 on.

Also builds the pulse sequence diagram lanes and the spin phase grid used
to illustrate spatial encoding.
"""

import logging
from typing import Union

import numpy as np

from .primitives import (
    SequenceType, SequenceParams, KSpaceCoordinate,
    SimulationSettings, SequenceTiming, DEFAULT_SETTINGS, DEFAULT_TIMING
)
from .sequence import SequenceDiagram
from .sequences import get_family

logger = logging.getLogger(__name__)


def ky_target(phase_encode_line: int, gy_amp: float = 1.0,
              settings: SimulationSettings = None) -> float:
    """
    Phase encode position of a k-space line

    Line 0 maps to +gy_amp and the last line to -gy_amp.
    """
    settings = settings or DEFAULT_SETTINGS
    last = settings.total_lines - 1
    line = min(max(int(phase_encode_line), 0), last)
    ky_visual = 1 - 2 * (line / last) if last > 0 else 0.0
    return ky_visual * gy_amp


def kspace_coordinate(
    time_in_tr: float,
    phase_encode_line: int,
    sequence_type: Union[SequenceType, str] = SequenceType.SPOILED,
    gy_amp: float = 1.0,
    settings: SimulationSettings = None,
    timing: SequenceTiming = None
) -> KSpaceCoordinate:
    """
    K-space position at a tick of the TR

    Args:
        time_in_tr: Progress through the TR (percent)
        phase_encode_line: Current phase encode line, 0..total_lines-1
        sequence_type: Sequence family or alias
        gy_amp: Phase encode gradient scale factor
        settings: Simulation settings (number of lines)
        timing: Diagram timing template

    Returns:
        KSpaceCoordinate (kx, ky)
    """
    timing = timing or DEFAULT_TIMING
    ky_line = ky_target(phase_encode_line, gy_amp, settings)
    t = time_in_tr

    if timing.spoiler_active(t, sequence_type):
        return KSpaceCoordinate(0.0, 0.0)

    if t < timing.phase_start:
        kx, ky = 0.0, 0.0
    elif t <= timing.phase_end:
        progress = (t - timing.phase_start) / (timing.phase_end - timing.phase_start)
        kx, ky = -progress, progress * ky_line
    elif t < timing.read_start:
        kx, ky = -1.0, ky_line
    elif t <= timing.read_end:
        progress = (t - timing.read_start) / (timing.read_end - timing.read_start)
        kx, ky = -1.0 + 2.0 * progress, ky_line
    else:
        kx, ky = 1.0, ky_line

    return KSpaceCoordinate(float(kx), float(ky))


def is_acquiring(time_in_tr: float, timing: SequenceTiming = None) -> bool:
    """True while the ADC is open (readout window)"""
    return (timing or DEFAULT_TIMING).in_readout(time_in_tr)


def kspace_trajectory(
    phase_encode_line: int,
    sequence_type: Union[SequenceType, str] = SequenceType.SPOILED,
    gy_amp: float = 1.0,
    settings: SimulationSettings = None,
    timing: SequenceTiming = None
) -> np.ndarray:
    """
    K-space path of one TR sampled at every tick

    Returns:
        Array of shape (tr_ticks + 1, 2) with (kx, ky) rows
    """
    settings = settings or DEFAULT_SETTINGS
    ticks = np.arange(settings.tr_ticks + 1)
    return np.array([
        kspace_coordinate(t, phase_encode_line, sequence_type, gy_amp, settings, timing).as_array()
        for t in ticks
    ])


# =============================================================================
# Spatial Encoding Illustration
# =============================================================================

def encoding_phase_grid(kx: float, ky: float, size: int = 5) -> np.ndarray:
    """
    Phase of each spin in a size x size grid of voxels

    Rows are offsets along the phase encode axis, columns
    along the frequency axis. A spin's phase is
    -row_offset * ky * pi + col_offset * kx * pi.

    Returns:
        (size, size) array of phase angles (rad)
    """
    offsets = np.arange(size) - (size - 1) / 2
    row_offset = offsets[:, np.newaxis]
    col_offset = offsets[np.newaxis, :]
    return -row_offset * (ky * np.pi) + col_offset * (kx * np.pi)


def coherent_spins(angles: np.ndarray, threshold: float = 0.8) -> np.ndarray:
    """Mask of spins whose phase is aligned with the receive axis"""
    return np.cos(angles) > threshold


# =============================================================================
# Pulse Sequence Diagram
# =============================================================================

def sequence_diagram(
    params: SequenceParams,
    phase_encode_line: int,
    settings: SimulationSettings = None,
    timing: SequenceTiming = None
) -> SequenceDiagram:
    """
    Build the RF / gradient / ADC events of one TR

    Args:
        params: Sequence parameter snapshot
        phase_encode_line: Current phase encode line (sets the Gy lobe)
        settings: Simulation settings
        timing: Diagram timing template

    Returns:
        SequenceDiagram object
    """
    timing = timing or DEFAULT_TIMING
    family = get_family(params.sequence_type)
    ky_line = ky_target(phase_encode_line, params.gy_amp, settings)

    diagram = SequenceDiagram(family.kind, timing)

    # Excitation with slice select and rephasing lobe
    diagram.add_event('RF', timing.rf_start, timing.rf_end, params.flip_angle / 90,
                      label=f'{params.flip_angle:g}°')
    diagram.add_event('Gz', timing.rf_start, timing.rf_end, params.gz_amp, label='slice select')
    diagram.add_event('Gz', timing.rf_end, timing.phase_start, -params.gz_amp, label='rephase')
    if family.has_spoiler:
        diagram.add_event('Gz', timing.spoiler_start, min(timing.spoiler_start + 8, 100),
                          params.gz_amp * 4 / 3, label='spoiler', open_ended=True)

    # Phase encoding, rewound at the end of the TR when balanced
    diagram.add_event('Gy', timing.phase_start, timing.phase_end, ky_line, label='phase encode')
    if family.has_rewinder:
        diagram.add_event('Gy', timing.spoiler_start, min(timing.spoiler_start + 5, 100),
                          -ky_line, label='rewinder')

    # Frequency prewind and readout
    diagram.add_event('Gx', timing.phase_start, timing.phase_end, -params.gx_amp * 2 / 3,
                      label='prewind')
    diagram.add_event('Gx', timing.read_start, timing.read_end, params.gx_amp, label='readout')
    diagram.add_event('ADC', timing.read_start, timing.read_end, 1.0, label='ADC')

    logger.debug("Built %r for line %d", diagram, phase_encode_line)
    return diagram
