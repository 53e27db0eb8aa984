"""
GRE Primitives - Core value objects for the gradient echo simulator

This module provides the fundamental records passed through the simulator:
- SequenceType: The four gradient echo sequence families
- SimulationSettings: Visualization tuning constants
- SequenceTiming: Percent-of-TR timing template of the pulse sequence diagram
- TissueParams: Relaxation profile of one tissue
- SequenceParams: Snapshot of the user's sequence parameters
- MagnetizationState: Magnetization vector at one instant
- KSpaceCoordinate: Normalized spatial frequency position

Each user-facing record has an associated "make_*" factory function that
validates its input.
"""

import logging
import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np

logger = logging.getLogger(__name__)


# =============================================================================
# Sequence Families
# =============================================================================

class SequenceType(str, Enum):
    """
    Gradient echo sequence family

    Members:
        SPOILED: Spoiled GRE (FLASH/SPGR)
        BSSFP: Balanced steady-state free precession (TrueFISP)
        FISP: Steady-state hybrid GRE
        INVERSION: Inversion recovery prepared GRE
    """
    SPOILED = 'spoiled'
    BSSFP = 'bssfp'
    FISP = 'fisp'
    INVERSION = 'inversion'

    @classmethod
    def parse(cls, value: Union['SequenceType', str]) -> 'SequenceType':
        """Resolve an enum member, its value, or a descriptive alias"""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace('_', '-')
        if key in _SEQUENCE_ALIASES:
            return _SEQUENCE_ALIASES[key]
        valid = ', '.join(m.value for m in cls)
        raise ValueError(f"Unknown sequence type '{value}' (expected one of: {valid})")


_SEQUENCE_ALIASES = {
    'spoiled': SequenceType.SPOILED,
    'spgr': SequenceType.SPOILED,
    'flash': SequenceType.SPOILED,
    'bssfp': SequenceType.BSSFP,
    'balanced-steady-state': SequenceType.BSSFP,
    'truefisp': SequenceType.BSSFP,
    'fisp': SequenceType.FISP,
    'steady-state-hybrid': SequenceType.FISP,
    'inversion': SequenceType.INVERSION,
    'inversion-recovery': SequenceType.INVERSION,
    'ir': SequenceType.INVERSION,
}


# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class SimulationSettings:
    """
    Visualization tuning constants

    These drive the animation only; none of them is a physical constant.

    Attributes:
        precession_rate: Visual precession rate of the transverse vector (rad/ms)
        line_period_ms: Wall-clock period of the phase encode line clock (ms)
        total_lines: Number of phase encode lines in k-space
        min_tick_ms: Fastest allowed period of the TR clock (ms)
        tr_ticks: Number of ticks that make up one TR
        denominator_tolerance: Steady-state denominators below this are singular

    Example:
        # Slower precession, 64-line k-space
        settings = SimulationSettings(precession_rate=0.05, total_lines=64)
    """
    precession_rate: float = 0.1
    line_period_ms: float = 700.0
    total_lines: int = 32
    min_tick_ms: float = 20.0
    tr_ticks: int = 100
    denominator_tolerance: float = 1e-6


DEFAULT_SETTINGS = SimulationSettings()


@dataclass(frozen=True)
class SequenceTiming:
    """
    Pulse sequence diagram timing template

    All values are percent of TR and apply uniformly whatever the absolute TR.

    Attributes:
        rf_start, rf_end: RF excitation window
        phase_start, phase_end: Phase encode / frequency prewind window
        read_start, read_end: Readout (ADC) window
        spoiler_start: Onset of the spoiler (spoiled) or rewinder (balanced)
    """
    rf_start: float = 5
    rf_end: float = 15
    phase_start: float = 20
    phase_end: float = 35
    read_start: float = 45
    read_end: float = 75
    spoiler_start: float = 90

    def in_rf(self, t: float) -> bool:
        return self.rf_start <= t <= self.rf_end

    def in_prewind(self, t: float) -> bool:
        return self.phase_start <= t <= self.phase_end

    def in_readout(self, t: float) -> bool:
        return self.read_start <= t <= self.read_end

    def spoiler_active(self, t: float, sequence_type: Union[SequenceType, str]) -> bool:
        return SequenceType.parse(sequence_type) is SequenceType.SPOILED and t >= self.spoiler_start


DEFAULT_TIMING = SequenceTiming()


# =============================================================================
# Value Objects
# =============================================================================

@dataclass(frozen=True)
class TissueParams:
    """
    Tissue relaxation profile

    Attributes:
        t1: Longitudinal relaxation time (ms)
        t2: Transverse relaxation time (ms)
        t2star: Transverse relaxation time including dephasing (ms)
        pd: Proton density (0-1)
        name: Display name
    """
    t1: float
    t2: float
    t2star: float
    pd: float
    name: str = ''


@dataclass(frozen=True)
class SequenceParams:
    """
    Sequence parameter snapshot

    Owned by the caller; the simulator reads it and never keeps it.

    Attributes:
        tr: Repetition time (ms)
        te: Echo time (ms)
        ti: Inversion time (ms)
        flip_angle: Flip angle (degrees)
        sequence_type: Sequence family
        gz_amp, gy_amp, gx_amp: Gradient scale factors (dimensionless)
    """
    tr: float = 150.0
    te: float = 5.0
    ti: float = 150.0
    flip_angle: float = 60.0
    sequence_type: SequenceType = SequenceType.SPOILED
    gz_amp: float = 1.0
    gy_amp: float = 1.0
    gx_amp: float = 1.2

    def __post_init__(self):
        object.__setattr__(self, 'sequence_type', SequenceType.parse(self.sequence_type))

    @property
    def flip_angle_rad(self) -> float:
        return float(np.deg2rad(self.flip_angle))

    def replace(self, **changes) -> 'SequenceParams':
        """Return a new snapshot with some fields changed"""
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class MagnetizationState:
    """
    Magnetization vector at one instant of the TR

    Attributes:
        mz: Longitudinal component (signed fraction of equilibrium)
        mxy: Transverse magnitude (>= 0)
        phase: Precession phase (rad), not wrapped
    """
    mz: float
    mxy: float
    phase: float

    @property
    def mx(self) -> float:
        return self.mxy * float(np.cos(self.phase))

    @property
    def my(self) -> float:
        return self.mxy * float(np.sin(self.phase))

    @property
    def vector(self) -> np.ndarray:
        """Cartesian (mx, my, mz) vector"""
        return np.array([self.mx, self.my, self.mz])


@dataclass(frozen=True)
class KSpaceCoordinate:
    """Normalized spatial frequency position (kx = frequency, ky = phase)"""
    kx: float = 0.0
    ky: float = 0.0

    def as_array(self) -> np.ndarray:
        return np.array([self.kx, self.ky])


# =============================================================================
# Factory Functions
# =============================================================================

def make_tissue(
    t1: float,
    t2: float,
    t2star: float = None,
    pd: float = 1.0,
    name: str = ''
) -> TissueParams:
    """
    Create a validated tissue profile

    Args:
        t1: T1 (ms), must be positive
        t2: T2 (ms), must be positive
        t2star: T2* (ms), defaults to T2
        pd: Proton density, 0-1
        name: Display name

    Returns:
        TissueParams object
    """
    if t2star is None:
        t2star = t2
    for label, value in (('t1', t1), ('t2', t2), ('t2star', t2star)):
        if value <= 0:
            raise ValueError(f"{label} must be positive, got {value}")
    if not 0 <= pd <= 1:
        raise ValueError(f"pd must be within [0, 1], got {pd}")
    return TissueParams(t1=float(t1), t2=float(t2), t2star=float(t2star), pd=float(pd), name=name)


def make_sequence_params(
    sequence_type: Union[SequenceType, str] = SequenceType.SPOILED,
    tr: float = 150.0,
    te: float = 5.0,
    flip_angle: float = 60.0,
    ti: float = 150.0,
    gz_amp: float = 1.0,
    gy_amp: float = 1.0,
    gx_amp: float = 1.2
) -> SequenceParams:
    """
    Create a validated sequence parameter snapshot

    Args:
        sequence_type: Sequence family or alias
        tr: Repetition time (ms), must be positive
        te: Echo time (ms)
        flip_angle: Flip angle (degrees), 0-90
        ti: Inversion time (ms)
        gz_amp, gy_amp, gx_amp: Gradient scale factors, must be positive

    Returns:
        SequenceParams object
    """
    sequence_type = SequenceType.parse(sequence_type)

    if tr <= 0:
        raise ValueError(f"TR must be positive, got {tr}")
    if te < 0:
        raise ValueError(f"TE must not be negative, got {te}")
    if ti < 0:
        raise ValueError(f"TI must not be negative, got {ti}")
    if not 0 <= flip_angle <= 90:
        raise ValueError(f"Flip angle must be within [0, 90] degrees, got {flip_angle}")
    for label, value in (('gz_amp', gz_amp), ('gy_amp', gy_amp), ('gx_amp', gx_amp)):
        if value <= 0:
            raise ValueError(f"{label} must be positive, got {value}")

    if te >= tr:
        logger.debug("TE %.1f ms is not shorter than TR %.1f ms", te, tr)

    return SequenceParams(
        tr=float(tr),
        te=float(te),
        ti=float(ti),
        flip_angle=float(flip_angle),
        sequence_type=sequence_type,
        gz_amp=float(gz_amp),
        gy_amp=float(gy_amp),
        gx_amp=float(gx_amp)
    )
