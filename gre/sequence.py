"""
GRE Sequence Containers

This module provides the SequenceFamily record that every sequence module
in ``gre.sequences`` registers, and the SequenceDiagram container holding the
events of one TR for the pulse sequence diagram.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .primitives import SequenceType, TissueParams, SequenceTiming, DEFAULT_TIMING

logger = logging.getLogger(__name__)

LANES = ('RF', 'Gz', 'Gy', 'Gx', 'ADC')

# signal(tr, te, ti, sin_alpha, cos_alpha, tissue, tolerance) -> unclamped signal
SignalEquation = Callable[[float, float, float, float, float, TissueParams, float], float]


def safe_divide(numerator: float, denominator: float, tolerance: float = 1e-6) -> Optional[float]:
    """
    Divide, or return None when the denominator is numerically singular

    Args:
        numerator: Dividend
        denominator: Divisor
        tolerance: Denominators with |d| below this count as singular

    Returns:
        numerator / denominator, or None
    """
    if abs(denominator) < tolerance:
        logger.debug("Singular steady-state denominator %.3g", denominator)
        return None
    return numerator / denominator


@dataclass(frozen=True)
class SequenceFamily:
    """
    One gradient echo sequence family

    Attributes:
        kind: SequenceType tag
        label: Display name
        description: One-line summary of the contrast behaviour
        equation: Human-readable steady-state signal equation
        signal: Steady-state signal strategy (unclamped)
        decay: Tissue attribute governing transverse decay ('t2' or 't2star')
        has_spoiler: Gz spoiler lobe after the readout
        has_rewinder: Gy rewinder lobe after the readout
    """
    kind: SequenceType
    label: str
    description: str
    equation: str
    signal: SignalEquation
    decay: str = 't2star'
    has_spoiler: bool = False
    has_rewinder: bool = False

    def transverse_decay(self, tissue: TissueParams) -> float:
        """Time constant of transverse decay for this family (ms)"""
        return getattr(tissue, self.decay)


@dataclass(frozen=True)
class DiagramEvent:
    """
    Event on one lane of the pulse sequence diagram

    Attributes:
        lane: 'RF', 'Gz', 'Gy', 'Gx' or 'ADC'
        start: Start (percent of TR)
        end: End (percent of TR)
        amplitude: Signed display amplitude
        label: Short annotation
        open_ended: Active from start until the end of the TR
    """
    lane: str
    start: float
    end: float
    amplitude: float
    label: str = ''
    open_ended: bool = False

    def is_active(self, t: float) -> bool:
        if self.open_ended:
            return t >= self.start
        return self.start <= t <= self.end


class SequenceDiagram:
    """
    Pulse sequence diagram of one TR

    Stores the RF, gradient and ADC events of a single repetition on a
    percent-of-TR time axis and samples them as lane waveforms for plotting.

    Example:
        diagram = SequenceDiagram(SequenceType.SPOILED)
        diagram.add_event('RF', 5, 15, 1.0, label='60°')
        t, rf = diagram.get_lane_waveforms()['RF']
    """

    def __init__(self, kind: SequenceType, timing: SequenceTiming = None):
        self.kind = SequenceType.parse(kind)
        self.timing = timing or DEFAULT_TIMING
        self.events: List[DiagramEvent] = []

    def add_event(self, lane: str, start: float, end: float, amplitude: float,
                  label: str = '', open_ended: bool = False):
        """Add an event on one lane"""
        if lane not in LANES:
            raise ValueError(f"Unknown lane '{lane}' (expected one of: {', '.join(LANES)})")
        self.events.append(DiagramEvent(lane, start, end, amplitude, label, open_ended))

    def events_on(self, lane: str) -> List[DiagramEvent]:
        return [e for e in self.events if e.lane == lane]

    def active_events(self, t: float) -> List[DiagramEvent]:
        """Events running at tick t"""
        return [e for e in self.events if e.is_active(t)]

    def get_lane_waveforms(self, n_points: int = 1001) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
        """
        Sample every lane on a 0..100 percent axis

        Returns:
            Dictionary lane -> (t, amplitude) arrays
        """
        t = np.linspace(0, 100, n_points)
        waveforms = {}
        for lane in LANES:
            amp = np.zeros(n_points)
            for event in self.events_on(lane):
                mask = (t >= event.start) & (t <= event.end)
                amp[mask] = event.amplitude
            waveforms[lane] = (t, amp)
        return waveforms

    def __repr__(self) -> str:
        return f"SequenceDiagram({self.kind.value}, {len(self.events)} events)"
