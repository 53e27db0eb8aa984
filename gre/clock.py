"""
Animation Clocks

The simulator owns exactly two counters:
- TRClock: tick within the current TR (0..tr_ticks), one tick per
  tick_interval_ms(tr)
- PhaseEncodeCounter: current k-space line, advanced on a fixed wall-clock
  period independent of TR

AnimationClock drives both from elapsed wall time reported by the host
(a matplotlib timer, a GUI event loop, a test). It holds no threads: the
host calls step() and the clock fires whatever ticks are due.
"""

import logging

from .primitives import SimulationSettings, DEFAULT_SETTINGS
from .magnetization import tick_interval_ms

logger = logging.getLogger(__name__)


class TRClock:
    """
    Position within the current repetition

    Example:
        clock = TRClock()
        clock.advance()      # 1
        clock.set_manual(50)
        clock.reset()        # 0
    """

    def __init__(self, settings: SimulationSettings = None):
        self.settings = settings or DEFAULT_SETTINGS
        self.value = 0

    def advance(self) -> int:
        """Step one tick, wrapping after the last tick of the TR"""
        self.value = (self.value + 1) % (self.settings.tr_ticks + 1)
        return self.value

    def reset(self):
        self.value = 0

    def set_manual(self, value: int) -> int:
        """Scrub to a tick, clamped to the TR"""
        self.value = min(max(int(value), 0), self.settings.tr_ticks)
        return self.value

    def __repr__(self) -> str:
        return f"TRClock({self.value}/{self.settings.tr_ticks})"


class PhaseEncodeCounter:
    """
    Current phase encode line

    Advances modulo total_lines while running. Scrubbing to a line pauses
    automatic advance until resume() is called; pausing keeps the line.

    Args:
        settings: Simulation settings (number of lines)
        start: Initial line, defaults to the centre of k-space
    """

    def __init__(self, settings: SimulationSettings = None, start: int = None):
        self.settings = settings or DEFAULT_SETTINGS
        self.start = self.settings.total_lines // 2 if start is None else self._clamp(start)
        self.value = self.start
        self.running = True

    def _clamp(self, value: int) -> int:
        return min(max(int(value), 0), self.settings.total_lines - 1)

    def advance(self) -> int:
        """Acquire the next line (no-op while paused)"""
        if self.running:
            self.value = (self.value + 1) % self.settings.total_lines
        return self.value

    def reset(self):
        self.value = self.start

    def set_manual(self, value: int) -> int:
        """Jump to a line and pause automatic acquisition"""
        self.running = False
        self.value = self._clamp(value)
        return self.value

    def pause(self):
        self.running = False

    def resume(self):
        self.running = True

    def __repr__(self) -> str:
        state = 'running' if self.running else 'paused'
        return f"PhaseEncodeCounter({self.value}/{self.settings.total_lines}, {state})"


class AnimationClock:
    """
    Host-driven scheduler for both counters

    Args:
        tr: Repetition time (ms), sets the TR tick period
        settings: Simulation settings
        tr_clock: Existing TRClock to drive
        line_counter: Existing PhaseEncodeCounter to drive

    Example:
        clock = AnimationClock(tr=150)
        clock.step(40)          # two TR ticks at 20 ms each
        clock.set_tr(3000)      # re-arm at 30 ms per tick
    """

    def __init__(self, tr: float, settings: SimulationSettings = None,
                 tr_clock: TRClock = None, line_counter: PhaseEncodeCounter = None):
        self.settings = settings or DEFAULT_SETTINGS
        self.tr_clock = tr_clock or TRClock(self.settings)
        self.line_counter = line_counter or PhaseEncodeCounter(self.settings)
        self.tr = tr
        self.tick_ms = tick_interval_ms(tr, self.settings)
        self._tr_elapsed = 0.0
        self._line_elapsed = 0.0

    def set_tr(self, tr: float):
        """Re-arm the TR timer for a new TR, dropping the pending interval"""
        if tr == self.tr:
            return
        self.tr = tr
        self.tick_ms = tick_interval_ms(tr, self.settings)
        self._tr_elapsed = 0.0
        logger.debug("TR clock re-armed at %.1f ms per tick", self.tick_ms)

    def step(self, elapsed_ms: float) -> int:
        """
        Advance wall time and fire every due tick

        Args:
            elapsed_ms: Wall time since the previous call (ms)

        Returns:
            Number of ticks fired across both counters
        """
        fired = 0

        self._tr_elapsed += elapsed_ms
        while self._tr_elapsed >= self.tick_ms:
            self._tr_elapsed -= self.tick_ms
            self.tr_clock.advance()
            fired += 1

        # The line timer runs even while paused; a paused counter ignores it
        self._line_elapsed += elapsed_ms
        while self._line_elapsed >= self.settings.line_period_ms:
            self._line_elapsed -= self.settings.line_period_ms
            self.line_counter.advance()
            fired += 1

        return fired

    @property
    def time_in_tr(self) -> int:
        return self.tr_clock.value

    @property
    def phase_encode_line(self) -> int:
        return self.line_counter.value
