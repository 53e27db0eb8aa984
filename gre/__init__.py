"""
GRE Simulator Library
=====================

Steady-state signal model of gradient echo pulse sequences and the k-space
encoding that goes with them, for interactive teaching visualizations.

Modules:
    primitives: Value objects, settings and factory functions
    tissues: Reference tissue catalog
    sequences: One module per sequence family (signal equations)
    signal: Signal evaluation and Ernst angle
    magnetization: Magnetization vector within one TR
    kspace: K-space trajectory and pulse sequence diagram
    clock: TR tick and phase encode line counters
    curves: Comparison chart sweeps
    lessons: Guided lessons per sequence family
    animator: Visualization and animation tools

Usage:
    from gre import TISSUES, make_sequence_params
    from gre import evaluate_signal, ernst_angle, evolve_magnetization
    from gre import kspace_coordinate, generate_curve_series
    from gre.animator import SimulatorAnimator, plot_curves
"""

from .primitives import (
    SequenceType,
    SimulationSettings,
    SequenceTiming,
    TissueParams,
    SequenceParams,
    MagnetizationState,
    KSpaceCoordinate,
    DEFAULT_SETTINGS,
    DEFAULT_TIMING,
    make_tissue,
    make_sequence_params,
)

from .tissues import TISSUES, get_tissue
from .sequence import SequenceFamily, SequenceDiagram
from .sequences import FAMILIES, get_family
from .signal import evaluate_signal, signal_for, ernst_angle, steady_state_mz
from .magnetization import evolve_magnetization, magnetization_trajectory, tick_interval_ms
from .kspace import (
    kspace_coordinate,
    kspace_trajectory,
    ky_target,
    is_acquiring,
    encoding_phase_grid,
    coherent_spins,
    sequence_diagram,
)
from .clock import TRClock, PhaseEncodeCounter, AnimationClock
from .curves import ChartKind, CurveSeries, generate_curve_series, ernst_marker, operating_point
from .lessons import Difficulty, Lesson, LessonStep, LessonPlayer, get_lesson
from .animator import SimulatorAnimator, plot_curves, animate_simulation

__version__ = '0.1.0'

__all__ = [
    # Classes
    'SequenceType',
    'SimulationSettings',
    'SequenceTiming',
    'TissueParams',
    'SequenceParams',
    'MagnetizationState',
    'KSpaceCoordinate',
    'SequenceFamily',
    'SequenceDiagram',
    'TRClock',
    'PhaseEncodeCounter',
    'AnimationClock',
    'ChartKind',
    'CurveSeries',
    'SimulatorAnimator',
    'Difficulty',
    'Lesson',
    'LessonStep',
    'LessonPlayer',
    # Data
    'DEFAULT_SETTINGS',
    'DEFAULT_TIMING',
    'TISSUES',
    'FAMILIES',
    # Functions
    'make_tissue',
    'make_sequence_params',
    'get_tissue',
    'get_family',
    'evaluate_signal',
    'signal_for',
    'ernst_angle',
    'steady_state_mz',
    'evolve_magnetization',
    'magnetization_trajectory',
    'tick_interval_ms',
    'kspace_coordinate',
    'kspace_trajectory',
    'ky_target',
    'is_acquiring',
    'encoding_phase_grid',
    'coherent_spins',
    'sequence_diagram',
    'generate_curve_series',
    'ernst_marker',
    'operating_point',
    'get_lesson',
    'plot_curves',
    'animate_simulation',
]
