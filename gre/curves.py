"""
Curve Sweeps

Generates the comparison charts: for each chart kind one independent
variable is swept over a fixed grid while every other sequence parameter
is held at the current snapshot, and each tissue contributes one series.

Chart kinds:
    flipAngle    - signal vs flip angle, 0..90 step 2
    contrast     - |S(GM) - S(WM)| vs flip angle, 0..90 step 2
    tr           - signal vs TR on a fixed non-uniform grid
    te           - signal vs TE, 0..200 step 5
    ti           - signal vs TI, 0..4000 step 50
    relaxation   - T1 recovery 1 - exp(-t/T1), 0..4000 step 50
    t2relaxation - transverse decay exp(-t/T2 or T2*), 0..500 step 5
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Tuple, Union

import numpy as np

from .primitives import SequenceParams, TissueParams
from .sequences import get_family
from .signal import evaluate_signal, ernst_angle
from .tissues import TISSUES, REFERENCE_TISSUE

logger = logging.getLogger(__name__)


class ChartKind(str, Enum):
    FLIP_ANGLE = 'flipAngle'
    TR = 'tr'
    TE = 'te'
    CONTRAST = 'contrast'
    RELAXATION = 'relaxation'
    T2_RELAXATION = 't2relaxation'
    TI = 'ti'

    @classmethod
    def parse(cls, value: Union['ChartKind', str]) -> 'ChartKind':
        if isinstance(value, cls):
            return value
        for kind in cls:
            if kind.value.lower() == str(value).strip().lower():
                return kind
        raise ValueError(f"Unknown chart kind '{value}' (expected one of: {', '.join(k.value for k in cls)})")


TR_STEPS = [0, 5, 10, 20, 30, 40, 50, 75, 100, 150, 200, 300, 400, 500, 750, 1000, 1500, 2000, 3000, 5000]

GRIDS = {
    ChartKind.FLIP_ANGLE: np.arange(0, 91, 2),
    ChartKind.CONTRAST: np.arange(0, 91, 2),
    ChartKind.TR: np.array(TR_STEPS),
    ChartKind.TE: np.arange(0, 201, 5),
    ChartKind.TI: np.arange(0, 4001, 50),
    ChartKind.RELAXATION: np.arange(0, 4001, 50),
    ChartKind.T2_RELAXATION: np.arange(0, 501, 5),
}

AXIS_LABELS = {
    ChartKind.FLIP_ANGLE: ('Flip angle (°)', 'Signal'),
    ChartKind.CONTRAST: ('Flip angle (°)', '|S(GM) - S(WM)|'),
    ChartKind.TR: ('TR (ms)', 'Signal'),
    ChartKind.TE: ('TE (ms)', 'Signal'),
    ChartKind.TI: ('TI (ms)', 'Signal'),
    ChartKind.RELAXATION: ('Time (ms)', 'Mz / M0'),
    ChartKind.T2_RELAXATION: ('Time (ms)', 'Mxy / M0'),
}

CONTRAST_KEY = 'Contrast'


@dataclass
class CurveSeries:
    """
    Chart data for one chart kind

    Attributes:
        kind: Chart kind
        x: Independent variable grid (ascending)
        series: Ordered mapping key -> y values (one per x)
        x_label, y_label: Axis labels
    """
    kind: ChartKind
    x: np.ndarray
    series: Dict[str, np.ndarray] = field(default_factory=dict)
    x_label: str = ''
    y_label: str = ''

    @property
    def keys(self) -> List[str]:
        return list(self.series)

    def points(self) -> Iterator[Dict[str, float]]:
        """Yield {'x': x, key: y, ...} for each grid point"""
        for i, x in enumerate(self.x):
            point = {'x': float(x)}
            for key, values in self.series.items():
                point[key] = float(values[i])
            yield point

    def to_records(self) -> List[Dict[str, float]]:
        return list(self.points())

    def __len__(self) -> int:
        return len(self.x)


def _sweep(grid, tissues, func) -> Dict[str, np.ndarray]:
    return {key: np.array([func(value, tissue) for value in grid]) for key, tissue in tissues.items()}


def generate_curve_series(
    chart_kind: Union[ChartKind, str],
    params: SequenceParams,
    tissues: Dict[str, TissueParams] = None
) -> CurveSeries:
    """
    Generate the series of one chart

    Args:
        chart_kind: Chart kind or its name
        params: Sequence parameter snapshot (held fixed except the swept variable)
        tissues: Tissue catalog, defaults to TISSUES

    Returns:
        CurveSeries object
    """
    kind = ChartKind.parse(chart_kind)
    tissues = TISSUES if tissues is None else tissues
    grid = GRIDS[kind]
    p = params
    seq = p.sequence_type

    if kind is ChartKind.FLIP_ANGLE:
        series = _sweep(grid, tissues, lambda a, tis: evaluate_signal(p.tr, p.te, a, tis, seq, p.ti))
    elif kind is ChartKind.CONTRAST:
        gm, wm = tissues['GM'], tissues['WM']
        series = {CONTRAST_KEY: np.array([
            abs(evaluate_signal(p.tr, p.te, a, gm, seq, p.ti) - evaluate_signal(p.tr, p.te, a, wm, seq, p.ti))
            for a in grid
        ])}
    elif kind is ChartKind.TR:
        series = _sweep(grid, tissues, lambda tr, tis: evaluate_signal(tr, p.te, p.flip_angle, tis, seq, p.ti))
    elif kind is ChartKind.TE:
        series = _sweep(grid, tissues, lambda te, tis: evaluate_signal(p.tr, te, p.flip_angle, tis, seq, p.ti))
    elif kind is ChartKind.TI:
        series = _sweep(grid, tissues, lambda ti, tis: evaluate_signal(p.tr, p.te, p.flip_angle, tis, seq, ti))
    elif kind is ChartKind.RELAXATION:
        series = {key: 1 - np.exp(-grid / tis.t1) for key, tis in tissues.items()}
    else:
        family = get_family(seq)
        series = {key: np.exp(-grid / family.transverse_decay(tis)) for key, tis in tissues.items()}

    x_label, y_label = AXIS_LABELS[kind]
    logger.debug("Generated %s chart: %d points x %d series", kind.value, len(grid), len(series))
    return CurveSeries(kind=kind, x=grid.astype(float), series=series, x_label=x_label, y_label=y_label)


def ernst_marker(params: SequenceParams, tissues: Dict[str, TissueParams] = None,
                 reference: str = REFERENCE_TISSUE) -> float:
    """Ernst angle of the reference tissue, marked on the flip angle chart"""
    tissues = TISSUES if tissues is None else tissues
    return ernst_angle(params.tr, tissues[reference].t1)


def operating_point(
    chart_kind: Union[ChartKind, str],
    params: SequenceParams,
    tissues: Dict[str, TissueParams] = None,
    reference: str = REFERENCE_TISSUE
) -> Tuple[float, float]:
    """
    Chart cursor for the current parameters

    Returns:
        (x, y): the current value of the swept variable and the reference
        tissue's value there (|S(GM) - S(WM)| on the contrast chart)
    """
    kind = ChartKind.parse(chart_kind)
    tissues = TISSUES if tissues is None else tissues
    tissue = tissues[reference]
    p = params

    if kind is ChartKind.RELAXATION:
        return p.tr, float(1 - np.exp(-p.tr / tissue.t1))
    if kind is ChartKind.T2_RELAXATION:
        decay = get_family(p.sequence_type).transverse_decay(tissue)
        return p.te, float(np.exp(-p.te / decay))

    x = {
        ChartKind.FLIP_ANGLE: p.flip_angle,
        ChartKind.CONTRAST: p.flip_angle,
        ChartKind.TR: p.tr,
        ChartKind.TE: p.te,
        ChartKind.TI: p.ti,
    }[kind]
    y = evaluate_signal(p.tr, p.te, p.flip_angle, tissue, p.sequence_type, p.ti)
    if kind is ChartKind.CONTRAST:
        y = abs(y - evaluate_signal(p.tr, p.te, p.flip_angle, tissues['WM'], p.sequence_type, p.ti))
    return x, y
