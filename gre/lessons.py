"""
Guided Lessons

Scripted walkthroughs, one per sequence family and difficulty level. Each
step carries narration and, optionally, parameter changes and a chart to
switch to. LessonPlayer applies the steps to a parameter snapshot one at a
time so the host can redraw between them.

Usage:
    from gre import make_sequence_params
    from gre.lessons import LessonPlayer

    player = LessonPlayer('inversion', 'expert', make_sequence_params('inversion'))
    for step, params in player:
        print(step.text, params.ti)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .primitives import SequenceType, SequenceParams
from .curves import ChartKind

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    BASIC = 'basic'
    NORMAL = 'normal'
    EXPERT = 'expert'


@dataclass(frozen=True)
class LessonStep:
    """
    One narrated step

    Attributes:
        text: Narration
        params: SequenceParams fields to change before showing the step
        chart: Chart to switch to, if any
        delay_ms: Pause after the narration (ms)
    """
    text: str
    params: Dict[str, float] = field(default_factory=dict)
    chart: Optional[ChartKind] = None
    delay_ms: int = 1000


@dataclass(frozen=True)
class Lesson:
    title: str
    steps: Tuple[LessonStep, ...]

    def __len__(self) -> int:
        return len(self.steps)


def _lesson(title: str, *steps) -> Lesson:
    return Lesson(title, tuple(LessonStep(*s) if isinstance(s, tuple) else LessonStep(s) for s in steps))


LESSONS: Dict[SequenceType, Dict[Difficulty, Lesson]] = {
    SequenceType.SPOILED: {
        Difficulty.BASIC: _lesson(
            'Basics of T1 Contrast',
            ('TR is the heartbeat of the scanner: the time between excitations.', {'tr': 500}, None, 2000),
            ('With a short TR, tissues that recover fast (like fat) stay bright. This is T1 weighting.',
             {'tr': 200}, None, 2000),
            ('The flip angle sets how far each pulse tips the magnetization.', {'flip_angle': 20}, None, 2000),
            ('T1 contrast needs a large flip angle. Watch the contrast grow.', {'flip_angle': 70}, None, 2000),
            'Short TR plus large flip angle gives T1 contrast.',
        ),
        Difficulty.NORMAL: _lesson(
            'Spoiled GRE: T1 & PD Weighting',
            ('Spoiled gradient echo is the workhorse of T1-weighted imaging.',
             {'tr': 100, 'te': 5, 'flip_angle': 10}),
            ('A spoiler gradient destroys the transverse magnetization left after each readout.', {}, None, 2000),
            ('For T1 weighting keep TR short and raise the flip angle to 70 degrees.',
             {'tr': 100, 'flip_angle': 70}, None, 2000),
            ('For proton density weighting lengthen TR to minimize T1 effects.', {'tr': 800}, None, 1500),
            ('Then lower the flip angle: the signal now follows proton density.', {'flip_angle': 10}, None, 2000),
        ),
        Difficulty.EXPERT: _lesson(
            'Expert: RF Spoiling & Ernst Angle',
            ('TR is shorter than T2, so transverse magnetization would survive into the next repetition.',
             {}, None, 2500),
            ('RF spoiling shifts the pulse phase quadratically, typically by 117 degrees per TR, '
             'so leftover coherences cancel.', {}, None, 2500),
            ('With no memory of the transverse state the signal depends on T1 recovery alone.', {}, None, 2500),
            ('The Ernst angle maximizes it: cos(alpha) = exp(-TR/T1).', {}, ChartKind.FLIP_ANGLE, 2500),
            ('For white matter (T1 600 ms) at TR 100 ms that predicts about 32 degrees.',
             {'tr': 100}, None, 2000),
            ('Setting the flip angle to 32 degrees puts the cursor on the peak.', {'flip_angle': 32}, None, 2500),
            ('Vendor names: Siemens FLASH or VIBE, GE SPGR, Philips T1-FFE.', {}, None, 3000),
        ),
    },
    SequenceType.BSSFP: {
        Difficulty.BASIC: _lesson(
            'Bright Fluid Imaging',
            ('Balanced SSFP makes fluid very bright.', {}, None, 2000),
            ('A very short TR keeps the signal alive.', {'tr': 10}, None, 2000),
            ('Look at CSF: its signal sits well above the other tissues.', {}, None, 2000),
            'This is ideal for the heart and blood vessels.',
        ),
        Difficulty.NORMAL: _lesson(
            'Balanced SSFP (TrueFISP)',
            ('Balanced SSFP recycles the transverse magnetization.', {'tr': 10, 'te': 5, 'flip_angle': 30}),
            ('Every gradient is balanced, so Mxy reaches a steady state instead of decaying to zero.',
             {}, None, 2000),
            ('Contrast follows T2/T1. Fluids have a high T2/T1 ratio.', {}, None, 1500),
            ('The best flip angle is higher than for spoiled sequences, around 50 degrees.',
             {'flip_angle': 50}, None, 2000),
        ),
        Difficulty.EXPERT: _lesson(
            'Expert: Balanced Physics & Banding',
            ('On every axis the positive gradient lobes cancel the negative ones.', {}, None, 3000),
            ('The net gradient area is zero, so stationary spins gain no phase over a TR.', {}, None, 2500),
            ('An alpha/2 preparation pulse brings the magnetization straight into the steady state.',
             {}, None, 2500),
            ('Blood and fluid have a high T2/T1 and are bright without contrast agent.', {}, None, 2500),
            ('Off-resonant spins drift out of phase and produce banding artifacts.', {}, None, 2500),
            ('Shimming or a shorter TR removes them. Dropping TR to 5 ms.', {'tr': 5}, None, 3000),
            ('Vendor names: Siemens TrueFISP, GE FIESTA, Philips Balanced FFE.', {}, None, 3000),
        ),
    },
    SequenceType.FISP: {
        Difficulty.BASIC: _lesson(
            'Basic FISP',
            'FISP sits between spoiled GRE and balanced SSFP.',
            'It is fast and gives a different view of the tissues.',
        ),
        Difficulty.NORMAL: _lesson(
            'FISP (Steady State GRE)',
            ('FISP reaches a steady state but, unlike balanced SSFP, is not fully balanced.',
             {'tr': 50, 'te': 5, 'flip_angle': 30}),
            ('It mixes T1 and T2* contrast. Watch the signal as the flip angle changes.',
             {'flip_angle': 45}, None, 1500),
        ),
        Difficulty.EXPERT: _lesson(
            'Expert: The Hybrid Legacy',
            ('FISP rewinds the phase encode axis but leaves the readout axis unbalanced.', {}, None, 3000),
            ('The signal combines the free induction decay and the stimulated echo.', {}, None, 2500),
            ('The result is mixed T1 and T2* weighting with high motion sensitivity.', {}, None, 2500),
            ('TrueFISP has largely replaced it for its higher SNR.', {}, None, 2500),
            ('Vendor names: Siemens FISP, GE GRASS, Philips FFE.', {}, None, 3000),
        ),
    },
    SequenceType.INVERSION: {
        Difficulty.BASIC: _lesson(
            'Dark Fluid (FLAIR)',
            ('Hiding the bright CSF makes the brain easier to see.', {}, None, 2000),
            ('The inversion time TI controls which tissue goes dark.', {}, None, 2000),
            ('With a long TR and TI near 2070 ms the fluid signal disappears.',
             {'tr': 6000, 'ti': 2070}, None, 3000),
        ),
        Difficulty.NORMAL: _lesson(
            'Inversion Recovery: FLAIR',
            ('A 180 degree pulse inverts the magnetization before imaging.',
             {'tr': 6000, 'te': 20, 'ti': 100}, None, 2500),
            ('While it recovers, Mz crosses zero. Exciting at that null point hides the tissue.', {}, None, 2500),
            ('FLAIR nulls CSF.', {}, None, 2000),
            ('CSF has a long T1 (4500 ms). At TR 6000 ms its null point is near 2070 ms.',
             {'ti': 2070}, ChartKind.TI, 3000),
            ('On the TI chart the CSF curve touches zero.', {}, None, 3000),
        ),
        Difficulty.EXPERT: _lesson(
            'Expert: IR Null Points & STIR',
            ('Inversion recovery is the standard tool for tissue suppression.', {}, None, 2000),
            ('After inversion Mz recovers as 1 - 2 exp(-TI/T1).', {}, ChartKind.TI, 3000),
            ('The image shows its magnitude, hence the V shape around the null point.', {}, None, 3000),
            ('STIR suppresses fat instead.', {}, None, 2000),
            ('Fat has T1 near 250 ms, so its null point is T1 ln 2, about 173 ms.', {'ti': 173}, None, 3000),
            ('The fat curve is now nulled, which reveals edema in bone marrow.', {}, None, 3000),
            ('Unlike fat saturation pulses, STIR does not depend on field strength.', {}, None, 2500),
        ),
    },
}

_missing = [k.value for k in SequenceType if set(LESSONS.get(k, {})) != set(Difficulty)]
if _missing:
    raise ImportError(f"Incomplete lessons for: {_missing}")


def get_lesson(sequence_type: Union[SequenceType, str],
               difficulty: Union[Difficulty, str] = Difficulty.NORMAL) -> Lesson:
    """
    Look up a lesson

    Unknown difficulty names fall back to the normal lesson of the family.
    """
    lessons = LESSONS[SequenceType.parse(sequence_type)]
    try:
        level = Difficulty(str(getattr(difficulty, 'value', difficulty)).lower())
    except ValueError:
        logger.debug("Unknown difficulty %r, using normal", difficulty)
        level = Difficulty.NORMAL
    return lessons[level]


def apply_step(params: SequenceParams, step: LessonStep) -> SequenceParams:
    """Snapshot with the step's parameter changes applied"""
    return params.replace(**step.params) if step.params else params


class LessonPlayer:
    """
    Steps through a lesson, carrying the parameter snapshot along

    The lesson always runs on its own sequence family, whatever family the
    starting snapshot had.

    Args:
        sequence_type: Sequence family of the lesson
        difficulty: Difficulty level
        params: Starting parameter snapshot
    """

    def __init__(self, sequence_type: Union[SequenceType, str],
                 difficulty: Union[Difficulty, str] = Difficulty.NORMAL,
                 params: SequenceParams = None):
        kind = SequenceType.parse(sequence_type)
        self.lesson = get_lesson(kind, difficulty)
        self.start_params = (params or SequenceParams()).replace(sequence_type=kind)
        self.params = self.start_params
        self.chart: Optional[ChartKind] = None
        self.index = 0

    @property
    def finished(self) -> bool:
        return self.index >= len(self.lesson)

    def next_step(self) -> Tuple[LessonStep, SequenceParams]:
        """Apply the next step and return it with the updated snapshot"""
        if self.finished:
            raise IndexError(f"Lesson '{self.lesson.title}' has no more steps")
        step = self.lesson.steps[self.index]
        self.params = apply_step(self.params, step)
        if step.chart is not None:
            self.chart = step.chart
        self.index += 1
        logger.debug("Lesson step %d/%d: %s", self.index, len(self.lesson), step.params or '-')
        return step, self.params

    def reset(self):
        self.params = self.start_params
        self.chart = None
        self.index = 0

    def __iter__(self) -> Iterator[Tuple[LessonStep, SequenceParams]]:
        while not self.finished:
            yield self.next_step()

    def steps(self) -> List[Tuple[LessonStep, SequenceParams]]:
        return list(self)
