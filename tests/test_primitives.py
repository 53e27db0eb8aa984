"""Tests for value objects, factories and the tissue catalog"""

import dataclasses
import logging

import numpy as np
import pytest

from gre import (
    TISSUES, SequenceType, SequenceParams, SequenceTiming, MagnetizationState,
    KSpaceCoordinate, make_tissue, make_sequence_params, get_tissue
)
from gre.logging_config import setup_logging


@pytest.mark.parametrize('name, expected', [
    ('spoiled', SequenceType.SPOILED),
    ('FLASH', SequenceType.SPOILED),
    ('spgr', SequenceType.SPOILED),
    ('balanced-steady-state', SequenceType.BSSFP),
    ('TrueFISP', SequenceType.BSSFP),
    ('steady_state_hybrid', SequenceType.FISP),
    ('inversion-recovery', SequenceType.INVERSION),
    ('IR', SequenceType.INVERSION),
    (SequenceType.FISP, SequenceType.FISP),
])
def test_sequence_type_parse(name, expected):
    assert SequenceType.parse(name) is expected


def test_sequence_type_parse_unknown():
    with pytest.raises(ValueError, match='Unknown sequence type'):
        SequenceType.parse('epi')


def test_sequence_params_defaults():
    params = SequenceParams()
    assert (params.tr, params.te, params.ti, params.flip_angle) == (150, 5, 150, 60)
    assert params.sequence_type is SequenceType.SPOILED
    assert (params.gz_amp, params.gy_amp, params.gx_amp) == (1.0, 1.0, 1.2)
    assert params.flip_angle_rad == pytest.approx(np.pi / 3)


def test_sequence_params_is_immutable_snapshot():
    params = SequenceParams(sequence_type='truefisp')
    assert params.sequence_type is SequenceType.BSSFP
    with pytest.raises(dataclasses.FrozenInstanceError):
        params.tr = 10

    changed = params.replace(tr=10)
    assert changed.tr == 10
    assert params.tr == 150


def test_make_sequence_params():
    params = make_sequence_params('ir', tr=3000, te=5, flip_angle=90, ti=700)
    assert params.sequence_type is SequenceType.INVERSION
    assert isinstance(params.tr, float)
    # TE at or beyond TR is accepted
    assert make_sequence_params(tr=10, te=20).te == 20


@pytest.mark.parametrize('kwargs', [
    {'tr': 0},
    {'tr': -5},
    {'te': -1},
    {'ti': -1},
    {'flip_angle': -1},
    {'flip_angle': 91},
    {'gz_amp': 0},
    {'gy_amp': -1},
    {'gx_amp': 0},
    {'sequence_type': 'radial'},
])
def test_make_sequence_params_rejects(kwargs):
    with pytest.raises(ValueError):
        make_sequence_params(**kwargs)


def test_make_tissue():
    tissue = make_tissue(800, 90, pd=0.8, name='Muscle')
    assert tissue.t2star == 90
    assert tissue.name == 'Muscle'
    for kwargs in ({'t1': 0, 't2': 10}, {'t1': 10, 't2': -1}, {'t1': 10, 't2': 10, 't2star': 0},
                   {'t1': 10, 't2': 10, 'pd': 1.5}):
        with pytest.raises(ValueError):
            make_tissue(**kwargs)


def test_tissue_catalog():
    assert list(TISSUES) == ['WM', 'GM', 'CSF', 'FAT']
    wm = TISSUES['WM']
    assert (wm.t1, wm.t2, wm.t2star, wm.pd) == (600, 80, 60, 0.72)
    assert TISSUES['CSF'].t2 == 2200
    assert get_tissue('csf') is TISSUES['CSF']
    with pytest.raises(KeyError):
        get_tissue('bone')


def test_timing_windows():
    timing = SequenceTiming()
    assert timing.in_rf(5) and timing.in_rf(15) and not timing.in_rf(16)
    assert timing.in_prewind(20) and not timing.in_prewind(36)
    assert timing.in_readout(45) and not timing.in_readout(80)
    assert timing.spoiler_active(90, 'spoiled')
    assert not timing.spoiler_active(89, 'spoiled')
    assert not timing.spoiler_active(95, 'bssfp')


def test_magnetization_state_vector():
    state = MagnetizationState(mz=0.5, mxy=0.8, phase=np.pi / 2)
    np.testing.assert_allclose(state.vector, [0.0, 0.8, 0.5], atol=1e-12)


def test_kspace_coordinate_defaults():
    assert KSpaceCoordinate().as_array().tolist() == [0.0, 0.0]


def test_setup_logging(tmp_path):
    log_file = tmp_path / 'gre.log'
    logger = setup_logging(logging.DEBUG, str(log_file))
    assert logger.name == 'gre'
    assert len(logger.handlers) == 2

    logging.getLogger('gre.signal').debug("probe")
    for handler in logger.handlers:
        handler.flush()
    assert 'gre.signal - DEBUG - probe' in log_file.read_text()

    # Calling again replaces handlers instead of stacking them
    logger = setup_logging(logging.INFO)
    assert len(logger.handlers) == 1
